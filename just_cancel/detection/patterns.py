"""
Subscription Pattern Registry

Immutable table of merchant detection rules used by the classifier.

Each pattern maps a service name to:
- regex: matched against a lower-cased statement line
- category: display category for the widget
- default_cost: monthly cost assumed when the line carries no price
  (only set for a handful of well-known services)
- logo: domain used by the widget to render a logo
- cancel_url: where the user goes to cancel

Patterns are process-lifetime constants; nothing mutates the registry after
import.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType


@dataclass(frozen=True)
class SubscriptionPattern:
    """Rule recognizing one subscription service in statement text"""

    name: str
    regex: re.Pattern
    category: str
    logo: str
    default_cost: float = 0.0  # 0 = unknown, never guessed
    cancel_url: str | None = None

    def matches(self, normalized_line: str) -> bool:
        """Test a lower-cased line against this pattern."""
        return self.regex.search(normalized_line) is not None


def _pattern(
    name: str,
    regex: str,
    category: str,
    logo: str,
    default_cost: float = 0.0,
    cancel_url: str | None = None,
) -> SubscriptionPattern:
    return SubscriptionPattern(
        name=name,
        regex=re.compile(regex),
        category=category,
        logo=logo,
        default_cost=default_cost,
        cancel_url=cancel_url,
    )


# ============================================================================
# Streaming (video)
# ============================================================================

_STREAMING = [
    _pattern(
        "Netflix",
        r"netflix",
        "Streaming",
        "netflix.com",
        default_cost=15.49,
        cancel_url="https://www.netflix.com/cancelplan",
    ),
    _pattern(
        "Disney+",
        r"disney\s*(\+|plus)",
        "Streaming",
        "disneyplus.com",
        cancel_url="https://www.disneyplus.com/account/subscription",
    ),
    _pattern(
        "Hulu",
        r"\bhulu\b",
        "Streaming",
        "hulu.com",
        cancel_url="https://secure.hulu.com/account/cancel",
    ),
    _pattern(
        "HBO Max",
        r"hbo\s*max|\bmax\.com\b",
        "Streaming",
        "max.com",
        cancel_url="https://www.max.com/account",
    ),
    _pattern(
        "Amazon Prime",
        r"amazon\s*prime|prime\s*video|amzn\s*prime",
        "Shopping",
        "amazon.com",
        cancel_url="https://www.amazon.com/mc/pipelines/cancellation",
    ),
    _pattern(
        "Apple TV+",
        r"apple\s*tv",
        "Streaming",
        "tv.apple.com",
        cancel_url="https://support.apple.com/en-us/118428",
    ),
    _pattern(
        "Paramount+",
        r"paramount\s*(\+|plus)",
        "Streaming",
        "paramountplus.com",
        cancel_url="https://www.paramountplus.com/account/",
    ),
    _pattern(
        "Peacock",
        r"peacock",
        "Streaming",
        "peacocktv.com",
        cancel_url="https://www.peacocktv.com/account/plans",
    ),
    _pattern(
        "YouTube Premium",
        r"youtube\s*(premium|music)|google\s*\*?\s*youtube",
        "Streaming",
        "youtube.com",
        cancel_url="https://www.youtube.com/paid_memberships",
    ),
    _pattern(
        "Crunchyroll",
        r"crunchyroll",
        "Streaming",
        "crunchyroll.com",
        cancel_url="https://www.crunchyroll.com/account/membership",
    ),
]

# ============================================================================
# Music & Audio
# ============================================================================

_MUSIC = [
    _pattern(
        "Spotify",
        r"spotify",
        "Music",
        "spotify.com",
        default_cost=11.99,
        cancel_url="https://www.spotify.com/account/subscription/",
    ),
    _pattern(
        "Apple Music",
        r"apple\s*music",
        "Music",
        "music.apple.com",
        cancel_url="https://support.apple.com/en-us/118428",
    ),
    _pattern(
        "Audible",
        r"audible",
        "Books",
        "audible.com",
        cancel_url="https://www.audible.com/account/overview",
    ),
    _pattern(
        "SiriusXM",
        r"sirius\s*xm|siriusxm",
        "Music",
        "siriusxm.com",
        cancel_url="https://care.siriusxm.com/",
    ),
]

# ============================================================================
# Software & AI
# ============================================================================

_SOFTWARE = [
    _pattern(
        "ChatGPT",
        r"chatgpt|openai",
        "AI Tools",
        "openai.com",
        default_cost=20.00,
        cancel_url="https://chatgpt.com/#settings/Subscription",
    ),
    _pattern(
        "Claude",
        r"claude\.ai|anthropic",
        "AI Tools",
        "claude.ai",
        cancel_url="https://claude.ai/settings/billing",
    ),
    _pattern(
        "Microsoft 365",
        r"microsoft\s*365|office\s*365|msft\s*\*?\s*365",
        "Software",
        "microsoft.com",
        cancel_url="https://account.microsoft.com/services",
    ),
    _pattern(
        "Adobe",
        r"adobe",
        "Software",
        "adobe.com",
        cancel_url="https://account.adobe.com/plans",
    ),
    _pattern(
        "Dropbox",
        r"dropbox",
        "Cloud Storage",
        "dropbox.com",
        cancel_url="https://www.dropbox.com/account/plan",
    ),
    _pattern(
        "iCloud",
        r"icloud",
        "Cloud Storage",
        "icloud.com",
        cancel_url="https://support.apple.com/en-us/118428",
    ),
    _pattern(
        "Google One",
        r"google\s*(one|storage)",
        "Cloud Storage",
        "one.google.com",
        cancel_url="https://one.google.com/settings",
    ),
    _pattern(
        "GitHub",
        r"github",
        "Software",
        "github.com",
        cancel_url="https://github.com/settings/billing",
    ),
    _pattern(
        "Notion",
        r"notion\.so|\bnotion\b",
        "Software",
        "notion.so",
        cancel_url="https://www.notion.so/my-account",
    ),
    _pattern(
        "Canva",
        r"canva",
        "Software",
        "canva.com",
        cancel_url="https://www.canva.com/settings/billing-and-plans",
    ),
    _pattern(
        "Grammarly",
        r"grammarly",
        "Software",
        "grammarly.com",
        cancel_url="https://account.grammarly.com/subscription",
    ),
    _pattern(
        "NordVPN",
        r"nordvpn|nord\s*vpn",
        "Software",
        "nordvpn.com",
        cancel_url="https://my.nordaccount.com/dashboard/nordvpn/",
    ),
    _pattern(
        "ExpressVPN",
        r"expressvpn|express\s*vpn",
        "Software",
        "expressvpn.com",
        cancel_url="https://www.expressvpn.com/subscriptions",
    ),
    _pattern(
        "LinkedIn Premium",
        r"linkedin",
        "Professional",
        "linkedin.com",
        cancel_url="https://www.linkedin.com/premium/manage/",
    ),
]

# ============================================================================
# Gaming
# ============================================================================

_GAMING = [
    _pattern(
        "Xbox Game Pass",
        r"xbox|game\s*pass",
        "Gaming",
        "xbox.com",
        cancel_url="https://account.microsoft.com/services",
    ),
    _pattern(
        "PlayStation Plus",
        r"playstation|\bpsn\b|sony\s*interactive",
        "Gaming",
        "playstation.com",
        cancel_url="https://www.playstation.com/en-us/support/subscriptions/",
    ),
    _pattern(
        "Nintendo Switch Online",
        r"nintendo",
        "Gaming",
        "nintendo.com",
        cancel_url="https://accounts.nintendo.com/shop/subscription",
    ),
]

# ============================================================================
# Health, Fitness & Lifestyle
# ============================================================================

_LIFESTYLE = [
    _pattern(
        "Peloton",
        r"peloton",
        "Fitness",
        "onepeloton.com",
        cancel_url="https://members.onepeloton.com/preferences/subscriptions",
    ),
    _pattern(
        "Planet Fitness",
        r"planet\s*fitness|pf\s*black\s*card",
        "Fitness",
        "planetfitness.com",
    ),
    _pattern(
        "Headspace",
        r"headspace",
        "Wellness",
        "headspace.com",
        cancel_url="https://www.headspace.com/subscriptions",
    ),
    _pattern(
        "Calm",
        r"\bcalm\.com\b|\bcalm\s+(app|premium|subscription)",
        "Wellness",
        "calm.com",
        cancel_url="https://www.calm.com/account",
    ),
    _pattern(
        "Duolingo",
        r"duolingo",
        "Education",
        "duolingo.com",
        cancel_url="https://www.duolingo.com/settings/subscription",
    ),
    _pattern(
        "HelloFresh",
        r"hello\s*fresh",
        "Food",
        "hellofresh.com",
        cancel_url="https://www.hellofresh.com/account-settings/plan-settings",
    ),
    _pattern(
        "DoorDash DashPass",
        r"dashpass|doordash",
        "Food",
        "doordash.com",
        cancel_url="https://www.doordash.com/dashpass/manage",
    ),
    _pattern(
        "Uber One",
        r"uber\s*one",
        "Food",
        "uber.com",
        cancel_url="https://account.uber.com/",
    ),
    _pattern(
        "Tinder",
        r"tinder",
        "Dating",
        "tinder.com",
        cancel_url="https://help.tinder.com/",
    ),
    _pattern(
        "Patreon",
        r"patreon",
        "Creators",
        "patreon.com",
        cancel_url="https://www.patreon.com/settings/memberships",
    ),
]

# ============================================================================
# News
# ============================================================================

_NEWS = [
    _pattern(
        "New York Times",
        r"ny\s*times|nytimes|new\s*york\s*times",
        "News",
        "nytimes.com",
        cancel_url="https://myaccount.nytimes.com/seg/subscription",
    ),
    _pattern(
        "Wall Street Journal",
        r"wsj|wall\s*street\s*journal|dow\s*jones",
        "News",
        "wsj.com",
        cancel_url="https://customercenter.wsj.com/",
    ),
    _pattern(
        "Medium",
        r"medium\.com|medium\s+member",
        "News",
        "medium.com",
        cancel_url="https://medium.com/me/settings/membership",
    ),
    _pattern(
        "Substack",
        r"substack",
        "News",
        "substack.com",
        cancel_url="https://substack.com/account",
    ),
]


def _build_registry(*groups: list[SubscriptionPattern]) -> MappingProxyType:
    registry: dict[str, SubscriptionPattern] = {}
    for group in groups:
        for pattern in group:
            if pattern.name in registry:
                raise ValueError(f"Duplicate subscription pattern: {pattern.name}")
            registry[pattern.name] = pattern
    return MappingProxyType(registry)


# Read-only view keyed by service name, in registration order
SUBSCRIPTION_PATTERNS = _build_registry(
    _STREAMING, _MUSIC, _SOFTWARE, _GAMING, _LIFESTYLE, _NEWS
)


def get_pattern(name: str) -> SubscriptionPattern | None:
    """Look up a pattern by service name (case-insensitive)."""
    lowered = name.lower()
    for pattern in SUBSCRIPTION_PATTERNS.values():
        if pattern.name.lower() == lowered:
            return pattern
    return None
