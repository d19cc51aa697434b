"""
Tool/Resource Catalog

Static descriptors for the ``just-cancel`` tool and its widget resource.

The widget HTML is read once from the assets directory at startup; the
template URI carries a version suffix so clients refetch it after each
deploy. Everything returned from here is plain JSON-compatible data: the
MCP server wiring converts it to protocol types.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .detection.classifier import SubscriptionStatus
from .logging_config import get_logger

logger = get_logger(__name__)

WIDGET_ID = "just-cancel"
WIDGET_MIME_TYPE = "text/html+skybridge"

VIEW_FILTERS = ["all", "cancelling", "keeping", "investigating"]

WIDGET_DESCRIPTION = (
    "A subscription management tool that helps you analyze your subscriptions and "
    "discover which ones to cancel to save money. Call this tool immediately with NO "
    "arguments to let the user enter their subscription details manually. Only provide "
    "arguments if the user has explicitly stated them."
)

TOOL_DESCRIPTION = (
    "Use this tool to analyze subscriptions and discover which ones to cancel to save "
    "money. Helps users identify underutilized or wasteful subscriptions. If the user "
    "uploads a bank statement PDF or CSV, use the bank_statement parameter. Call this "
    "tool immediately with NO arguments to let the user enter their subscription details "
    "manually. Only provide arguments if the user has explicitly stated them."
)

KEYWORDS = [
    "subscriptions",
    "cancel",
    "money saving",
    "budget",
    "streaming",
    "software",
    "cost reduction",
    "subscription management",
    "monthly expenses",
    "financial planning",
    "saving money",
]

SAMPLE_CONVERSATIONS = [
    {
        "user": "Which subscriptions should I cancel?",
        "assistant": "Here is Just Cancel. Enter your subscription details to analyze which ones you should cancel to save money.",
    },
    {
        "user": "I want to reduce my monthly subscription costs",
        "assistant": "I'll analyze your subscriptions and show you which ones to cancel for maximum savings.",
    },
    {
        "user": "Help me save money on streaming services",
        "assistant": "I've loaded Just Cancel to help you identify streaming subscriptions you can cancel.",
    },
]

STARTER_PROMPTS = [
    "Which subscriptions should I cancel?",
    "Help me save money on subscriptions",
    "Analyze my monthly subscription costs",
    "What subscriptions am I wasting money on?",
    "Reduce my streaming service costs",
    "Show me subscriptions I rarely use",
    "Help me cut my monthly expenses",
]

WIDGET_CSP = {
    "connect_domains": [
        "https://just-cancel-it.onrender.com",
        "https://cdnjs.cloudflare.com",
    ],
    "resource_domains": [
        "https://just-cancel-it.onrender.com",
        "https://cdnjs.cloudflare.com",
    ],
}

# ============================================================================
# Schemas
# ============================================================================

TOOL_INPUT_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "subscriptions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "service": {"type": "string"},
                    "monthly_cost": {"type": "number"},
                    "category": {"type": "string"},
                },
                "required": ["service", "monthly_cost"],
            },
            "description": "Manually entered subscriptions if known.",
        },
        "total_monthly_spend": {
            "type": "number",
            "description": "Total monthly subscription spending if known.",
        },
        "view_filter": {
            "type": "string",
            "enum": VIEW_FILTERS,
            "description": "Which subscriptions to show.",
        },
        "statement_text": {
            "type": "string",
            "description": "The raw text of a bank statement or list of transactions to analyze for subscriptions.",
        },
        "bank_statement": {
            "type": "object",
            "properties": {
                "download_url": {"type": "string", "description": "URL to download the file from"},
                "file_id": {"type": "string", "description": "Uploaded file ID"},
            },
            "required": ["download_url", "file_id"],
            "additionalProperties": False,
            "description": "Bank statement file (PDF or CSV) uploaded by the user.",
        },
    },
    "required": [],
    "additionalProperties": False,
}

_NULLABLE_NUMBER = {"type": ["number", "null"]}

TOOL_OUTPUT_SCHEMA = {
    "type": "object",
    "properties": {
        "ready": {"type": "boolean"},
        "timestamp": {"type": "string"},
        "subscriptions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "service": {"type": "string"},
                    "monthly_cost": {"type": "number"},
                    "status": {"type": "string", "enum": [s.value for s in SubscriptionStatus]},
                    "notes": {"type": "string"},
                    "cancel_link": {"type": "string"},
                    "category": {"type": "string"},
                    "count": {"type": "integer"},
                },
            },
        },
        "total_monthly_spend": _NULLABLE_NUMBER,
        "view_filter": {"type": ["string", "null"]},
        "input_source": {"type": "string", "enum": ["default", "file_upload", "user"]},
        "file_parsing_error": {"type": ["string", "null"]},
        "summary": {
            "type": "object",
            "properties": {
                "monthly_savings": _NULLABLE_NUMBER,
                "yearly_savings": _NULLABLE_NUMBER,
                "total_yearly_spending": _NULLABLE_NUMBER,
                "cancelling_count": _NULLABLE_NUMBER,
                "investigating_count": _NULLABLE_NUMBER,
                "keeping_count": _NULLABLE_NUMBER,
                "total_count": _NULLABLE_NUMBER,
                "monthly_spend": _NULLABLE_NUMBER,
                "yearly_spend": _NULLABLE_NUMBER,
                "analysis_type": {"type": "string"},
            },
        },
        "suggested_followups": {"type": "array", "items": {"type": "string"}},
    },
}

TOOL_ANNOTATIONS = {
    "readOnlyHint": True,
    "destructiveHint": False,
    "idempotentHint": True,
    "openWorldHint": False,
}

SECURITY_SCHEMES = [{"type": "noauth"}]


# ============================================================================
# Widget
# ============================================================================


@dataclass(frozen=True)
class Widget:
    """Renderable widget resource backing a tool"""

    id: str
    title: str
    template_uri: str
    invoking: str
    invoked: str
    html: str = field(repr=False)


def widget_meta(widget: Widget) -> dict:
    """Presentation metadata attached to the tool, its resource and each call result."""
    return {
        "openai/outputTemplate": widget.template_uri,
        "openai/toolInvocation/invoking": widget.invoking,
        "openai/toolInvocation/invoked": widget.invoked,
        "openai/widgetDescription": WIDGET_DESCRIPTION,
        "openai/componentDescriptions": {
            "subscription-form": "Input form for subscription details including monthly spend and usage patterns.",
            "analysis-display": "Display showing subscription analysis and cancellation recommendations.",
            "savings-tracker": "Progress tracker showing potential monthly savings.",
        },
        "openai/widgetKeywords": list(KEYWORDS),
        "openai/sampleConversations": [dict(pair) for pair in SAMPLE_CONVERSATIONS],
        "openai/starterPrompts": list(STARTER_PROMPTS),
        "openai/widgetAccessible": True,
        "openai/resultCanProduceWidget": True,
        "openai/widgetCSP": {key: list(domains) for key, domains in WIDGET_CSP.items()},
    }


def read_widget_html(assets_dir: str | os.PathLike, component_name: str = WIDGET_ID) -> str:
    """
    Load a widget's built HTML.

    Looks for ``<component>.html`` first, then falls back to the latest
    hashed build ``<component>-*.html``.

    Raises:
        FileNotFoundError: If the assets directory or the HTML is missing
    """
    assets_path = Path(assets_dir)
    if not assets_path.is_dir():
        raise FileNotFoundError(
            f"Widget assets not found. Expected directory {assets_path}. "
            "Build the widget before starting the server."
        )

    direct_path = assets_path / f"{component_name}.html"
    if direct_path.exists():
        loaded_from = direct_path
    else:
        candidates = sorted(assets_path.glob(f"{component_name}-*.html"))
        if not candidates:
            raise FileNotFoundError(
                f'Widget HTML for "{component_name}" not found in {assets_path}'
            )
        loaded_from = candidates[-1]

    html = loaded_from.read_text(encoding="utf-8")
    logger.info(f"Loaded widget HTML from {loaded_from} ({len(html)} bytes)")
    return html


class Catalog:
    """Static tool and resource descriptors, keyed by tool name and resource URI."""

    def __init__(self, widgets: list[Widget]):
        self.widgets = list(widgets)
        self._by_id = {widget.id: widget for widget in self.widgets}
        self._by_uri = {widget.template_uri: widget for widget in self.widgets}

    @classmethod
    def from_assets(cls, assets_dir: str | os.PathLike, version: str) -> "Catalog":
        widget = Widget(
            id=WIDGET_ID,
            title="Just Cancel - Discover which subscriptions you should cancel to save money",
            template_uri=f"ui://widget/{WIDGET_ID}.html?v={version}",
            invoking="Opening Just Cancel...",
            invoked=(
                "Here is Just Cancel. Analyze your subscriptions to discover which ones "
                "you should cancel to save money."
            ),
            html=read_widget_html(assets_dir),
        )
        return cls([widget])

    def widget_for_tool(self, name: str) -> Widget | None:
        return self._by_id.get(name)

    def widget_for_uri(self, uri: str) -> Widget | None:
        return self._by_uri.get(uri)

    # ============================================================================
    # Descriptors
    # ============================================================================

    def tools(self) -> list[dict]:
        return [
            {
                "name": widget.id,
                "title": widget.title,
                "description": TOOL_DESCRIPTION,
                "inputSchema": TOOL_INPUT_SCHEMA,
                "outputSchema": TOOL_OUTPUT_SCHEMA,
                "annotations": dict(TOOL_ANNOTATIONS),
                "securitySchemes": SECURITY_SCHEMES,
                "_meta": {
                    **widget_meta(widget),
                    "openai/visibility": "public",
                    "openai/fileParams": ["bank_statement"],
                    "securitySchemes": SECURITY_SCHEMES,
                },
            }
            for widget in self.widgets
        ]

    def resources(self) -> list[dict]:
        return [
            {
                "uri": widget.template_uri,
                "name": widget.title,
                "description": (
                    "HTML template for the Just Cancel widget that helps analyze "
                    "subscriptions and identify which ones to cancel for savings."
                ),
                "mimeType": WIDGET_MIME_TYPE,
                "_meta": widget_meta(widget),
            }
            for widget in self.widgets
        ]

    def resource_templates(self) -> list[dict]:
        return [
            {
                "uriTemplate": widget.template_uri,
                "name": widget.title,
                "description": "Template descriptor for the Just Cancel widget.",
                "mimeType": WIDGET_MIME_TYPE,
                "_meta": widget_meta(widget),
            }
            for widget in self.widgets
        ]

    def resource_contents(self, widget: Widget) -> dict:
        """Widget HTML and metadata, returned verbatim."""
        return {
            "uri": widget.template_uri,
            "mimeType": WIDGET_MIME_TYPE,
            "text": widget.html,
            "_meta": widget_meta(widget),
        }

    def embedded_resource(self, widget: Widget) -> dict:
        return {
            "type": "resource",
            "resource": {
                "uri": widget.template_uri,
                "mimeType": WIDGET_MIME_TYPE,
                "text": widget.html,
                "title": widget.title,
            },
        }
