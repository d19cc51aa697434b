"""
Analytics endpoint

Returns active alerts and per-event counts over the configured window.
Protected by a single shared HTTP Basic credential.
"""

import base64
import binascii
import secrets

from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from ..analytics.alerts import count_events, evaluate_alerts
from ..analytics.events import format_timestamp, utc_now
from ..logging_config import get_logger
from ..utils.formatters import format_error_response

logger = get_logger(__name__)

AUTH_CHALLENGE = {"WWW-Authenticate": 'Basic realm="Analytics Dashboard"'}


def parse_basic_auth(header: str | None) -> tuple[str, str] | None:
    """
    Decode an ``Authorization: Basic ...`` header.

    Returns:
        (username, password) or None if the header is missing or malformed
    """
    if not header:
        return None

    scheme, _, encoded = header.partition(" ")
    if scheme.lower() != "basic" or not encoded:
        return None

    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def check_credentials(header: str | None, username: str, password: str) -> bool:
    credentials = parse_basic_auth(header)
    if credentials is None:
        return False

    user_ok = secrets.compare_digest(credentials[0].encode(), username.encode())
    password_ok = secrets.compare_digest(credentials[1].encode(), password.encode())
    return user_ok and password_ok


async def analytics_summary(request: Request):
    """
    Alerts and event counts for the analytics window.

    Returns:
        200: {"alerts": [...], "event_counts": {...}, "total_events": n, ...}
        401: Missing or invalid credentials
    """
    config = request.app.state.config
    if not check_credentials(
        request.headers.get("authorization"),
        config.ANALYTICS_USERNAME,
        config.ANALYTICS_PASSWORD,
    ):
        return Response("Authentication required", status_code=401, headers=AUTH_CHALLENGE)

    try:
        now = utc_now()
        entries = await request.app.state.event_log.read_recent(
            days=config.ALERT_WINDOW_DAYS, now=now
        )
        alerts = evaluate_alerts(entries, now=now)

        return JSONResponse(
            {
                "generated_at": format_timestamp(now),
                "window_days": config.ALERT_WINDOW_DAYS,
                "total_events": len(entries),
                "alerts": [alert.to_dict() for alert in alerts],
                "event_counts": count_events(entries),
                "recent_events": [entry.to_dict() for entry in entries[:50]],
            }
        )
    except Exception as e:
        logger.exception(f"Analytics summary failed: {e}")
        return JSONResponse(
            format_error_response(e, {"endpoint": "/analytics"}), status_code=500
        )


routes = [
    Route("/analytics", analytics_summary, methods=["GET"]),
]
