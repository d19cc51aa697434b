"""
Widget event tracking endpoint

The widget reports interactions (clicks, crashes, mailing-list signups)
here. Each is recorded in the event log as ``widget_<event>``.
"""

from json import JSONDecodeError

from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ..logging_config import get_logger
from ..utils.formatters import format_error_response

logger = get_logger(__name__)


async def track_event(request: Request):
    """
    Record a widget event.

    Request body:
        event (str): Event name without the ``widget_`` prefix
        data (dict): Optional event fields

    Returns:
        200: {"success": true}
        400: Missing event name or malformed body
    """
    try:
        body = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    if not isinstance(body, dict):
        return JSONResponse({"error": "Invalid JSON body"}, status_code=400)

    event = body.get("event")
    if not event or not isinstance(event, str):
        return JSONResponse({"error": "Missing event name"}, status_code=400)

    data = body.get("data")
    payload = data if isinstance(data, dict) else {}

    try:
        await request.app.state.event_log.record(f"widget_{event}", payload)
    except Exception as e:
        logger.exception(f"Failed to track event {event}: {e}")
        return JSONResponse(
            format_error_response(e, {"endpoint": "/api/track", "event": event}),
            status_code=500,
        )

    return JSONResponse({"success": True})


routes = [
    Route("/api/track", track_event, methods=["POST"]),
]
