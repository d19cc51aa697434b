"""
Health, heartbeat and domain verification endpoints

Minimal responses with no internal state exposed.
"""

from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse
from starlette.routing import Route

from ..analytics.events import format_timestamp, utc_now


async def health_check(request: Request):
    """Liveness check for the hosting platform."""
    return PlainTextResponse("OK")


async def heartbeat(request: Request):
    """Widget keep-alive ping."""
    return JSONResponse({"status": "alive", "timestamp": format_timestamp(utc_now())})


async def domain_verification(request: Request):
    """Serve the domain verification token issued by the app directory."""
    token = request.app.state.config.DOMAIN_VERIFICATION_TOKEN
    if not token:
        return PlainTextResponse("Not configured", status_code=404)
    return PlainTextResponse(token)


routes = [
    Route("/health", health_check, methods=["GET"]),
    Route("/api/heartbeat", heartbeat, methods=["GET"]),
    Route("/.well-known/openai-apps-challenge", domain_verification, methods=["GET"]),
]
