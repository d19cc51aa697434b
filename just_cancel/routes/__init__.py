"""Routes package for HTTP endpoints."""

from .analytics import routes as analytics_routes
from .extract_pdf import routes as extract_pdf_routes
from .health import routes as health_routes
from .track import routes as track_routes

__all__ = [
    "analytics_routes",
    "extract_pdf_routes",
    "health_routes",
    "track_routes",
]
