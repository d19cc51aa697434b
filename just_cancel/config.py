"""
Just Cancel Server Configuration

Centralized configuration for the MCP server including:
- HTTP listener settings
- Widget asset location and cache-busting version
- Analytics event log and alerting settings
- Shared analytics credential
- Logging configuration
"""

import os
import time
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the working directory (if present)
load_dotenv()

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _default_widget_version() -> str:
    commit = os.getenv("RENDER_GIT_COMMIT", "")
    if commit:
        return commit[:7]
    return str(int(time.time() * 1000))


class JustCancelConfig:
    """Configuration for the Just Cancel MCP server."""

    # ============================================================================
    # HTTP Listener
    # ============================================================================

    HOST: str = os.getenv("HOST", "0.0.0.0")

    PORT: int = int(os.getenv("PORT", "8000"))

    # Path of the SSE stream endpoint and of the message post endpoint
    SSE_PATH: str = "/mcp"
    POST_PATH: str = "/mcp/messages"

    # ============================================================================
    # Widget Assets
    # ============================================================================

    # Directory holding the built widget HTML (just-cancel.html)
    ASSETS_DIR: str = os.getenv("ASSETS_ROOT_DIR", str(PROJECT_ROOT / "assets"))

    # Cache-busting suffix appended to the widget template URI
    WIDGET_VERSION: str = os.getenv("WIDGET_VERSION") or _default_widget_version()

    # ============================================================================
    # Analytics & Alerting
    # ============================================================================

    # Directory for the day-partitioned analytics event log
    ANALYTICS_LOG_DIR: str = os.getenv("ANALYTICS_LOG_DIR", str(PROJECT_ROOT / "logs"))

    # Single shared credential protecting the analytics endpoint
    ANALYTICS_USERNAME: str = os.getenv("ANALYTICS_USERNAME", "admin")
    ANALYTICS_PASSWORD: str = os.getenv("ANALYTICS_PASSWORD", "changeme123")

    # Number of days of events considered when evaluating alerts
    ALERT_WINDOW_DAYS: int = int(os.getenv("ALERT_WINDOW_DAYS", "7"))

    # Interval between background alert evaluations (seconds)
    ALERT_CHECK_INTERVAL_SECONDS: int = int(
        os.getenv("ALERT_CHECK_INTERVAL_SECONDS", "3600")
    )

    # Token served at /.well-known/openai-apps-challenge
    DOMAIN_VERIFICATION_TOKEN: str = os.getenv("OPENAI_DOMAIN_VERIFICATION_TOKEN", "")

    # ============================================================================
    # Statement Files
    # ============================================================================

    # Timeout for downloading uploaded statement files (seconds)
    FILE_FETCH_TIMEOUT: int = int(os.getenv("FILE_FETCH_TIMEOUT", "30"))

    # ============================================================================
    # Logging
    # ============================================================================

    # Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Directory for application log files (console, full and error logs)
    LOG_DIR: str = os.getenv("LOG_DIR", "logs/app")

    # ============================================================================
    # Helper Methods
    # ============================================================================

    @classmethod
    def get_summary(cls) -> dict:
        """Get configuration summary as dict (credentials excluded)."""
        return {
            "host": cls.HOST,
            "port": cls.PORT,
            "sse_path": cls.SSE_PATH,
            "post_path": cls.POST_PATH,
            "assets_dir": cls.ASSETS_DIR,
            "widget_version": cls.WIDGET_VERSION,
            "analytics": {
                "log_dir": cls.ANALYTICS_LOG_DIR,
                "username": cls.ANALYTICS_USERNAME,
                "alert_window_days": cls.ALERT_WINDOW_DAYS,
                "alert_check_interval_seconds": cls.ALERT_CHECK_INTERVAL_SECONDS,
            },
            "file_fetch_timeout": cls.FILE_FETCH_TIMEOUT,
            "log_level": cls.LOG_LEVEL,
            "log_dir": cls.LOG_DIR,
        }

    @classmethod
    def validate(cls) -> tuple[bool, str | None]:
        """
        Validate configuration settings.

        Returns:
            (is_valid, error_message)
        """
        if not 0 < cls.PORT < 65536:
            return False, "PORT must be between 1 and 65535"

        if cls.FILE_FETCH_TIMEOUT <= 0:
            return False, "FILE_FETCH_TIMEOUT must be positive"

        if cls.ALERT_WINDOW_DAYS <= 0:
            return False, "ALERT_WINDOW_DAYS must be positive"

        if cls.ALERT_CHECK_INTERVAL_SECONDS <= 0:
            return False, "ALERT_CHECK_INTERVAL_SECONDS must be positive"

        if not cls.ANALYTICS_USERNAME or not cls.ANALYTICS_PASSWORD:
            return False, "ANALYTICS_USERNAME and ANALYTICS_PASSWORD are required"

        valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if cls.LOG_LEVEL not in valid_log_levels:
            return False, f"LOG_LEVEL must be one of: {valid_log_levels}"

        return True, None


# Singleton instance
config = JustCancelConfig()
