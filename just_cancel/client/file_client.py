"""
Statement File HTTP Client

Downloads bank statement files uploaded by the user in the assistant. The
assistant hands the tool a short-lived ``download_url``; this client fetches
the bytes and reports whether the content is a PDF.

Features:
- Session management for connection pooling
- Request timeout from configuration
- Non-blocking use from the event loop (requests runs in a worker thread)
- Detailed error reporting via FileFetchError
"""

import asyncio
import time
from dataclasses import dataclass
from urllib.parse import urlparse

import requests
from requests.exceptions import ConnectionError, RequestException, Timeout

from ..config import config
from ..errors import FileFetchError
from ..logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class FetchedFile:
    """Downloaded statement file"""

    url: str
    content: bytes
    content_type: str

    @property
    def is_pdf(self) -> bool:
        """PDF by declared content type or by .pdf path suffix."""
        if "pdf" in self.content_type.lower():
            return True
        return urlparse(self.url).path.lower().endswith(".pdf")


class StatementFileClient:
    """
    HTTP client for statement file downloads.

    Handles:
    - GET requests with timeout
    - Session management
    - Error handling and reporting
    """

    def __init__(self, timeout: int | None = None):
        """
        Initialize file client.

        Args:
            timeout: Request timeout in seconds (defaults to config.FILE_FETCH_TIMEOUT)
        """
        self.timeout = timeout or config.FILE_FETCH_TIMEOUT
        self.session = requests.Session()
        self.session.headers.update({"User-Agent": "JustCancel/1.0"})

    def download(self, url: str) -> FetchedFile:
        """
        Download a file (blocking).

        Args:
            url: Download locator provided by the assistant

        Returns:
            FetchedFile with raw bytes and content type

        Raises:
            FileFetchError: On malformed URLs, connection errors, timeouts or
                non-2xx responses
        """
        start_time = time.time()

        try:
            response = self.session.get(url, timeout=self.timeout)
        except Timeout:
            raise FileFetchError(f"Request timeout after {self.timeout}s", url=url)
        except ConnectionError as e:
            raise FileFetchError(f"Connection error: {e}", url=url)
        except RequestException as e:
            raise FileFetchError(f"Request failed: {e}", url=url)
        except ValueError as e:
            # urllib3 LocationParseError (e.g. empty host labels) escapes requests' hierarchy
            raise FileFetchError(f"Request failed: {e}", url=url)

        if not response.ok:
            raise FileFetchError(
                f"Failed to fetch file: {response.status_code} {response.reason}",
                status_code=response.status_code,
                url=url,
            )

        content_type = response.headers.get("content-type", "")
        logger.debug(
            f"Downloaded {len(response.content)} bytes ({content_type or 'unknown type'}) "
            f"in {time.time() - start_time:.2f}s"
        )

        return FetchedFile(url=url, content=response.content, content_type=content_type)

    async def fetch(self, url: str) -> FetchedFile:
        """Download a file without blocking the event loop."""
        return await asyncio.to_thread(self.download, url)

    def close(self):
        """Close HTTP session."""
        self.session.close()
        logger.info("StatementFileClient session closed")
