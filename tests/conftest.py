# tests/conftest.py
"""
Pytest configuration for Just Cancel tests.

Application and analytics logs go to a temporary directory. LOG_DIR must be
set before any just_cancel module is imported because loggers are created
at import time.
"""

import os
import tempfile

_LOG_ROOT = tempfile.mkdtemp(prefix="just-cancel-tests-")
os.environ["LOG_DIR"] = os.path.join(_LOG_ROOT, "app")
os.environ["ANALYTICS_LOG_DIR"] = os.path.join(_LOG_ROOT, "analytics")

import pytest  # noqa: E402
import responses  # noqa: E402

from just_cancel.analytics.event_log import EventLog  # noqa: E402
from just_cancel.catalog import Catalog  # noqa: E402
from just_cancel.client.file_client import StatementFileClient  # noqa: E402
from just_cancel.dispatcher import ProtocolDispatcher  # noqa: E402
from just_cancel.errors import ExtractionError  # noqa: E402

WIDGET_HTML = "<!doctype html><html><body><div id='just-cancel-root'></div></body></html>"


class FakeExtractor:
    """Extractor returning canned text (or failing) without touching a PDF library."""

    def __init__(self, text: str = "", error: str | None = None):
        self.text = text
        self.error = error
        self.calls: list[bytes] = []

    async def extract_text(self, data: bytes) -> str:
        self.calls.append(data)
        if self.error:
            raise ExtractionError(self.error)
        return self.text


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def assets_dir(tmp_path):
    path = tmp_path / "assets"
    path.mkdir()
    (path / "just-cancel.html").write_text(WIDGET_HTML, encoding="utf-8")
    return path


@pytest.fixture
def catalog(assets_dir):
    return Catalog.from_assets(assets_dir, "test123")


@pytest.fixture
def event_log(tmp_path):
    return EventLog(tmp_path / "events")


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def file_client():
    client = StatementFileClient(timeout=5)
    yield client
    client.close()


@pytest.fixture
def dispatcher(catalog, event_log, file_client, extractor):
    return ProtocolDispatcher(catalog, event_log, file_client, extractor)


@pytest.fixture
def mocked_responses():
    with responses.RequestsMock() as rsps:
        yield rsps
