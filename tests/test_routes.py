"""HTTP route tests using Starlette's TestClient.

Tests the non-MCP endpoints and the message post endpoint including:
- Health, heartbeat and domain verification
- Analytics Basic auth and alert output
- Widget event tracking
- PDF extraction
- Message post validation (400/404/202)
"""

import base64
import json

import anyio
import pytest
from starlette.testclient import TestClient

from just_cancel.config import JustCancelConfig
from just_cancel.server import check_alerts, create_app

INITIALIZE = {
    "jsonrpc": "2.0",
    "id": 1,
    "method": "initialize",
    "params": {
        "protocolVersion": "2025-03-26",
        "capabilities": {},
        "clientInfo": {"name": "test-client", "version": "1.0"},
    },
}


@pytest.fixture
def app_config(tmp_path):
    class TestConfig(JustCancelConfig):
        ANALYTICS_LOG_DIR = str(tmp_path / "events")
        ANALYTICS_USERNAME = "admin"
        ANALYTICS_PASSWORD = "s3cret"
        DOMAIN_VERIFICATION_TOKEN = "token-abc"

    return TestConfig


@pytest.fixture
def app(app_config, catalog, extractor):
    extractor.text = "NETFLIX 15.49"
    return create_app(app_config, catalog=catalog, extractor=extractor)


@pytest.fixture
def client(app):
    return TestClient(app)


def basic_auth(username: str, password: str) -> dict:
    token = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {token}"}


# ============================================================================
# Health
# ============================================================================


def test_health(client):
    """Test plain-text health check."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "OK"


def test_heartbeat(client):
    """Test heartbeat payload."""
    data = client.get("/api/heartbeat").json()
    assert data["status"] == "alive"
    assert data["timestamp"].endswith("Z")


def test_domain_verification(client):
    """Test token served from config."""
    response = client.get("/.well-known/openai-apps-challenge")
    assert response.text == "token-abc"


def test_cors_preflight(client):
    """Test CORS headers on preflight."""
    response = client.options(
        "/api/track",
        headers={
            "Origin": "https://chat.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


# ============================================================================
# Analytics
# ============================================================================


def test_analytics_requires_credentials(client):
    """Test 401 with a Basic challenge when no credentials are sent."""
    response = client.get("/analytics")

    assert response.status_code == 401
    assert response.headers["www-authenticate"] == 'Basic realm="Analytics Dashboard"'


@pytest.mark.parametrize(
    "headers",
    [
        basic_auth("admin", "wrong"),
        basic_auth("root", "s3cret"),
        {"Authorization": "Basic !!!not-base64"},
        {"Authorization": "Bearer s3cret"},
    ],
)
def test_analytics_rejects_bad_credentials(client, headers):
    """Test 401 for wrong or malformed credentials."""
    response = client.get("/analytics", headers=headers)

    assert response.status_code == 401
    assert "www-authenticate" in response.headers


def test_analytics_reports_alerts_and_counts(client):
    """Test that tracked crashes show up as an alert."""
    client.post("/api/track", json={"event": "crash", "data": {"message": "boom"}})
    client.post("/api/track", json={"event": "carousel_next"})

    response = client.get("/analytics", headers=basic_auth("admin", "s3cret"))

    assert response.status_code == 200
    data = response.json()
    assert data["total_events"] == 2
    assert data["event_counts"] == {"widget_crash": 1, "widget_carousel_next": 1}
    assert [alert["id"] for alert in data["alerts"]] == ["widget-crash"]
    assert data["alerts"][0]["level"] == "critical"


# ============================================================================
# Tracking & Extraction
# ============================================================================


def test_track_requires_event(client):
    """Test 400 for a missing event name."""
    response = client.post("/api/track", json={"data": {}})
    assert response.status_code == 400


@pytest.mark.parametrize("path", ["/api/track", "/api/extract-pdf"])
@pytest.mark.parametrize("body", [b"not json", b'{"event": "\xff\xfe"}', b"\xff\xfe"])
def test_json_routes_reject_undecodable_bodies(client, path, body):
    """Test 400 for bodies that are not JSON or not UTF-8."""
    response = client.post(path, content=body, headers={"content-type": "application/json"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid JSON body"}


def test_extract_pdf(client, extractor):
    """Test base64 PDF extraction."""
    payload = base64.b64encode(b"%PDF-1.4 test").decode()

    response = client.post("/api/extract-pdf", json={"base64": payload})

    assert response.status_code == 200
    assert response.json() == {"text": "NETFLIX 15.49"}
    assert extractor.calls == [b"%PDF-1.4 test"]


def test_extract_pdf_failure(client, extractor):
    """Test 500 with an error message when extraction fails."""
    extractor.error = "PDF extraction failed: bad xref"

    response = client.post("/api/extract-pdf", json={"base64": base64.b64encode(b"x").decode()})

    assert response.status_code == 500
    assert response.json() == {"error": "PDF extraction failed: bad xref"}


def test_extract_pdf_requires_payload(client):
    """Test 400 when base64 is missing."""
    assert client.post("/api/extract-pdf", json={}).status_code == 400


# ============================================================================
# MCP Message Post
# ============================================================================


def test_post_without_session_id(client):
    """Test 400 when sessionId is missing."""
    response = client.post("/mcp/messages", json=INITIALIZE)
    assert response.status_code == 400


def test_post_with_unknown_session(client):
    """Test 404 for a session that was never opened."""
    response = client.post("/mcp/messages?sessionId=deadbeef", json=INITIALIZE)
    assert response.status_code == 404


def test_post_forwards_message_to_session(app, client):
    """Test that a valid message is accepted and queued for the session."""
    send_stream, receive_stream = anyio.create_memory_object_stream(1)
    session_id = app.state.sessions.open(send_stream)

    response = client.post(f"/mcp/messages?sessionId={session_id}", json=INITIALIZE)

    assert response.status_code == 202
    forwarded = receive_stream.receive_nowait()
    assert forwarded.message.root.method == "initialize"


def test_post_unparseable_message(app, client):
    """Test 400 for a body that is not JSON-RPC."""
    send_stream, receive_stream = anyio.create_memory_object_stream(1)
    session_id = app.state.sessions.open(send_stream)

    response = client.post(
        f"/mcp/messages?sessionId={session_id}",
        content=json.dumps({"hello": "world"}),
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    assert isinstance(receive_stream.receive_nowait(), Exception)


def test_post_to_disconnected_stream_closes_session(app, client):
    """Test that a broken session stream is removed and reported as unknown."""
    send_stream, receive_stream = anyio.create_memory_object_stream(1)
    session_id = app.state.sessions.open(send_stream)
    receive_stream.close()

    response = client.post(f"/mcp/messages?sessionId={session_id}", json=INITIALIZE)

    assert response.status_code == 404
    assert not app.state.sessions.is_open(session_id)


# ============================================================================
# Lifespan
# ============================================================================


def test_lifespan_starts_and_stops(app):
    """Test a clean startup and shutdown with the alert monitor running."""
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200


@pytest.mark.anyio
async def test_check_alerts_counts_active_alerts(event_log):
    """Test one pass of the background alert monitor."""
    for _ in range(6):
        await event_log.record("tool_call_error", {"error": "boom"})
    await event_log.record("widget_crash", {})

    assert await check_alerts(event_log, window_days=7) == 2
