"""HTTP and websocket scenarios against the FastAPI app."""

from dataclasses import replace

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketDisconnect

from conftest import API_KEY, JPEG, PASSWORD, FakeClock
from controllers.auth_controller import COOKIE_NAME
from main import create_app
from services.auth.session_store import SessionStore
from services.ingestion_coordinator import IngestionCoordinator


@pytest.fixture
def client(settings, coordinator):
    app = create_app(settings=settings, coordinator=coordinator)
    with TestClient(app) as test_client:
        yield test_client


def login(client, password=PASSWORD):
    return client.post("/login", json={"password": password})


def upload(client, body=JPEG, **headers):
    headers.setdefault("X-API-Key", API_KEY)
    return client.post("/imageUpdate", content=body, headers=headers)


class TestLogin:
    """Password login and session cookie"""

    def test_login_sets_cookie(self, client):
        response = login(client)
        assert response.status_code == 200
        assert response.json() == {"success": True}
        assert COOKIE_NAME in response.cookies
        assert "httponly" in response.headers["set-cookie"].lower()

    def test_wrong_password(self, client):
        response = login(client, "nope")
        assert response.status_code == 401
        assert COOKIE_NAME not in response.cookies

    def test_malformed_body(self, client):
        response = client.post("/login", content=b"not json")
        assert response.status_code == 400

    def test_login_rate_limited(self, client):
        for _ in range(3):
            assert login(client, "nope").status_code == 401
        assert login(client).status_code == 429

    def test_protected_read_then_expiry(self, client, coordinator):
        clock = FakeClock(0.0)
        coordinator.sessions = SessionStore(ttl_seconds=3600, clock=clock)
        login(client)
        upload(client)

        assert client.get("/labels").status_code == 200
        clock.advance(3601)
        assert client.get("/labels").status_code == 401
        root = client.get("/", follow_redirects=False)
        assert root.status_code == 302
        assert root.headers["location"] == "/login"

    def test_logout_revokes_session(self, client):
        token = login(client).cookies[COOKIE_NAME]
        assert client.get("/session").json() == {"authenticated": True}
        client.post("/logout")
        client.cookies.clear()
        replayed = client.get("/gallery", headers={"Cookie": f"{COOKIE_NAME}={token}"})
        assert replayed.status_code == 401

    def test_pages(self, client):
        assert client.get("/login").text == "<html>login</html>"
        assert client.get("/", follow_redirects=False).status_code == 302
        login(client)
        assert client.get("/").text == "<html>viewer</html>"


class TestUpload:
    """Camera ingestion endpoint"""

    def test_two_uploads_same_window(self, client):
        first = upload(client)
        second = upload(client)
        assert first.status_code == 200
        assert second.status_code == 429

    def test_bad_api_key(self, client):
        assert upload(client, **{"X-API-Key": "wrong"}).status_code == 401

    def test_empty_body(self, client):
        assert upload(client, body=b"").status_code == 400

    def test_body_over_size_cap_rejected(self, settings, classifier, notifier):
        capped = replace(settings, max_upload_bytes=10)
        coordinator = IngestionCoordinator(capped, classifier, notifier=notifier)
        with TestClient(create_app(settings=capped, coordinator=coordinator)) as capped_client:
            response = upload(capped_client, body=b"x" * 11)
        assert response.status_code == 400
        assert classifier.calls == []
        assert coordinator.hub.state.image is None

    def test_classifier_failure_returns_500(self, client, classifier, upstream_error, coordinator):
        classifier.error = upstream_error
        response = upload(client)
        assert response.status_code == 500
        assert coordinator.hub.state.image == JPEG

    def test_upload_response_and_reads(self, client):
        response = upload(client, **{"X-Edge-Detected": "1"})
        assert response.status_code == 200
        assert response.json() == [
            {"description": "Person", "score": 0.95},
            {"description": "Tree", "score": 0.8},
        ]

        login(client)
        image = client.get("/saveImage.jpg?t=123")
        assert image.status_code == 200
        assert image.headers["content-type"] == "image/jpeg"
        assert image.content == JPEG
        gallery = client.get("/gallery").json()
        assert len(gallery) == 1
        assert gallery[0]["labels"] == "Person, Tree"

    def test_no_image_yet(self, client):
        login(client)
        assert client.get("/saveImage.jpg").status_code == 404

    def test_video_upload(self, client, notifier):
        response = client.post("/videoUpdate", content=b"mp4", headers={"X-API-Key": API_KEY})
        assert response.status_code == 200
        assert response.json() == {"sent": True}
        assert notifier.videos[0][0] == b"mp4"


class TestViewerControls:
    def test_toggle_requires_session(self, client):
        assert client.post("/toggle-ai").status_code == 401

    def test_toggle(self, client):
        login(client)
        assert client.post("/toggle-ai").json() == {"aiEnabled": False}
        assert client.post("/toggle-ai", json={"enabled": True}).json() == {"aiEnabled": True}

    def test_unknown_route(self, client):
        assert client.get("/nowhere").status_code == 401
        login(client)
        assert client.get("/nowhere").status_code == 405
        assert client.delete("/labels").status_code == 405

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["ok"] is True
        assert body["viewers"] == 0


class TestWebsocket:
    def test_rejects_without_session(self, client):
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json()["type"] == "error"
            with pytest.raises(WebSocketDisconnect):
                ws.receive_text()

    def test_person_frame_reaches_viewer_with_gallery(self, client):
        login(client)
        with client.websocket_connect("/ws") as ws:
            assert upload(client).status_code == 200
            payload = ws.receive_json()

        assert payload["type"] == "frame"
        assert payload["aiEnabled"] is True
        assert payload["labels"][0]["description"] == "Person"
        assert len(payload["gallery"]) == 1
