"""HTTP route tests with mocked extraction services."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.api.routes import router
from src.api.service import GRAB_FAILURE_MESSAGE
from src.extraction.exceptions import CaptureError, GatewayError
from src.extraction.models import ArticleData, ImageFrame
from src.extraction.sessions import SessionRegistry

ARTICLE = ArticleData(title="Foo", text_content="Bar baz.", image_url="https://x.com/i.jpg")
NO_ACCESS = ArticleData.failed("I am unable to directly access the content of the URL.")


def _make_app() -> FastAPI:
    app = FastAPI()
    app.include_router(router)

    capture = MagicMock()
    capture.capture_full_page = AsyncMock(return_value=[ImageFrame(data=b"f")])
    url_extractor = MagicMock()
    url_extractor.extract_from_url = AsyncMock(return_value=ARTICLE)
    image_extractor = MagicMock()
    image_extractor.extract_from_images = AsyncMock(return_value=ARTICLE)

    app.state.capture = capture
    app.state.url_extractor = url_extractor
    app.state.image_extractor = image_extractor
    app.state.sessions = SessionRegistry(url_extractor, capture, image_extractor)
    return app


@pytest.fixture
def app() -> FastAPI:
    return _make_app()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


class TestGrab:
    def test_returns_camel_case_article(self, client: TestClient, app: FastAPI) -> None:
        resp = client.post("/grab", json={"url": "https://x.com/story"})
        assert resp.status_code == 200
        assert resp.json() == {
            "title": "Foo",
            "textContent": "Bar baz.",
            "imageUrl": "https://x.com/i.jpg",
        }
        assert app.state.capture.capture_full_page.await_args.args[0] == "https://x.com/story"

    @pytest.mark.parametrize("body", [{}, {"url": ""}, {"url": None}])
    def test_missing_url(self, client: TestClient, body: dict) -> None:
        resp = client.post("/grab", json=body)
        assert resp.status_code == 400
        assert resp.json() == {"error": "URL is required"}

    def test_invalid_url(self, client: TestClient, app: FastAPI) -> None:
        resp = client.post("/grab", json={"url": "example.com/story"})
        assert resp.status_code == 400
        assert "http://" in resp.json()["error"]
        app.state.capture.capture_full_page.assert_not_awaited()

    def test_capture_failure_is_generic_500(self, client: TestClient, app: FastAPI) -> None:
        app.state.capture.capture_full_page.side_effect = CaptureError("Failed to launch browser: boom")
        resp = client.post("/grab", json={"url": "https://x.com/story"})
        assert resp.status_code == 500
        assert resp.json() == {"error": GRAB_FAILURE_MESSAGE}

    def test_stream_rejects_missing_url(self, client: TestClient) -> None:
        resp = client.post("/grab/stream", json={})
        assert resp.status_code == 400

    @pytest.mark.parametrize("path", ["/grab", "/grab/stream", "/extract"])
    def test_no_body_is_missing_url(self, client: TestClient, path: str) -> None:
        resp = client.post(path)
        assert resp.status_code == 400
        assert resp.json() == {"error": "URL is required"}


class TestExtract:
    def test_success(self, client: TestClient) -> None:
        resp = client.post("/extract", json={"url": "https://x.com/story"})
        assert resp.status_code == 200
        assert resp.json()["textContent"] == "Bar baz."

    def test_sentinel_is_a_normal_response(self, client: TestClient, app: FastAPI) -> None:
        app.state.url_extractor.extract_from_url.return_value = NO_ACCESS
        resp = client.post("/extract", json={"url": "https://x.com/story"})
        assert resp.status_code == 200
        assert resp.json()["title"] == "Extraction Failed"
        assert resp.json()["imageUrl"] is None

    def test_gateway_error_is_500_with_message(self, client: TestClient, app: FastAPI) -> None:
        app.state.url_extractor.extract_from_url.side_effect = GatewayError("Failed to communicate")
        resp = client.post("/extract", json={"url": "https://x.com/story"})
        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to communicate"}


class TestSessions:
    def _create(self, client: TestClient) -> str:
        resp = client.post("/sessions")
        assert resp.status_code == 201
        assert resp.json()["state"] == "idle"
        return resp.json()["session_id"]

    def test_direct_success(self, client: TestClient) -> None:
        session_id = self._create(client)
        resp = client.post(f"/sessions/{session_id}/attempts", json={"url": "https://x.com/story"})

        assert resp.status_code == 200
        body = resp.json()
        assert body["state"] == "done"
        assert body["attempt"] == 1
        assert body["article"]["textContent"] == "Bar baz."

        assert client.get(f"/sessions/{session_id}").json()["state"] == "done"

    def test_attempt_without_body_fails(self, client: TestClient) -> None:
        session_id = self._create(client)
        resp = client.post(f"/sessions/{session_id}/attempts")
        assert resp.status_code == 200
        assert resp.json()["state"] == "failed"

    def test_invalid_url_is_a_failed_attempt(self, client: TestClient) -> None:
        session_id = self._create(client)
        resp = client.post(f"/sessions/{session_id}/attempts", json={"url": "not a url"})
        assert resp.status_code == 200
        assert resp.json()["state"] == "failed"

    def test_fallback_flow(self, client: TestClient, app: FastAPI) -> None:
        app.state.url_extractor.extract_from_url.return_value = NO_ACCESS
        session_id = self._create(client)

        body = client.post(f"/sessions/{session_id}/attempts", json={"url": "https://x.com/story"}).json()
        assert body["state"] == "awaiting_fallback_choice"
        assert body["fallback_offered"] is True

        body = client.post(f"/sessions/{session_id}/fallback", json={"confirm": True}).json()
        assert body["state"] == "done"
        assert body["article"]["title"] == "Foo"

    def test_decline_fallback(self, client: TestClient, app: FastAPI) -> None:
        app.state.url_extractor.extract_from_url.return_value = NO_ACCESS
        session_id = self._create(client)
        client.post(f"/sessions/{session_id}/attempts", json={"url": "https://x.com/story"})

        resp = client.post(f"/sessions/{session_id}/fallback", json={"confirm": False})
        assert resp.json()["state"] == "idle"
        app.state.capture.capture_full_page.assert_not_awaited()

    def test_fallback_without_offer_is_conflict(self, client: TestClient) -> None:
        session_id = self._create(client)
        resp = client.post(f"/sessions/{session_id}/fallback", json={"confirm": True})
        assert resp.status_code == 409
        assert "idle" in resp.json()["error"]

    def test_unknown_session(self, client: TestClient) -> None:
        assert client.get("/sessions/nope").status_code == 404
        assert client.delete("/sessions/nope").status_code == 404
        resp = client.post("/sessions/nope/attempts", json={"url": "https://x.com"})
        assert resp.status_code == 404
        assert resp.json() == {"error": "Session not found"}

    def test_delete(self, client: TestClient) -> None:
        session_id = self._create(client)
        assert client.delete(f"/sessions/{session_id}").status_code == 204
        assert client.get(f"/sessions/{session_id}").status_code == 404


class TestApp:
    def test_health_allows_any_origin(self) -> None:
        from src.main import app

        resp = TestClient(app).get("/health", headers={"Origin": "https://reader.example"})
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}
        assert resp.headers["access-control-allow-origin"] == "*"
