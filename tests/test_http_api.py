from __future__ import annotations

from fastapi.testclient import TestClient

from rainy_dhaka.api import http_api
from rainy_dhaka.api.http_api import create_app
from rainy_dhaka.core.controller import TransformController
from rainy_dhaka.core.types import GenerationResult
from rainy_dhaka.image.provider_config import (
    GENERATION_ERROR_MESSAGE,
    NO_DOWNLOAD_ALERT,
    NO_UPLOAD_ALERT,
    UPLOAD_PLACEHOLDER,
)

from conftest import FakeResponse, gemini_response, image_part, text_part


def build_client() -> TestClient:
    return TestClient(create_app(TransformController))


def upload_photo(client: TestClient):
    return client.post("/upload", files={"file": ("photo.jpg", b"\xff\xd8\xff", "image/jpeg")})


def test_index_renders_placeholder_and_disabled_generate():
    client = build_client()
    resp = client.get("/")
    assert resp.status_code == 200
    assert UPLOAD_PLACEHOLDER in resp.text
    assert '<button id="generate-button" type="submit" disabled>' in resp.text
    assert "session_id" in resp.cookies


def test_upload_enables_generate():
    client = build_client()
    resp = upload_photo(client)
    assert resp.status_code == 200
    assert "photo.jpg" in resp.text

    state = client.get("/state").json()
    assert state["state"] == "idle-ready"
    assert state["generate_enabled"] is True
    assert state["upload_label"] == "photo.jpg"


def test_empty_upload_clears_selection():
    client = build_client()
    upload_photo(client)
    client.post("/upload", data={"note": "nothing selected"})

    state = client.get("/state").json()
    assert state["generate_enabled"] is False
    assert state["upload_label"] == UPLOAD_PLACEHOLDER


def test_generate_without_upload_shows_alert(fake_post):
    client = build_client()
    resp = client.post("/generate")
    assert NO_UPLOAD_ALERT in resp.text
    assert fake_post.calls == []


def test_generate_renders_result_and_download(fake_post):
    fake_post.response = FakeResponse(gemini_response(text_part(), image_part("AAAA", "image/png")))
    client = build_client()
    upload_photo(client)

    resp = client.post("/generate")
    assert 'src="data:image/png;base64,AAAA"' in resp.text
    assert 'id="post-generate-controls" class="controls"' in resp.text

    download = client.get("/download")
    assert download.status_code == 200
    assert download.content == b"\x00\x00\x00"
    assert download.headers["content-type"] == "image/png"
    assert 'filename="rainy-day-in-dhaka.png"' in download.headers["content-disposition"]


def test_generate_again_uses_same_handling(fake_post):
    client = build_client()
    upload_photo(client)
    client.post("/generate")
    client.post("/generate-again")

    assert len(fake_post.calls) == 2
    state = client.get("/state").json()
    assert state["state"] == "success"
    assert state["generate_again_enabled"] is True


def test_generate_error_is_inline(fake_post):
    fake_post.response = FakeResponse(status_code=503, text="unavailable")
    client = build_client()
    upload_photo(client)

    resp = client.post("/generate")
    assert resp.status_code == 200
    assert GENERATION_ERROR_MESSAGE in resp.text
    assert 'id="post-generate-controls" class="controls hidden"' in resp.text

    state = client.get("/state").json()
    assert state["state"] == "error"
    assert state["loader_visible"] is False
    assert state["generate_enabled"] is True


def test_download_without_result_alerts():
    client = build_client()
    resp = client.get("/download")
    assert resp.status_code == 200
    assert "content-disposition" not in resp.headers
    assert NO_DOWNLOAD_ALERT in resp.text


def test_sessions_are_isolated(fake_post):
    app = create_app(TransformController)
    first = TestClient(app)
    second = TestClient(app)

    upload_photo(first)

    assert first.get("/state").json()["generate_enabled"] is True
    assert second.get("/state").json()["generate_enabled"] is False


def test_read_failure_alert_reaches_page(monkeypatch):
    async def unreadable(item):
        return ("broken.jpg", None, "image/jpeg")

    monkeypatch.setattr(http_api, "_read_selection", unreadable)
    client = build_client()

    resp = upload_photo(client)

    assert 'role="alert"' in resp.text
    assert "broken.jpg" in resp.text
    assert client.get("/state").json()["generate_enabled"] is False


def test_alert_is_shown_once():
    client = build_client()
    client.post("/generate")
    assert NO_UPLOAD_ALERT not in client.get("/").text


def test_sessions_are_bounded():
    app = create_app(TransformController, max_sessions=3)
    for _ in range(10):
        TestClient(app).get("/")
    assert len(app.state.sessions) == 3


def test_recently_used_session_survives_eviction():
    app = create_app(TransformController, max_sessions=2)
    kept = TestClient(app)
    upload_photo(kept)

    TestClient(app).get("/")
    kept.get("/state")
    TestClient(app).get("/")

    assert kept.cookies["session_id"] in app.state.sessions
    assert kept.get("/state").json()["generate_enabled"] is True


def test_generate_while_in_flight_returns_409():
    calls = []
    nested = {}
    holder = {}

    def generate_fn(image):
        calls.append(image)
        second = TestClient(holder["app"], cookies={"session_id": holder["session_id"]})
        nested["response"] = second.post("/generate-again")
        return GenerationResult(data="AAAA", mime_type="image/png")

    app = create_app(lambda: TransformController(generate_fn))
    holder["app"] = app
    client = TestClient(app)
    upload_photo(client)
    holder["session_id"] = client.cookies["session_id"]

    resp = client.post("/generate")

    assert nested["response"].status_code == 409
    assert "in flight" in nested["response"].json()["error"]
    assert len(calls) == 1
    assert 'src="data:image/png;base64,AAAA"' in resp.text
