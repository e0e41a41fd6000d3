from __future__ import annotations

import pytest

import rainy_dhaka.image.client as client


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, text: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def gemini_response(*parts) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": list(parts)}}]}


def image_part(data: str = "AAAA", mime_type: str = "image/png") -> dict:
    return {"inlineData": {"mimeType": mime_type, "data": data}}


def text_part(text: str = "Here is your picture.") -> dict:
    return {"text": text}


@pytest.fixture(autouse=True)
def gemini_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")


@pytest.fixture
def fake_post(monkeypatch):
    """Patch the provider transport; set `.response` to control the reply."""

    class Recorder:
        def __init__(self):
            self.calls = []
            self.response = FakeResponse(gemini_response(image_part()))

        def __call__(self, url, headers=None, json=None, timeout=None):
            self.calls.append({"url": url, "headers": headers, "json": json, "timeout": timeout})
            if isinstance(self.response, Exception):
                raise self.response
            return self.response

    recorder = Recorder()
    monkeypatch.setattr(client.requests, "post", recorder)
    return recorder
