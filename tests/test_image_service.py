from __future__ import annotations

import pytest
import requests

from rainy_dhaka.core.types import UploadedImage
from rainy_dhaka.image.client import ImageProviderError, send_generation_request
from rainy_dhaka.image.provider_config import IMAGE_MODEL, IMAGE_PROMPT
from rainy_dhaka.image.service import (
    GenerationError,
    build_generation_payload,
    extract_first_image,
    generate_image,
)

from conftest import FakeResponse, gemini_response, image_part, text_part


UPLOAD = UploadedImage(data="QUJD", mime_type="image/jpeg", file_name="photo.jpg")


def test_payload_has_image_then_prompt_and_modalities():
    payload = build_generation_payload(UPLOAD)
    parts = payload["contents"][0]["parts"]
    assert parts[0] == {"inlineData": {"mimeType": "image/jpeg", "data": "QUJD"}}
    assert parts[1] == {"text": IMAGE_PROMPT}
    assert payload["generationConfig"]["responseModalities"] == ["IMAGE", "TEXT"]


@pytest.mark.parametrize("n,k", [(1, 0), (3, 0), (3, 2), (5, 3)])
def test_extract_image_at_any_position(n, k):
    parts = [text_part(f"part {i}") for i in range(n)]
    parts[k] = image_part("AAAA", "image/png")
    result = extract_first_image(gemini_response(*parts))
    assert result.src == "data:image/png;base64,AAAA"


def test_extract_first_image_ignores_later_images():
    response = gemini_response(
        text_part(),
        image_part("Zmlyc3Q=", "image/png"),
        image_part("c2Vjb25k", "image/jpeg"),
    )
    result = extract_first_image(response)
    assert result.data == "Zmlyc3Q="
    assert result.mime_type == "image/png"


def test_extract_accepts_snake_case_keys():
    response = gemini_response({"inline_data": {"mime_type": "image/webp", "data": "AAAA"}})
    assert extract_first_image(response).src == "data:image/webp;base64,AAAA"


def test_extract_without_image_part_raises():
    with pytest.raises(GenerationError, match="did not contain an image"):
        extract_first_image(gemini_response(text_part(), text_part()))


@pytest.mark.parametrize("response", [{}, {"candidates": []}, {"candidates": [{"content": {}}]}, None])
def test_extract_invalid_structure_raises(response):
    with pytest.raises(GenerationError, match="Invalid response structure"):
        extract_first_image(response)


def test_generate_image_posts_to_model_endpoint(fake_post):
    result = generate_image(UPLOAD)

    assert result.src == "data:image/png;base64,AAAA"
    assert len(fake_post.calls) == 1
    call = fake_post.calls[0]
    assert call["url"].endswith(f"/models/{IMAGE_MODEL}:generateContent")
    assert call["headers"]["x-goog-api-key"] == "test-key"
    assert call["json"]["contents"][0]["parts"][0]["inlineData"]["data"] == "QUJD"


def test_client_raises_on_http_error(fake_post):
    fake_post.response = FakeResponse(status_code=500, text="boom")
    with pytest.raises(ImageProviderError) as excinfo:
        send_generation_request({"contents": []})
    assert excinfo.value.status_code == 500


def test_client_raises_on_transport_error(fake_post):
    fake_post.response = requests.exceptions.ConnectionError("offline")
    with pytest.raises(ImageProviderError):
        send_generation_request({"contents": []})


def test_client_requires_api_key(monkeypatch, fake_post, tmp_path):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ImageProviderError, match="API key missing"):
        send_generation_request({"contents": []})
    assert fake_post.calls == []
