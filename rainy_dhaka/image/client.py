"""Gemini `generateContent` HTTP client.

Processing flow:
    1. Resolve the API key (environment override or key file).
    2. Submit the JSON payload to the model's `generateContent` endpoint.
    3. Return parsed JSON response or raise on transport/HTTP failure.

Base64:
    - Payload parts are already base64 text; this module does not encode or
      decode image bytes.

Retry behavior:
    No retry loop is implemented. Each call is attempted once with the
    configured `REQUEST_TIMEOUT`.

Error handling strategy:
    - Missing key, transport failures and non-200 responses raise
      `ImageProviderError` for the controller boundary to handle.

Security considerations:
    - The API key travels in the `x-goog-api-key` header and is never logged.
    - Upstream response bodies are only attached to the exception, not printed.
"""

import logging

import requests

from rainy_dhaka.image.provider_config import (
    GEMINI_KEY_FILE,
    GEMINI_URL_TEMPLATE,
    IMAGE_MODEL,
    REQUEST_TIMEOUT,
    load_key,
)


logger = logging.getLogger(__name__)


class ImageProviderError(RuntimeError):
    """Raised when the provider cannot be reached or rejects the request."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def send_generation_request(payload: dict, model: str = IMAGE_MODEL) -> dict:
    """Send one image-generation request to Gemini.

    Args:
        payload: `generateContent` JSON body (contents + generationConfig).
        model: Model identifier interpolated into the endpoint URL.

    Returns:
        Parsed JSON response from the provider.

    Error handling:
        - Missing/empty API key -> `ImageProviderError`
        - Transport failure -> `ImageProviderError`
        - Non-200 HTTP response -> `ImageProviderError` with `status_code`
    """
    api_key = load_key(GEMINI_KEY_FILE)
    if not api_key:
        raise ImageProviderError(
            f"Gemini API key missing: set GEMINI_API_KEY or {GEMINI_KEY_FILE}"
        )

    url = GEMINI_URL_TEMPLATE.format(model=model)
    headers = {
        "x-goog-api-key": api_key,
        "Content-Type": "application/json",
    }

    logger.debug("Posting generateContent request for model=%s", model)

    try:
        response = requests.post(
            url,
            headers=headers,
            json=payload,
            timeout=REQUEST_TIMEOUT,
        )
    except requests.exceptions.RequestException as err:
        raise ImageProviderError(f"Gemini request failed: {err}") from err

    if response.status_code != 200:
        raise ImageProviderError(
            f"Gemini request failed with status {response.status_code}: {response.text}",
            status_code=response.status_code,
        )

    try:
        return response.json()
    except ValueError as err:
        raise ImageProviderError("Gemini returned a non-JSON response") from err
