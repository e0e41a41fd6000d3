"""Image service used by the controller's generate action.

Role in pipeline:
    - Composes the `generateContent` payload from an uploaded image and the
      fixed scene prompt.
    - Dispatches it through `rainy_dhaka.image.client`.
    - Extracts the first image-bearing part of the response.

Response scanning:
    Only `candidates[0].content.parts` is inspected. Parts are scanned in order
    and the first one carrying inline image data wins; later parts, image or
    text, are ignored.

Error handling strategy:
    - Transport errors from the client propagate unchanged.
    - Malformed responses and responses without an image part raise
      `GenerationError`.
"""

from rainy_dhaka.core.types import GenerationResult, UploadedImage
from rainy_dhaka.image.client import send_generation_request
from rainy_dhaka.image.provider_config import (
    IMAGE_MODEL,
    IMAGE_PROMPT,
    RESPONSE_MODALITIES,
)


class GenerationError(RuntimeError):
    """Raised when a provider response cannot be turned into an image."""


def build_generation_payload(image: UploadedImage, prompt: str = IMAGE_PROMPT) -> dict:
    """Return the request body: image part first, then the instruction text."""
    return {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"inlineData": image.as_inline_data()},
                    {"text": prompt},
                ],
            }
        ],
        "generationConfig": {
            "responseModalities": list(RESPONSE_MODALITIES),
        },
    }


def _inline_data(part):
    if not isinstance(part, dict):
        return None
    inline = part.get("inlineData") or part.get("inline_data")
    if not isinstance(inline, dict) or not inline.get("data"):
        return None
    return inline


def extract_first_image(response: dict) -> GenerationResult:
    """Return the first inline image of the first candidate.

    Raises:
        GenerationError: when the candidate structure is missing or no part
            carries inline image data.
    """
    try:
        parts = response["candidates"][0]["content"]["parts"]
    except (KeyError, IndexError, TypeError):
        parts = None

    if not isinstance(parts, list):
        raise GenerationError("Invalid response structure from API.")

    for part in parts:
        inline = _inline_data(part)
        if inline is not None:
            mime_type = inline.get("mimeType") or inline.get("mime_type") or ""
            return GenerationResult(data=inline["data"], mime_type=mime_type)

    raise GenerationError("API response did not contain an image.")


def generate_image(image: UploadedImage, prompt: str = IMAGE_PROMPT, model: str = IMAGE_MODEL) -> GenerationResult:
    """Generate one scene image from an uploaded photo.

    Args:
        image: Uploaded photo to attach as inline data.
        prompt: Instruction text sent alongside the photo.
        model: Gemini model identifier.

    Returns:
        `GenerationResult` for the first image part in the response.
    """
    payload = build_generation_payload(image, prompt)
    response = send_generation_request(payload, model=model)
    return extract_first_image(response)
