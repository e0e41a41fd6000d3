"""Provider/runtime configuration for the image-generation layer.

Architectural role:
    Centralizes model selection, the fixed scene prompt, endpoint templates and
    credential lookup for `rainy_dhaka.image.service` and
    `rainy_dhaka.image.client`.

Determinism:
    Deterministic for a fixed process environment and key files. Values are
    resolved at import time (plus runtime key-file reads in `load_key`).

Failure behavior:
    Missing key material is represented as `None` and rejected by `client`
    with an `ImageProviderError`.
"""

import os
from dotenv import load_dotenv

load_dotenv()

# Model used for image editing.
IMAGE_MODEL = os.getenv("IMAGE_MODEL", "gemini-2.5-flash-image-preview")

# Base prompt for the scene.
IMAGE_PROMPT = os.getenv(
    "IMAGE_PROMPT",
    "make me doing romantic activities in old dhaka while in rain without umbrella. "
    "The final image should have a 9:16 portrait aspect ratio.",
)

# Requested response parts, in provider enum spelling.
RESPONSE_MODALITIES = ["IMAGE", "TEXT"]

GEMINI_KEY_FILE = "config/gemini.key"

GEMINI_URL_TEMPLATE = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "{model}:generateContent"
)

REQUEST_TIMEOUT = float(os.getenv("IMAGE_REQUEST_TIMEOUT", "120"))

# User-facing texts shared by controller and adapters.
UPLOAD_PLACEHOLDER = "Choose a File"
RESULT_ALT_TEXT = (
    "A person from an uploaded image placed in a romantic rainy Dhaka street scene."
)
NO_UPLOAD_ALERT = "Please upload an image first."
NO_DOWNLOAD_ALERT = "No image to download."
GENERATION_ERROR_MESSAGE = (
    "Error: Could not generate the image. Please try again. "
    "Check the console for details."
)
DOWNLOAD_FILE_NAME = "rainy-day-in-dhaka.png"


def load_key(path):
    """Load API key from environment override or key file.

    Resolution order:
        1. Environment variable inferred from file stem (for example
           `config/gemini.key` -> `GEMINI_API_KEY`).
        2. Raw file contents at `path`.

    Args:
        path: Configured key file path or `None`.

    Returns:
        Key string or `None` when not available.

    Edge cases:
        - `None` path returns `None`.
        - Missing file returns `None`.
    """
    if not path:
        return None
    key_name = os.path.splitext(os.path.basename(path))[0].upper() + "_API_KEY"
    env_value = os.getenv(key_name)
    if env_value:
        return env_value
    if not os.path.exists(path):
        return None
    with open(path, "r") as f:
        return f.read().strip() or None
