"""
File-input intake for API adapters.

Architectural role:
- Convert one user-selected file into an `UploadedImage` (base64 text plus
  declared media type) that the controller can attach to a request.
- Provide adapter-level preprocessing only (no endpoint registration).

Processing lifecycle:
1. Pick the first selected file; an empty selection yields `None`.
2. Read the full file contents.
3. Encode the bytes as base64 text.
4. Pair the text with the declared media type (or a sniffed one for local
   paths without a recognizable extension).

Validation behavior:
- No file type or size validation is performed.

Error handling strategy:
- Any failure to read the file raises `FileReadError`. Callers convert it to
  a user-facing alert.

Side effects:
- Reads local files for CLI paths. Nothing is written.
"""

import base64
import mimetypes
import os
from typing import List, Optional, Tuple

from PIL import Image, UnidentifiedImageError

from rainy_dhaka.core.types import UploadedImage


class FileReadError(ValueError):
    """Raised when a selected file cannot be read into memory."""


# ============================================================
# ENCODING
# ============================================================

def encode_image_bytes(content: bytes, mime_type: str, file_name: str = "") -> UploadedImage:
    """Encode raw file bytes as an `UploadedImage`."""
    encoded = base64.b64encode(content).decode("ascii")
    return UploadedImage(data=encoded, mime_type=mime_type or "", file_name=file_name)


# ============================================================
# HTTP UPLOADS
# ============================================================

def read_uploaded_file(
    file_name: str,
    content: Optional[bytes],
    declared_type: Optional[str],
) -> UploadedImage:
    """
    Build an `UploadedImage` from an uploaded file body.

    Input validation behavior:
    - `None` content means the upload stream could not be read and raises
      `FileReadError`. Empty bytes are accepted as an empty file.
    """
    if content is None:
        raise FileReadError(f"Could not read file: {file_name or '<unnamed>'}")
    return encode_image_bytes(content, declared_type or "", file_name)


def first_selection(files: List[Tuple[str, Optional[bytes], Optional[str]]]):
    """Return the first `(name, content, type)` selection, or `None` when empty.

    Only `files[0]` is considered. An unnamed first entry is what browsers
    submit for an empty file input, so it counts as a cleared selection.
    """
    if not files:
        return None
    selection = files[0]
    if not selection[0]:
        return None
    return selection


# ============================================================
# LOCAL FILES
# ============================================================

def _sniff_mime_type(path: str) -> str:
    """Detect the media type from image contents via Pillow."""
    try:
        with Image.open(path) as img:
            fmt = img.format
    except (UnidentifiedImageError, OSError):
        return ""
    return Image.MIME.get(fmt, "") if fmt else ""


def guess_mime_type(path: str) -> str:
    """Return the media type from the file extension, sniffing as fallback."""
    mime_type, _ = mimetypes.guess_type(path)
    if mime_type:
        return mime_type
    return _sniff_mime_type(path)


def load_image_file(path: str) -> UploadedImage:
    """
    Read a local file into an `UploadedImage`.

    Error handling:
    - Missing files, directories and permission errors raise `FileReadError`.
    """
    expanded = os.path.expanduser(path)
    try:
        with open(expanded, "rb") as f:
            content = f.read()
    except OSError as err:
        raise FileReadError(f"Could not read file: {path}") from err

    return encode_image_bytes(content, guess_mime_type(expanded), os.path.basename(expanded))
