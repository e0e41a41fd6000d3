"""Session data contracts for `rainy_dhaka.core.controller`.

Architectural role:
    Defines the two session fields owned by the controller (the uploaded image
    and the current generation result), the UI state labels, and the view
    snapshot consumed by API adapters when rendering the page.

Control-flow interaction:
    `TransformController` creates and replaces these objects from its own event
    handlers. Adapters only read `ViewState` snapshots; they never mutate the
    session fields directly.

Determinism:
    The data classes are purely structural. `GenerationResult.src` is derived
    deterministically from media type and payload.
"""

from dataclasses import dataclass, field
from enum import Enum


def build_data_uri(mime_type: str, data: str) -> str:
    """Return a `data:<mime_type>;base64,<data>` URI."""
    return f"data:{mime_type};base64,{data}"


class UIState(str, Enum):
    """Page lifecycle labels derived by the controller."""

    IDLE_NO_FILE = "idle-no-file"
    IDLE_READY = "idle-ready"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class UploadedImage:
    """Base64 payload of the user-selected file plus its declared media type.

    Attributes:
        data: Full file contents encoded as base64 text.
        mime_type: Declared media type of the file (may be empty).
        file_name: Original file name shown in the upload label.
    """

    data: str
    mime_type: str
    file_name: str = ""

    def as_inline_data(self) -> dict:
        """Return the provider `inlineData` object for this image."""
        return {"mimeType": self.mime_type, "data": self.data}


@dataclass(frozen=True)
class GenerationResult:
    """First image returned by the provider for one generation run."""

    data: str
    mime_type: str

    @property
    def src(self) -> str:
        return build_data_uri(self.mime_type, self.data)


@dataclass(frozen=True)
class DownloadArtifact:
    """Browser-style download: a fixed file name pointing at a data URI."""

    file_name: str
    href: str
    mime_type: str
    data: str


@dataclass
class GalleryImage:
    src: str
    alt: str


@dataclass
class ViewState:
    """Snapshot of every page affordance for one moment in the session.

    Attributes:
        state: Current `UIState` label.
        upload_label: Chosen file name or the placeholder text.
        generate_enabled: Whether the primary trigger accepts clicks.
        generate_again_enabled: Whether the secondary trigger accepts clicks.
        loader_visible: Whether the loading indicator is shown.
        post_controls_visible: Whether download / generate-again are shown.
        image: Rendered result image, if any.
        errors: Error paragraphs appended to the display surface.
        alerts: Blocking alert messages raised since the last snapshot.
    """

    state: UIState
    upload_label: str
    generate_enabled: bool
    generate_again_enabled: bool
    loader_visible: bool
    post_controls_visible: bool
    image: GalleryImage | None = None
    errors: list[str] = field(default_factory=list)
    alerts: list[str] = field(default_factory=list)
