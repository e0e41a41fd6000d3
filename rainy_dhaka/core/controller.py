"""Image Transform Controller: session state and action handlers.

Architectural role:
    Owns the two session fields (uploaded image, current result) and the page
    affordances derived from them. API adapters (HTTP page, CLI) forward user
    events here and render the returned `ViewState`.

Control-flow model for one generation:
    1. Start: drop previous result and error output, mark request in flight.
       Both triggers report disabled, post-generate controls are hidden and
       the loader is shown.
    2. In flight: the blocking provider call runs in a worker thread via
       `asyncio.to_thread`; the event loop stays free.
    3. Success: keep the first returned image as the current result.
       Failure: append the generic error paragraph and log the exception.
    4. End (always): clear the in-flight flag. Triggers are enabled again only
       if an uploaded image is still present.

Concurrency:
    Only one request may be in flight per controller. The guard is the
    disabled trigger itself: invoking a disabled trigger raises
    `TriggerDisabledError` and changes nothing.

Error handling strategy:
    - Missing upload -> blocking alert, no state change, no network call.
    - Read failures on selection -> alert, upload cleared.
    - Every exception raised by the generate function is caught at the
      operation boundary and rendered as an inline error message.
"""

import asyncio
import logging
from typing import Callable, Optional

from rainy_dhaka.api.multimodal.file_input_manager import (
    FileReadError,
    first_selection,
    load_image_file,
    read_uploaded_file,
)
from rainy_dhaka.core.types import (
    DownloadArtifact,
    GalleryImage,
    GenerationResult,
    UIState,
    UploadedImage,
    ViewState,
)
from rainy_dhaka.image.provider_config import (
    DOWNLOAD_FILE_NAME,
    GENERATION_ERROR_MESSAGE,
    NO_DOWNLOAD_ALERT,
    NO_UPLOAD_ALERT,
    RESULT_ALT_TEXT,
    UPLOAD_PLACEHOLDER,
)
from rainy_dhaka.image.service import generate_image


logger = logging.getLogger(__name__)

GenerateFn = Callable[[UploadedImage], GenerationResult]


class TriggerDisabledError(RuntimeError):
    """Raised when a generate trigger is invoked while it is disabled."""


class TransformController:
    """Single-session controller behind the upload / generate / download page.

    Args:
        generate_fn: Blocking callable turning an `UploadedImage` into a
            `GenerationResult`. Defaults to the Gemini-backed service.
    """

    def __init__(self, generate_fn: GenerateFn = generate_image):
        self._generate_fn = generate_fn
        self.uploaded_image: Optional[UploadedImage] = None
        self.current_result: Optional[GenerationResult] = None
        self._in_flight = False
        self._failed = False
        self._errors: list[str] = []
        self._alerts: list[str] = []

    # ------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def generate_enabled(self) -> bool:
        return self.uploaded_image is not None and not self._in_flight

    @property
    def state(self) -> UIState:
        if self._in_flight:
            return UIState.LOADING
        if self.current_result is not None:
            return UIState.SUCCESS
        if self._failed:
            return UIState.ERROR
        if self.uploaded_image is not None:
            return UIState.IDLE_READY
        return UIState.IDLE_NO_FILE

    def view(self, consume_alerts: bool = True) -> ViewState:
        """Return a snapshot of every affordance.

        Pending alerts are handed out once; pass `consume_alerts=False` to
        peek without draining them. Action handlers return peeked snapshots,
        so alerts stay pending until the adapter renders the page.
        """
        alerts = list(self._alerts)
        if consume_alerts:
            self._alerts.clear()

        showing_result = self.current_result is not None and not self._in_flight
        image = None
        if showing_result:
            image = GalleryImage(src=self.current_result.src, alt=RESULT_ALT_TEXT)

        label = UPLOAD_PLACEHOLDER
        if self.uploaded_image is not None:
            label = self.uploaded_image.file_name or UPLOAD_PLACEHOLDER

        return ViewState(
            state=self.state,
            upload_label=label,
            generate_enabled=self.generate_enabled,
            generate_again_enabled=self.generate_enabled,
            loader_visible=self._in_flight,
            post_controls_visible=showing_result,
            image=image,
            errors=list(self._errors),
            alerts=alerts,
        )

    def _alert(self, message: str) -> None:
        self._alerts.append(message)

    # ------------------------------------------------------------
    # File selection
    # ------------------------------------------------------------

    def _set_upload(self, image: Optional[UploadedImage]) -> None:
        self.uploaded_image = image
        if image is None:
            logger.info("Upload cleared")
        else:
            logger.info("Upload selected: %s (%s)", image.file_name, image.mime_type)

    def select_files(self, files) -> ViewState:
        """Handle a file-input change event.

        Args:
            files: Sequence of `(file_name, content, declared_type)` tuples.
                Only the first selection is used; an empty sequence clears the
                upload.
        """
        selection = first_selection(files)
        if selection is None:
            self._set_upload(None)
            return self.view(consume_alerts=False)

        file_name, content, declared_type = selection
        try:
            image = read_uploaded_file(file_name, content, declared_type)
        except FileReadError as err:
            logger.warning("File read failed: %s", err)
            self._set_upload(None)
            self._alert(str(err))
            return self.view(consume_alerts=False)

        self._set_upload(image)
        return self.view(consume_alerts=False)

    def select_path(self, path: str) -> ViewState:
        """Select a local file (terminal adapters)."""
        try:
            image = load_image_file(path)
        except FileReadError as err:
            logger.warning("File read failed: %s", err)
            self._set_upload(None)
            self._alert(str(err))
            return self.view(consume_alerts=False)

        self._set_upload(image)
        return self.view(consume_alerts=False)

    # ------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------

    async def generate(self) -> ViewState:
        """Run one generation for the current upload.

        Raises:
            TriggerDisabledError: if a request is already in flight.
        """
        if self.uploaded_image is None:
            self._alert(NO_UPLOAD_ALERT)
            return self.view(consume_alerts=False)

        if self._in_flight:
            raise TriggerDisabledError("A generation request is already in flight.")

        image = self.uploaded_image

        self._in_flight = True
        self._failed = False
        self._errors.clear()
        self.current_result = None

        try:
            self.current_result = await asyncio.to_thread(self._generate_fn, image)
            logger.info("Generated image (%s)", self.current_result.mime_type)
        except Exception:
            logger.exception("Error generating image")
            self.current_result = None
            self._failed = True
            self._errors.append(GENERATION_ERROR_MESSAGE)
        finally:
            self._in_flight = False

        return self.view(consume_alerts=False)

    # Both triggers share one handler.
    generate_again = generate

    # ------------------------------------------------------------
    # Download
    # ------------------------------------------------------------

    def download(self) -> Optional[DownloadArtifact]:
        """Return the download artifact for the current result, or alert."""
        if self.current_result is None:
            self._alert(NO_DOWNLOAD_ALERT)
            return None

        return DownloadArtifact(
            file_name=DOWNLOAD_FILE_NAME,
            href=self.current_result.src,
            mime_type=self.current_result.mime_type,
            data=self.current_result.data,
        )
