"""
HTTP adapter serving the single-page image transform tool.

Architectural role:
- Serve the page rendered from the session controller's `ViewState`.
- Translate form posts (upload, generate, generate again) and the download
  link into controller calls.
- Keep one `TransformController` per browser session, in process memory only.

Endpoint responsibilities:
- `GET /`: render the page.
- `GET /state`: JSON view snapshot.
- `POST /upload`: read the first selected file (empty selection clears).
- `POST /generate`, `POST /generate-again`: run one generation.
- `GET /download`: return the current result as an attachment, or render the
  page with a "nothing to download" alert.

Request lifecycle (form endpoints):
1. Resolve or create the session controller from the `session_id` cookie.
2. Forward the event to the controller.
3. Redirect (303) back to `/` so the page re-renders from fresh state.

Error handling strategy:
- Generation errors never surface as HTTP errors; the controller renders
  them inline.
- Invoking generate while a request is in flight returns HTTP 409.

Side effects:
- Session controllers live in the app-level `app.state.sessions` map, bounded
  to `MAX_SESSIONS` with least-recently-used eviction. Nothing is persisted.
- All endpoints are `async def`, so session state is only touched from the
  event loop.
- Emits debug output only when `DEBUG == "true"`.
"""

from dotenv import load_dotenv

load_dotenv()

import base64
import binascii
import os
import uuid
from collections import OrderedDict
from dataclasses import asdict
from typing import Callable

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
from pydantic import BaseModel

from rainy_dhaka.api.page import render_page
from rainy_dhaka.core.controller import TransformController, TriggerDisabledError


# Sensitive request/response debug logging is opt-in.
DEBUG = os.getenv("DEBUG") == "true"

SESSION_COOKIE = "session_id"

# Least recently used sessions are evicted beyond this count.
MAX_SESSIONS = int(os.getenv("MAX_SESSIONS", "256"))


# ============================================================
# Session Helpers
# ============================================================

def _resolve_session(request: Request):
    """Return `(session_id, controller, is_new)` for the request cookie."""
    sessions: "OrderedDict[str, TransformController]" = request.app.state.sessions
    session_id = request.cookies.get(SESSION_COOKIE)
    if session_id and session_id in sessions:
        sessions.move_to_end(session_id)
        return session_id, sessions[session_id], False

    session_id = uuid.uuid4().hex
    controller = request.app.state.controller_factory()
    sessions[session_id] = controller
    while len(sessions) > request.app.state.max_sessions:
        evicted, _ = sessions.popitem(last=False)
        if DEBUG:
            print("Evicted session:", evicted)
    if DEBUG:
        print("New session:", session_id)
    return session_id, controller, True


def _with_cookie(response: Response, session_id: str, is_new: bool) -> Response:
    if is_new:
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return response


def _redirect_home() -> RedirectResponse:
    return RedirectResponse("/", status_code=303)


# ============================================================
# Response Schema
# ============================================================

class GalleryImageModel(BaseModel):
    src: str
    alt: str


class ViewStateResponse(BaseModel):
    """JSON shape of `GET /state`, mirroring `ViewState`."""
    state: str
    upload_label: str
    generate_enabled: bool
    generate_again_enabled: bool
    loader_visible: bool
    post_controls_visible: bool
    image: GalleryImageModel | None = None
    errors: list[str] = []
    alerts: list[str] = []


def _view_to_json(view) -> dict:
    data = asdict(view)
    data["state"] = view.state.value
    return data


async def _read_selection(item):
    """Turn one multipart form item into a `(name, content, type)` tuple."""
    if not hasattr(item, "read"):
        return ("", None, None)

    try:
        content = await item.read()
    except OSError:
        content = None

    return (item.filename or "", content, item.content_type)


# ============================================================
# Application Factory
# ============================================================

def create_app(
    controller_factory: Callable[[], TransformController] = TransformController,
    max_sessions: int = MAX_SESSIONS,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        controller_factory: Creates the controller for each new session.
        max_sessions: Upper bound on retained session controllers.
    """
    app = FastAPI(title="rainy-dhaka")
    app.state.sessions = OrderedDict()
    app.state.max_sessions = max(1, max_sessions)
    app.state.controller_factory = controller_factory

    @app.get("/", response_class=HTMLResponse)
    async def index(request: Request):
        """Render the page for the caller's session."""
        session_id, controller, is_new = _resolve_session(request)
        html = render_page(controller.view())
        return _with_cookie(HTMLResponse(html), session_id, is_new)

    @app.get("/state")
    async def state(request: Request):
        """Return the current view snapshot as JSON (alerts are drained)."""
        session_id, controller, is_new = _resolve_session(request)
        payload = ViewStateResponse(**_view_to_json(controller.view()))
        return _with_cookie(JSONResponse(payload.model_dump()), session_id, is_new)

    @app.post("/upload")
    async def upload(request: Request):
        """
        Handle a file-input change.

        Input validation behavior:
        - Only the first named file part is used.
        - A missing or unnamed file part clears the current upload.
        """
        session_id, controller, is_new = _resolve_session(request)

        form = await request.form()
        selections = [await _read_selection(item) for item in form.getlist("file")]

        if DEBUG:
            print("Upload selections:", [(name, content_type) for name, _, content_type in selections])

        controller.select_files(selections)
        return _with_cookie(_redirect_home(), session_id, is_new)

    async def _run_generation(request: Request):
        session_id, controller, is_new = _resolve_session(request)
        try:
            await controller.generate()
        except TriggerDisabledError as err:
            return _with_cookie(
                JSONResponse(status_code=409, content={"error": str(err)}),
                session_id,
                is_new,
            )

        if DEBUG:
            print("Generation finished with state:", controller.state.value)

        return _with_cookie(_redirect_home(), session_id, is_new)

    @app.post("/generate")
    async def generate(request: Request):
        """Primary trigger."""
        return await _run_generation(request)

    @app.post("/generate-again")
    async def generate_again(request: Request):
        """Secondary trigger; identical handling to `/generate`."""
        return await _run_generation(request)

    @app.get("/download")
    async def download(request: Request):
        """
        Return the current result as a file download.

        Response formatting:
        - Body: decoded image bytes from the result's data URI.
        - `Content-Disposition: attachment; filename="rainy-day-in-dhaka.png"`.
        - Without a result, the page is rendered with an alert instead.
        """
        session_id, controller, is_new = _resolve_session(request)

        artifact = controller.download()
        if artifact is None:
            html = render_page(controller.view())
            return _with_cookie(HTMLResponse(html), session_id, is_new)

        try:
            body = base64.b64decode(artifact.data)
        except (binascii.Error, ValueError):
            return _with_cookie(
                JSONResponse(status_code=502, content={"error": "Result is not valid base64."}),
                session_id,
                is_new,
            )

        response = Response(
            content=body,
            media_type=artifact.mime_type or "application/octet-stream",
            headers={"Content-Disposition": f'attachment; filename="{artifact.file_name}"'},
        )
        return _with_cookie(response, session_id, is_new)

    return app


app = create_app()


def main():
    """Run the page server with uvicorn (`HOST`/`PORT` from the environment)."""
    import uvicorn

    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8000"))
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
