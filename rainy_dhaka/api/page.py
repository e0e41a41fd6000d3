"""HTML rendering for the single page served by `http_api`.

The page has no client-side script: every control is a form posting back to
the application, and each affordance is rendered straight from a `ViewState`
snapshot. Disabled triggers render with the `disabled` attribute, hidden
blocks with the `hidden` class.
"""

from html import escape

from rainy_dhaka.core.types import ViewState


PAGE_TITLE = "Rainy Day in Dhaka"

_STYLE = """
body { font-family: sans-serif; max-width: 40rem; margin: 2rem auto; }
.hidden { display: none; }
.alert { background: #fff3cd; border: 1px solid #ffe69c; padding: .5rem; }
#image-gallery img { max-width: 100%; }
"""


def _hidden(visible: bool) -> str:
    return "" if visible else " hidden"


def _disabled(enabled: bool) -> str:
    return "" if enabled else " disabled"


def render_page(view: ViewState) -> str:
    """Render the full page for one view snapshot."""
    alerts = "".join(
        f'<div class="alert" role="alert">{escape(message)}</div>'
        for message in view.alerts
    )

    gallery = ""
    if view.image is not None:
        gallery += (
            f'<img src="{escape(view.image.src, quote=True)}" '
            f'alt="{escape(view.image.alt, quote=True)}">'
        )
    gallery += "".join(f"<p>{escape(error)}</p>" for error in view.errors)

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>{PAGE_TITLE}</title>
<style>{_STYLE}</style>
</head>
<body data-state="{view.state.value}">
<h1>{PAGE_TITLE}</h1>
{alerts}
<form action="/upload" method="post" enctype="multipart/form-data">
  <label id="image-upload-label" for="image-upload">{escape(view.upload_label)}</label>
  <input id="image-upload" type="file" name="file" accept="image/*">
  <button type="submit">Select</button>
</form>
<form action="/generate" method="post">
  <button id="generate-button" type="submit"{_disabled(view.generate_enabled)}>Generate</button>
</form>
<div id="loader" class="loader{_hidden(view.loader_visible)}">Generating...</div>
<div id="image-gallery">{gallery}</div>
<div id="post-generate-controls" class="controls{_hidden(view.post_controls_visible)}">
  <form action="/download" method="get">
    <button id="download-button" type="submit">Download</button>
  </form>
  <form action="/generate-again" method="post">
    <button id="generate-again-button" type="submit"{_disabled(view.generate_again_enabled)}>Generate Again</button>
  </form>
</div>
</body>
</html>
"""
