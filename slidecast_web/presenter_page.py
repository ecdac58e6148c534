"""
Presenter page generator.

Renders the self-contained fullscreen presenter for one deck: inline CSS, the
presenter runtime (``static/presenter.js``) and the per-slide build handler
(``static/slide_build.js``). Only scalar values are injected into the fixed
template; everything else is static text read once from the package.
"""

import html
import json
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from string import Template
from typing import Any, Optional

STATIC_DIR = Path(__file__).parent / "static"

# Loopback loads stay instant only while the page is small
MAX_PRESENTER_PAGE_BYTES = 50 * 1024

_PAGE_TEMPLATE = Template("""\
<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>$title - Presenter</title>
  <style>
$css
  </style>
</head>
<body>
  <div id="sidebar"></div>
  <div id="main-area">
    <div id="slide-container">
      <iframe id="slide-frame" sandbox="allow-same-origin allow-scripts"></iframe>
    </div>
    <div id="counter"></div>
    <button id="fullscreen-btn" title="Enter fullscreen">&#x26F6; Fullscreen</button>
    <div id="loading">Loading slides&#x2026;</div>
    <div id="slide-not-found"><h2>Slide not found</h2><p>This slide may have been deleted or moved. Use arrow keys to navigate to other slides.</p><button id="dismiss-not-found">Dismiss</button></div>
  </div>
  <script>
    var DECK_ID = $deck_id;
    var DECK_PATH = $deck_path;
    var SLIDE_W = $slide_width;
    var SLIDE_H = $slide_height;
    var BUILD_MS = $build_ms;
    var BUILD_CSS = $build_css;
    var BUILD_HANDLER_CODE = $build_handler;
  </script>
  <script>
$presenter_js
  </script>
</body>
</html>
""")


class PresenterPageError(RuntimeError):
    """The presenter page could not be produced."""


@dataclass(frozen=True)
class PresenterOptions:
    slide_width: int = 1920
    slide_height: int = 1080
    build_duration_ms: int = 400


@lru_cache(maxsize=None)
def _read_static(name: str) -> str:
    return (STATIC_DIR / name).read_text(encoding="utf-8")


def script_literal(value: Any) -> str:
    """
    JSON-encode a value for use inside an inline ``<script>``.

    Besides JSON quoting, ``<``, ``>`` and ``&`` are written as unicode
    escapes so no value can close the script element or open a comment.
    ASCII-only output also keeps U+2028/U+2029 escaped.
    """
    return (
        json.dumps(value)
        .replace("<", "\\u003c")
        .replace(">", "\\u003e")
        .replace("&", "\\u0026")
    )


def default_deck_path(deck_id: str, deck_dir: str = "output") -> str:
    return f"{deck_dir}/{deck_id}"


def render_presenter_page(
    deck_id: str,
    deck_path: Optional[str] = None,
    options: Optional[PresenterOptions] = None,
) -> str:
    """
    Render the presenter HTML for a deck.

    Args:
        deck_id: Deck identifier (page title, error messages)
        deck_path: Deck folder relative to the served root; slides are
            fetched from ``/<deck_path>/slides/``. Defaults to ``output/<deck_id>``.
        options: Slide geometry and build animation timing

    Returns:
        The complete HTML document

    Raises:
        PresenterPageError: If the document exceeds MAX_PRESENTER_PAGE_BYTES
    """
    options = options or PresenterOptions()
    if not deck_path:
        deck_path = default_deck_path(deck_id)

    page = _PAGE_TEMPLATE.substitute(
        title=html.escape(deck_id),
        css=_read_static("presenter.css"),
        deck_id=script_literal(deck_id),
        deck_path=script_literal(deck_path),
        slide_width=int(options.slide_width),
        slide_height=int(options.slide_height),
        build_ms=int(options.build_duration_ms),
        build_css=script_literal(_read_static("slide_build.css")),
        build_handler=script_literal(_read_static("slide_build.js")),
        presenter_js=_read_static("presenter.js"),
    )

    size = len(page.encode("utf-8"))
    if size > MAX_PRESENTER_PAGE_BYTES:
        raise PresenterPageError(
            f"Presenter page for '{deck_id}' is {size} bytes, above the {MAX_PRESENTER_PAGE_BYTES} byte limit"
        )
    return page
