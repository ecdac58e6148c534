"""
SlideCast Files Router - static slide and asset serving

Routes:
    /output/...          slide HTML, manifests, deck assets
    /.slide-builder/...  brand assets and workspace configuration

Every successful response carries ``Cache-Control: no-store`` so rebuilt
slides show up on a plain reload.
"""

import logging
from pathlib import Path
from urllib.parse import unquote

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, Response

logger = logging.getLogger(__name__)

router = APIRouter(tags=["files"])

ALLOWED_METHODS = ("GET", "HEAD")
NO_STORE = {"Cache-Control": "no-store"}

MIME_TYPES = {
    ".html": "text/html; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def guess_mime_type(path: Path) -> str:
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def plain_error(status_code: int, message: str) -> PlainTextResponse:
    return PlainTextResponse(message, status_code=status_code)


def contains_traversal(raw_target: str) -> bool:
    """True if the request target holds ``..``, as received or percent-decoded."""
    return ".." in raw_target or ".." in unquote(raw_target)


def raw_request_target(request: Request) -> str:
    """Request target exactly as sent on the wire (path plus query)."""
    raw_path = request.scope.get("raw_path") or request.scope["path"].encode("utf-8")
    target = raw_path.decode("latin-1")
    query = request.scope.get("query_string", b"")
    if query:
        target += "?" + query.decode("latin-1")
    return target


async def request_guard(request: Request, call_next):
    """
    First gate for every request.

    Rejects methods other than GET/HEAD with 405, then rejects any target
    containing ``..`` with 403 before routing or path resolution can
    normalize the segments away.
    """
    if request.method not in ALLOWED_METHODS:
        return plain_error(405, "Method Not Allowed")

    if contains_traversal(raw_request_target(request)):
        logger.warning(f"Rejected traversal attempt: {raw_request_target(request)!r}")
        return plain_error(403, "Forbidden")

    return await call_next(request)


def resolve_within_root(root: Path, pathname: str) -> Path:
    """
    Map a decoded URL path onto the filesystem, inside ``root``.

    Raises:
        PermissionError: The canonical path escapes ``root``
    """
    root = root.resolve()
    try:
        resolved = (root / pathname.lstrip("/")).resolve()
    except (ValueError, OSError) as e:
        raise PermissionError(f"Unresolvable path: {pathname!r}") from e
    if resolved != root and not resolved.is_relative_to(root):
        raise PermissionError(f"Path escapes workspace root: {pathname!r}")
    return resolved


def serve_file(request: Request) -> Response:
    """
    Serve a file from the workspace root.

    HEAD answers with the same headers as GET (size taken from ``stat``)
    and no body. Missing files are 404; any other read failure is logged
    and answered with 500.
    """
    pathname = request.scope["path"]
    root: Path = request.app.state.workspace_root

    try:
        resolved = resolve_within_root(root, pathname)
    except PermissionError as e:
        logger.warning(str(e))
        return plain_error(403, "Forbidden")

    content_type = guess_mime_type(resolved)

    try:
        if resolved.is_dir():
            raise IsADirectoryError(f"Is a directory: '{resolved}'")
        if request.method == "HEAD":
            size = resolved.stat().st_size
            return Response(
                status_code=200,
                media_type=content_type,
                headers={**NO_STORE, "Content-Length": str(size)},
            )
        data = resolved.read_bytes()
    except FileNotFoundError:
        return plain_error(404, "Not Found")
    except OSError as e:
        logger.error(f"File read error for {pathname}: {e}")
        return plain_error(500, "Internal Server Error")

    return Response(content=data, media_type=content_type, headers=NO_STORE)


@router.api_route("/output/{file_path:path}", methods=list(ALLOWED_METHODS))
def serve_output_file(request: Request, file_path: str) -> Response:
    """Slides and deck content under output/."""
    return serve_file(request)


@router.api_route("/.slide-builder/{file_path:path}", methods=list(ALLOWED_METHODS))
def serve_workspace_asset(request: Request, file_path: str) -> Response:
    """Workspace-scoped assets under .slide-builder/."""
    return serve_file(request)
