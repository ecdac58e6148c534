"""
SlideCast Presenter Router - fullscreen presenter page

    GET /present/{deck_id}[/]?deckPath=<path relative to workspace root>

Without ``deckPath`` the deck is expected under ``output/{deck_id}``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, Response

from slidecast_web.presenter_page import (
    PresenterPageError,
    default_deck_path,
    render_presenter_page,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/present", tags=["presenter"])


@router.api_route("/{deck_id}", methods=["GET", "HEAD"], response_class=HTMLResponse)
@router.api_route("/{deck_id}/", methods=["GET", "HEAD"], response_class=HTMLResponse, include_in_schema=False)
def presenter_page(
    request: Request,
    deck_id: str,
    deck_path: Optional[str] = Query(None, alias="deckPath"),
) -> Response:
    """Serve the generated presenter for a deck."""
    settings = request.app.state.presenter
    if not deck_path:
        deck_path = default_deck_path(deck_id, settings.default_deck_dir)

    try:
        page = render_presenter_page(deck_id, deck_path, request.app.state.presenter_options)
    except PresenterPageError as e:
        logger.error(str(e))
        return PlainTextResponse("Internal Server Error", status_code=500)

    return HTMLResponse(content=page, headers={"Cache-Control": "no-store"})
