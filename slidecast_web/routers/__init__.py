"""
SlideCast Web Routers

    files_router      static slide and asset serving (/output, /.slide-builder)
    presenter_router  generated presenter page (/present/{deck_id})
"""

from .files import router as files_router
from .presenter import router as presenter_router

__all__ = [
    "files_router",
    "presenter_router",
]
