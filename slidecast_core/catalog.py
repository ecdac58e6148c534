"""
Deck discovery on disk.

Decks live under ``<workspace>/output/<slug>/`` and carry a ``plan.yaml``;
slide files sit in the deck's ``slides/`` folder. Discovery mirrors the
presenter page: manifest first, sequential ``slide-N.html`` probing second.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from slidecast_core.manifest import MANIFEST_FILENAME, ManifestError, load_manifest
from slidecast_core.navigation import SlideDeck

logger = logging.getLogger(__name__)

PLAN_FILENAME = "plan.yaml"
SLIDES_DIRNAME = "slides"


class DeckNotFoundError(LookupError):
    """No deck (or no slide of a deck) could be found."""


@dataclass
class DeckInfo:
    slug: str
    path: Path
    mtime: float

    def relative_path(self, workspace_root: Path) -> str:
        """Deck path relative to the workspace, with forward slashes (used in URLs)."""
        return self.path.resolve().relative_to(Path(workspace_root).resolve()).as_posix()


def find_decks(workspace_root: Path, deck_dir: str = "output") -> List[DeckInfo]:
    """List decks under ``workspace_root/deck_dir``, newest first."""
    output_dir = Path(workspace_root) / deck_dir
    if not output_dir.is_dir():
        return []

    decks = []
    for entry in output_dir.iterdir():
        if entry.is_dir() and (entry / PLAN_FILENAME).exists():
            decks.append(DeckInfo(slug=entry.name, path=entry, mtime=entry.stat().st_mtime))
    decks.sort(key=lambda d: d.mtime, reverse=True)
    return decks


def select_deck(workspace_root: Path, slug: Optional[str] = None, deck_dir: str = "output") -> DeckInfo:
    """
    Pick the deck to present.

    With an explicit slug, the deck folder must exist (``plan.yaml`` is not
    required). Without one, the only deck is auto-selected.

    Raises:
        DeckNotFoundError: No matching deck, or several candidates without a slug
    """
    if slug:
        path = Path(workspace_root) / deck_dir / slug
        if not path.is_dir():
            raise DeckNotFoundError(f"Output folder not found: {path}")
        return DeckInfo(slug=slug, path=path, mtime=path.stat().st_mtime)

    decks = find_decks(workspace_root, deck_dir)
    if not decks:
        raise DeckNotFoundError(f"No decks found in {deck_dir}/ directory.")
    if len(decks) > 1:
        names = ", ".join(d.slug for d in decks)
        raise DeckNotFoundError(f"Multiple decks found, please specify which deck: {names}")
    return decks[0]


def probe_slides(slides_dir: Path) -> List[str]:
    """Sequential ``slide-1.html``, ``slide-2.html``... up to the first gap."""
    files = []
    n = 1
    while (slides_dir / f"slide-{n}.html").is_file():
        files.append(f"slide-{n}.html")
        n += 1
    return files


def discover_slides(deck_path: Path) -> SlideDeck:
    """
    Build the slide list of a deck.

    Raises:
        DeckNotFoundError: Neither the manifest nor probing yields any slide
    """
    slides_dir = Path(deck_path) / SLIDES_DIRNAME
    try:
        manifest = load_manifest(slides_dir / MANIFEST_FILENAME)
        return SlideDeck(
            files=manifest.filenames,
            titles=manifest.titles,
            groups=manifest.slide_groups(),
            source="manifest",
        )
    except ManifestError as e:
        logger.info(f"{e}; probing slide files instead")

    files = probe_slides(slides_dir)
    if not files:
        raise DeckNotFoundError(f"No slides found in {slides_dir}")
    return SlideDeck(
        files=files,
        titles=[f"Slide {n}" for n in range(1, len(files) + 1)],
        groups=[[] for _ in files],
        source="probe",
    )
