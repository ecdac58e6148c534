"""
Deck manifest models.

A deck may ship ``slides/manifest.json`` describing slide order, titles and
build animation groups::

    {
      "slides": [
        {"number": 1, "filename": "slide-1.html", "title": "Intro",
         "animations": {"groups": [{"order": 0, "elementIds": ["a", "b"]}]}}
      ]
    }

Slides are addressed by filename (``filename`` or legacy ``file``), never by
position, because filenames may be non-contiguous.
"""

import json
import math
import logging
from pathlib import Path
from typing import Any, List, Optional, Set

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


class ManifestError(ValueError):
    """Manifest is missing, unreadable or structurally invalid."""


class AnimationGroup(BaseModel):
    """One atomic reveal/hide step within a slide."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    order: float = 0
    element_ids: List[str] = Field(default_factory=list, alias="elementIds")

    @field_validator("order", mode="before")
    @classmethod
    def _order_must_be_number(cls, value: Any) -> Any:
        # Anything but a finite JSON number sorts as 0, as in the browser client
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return 0
        return value


class SlideAnimations(BaseModel):
    model_config = ConfigDict(extra="ignore")

    groups: List[AnimationGroup] = Field(default_factory=list)

    @field_validator("groups", mode="before")
    @classmethod
    def _groups_must_be_list(cls, value: Any) -> Any:
        # Same leniency as the browser client: a malformed groups field means no groups
        return value if isinstance(value, list) else []


class SlideEntry(BaseModel):
    """A single slide descriptor."""
    model_config = ConfigDict(extra="ignore")

    number: Optional[int] = None
    filename: Optional[str] = None
    file: Optional[str] = None
    title: Optional[str] = None
    animations: Optional[SlideAnimations] = None

    @property
    def resolved_filename(self) -> Optional[str]:
        return self.filename or self.file

    def display_title(self, position: int) -> str:
        """Title shown in the sidebar; ``position`` is 1-based."""
        if self.title:
            return self.title
        return f"Slide {self.number if self.number is not None else position}"


class Manifest(BaseModel):
    """Deck manifest: an ordered, non-empty list of slides."""
    model_config = ConfigDict(extra="ignore")

    slides: List[SlideEntry]

    @model_validator(mode="after")
    def _check_slides(self) -> "Manifest":
        if not self.slides:
            raise ValueError("manifest lists no slides")
        for position, slide in enumerate(self.slides, 1):
            if not slide.resolved_filename:
                raise ValueError(f"slide #{position} has no filename")
        return self

    @property
    def filenames(self) -> List[str]:
        return [slide.resolved_filename for slide in self.slides]

    @property
    def titles(self) -> List[str]:
        return [slide.display_title(i) for i, slide in enumerate(self.slides, 1)]

    def slide_groups(self) -> List[List[AnimationGroup]]:
        """Sorted, de-duplicated animation groups for every slide."""
        result = []
        for slide in self.slides:
            groups = slide.animations.groups if slide.animations else []
            result.append(sort_animation_groups(groups, slide.resolved_filename))
        return result


def sort_animation_groups(groups: List[AnimationGroup], slide: Optional[str] = None) -> List[AnimationGroup]:
    """
    Order groups by ``order`` and give every element a single owning group.

    The sort is stable, so groups with equal ``order`` keep their manifest
    position. An element id listed in several groups stays in the first one
    (after sorting) and is dropped from the others.

    Args:
        groups: Groups as listed in the manifest
        slide: Slide filename, only used for log messages

    Returns:
        New list of groups in playback order
    """
    ordered = sorted(groups, key=lambda g: g.order)
    seen: Set[str] = set()
    result = []
    for group in ordered:
        kept = []
        for element_id in group.element_ids:
            if element_id in seen:
                logger.warning(f"Element '{element_id}' appears in several build groups of {slide or 'slide'}; keeping the first")
                continue
            seen.add(element_id)
            kept.append(element_id)
        result.append(AnimationGroup(order=group.order, element_ids=kept))
    return result


def parse_manifest(data: Any) -> Manifest:
    """Validate already-decoded manifest JSON."""
    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        raise ManifestError(f"Invalid manifest: {e.error_count()} error(s): {e.errors()[0]['msg']}") from e


def load_manifest(path: Path) -> Manifest:
    """
    Read and validate a manifest file.

    Raises:
        ManifestError: If the file is absent, not JSON or structurally invalid
    """
    path = Path(path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise ManifestError(f"Manifest not found: {path}") from e
    except (OSError, json.JSONDecodeError) as e:
        raise ManifestError(f"Manifest unreadable: {path}: {e}") from e
    return parse_manifest(data)
