"""
Presenter navigation state machine
==================================

Python model of the slide navigation and build-step logic run by the
presenter page in the browser (``slidecast_web/static/presenter.js``).
It drives the ``slidecast outline`` walkthrough and pins the playback
semantics in tests.

State:
    current_slide       1-based, within [1, total]
    current_build_step  within [0, group count of the current slide]

Groups ``[0, current_build_step)`` of the current slide are revealed and the
remaining ones hidden, after every operation.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from slidecast_core.manifest import AnimationGroup

logger = logging.getLogger(__name__)


class CommandType(str, Enum):
    """Messages posted into a loaded slide document."""
    HIDE = "buildHideElements"
    REVEAL = "buildRevealElements"
    SHOW_ALL = "buildShowAll"


class ElementState(str, Enum):
    HIDDEN = "build-hidden"
    REVEALING = "build-revealing"
    VISIBLE = "build-visible"


@dataclass(frozen=True)
class BuildCommand:
    type: CommandType
    element_ids: Tuple[str, ...] = ()

    def to_message(self) -> Dict[str, object]:
        return {"type": self.type.value, "elementIds": list(self.element_ids)}


@dataclass
class SlideDeck:
    """Discovered slides of a deck."""
    files: List[str]
    titles: List[str]
    groups: List[List[AnimationGroup]] = field(default_factory=list)
    source: str = "manifest"

    @property
    def total(self) -> int:
        return len(self.files)

    def groups_for(self, n: int) -> List[AnimationGroup]:
        if n < 1 or n > len(self.groups):
            return []
        return self.groups[n - 1]


class DeckNavigator:
    """
    Slide navigation and build stepping for one deck.

    Every ``go_to_slide`` issues an existence check tagged with a token. With
    an ``exists`` callable the check completes immediately; otherwise the
    caller resolves it later through ``complete_check``. Results for a token
    that is no longer current are discarded.

    Args:
        deck: Slides to present
        exists: Optional ``filename -> bool`` used to resolve checks synchronously
    """

    def __init__(self, deck: SlideDeck, exists: Optional[Callable[[str], bool]] = None):
        self.deck = deck
        self.exists = exists
        self.current_slide = 1
        self.current_build_step = 0
        self.loaded_slide: Optional[int] = None
        self.not_found = False
        self.fullscreen = False
        self.commands: List[BuildCommand] = []
        self.element_states: Dict[str, ElementState] = {}
        self._token = 0
        self._pending_reveal_all = False

    @property
    def total_slides(self) -> int:
        return self.deck.total

    @property
    def loaded_file(self) -> Optional[str]:
        """File shown in the display surface; None stands for a blank frame."""
        if self.loaded_slide is None:
            return None
        return self.deck.files[self.loaded_slide - 1]

    def active_groups(self) -> List[AnimationGroup]:
        """Groups of the current slide once its document is loaded."""
        if self.loaded_slide != self.current_slide:
            return []
        return self.deck.groups_for(self.current_slide)

    @property
    def group_count(self) -> int:
        return len(self.active_groups())

    @property
    def revealed_groups(self) -> List[int]:
        return list(range(self.current_build_step))

    @property
    def counter_text(self) -> str:
        groups = self.group_count
        text = f"{self.current_slide} / {self.total_slides}"
        if groups > 0 and self.current_build_step < groups:
            text += f" [{self.current_build_step}/{groups}]"
        return text

    # -------------------------------------------------------------------------
    # Navigation
    # -------------------------------------------------------------------------

    def go_to_slide(self, n: int, reveal_all: bool = False) -> Optional[int]:
        """
        Target slide ``n``; out-of-range targets are ignored.

        Returns:
            The check token, or None when the target was ignored
        """
        if n < 1 or n > self.total_slides:
            return None
        self.current_slide = n
        self.current_build_step = 0
        self.loaded_slide = None
        self._token += 1
        self._pending_reveal_all = reveal_all
        token = self._token
        if self.exists is not None:
            self.complete_check(token, self.exists(self.deck.files[n - 1]))
        return token

    def complete_check(self, token: int, exists: bool) -> bool:
        """
        Apply the result of an existence check.

        Returns:
            False if the result was stale and discarded
        """
        if token != self._token:
            logger.debug(f"Discarding stale check {token} (current {self._token})")
            return False
        if not exists:
            self.loaded_slide = None
            self.not_found = True
            self.element_states = {}
            return True
        self.not_found = False
        self.loaded_slide = self.current_slide
        self.element_states = {}
        self._on_slide_loaded(self._pending_reveal_all)
        return True

    def _on_slide_loaded(self, reveal_all: bool) -> None:
        groups = self.active_groups()
        if not groups:
            return
        if reveal_all:
            self._send(BuildCommand(CommandType.SHOW_ALL))
            self.current_build_step = len(groups)
        else:
            all_ids = tuple(i for g in groups for i in g.element_ids)
            self._send(BuildCommand(CommandType.HIDE, all_ids))
            self.current_build_step = 0

    # -------------------------------------------------------------------------
    # Build stepping
    # -------------------------------------------------------------------------

    def step_forward(self) -> bool:
        """Reveal the next group; False when every group is already revealed."""
        groups = self.active_groups()
        if self.current_build_step >= len(groups):
            return False
        self._send(BuildCommand(CommandType.REVEAL, tuple(groups[self.current_build_step].element_ids)))
        self.current_build_step += 1
        return True

    def step_backward(self) -> bool:
        """Hide the last revealed group; False when nothing is revealed."""
        groups = self.active_groups()
        if self.current_build_step <= 0 or not groups:
            return False
        self.current_build_step -= 1
        self._send(BuildCommand(CommandType.HIDE, tuple(groups[self.current_build_step].element_ids)))
        return True

    def forward(self) -> None:
        if not self.step_forward() and self.current_slide < self.total_slides:
            self.go_to_slide(self.current_slide + 1)

    def backward(self) -> None:
        if not self.step_backward() and self.current_slide > 1:
            self.go_to_slide(self.current_slide - 1, reveal_all=True)

    def home(self) -> None:
        self.go_to_slide(1, reveal_all=True)

    def end(self) -> None:
        self.go_to_slide(self.total_slides, reveal_all=True)

    # -------------------------------------------------------------------------
    # Input
    # -------------------------------------------------------------------------

    def handle_key(self, key: str) -> bool:
        """Dispatch a ``KeyboardEvent.key`` value; returns True if handled."""
        if key in ("ArrowRight", " "):
            self.forward()
        elif key == "ArrowLeft":
            self.backward()
        elif key == "Home":
            self.home()
        elif key == "End":
            self.end()
        elif key in ("f", "F"):
            self.fullscreen = not self.fullscreen
        elif key == "Escape":
            self.fullscreen = False
        elif len(key) == 1 and "1" <= key <= "9":
            num = int(key)
            if num <= self.total_slides:
                self.go_to_slide(num, reveal_all=True)
        else:
            return False
        return True

    def click(self, button: int = 0) -> bool:
        """Primary click in the main area; only acts in fullscreen."""
        if not self.fullscreen or button != 0:
            return False
        self.forward()
        return True

    def _send(self, command: BuildCommand) -> None:
        self.commands.append(command)
        if command.type is CommandType.SHOW_ALL:
            for group in self.deck.groups_for(self.current_slide):
                for element_id in group.element_ids:
                    self.element_states[element_id] = ElementState.VISIBLE
            return
        state = ElementState.VISIBLE if command.type is CommandType.REVEAL else ElementState.HIDDEN
        for element_id in command.element_ids:
            self.element_states[element_id] = state
