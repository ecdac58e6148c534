"""
SlideCast Core - configuration, port allocation, deck discovery and navigation
"""

from .version import __version__
from .config import SlideCastConfig, get_config, load_config
from .ports import NoPortAvailableError, find_available_port, is_port_available
from .manifest import AnimationGroup, Manifest, ManifestError, load_manifest, sort_animation_groups
from .navigation import BuildCommand, CommandType, DeckNavigator, SlideDeck
from .catalog import DeckInfo, DeckNotFoundError, discover_slides, find_decks, select_deck

__all__ = [
    "__version__",
    "SlideCastConfig",
    "get_config",
    "load_config",
    "NoPortAvailableError",
    "find_available_port",
    "is_port_available",
    "AnimationGroup",
    "Manifest",
    "ManifestError",
    "load_manifest",
    "sort_animation_groups",
    "BuildCommand",
    "CommandType",
    "DeckNavigator",
    "SlideDeck",
    "DeckInfo",
    "DeckNotFoundError",
    "discover_slides",
    "find_decks",
    "select_deck",
]
