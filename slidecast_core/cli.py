#!/usr/bin/env python3
"""
SlideCast Command Line Interface
================================

Usage:
    slidecast serve [deck]     Start the presenter server and open a deck
    slidecast decks            List decks of the workspace
    slidecast outline <deck>   Show slides and build steps of a deck
    slidecast config           Show current configuration
"""

import argparse
import sys
import time
import logging
from pathlib import Path
from typing import List, Optional

from slidecast_core.catalog import DeckNotFoundError, discover_slides, find_decks, select_deck
from slidecast_core.config import SlideCastConfig, config_to_dict, load_config, setup_logging
from slidecast_core.navigation import DeckNavigator
from slidecast_core.ports import NoPortAvailableError
from slidecast_core.version import get_short_banner

logger = logging.getLogger(__name__)


# =============================================================================
# ANSI Colors
# =============================================================================

class Colors:
    """ANSI color codes for terminal output."""
    RED = '\033[0;31m'
    GREEN = '\033[0;32m'
    YELLOW = '\033[1;33m'
    BLUE = '\033[0;34m'
    CYAN = '\033[0;36m'
    BOLD = '\033[1m'
    NC = '\033[0m'  # No Color

    @classmethod
    def disable(cls):
        """Disable colors (for non-TTY output)."""
        cls.RED = cls.GREEN = cls.YELLOW = cls.BLUE = ''
        cls.CYAN = cls.BOLD = cls.NC = ''


def print_ok(msg: str) -> None:
    print(f"{Colors.GREEN}✓{Colors.NC} {msg}")


def print_warn(msg: str) -> None:
    print(f"{Colors.YELLOW}⚠{Colors.NC} {msg}")


def print_error(msg: str) -> None:
    print(f"{Colors.RED}✗{Colors.NC} {msg}", file=sys.stderr)


def print_info(msg: str) -> None:
    print(f"{Colors.BLUE}ℹ{Colors.NC} {msg}")


def print_header(msg: str) -> None:
    print(f"\n{Colors.BOLD}{Colors.CYAN}{msg}{Colors.NC}")
    print("=" * len(msg))


def _workspace_root(args: argparse.Namespace, config: SlideCastConfig) -> Path:
    return Path(args.root or config.workspace_root).expanduser().resolve()


# =============================================================================
# Commands
# =============================================================================

def cmd_serve(args: argparse.Namespace) -> int:
    """Start the presenter server for a deck and block until interrupted."""
    from slidecast_web.server import PresentServerHost

    config: SlideCastConfig = args.config
    if args.port_start:
        config.server.port_range_start = args.port_start
        config.server.port_range_end = max(config.server.port_range_end, args.port_start)
    root = _workspace_root(args, config)

    try:
        deck = select_deck(root, args.deck, config.presenter.default_deck_dir)
    except DeckNotFoundError as e:
        print_error(str(e))
        return 1

    host = PresentServerHost(config)
    server = host.get_instance(root)
    try:
        server.ensure_running()
    except (NoPortAvailableError, OSError, RuntimeError) as e:
        print_error(f"Failed to start presentation server: {e}")
        return 1

    url = server.url_for(deck.slug, deck.relative_path(root))
    print_header(get_short_banner())
    print_ok(f"Serving deck: {deck.slug}")
    print_info(f"From: {deck.path}")
    print_info(f"Open: {url}")
    print("\nPress Ctrl+C to stop\n")
    logger.info(f"Opened presenter for '{deck.slug}' at {url}")

    if not args.no_browser:
        import webbrowser
        webbrowser.open(url)

    try:
        while server.is_running:
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass
    finally:
        host.stop_if_running()
    return 0


def cmd_decks(args: argparse.Namespace) -> int:
    """List decks under the workspace output directory."""
    config: SlideCastConfig = args.config
    root = _workspace_root(args, config)
    decks = find_decks(root, config.presenter.default_deck_dir)

    print_header(f"Decks in {root / config.presenter.default_deck_dir}")
    if not decks:
        print_warn("No decks found")
        return 1
    for deck in decks:
        print(f"  {deck.slug}")
    return 0


def outline_lines(navigator: DeckNavigator) -> List[str]:
    """Walk a deck from the first slide to the end, one line per step."""
    lines = []
    navigator.go_to_slide(1)
    while True:
        slide = navigator.current_slide
        title = navigator.deck.titles[slide - 1]
        if navigator.not_found:
            lines.append(f"{navigator.counter_text:<16} {title}  (missing: {navigator.deck.files[slide - 1]})")
        else:
            revealed = [i for g in navigator.active_groups()[:navigator.current_build_step] for i in g.element_ids]
            detail = f"  revealed: {', '.join(revealed)}" if revealed else ""
            lines.append(f"{navigator.counter_text:<16} {title}{detail}")

        before = (navigator.current_slide, navigator.current_build_step)
        navigator.forward()
        if (navigator.current_slide, navigator.current_build_step) == before:
            break
    return lines


def cmd_outline(args: argparse.Namespace) -> int:
    """Print the slides and build steps of a deck, in playback order."""
    config: SlideCastConfig = args.config
    root = _workspace_root(args, config)

    try:
        deck_info = select_deck(root, args.deck, config.presenter.default_deck_dir)
        deck = discover_slides(deck_info.path)
    except DeckNotFoundError as e:
        print_error(str(e))
        return 1

    slides_dir = deck_info.path / "slides"
    navigator = DeckNavigator(deck, exists=lambda name: (slides_dir / name).is_file())

    print_header(f"{deck_info.slug}: {deck.total} slides (from {deck.source})")
    for line in outline_lines(navigator):
        print(f"  {line}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Show current configuration."""
    import yaml

    print_header("SlideCast Configuration")
    print(yaml.safe_dump(config_to_dict(args.config), default_flow_style=False, sort_keys=False))
    return 0


# =============================================================================
# Entry point
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="slidecast",
        description="SlideCast - present generated slide decks from a local server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  slidecast serve                 Present the only deck in output/
  slidecast serve my-deck         Present output/my-deck
  slidecast outline my-deck       Show slides and build steps
        """
    )
    parser.add_argument("--config-file", type=Path, help="Path to slidecast.yaml")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve
    sub = subparsers.add_parser("serve", help="Start the presenter server")
    sub.add_argument("deck", nargs="?", help="Deck slug (auto-detected when only one exists)")
    sub.add_argument("--root", help="Workspace root (default: config workspace_root)")
    sub.add_argument("--port-start", type=int, help="First port of the probe range")
    sub.add_argument("--no-browser", action="store_true", help="Don't open browser automatically")
    sub.set_defaults(func=cmd_serve)

    # decks
    sub = subparsers.add_parser("decks", help="List decks")
    sub.add_argument("--root", help="Workspace root")
    sub.set_defaults(func=cmd_decks)

    # outline
    sub = subparsers.add_parser("outline", help="Show slides and build steps of a deck")
    sub.add_argument("deck", nargs="?", help="Deck slug (auto-detected when only one exists)")
    sub.add_argument("--root", help="Workspace root")
    sub.set_defaults(func=cmd_outline)

    # config
    sub = subparsers.add_parser("config", help="Show current configuration")
    sub.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    if not sys.stdout.isatty():
        Colors.disable()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    args.config = load_config(args.config_file)
    if args.verbose:
        args.config.logging.level = "DEBUG"
    setup_logging(args.config.logging)

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
