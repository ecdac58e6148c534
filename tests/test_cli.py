"""
Tests for the slidecast command line
"""

import pytest

from slidecast_core import cli
from slidecast_core.catalog import discover_slides
from slidecast_core.navigation import DeckNavigator
from conftest import DECK_SLUG


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, temp_dir):
    """Keep a developer's slidecast.yaml or environment out of the tests."""
    for name in ("SLIDECAST_ROOT", "SLIDECAST_HOST", "SLIDECAST_PORT_START",
                 "SLIDECAST_PORT_END", "SLIDECAST_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(cli, "load_config", lambda path=None: cli.SlideCastConfig())


class TestOutline:

    def test_outline_lines(self, workspace):
        """Test the walkthrough visits every slide and build step."""
        deck_dir = workspace / "output" / DECK_SLUG
        slides = deck_dir / "slides"
        nav = DeckNavigator(discover_slides(deck_dir), exists=lambda name: (slides / name).is_file())
        lines = cli.outline_lines(nav)
        assert [line.split()[0:3] for line in lines] == [
            ["1", "/", "3"],
            ["2", "/", "3"],
            ["2", "/", "3"],
            ["2", "/", "3"],
            ["3", "/", "3"],
        ]
        assert "[0/2]" in lines[1]
        assert "revealed: b, c" in lines[2]
        assert "revealed: b, c, a" in lines[3]

    def test_outline_marks_missing_slide(self, workspace, capsys):
        """Test a slide listed in the manifest but absent on disk is flagged."""
        (workspace / "output" / DECK_SLUG / "slides" / "slide-3.html").unlink()
        assert cli.main(["outline", DECK_SLUG, "--root", str(workspace)]) == 0
        out = capsys.readouterr().out
        assert "missing: slide-3.html" in out

    def test_outline_unknown_deck(self, workspace, capsys):
        """Test an unknown deck exits with status 1."""
        assert cli.main(["outline", "nope", "--root", str(workspace)]) == 1
        assert "Output folder not found" in capsys.readouterr().err


class TestDecks:

    def test_lists_decks(self, workspace, capsys):
        """Test decks are printed by slug."""
        assert cli.main(["decks", "--root", str(workspace)]) == 0
        assert DECK_SLUG in capsys.readouterr().out

    def test_no_decks(self, temp_dir, capsys):
        """Test an empty workspace exits with status 1."""
        assert cli.main(["decks", "--root", str(temp_dir)]) == 1


class TestMisc:

    def test_no_command_prints_help(self, capsys):
        """Test running without a subcommand shows usage."""
        assert cli.main([]) == 0
        assert "serve" in capsys.readouterr().out

    def test_config_command(self, capsys):
        """Test the config command dumps YAML."""
        assert cli.main(["config"]) == 0
        out = capsys.readouterr().out
        assert "port_range_start: 52100" in out
        assert "host: 127.0.0.1" in out

    def test_serve_without_decks(self, temp_dir, capsys):
        """Test serve refuses to start when no deck can be selected."""
        assert cli.main(["serve", "--root", str(temp_dir), "--no-browser"]) == 1
        assert "No decks found" in capsys.readouterr().err


def test_version_banner():
    """Test the banner carries the package version."""
    from slidecast_core.version import get_short_banner, get_version
    assert get_version() in get_short_banner()
