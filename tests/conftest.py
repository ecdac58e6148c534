"""
Pytest Configuration and Fixtures
"""

import json
import socket
import sys
import tempfile
from pathlib import Path
from typing import Generator, Dict, Any

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from slidecast_core.config import ServerConfig, SlideCastConfig


DECK_SLUG = "my-deck"


def slide_html(n: int, element_ids=()) -> str:
    """Minimal slide document with optional build elements."""
    elements = "\n".join(f'    <p id="{eid}">{eid}</p>' for eid in element_ids)
    return f"""<!DOCTYPE html>
<html>
<head><title>Slide {n}</title></head>
<body>
  <h1 contenteditable="true">Slide {n}</h1>
{elements}
</body>
</html>
"""


def free_port_range(size: int = 10) -> ServerConfig:
    """A server section whose port range starts at an OS-assigned free port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        start = s.getsockname()[1]
    end = min(start + size - 1, 65535)
    return ServerConfig(port_range_start=start, port_range_end=end, startup_timeout=10.0)


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_manifest() -> Dict[str, Any]:
    """Three-slide manifest; slide 2 has two build groups listed out of order."""
    return {
        "slides": [
            {"number": 1, "filename": "slide-1.html", "title": "Introduction"},
            {
                "number": 2,
                "filename": "slide-2.html",
                "title": "Architecture",
                "animations": {
                    "groups": [
                        {"order": 1, "elementIds": ["a"]},
                        {"order": 0, "elementIds": ["b", "c"]},
                    ]
                },
            },
            {"number": 3, "filename": "slide-3.html"},
        ]
    }


@pytest.fixture
def workspace(temp_dir: Path, sample_manifest: Dict[str, Any]) -> Path:
    """
    Workspace with one deck::

        output/my-deck/plan.yaml
        output/my-deck/slides/{manifest.json, slide-1..3.html}
        .slide-builder/config/theme.json
    """
    deck = temp_dir / "output" / DECK_SLUG
    slides = deck / "slides"
    slides.mkdir(parents=True)
    (deck / "plan.yaml").write_text("title: My Deck\n")
    (slides / "manifest.json").write_text(json.dumps(sample_manifest))
    (slides / "slide-1.html").write_text(slide_html(1))
    (slides / "slide-2.html").write_text(slide_html(2, ["a", "b", "c"]))
    (slides / "slide-3.html").write_text(slide_html(3))

    assets = temp_dir / ".slide-builder" / "config"
    assets.mkdir(parents=True)
    (assets / "theme.json").write_text('{"primary": "#d4e94c"}')
    return temp_dir


@pytest.fixture
def server_config() -> SlideCastConfig:
    """Configuration whose port range is free at fixture time."""
    return SlideCastConfig(server=free_port_range())
