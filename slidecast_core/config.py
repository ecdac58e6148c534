"""
SlideCast Unified Configuration System
======================================

Loads and manages configuration from slidecast.yaml with environment variable overrides.
"""

import os
import yaml
import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any

logger = logging.getLogger(__name__)

LOOPBACK_HOSTS = ("127.0.0.1", "localhost")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# =============================================================================
# Configuration Data Classes
# =============================================================================

@dataclass
class ServerConfig:
    """Embedded HTTP server configuration."""
    host: str = "127.0.0.1"
    port_range_start: int = 52100
    port_range_end: int = 52199  # inclusive, 100 ports
    startup_timeout: float = 5.0


@dataclass
class PresenterConfig:
    """Presenter page configuration."""
    slide_width: int = 1920
    slide_height: int = 1080
    build_duration_ms: int = 400
    default_deck_dir: str = "output"


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s %(name)s %(levelname)s %(message)s"


@dataclass
class SlideCastConfig:
    """Root configuration container."""
    server: ServerConfig = field(default_factory=ServerConfig)
    presenter: PresenterConfig = field(default_factory=PresenterConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    workspace_root: str = "."


# =============================================================================
# Configuration Loader
# =============================================================================

def find_config_file(start_path: Optional[Path] = None) -> Optional[Path]:
    """
    Find slidecast.yaml by searching upward from start_path.

    Search order:
    1. start_path / slidecast.yaml
    2. start_path / .slidecast / slidecast.yaml
    3. Parent directories (recursive)
    4. ~/.config/slidecast/slidecast.yaml

    Args:
        start_path: Starting directory (defaults to cwd)

    Returns:
        Path to config file or None if not found
    """
    if start_path is None:
        start_path = Path.cwd()

    current = Path(start_path).resolve()
    for _ in range(10):  # Max 10 levels up
        for candidate in (current / "slidecast.yaml", current / ".slidecast" / "slidecast.yaml"):
            if candidate.exists():
                return candidate

        parent = current.parent
        if parent == current:
            break
        current = parent

    user_config = Path.home() / ".config" / "slidecast" / "slidecast.yaml"
    if user_config.exists():
        return user_config

    return None


def load_config(config_path: Optional[Path] = None) -> SlideCastConfig:
    """
    Load configuration from YAML file with environment variable overrides.

    Environment variables override config file values:
    - SLIDECAST_ROOT -> workspace_root
    - SLIDECAST_HOST -> server.host
    - SLIDECAST_PORT_START -> server.port_range_start
    - SLIDECAST_PORT_END -> server.port_range_end
    - SLIDECAST_LOG_LEVEL -> logging.level

    Args:
        config_path: Path to config file (auto-detected if None)

    Returns:
        SlideCastConfig instance
    """
    config = SlideCastConfig()

    if config_path is None:
        config_path = find_config_file()

    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        try:
            with open(config_path, 'r') as f:
                data = yaml.safe_load(f) or {}
            config = _parse_config_dict(data)
        except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load config: {e}, using defaults")
    else:
        logger.debug("No config file found, using defaults")

    config = _apply_env_overrides(config)
    _validate_config(config)

    return config


def _parse_config_dict(data: Dict[str, Any]) -> SlideCastConfig:
    """Parse configuration dictionary into SlideCastConfig."""
    config = SlideCastConfig()

    if "server" in data:
        server = data["server"]
        config.server = ServerConfig(
            host=server.get("host", config.server.host),
            port_range_start=server.get("port_range_start", config.server.port_range_start),
            port_range_end=server.get("port_range_end", config.server.port_range_end),
            startup_timeout=server.get("startup_timeout", config.server.startup_timeout),
        )

    if "presenter" in data:
        presenter = data["presenter"]
        config.presenter = PresenterConfig(
            slide_width=presenter.get("slide_width", config.presenter.slide_width),
            slide_height=presenter.get("slide_height", config.presenter.slide_height),
            build_duration_ms=presenter.get("build_duration_ms", config.presenter.build_duration_ms),
            default_deck_dir=presenter.get("default_deck_dir", config.presenter.default_deck_dir),
        )

    if "logging" in data:
        log = data["logging"]
        config.logging = LoggingConfig(
            level=log.get("level", config.logging.level),
            format=log.get("format", config.logging.format),
        )

    config.workspace_root = data.get("workspace_root", config.workspace_root)

    return config


def _apply_env_overrides(config: SlideCastConfig) -> SlideCastConfig:
    """Apply environment variable overrides to config."""

    if os.environ.get("SLIDECAST_ROOT"):
        config.workspace_root = os.environ["SLIDECAST_ROOT"]

    if os.environ.get("SLIDECAST_HOST"):
        config.server.host = os.environ["SLIDECAST_HOST"]

    for env_name, attr in (("SLIDECAST_PORT_START", "port_range_start"),
                           ("SLIDECAST_PORT_END", "port_range_end")):
        value = os.environ.get(env_name)
        if value:
            try:
                setattr(config.server, attr, int(value))
            except ValueError:
                logger.warning(f"Ignoring non-integer {env_name}={value!r}")

    if os.environ.get("SLIDECAST_LOG_LEVEL"):
        config.logging.level = os.environ["SLIDECAST_LOG_LEVEL"]

    return config


def _validate_config(config: SlideCastConfig) -> None:
    """Validate configuration and log warnings."""
    defaults = ServerConfig()

    # The server is never reachable from other machines
    if config.server.host not in LOOPBACK_HOSTS:
        logger.warning(f"Host '{config.server.host}' is not a loopback address, using 127.0.0.1")
        config.server.host = defaults.host

    start, end = config.server.port_range_start, config.server.port_range_end
    if not (isinstance(start, int) and isinstance(end, int) and 1 <= start <= end <= 65535):
        logger.warning(f"Invalid port range {start}-{end}, using {defaults.port_range_start}-{defaults.port_range_end}")
        config.server.port_range_start = defaults.port_range_start
        config.server.port_range_end = defaults.port_range_end

    level = str(config.logging.level).upper()
    if level not in VALID_LOG_LEVELS:
        logger.warning(f"Unknown log level '{config.logging.level}', defaulting to 'INFO'")
        level = "INFO"
    config.logging.level = level


def config_to_dict(config: SlideCastConfig) -> Dict[str, Any]:
    """Flatten a configuration into plain data (for display or YAML dumps)."""
    return {
        "workspace_root": config.workspace_root,
        "server": {
            "host": config.server.host,
            "port_range_start": config.server.port_range_start,
            "port_range_end": config.server.port_range_end,
            "startup_timeout": config.server.startup_timeout,
        },
        "presenter": {
            "slide_width": config.presenter.slide_width,
            "slide_height": config.presenter.slide_height,
            "build_duration_ms": config.presenter.build_duration_ms,
            "default_deck_dir": config.presenter.default_deck_dir,
        },
        "logging": {
            "level": config.logging.level,
            "format": config.logging.format,
        },
    }


def setup_logging(config: LoggingConfig) -> None:
    """Configure root logging from the logging section."""
    logging.basicConfig(level=getattr(logging, config.level, logging.INFO), format=config.format)


# =============================================================================
# Global Config Instance
# =============================================================================

_global_config: Optional[SlideCastConfig] = None


def get_config() -> SlideCastConfig:
    """Get the global configuration instance (lazy-loaded)."""
    global _global_config
    if _global_config is None:
        _global_config = load_config()
    return _global_config


def reload_config(config_path: Optional[Path] = None) -> SlideCastConfig:
    """Reload configuration from file."""
    global _global_config
    _global_config = load_config(config_path)
    return _global_config
