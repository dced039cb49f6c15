"""Configuration file support for slippi-moves."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, cast

try:
    import tomllib  # pyright: ignore[reportMissingTypeStubs]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found,import-untyped]

from slippi_moves.techniques.registry import TechniqueRegistry


def get_xdg_data_home() -> Path:
    """$XDG_DATA_HOME, defaulting to ~/.local/share."""
    value = os.environ.get("XDG_DATA_HOME")
    if value:
        return Path(value).expanduser()
    return Path.home() / ".local" / "share"


def get_xdg_config_home() -> Path:
    """$XDG_CONFIG_HOME, defaulting to ~/.config."""
    value = os.environ.get("XDG_CONFIG_HOME")
    if value:
        return Path(value).expanduser()
    return Path.home() / ".config"


@dataclass
class Config:
    """Application configuration."""

    # Analysis
    workers: int | None = None  # None = CPU count, max 8
    chunk_size: int | None = None
    keep_events: bool = False

    # Database
    db_path: Path = field(
        default_factory=lambda: get_xdg_data_home() / "slippi-moves" / "moves.db"
    )

    # Output
    output_format: str = "text"

    # Techniques
    technique_priority: list[str] = field(default_factory=lambda: [])
    disabled_techniques: list[str] = field(default_factory=lambda: [])
    technique_gaps: dict[str, int | list[int]] = field(default_factory=lambda: {})


def load_config(config_path: Path) -> Config:
    """Load configuration from TOML file.

    Args:
        config_path: Path to config.toml file

    Returns:
        Config object with values from file (or defaults if file missing)
    """
    config = Config()

    if not config_path.exists():
        return config

    with open(config_path, "rb") as f:
        data = cast(dict[str, Any], tomllib.load(f))  # pyright: ignore[reportUnknownMemberType]

    # Analysis section
    analysis = cast(dict[str, Any], data.get("analysis", {}))
    if "workers" in analysis:
        config.workers = int(analysis["workers"])
    if "chunk_size" in analysis:
        config.chunk_size = int(analysis["chunk_size"])
    if "keep_events" in analysis:
        config.keep_events = bool(analysis["keep_events"])

    # Database section
    database = cast(dict[str, Any], data.get("database", {}))
    if "path" in database:
        config.db_path = Path(str(database["path"])).expanduser()

    # Output section
    output = cast(dict[str, Any], data.get("output", {}))
    if "format" in output:
        config.output_format = str(output["format"])

    # Techniques section, with one sub-table per technique
    techniques = cast(dict[str, Any], data.get("techniques", {}))
    for key, value in techniques.items():
        if key == "priority" and isinstance(value, list):
            config.technique_priority = [str(v) for v in cast(list[Any], value)]
        elif key == "disabled" and isinstance(value, list):
            config.disabled_techniques = [str(v) for v in cast(list[Any], value)]
        elif isinstance(value, dict):
            settings = cast(dict[str, Any], value)
            if "max_gaps" in settings:
                config.technique_gaps[key] = [int(g) for g in settings["max_gaps"]]
            elif "max_gap" in settings:
                config.technique_gaps[key] = int(settings["max_gap"])

    return config


def build_registry(config: Config) -> TechniqueRegistry:
    """Default techniques with the config's tolerances, priority and disables."""
    registry = TechniqueRegistry.with_default_techniques()
    for move_id, gaps in config.technique_gaps.items():
        registry.configure(move_id, gaps)
    for move_id in config.disabled_techniques:
        registry.disable(move_id)
    if config.technique_priority:
        registry.prioritize(
            [name for name in config.technique_priority if registry.get(name) is not None]
        )
    return registry


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    return get_xdg_config_home() / "slippi-moves" / "config.toml"
