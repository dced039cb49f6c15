"""Tests for configuration file support."""

from pathlib import Path

import pytest

from slippi_moves.config import (
    Config,
    build_registry,
    get_default_config_path,
    get_xdg_data_home,
    load_config,
)
from slippi_moves.techniques.definitions import DEFAULT_TECHNIQUES, SHDL_MAX_GAP


def test_config_defaults() -> None:
    """Config has sensible defaults when no file exists."""
    config = Config()

    # Uses XDG_DATA_HOME for database
    expected_db = get_xdg_data_home() / "slippi-moves" / "moves.db"
    assert config.db_path == expected_db
    assert config.workers is None
    assert config.output_format == "text"
    assert config.technique_gaps == {}


def test_load_config_from_file(tmp_path: Path) -> None:
    """Load configuration from TOML file."""
    config_path = tmp_path / "config.toml"
    config_path.write_text("""
[analysis]
workers = 4
chunk_size = 16
keep_events = true

[database]
path = "/custom/path/moves.db"

[output]
format = "json"

[techniques]
priority = ["waveland"]
disabled = ["l_cancel"]

[techniques.shdl]
max_gap = 30

[techniques.wavedash]
max_gaps = [3, 1]
""")

    config = load_config(config_path)

    assert config.workers == 4
    assert config.chunk_size == 16
    assert config.keep_events is True
    assert config.db_path == Path("/custom/path/moves.db")
    assert config.output_format == "json"
    assert config.technique_priority == ["waveland"]
    assert config.disabled_techniques == ["l_cancel"]
    assert config.technique_gaps == {"shdl": 30, "wavedash": [3, 1]}


def test_load_config_missing_file() -> None:
    """load_config returns defaults when file doesn't exist."""
    config = load_config(Path("/nonexistent/config.toml"))

    assert config == Config()


def test_database_path_expands_home(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text('[database]\npath = "~/moves.db"\n')

    config = load_config(config_path)

    assert config.db_path == Path.home() / "moves.db"


def test_xdg_paths(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))

    assert get_default_config_path() == tmp_path / "cfg" / "slippi-moves" / "config.toml"
    assert Config().db_path == tmp_path / "data" / "slippi-moves" / "moves.db"


def test_build_registry_defaults() -> None:
    registry = build_registry(Config())

    assert registry.technique_names == [d.move_id for d in DEFAULT_TECHNIQUES]
    assert registry.get("shdl").max_gaps == [SHDL_MAX_GAP]  # type: ignore[union-attr]


def test_build_registry_applies_settings() -> None:
    config = Config(
        technique_priority=["waveland", "l_cancel"],
        disabled_techniques=["l_cancel"],
        technique_gaps={"shdl": 30, "wavedash": [3, 1]},
    )

    registry = build_registry(config)

    assert registry.technique_names[0] == "waveland"
    assert "l_cancel" not in registry.technique_names
    assert registry.get("shdl").max_gaps == [30]  # type: ignore[union-attr]
    assert registry.get("wavedash").max_gaps == [3, 1]  # type: ignore[union-attr]


def test_build_registry_unknown_technique() -> None:
    with pytest.raises(KeyError):
        build_registry(Config(technique_gaps={"moonwalk": 3}))
