"""Configuration manager for GraphDiff using a TOML file."""

from __future__ import annotations

import copy
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from .config import CONFIG_FILE, DEFAULT_CONFIG
from .parser import DotGraphParser
from .similarity import SimilarityEngine

logger = logging.getLogger(__name__)


def _config_path(path: Optional[Path]) -> Path:
    return path if path is not None else CONFIG_FILE


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for section, values in override.items():
        if isinstance(values, dict) and isinstance(merged.get(section), dict):
            merged[section].update(values)
        else:
            merged[section] = values
    return merged


def load_full_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load the raw TOML file (all sections), or ``{}`` if there is none."""
    config_file = _config_path(path)
    if not config_file.exists():
        return {}
    try:
        with open(config_file, "r") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_file, exc)
        return {}


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Load configuration merged over the defaults.

    Falls back to :data:`DEFAULT_CONFIG` when the file doesn't exist.
    """
    return _merge(DEFAULT_CONFIG, load_full_config(path))


def save_config(config: Dict[str, Any], path: Optional[Path] = None) -> bool:
    """Write *config* to the TOML file. Returns True on success."""
    config_file = _config_path(path)
    try:
        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, "w") as f:
            toml.dump(config, f)
    except OSError as exc:
        logger.warning("Could not write config %s: %s", config_file, exc)
        return False
    return True


def _coerce(raw: str, default: Any) -> Any:
    if isinstance(default, bool):
        return raw.strip().lower() in {"1", "true", "yes", "on"}
    if isinstance(default, float):
        return float(raw)
    if isinstance(default, int):
        return int(raw)
    if isinstance(default, list):
        return [float(part) for part in raw.split(",") if part.strip()]
    return raw


def set_config_value(key: str, raw: str, path: Optional[Path] = None) -> Any:
    """Set ``section.option`` from a raw string, typed like its default.

    Raises:
        KeyError: unknown section or option.
        ValueError: *raw* cannot be converted to the option's type, or the
            resulting settings are rejected by the parser or engine.
    """
    section, _, option = key.partition(".")
    if section not in DEFAULT_CONFIG or option not in DEFAULT_CONFIG[section]:
        raise KeyError(key)

    value = _coerce(raw, DEFAULT_CONFIG[section][option])
    config = load_full_config(path)
    config.setdefault(section, {})[option] = value
    validate_config(_merge(DEFAULT_CONFIG, config))
    if not save_config(config, path):
        raise OSError(f"Could not write {_config_path(path)}")
    return value


def watch_interval(config: Dict[str, Any]) -> float:
    interval = float(config.get("watch", {}).get("interval", DEFAULT_CONFIG["watch"]["interval"]))
    if interval <= 0:
        raise ValueError("interval must be positive")
    return interval


def validate_config(config: Dict[str, Any]) -> None:
    """Raise ``ValueError`` if any section holds settings that cannot be used."""
    watch_interval(config)
    parser_from_config(config)
    engine_from_config(config)


def parser_from_config(config: Dict[str, Any]) -> DotGraphParser:
    opts = config.get("parser", {})
    return DotGraphParser(
        sigil=opts.get("sigil", DEFAULT_CONFIG["parser"]["sigil"]),
        rank_marker=opts.get("rank_marker", DEFAULT_CONFIG["parser"]["rank_marker"]),
        delimiter=opts.get("delimiter", DEFAULT_CONFIG["parser"]["delimiter"]),
    )


def engine_from_config(config: Dict[str, Any]) -> SimilarityEngine:
    opts = config.get("similarity", {})
    return SimilarityEngine(
        eps=opts.get("eps", DEFAULT_CONFIG["similarity"]["eps"]),
        weights=opts.get("weights", DEFAULT_CONFIG["similarity"]["weights"]),
    )
