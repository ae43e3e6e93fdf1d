from __future__ import annotations

"""Configuration loading and validation for PSYCHE-7.

This module loads YAML configuration, applies defaults, and validates
that timings, limits and paths are sane for the terminal app.
"""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

ALLOWED_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _load_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        print(f"ERROR: Config file not found: {path}", file=sys.stderr)
        sys.exit(1)


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load configuration from YAML or defaults.

    Args:
        path: Optional path to a YAML config. If None, use package defaults.

    Returns:
        A dictionary with configuration values.
    """
    if path:
        cfg = _load_yaml(Path(path))
    else:
        default_path = Path(__file__).with_name("defaults.yml")
        cfg = _load_yaml(default_path)
    return cfg


def _non_negative(section: Dict[str, Any], key: str, default: float) -> None:
    try:
        value = float(section.get(key, default))
    except (TypeError, ValueError):
        value = -1.0
    if value < 0:
        logger.warning("Invalid %s=%r, using %s.", key, section.get(key), default)
        value = default
    section[key] = value


def validate_config(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Apply defaults and validate configuration values.

    Args:
        cfg: The raw configuration dictionary.

    Returns:
        The validated and merged configuration dictionary.
    """
    # Shallow defaults for missing sections
    cfg.setdefault("timings", {})
    cfg.setdefault("progress", {})
    cfg.setdefault("gateway", {})
    cfg.setdefault("storage", {})
    cfg.setdefault("ui", {})
    cfg.setdefault("logging", {})

    timings = cfg["timings"]
    progress = cfg["progress"]
    gateway = cfg["gateway"]
    storage = cfg["storage"]
    ui = cfg["ui"]
    log_cfg = cfg["logging"]

    timings.setdefault("boot_delay_s", 3.5)
    timings.setdefault("generate_tick_ms", 200)
    timings.setdefault("analyze_tick_ms", 150)
    timings.setdefault("generate_settle_ms", 500)
    timings.setdefault("analyze_settle_ms", 800)

    progress.setdefault("ceiling", 90)
    progress.setdefault("generate_max_step", 5)
    progress.setdefault("analyze_max_step", 2)

    gateway.setdefault("model", "gemini-flash-latest")
    gateway.setdefault("api_key_env", "API_KEY")

    storage.setdefault("path", "~/.psyche7/storage.json")
    storage.setdefault("leaderboard_key", "psyche7_leaderboard")
    storage.setdefault("leaderboard_size", 10)

    ui.setdefault("title", "PSYCHE-7")
    ui.setdefault("geometry", "1000x720")
    ui.setdefault("frame_rate", 60)

    log_cfg.setdefault("level", "INFO")

    for key, default in (
        ("boot_delay_s", 3.5),
        ("generate_tick_ms", 200),
        ("analyze_tick_ms", 150),
        ("generate_settle_ms", 500),
        ("analyze_settle_ms", 800),
    ):
        _non_negative(timings, key, default)

    for key, default in (("generate_max_step", 5), ("analyze_max_step", 2)):
        _non_negative(progress, key, default)

    # The ceiling must leave room for the forced 100% signal
    _non_negative(progress, "ceiling", 90)
    if progress["ceiling"] >= 100:
        logger.warning("Progress ceiling %s must stay below 100, using 90.", progress["ceiling"])
        progress["ceiling"] = 90.0

    try:
        size = int(storage.get("leaderboard_size", 10))
    except (TypeError, ValueError):
        size = 0
    if size < 1:
        logger.warning("Invalid leaderboard_size %r, using 10.", storage.get("leaderboard_size"))
        size = 10
    storage["leaderboard_size"] = size
    storage["path"] = str(Path(str(storage["path"])).expanduser())

    level = str(log_cfg.get("level", "INFO")).upper()
    if level not in ALLOWED_LOG_LEVELS:
        logger.warning("Unsupported log level '%s', using 'INFO'.", level)
        level = "INFO"
    log_cfg["level"] = level

    return cfg


@dataclass(frozen=True)
class Timings:
    """Delays and tick intervals of the state machine, in seconds."""

    boot_delay: float = 3.5
    generate_tick: float = 0.2
    analyze_tick: float = 0.15
    generate_settle: float = 0.5
    analyze_settle: float = 0.8
    progress_ceiling: float = 90.0
    generate_max_step: float = 5.0
    analyze_max_step: float = 2.0

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Timings":
        t = cfg.get("timings", {})
        p = cfg.get("progress", {})
        return cls(
            boot_delay=float(t.get("boot_delay_s", 3.5)),
            generate_tick=float(t.get("generate_tick_ms", 200)) / 1000.0,
            analyze_tick=float(t.get("analyze_tick_ms", 150)) / 1000.0,
            generate_settle=float(t.get("generate_settle_ms", 500)) / 1000.0,
            analyze_settle=float(t.get("analyze_settle_ms", 800)) / 1000.0,
            progress_ceiling=float(p.get("ceiling", 90)),
            generate_max_step=float(p.get("generate_max_step", 5)),
            analyze_max_step=float(p.get("analyze_max_step", 2)),
        )
