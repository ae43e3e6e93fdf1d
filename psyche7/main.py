from __future__ import annotations

"""Entry point for the PSYCHE-7 terminal."""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, Optional, Sequence

from . import __version__
from .app.controller import ViewController
from .app.explain import enable as explain_enable
from .config.config import Timings, load_config, validate_config
from .gateway.gemini import GeminiGateway
from .storage.leaderboard import LeaderboardStore
from .storage.store import KeyValueStore
from .util.logging_config import setup_logging
from .util.randomness import seed_if_needed

logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="psyche7", description="PSYCHE-7 personality assessment terminal")
    p.add_argument("--config", type=str, default=None, help="Path to YAML config")
    p.add_argument("--explain", action="store_true", help="Print state machine milestones")
    p.add_argument("--version", action="store_true", help="Print version and exit")
    return p.parse_args(argv)


def build_controller(cfg: Dict[str, Any]) -> ViewController:
    """Construct the gateway, stores and controller once for the process."""
    gateway_cfg = cfg["gateway"]
    storage_cfg = cfg["storage"]

    # A missing key is only reported when the gateway is first used
    key_env = gateway_cfg["api_key_env"]
    gateway = GeminiGateway(os.environ.get(key_env), model=gateway_cfg["model"], api_key_env=key_env)

    leaderboard = LeaderboardStore(
        KeyValueStore(storage_cfg["path"]),
        key=storage_cfg["leaderboard_key"],
        size=storage_cfg["leaderboard_size"],
    )
    leaderboard.load()
    return ViewController(gateway, leaderboard, timings=Timings.from_config(cfg))


def cli(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    if args.version:
        print(f"psyche7 {__version__}")
        return 0

    seed_if_needed()
    cfg = validate_config(load_config(args.config))
    setup_logging(cfg["logging"]["level"])
    if args.explain:
        explain_enable(True)

    controller = build_controller(cfg)

    # Tk is imported late so --version works on headless machines
    from .app.gui import TerminalApp

    ui = cfg["ui"]
    app = TerminalApp(controller, title=ui["title"], geometry=ui["geometry"], frame_rate=ui["frame_rate"])
    try:
        asyncio.run(app.run())
    except KeyboardInterrupt:  # pragma: no cover - manual quit
        pass
    return 0


if __name__ == "__main__":
    sys.exit(cli())
