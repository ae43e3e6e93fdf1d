from __future__ import annotations

"""Minimal tracing helpers (Explain Mode).

Enable with the --explain flag to emit terse, readable lines at milestones.
"""

import json
from typing import Any, Dict

_ENABLED = False


def enable(flag: bool = True) -> None:
    global _ENABLED
    _ENABLED = bool(flag)


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if not _ENABLED:
        return
    # keep it short; one line JSON
    data = json.dumps(payload or {}, separators=(",", ":"), default=str)
    print(f"[EXPLAIN] {event} :: {data}")
