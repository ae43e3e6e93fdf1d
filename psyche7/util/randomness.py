from __future__ import annotations

"""Randomness helpers for seeding and random identifiers."""

import os
import random
import secrets
from uuid import uuid4


def seed_if_needed() -> None:
    """Seed RNGs if SEED env var is set."""
    seed = os.environ.get("SEED")
    if seed is not None:
        try:
            s = int(seed)
        except ValueError:
            return
        random.seed(s)


def new_entry_id() -> str:
    """Collision-resistant id for stored records."""
    return uuid4().hex


def random_token(nbytes: int = 4) -> str:
    """Short hex token for decorative log lines and dossier references."""
    return secrets.token_hex(nbytes)
