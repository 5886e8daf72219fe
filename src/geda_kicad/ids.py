"""Identifier generators for emitted records."""

from __future__ import annotations

import random
import uuid
from typing import Callable

IdGenerator = Callable[[], str]

_HEX = "0123456789abcdef"
_GROUPS = (8, 4, 4, 4, 12)


def random_ids() -> IdGenerator:
    return lambda: str(uuid.uuid4())


def seeded_ids(seed: int) -> IdGenerator:
    """Reproducible 8-4-4-4-12 hex identifiers for golden-file output."""
    rng = random.Random(seed)

    def next_id() -> str:
        return "-".join(
            "".join(rng.choice(_HEX) for _ in range(n)) for n in _GROUPS
        )

    return next_id
