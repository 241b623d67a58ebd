"""Deterministic generator — reproducible luck from a coordinate alone.

Each ``(coord, tag)`` pair is hashed with SHA-256 into a 64-bit seed
for a fresh NumPy generator, so the value never depends on call order,
time, or any earlier draw.  Built-in ``hash()`` is avoided because it
is salted per process.
"""

from __future__ import annotations

import hashlib
from typing import Protocol

import numpy as np

from cachegrid.world.coords import CellCoordinate

PRESENCE_TAG = "presence"
VALUE_TAG = "value"


class LuckSource(Protocol):
    """Anything that maps ``(coord, tag)`` to a stable float in [0, 1)."""

    def generate(self, coord: CellCoordinate, tag: str) -> float: ...


def derive_seed(key: str) -> int:
    """Derive a 64-bit unsigned seed from an arbitrary string key."""
    digest = hashlib.sha256(key.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], byteorder="big", signed=False)


class DeterministicGenerator:
    """Pure coordinate hash producing floats in ``[0, 1)``.

    Attributes:
        seed: World seed string mixed into every key.  Two generators
            with the same seed agree on every coordinate.
    """

    def __init__(self, seed: str = "") -> None:
        self.seed = seed

    def key(self, coord: CellCoordinate, tag: str) -> str:
        return f"{self.seed}|{coord.row},{coord.col}|{tag}"

    def generate(self, coord: CellCoordinate, tag: str) -> float:
        """Return the luck value for ``coord`` under ``tag``.

        Args:
            coord: Cell being asked about.
            tag: Purpose of the draw (e.g. ``"presence"`` or ``"value"``).

        Returns:
            A float in ``[0, 1)``, identical on every call with the same
            arguments.
        """
        rng = np.random.default_rng(derive_seed(self.key(coord, tag)))
        return float(rng.random())
