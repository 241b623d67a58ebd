"""Coordinates — integer cell addresses and the geographic anchor.

The world is an unbounded grid of fixed angular size laid over the
globe.  ``WorldAnchor`` maps latitude/longitude onto integer
``CellCoordinate`` values: rows grow northward with latitude and
columns grow eastward with longitude.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, order=True)
class CellCoordinate:
    """Address of one grid cell relative to the anchor.

    Attributes:
        row: Signed row index (latitude axis).
        col: Signed column index (longitude axis).
    """

    row: int
    col: int

    def offset(self, d_row: int, d_col: int) -> CellCoordinate:
        """Return the coordinate shifted by ``(d_row, d_col)``."""
        return CellCoordinate(self.row + d_row, self.col + d_col)

    def chebyshev(self, other: CellCoordinate) -> int:
        """Return the Chebyshev (king-move) distance to ``other``."""
        return max(abs(self.row - other.row), abs(self.col - other.col))

    def to_dict(self) -> dict[str, int]:
        return {"row": self.row, "col": self.col}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> CellCoordinate:
        return cls(row=int(payload["row"]), col=int(payload["col"]))


ORIGIN = CellCoordinate(0, 0)


@dataclass(frozen=True)
class WorldAnchor:
    """Geographic point mapped to coordinate ``(0, 0)``.

    Attributes:
        lat: Latitude of the south-west corner of cell ``(0, 0)``.
        lng: Longitude of the south-west corner of cell ``(0, 0)``.
        cell_size: Angular size of one cell in degrees.
    """

    lat: float
    lng: float
    cell_size: float

    def cell_of(self, lat: float, lng: float) -> CellCoordinate:
        """Return the cell containing the geographic point ``(lat, lng)``."""
        row = math.floor((lat - self.lat) / self.cell_size)
        col = math.floor((lng - self.lng) / self.cell_size)
        return CellCoordinate(row, col)

    def cell_bounds(
        self,
        coord: CellCoordinate,
    ) -> tuple[tuple[float, float], tuple[float, float]]:
        """Return the ``((south, west), (north, east))`` corners of a cell."""
        south = self.lat + coord.row * self.cell_size
        west = self.lng + coord.col * self.cell_size
        return (south, west), (south + self.cell_size, west + self.cell_size)

    def cell_center(self, coord: CellCoordinate) -> tuple[float, float]:
        """Return the ``(lat, lng)`` centre of a cell."""
        return (
            self.lat + (coord.row + 0.5) * self.cell_size,
            self.lng + (coord.col + 0.5) * self.cell_size,
        )

    def recentered_on(self, coord: CellCoordinate) -> WorldAnchor:
        """Return an anchor whose ``(0, 0)`` is the cell ``coord`` of this one."""
        (south, west), _ = self.cell_bounds(coord)
        return WorldAnchor(lat=south, lng=west, cell_size=self.cell_size)

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng, "cell_size": self.cell_size}

    @classmethod
    def from_dict(cls, payload: dict[str, Any]) -> WorldAnchor:
        lat = float(payload["lat"])
        lng = float(payload["lng"])
        cell_size = float(payload["cell_size"])
        if not all(math.isfinite(v) for v in (lat, lng, cell_size)):
            msg = f"anchor values must be finite, got {payload!r}"
            raise ValueError(msg)
        if not cell_size > 0:
            msg = f"cell_size must be positive, got {cell_size}"
            raise ValueError(msg)
        return cls(lat=lat, lng=lng, cell_size=cell_size)
