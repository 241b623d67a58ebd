"""Viewport window — decide which cells are presented.

A visible geographic region is converted to an inclusive rectangle of
cell coordinates, padded by a few cells so panning looks smooth.  The
sweep then runs in two phases: materialize every coordinate inside the
window, and demote every presented entry outside it.  Running the
sweep twice with the same window changes nothing.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from cachegrid.world.cell import CellEntry
from cachegrid.world.coords import CellCoordinate, WorldAnchor
from cachegrid.world.store import CellStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """A geographic rectangle, as reported by a map view.

    Attributes:
        south: Minimum latitude.
        west: Minimum longitude.
        north: Maximum latitude.
        east: Maximum longitude.
    """

    south: float
    west: float
    north: float
    east: float

    @property
    def center(self) -> tuple[float, float]:
        return ((self.south + self.north) / 2, (self.west + self.east) / 2)

    def shifted(self, d_lat: float, d_lng: float) -> Region:
        """Return the same-sized region moved by ``(d_lat, d_lng)``."""
        return Region(
            south=self.south + d_lat,
            west=self.west + d_lng,
            north=self.north + d_lat,
            east=self.east + d_lng,
        )

    def centered_on(self, lat: float, lng: float) -> Region:
        """Return the same-sized region centred on ``(lat, lng)``."""
        c_lat, c_lng = self.center
        return self.shifted(lat - c_lat, lng - c_lng)

    @classmethod
    def from_cells(
        cls,
        anchor: WorldAnchor,
        low: CellCoordinate,
        high: CellCoordinate,
    ) -> Region:
        """Build the region spanning cells ``low`` to ``high`` inclusive.

        Corners sit on cell centres so that converting back with
        ``compute_window`` yields exactly the same rows and columns.
        """
        south, west = anchor.cell_center(low)
        north, east = anchor.cell_center(high)
        return cls(south=south, west=west, north=north, east=east)


@dataclass(frozen=True)
class Window:
    """Inclusive rectangle of cell coordinates."""

    min_row: int
    max_row: int
    min_col: int
    max_col: int

    @property
    def rows(self) -> int:
        return self.max_row - self.min_row + 1

    @property
    def cols(self) -> int:
        return self.max_col - self.min_col + 1

    def __contains__(self, coord: object) -> bool:
        if not isinstance(coord, CellCoordinate):
            return False
        return (
            self.min_row <= coord.row <= self.max_row
            and self.min_col <= coord.col <= self.max_col
        )

    def coords(self) -> Iterator[CellCoordinate]:
        """Yield every coordinate in the window, row by row."""
        for row in range(self.min_row, self.max_row + 1):
            for col in range(self.min_col, self.max_col + 1):
                yield CellCoordinate(row, col)


@dataclass
class SweepResult:
    """Outcome of one viewport sweep.

    Attributes:
        window: The window that was swept.
        presented: Entries materialized inside the window.
        demoted: Coordinates whose entries left the window and must be
            unrendered by the view.
    """

    window: Window
    presented: list[CellEntry] = field(default_factory=list)
    demoted: list[CellCoordinate] = field(default_factory=list)


def compute_window(region: Region, anchor: WorldAnchor, pad: int = 0) -> Window:
    """Convert a region to its padded window of cell coordinates.

    Args:
        region: Visible geographic rectangle.
        anchor: Anchor mapping geography onto the grid.
        pad: Extra cells added on every side.

    Returns:
        The inclusive window of coordinates to materialize.
    """
    low = anchor.cell_of(region.south, region.west)
    high = anchor.cell_of(region.north, region.east)
    return Window(
        min_row=low.row - pad,
        max_row=high.row + pad,
        min_col=low.col - pad,
        max_col=high.col + pad,
    )


def unrender_outside(store: CellStore, window: Window) -> list[CellCoordinate]:
    """Demote every presented entry outside ``window``.

    Returns:
        Coordinates that were demoted.
    """
    demoted: list[CellCoordinate] = []
    for entry in store:
        if entry.materialized and entry.coord not in window:
            store.set_materialized(entry.coord, False)
            demoted.append(entry.coord)
    return demoted


def sweep(store: CellStore, window: Window, *, unrender: bool = True) -> SweepResult:
    """Materialize the window, then demote what fell outside it.

    Args:
        store: Cell store to update.
        window: Coordinates that should be presented.
        unrender: If False, entries stay presented forever once shown.

    Returns:
        The presented entries and the demoted coordinates.
    """
    result = SweepResult(window=window)
    for coord in window.coords():
        entry = store.ensure_materialized(coord)
        if entry is not None:
            result.presented.append(entry)

    if unrender:
        result.demoted = unrender_outside(store, window)

    logger.debug(
        "swept %dx%d window: %d presented, %d demoted",
        window.rows,
        window.cols,
        len(result.presented),
        len(result.demoted),
    )
    return result
