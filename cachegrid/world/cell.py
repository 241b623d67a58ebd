"""Cell — one generated cache in the world grid.

A ``CellEntry`` exists only for coordinates whose presence roll
succeeded.  Its ``value`` is the token count (0 means empty) and
``materialized`` is a presentation flag: True while the cell sits in
the render window, False while it is scrolled off-screen.  Neither
flag nor value is ever re-rolled once the entry exists.
"""

from __future__ import annotations

from dataclasses import dataclass

from cachegrid.world.coords import CellCoordinate


@dataclass
class CellEntry:
    """A single cache in the world grid.

    Attributes:
        coord: Grid address of the cell.
        value: Token count held by the cell (``>= 0``).
        materialized: Whether the cell is currently presented.
    """

    coord: CellCoordinate
    value: int = 0
    materialized: bool = False

    @property
    def is_empty(self) -> bool:
        """Return True if the cell holds no token."""
        return self.value == 0
