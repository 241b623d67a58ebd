"""PlayerState — where the player stands and what token they carry.

The player owns at most one token at a time.  Movement is unbounded;
the engine is responsible for the sweep, persistence and win check
that follow each transition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cachegrid.game.errors import InvalidStateError
from cachegrid.world.coords import ORIGIN, CellCoordinate


@dataclass
class PlayerState:
    """Mutable player state.

    Attributes:
        position: Current cell of the player.
        held: Token value carried, or None.  Never zero or negative.
    """

    position: CellCoordinate = field(default=ORIGIN)
    held: int | None = None

    @property
    def is_holding(self) -> bool:
        return self.held is not None

    def move_by(self, d_row: int, d_col: int) -> CellCoordinate:
        """Shift the player by a delta.  No clamping: the world is unbounded."""
        self.position = self.position.offset(d_row, d_col)
        return self.position

    def move_to(self, coord: CellCoordinate) -> CellCoordinate:
        """Relocate the player to an absolute cell."""
        self.position = coord
        return self.position

    def hold(self, value: int) -> None:
        """Take a token into the player's hand.

        Args:
            value: Token value to hold.

        Raises:
            InvalidStateError: If the player already holds a token.
            ValueError: If ``value`` is not strictly positive.
        """
        if self.held is not None:
            msg = f"already holding {self.held}; release it before holding {value}"
            raise InvalidStateError(msg)
        if value <= 0:
            msg = f"held token must be positive, got {value}"
            raise ValueError(msg)
        self.held = value

    def release(self) -> int | None:
        """Empty the player's hand and return what was held."""
        value, self.held = self.held, None
        return value

    def to_dict(self) -> dict[str, Any]:
        return {"position": self.position.to_dict(), "held": self.held}
