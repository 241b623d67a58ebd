"""CellStore — sparse map from coordinate to generated cell.

The store owns the generation rule.  A coordinate is rolled against the
deterministic generator the first time it is materialized; from then on
its entry is only ever fetched, never regenerated, so leaving a cell
and coming back cannot re-roll it.  Coordinates whose presence roll
fails never get an entry, and because the roll is deterministic,
asking again always yields the same "nothing".
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Iterator

from cachegrid.game.errors import InvalidStateError
from cachegrid.world.cell import CellEntry
from cachegrid.world.coords import CellCoordinate
from cachegrid.world.generator import PRESENCE_TAG, VALUE_TAG, LuckSource

logger = logging.getLogger(__name__)


class CellStore:
    """All cell entries ever materialized in the current game.

    Attributes:
        generator: Source of deterministic luck values.
        spawn_probability: A cell spawns iff its presence luck is below this.
        value_multiplier: Initial value is ``floor(value_luck * multiplier)``.
    """

    def __init__(
        self,
        generator: LuckSource,
        *,
        spawn_probability: float = 0.1,
        value_multiplier: int = 2,
    ) -> None:
        self.generator = generator
        self.spawn_probability = spawn_probability
        self.value_multiplier = value_multiplier
        self._entries: dict[CellCoordinate, CellEntry] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, coord: object) -> bool:
        return coord in self._entries

    def __iter__(self) -> Iterator[CellEntry]:
        return iter(self._entries.values())

    def get(self, coord: CellCoordinate) -> CellEntry | None:
        """Return the entry at ``coord`` without side effects."""
        return self._entries.get(coord)

    def ensure_materialized(self, coord: CellCoordinate) -> CellEntry | None:
        """Fetch or generate the cell at ``coord`` and mark it presented.

        Existing entries only have ``materialized`` set; their value is
        untouched.  Unknown coordinates are rolled once for presence and,
        if they spawn, once for their initial value.

        Args:
            coord: Cell to materialize.

        Returns:
            The entry, or None if this coordinate never spawns.
        """
        entry = self._entries.get(coord)
        if entry is not None:
            entry.materialized = True
            return entry

        if self.generator.generate(coord, PRESENCE_TAG) >= self.spawn_probability:
            return None

        luck = self.generator.generate(coord, VALUE_TAG)
        entry = CellEntry(
            coord=coord,
            value=math.floor(luck * self.value_multiplier),
            materialized=True,
        )
        self._entries[coord] = entry
        logger.debug("spawned cell %s with value %d", coord, entry.value)
        return entry

    def set_materialized(self, coord: CellCoordinate, materialized: bool) -> None:
        """Set the presentation flag of an existing entry.

        No-op if ``coord`` has no entry.
        """
        entry = self._entries.get(coord)
        if entry is not None:
            entry.materialized = materialized

    def mutate(self, coord: CellCoordinate, value: int) -> CellEntry:
        """Overwrite the token value of an existing entry.

        Args:
            coord: Cell to update.
            value: New token count.

        Returns:
            The updated entry.

        Raises:
            InvalidStateError: If ``coord`` was never materialized.
            ValueError: If ``value`` is negative.
        """
        if value < 0:
            msg = f"cell value must be >= 0, got {value}"
            raise ValueError(msg)
        entry = self._entries.get(coord)
        if entry is None:
            msg = f"cannot mutate {coord}: no cell has been materialized there"
            raise InvalidStateError(msg)
        entry.value = value
        return entry

    def all(self) -> list[CellEntry]:
        """Return every stored entry (order is not meaningful)."""
        return list(self._entries.values())

    def materialized(self) -> list[CellEntry]:
        """Return entries whose presentation flag is set."""
        return [e for e in self._entries.values() if e.materialized]

    def restore(self, values: Iterable[tuple[CellCoordinate, int]]) -> None:
        """Insert previously persisted entries, all un-materialized.

        The generator is never consulted, so restored coordinates keep
        their saved value on the next sweep.

        Args:
            values: ``(coord, value)`` pairs from a loaded snapshot.
        """
        for coord, value in values:
            self._entries[coord] = CellEntry(coord=coord, value=value)

    def reset(self) -> None:
        """Forget every entry.  Only a new game may call this."""
        self._entries.clear()
