"""Interaction rules — range gating and the collect/place/combine machine.

Every token action is gated on the Chebyshev distance between the
player and the cell, so the interaction neighbourhood is a square of
side ``2 * interact_range + 1`` centred on the player.

============  ====================================  ===========================
Action        Precondition                          Effect
============  ====================================  ===========================
COLLECT       cell > 0 and hand empty               hand <- cell, cell <- 0
PLACE         cell == 0 and hand full               cell <- hand, hand empty
COMBINE       cell > 0 and cell == hand             cell <- 2 * cell, hand empty
============  ====================================  ===========================

The three preconditions are mutually exclusive, so at most one action
is legal for a given cell at any moment.  ``legal_actions`` is a pure
query; views must call it again after every state change rather than
caching its result.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from cachegrid.game.errors import IllegalActionError

if TYPE_CHECKING:
    from cachegrid.player.state import PlayerState
    from cachegrid.world.cell import CellEntry
    from cachegrid.world.coords import CellCoordinate
    from cachegrid.world.store import CellStore


class Action(Enum):
    """Token actions a player may take on a cell."""

    COLLECT = "collect"
    PLACE = "place"
    COMBINE = "combine"


def chebyshev_distance(a: CellCoordinate, b: CellCoordinate) -> int:
    """Return ``max(|d_row|, |d_col|)`` between two coordinates."""
    return a.chebyshev(b)


def can_interact(
    coord: CellCoordinate,
    player: PlayerState,
    interact_range: int,
) -> bool:
    """Return True if ``coord`` is within ``interact_range`` of the player."""
    return chebyshev_distance(coord, player.position) <= interact_range


def legal_actions(
    entry: CellEntry | None,
    player: PlayerState,
    interact_range: int,
) -> frozenset[Action]:
    """Return the actions currently allowed on ``entry``.

    Args:
        entry: The cell, or None if nothing spawned there.
        player: Current player state.
        interact_range: Maximum Chebyshev distance for any action.

    Returns:
        A set with at most one action; empty when out of range.
    """
    if entry is None or not can_interact(entry.coord, player, interact_range):
        return frozenset()

    held = player.held
    if entry.value > 0 and held is None:
        return frozenset({Action.COLLECT})
    if entry.value == 0 and held is not None:
        return frozenset({Action.PLACE})
    if entry.value > 0 and entry.value == held:
        return frozenset({Action.COMBINE})
    return frozenset()


def apply_action(
    action: Action,
    entry: CellEntry,
    store: CellStore,
    player: PlayerState,
    interact_range: int,
) -> int | None:
    """Perform ``action`` on ``entry``, mutating cell and player together.

    All preconditions are checked before anything is written, so a
    rejected action leaves both the store and the player untouched.

    Args:
        action: Action to perform.
        entry: Target cell (must live in ``store``).
        store: Cell store owning ``entry``.
        player: Player state to update.
        interact_range: Maximum Chebyshev distance.

    Returns:
        The value produced for the win check: the held value after
        COLLECT, the merged cell value after COMBINE, None after PLACE.

    Raises:
        IllegalActionError: If the action is out of range or its
            precondition does not hold.
    """
    if action not in legal_actions(entry, player, interact_range):
        msg = (
            f"{action.value} not allowed at {entry.coord} "
            f"(cell={entry.value}, held={player.held}, player at {player.position})"
        )
        raise IllegalActionError(msg)

    if action is Action.COLLECT:
        value = entry.value
        player.hold(value)
        store.mutate(entry.coord, 0)
        return player.held

    if action is Action.PLACE:
        held = player.held
        if held is None:
            msg = f"place at {entry.coord} with an empty hand"
            raise IllegalActionError(msg)
        store.mutate(entry.coord, held)
        player.release()
        return None

    merged = store.mutate(entry.coord, entry.value * 2).value
    player.release()
    return merged
