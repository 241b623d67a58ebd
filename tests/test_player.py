"""Tests for cachegrid.player — state, range gating and merge rules."""

import pytest

from cachegrid.game.errors import IllegalActionError, InvalidStateError
from cachegrid.player.rules import (
    Action,
    apply_action,
    can_interact,
    chebyshev_distance,
    legal_actions,
)
from cachegrid.player.state import PlayerState
from cachegrid.world.cell import CellEntry
from cachegrid.world.coords import CellCoordinate
from cachegrid.world.store import CellStore


def _cell(store: CellStore, row: int, col: int, value: int) -> CellEntry:
    store.restore([(CellCoordinate(row, col), value)])
    return store.get(CellCoordinate(row, col))


class TestPlayerState:
    """Tests for movement and the at-most-one-held invariant."""

    def test_defaults(self, player: PlayerState) -> None:
        assert player.position == CellCoordinate(0, 0)
        assert player.held is None
        assert not player.is_holding

    def test_move_by_unbounded(self, player: PlayerState) -> None:
        player.move_by(-1000, 2500)
        player.move_by(1, -1)
        assert player.position == CellCoordinate(-999, 2499)

    def test_move_to(self, player: PlayerState) -> None:
        player.move_to(CellCoordinate(4, -4))
        assert player.position == CellCoordinate(4, -4)

    def test_hold_twice_rejected(self, player: PlayerState) -> None:
        player.hold(2)
        with pytest.raises(InvalidStateError):
            player.hold(4)
        assert player.held == 2

    @pytest.mark.parametrize("value", [0, -3])
    def test_hold_non_positive_rejected(self, player: PlayerState, value: int) -> None:
        with pytest.raises(ValueError):
            player.hold(value)
        assert player.held is None

    def test_release(self, player: PlayerState) -> None:
        player.hold(8)
        assert player.release() == 8
        assert player.held is None
        assert player.release() is None


class TestRange:
    """Tests for Chebyshev range gating."""

    def test_chebyshev_not_euclidean(self) -> None:
        assert chebyshev_distance(CellCoordinate(0, 0), CellCoordinate(3, 3)) == 3

    def test_boundary(self, player: PlayerState) -> None:
        assert can_interact(CellCoordinate(3, 3), player, 3)
        assert can_interact(CellCoordinate(-3, 0), player, 3)
        assert not can_interact(CellCoordinate(4, 3), player, 3)
        assert not can_interact(CellCoordinate(0, -4), player, 3)

    def test_range_follows_player(self, player: PlayerState) -> None:
        player.move_by(10, 10)
        assert can_interact(CellCoordinate(13, 7), player, 3)
        assert not can_interact(CellCoordinate(3, 3), player, 3)


class TestLegalActions:
    """Tests for the pure legal-action query."""

    def test_collect(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 1, 1, 2)
        assert legal_actions(entry, player, 3) == {Action.COLLECT}

    def test_place(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 1, 1, 0)
        player.hold(4)
        assert legal_actions(entry, player, 3) == {Action.PLACE}

    def test_combine(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 1, 1, 4)
        player.hold(4)
        assert legal_actions(entry, player, 3) == {Action.COMBINE}

    def test_mismatch_has_no_action(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 1, 1, 2)
        player.hold(4)
        assert legal_actions(entry, player, 3) == frozenset()

    def test_empty_cell_empty_hand(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 1, 1, 0)
        assert legal_actions(entry, player, 3) == frozenset()

    def test_out_of_range(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 4, 0, 2)
        assert legal_actions(entry, player, 3) == frozenset()

    def test_missing_entry(self, player: PlayerState) -> None:
        assert legal_actions(None, player, 3) == frozenset()


class TestApplyAction:
    """Tests for atomic token transitions."""

    def test_collect(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 0, 1, 2)
        produced = apply_action(Action.COLLECT, entry, store, player, 3)
        assert produced == 2
        assert player.held == 2
        assert entry.value == 0

    def test_place(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 0, 1, 0)
        player.hold(8)
        assert apply_action(Action.PLACE, entry, store, player, 3) is None
        assert entry.value == 8
        assert player.held is None

    def test_combine_doubles(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 2, 2, 4)
        player.hold(4)
        assert apply_action(Action.COMBINE, entry, store, player, 3) == 8
        assert entry.value == 8
        assert player.held is None

    def test_combine_mismatch_rejected(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 2, 2, 4)
        player.hold(2)
        with pytest.raises(IllegalActionError):
            apply_action(Action.COMBINE, entry, store, player, 3)
        assert entry.value == 4
        assert player.held == 2

    def test_place_on_full_cell_rejected(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 0, 0, 1)
        player.hold(2)
        with pytest.raises(IllegalActionError):
            apply_action(Action.PLACE, entry, store, player, 3)
        assert entry.value == 1

    def test_collect_while_holding_rejected(
        self,
        store: CellStore,
        player: PlayerState,
    ) -> None:
        entry = _cell(store, 0, 0, 2)
        player.hold(1)
        with pytest.raises(IllegalActionError):
            apply_action(Action.COLLECT, entry, store, player, 3)
        assert entry.value == 2
        assert player.held == 1

    def test_out_of_range_rejected(self, store: CellStore, player: PlayerState) -> None:
        entry = _cell(store, 0, 4, 2)
        with pytest.raises(IllegalActionError):
            apply_action(Action.COLLECT, entry, store, player, 3)
        assert entry.value == 2
        assert player.held is None

    def test_illegal_action_is_invalid_state(self) -> None:
        assert issubclass(IllegalActionError, InvalidStateError)
