"""GameEngine — the single entry point the view talks to.

Owns all cell and player state and handles one external event at a
time.  Each handler is an atomic read-modify-persist cycle:

1. Apply the event (move, token action, viewport change, new game)
2. Re-run the viewport sweep if the window may have changed
3. Persist the durable state
4. Emit a ``WinEvent`` if a token transition reached the victory value

Events are processed synchronously in arrival order, so no locking is
needed even when geolocation fixes arrive from another source.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field

from cachegrid.game.config import GameConfig
from cachegrid.game.errors import (
    IllegalActionError,
    InvalidStateError,
    PersistenceUnavailableError,
)
from cachegrid.persistence import codec
from cachegrid.persistence.storage import SaveFile
from cachegrid.player.rules import Action, apply_action, can_interact, legal_actions
from cachegrid.player.state import PlayerState
from cachegrid.world.cell import CellEntry
from cachegrid.world.coords import ORIGIN, CellCoordinate, WorldAnchor
from cachegrid.world.generator import DeterministicGenerator, LuckSource
from cachegrid.world.store import CellStore
from cachegrid.world.viewport import Region, SweepResult, compute_window, sweep

logger = logging.getLogger(__name__)

# Region reported before the view has told us its size: 21x21 cells.
_DEFAULT_HALF_SPAN = 10


@dataclass(frozen=True)
class WinEvent:
    """Signal that a token transition produced the victory value.

    Attributes:
        value: The winning token value.
        coord: Cell where the winning transition happened.
    """

    value: int
    coord: CellCoordinate


@dataclass(frozen=True)
class CellView:
    """What the view needs to draw one presented cell.

    Attributes:
        entry: The cell entry.
        interactable: Whether the cell is within interaction range.
        actions: Actions currently legal on this cell.
    """

    entry: CellEntry
    interactable: bool
    actions: frozenset[Action]


@dataclass
class GameEngine:
    """Dispatches view events into the cell-state core.

    Attributes:
        config: Loaded game configuration.
        save_file: Durable storage, or None for an in-memory game.
        generator: Luck source; built from ``config.world_seed`` if None.
        anchor: Current world anchor.
        store: All generated cells.
        player: Player position and held token.
        region: Last visible region reported by the view.
        last_sweep: Result of the most recent viewport sweep.
        persistence_degraded: True once a load or save has failed.
    """

    config: GameConfig
    save_file: SaveFile | None = None
    generator: LuckSource | None = None
    anchor: WorldAnchor = field(init=False)
    store: CellStore = field(init=False)
    player: PlayerState = field(init=False, default_factory=PlayerState)
    region: Region = field(init=False)
    last_sweep: SweepResult | None = field(init=False, default=None)
    persistence_degraded: bool = field(init=False, default=False)
    _win_listeners: list[Callable[[WinEvent], None]] = field(
        init=False,
        default_factory=list,
        repr=False,
    )
    _watching_geolocation: bool = field(init=False, default=False)
    _last_fix: tuple[float, float] | None = field(init=False, default=None)

    def __post_init__(self) -> None:
        """Build the store and default region from config."""
        self.config.validate()
        if self.generator is None:
            self.generator = DeterministicGenerator(self.config.world_seed)
        self.anchor = self.config.anchor
        self.store = CellStore(
            self.generator,
            spawn_probability=self.config.spawn_probability,
            value_multiplier=self.config.value_multiplier,
        )
        self.region = self._region_around(self.player.position)

    # -- Lifecycle -----------------------------------------------------------

    def start(self) -> bool:
        """Restore persisted state.  Must run before the first sweep.

        Returns:
            True if a saved game was restored.
        """
        snapshot = codec.load(self._read_blob())
        if snapshot is None:
            logger.info("starting a fresh game")
            return False

        if snapshot.anchor is not None:
            self.anchor = snapshot.anchor
        self.player = PlayerState(position=snapshot.position, held=snapshot.held)
        self.store.reset()
        self.store.restore(snapshot.cells.items())
        self.region = self._region_around(self.player.position)
        logger.info(
            "restored game: %d cells, player at %s holding %s",
            len(self.store),
            self.player.position,
            self.player.held,
        )
        return True

    def shutdown(self) -> None:
        """Save one last time before the process exits."""
        self._persist()

    def start_new_game(self) -> None:
        """Discard everything and re-anchor on the player's location.

        The player's real-world location is the last geolocation fix if
        the player has not walked away from it since, otherwise the
        south-west corner of the cell the player stands in.
        """
        if self.save_file is not None:
            try:
                self.save_file.clear()
            except PersistenceUnavailableError as exc:
                self._persistence_failed(exc)

        fix = self._last_fix
        if fix is not None and self.anchor.cell_of(*fix) == self.player.position:
            lat, lng = fix
            self.anchor = WorldAnchor(lat=lat, lng=lng, cell_size=self.anchor.cell_size)
        else:
            self.anchor = self.anchor.recentered_on(self.player.position)

        self.store.reset()
        self.player = PlayerState()
        self.region = self._region_around(ORIGIN)
        self._sweep()
        self._persist()
        logger.info("new game anchored at (%.6f, %.6f)", self.anchor.lat, self.anchor.lng)

    # -- Event handlers ------------------------------------------------------

    def on_region_changed(self, region: Region) -> SweepResult:
        """Handle a pan or resize of the visible map."""
        self.region = region
        return self._sweep()

    def move_by(self, d_row: int, d_col: int) -> None:
        """Move the player by a cell delta."""
        self.player.move_by(d_row, d_col)
        self._after_move()

    def move_to(self, coord: CellCoordinate) -> None:
        """Move the player to an absolute cell."""
        self.player.move_to(coord)
        self._after_move()

    def watch_geolocation(self, enabled: bool) -> None:
        """Start or stop applying geolocation fixes.

        Stopping only affects future fixes; applied moves are kept.
        """
        self._watching_geolocation = enabled
        logger.info("geolocation watching %s", "on" if enabled else "off")

    @property
    def watching_geolocation(self) -> bool:
        return self._watching_geolocation

    def on_geolocation(self, lat: float, lng: float) -> bool:
        """Apply a geolocation fix as an absolute move.

        Non-finite fixes are logged and dropped.

        Returns:
            True if the fix was applied, False if watching is off or the
            fix is unusable.
        """
        if not self._watching_geolocation:
            return False
        if not (math.isfinite(lat) and math.isfinite(lng)):
            logger.warning("ignoring non-finite geolocation fix (%s, %s)", lat, lng)
            return False
        self.move_to(self.anchor.cell_of(lat, lng))
        self._last_fix = (lat, lng)
        return True

    def perform(self, coord: CellCoordinate, action: Action) -> bool:
        """Attempt a token action on the cell at ``coord``.

        Rejected actions change nothing and return False.  Successful
        ones are persisted, then checked for victory.

        Returns:
            True if the action was applied.
        """
        entry = self.store.get(coord)
        if entry is None:
            logger.debug("%s at %s rejected: no cell there", action.value, coord)
            return False

        try:
            produced = apply_action(
                action,
                entry,
                self.store,
                self.player,
                self.config.interact_range,
            )
        except IllegalActionError as exc:
            logger.debug("rejected: %s", exc)
            return False
        except InvalidStateError as exc:
            if self.config.strict:
                raise
            logger.warning("ignoring out-of-sequence action: %s", exc)
            return False

        self._persist()
        if produced is not None and produced == self.config.victory_value:
            self._emit_win(WinEvent(value=produced, coord=coord))
        return True

    def hold(self, value: int) -> bool:
        """Put a token directly into the player's hand.

        Holding while already holding is a sequencing bug: it raises in
        strict mode and is logged and ignored otherwise.

        Returns:
            True if the player now holds ``value``.
        """
        try:
            self.player.hold(value)
        except InvalidStateError as exc:
            if self.config.strict:
                raise
            logger.warning("ignoring hold: %s", exc)
            return False
        self._persist()
        if value == self.config.victory_value:
            self._emit_win(WinEvent(value=value, coord=self.player.position))
        return True

    def release(self) -> int | None:
        """Empty the player's hand and return what was held."""
        value = self.player.release()
        self._persist()
        return value

    def subscribe_win(self, callback: Callable[[WinEvent], None]) -> None:
        """Register ``callback`` to receive every ``WinEvent``."""
        self._win_listeners.append(callback)

    # -- Queries -------------------------------------------------------------

    def can_interact(self, coord: CellCoordinate) -> bool:
        return can_interact(coord, self.player, self.config.interact_range)

    def legal_actions(self, coord: CellCoordinate) -> frozenset[Action]:
        """Return the actions legal right now on the cell at ``coord``."""
        return legal_actions(
            self.store.get(coord),
            self.player,
            self.config.interact_range,
        )

    def cell_views(self) -> list[CellView]:
        """Return every presented cell with its range flag and legal actions."""
        return [
            CellView(
                entry=entry,
                interactable=self.can_interact(entry.coord),
                actions=self.legal_actions(entry.coord),
            )
            for entry in self.store.materialized()
        ]

    def snapshot(self) -> codec.Snapshot:
        """Return the durable state as a persistence snapshot."""
        return codec.Snapshot(
            position=self.player.position,
            held=self.player.held,
            cells={entry.coord: entry.value for entry in self.store.all()},
            anchor=self.anchor,
        )

    # -- Internals -----------------------------------------------------------

    def _region_around(self, coord: CellCoordinate) -> Region:
        span = _DEFAULT_HALF_SPAN
        return Region.from_cells(
            self.anchor,
            coord.offset(-span, -span),
            coord.offset(span, span),
        )

    def _after_move(self) -> None:
        lat, lng = self.anchor.cell_center(self.player.position)
        self.region = self.region.centered_on(lat, lng)
        self._sweep()
        self._persist()

    def _sweep(self) -> SweepResult:
        window = compute_window(self.region, self.anchor, self.config.render_padding)
        self.last_sweep = sweep(self.store, window, unrender=self.config.unrender_far)
        return self.last_sweep

    def _read_blob(self) -> str | None:
        if self.save_file is None:
            return None
        try:
            return self.save_file.read()
        except PersistenceUnavailableError as exc:
            self._persistence_failed(exc)
            return None

    def _persist(self) -> None:
        if self.save_file is None:
            return
        try:
            self.save_file.write(codec.save(self.snapshot()))
        except PersistenceUnavailableError as exc:
            self._persistence_failed(exc)

    def _persistence_failed(self, exc: PersistenceUnavailableError) -> None:
        if not self.persistence_degraded:
            logger.warning("persistence unavailable, continuing in memory: %s", exc)
        self.persistence_degraded = True

    def _emit_win(self, event: WinEvent) -> None:
        logger.info("victory: reached %d at %s", event.value, event.coord)
        for callback in self._win_listeners:
            callback(event)
