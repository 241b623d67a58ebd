"""Shared fixtures for the cachegrid test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from cachegrid.game.config import GameConfig
from cachegrid.game.engine import GameEngine
from cachegrid.persistence.storage import SaveFile
from cachegrid.player.state import PlayerState
from cachegrid.world.coords import CellCoordinate
from cachegrid.world.generator import PRESENCE_TAG, VALUE_TAG, DeterministicGenerator
from cachegrid.world.store import CellStore


class FixedLuck:
    """Luck source returning scripted values per ``(coord, tag)``.

    Unscripted presence rolls never spawn; unscripted value rolls are 0.
    """

    def __init__(self) -> None:
        self.values: dict[tuple[CellCoordinate, str], float] = {}
        self.calls = 0

    def spawn(self, row: int, col: int, value_luck: float = 0.0) -> None:
        coord = CellCoordinate(row, col)
        self.values[(coord, PRESENCE_TAG)] = 0.0
        self.values[(coord, VALUE_TAG)] = value_luck

    def generate(self, coord: CellCoordinate, tag: str) -> float:
        self.calls += 1
        default = 0.999 if tag == PRESENCE_TAG else 0.0
        return self.values.get((coord, tag), default)


@pytest.fixture
def luck() -> FixedLuck:
    """A scripted luck source with no spawns."""
    return FixedLuck()


@pytest.fixture
def generator() -> DeterministicGenerator:
    """The real hash-based generator with a fixed seed."""
    return DeterministicGenerator(seed="tests")


@pytest.fixture
def store(luck: FixedLuck) -> CellStore:
    """A cell store driven by the scripted luck source."""
    return CellStore(luck, spawn_probability=0.3, value_multiplier=2)


@pytest.fixture
def player() -> PlayerState:
    """A player at the origin holding nothing."""
    return PlayerState()


@pytest.fixture
def default_config() -> GameConfig:
    """Default game config (no YAML file needed)."""
    return GameConfig()


@pytest.fixture
def save_file(tmp_path: Path) -> SaveFile:
    """A save file inside the test's temporary directory."""
    return SaveFile(tmp_path / "save.json")


@pytest.fixture
def engine(luck: FixedLuck, save_file: SaveFile) -> GameEngine:
    """An engine with scripted luck, range 3, victory at 256, file-backed."""
    config = GameConfig(
        spawn_probability=0.3,
        value_multiplier=2,
        interact_range=3,
        render_padding=0,
        victory_value=256,
        strict=True,
    )
    return GameEngine(config=config, save_file=save_file, generator=luck)
