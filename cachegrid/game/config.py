"""Config — load game parameters from YAML files.

Every tunable constant the core consults (anchor, cell size, spawn
odds, interaction range, render padding, victory value) lives in YAML
and is parsed into a typed dataclass here.  Missing keys fall back to
the dataclass defaults.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from cachegrid.game.errors import ConfigError
from cachegrid.world.coords import WorldAnchor

_FLOAT_KEYS = ("anchor_lat", "anchor_lng", "cell_size", "spawn_probability")
_INT_KEYS = ("value_multiplier", "interact_range", "render_padding", "victory_value")
_BOOL_KEYS = ("unrender_far", "strict")
_STR_KEYS = ("world_seed", "save_path")


@dataclass
class GameConfig:
    """Top-level game configuration.

    Attributes:
        anchor_lat: Latitude of the default world anchor (cell (0, 0)).
        anchor_lng: Longitude of the default world anchor.
        cell_size: Angular size of a grid cell in degrees.
        spawn_probability: Chance that a cell holds a token at all.
        value_multiplier: Initial value is ``floor(luck * multiplier)``.
        interact_range: Maximum Chebyshev distance for token actions.
        render_padding: Extra cells materialized around the visible region.
        unrender_far: If False, cells stay materialized once shown.
        victory_value: Token value that signals a win.
        world_seed: Namespaces the deterministic generator.
        save_path: File used for durable game state.
        strict: Raise on caller sequencing bugs instead of ignoring them.
    """

    anchor_lat: float = 19.4326
    anchor_lng: float = -99.1332
    cell_size: float = 1e-4
    spawn_probability: float = 0.1
    value_multiplier: int = 2
    interact_range: int = 3
    render_padding: int = 1
    unrender_far: bool = True
    victory_value: int = 256
    world_seed: str = ""
    save_path: str = "cachegrid_save.json"
    strict: bool = False

    @property
    def anchor(self) -> WorldAnchor:
        """Return the configured default anchor."""
        return WorldAnchor(
            lat=self.anchor_lat,
            lng=self.anchor_lng,
            cell_size=self.cell_size,
        )

    def validate(self) -> None:
        """Check every value against its allowed range.

        Raises:
            ConfigError: If a value has the wrong type or is out of range.
        """
        self._check_types()
        if self.cell_size <= 0:
            msg = f"cell_size must be positive, got {self.cell_size}"
            raise ConfigError(msg)
        if not 0.0 <= self.spawn_probability <= 1.0:
            msg = f"spawn_probability must be in [0, 1], got {self.spawn_probability}"
            raise ConfigError(msg)
        if self.value_multiplier < 1:
            msg = f"value_multiplier must be >= 1, got {self.value_multiplier}"
            raise ConfigError(msg)
        if self.interact_range < 0:
            msg = f"interact_range must be >= 0, got {self.interact_range}"
            raise ConfigError(msg)
        if self.render_padding < 0:
            msg = f"render_padding must be >= 0, got {self.render_padding}"
            raise ConfigError(msg)
        if self.victory_value < 1:
            msg = f"victory_value must be >= 1, got {self.victory_value}"
            raise ConfigError(msg)

    def _check_types(self) -> None:
        # bool is an int subclass, so it is excluded from the numeric keys.
        for name in _FLOAT_KEYS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                msg = f"{name} must be a number, got {value!r}"
                raise ConfigError(msg)
            if not math.isfinite(value):
                msg = f"{name} must be finite, got {value!r}"
                raise ConfigError(msg)
        for name in _INT_KEYS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                msg = f"{name} must be an integer, got {value!r}"
                raise ConfigError(msg)
        for name in _BOOL_KEYS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                msg = f"{name} must be true or false, got {value!r}"
                raise ConfigError(msg)
        for name in _STR_KEYS:
            value = getattr(self, name)
            if not isinstance(value, str):
                msg = f"{name} must be a string, got {value!r}"
                raise ConfigError(msg)

    @classmethod
    def from_yaml(cls, path: str | Path) -> GameConfig:
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML config file.

        Returns:
            A populated and validated GameConfig instance.

        Raises:
            FileNotFoundError: If the config file does not exist.
            ConfigError: If a value is out of range or a key is unknown.
        """
        path = Path(path)
        with path.open("r") as f:
            data = yaml.safe_load(f) or {}

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"unknown config keys in {path}: {', '.join(unknown)}"
            raise ConfigError(msg)

        config = cls(**data)
        config.validate()
        return config
