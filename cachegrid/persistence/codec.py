"""Codec — turn game state into a JSON blob and back.

Only durable state is written: player position, held token, the
anchor, and ``(coord, value)`` for every cell ever generated.  The
``materialized`` flag is presentation state and is never persisted, so
every restored cell starts un-presented until the next sweep.

Decoding never raises.  A blob that is missing, is not JSON, or is not
an object decodes to None.  A blob with individually broken fields is
repaired field by field: the broken field falls back to its default and
everything else is kept.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from cachegrid.game.errors import MalformedPersistedStateError
from cachegrid.world.coords import ORIGIN, CellCoordinate, WorldAnchor

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1


@dataclass
class Snapshot:
    """Everything needed to resume a game.

    Attributes:
        position: Player cell.
        held: Player token, or None.
        cells: Token value of every generated cell.
        anchor: World anchor, or None to use the configured default.
        saved_at: When the snapshot was written, if known.
    """

    position: CellCoordinate = ORIGIN
    held: int | None = None
    cells: dict[CellCoordinate, int] = field(default_factory=dict)
    anchor: WorldAnchor | None = None
    saved_at: datetime | None = None


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def save(snapshot: Snapshot, *, now: datetime | None = None) -> str:
    """Serialize ``snapshot`` into a canonical JSON blob.

    Args:
        snapshot: State to persist.
        now: Timestamp to record (defaults to the current UTC time).

    Returns:
        The JSON text.
    """
    saved_at = now or datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "version": SCHEMA_VERSION,
        "position": snapshot.position.to_dict(),
        "held": snapshot.held,
        "cells": [
            {"row": coord.row, "col": coord.col, "value": value}
            for coord, value in sorted(snapshot.cells.items())
        ],
        "anchor": snapshot.anchor.to_dict() if snapshot.anchor else None,
        "savedAt": saved_at.isoformat(),
    }
    return json.dumps(payload, sort_keys=True, separators=(",", ":"))


def _decode_position(raw: Any) -> CellCoordinate:
    if not isinstance(raw, dict) or not (
        _is_int(raw.get("row")) and _is_int(raw.get("col"))
    ):
        msg = f"position must be {{row: int, col: int}}, got {raw!r}"
        raise MalformedPersistedStateError(msg)
    return CellCoordinate(raw["row"], raw["col"])


def _decode_held(raw: Any) -> int | None:
    if raw is None:
        return None
    if not _is_int(raw) or raw <= 0:
        msg = f"held must be null or a positive integer, got {raw!r}"
        raise MalformedPersistedStateError(msg)
    return raw


def _decode_cell(raw: Any) -> tuple[CellCoordinate, int]:
    if not isinstance(raw, dict):
        msg = f"cell record must be an object, got {raw!r}"
        raise MalformedPersistedStateError(msg)
    row, col, value = raw.get("row"), raw.get("col"), raw.get("value")
    if not (_is_int(row) and _is_int(col) and _is_int(value)) or value < 0:
        msg = f"cell record needs integer row/col and value >= 0, got {raw!r}"
        raise MalformedPersistedStateError(msg)
    return CellCoordinate(row, col), value


def _decode_cells(raw: Any) -> dict[CellCoordinate, int]:
    if not isinstance(raw, list):
        msg = f"cells must be a list, got {type(raw).__name__}"
        raise MalformedPersistedStateError(msg)
    cells: dict[CellCoordinate, int] = {}
    for record in raw:
        try:
            coord, value = _decode_cell(record)
        except MalformedPersistedStateError as exc:
            logger.warning("skipping persisted cell: %s", exc)
            continue
        cells[coord] = value
    return cells


def _decode_anchor(raw: Any) -> WorldAnchor | None:
    if raw is None:
        return None
    try:
        return WorldAnchor.from_dict(raw)
    except (KeyError, TypeError, ValueError) as exc:
        msg = f"anchor is malformed: {raw!r}"
        raise MalformedPersistedStateError(msg) from exc


def _decode_saved_at(raw: Any) -> datetime | None:
    if raw is None:
        return None
    try:
        return datetime.fromisoformat(raw)
    except (TypeError, ValueError) as exc:
        msg = f"savedAt is not an ISO timestamp: {raw!r}"
        raise MalformedPersistedStateError(msg) from exc


_FIELDS = (
    ("position", "position", _decode_position),
    ("held", "held", _decode_held),
    ("cells", "cells", _decode_cells),
    ("anchor", "anchor", _decode_anchor),
    ("savedAt", "saved_at", _decode_saved_at),
)


def load(blob: str | bytes | None) -> Snapshot | None:
    """Decode a blob produced by :func:`save`.

    Args:
        blob: JSON text, or None if nothing was stored.

    Returns:
        The decoded snapshot, or None if the blob is absent or unusable.
        Broken individual fields are replaced by their defaults.
    """
    if not blob:
        return None
    try:
        payload = json.loads(blob)
    except (TypeError, ValueError) as exc:
        logger.warning("ignoring unreadable save blob: %s", exc)
        return None
    if not isinstance(payload, dict):
        logger.warning("ignoring save blob: expected an object, got %s", type(payload).__name__)
        return None

    snapshot = Snapshot()
    for key, attr, decode in _FIELDS:
        if key not in payload:
            logger.warning("persisted %s missing; using default", key)
            continue
        try:
            setattr(snapshot, attr, decode(payload[key]))
        except MalformedPersistedStateError as exc:
            logger.warning("persisted %s unusable (%s); using default", key, exc)
    return snapshot
