"""Smoke tests for the UI module (no display required)."""

from __future__ import annotations

import pytest

from cachegrid.ui.pygame_client import PygameRenderer, _drag_to_pan, _wheel_to_pan


def test_pygame_renderer_importable() -> None:
    """PygameRenderer class is importable without initialising pygame."""
    assert PygameRenderer is not None


def test_main_module_importable() -> None:
    """The __main__ module is importable and exposes main()."""
    from cachegrid.__main__ import main

    assert callable(main)


def test_cli_defaults() -> None:
    from cachegrid.__main__ import build_parser

    args = build_parser().parse_args(["--new-game", "--log-level", "DEBUG"])
    assert args.new_game is True
    assert args.log_level == "DEBUG"
    assert args.save is None
    assert args.config.name == "default.yaml"


@pytest.mark.parametrize(
    ("x", "y", "expected"),
    [(0, 1, (1, 0)), (0, -2, (-2, 0)), (1, 0, (0, 1)), (-1, 1, (1, -1))],
)
def test_wheel_pans_by_notch(x: int, y: int, expected: tuple[int, int]) -> None:
    """Wheel up pans north, horizontal wheel pans east/west."""
    assert _wheel_to_pan(x, y) == expected


@pytest.mark.parametrize(
    ("dx", "dy", "expected"),
    [
        (0, 0, (0, 0)),
        (31, -31, (0, 0)),
        (0, 64, (2, 0)),
        (0, -40, (-1, 0)),
        (70, 0, (0, -2)),
        (-33, 95, (2, 1)),
    ],
)
def test_drag_pans_whole_cells(dx: int, dy: int, expected: tuple[int, int]) -> None:
    """Dragging moves the map with the pointer in whole 32px cells."""
    assert _drag_to_pan(dx, dy, 32) == expected
