"""Entry point for ``python -m cachegrid``.

Loads the default YAML config, restores any saved game, and opens a
Pygame window centred on the player.
"""

from __future__ import annotations

import argparse
import logging
import pathlib

from cachegrid.game.config import GameConfig
from cachegrid.game.engine import GameEngine
from cachegrid.persistence.storage import SaveFile
from cachegrid.ui.pygame_client import PygameRenderer

_DEFAULT_CONFIG = (
    pathlib.Path(__file__).resolve().parent.parent / "config" / "default.yaml"
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cachegrid",
        description="cachegrid - collect and merge tokens on a world grid",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=pathlib.Path,
        default=_DEFAULT_CONFIG,
        help="Path to YAML config file (default: config/default.yaml)",
    )
    parser.add_argument(
        "--save",
        type=pathlib.Path,
        default=None,
        help="Save file path (default: save_path from the config)",
    )
    parser.add_argument(
        "--cell-size",
        type=int,
        default=32,
        help="Pixel size per grid cell (default: 32)",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=30,
        help="Target frames per second (default: 30)",
    )
    parser.add_argument(
        "--new-game",
        action="store_true",
        help="Discard the saved game and start over at the current position",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: INFO)",
    )
    return parser


def main() -> None:
    """Parse CLI args, create engine, launch renderer."""
    args = build_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = GameConfig.from_yaml(args.config)
    save_file = SaveFile(args.save or config.save_path)
    engine = GameEngine(config=config, save_file=save_file)
    engine.start()
    if args.new_game:
        engine.start_new_game()

    renderer = PygameRenderer(engine=engine, cell_size=args.cell_size)
    renderer.run(fps=args.fps)


if __name__ == "__main__":
    main()
