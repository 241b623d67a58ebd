"""Pygame 2D view for a cachegrid game.

Draws the presented cells around the player, highlights those within
interaction range, and forwards keyboard and mouse input to the
engine.  The view holds no game state of its own: after every event it
re-reads cell views and legal actions from the engine.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, ClassVar

import pygame

from cachegrid.world.coords import CellCoordinate
from cachegrid.world.viewport import Region, Window, compute_window

if TYPE_CHECKING:
    from cachegrid.game.engine import CellView, GameEngine, WinEvent

# Colour palette
_BG = (24, 28, 34)
_GRID_LINE = (40, 46, 54)
_CELL_EMPTY = (70, 80, 95)
_CELL_FULL = (60, 120, 200)
_CELL_IN_RANGE = (240, 200, 60)
_PLAYER = (230, 80, 80)
_TEXT = (220, 220, 220)
_WIN = (120, 230, 120)

# WASD moves the player one cell; rows grow northward.
_MOVE_KEYS: dict[int, tuple[int, int]] = {
    pygame.K_w: (1, 0),
    pygame.K_s: (-1, 0),
    pygame.K_a: (0, -1),
    pygame.K_d: (0, 1),
}


def _wheel_to_pan(x: int, y: int) -> tuple[int, int]:
    """Map a wheel step to a ``(d_row, d_col)`` pan; wheel up is north."""
    return y, x


def _drag_to_pan(dx: int, dy: int, cell_size: int) -> tuple[int, int]:
    """Map a drag of ``(dx, dy)`` pixels to whole cells of pan.

    The map follows the pointer, so dragging down shows cells further
    north and dragging right shows cells further west.  Partial cells
    are dropped.
    """
    return int(dy / cell_size), -int(dx / cell_size)


class PygameRenderer:
    """Renders a GameEngine into a Pygame window.

    Attributes:
        engine: The game engine to visualise.
        cell_size: Pixel size of each grid cell.
        screen: The Pygame display surface.
    """

    # Arrow keys pan the map by one cell.
    _PAN_KEYS: ClassVar[dict[int, tuple[int, int]]] = {
        pygame.K_UP: (1, 0),
        pygame.K_DOWN: (-1, 0),
        pygame.K_LEFT: (0, -1),
        pygame.K_RIGHT: (0, 1),
    }

    def __init__(
        self,
        engine: GameEngine,
        cell_size: int = 32,
        grid_cells: int = 21,
    ) -> None:
        """Initialise the renderer.

        Args:
            engine: The game engine to render.
            cell_size: Pixel width/height per grid cell.
            grid_cells: Number of cells shown along each axis.
        """
        self.engine = engine
        self.cell_size = cell_size
        self.grid_cells = grid_cells

        self._panel_width = 240
        self._map_px = grid_cells * cell_size
        self._win_w = self._map_px + self._panel_width
        self._win_h = self._map_px
        self._banner: str | None = None
        self._drag_origin: tuple[int, int] | None = None

        pygame.init()
        self.screen = pygame.display.set_mode((self._win_w, self._win_h))
        pygame.display.set_caption("cachegrid")
        self.clock = pygame.time.Clock()
        self.font = pygame.font.SysFont("monospace", 14)
        self.running = True

        engine.subscribe_win(self._on_win)
        self._report_region(self._region_centered_on(engine.player.position))

    def run(self, fps: int = 30) -> None:
        """Main loop: handle events, render.  Saves on exit.

        Args:
            fps: Target frames per second.
        """
        try:
            while self.running:
                self.clock.tick(fps)
                self._handle_events()
                self._draw()
        finally:
            self.engine.shutdown()
            pygame.quit()

    # -- Region bookkeeping --------------------------------------------------

    def _region_centered_on(self, center: CellCoordinate) -> Region:
        half = self.grid_cells // 2
        low = center.offset(-half, -half)
        high = low.offset(self.grid_cells - 1, self.grid_cells - 1)
        return Region.from_cells(self.engine.anchor, low, high)

    def _report_region(self, region: Region) -> None:
        self.engine.on_region_changed(region)

    def _pan(self, d_row: int, d_col: int) -> None:
        size = self.engine.anchor.cell_size
        self._report_region(self.engine.region.shifted(d_row * size, d_col * size))

    def _drag(self, pos: tuple[int, int]) -> None:
        """Pan by the whole cells the pointer has moved since the last pan."""
        ox, oy = self._drag_origin
        d_row, d_col = _drag_to_pan(pos[0] - ox, pos[1] - oy, self.cell_size)
        if d_row == 0 and d_col == 0:
            return
        self._pan(d_row, d_col)
        self._drag_origin = (ox - d_col * self.cell_size, oy + d_row * self.cell_size)

    def _visible_window(self) -> Window:
        return compute_window(self.engine.region, self.engine.anchor, pad=0)

    def _cell_at_pixel(self, px: int, py: int) -> CellCoordinate | None:
        if px >= self._map_px or py >= self._map_px:
            return None
        window = self._visible_window()
        col = window.min_col + px // self.cell_size
        row = window.max_row - py // self.cell_size
        return CellCoordinate(row, col)

    # -- Input ---------------------------------------------------------------

    def _handle_events(self) -> None:
        """Process Pygame input events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_key(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                coord = self._cell_at_pixel(*event.pos)
                if coord is not None:
                    self._click(coord)
            elif event.type == pygame.MOUSEWHEEL:
                self._pan(*_wheel_to_pan(event.x, event.y))
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 3:
                self._drag_origin = event.pos
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 3:
                self._drag_origin = None
            elif event.type == pygame.MOUSEMOTION and self._drag_origin is not None:
                self._drag(event.pos)

    def _handle_key(self, key: int) -> None:
        if key == pygame.K_ESCAPE:
            self.running = False
        elif key in _MOVE_KEYS:
            self.engine.move_by(*_MOVE_KEYS[key])
        elif key in self._PAN_KEYS:
            self._pan(*self._PAN_KEYS[key])
        elif key == pygame.K_PAGEUP:
            self._pan(self.grid_cells // 2, 0)
        elif key == pygame.K_PAGEDOWN:
            self._pan(-(self.grid_cells // 2), 0)
        elif key == pygame.K_n:
            self._banner = None
            self.engine.start_new_game()
            self._report_region(self._region_centered_on(self.engine.player.position))

    def _click(self, coord: CellCoordinate) -> None:
        """Fire the single legal action on ``coord``, if any."""
        for action in self.engine.legal_actions(coord):
            self.engine.perform(coord, action)
            return

    def _on_win(self, event: WinEvent) -> None:
        self._banner = f"You made {event.value}!"

    # -- Drawing -------------------------------------------------------------

    def _draw(self) -> None:
        """Render one frame."""
        self.screen.fill(_BG)
        window = self._visible_window()
        self._draw_grid()
        for view in self.engine.cell_views():
            if view.entry.coord in window:
                self._draw_cell(view, window.min_col, window.max_row)
        self._draw_player(window.min_col, window.max_row)
        self._draw_info_panel()
        pygame.display.flip()

    def _draw_grid(self) -> None:
        cs = self.cell_size
        for i in range(self.grid_cells + 1):
            pygame.draw.line(self.screen, _GRID_LINE, (i * cs, 0), (i * cs, self._map_px))
            pygame.draw.line(self.screen, _GRID_LINE, (0, i * cs), (self._map_px, i * cs))

    def _draw_cell(self, view: CellView, min_col: int, max_row: int) -> None:
        """Draw a cache square with its value; outline it when in range."""
        cs = self.cell_size
        x = (view.entry.coord.col - min_col) * cs
        y = (max_row - view.entry.coord.row) * cs
        colour = _CELL_EMPTY if view.entry.is_empty else _CELL_FULL
        pygame.draw.rect(self.screen, colour, (x + 2, y + 2, cs - 4, cs - 4))
        if view.interactable:
            width = 3 if view.actions else 1
            pygame.draw.rect(self.screen, _CELL_IN_RANGE, (x + 1, y + 1, cs - 2, cs - 2), width)
        label = self.font.render(str(view.entry.value), True, _TEXT)
        self.screen.blit(label, label.get_rect(center=(x + cs // 2, y + cs // 2)))

    def _draw_player(self, min_col: int, max_row: int) -> None:
        cs = self.cell_size
        pos = self.engine.player.position
        cx = (pos.col - min_col) * cs + cs // 2
        cy = (max_row - pos.row) * cs + cs // 2
        pygame.draw.circle(self.screen, _PLAYER, (cx, cy), max(3, cs // 4))

    def _draw_info_panel(self) -> None:
        """Draw a status panel on the right side of the window."""
        panel_x = self._map_px + 10
        y = 10
        player = self.engine.player
        held = "nothing" if player.held is None else str(player.held)

        lines = [
            f"Pos: ({player.position.row},{player.position.col})",
            f"Holding: {held}",
            f"Goal: {self.engine.config.victory_value}",
            f"Cells known: {len(self.engine.store)}",
            f"GPS: {'on' if self.engine.watching_geolocation else 'off'}",
        ]
        if self.engine.persistence_degraded:
            lines.append("Saving unavailable")
        lines += [
            "",
            "--- Controls ---",
            "WASD: move",
            "Arrows: pan",
            "PgUp/PgDn: pan far",
            "Click: collect/place/combine",
            "N: new game",
            "ESC: quit",
        ]

        for line in lines:
            surf = self.font.render(line, True, _TEXT)
            self.screen.blit(surf, (panel_x, y))
            y += 18

        if self._banner:
            surf = self.font.render(self._banner, True, _WIN)
            self.screen.blit(surf, (panel_x, y + 18))
