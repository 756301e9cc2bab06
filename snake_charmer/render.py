from __future__ import annotations

import numpy as np

from snake_charmer.game import SimulationState

try:
    import pygame  # type: ignore
except ImportError:  # pragma: no cover - pygame not installed in some envs
    pygame = None

EMPTY = 0
BODY = 1
HEAD = 2
FOOD = 3

SYMBOLS = {EMPTY: ".", BODY: "o", HEAD: "@", FOOD: "*"}


def encode_grid(state: SimulationState, grid_size: int) -> np.ndarray:
    """Board as an int8 array indexed ``[y, x]``; snake tiles hide the food."""
    grid = np.zeros((grid_size, grid_size), dtype=np.int8)

    fx, fy = state.target
    if 0 <= fx < grid_size and 0 <= fy < grid_size:
        grid[fy, fx] = FOOD

    for x, y in state.body[1:]:
        grid[y, x] = BODY
    hx, hy = state.head
    grid[hy, hx] = HEAD
    return grid


def render_text(state: SimulationState, grid_size: int) -> str:
    grid = encode_grid(state, grid_size)
    lines = [" ".join(SYMBOLS[int(v)] for v in row) for row in grid]
    lines.append(f"Score: {state.score}")
    if state.terminal:
        lines.append("Game over")
    return "\n".join(lines)


class PygameRenderer:
    """Draws snapshots into a pygame window, one tile per cell."""

    COLORS = {
        EMPTY: (20, 20, 20),
        BODY: (0, 150, 0),
        HEAD: (0, 200, 0),
        FOOD: (200, 50, 50),
    }

    def __init__(self, grid_size: int, tile_size: int = 50, title: str = "Snake Charmer") -> None:
        if pygame is None:
            raise ImportError("pygame is required for rendering")

        self.grid_size = grid_size
        self.tile_size = tile_size
        self.title = title

        pygame.init()
        side = grid_size * tile_size
        self._window = pygame.display.set_mode((side, side))
        pygame.display.set_caption(title)
        self._font = pygame.font.Font(None, tile_size)

    def draw(self, state: SimulationState) -> None:
        grid = encode_grid(state, self.grid_size)
        self._window.fill(self.COLORS[EMPTY])

        for y in range(self.grid_size):
            for x in range(self.grid_size):
                rect = pygame.Rect(
                    x * self.tile_size,
                    y * self.tile_size,
                    self.tile_size,
                    self.tile_size,
                )
                kind = int(grid[y, x])
                if kind != EMPTY:
                    pygame.draw.rect(self._window, self.COLORS[kind], rect)
                pygame.draw.rect(self._window, (30, 30, 30), rect, 1)

        pygame.display.set_caption(f"{self.title} - Score: {state.score}")
        if state.terminal:
            banner = self._font.render("Game over", True, (240, 240, 240))
            side = self.grid_size * self.tile_size
            self._window.blit(banner, banner.get_rect(center=(side // 2, side // 2)))

        pygame.display.flip()

    def close(self) -> None:
        if pygame:
            pygame.quit()
