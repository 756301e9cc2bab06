from __future__ import annotations

import argparse
import logging
import random
import sys
from typing import Optional

from snake_charmer.driver import KEY_DIRECTIONS, TickDriver
from snake_charmer.game import GRID_SIZE, TICK_MS, SimulationEngine
from snake_charmer.render import PygameRenderer, render_text

try:
    import pygame  # type: ignore
except ImportError:  # pragma: no cover - pygame not installed in some envs
    pygame = None


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Move the food and watch the snake chase it")
    parser.add_argument("--grid", type=int, default=GRID_SIZE)
    parser.add_argument("--tick-ms", type=int, default=TICK_MS)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Print the board to the terminal and nudge the food randomly",
    )
    parser.add_argument(
        "--max-ticks",
        type=int,
        default=200,
        help="Tick limit for headless runs",
    )
    parser.add_argument("--log-level", type=str, default="WARNING")
    return parser.parse_args()


def run_headless(engine: SimulationEngine, max_ticks: int, seed: Optional[int] = None) -> None:
    nudges = random.Random(seed)
    keys = list(KEY_DIRECTIONS.values())
    for _ in range(max_ticks):
        if engine.terminal:
            break
        engine.relocate_target(nudges.choice(keys))
        engine.step()
        print(render_text(engine.snapshot(), engine.grid_size))
        print()


def run_window(engine: SimulationEngine, tick_ms: int) -> None:
    renderer = PygameRenderer(engine.grid_size)
    driver = TickDriver(engine, period_ms=tick_ms)
    keymap = {
        pygame.K_UP: KEY_DIRECTIONS["up"],
        pygame.K_RIGHT: KEY_DIRECTIONS["right"],
        pygame.K_DOWN: KEY_DIRECTIONS["down"],
        pygame.K_LEFT: KEY_DIRECTIONS["left"],
    }
    clock = pygame.time.Clock()
    engine.subscribe(renderer.draw)
    renderer.draw(engine.snapshot())

    while True:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                driver.cancel()
                renderer.close()
                return
            if event.type == pygame.KEYDOWN and event.key in keymap:
                engine.relocate_target(keymap[event.key])

        # the final board stays up until the window is closed
        driver.advance(clock.tick(60))


def window_errors() -> tuple:
    """Errors meaning no window can be opened: no pygame, or no display."""
    if pygame is None:
        return (ImportError,)
    return (ImportError, pygame.error)


def main() -> None:
    args = parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = SimulationEngine(grid_size=args.grid, seed=args.seed)
    if args.headless:
        run_headless(engine, args.max_ticks, seed=args.seed)
    else:
        try:
            run_window(engine, args.tick_ms)
        except window_errors() as exc:
            print(f"{exc}; use --headless", file=sys.stderr)
            sys.exit(1)

    score = engine.snapshot().score
    if engine.terminal:
        print(f"Game over! Final score: {score}")
    else:
        print(f"Stopped before game over. Score: {score}")


if __name__ == "__main__":
    main()
