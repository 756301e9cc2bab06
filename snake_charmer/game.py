from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

GRID_SIZE = 10
TICK_MS = 500
START_BODY: Tuple[Cell, ...] = ((5, 5),)
START_TARGET: Cell = (2, 2)
MAX_PLACEMENT_ATTEMPTS = 1000


def add_pos(a: Cell, b: Cell) -> Cell:
    return a[0] + b[0], a[1] + b[1]


class Direction(Enum):
    UP = (0, -1)
    RIGHT = (1, 0)
    DOWN = (0, 1)
    LEFT = (-1, 0)

    @property
    def vector(self) -> Cell:
        return self.value

    @property
    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @classmethod
    def parse(cls, value: Union["Direction", str]) -> "Direction":
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(f"Unknown direction: {value!r}") from None


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.RIGHT: Direction.LEFT,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
}


class PlacementError(RuntimeError):
    """Raised when no free cell is left for the food."""


@dataclass(frozen=True)
class SimulationState:
    body: Tuple[Cell, ...]
    target: Cell
    score: int = 0
    terminal: bool = False

    @property
    def head(self) -> Cell:
        return self.body[0]


@dataclass(frozen=True)
class StepResult:
    body: Tuple[Cell, ...]
    target: Cell
    score: int
    terminal: bool
    move: Optional[Direction]
    ate_food: bool
    collision: bool


def infer_heading(body: Sequence[Cell]) -> Direction:
    """Heading from the head/neck pair; a lone head faces up."""
    if len(body) < 2:
        return Direction.UP
    (hx, hy), (nx, ny) = body[0], body[1]
    if hy < ny:
        return Direction.UP
    if hx > nx:
        return Direction.RIGHT
    if hy > ny:
        return Direction.DOWN
    if hx < nx:
        return Direction.LEFT
    raise AssertionError(f"head {body[0]} overlaps neck {body[1]}")


def choose_move(head: Cell, heading: Direction, target: Cell) -> Direction:
    """Greedy pursuit of the target, vertical axis first, never reversing.

    The result is a staircase path: the snake closes the row gap first,
    then the column gap, and keeps going straight when every wanted
    direction would reverse it.
    """
    if target[1] < head[1] and heading is not Direction.DOWN:
        return Direction.UP
    if target[0] > head[0] and heading is not Direction.LEFT:
        return Direction.RIGHT
    if target[1] > head[1] and heading is not Direction.UP:
        return Direction.DOWN
    if target[0] < head[0] and heading is not Direction.RIGHT:
        return Direction.LEFT
    return heading


def _validate(body: Sequence[Cell], target: Cell, grid_size: int) -> None:
    if not body:
        raise ValueError("body must contain at least one cell")
    for x, y in list(body) + [target]:
        if not (0 <= x < grid_size and 0 <= y < grid_size):
            raise ValueError(f"cell {(x, y)} is outside a {grid_size}x{grid_size} grid")
    if len(set(body)) != len(body):
        raise ValueError("body cells must be distinct")
    for a, b in zip(body, body[1:]):
        if abs(a[0] - b[0]) + abs(a[1] - b[1]) != 1:
            raise ValueError(f"body cells {a} and {b} are not adjacent")


class SimulationEngine:
    """Tick-driven snake that chases a food cell moved by the player.

    The engine owns the whole game state. Hosts drive it with ``step()`` on
    a fixed period and ``relocate_target()`` on input, and draw from
    ``snapshot()``. It is not thread safe; see ``driver.LockedEngine``.
    """

    def __init__(
        self,
        grid_size: int = GRID_SIZE,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        start_body: Optional[Sequence[Cell]] = None,
        start_target: Optional[Cell] = None,
        max_placement_attempts: int = MAX_PLACEMENT_ATTEMPTS,
        state: Optional[SimulationState] = None,
    ) -> None:
        if grid_size < 2:
            raise ValueError(f"grid_size must be >= 2, got {grid_size}")
        if max_placement_attempts < 1:
            raise ValueError("max_placement_attempts must be >= 1")

        if grid_size == GRID_SIZE:
            default_body, default_target = START_BODY, START_TARGET
        else:
            default_body = ((grid_size // 2, grid_size // 2),)
            default_target = (grid_size // 5, grid_size // 5)
        if start_body is None:
            start_body = default_body
        if start_target is None:
            start_target = default_target
        start_body = tuple(tuple(c) for c in start_body)
        start_target = tuple(start_target)
        _validate(start_body, start_target, grid_size)
        if start_target in start_body:
            raise ValueError(f"start target {start_target} lies on the snake")

        self.grid_size = grid_size
        self.random = rng if rng is not None else random.Random(seed)
        self.max_placement_attempts = max_placement_attempts
        self.start_body = start_body
        self.start_target = start_target

        self._listeners: List[Callable[[SimulationState], None]] = []
        if state is None:
            self._state = SimulationState(body=start_body, target=start_target)
        else:
            _validate(state.body, state.target, grid_size)
            if state.score < 0:
                raise ValueError(f"score must be >= 0, got {state.score}")
            self._state = SimulationState(
                body=tuple(tuple(c) for c in state.body),
                target=tuple(state.target),
                score=state.score,
                terminal=state.terminal,
            )

    @classmethod
    def from_state(
        cls,
        state: SimulationState,
        grid_size: int = GRID_SIZE,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
    ) -> "SimulationEngine":
        """Engine resuming from ``state``; the target may sit on the body."""
        return cls(grid_size=grid_size, rng=rng, seed=seed, state=state)

    # -- queries ---------------------------------------------------------

    def snapshot(self) -> SimulationState:
        return self._state

    @property
    def terminal(self) -> bool:
        return self._state.terminal

    @property
    def heading(self) -> Direction:
        return infer_heading(self._state.body)

    def choose_move(self) -> Direction:
        state = self._state
        return choose_move(state.head, infer_heading(state.body), state.target)

    def subscribe(self, callback: Callable[[SimulationState], None]) -> Callable[[], None]:
        """Call ``callback(snapshot)`` after every state change."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # -- transitions -----------------------------------------------------

    def reset(self) -> SimulationState:
        self._state = SimulationState(body=self.start_body, target=self.start_target)
        self._notify()
        return self._state

    def relocate_target(self, direction: Union[Direction, str]) -> SimulationState:
        if self._state.terminal:
            return self._state

        dx, dy = Direction.parse(direction).vector
        x, y = self._state.target
        limit = self.grid_size - 1
        target = (min(max(x + dx, 0), limit), min(max(y + dy, 0), limit))
        if target != self._state.target:
            self._commit(target=target)
        return self._state

    def step(self) -> StepResult:
        state = self._state
        if state.terminal:
            return self._result(move=None, ate_food=False, collision=False)

        assert state.body, "snake body is empty"
        move = self.choose_move()
        new_head = add_pos(state.head, move.vector)

        if self._is_collision(new_head, state.body):
            logger.info("Collision at %s after %d food; game over", new_head, state.score)
            self._commit(terminal=True)
            return self._result(move=move, ate_food=False, collision=True)

        body = (new_head,) + state.body
        if new_head != state.target:
            logger.debug("Move %s to %s", move.name, new_head)
            self._commit(body=body[:-1])
            return self._result(move=move, ate_food=False, collision=False)

        score = state.score + 1
        try:
            target = self.generate_target(body)
        except PlacementError:
            logger.info("Snake fills the board with score %d; game over", score)
            self._commit(body=body, score=score, terminal=True)
        else:
            logger.info("Food eaten at %s, score %d, next food at %s", new_head, score, target)
            self._commit(body=body, target=target, score=score)
        return self._result(move=move, ate_food=True, collision=False)

    def generate_target(self, body: Iterable[Cell]) -> Cell:
        """Uniform random free cell; raises ``PlacementError`` on a full board."""
        occupied = set(body)
        size = self.grid_size
        for _ in range(self.max_placement_attempts):
            cell = (self.random.randrange(size), self.random.randrange(size))
            if cell not in occupied:
                return cell

        available = [
            (x, y)
            for x in range(size)
            for y in range(size)
            if (x, y) not in occupied
        ]
        if not available:
            raise PlacementError("no free cell left for the food")
        return self.random.choice(available)

    # -- internals -------------------------------------------------------

    def _is_collision(self, pos: Cell, body: Sequence[Cell]) -> bool:
        x, y = pos
        if x < 0 or x >= self.grid_size or y < 0 or y >= self.grid_size:
            return True
        return pos in body

    def _commit(self, **changes) -> None:
        state = self._state
        body = changes.get("body", state.body)
        assert body and len(set(body)) == len(body), "snake body overlaps itself"
        self._state = SimulationState(
            body=body,
            target=changes.get("target", state.target),
            score=changes.get("score", state.score),
            terminal=changes.get("terminal", state.terminal),
        )
        self._notify()

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self._state)

    def _result(self, move: Optional[Direction], ate_food: bool, collision: bool) -> StepResult:
        state = self._state
        return StepResult(
            body=state.body,
            target=state.target,
            score=state.score,
            terminal=state.terminal,
            move=move,
            ate_food=ate_food,
            collision=collision,
        )
