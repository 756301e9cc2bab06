import numpy as np
import pytest

from snake_charmer import render
from snake_charmer.game import SimulationState
from snake_charmer.render import BODY, EMPTY, FOOD, HEAD, encode_grid, render_text


def test_encode_grid_marks_cells():
    state = SimulationState(body=((5, 4), (5, 5)), target=(2, 2))
    grid = encode_grid(state, 10)
    assert grid.shape == (10, 10)
    assert grid.dtype == np.int8
    assert grid[4, 5] == HEAD
    assert grid[5, 5] == BODY
    assert grid[2, 2] == FOOD
    assert int((grid == EMPTY).sum()) == 97


def test_snake_hides_food_underneath():
    state = SimulationState(body=((5, 4), (5, 5)), target=(5, 5))
    grid = encode_grid(state, 10)
    assert grid[5, 5] == BODY
    assert int((grid == FOOD).sum()) == 0


def test_render_text_board_and_score():
    state = SimulationState(body=((1, 1),), target=(2, 0), score=3)
    lines = render_text(state, 3).splitlines()
    assert lines == [". . *", ". @ .", ". . .", "Score: 3"]


def test_render_text_shows_game_over():
    state = SimulationState(body=((1, 1),), target=(2, 0), terminal=True)
    assert render_text(state, 3).splitlines()[-1] == "Game over"


def test_pygame_renderer_requires_pygame(monkeypatch):
    monkeypatch.setattr(render, "pygame", None)
    with pytest.raises(ImportError):
        render.PygameRenderer(10)
