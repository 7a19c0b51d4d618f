import os
import sys

import pytest


# Ensure the repository root is on sys.path for `from src...` imports
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from src.engine.game import Game  # noqa: E402
from src.engine.move import str_to_square  # noqa: E402


@pytest.fixture
def play():
    """Play a sequence of long algebraic moves on a game, asserting each applies."""

    def _play(game: Game, *moves: str) -> Game:
        for uci in moves:
            outcome = game.attempt_move(str_to_square(uci[:2]), str_to_square(uci[2:4]))
            assert outcome.applied, f"move {uci} was rejected"
        return game

    return _play
