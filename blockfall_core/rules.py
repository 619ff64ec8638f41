"""Rotation wall kicks, line-clear scoring and gravity speed.

Rotation uses a single horizontal kick list shared by every piece kind,
tried in order after the plain rotation.
"""

from typing import Optional

from blockfall_core.board import Board
from blockfall_core.piece import Piece

# Horizontal offsets tried after rotating: no kick, then left before right
KICK_OFFSETS = (0, -1, 1, -2, 2)

# Score per row moved by the player
SOFT_DROP_POINTS = 1
HARD_DROP_POINTS = 2

# Gravity speed-up, all times in milliseconds
BASE_INTERVAL_MS = 500
MIN_INTERVAL_MS = 100
SCORE_STEP = 500
STEP_DECREMENT_MS = 20


def try_rotate(board: Board, piece: Piece) -> Optional[Piece]:
    """Attempt to rotate a piece clockwise with wall kicks.

    Args:
        board: Current board state
        piece: Piece to rotate

    Returns:
        Rotated (and possibly shifted) piece, or None if every kick collides
    """
    rotated = piece.rotate()
    for dx in KICK_OFFSETS:
        test_piece = rotated.move(dx, 0)
        if not board.collides(test_piece):
            return test_piece
    return None


def calculate_score(lines_cleared: int) -> int:
    """Bonus for clearing rows with a single lock.

    Doubles per extra row: 1 -> 100, 2 -> 200, 3 -> 400, 4 -> 800.

    Args:
        lines_cleared: Number of lines cleared simultaneously

    Returns:
        Score points
    """
    if lines_cleared <= 0:
        return 0
    return 100 * 2 ** (lines_cleared - 1)


def gravity_interval(score: int) -> int:
    """Delay between automatic drops for a given score, in milliseconds.

    Every SCORE_STEP points shave STEP_DECREMENT_MS off the base interval,
    never going below MIN_INTERVAL_MS.
    """
    steps = score // SCORE_STEP
    return max(MIN_INTERVAL_MS, BASE_INTERVAL_MS - steps * STEP_DECREMENT_MS)
