"""Tests for rotation kicks, scoring and gravity speed."""

from blockfall_core.board import Board
from blockfall_core.piece import Piece, rotate_clockwise, PIECE_SHAPES
from blockfall_core.rules import (
    KICK_OFFSETS,
    MIN_INTERVAL_MS,
    calculate_score,
    gravity_interval,
    try_rotate,
)

VERTICAL_I = rotate_clockwise(PIECE_SHAPES["I"])


def blocked_board(columns):
    """Board with one filled cell at row 11 in each given column.

    A horizontal I at (5, 10) rotates into a vertical I covering rows 8-11,
    so each blocked column rules out the kick that lands on it.
    """
    board = Board()
    for x in columns:
        board.set(x, 11, 1)
    return board


def test_kick_order_is_fixed():
    """Test kicks are tried as no kick, left, right, two left, two right."""
    assert KICK_OFFSETS == (0, -1, 1, -2, 2)


def test_rotate_without_kick():
    """Test plain rotation keeps the position."""
    rotated = try_rotate(Board(), Piece("I", x=5, y=10))
    assert rotated is not None
    assert rotated.x == 5
    assert rotated.offsets == VERTICAL_I


def test_kick_prefers_left_over_right():
    """Test the left kick wins when both one-step kicks would fit."""
    rotated = try_rotate(blocked_board([5]), Piece("I", x=5, y=10))
    assert rotated is not None
    assert rotated.x == 4, "Should kick exactly one step left"
    assert rotated.offsets == VERTICAL_I


def test_kick_right_when_left_blocked():
    """Test the right kick is used when no kick and the left kick collide."""
    rotated = try_rotate(blocked_board([4, 5]), Piece("I", x=5, y=10))
    assert rotated.x == 6


def test_two_step_kicks():
    """Test two-step kicks, left before right."""
    rotated = try_rotate(blocked_board([4, 5, 6]), Piece("I", x=5, y=10))
    assert rotated.x == 3

    rotated = try_rotate(blocked_board([3, 4, 5, 6]), Piece("I", x=5, y=10))
    assert rotated.x == 7


def test_rotation_fails_when_all_kicks_collide():
    """Test rotation is rejected when every kick collides."""
    assert try_rotate(blocked_board([3, 4, 5, 6, 7]), Piece("I", x=5, y=10)) is None


def test_kick_off_the_wall():
    """Test a vertical I next to the right wall kicks back into the field."""
    piece = Piece("I", x=9, y=10, offsets=VERTICAL_I)
    rotated = try_rotate(Board(), piece)
    # Rotated twice the I spans x-1..x+2; only the two-step left kick fits
    assert rotated is not None
    assert rotated.x == 7
    assert all(0 <= x < 10 for x, _ in rotated.get_cells())


def test_line_clear_score():
    """Test line-clear bonus doubles per extra row."""
    assert calculate_score(0) == 0
    assert calculate_score(1) == 100
    assert calculate_score(2) == 200
    assert calculate_score(3) == 400
    assert calculate_score(4) == 800


def test_gravity_interval_steps():
    """Test the interval drops 20ms every 500 points."""
    assert gravity_interval(0) == 500
    assert gravity_interval(499) == 500
    assert gravity_interval(500) == 480
    assert gravity_interval(2600) == 400


def test_gravity_interval_floor():
    """Test the interval never drops below the minimum."""
    assert gravity_interval(10_000) == MIN_INTERVAL_MS
    assert gravity_interval(10 ** 12) == MIN_INTERVAL_MS

    previous = gravity_interval(0)
    for score in range(0, 50_000, 250):
        current = gravity_interval(score)
        assert MIN_INTERVAL_MS <= current <= previous, "Interval should only shrink"
        previous = current
