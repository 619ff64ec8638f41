"""Game state machine.

Owns the board, the active piece and the score, applies player commands and
gravity steps, and reports a snapshot after each of them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from blockfall_core.board import Board
from blockfall_core.piece import Piece, spawn_piece
from blockfall_core.rng import SevenBagRNG, UniformRNG
from blockfall_core.rules import (
    HARD_DROP_POINTS,
    SOFT_DROP_POINTS,
    calculate_score,
    gravity_interval,
    try_rotate,
)
from blockfall_core.snapshot import PieceView, Snapshot

logger = logging.getLogger(__name__)


class Command(Enum):
    """Player commands."""
    MOVE_LEFT = "MOVE_LEFT"
    MOVE_RIGHT = "MOVE_RIGHT"
    SOFT_DROP = "SOFT_DROP"
    ROTATE = "ROTATE"      # Clockwise, with wall kicks
    HARD_DROP = "HARD_DROP"
    QUIT = "QUIT"


class Phase(Enum):
    RUNNING = "running"
    OVER = "over"


@dataclass
class StepResult:
    """Result of a command or gravity step."""
    snapshot: Snapshot
    accepted: bool
    done: bool
    info: Dict[str, Any]


class GameState:
    """A single game: board, active piece, next piece, score and phase."""

    def __init__(
        self,
        width: int = Board.WIDTH,
        height: int = Board.HEIGHT,
        seed: Optional[int] = None,
        rng=None,
        bag_randomizer: bool = False,
    ):
        """Initialize and start a new game.

        Args:
            width: Board width in cells
            height: Board height in cells
            seed: Random seed for reproducible piece sequences
            rng: Piece generator with next() and reset(seed); overrides
                 seed-based construction when given
            bag_randomizer: Deal pieces from shuffled 7-bags instead of
                 independent uniform draws
        """
        self.width = width
        self.height = height
        self.seed = seed
        self.bag_randomizer = bag_randomizer
        if rng is not None:
            self.rng = rng
        elif bag_randomizer:
            self.rng = SevenBagRNG(seed)
        else:
            self.rng = UniformRNG(seed)

        self.board = Board(width, height)
        self.current_piece: Optional[Piece] = None
        self.next_kind: Optional[str] = None
        self.phase = Phase.RUNNING

        self.score = 0
        self.lines_total = 0
        self.pieces_locked = 0
        self.gravity_interval_ms = gravity_interval(0)

        self._start()

    @property
    def done(self) -> bool:
        return self.phase == Phase.OVER

    def reset(self, seed: Optional[int] = None) -> Snapshot:
        """Start a new game on an empty board.

        Args:
            seed: New random seed; keeps the current piece sequence if None

        Returns:
            Initial snapshot
        """
        if seed is not None:
            self.seed = seed
            self.rng.reset(seed)

        self.board = Board(self.width, self.height)
        self.phase = Phase.RUNNING
        self.score = 0
        self.lines_total = 0
        self.pieces_locked = 0
        self.gravity_interval_ms = gravity_interval(0)

        self._start()
        return self.snapshot()

    def _start(self) -> None:
        self.next_kind = self.rng.next()
        self._spawn_piece()

    def apply(self, command: Command) -> StepResult:
        """Apply one player command.

        Illegal moves leave the game unchanged and report accepted=False.
        Once the game is over nothing changes any more.

        Args:
            command: Command to execute

        Returns:
            Step result with snapshot, accepted flag, done and info
        """
        if self.done:
            return self._result(False, {"error": "Game over"})

        events: List[str] = []
        lines_cleared = 0
        score_before = self.score
        accepted = False

        if command == Command.MOVE_LEFT:
            accepted = self._try_move(-1, 0)
            if accepted:
                events.append("move")
        elif command == Command.MOVE_RIGHT:
            accepted = self._try_move(1, 0)
            if accepted:
                events.append("move")
        elif command == Command.SOFT_DROP:
            # Never locks; only gravity and hard drop do
            accepted = self._try_move(0, 1)
            if accepted:
                self.score += SOFT_DROP_POINTS
                events.append("soft_drop")
        elif command == Command.ROTATE:
            accepted = self._try_rotate()
            if accepted:
                events.append("rotate")
        elif command == Command.HARD_DROP:
            events.append("hard_drop")
            lines_cleared = self._hard_drop(events)
            accepted = True
        elif command == Command.QUIT:
            self.phase = Phase.OVER
            events.append("quit")
            accepted = True
            logger.debug(f"Quit with score {self.score}")

        return self._result(accepted, {
            "events": events,
            "lines_cleared": lines_cleared,
            "score_delta": self.score - score_before,
        })

    def tick(self, elapsed_ms: float) -> Optional[StepResult]:
        """Apply gravity if enough time has passed.

        Args:
            elapsed_ms: Time since the last gravity step, in milliseconds

        Returns:
            Result of the gravity step, or None if no step was due
        """
        if self.done or elapsed_ms < self.gravity_interval_ms:
            return None
        return self.gravity_step()

    def gravity_step(self) -> StepResult:
        """Move the active piece down one row, locking it if it cannot move.

        Returns:
            Step result
        """
        if self.done:
            return self._result(False, {"error": "Game over"})

        events = ["gravity"]
        score_before = self.score
        lines_cleared = 0

        if not self._try_move(0, 1):
            lines_cleared = self._lock_and_spawn(events)
            # Speed only changes after a gravity lock
            self.gravity_interval_ms = gravity_interval(self.score)

        return self._result(True, {
            "events": events,
            "lines_cleared": lines_cleared,
            "score_delta": self.score - score_before,
        })

    def snapshot(self) -> Snapshot:
        """Build a read-only view of the current frame."""
        return Snapshot(
            board=self.board.copy(),
            active=PieceView.active(self.current_piece),
            next=PieceView.preview(self.next_kind),
            score=self.score,
            phase=self.phase.value,
            gravity_interval_ms=self.gravity_interval_ms,
            lines_total=self.lines_total,
        )

    def _result(self, accepted: bool, info: Dict[str, Any]) -> StepResult:
        return StepResult(self.snapshot(), accepted, self.done, info)

    def _spawn_piece(self) -> bool:
        """Spawn the next piece and draw a new preview kind.

        Returns:
            False if the new piece is blocked (game over)
        """
        kind = self.next_kind
        self.next_kind = self.rng.next()
        self.current_piece = spawn_piece(kind, self.board.width)

        if self.board.collides(self.current_piece):
            self.phase = Phase.OVER
            logger.debug(f"Spawn blocked for {kind}, game over with score {self.score}")
            return False
        return True

    def _try_move(self, dx: int, dy: int) -> bool:
        """Try to move the current piece.

        Args:
            dx: Change in x
            dy: Change in y

        Returns:
            True if move succeeded
        """
        new_piece = self.current_piece.move(dx, dy)
        if not self.board.collides(new_piece):
            self.current_piece = new_piece
            return True
        return False

    def _try_rotate(self) -> bool:
        rotated = try_rotate(self.board, self.current_piece)
        if rotated:
            self.current_piece = rotated
            return True
        return False

    def _hard_drop(self, events: List[str]) -> int:
        """Drop the current piece as far as it goes and lock it.

        Returns:
            Lines cleared by the lock
        """
        while not self.board.collides(self.current_piece.move(0, 1)):
            self.current_piece = self.current_piece.move(0, 1)
            self.score += HARD_DROP_POINTS

        return self._lock_and_spawn(events)

    def _lock_and_spawn(self, events: List[str]) -> int:
        """Lock the current piece, clear lines, score them and spawn."""
        self.board.lock_piece(self.current_piece)
        self.pieces_locked += 1
        events.append("lock")

        lines_cleared = self.board.clear_lines()
        if lines_cleared > 0:
            events.append("clear")
            self.lines_total += lines_cleared
            self.score += calculate_score(lines_cleared)
            logger.debug(f"Cleared {lines_cleared} line(s), score {self.score}")

        if self._spawn_piece():
            events.append("spawn")
        else:
            events.append("top_out")

        return lines_cleared
