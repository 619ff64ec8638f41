"""Single-threaded frame loop driving a GameState.

Each frame drains pending input, applies gravity if it is due and hands a
snapshot to the renderer. Input is read with a bounded wait so gravity keeps
running when no keys are pressed.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Optional

from blockfall_core.game import Command, GameState
from blockfall_core.snapshot import Snapshot

logger = logging.getLogger(__name__)


class InputSource(ABC):
    """Source of player commands."""

    @abstractmethod
    def poll(self, timeout: float) -> Optional[Command]:
        """Wait at most `timeout` seconds for the next command.

        Returns:
            A command, or None if nothing arrived in time
        """
        pass


class Renderer(ABC):
    """Consumer of frame snapshots."""

    @abstractmethod
    def draw(self, snapshot: Snapshot) -> None:
        pass


@dataclass
class GameResult:
    """Summary of a finished game."""

    score: int
    lines_cleared: int
    pieces_locked: int
    duration_seconds: float
    quit: bool

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "score": self.score,
            "lines_cleared": self.lines_cleared,
            "pieces_locked": self.pieces_locked,
            "duration_seconds": self.duration_seconds,
            "quit": self.quit,
        }


class GameLoop:
    """Cooperative game loop: input, gravity, render."""

    # Upper bound on commands taken from the input source in one frame
    MAX_COMMANDS_PER_FRAME = 32

    def __init__(
        self,
        state: GameState,
        input_source: InputSource,
        renderer: Renderer,
        clock: Callable[[], float] = time.monotonic,
        poll_timeout: float = 0.01,
        frame_delay: float = 0.008,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize the loop.

        Args:
            state: Game to drive
            input_source: Where commands come from
            renderer: Where snapshots go
            clock: Monotonic clock in seconds
            poll_timeout: Bounded wait for the first command of a frame
            frame_delay: Pause after each frame
            sleep: Sleep function used for frame_delay
        """
        self.state = state
        self.input_source = input_source
        self.renderer = renderer
        self.clock = clock
        self.poll_timeout = poll_timeout
        self.frame_delay = frame_delay
        self.sleep = sleep

        self.last_gravity = clock()
        self.frames = 0
        self.quit_requested = False

    def run_frame(self) -> Snapshot:
        """Run one frame.

        Returns:
            The snapshot handed to the renderer
        """
        self._drain_input()

        if not self.state.done:
            now = self.clock()
            elapsed_ms = (now - self.last_gravity) * 1000.0
            if self.state.tick(elapsed_ms) is not None:
                self.last_gravity = now

        snapshot = self.state.snapshot()
        self.renderer.draw(snapshot)
        self.frames += 1
        return snapshot

    def _drain_input(self) -> None:
        timeout = self.poll_timeout
        for _ in range(self.MAX_COMMANDS_PER_FRAME):
            if self.state.done:
                return
            command = self.input_source.poll(timeout)
            if command is None:
                return
            if command == Command.QUIT:
                self.quit_requested = True
            self.state.apply(command)
            # Only the first poll of a frame may wait
            timeout = 0.0

    def run(self) -> GameResult:
        """Run frames until the game is over.

        Returns:
            Final game statistics
        """
        start_time = self.clock()
        self.last_gravity = start_time
        logger.info(f"Game started: {self.state.width}x{self.state.height}")

        while not self.state.done:
            self.run_frame()
            if self.frame_delay > 0:
                self.sleep(self.frame_delay)

        duration = self.clock() - start_time
        result = GameResult(
            score=self.state.score,
            lines_cleared=self.state.lines_total,
            pieces_locked=self.state.pieces_locked,
            duration_seconds=duration,
            quit=self.quit_requested,
        )
        logger.info(
            f"Game over: score {result.score}, {result.lines_cleared} lines, "
            f"{result.pieces_locked} pieces ({duration:.2f}s)"
        )
        return result
