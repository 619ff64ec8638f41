#!/usr/bin/env python3
"""Play in a text terminal.

Controls:
    Left / Right   move
    Down           soft drop
    Up             rotate clockwise
    Space          hard drop
    Q or Esc       quit

Usage:
    python play_terminal.py [seed] [--bag]
"""

import curses
import sys
from typing import Optional

from blockfall_core.game import Command, GameState
from blockfall_core.loop import GameLoop, GameResult, InputSource, Renderer
from blockfall_core.piece import KIND_COLORS
from blockfall_core.snapshot import Snapshot

KEY_COMMANDS = {
    curses.KEY_LEFT: Command.MOVE_LEFT,
    curses.KEY_RIGHT: Command.MOVE_RIGHT,
    curses.KEY_DOWN: Command.SOFT_DROP,
    curses.KEY_UP: Command.ROTATE,
    ord(" "): Command.HARD_DROP,
    ord("q"): Command.QUIT,
    ord("Q"): Command.QUIT,
    27: Command.QUIT,  # Esc
}

# Logical color name -> (curses color, extra attribute)
CURSES_COLORS = {
    "cyan": (curses.COLOR_CYAN, curses.A_BOLD),
    "yellow": (curses.COLOR_YELLOW, curses.A_BOLD),
    "magenta": (curses.COLOR_MAGENTA, curses.A_BOLD),
    "blue": (curses.COLOR_BLUE, curses.A_BOLD),
    "red": (curses.COLOR_RED, curses.A_BOLD),
    "green": (curses.COLOR_GREEN, curses.A_BOLD),
    "dark_red": (curses.COLOR_RED, curses.A_NORMAL),
}


class CursesInput(InputSource):
    """Reads keys with a bounded wait and ignores unmapped ones."""

    def __init__(self, stdscr):
        self.stdscr = stdscr
        stdscr.keypad(True)

    def poll(self, timeout: float) -> Optional[Command]:
        """Next mapped command, or None once the wait times out."""
        self.stdscr.timeout(int(timeout * 1000))
        while True:
            key = self.stdscr.getch()
            if key == -1:
                return None
            if key in KEY_COMMANDS:
                return KEY_COMMANDS[key]
            # Skip stray keys without waiting again
            self.stdscr.timeout(0)


class CursesRenderer(Renderer):
    """Paints the board, active piece, preview and score."""

    def __init__(self, stdscr):
        self.stdscr = stdscr
        self.attrs = {}
        curses.curs_set(0)
        curses.start_color()
        curses.use_default_colors()
        for pair, (name, (color, extra)) in enumerate(CURSES_COLORS.items(), start=1):
            curses.init_pair(pair, color, -1)
            self.attrs[name] = curses.color_pair(pair) | extra

    def _cell(self, y: int, x: int, color: str) -> None:
        try:
            self.stdscr.addstr(y, x, "[]", self.attrs[color])
        except curses.error:
            pass  # Terminal too small

    def draw(self, snapshot: Snapshot) -> None:
        scr = self.stdscr
        scr.erase()
        w, h = snapshot.width, snapshot.height
        scr.addstr(0, 0, "+" + "--" * w + "+")
        for y, row in enumerate(snapshot.board.rows()):
            scr.addstr(y + 1, 0, "|")
            scr.addstr(y + 1, 2 * w + 1, "|")
            for x, value in enumerate(row):
                if value:
                    self._cell(y + 1, 1 + 2 * x, KIND_COLORS[value])
        scr.addstr(h + 1, 0, "+" + "--" * w + "+")

        for x, y in snapshot.active.cells:
            if 0 <= y < h:
                self._cell(y + 1, 1 + 2 * x, snapshot.active.color)

        side = 2 * w + 4
        scr.addstr(1, side, "Next:")
        for dx, dy in snapshot.next.cells:
            self._cell(3 + dy, side + 4 + 2 * dx, snapshot.next.color)
        scr.addstr(7, side, f"Score: {snapshot.score}")
        scr.addstr(8, side, f"Lines: {snapshot.lines_total}")
        scr.addstr(10, side, "Controls: <- -> v ^ Space Q")
        scr.refresh()


def play(stdscr, seed: Optional[int], bag: bool) -> GameResult:
    state = GameState(seed=seed, bag_randomizer=bag)
    loop = GameLoop(state, CursesInput(stdscr), CursesRenderer(stdscr))
    result = loop.run()

    h = state.height
    try:
        stdscr.addstr(h + 3, 0, f"Game Over! Final score: {result.score}")
        stdscr.addstr(h + 4, 0, "Press any key to exit...")
    except curses.error:
        pass
    stdscr.timeout(-1)
    stdscr.getch()
    return result


def main():
    """Run a terminal game."""
    args = sys.argv[1:]
    bag = "--bag" in args
    positional = [a for a in args if not a.startswith("--")]
    seed = int(positional[0]) if positional else None

    try:
        result = curses.wrapper(play, seed, bag)
    except KeyboardInterrupt:
        print("\nBye!")
        return

    print(f"Final score: {result.score}")
    print(f"Lines cleared: {result.lines_cleared}")
    print(f"Pieces placed: {result.pieces_locked}")


if __name__ == "__main__":
    main()
