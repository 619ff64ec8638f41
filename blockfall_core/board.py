"""Playing field with collision detection, locking and line clearing."""

from typing import List

from blockfall_core.piece import KIND_IDS, Piece

# Cell value for an empty cell; filled cells hold the piece kind id (1-7)
EMPTY = 0


class Board:
    """Fixed-size grid of cells, row 0 at the top."""

    WIDTH = 10
    HEIGHT = 20

    def __init__(self, width: int = WIDTH, height: int = HEIGHT):
        """Initialize an empty board.

        Args:
            width: Number of columns
            height: Number of rows
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid board size: {width}x{height}")
        self.width = width
        self.height = height
        # cells[y * width + x] represents the cell at (x, y)
        self.cells: List[int] = [EMPTY] * (width * height)

    def get(self, x: int, y: int) -> int:
        """Get cell value at (x, y).

        Args:
            x: Column
            y: Row (0 at top)

        Returns:
            Cell value (0 = empty, 1-7 = filled with that piece kind)
        """
        if not self.in_bounds(x, y):
            raise IndexError(f"Cell ({x}, {y}) is outside the board")
        return self.cells[y * self.width + x]

    def set(self, x: int, y: int, value: int) -> None:
        """Set cell value at (x, y). Out-of-bounds writes are dropped."""
        if not EMPTY <= value <= 7:
            raise ValueError(f"Invalid cell value: {value}")
        if self.in_bounds(x, y):
            self.cells[y * self.width + x] = value

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def collides(self, piece: Piece) -> bool:
        """Check if a piece collides with the walls, floor or locked cells.

        Cells above the field (y < 0) only collide with the side walls, so a
        freshly spawned piece can hang partly above the board.

        Args:
            piece: The piece to check

        Returns:
            True if collision detected
        """
        for x, y in piece.get_cells():
            if x < 0 or x >= self.width or y >= self.height:
                return True
            if y >= 0 and self.cells[y * self.width + x] != EMPTY:
                return True
        return False

    def lock_piece(self, piece: Piece) -> None:
        """Write a piece's cells into the board.

        Cells still above the field are dropped rather than written.

        Args:
            piece: The piece to lock
        """
        for x, y in piece.get_cells():
            self.set(x, y, piece.kind_id)

    def is_line_full(self, y: int) -> bool:
        row = self.cells[y * self.width:(y + 1) * self.width]
        return all(cell != EMPTY for cell in row)

    def clear_lines(self) -> int:
        """Remove all full rows and compact the rest downward.

        Rows are read once from bottom to top; every kept row is copied at
        most once to its final position, and the rows left over at the top
        are emptied.

        Returns:
            Number of lines cleared
        """
        write_y = self.height - 1
        lines_cleared = 0

        for read_y in range(self.height - 1, -1, -1):
            if self.is_line_full(read_y):
                lines_cleared += 1
                continue
            if write_y != read_y:
                src = read_y * self.width
                dst = write_y * self.width
                self.cells[dst:dst + self.width] = self.cells[src:src + self.width]
            write_y -= 1

        # Vacated rows at the top
        self.cells[:(write_y + 1) * self.width] = [EMPTY] * ((write_y + 1) * self.width)

        return lines_cleared

    def rows(self) -> List[List[int]]:
        """Get the board as a list of rows, top to bottom."""
        return [
            self.cells[y * self.width:(y + 1) * self.width]
            for y in range(self.height)
        ]

    def copy(self) -> "Board":
        """Create a deep copy of the board."""
        new_board = Board(self.width, self.height)
        new_board.cells = self.cells.copy()
        return new_board

    def to_list(self) -> List[int]:
        """Export board as flat row-major list (for serialization)."""
        return self.cells.copy()

    @classmethod
    def from_list(cls, cells: List[int], width: int = WIDTH, height: int = HEIGHT) -> "Board":
        """Create board from flat list.

        Args:
            cells: Row-major cell values
            width: Number of columns
            height: Number of rows

        Returns:
            New board
        """
        if len(cells) != width * height:
            raise ValueError(f"Expected {width * height} cells, got {len(cells)}")
        for value in cells:
            if not 0 <= value <= 7:
                raise ValueError(f"Invalid cell value: {value}")
        board = cls(width, height)
        board.cells = list(cells)
        return board

    @classmethod
    def from_rows(cls, rows: List[str]) -> "Board":
        """Build a board from text rows, top to bottom.

        "." is empty; a digit 1-7 or a kind letter fills the cell. Handy for
        setting up positions in tests and replays.
        """
        if not rows:
            raise ValueError("Expected at least one row")
        width = len(rows[0])
        cells: List[int] = []
        for row in rows:
            if len(row) != width:
                raise ValueError(f"Row width mismatch: {row!r}")
            for ch in row:
                if ch == ".":
                    cells.append(EMPTY)
                elif ch in KIND_IDS:
                    cells.append(KIND_IDS[ch])
                elif ch.isdigit():
                    cells.append(int(ch))
                else:
                    raise ValueError(f"Invalid cell character: {ch!r}")
        return cls.from_list(cells, width, len(rows))
