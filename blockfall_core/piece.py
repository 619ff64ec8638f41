"""Tetromino shapes and the active piece.

Each shape is stored once, in its canonical rotation, as 4 (x, y) offsets
around a rotation center at (0, 0). Other rotations are computed on demand by
rotating the piece's current offsets.
"""

from typing import Dict, List, Optional, Tuple

# Type alias for piece coordinates
Coords = List[Tuple[int, int]]

# Kind letters in id order; id = index + 1 and doubles as the cell value
PIECE_KINDS = ["I", "O", "T", "J", "L", "S", "Z"]

KIND_IDS: Dict[str, int] = {kind: i + 1 for i, kind in enumerate(PIECE_KINDS)}

# Logical color identity per kind id (presentation is up to the renderer)
KIND_COLORS: Dict[int, str] = {
    1: "cyan",
    2: "yellow",
    3: "magenta",
    4: "blue",
    5: "red",
    6: "green",
    7: "dark_red",
}

# Canonical offsets, x grows right and y grows down
PIECE_SHAPES: Dict[str, Coords] = {
    "I": [(-2, 0), (-1, 0), (0, 0), (1, 0)],
    "O": [(0, 0), (1, 0), (0, 1), (1, 1)],
    "T": [(-1, 0), (0, 0), (1, 0), (0, 1)],
    "J": [(-1, 0), (0, 0), (1, 0), (1, 1)],
    "L": [(-1, 0), (0, 0), (1, 0), (-1, 1)],
    "S": [(-1, 1), (0, 1), (0, 0), (1, 0)],
    "Z": [(-1, 0), (0, 0), (0, 1), (1, 1)],
}

# Row of the rotation center for a fresh piece; every canonical shape has a
# cell at offset y=0, so that cell lands on the top row
SPAWN_Y = 0


def canonical_offsets(kind: str) -> Coords:
    """Get the canonical (unrotated) offsets for a piece kind.

    Args:
        kind: One of "I", "O", "T", "J", "L", "S", "Z"

    Returns:
        A new list of 4 (x, y) offsets
    """
    if kind not in PIECE_SHAPES:
        raise ValueError(f"Invalid piece type: {kind}")
    return list(PIECE_SHAPES[kind])


def rotate_clockwise(offsets: Coords) -> Coords:
    """Rotate offsets 90 degrees clockwise about (0, 0).

    Maps (x, y) -> (-y, x) and keeps the order of the offsets.
    """
    return [(-y, x) for x, y in offsets]


class Piece:
    """A tetromino with its current offsets at a board position."""

    def __init__(self, kind: str, x: int = 0, y: int = 0, offsets: Optional[Coords] = None):
        """Initialize a piece.

        Args:
            kind: One of "I", "O", "T", "J", "L", "S", "Z"
            x: Board column of the rotation center
            y: Board row of the rotation center (0 at top, may be negative)
            offsets: Current offsets; defaults to the canonical rotation
        """
        if kind not in PIECE_SHAPES:
            raise ValueError(f"Invalid piece type: {kind}")
        self.kind = kind
        self.x = x
        self.y = y
        self.offsets: Coords = list(offsets) if offsets is not None else canonical_offsets(kind)

    @property
    def kind_id(self) -> int:
        """Cell value written to the board when this piece locks."""
        return KIND_IDS[self.kind]

    def get_cells(self) -> List[Tuple[int, int]]:
        """Get absolute board coordinates of all 4 cells."""
        return [(self.x + dx, self.y + dy) for dx, dy in self.offsets]

    def copy(self) -> "Piece":
        return Piece(self.kind, self.x, self.y, self.offsets)

    def move(self, dx: int, dy: int) -> "Piece":
        """Return a new piece moved by the given delta."""
        return Piece(self.kind, self.x + dx, self.y + dy, self.offsets)

    def rotate(self) -> "Piece":
        """Return a new piece rotated clockwise in place (position unchanged)."""
        return Piece(self.kind, self.x, self.y, rotate_clockwise(self.offsets))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Piece):
            return NotImplemented
        return (
            self.kind == other.kind
            and self.x == other.x
            and self.y == other.y
            and self.offsets == other.offsets
        )

    def __repr__(self) -> str:
        return f"Piece({self.kind}, x={self.x}, y={self.y}, offsets={self.offsets})"


def get_spawn_position(board_width: int = 10) -> Tuple[int, int]:
    """Get the spawn position shared by all piece kinds.

    Pieces spawn horizontally centered on the top row. Cells pushed above
    the field by a later rotation may still sit at negative y.

    Args:
        board_width: Width of the board in cells

    Returns:
        (x, y) spawn coordinates
    """
    return (board_width // 2, SPAWN_Y)


def spawn_piece(kind: str, board_width: int = 10) -> Piece:
    """Create a piece of the given kind at its spawn position."""
    x, y = get_spawn_position(board_width)
    return Piece(kind, x, y)
