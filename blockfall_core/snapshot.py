"""Read-only frame view handed to renderers."""

from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

from blockfall_core.board import Board
from blockfall_core.piece import KIND_COLORS, KIND_IDS, Piece, canonical_offsets


@dataclass(frozen=True)
class PieceView:
    """A piece as the renderer sees it.

    For the active piece `cells` are absolute board coordinates; for the
    preview they are the canonical relative offsets.
    """
    kind: str
    kind_id: int
    color: str
    cells: List[Tuple[int, int]]

    @classmethod
    def active(cls, piece: Piece) -> "PieceView":
        return cls(piece.kind, piece.kind_id, KIND_COLORS[piece.kind_id], piece.get_cells())

    @classmethod
    def preview(cls, kind: str) -> "PieceView":
        kind_id = KIND_IDS[kind]
        return cls(kind, kind_id, KIND_COLORS[kind_id], canonical_offsets(kind))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "id": self.kind_id,
            "color": self.color,
            "cells": [list(c) for c in self.cells],
        }


@dataclass
class Snapshot:
    """Complete render state for one frame."""
    board: Board
    active: PieceView
    next: PieceView
    score: int
    phase: str
    gravity_interval_ms: int
    lines_total: int

    @property
    def width(self) -> int:
        return self.board.width

    @property
    def height(self) -> int:
        return self.board.height

    @property
    def game_over(self) -> bool:
        return self.phase == "over"

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to dictionary for serialization."""
        return {
            "board": {
                "w": self.board.width,
                "h": self.board.height,
                "cells": self.board.to_list(),
                "rows": self.board.rows(),
            },
            "active": self.active.to_dict(),
            "next": self.next.to_dict(),
            "score": self.score,
            "phase": self.phase,
            "gravity_interval_ms": self.gravity_interval_ms,
            "lines_total": self.lines_total,
            "colors": {str(k): v for k, v in KIND_COLORS.items()},
        }
