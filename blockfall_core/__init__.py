"""Falling-block puzzle engine."""

from blockfall_core.board import Board
from blockfall_core.game import Command, GameState, Phase, StepResult
from blockfall_core.loop import GameLoop, GameResult, InputSource, Renderer
from blockfall_core.piece import Piece
from blockfall_core.snapshot import PieceView, Snapshot

__all__ = [
    "Board",
    "Command",
    "GameState",
    "Phase",
    "StepResult",
    "GameLoop",
    "GameResult",
    "InputSource",
    "Renderer",
    "Piece",
    "PieceView",
    "Snapshot",
]
