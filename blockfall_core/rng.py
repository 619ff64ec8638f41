"""Piece kind generators.

UniformRNG draws every kind independently with equal probability; this is
the default. SevenBagRNG deals shuffled bags of all 7 kinds for a fairer
distribution and changes the piece sequence, so it is opt-in.
"""

import random
from typing import List, Optional

from blockfall_core.piece import PIECE_KINDS


class UniformRNG:
    """Independent uniform piece draws."""

    PIECES = list(PIECE_KINDS)

    def __init__(self, seed: Optional[int] = None):
        """Initialize with an optional seed for deterministic replay.

        Args:
            seed: Random seed, or None to seed from the system
        """
        self.seed = seed
        self.rng = random.Random(seed)
        self._lookahead: List[str] = []

    def next(self) -> str:
        """Get the next piece kind.

        Returns:
            Piece type string ("I", "O", "T", "J", "L", "S", "Z")
        """
        if self._lookahead:
            return self._lookahead.pop(0)
        return self.rng.choice(self.PIECES)

    def peek(self, count: int) -> List[str]:
        """Peek at the next N pieces without consuming them."""
        while len(self._lookahead) < count:
            self._lookahead.append(self.rng.choice(self.PIECES))
        return self._lookahead[:count]

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset the RNG with a new seed."""
        self.seed = seed
        self.rng = random.Random(seed)
        self._lookahead = []


class SevenBagRNG:
    """Deterministic 7-bag piece generator."""

    PIECES = list(PIECE_KINDS)

    def __init__(self, seed: Optional[int] = None):
        """Initialize with a seed for deterministic replay.

        Args:
            seed: Random seed for reproducibility
        """
        self.seed = seed
        self.rng = random.Random(seed)
        self.bag: List[str] = []
        self._refill_bag()

    def _refill_bag(self) -> None:
        """Shuffle all 7 pieces into the bag."""
        self.bag = self.PIECES.copy()
        self.rng.shuffle(self.bag)

    def next(self) -> str:
        """Get the next piece from the bag."""
        if not self.bag:
            self._refill_bag()
        return self.bag.pop()

    def peek(self, count: int) -> List[str]:
        """Peek at the next N pieces without consuming them.

        Args:
            count: Number of pieces to peek ahead

        Returns:
            List of piece types
        """
        result = []
        temp_bag = self.bag.copy()
        temp_rng = random.Random()
        temp_rng.setstate(self.rng.getstate())

        for _ in range(count):
            if not temp_bag:
                temp_bag = self.PIECES.copy()
                temp_rng.shuffle(temp_bag)
            result.append(temp_bag.pop())

        return result

    def reset(self, seed: Optional[int] = None) -> None:
        """Reset the RNG with a new seed."""
        self.seed = seed
        self.rng = random.Random(seed)
        self.bag = []
        self._refill_bag()
