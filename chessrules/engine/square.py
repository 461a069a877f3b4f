"""Board squares and coordinate arithmetic.

Squares are numbered 0..63 rank-major from white's perspective
(a1=0, b1=1, ..., h1=7, a2=8, ..., h8=63).
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional


class Square(Enum):
    A1, B1, C1, D1, E1, F1, G1, H1 = range(0, 8)
    A2, B2, C2, D2, E2, F2, G2, H2 = range(8, 16)
    A3, B3, C3, D3, E3, F3, G3, H3 = range(16, 24)
    A4, B4, C4, D4, E4, F4, G4, H4 = range(24, 32)
    A5, B5, C5, D5, E5, F5, G5, H5 = range(32, 40)
    A6, B6, C6, D6, E6, F6, G6, H6 = range(40, 48)
    A7, B7, C7, D7, E7, F7, G7, H7 = range(48, 56)
    A8, B8, C8, D8, E8, F8, G8, H8 = range(56, 64)

    @property
    def file(self) -> int:
        """File index 0..7 (a..h)."""
        return self.value % 8

    @property
    def rank(self) -> int:
        """Rank index 0..7 (1..8)."""
        return self.value // 8

    def __str__(self) -> str:
        return self.name.lower()

    @classmethod
    def at(cls, file: int, rank: int) -> Optional["Square"]:
        """Return the square at (file, rank), or None when off the board."""
        if 0 <= file < 8 and 0 <= rank < 8:
            return cls(rank * 8 + file)
        return None

    @classmethod
    def parse(cls, name: str) -> "Square":
        """Parse algebraic notation such as ``"e4"``.

        Raises:
            ValueError: If ``name`` is not a valid square.
        """
        if not isinstance(name, str) or len(name) != 2:
            raise ValueError(f"invalid square: {name!r}")
        f, r = name[0].lower(), name[1]
        if f < "a" or f > "h" or r < "1" or r > "8":
            raise ValueError(f"invalid square: {name!r}")
        return cls((int(r) - 1) * 8 + ord(f) - ord("a"))

    @classmethod
    def coerce(cls, value: object) -> Optional["Square"]:
        """Best-effort conversion used by the query surface; never raises."""
        if isinstance(value, Square):
            return value
        if isinstance(value, str):
            try:
                return cls.parse(value)
            except ValueError:
                return None
        return None

    # --- Direction arithmetic ---

    def file_delta(self, other: "Square") -> int:
        return other.file - self.file

    def rank_delta(self, other: "Square") -> int:
        return other.rank - self.rank

    def is_orthogonal_to(self, other: "Square") -> bool:
        return self is not other and (self.file == other.file or self.rank == other.rank)

    def is_diagonal_to(self, other: "Square") -> bool:
        df = abs(self.file_delta(other))
        return df != 0 and df == abs(self.rank_delta(other))

    def distance(self, other: "Square") -> int:
        """Number of king steps between the two squares."""
        return max(abs(self.file_delta(other)), abs(self.rank_delta(other)))

    def between(self, other: "Square") -> List["Square"]:
        """Squares strictly between ``self`` and ``other`` on a shared line.

        Returns an empty list for adjacent squares and for squares that do not
        share a file, rank or diagonal.
        """
        if not (self.is_orthogonal_to(other) or self.is_diagonal_to(other)):
            return []
        df = self.file_delta(other)
        dr = self.rank_delta(other)
        step_f = (df > 0) - (df < 0)
        step_r = (dr > 0) - (dr < 0)
        squares: List[Square] = []
        f, r = self.file + step_f, self.rank + step_r
        while (f, r) != (other.file, other.rank):
            squares.append(Square(r * 8 + f))
            f += step_f
            r += step_r
        return squares

    @property
    def is_light(self) -> bool:
        return self in LIGHT_SQUARES


# Fixed light/dark partition (a1 is dark).
LIGHT_SQUARES = frozenset(sq for sq in Square if (sq.file + sq.rank) % 2 == 1)
