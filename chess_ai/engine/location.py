from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple


FILES = "abcdefgh"
RANKS = "87654321"


@dataclass(frozen=True)
class Location:
    """A board coordinate.

    Notes:
    - ``x`` is the file (0 = a .. 7 = h).
    - ``y`` is the row counted from Black's back rank (0 = rank 8 .. 7 = rank 1),
      so White pawns advance towards ``y == 0``.
    """

    x: int
    y: int

    def in_bounds(self) -> bool:
        return 0 <= self.x < 8 and 0 <= self.y < 8

    def move_by(self, dx: int, dy: int) -> Tuple["Location", bool]:
        """Offset this location.

        Args:
            dx (int): File delta.
            dy (int): Row delta.

        Returns:
            Tuple[Location, bool]: The shifted location and a flag that is
            ``True`` when the shift left the board. Out-of-bounds results are
            clamped to the board edge and must be discarded by the caller.
        """
        nx, ny = self.x + dx, self.y + dy
        if 0 <= nx < 8 and 0 <= ny < 8:
            return square(nx, ny), False
        return square(min(max(nx, 0), 7), min(max(ny, 0), 7)), True

    def to_notation(self) -> str:
        return f"{FILES[self.x]}{RANKS[self.y]}"

    @classmethod
    def from_notation(cls, s: str) -> "Location":
        """Parse a square name such as ``"e4"``.

        Raises:
            ValueError: If ``s`` is not a file a-h followed by a rank 1-8.
        """
        if not isinstance(s, str) or len(s) != 2:
            raise ValueError(f"invalid square: {s!r}")
        f, r = s[0], s[1]
        if f not in FILES or r not in RANKS:
            raise ValueError(f"invalid square: {s!r}")
        return square(FILES.index(f), RANKS.index(r))

    def is_light(self) -> bool:
        return (self.x + self.y) % 2 == 0

    def __str__(self) -> str:
        return self.to_notation()


_SQUARES = [[Location(x, y) for x in range(8)] for y in range(8)]


def square(x: int, y: int) -> Location:
    """Return the shared Location instance for an in-bounds coordinate."""
    return _SQUARES[y][x]


def all_squares() -> Iterator[Location]:
    for row in _SQUARES:
        yield from row
