from typing import Iterator, List, Optional, Tuple

from monster_arena.models import BOARD_SIZE, Creature
from .errors import OutOfBounds


class Board:
    """Fixed square grid of optional creatures. Storage only, no rules."""

    def __init__(self, size: int = BOARD_SIZE):
        self.size = size
        self._grid: List[List[Optional[Creature]]] = [[None] * size for _ in range(size)]

    def in_bounds(self, row, col) -> bool:
        if isinstance(row, bool) or isinstance(col, bool):
            return False
        if not isinstance(row, int) or not isinstance(col, int):
            return False
        return 0 <= row < self.size and 0 <= col < self.size

    def _check(self, row, col) -> None:
        if not self.in_bounds(row, col):
            raise OutOfBounds(row, col)

    def get(self, row: int, col: int) -> Optional[Creature]:
        self._check(row, col)
        return self._grid[row][col]

    def set(self, row: int, col: int, value: Optional[Creature]) -> None:
        self._check(row, col)
        self._grid[row][col] = value

    def clear(self, row: int, col: int) -> None:
        self.set(row, col, None)

    def cells(self) -> Iterator[Tuple[int, int, Creature]]:
        """Yield (row, col, creature) for every occupied cell."""
        for r, line in enumerate(self._grid):
            for c, cell in enumerate(line):
                if cell is not None:
                    yield r, c, cell

    def locate(self, creature_id: int) -> Optional[Tuple[int, int]]:
        for r, c, cell in self.cells():
            if cell.id == creature_id:
                return r, c
        return None

    def snapshot(self) -> Tuple[Tuple[Optional[Creature], ...], ...]:
        return tuple(tuple(line) for line in self._grid)
