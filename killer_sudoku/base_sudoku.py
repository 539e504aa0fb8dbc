# base_sudoku.py

from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, List, Optional, Set, Tuple

SIZE = 9
BOX = 3

Cell = Optional[int]
Board = List[List[Cell]]
Grid = List[List[int]]
Pos = Tuple[int, int]


def box_index(r: int, c: int) -> int:
    return (r // BOX) * BOX + (c // BOX)


def orthogonal_neighbors(r: int, c: int) -> List[Pos]:
    """In-bounds cells directly above, below, left and right of (r, c)."""
    out: List[Pos] = []
    if r > 0:
        out.append((r - 1, c))
    if r < SIZE - 1:
        out.append((r + 1, c))
    if c > 0:
        out.append((r, c - 1))
    if c < SIZE - 1:
        out.append((r, c + 1))
    return out


def normalize_value(value: Any, size: int = SIZE) -> Cell:
    """Digits 1..size pass through; anything else counts as empty."""
    if isinstance(value, int) and not isinstance(value, bool):
        if 1 <= value <= size:
            return value
    return None


class BaseSudoku(ABC):
    """
    Abstract base for Sudoku rule sets.
    Holds a (possibly partial) board and checks it against the rows,
    columns, subclass regions and any extra constraints (e.g. cages).
    """

    def __init__(self, size: int = SIZE, board: Optional[Iterable] = None) -> None:
        self.size = size
        self.board: Board = [[None] * size for _ in range(size)]
        if board is None:
            return
        # short, ragged or non-iterable input leaves the missing cells empty
        try:
            rows = list(board)[:size]
        except TypeError:
            rows = []
        for r, row in enumerate(rows):
            try:
                values = list(row)[:size]
            except TypeError:
                continue
            for c, v in enumerate(values):
                self.board[r][c] = normalize_value(v, size)

    @abstractmethod
    def regions(self) -> List[Set[Pos]]:
        """Return sets of positions in which no digit may repeat."""
        ...

    def extra_constraints(self) -> List[Callable[[Board], bool]]:
        """
        Optional extra checks (e.g., killer cages).
        Defaults to none.
        """
        return []

    def validate(self) -> bool:
        """
        Check if board respects all constraints (rows, cols, regions, extras).
        Empty cells never violate a uniqueness rule.
        """
        for i in range(self.size):
            if not self._check_unit([(i, j) for j in range(self.size)]):
                return False
            if not self._check_unit([(j, i) for j in range(self.size)]):
                return False

        for region in self.regions():
            if not self._check_unit(region):
                return False

        for check in self.extra_constraints():
            if not check(self.board):
                return False

        return True

    def value_at(self, pos: Pos) -> Cell:
        r, c = pos
        if 0 <= r < self.size and 0 <= c < self.size:
            return self.board[r][c]
        return None

    def _check_unit(self, positions: Iterable[Pos]) -> bool:
        """Helper: ensure no duplicate values in a given unit."""
        seen = set()
        for pos in positions:
            v = self.value_at(pos)
            if v is None:
                continue
            if v in seen:
                return False
            seen.add(v)
        return True

    def __str__(self) -> str:
        return "\n".join(" ".join(str(v or ".") for v in row) for row in self.board)
