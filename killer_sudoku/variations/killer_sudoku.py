# killer_sudoku.py

from typing import Any, Callable, Iterable, List, Optional, Sequence

from ..base_sudoku import SIZE, Board, Cell
from ..cages import Cage
from .classic_sudoku import ClassicSudoku


def cell_value(cell: Any) -> Any:
    """
    Raw entry of a player cell: a UserCell-like object, a JSON dict
    with a "value" key, or a bare number.
    """
    if isinstance(cell, dict):
        return cell.get("value")
    if hasattr(cell, "value"):
        return cell.value
    return cell


class KillerSudoku(ClassicSudoku):
    """
    Classic Sudoku plus sum cages. A cage only constrains the board once
    every one of its cells is filled: its digits must then be distinct
    and add up to the cage sum.
    """

    def __init__(
        self,
        cages: Sequence[Cage] = (),
        board: Optional[Iterable] = None,
    ) -> None:
        super().__init__(size=SIZE, board=board)
        self.cages = tuple(cages)

    @classmethod
    def from_user_grid(cls, user_grid: Any, cages: Sequence[Cage]) -> "KillerSudoku":
        try:
            rows = list(user_grid)
        except TypeError:
            rows = []
        board: List[List[Any]] = []
        for row in rows:
            # a broken row counts as empty; later rows are still checked
            try:
                board.append([cell_value(cell) for cell in row])
            except TypeError:
                board.append([])
        return cls(cages, board)

    def extra_constraints(self) -> List[Callable[[Board], bool]]:
        return [self._cage_check(cage) for cage in self.cages]

    def _cage_check(self, cage: Cage) -> Callable[[Board], bool]:
        def check(board: Board) -> bool:
            values: List[Cell] = []
            for cell in cage.cells:
                in_bounds = 0 <= cell.row < SIZE and 0 <= cell.col < SIZE
                values.append(board[cell.row][cell.col] if in_bounds else None)
            if any(v is None for v in values):
                return True
            if len(set(values)) != len(values):
                return False
            return sum(values) == cage.sum

        return check
