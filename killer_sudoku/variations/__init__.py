from .classic_sudoku import ClassicSudoku
from .killer_sudoku import KillerSudoku

__all__ = [
    "ClassicSudoku",
    "KillerSudoku",
]
