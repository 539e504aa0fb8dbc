# classic_sudoku.py

from typing import List, Set

from ..base_sudoku import BOX, BaseSudoku, Pos


class ClassicSudoku(BaseSudoku):
    """
    Standard 9x9 Sudoku: rows, columns (checked by the base class)
    and the nine aligned 3x3 boxes.
    """

    def regions(self) -> List[Set[Pos]]:
        regions: List[Set[Pos]] = []
        for br in range(0, self.size, BOX):
            for bc in range(0, self.size, BOX):
                box = set()
                for dr in range(BOX):
                    for dc in range(BOX):
                        box.add((br + dr, bc + dc))
                regions.append(box)
        return regions
