# solution.py

from __future__ import annotations

from typing import List, Set

from .base_sudoku import BOX, SIZE, Grid, Pos, box_index
from .random_stream import RandomStream


def generate_solution(random: RandomStream) -> Grid:
    """
    Build a complete 9x9 grid: the three diagonal boxes are random
    permutations (they share no row, column or box), the rest is
    filled by row-major backtracking trying 1..9 in order.
    """
    grid: Grid = [[0] * SIZE for _ in range(SIZE)]

    for start in range(0, SIZE, BOX):
        nums = list(range(1, SIZE + 1))
        for i in range(BOX):
            for j in range(BOX):
                grid[start + i][start + j] = nums.pop(
                    random.randint_below(len(nums))
                )

    solved = _Backtracker(grid).solve()
    assert solved, "a diagonal-seeded grid always has a completion"
    return grid


def is_valid_placement(grid: Grid, row: int, col: int, value: int) -> bool:
    if value in grid[row]:
        return False
    if any(grid[r][col] == value for r in range(SIZE)):
        return False
    br = (row // BOX) * BOX
    bc = (col // BOX) * BOX
    for r in range(br, br + BOX):
        for c in range(bc, bc + BOX):
            if grid[r][c] == value:
                return False
    return True


def is_solved_grid(grid: Grid) -> bool:
    """
    True when every row, column and box holds 1..9 exactly once.
    """
    digits = set(range(1, SIZE + 1))
    if len(grid) != SIZE or any(len(row) != SIZE for row in grid):
        return False
    for i in range(SIZE):
        if set(grid[i]) != digits:
            return False
        if {grid[r][i] for r in range(SIZE)} != digits:
            return False
    for br in range(0, SIZE, BOX):
        for bc in range(0, SIZE, BOX):
            box = {
                grid[br + dr][bc + dc]
                for dr in range(BOX)
                for dc in range(BOX)
            }
            if box != digits:
                return False
    return True


# --------------------------
# Row-major backtracking with incremental constraint sets
# --------------------------


class _Backtracker:
    def __init__(self, grid: Grid) -> None:
        self.grid = grid
        self.rows: List[Set[int]] = [set() for _ in range(SIZE)]
        self.cols: List[Set[int]] = [set() for _ in range(SIZE)]
        self.boxes: List[Set[int]] = [set() for _ in range(SIZE)]
        self.empty: List[Pos] = []

        for r in range(SIZE):
            for c in range(SIZE):
                v = grid[r][c]
                if v == 0:
                    self.empty.append((r, c))
                    continue
                self.rows[r].add(v)
                self.cols[c].add(v)
                self.boxes[box_index(r, c)].add(v)

    def solve(self) -> bool:
        return self._dfs(0)

    def _dfs(self, i: int) -> bool:
        if i == len(self.empty):
            return True

        r, c = self.empty[i]
        b = box_index(r, c)
        for v in range(1, SIZE + 1):
            if v in self.rows[r] or v in self.cols[c] or v in self.boxes[b]:
                continue
            self.grid[r][c] = v
            self.rows[r].add(v)
            self.cols[c].add(v)
            self.boxes[b].add(v)
            if self._dfs(i + 1):
                return True
            self.rows[r].remove(v)
            self.cols[c].remove(v)
            self.boxes[b].remove(v)
            self.grid[r][c] = 0
        return False
