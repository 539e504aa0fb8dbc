# progress.py

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Tuple, Union

from .base_sudoku import SIZE, normalize_value
from .cages import CellCoord
from .difficulty import Difficulty

# --------------------------
# Player cells
# --------------------------


@dataclass(frozen=True)
class UserCell:
    value: Optional[int] = None
    notes: Tuple[int, ...] = ()
    is_pre_filled: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"notes": list(self.notes)}
        if self.value is not None:
            data["value"] = self.value
        if self.is_pre_filled:
            data["isPreFilled"] = True
        return data

    @classmethod
    def from_dict(cls, data: Any) -> "UserCell":
        raw = data.get("value")
        value = normalize_value(raw)
        if raw is not None and value is None:
            raise ValueError(f"Invalid cell value: {raw!r}")
        notes = tuple(sorted({_check_digit(n) for n in data.get("notes") or ()}))
        return cls(value, notes, bool(data.get("isPreFilled", False)))


UserGrid = List[List[UserCell]]


def _check_digit(digit: Any) -> int:
    if normalize_value(digit) is None:
        raise ValueError(f"Digit must be an integer in 1..{SIZE}, got {digit!r}")
    return digit


def create_empty_grid() -> UserGrid:
    return [[UserCell() for _ in range(SIZE)] for _ in range(SIZE)]


def is_grid_complete(grid: UserGrid) -> bool:
    return all(cell.value is not None for row in grid for cell in row)


# --------------------------
# Player edits (each returns a new grid; pre-filled cells never change)
# --------------------------


def _replace_cell(grid: UserGrid, coord: CellCoord, cell: UserCell) -> UserGrid:
    return [
        [cell if (r, c) == coord.pos else old for c, old in enumerate(row)]
        for r, row in enumerate(grid)
    ]


def set_value(grid: UserGrid, coord: CellCoord, value: int) -> UserGrid:
    """
    Enter a digit. Entering the digit already in the cell clears it.
    Notes are dropped either way.
    """
    _check_digit(value)
    current = grid[coord.row][coord.col]
    if current.is_pre_filled:
        return grid
    new_value = None if current.value == value else value
    return _replace_cell(grid, coord, UserCell(value=new_value))


def toggle_note(grid: UserGrid, coord: CellCoord, digit: int) -> UserGrid:
    _check_digit(digit)
    current = grid[coord.row][coord.col]
    if current.is_pre_filled:
        return grid
    notes = set(current.notes)
    notes.symmetric_difference_update({digit})
    return _replace_cell(
        grid, coord, replace(current, value=None, notes=tuple(sorted(notes)))
    )


def clear_cell(grid: UserGrid, coord: CellCoord) -> UserGrid:
    if grid[coord.row][coord.col].is_pre_filled:
        return grid
    return _replace_cell(grid, coord, UserCell())


# --------------------------
# Progress
# --------------------------


@dataclass(frozen=True)
class UserProgress:
    puzzle_seed: str
    difficulty: Difficulty
    grid: UserGrid
    last_updated: int  # milliseconds since the epoch

    def with_grid(self, grid: UserGrid, now: Optional[int] = None) -> "UserProgress":
        return replace(self, grid=grid, last_updated=_now_ms(now))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "puzzleSeed": self.puzzle_seed,
            "difficulty": self.difficulty.value,
            "grid": [[cell.to_dict() for cell in row] for row in self.grid],
            "lastUpdated": self.last_updated,
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["UserProgress"]:
        """
        Rebuild saved progress. Returns None when the data is malformed,
        so callers can fall back to a fresh grid.
        """
        try:
            grid = [[UserCell.from_dict(cell) for cell in row] for row in data["grid"]]
            if len(grid) != SIZE or any(len(row) != SIZE for row in grid):
                return None
            last_updated = data["lastUpdated"]
            if not isinstance(last_updated, (int, float)):
                return None
            return cls(
                puzzle_seed=str(data["puzzleSeed"]),
                difficulty=Difficulty.parse(data["difficulty"]),
                grid=grid,
                last_updated=int(last_updated),
            )
        except (KeyError, TypeError, ValueError, AttributeError):
            return None


def _now_ms(now: Optional[int] = None) -> int:
    return int(time.time() * 1000) if now is None else now


def create_new_progress(
    seed: str,
    difficulty: Union[Difficulty, str],
    puzzle: Any = None,
    now: Optional[int] = None,
) -> UserProgress:
    """
    Fresh progress for a puzzle: an empty grid with the puzzle's
    givens (if any) filled in and locked.
    """
    grid = create_empty_grid()
    for given in getattr(puzzle, "pre_filled_cells", ()):
        grid[given.row][given.col] = UserCell(value=given.value, is_pre_filled=True)
    return UserProgress(seed, Difficulty.parse(difficulty), grid, _now_ms(now))
