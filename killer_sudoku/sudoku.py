from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .base_sudoku import BOX, SIZE, Grid
from .cages import (
    MAX_PARTITION_ATTEMPTS,
    Cage,
    CagePartition,
    cage_map,
    partition,
)
from .difficulty import Difficulty
from .prefill import PreFilledCell, select_pre_filled
from .random_stream import RandomStream
from .solution import generate_solution, is_solved_grid
from .variations import KillerSudoku

log = logging.getLogger(__name__)

# --------------------------
# Exceptions
# --------------------------


class PuzzleGenerationError(Exception):
    pass


# --------------------------
# Puzzle
# --------------------------

SolutionRows = Tuple[Tuple[int, ...], ...]


@dataclass(frozen=True)
class Puzzle:
    """
    Killer Sudoku puzzle, fully determined by (seed, difficulty).

    `cages` partition the 81 cells; `solution` is the solved grid the
    cage sums were taken from; `pre_filled_cells` are the givens.
    """

    seed: str
    difficulty: Difficulty
    cages: Tuple[Cage, ...]
    solution: SolutionRows
    pre_filled_cells: Tuple[PreFilledCell, ...] = ()

    def solution_grid(self) -> Grid:
        return [list(row) for row in self.solution]

    def cage_at(self, row: int, col: int) -> Optional[Cage]:
        return cage_map(self.cages).get((row, col))

    # --------------------------
    # Serialization
    # --------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "difficulty": self.difficulty.value,
            "cages": [cage.to_dict() for cage in self.cages],
            "solution": [list(row) for row in self.solution],
            "preFilledCells": [cell.to_dict() for cell in self.pre_filled_cells],
        }

    @classmethod
    def from_dict(cls, data: Any) -> Optional["Puzzle"]:
        """
        Rebuild a puzzle from its JSON-compatible form.
        Returns None when the data is malformed.
        """
        try:
            solution = [list(row) for row in data["solution"]]
            if not is_solved_grid(solution):
                return None
            cages = [Cage.from_dict(c) for c in data["cages"]]
            givens = [PreFilledCell.from_dict(c) for c in data.get("preFilledCells", [])]
            if not _matches_solution(solution, cages, givens):
                return None
            return assemble_puzzle(
                str(data["seed"]),
                Difficulty.parse(data["difficulty"]),
                solution,
                cages,
                givens,
            )
        except (KeyError, TypeError, ValueError, AttributeError):
            return None

    # --------------------------
    # Display
    # --------------------------

    def format_solution(self) -> str:
        return _format_board_ascii([[str(v) for v in row] for row in self.solution])

    def format_cages(self) -> str:
        """Board of cage ids, one per cell."""
        owner = cage_map(self.cages)
        return _format_board_ascii(
            [
                [owner[(r, c)].id if (r, c) in owner else "?" for c in range(SIZE)]
                for r in range(SIZE)
            ]
        )

    def show(self) -> None:
        print(str(self))

    def __str__(self) -> str:
        return (
            f"\n---------------------------\n"
            f"KILLER SUDOKU PUZZLE {self.seed!r}\n"
            f"Difficulty: {self.difficulty.value} "
            f"({len(self.cages)} cages, {len(self.pre_filled_cells)} given)\n"
            f"---------------------------\n"
            f"{self.format_solution()}\n"
            f"{self.format_cages()}\n"
        )


def _matches_solution(
    solution: Grid, cages: Sequence[Cage], givens: Sequence[PreFilledCell]
) -> bool:
    """
    Cages must cover each cell exactly once with distinct digits adding
    up to their sums; givens must agree with the solution.
    """
    covered = [cell.pos for cage in cages for cell in cage.cells]
    if len(covered) != SIZE * SIZE or len(set(covered)) != SIZE * SIZE:
        return False
    for cage in cages:
        digits = [solution[cell.row][cell.col] for cell in cage.cells]
        if len(set(digits)) != len(digits) or sum(digits) != cage.sum:
            return False
    return all(solution[g.row][g.col] == g.value for g in givens)


def _format_board_ascii(cells: List[List[str]]) -> str:
    cell_len = max(len(s) for row in cells for s in row)
    lines = []
    horiz = ("+-" + "-" * (cell_len + 1) * BOX) * BOX + "+"
    for r, row in enumerate(cells):
        if r % BOX == 0:
            lines.append(horiz)
        line = "| "
        for b in range(BOX):
            start = b * BOX
            chunk = " ".join(s.rjust(cell_len) for s in row[start: start + BOX])
            line += chunk + " | "
        lines.append(line.rstrip())
    lines.append(horiz)
    return "\n".join(lines)


# --------------------------
# Generation
# --------------------------


def assemble_puzzle(
    seed: str,
    difficulty: Union[Difficulty, str],
    solution: Sequence[Sequence[int]],
    cages: Sequence[Cage],
    pre_filled: Sequence[PreFilledCell] = (),
) -> Puzzle:
    return Puzzle(
        seed=seed,
        difficulty=Difficulty.parse(difficulty),
        cages=tuple(cages),
        solution=tuple(tuple(row) for row in solution),
        pre_filled_cells=tuple(pre_filled),
    )


def generate_puzzle(
    seed: str,
    difficulty: Union[Difficulty, str],
    max_attempts: int = MAX_PARTITION_ATTEMPTS,
) -> Puzzle:
    """
    Generate the puzzle for (seed, difficulty). The same arguments
    always give the same solution, cages and givens.

    Raises PuzzleGenerationError if no cage layout is found within
    `max_attempts` partition attempts.
    """
    difficulty = Difficulty.parse(difficulty)
    random = RandomStream(seed)

    solution = generate_solution(random)
    result = partition(solution, random, difficulty, max_attempts)
    if not isinstance(result, CagePartition):
        log.error(
            "Puzzle generation failed for seed %r (%s) after %d attempts",
            seed,
            difficulty.value,
            max_attempts,
        )
        raise PuzzleGenerationError(
            f"puzzle generation failed for seed {seed!r} ({difficulty.value}): "
            f"{result.reason.value} at ({result.cell.row}, {result.cell.col})"
        )

    pre_filled = select_pre_filled(solution, random, difficulty)
    log.info(
        "Generated %s puzzle %r: %d cages after %d attempt(s)",
        difficulty.value,
        seed,
        len(result.cages),
        result.attempt + 1,
    )
    return assemble_puzzle(seed, difficulty, solution, result.cages, pre_filled)


# --------------------------
# Validation
# --------------------------


class SolutionStatus(str, Enum):
    INCOMPLETE = "incomplete"
    SOLVED = "solved"
    INCORRECT = "incorrect"


def validate_grid(user_grid: Any, puzzle: Puzzle) -> bool:
    """
    Check a player's grid: no repeated digit in any row, column or box,
    and every completely filled cage holds distinct digits adding up to
    its sum. Empty cells and unfinished cages never fail.
    """
    return KillerSudoku.from_user_grid(user_grid, puzzle.cages).validate()


def check_solution(user_grid: Any, puzzle: Puzzle) -> SolutionStatus:
    game = KillerSudoku.from_user_grid(user_grid, puzzle.cages)
    if any(v is None for row in game.board for v in row):
        return SolutionStatus.INCOMPLETE
    if game.validate():
        return SolutionStatus.SOLVED
    return SolutionStatus.INCORRECT
