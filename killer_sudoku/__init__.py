from killer_sudoku.base_sudoku import BaseSudoku
from killer_sudoku.cages import (
    Cage,
    CagePartition,
    CellCoord,
    FailureReason,
    PartitionFailure,
    partition,
    partition_cages,
)
from killer_sudoku.difficulty import Difficulty
from killer_sudoku.prefill import PreFilledCell, select_pre_filled
from killer_sudoku.progress import (
    UserCell,
    UserProgress,
    create_empty_grid,
    create_new_progress,
)
from killer_sudoku.random_stream import RandomStream, random_seed
from killer_sudoku.solution import generate_solution
from killer_sudoku.sudoku import (
    Puzzle,
    PuzzleGenerationError,
    SolutionStatus,
    check_solution,
    generate_puzzle,
    validate_grid,
)
from killer_sudoku.variations import ClassicSudoku, KillerSudoku

__all__ = [
    "BaseSudoku",
    "Cage",
    "CagePartition",
    "CellCoord",
    "ClassicSudoku",
    "Difficulty",
    "FailureReason",
    "KillerSudoku",
    "PartitionFailure",
    "PreFilledCell",
    "Puzzle",
    "PuzzleGenerationError",
    "RandomStream",
    "SolutionStatus",
    "UserCell",
    "UserProgress",
    "check_solution",
    "create_empty_grid",
    "create_new_progress",
    "generate_puzzle",
    "generate_solution",
    "partition",
    "partition_cages",
    "random_seed",
    "select_pre_filled",
    "validate_grid",
]
