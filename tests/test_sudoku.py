import json

import pytest

import killer_sudoku.sudoku as sudoku_module
from killer_sudoku import (
    Cage,
    CellCoord,
    Difficulty,
    Puzzle,
    PuzzleGenerationError,
    SolutionStatus,
    UserCell,
    check_solution,
    create_empty_grid,
    generate_puzzle,
    validate_grid,
)
from killer_sudoku.cages import FailureReason, PartitionFailure
from killer_sudoku.solution import is_solved_grid
from killer_sudoku.sudoku import assemble_puzzle
from killer_sudoku.variations import ClassicSudoku

SOLVED = [
    [1, 2, 3, 4, 5, 6, 7, 8, 9],
    [4, 5, 6, 7, 8, 9, 1, 2, 3],
    [7, 8, 9, 1, 2, 3, 4, 5, 6],
    [2, 3, 1, 5, 6, 4, 8, 9, 7],
    [5, 6, 4, 8, 9, 7, 2, 3, 1],
    [8, 9, 7, 2, 3, 1, 5, 6, 4],
    [3, 1, 2, 6, 4, 5, 9, 7, 8],
    [6, 4, 5, 9, 7, 8, 3, 1, 2],
    [9, 7, 8, 3, 1, 2, 6, 4, 5],
]

SEEDS = ["test1", "test2", "test3", "test4", "test5"]


def cage(cage_id, cells, total):
    return Cage(cage_id, tuple(CellCoord(r, c) for r, c in cells), total)


def filled_grid(values):
    return [[UserCell(value=v) for v in row] for row in values]


def is_connected(cells):
    cells = set(cells)
    start = next(iter(cells))
    seen, stack = {start}, [start]
    while stack:
        r, c = stack.pop()
        for nb in [(r - 1, c), (r + 1, c), (r, c - 1), (r, c + 1)]:
            if nb in cells and nb not in seen:
                seen.add(nb)
                stack.append(nb)
    return seen == cells


# ---------- Generation ----------


def test_generates_deterministic_puzzles_from_the_same_seed():
    first = generate_puzzle("test123", "medium")
    second = generate_puzzle("test123", "medium")
    assert first.cages == second.cages
    assert first.solution == second.solution
    assert first == second


def test_generates_different_puzzles_from_different_seeds():
    first = generate_puzzle("test123", "medium")
    second = generate_puzzle("test456", "medium")
    assert first.cages != second.cages
    assert first.solution != second.solution


@pytest.mark.parametrize("difficulty", list(Difficulty))
def test_generated_puzzles_hold_every_invariant(difficulty):
    for seed in SEEDS:
        puzzle = generate_puzzle(seed, difficulty)
        solution = puzzle.solution_grid()
        assert is_solved_grid(solution)

        covered = [cell.pos for c in puzzle.cages for cell in c.cells]
        assert len(covered) == 81
        assert set(covered) == {(r, c) for r in range(9) for c in range(9)}

        for c in puzzle.cages:
            digits = [solution[cell.row][cell.col] for cell in c.cells]
            assert len(digits) >= 2, f"single-cell cage in {difficulty} {seed}"
            assert len(set(digits)) == len(digits)
            assert sum(digits) == c.sum
            assert is_connected([cell.pos for cell in c.cells])


def test_respects_difficulty_settings_for_cage_sizes():
    for seed in SEEDS + ["test"]:
        easy = generate_puzzle(seed, "easy")
        assert all(c.size <= 3 for c in easy.cages)

    assert any(
        any(c.size > 3 for c in generate_puzzle(seed, "hard").cages)
        for seed in SEEDS
    )


def test_pre_filled_cells_by_difficulty():
    assert len(generate_puzzle("givens", "easy").pre_filled_cells) == 35
    assert len(generate_puzzle("givens", "medium").pre_filled_cells) == 25
    assert len(generate_puzzle("givens", "hard").pre_filled_cells) == 15
    assert generate_puzzle("givens", "hardcore").pre_filled_cells == ()

    puzzle = generate_puzzle("givens", "easy")
    for given in puzzle.pre_filled_cells:
        assert given.value == puzzle.solution[given.row][given.col]


def test_difficulty_accepts_enum_or_string():
    assert generate_puzzle("x", Difficulty.HARD) == generate_puzzle("x", "hard")


def test_unknown_difficulty_is_rejected():
    with pytest.raises(ValueError):
        generate_puzzle("x", "impossible")


def test_exhausted_attempts_raise(monkeypatch):
    failure = PartitionFailure(FailureReason.NO_MERGE_TARGET, CellCoord(8, 8), 49)
    monkeypatch.setattr(sudoku_module, "partition", lambda *args: failure)
    with pytest.raises(PuzzleGenerationError, match="puzzle generation failed"):
        generate_puzzle("doomed", "easy")


def test_puzzle_is_immutable():
    puzzle = generate_puzzle("frozen", "medium")
    with pytest.raises(AttributeError):
        puzzle.seed = "other"
    assert isinstance(puzzle.cages, tuple)
    assert isinstance(puzzle.solution[0], tuple)


# ---------- Validation ----------


def test_validates_a_correct_solution():
    puzzle = assemble_puzzle("t", "medium", SOLVED, [cage("1", [(0, 0), (0, 1)], 3)])
    assert validate_grid(filled_grid(SOLVED), puzzle)


def test_validates_generated_solution():
    puzzle = generate_puzzle("test123", "hard")
    assert validate_grid(filled_grid(puzzle.solution), puzzle)


def test_detects_invalid_cage_sums():
    puzzle = assemble_puzzle("t", "medium", SOLVED, [cage("1", [(0, 0), (0, 1)], 4)])
    assert not validate_grid(filled_grid(SOLVED), puzzle)


def test_detects_swapped_digits_breaking_cage_sums():
    # exchanging every 1 with every 2 keeps rows, columns and boxes valid
    puzzle = generate_puzzle("test123", "medium")
    swap = {1: 2, 2: 1}
    values = [[swap.get(v, v) for v in row] for row in puzzle.solution]
    solution = puzzle.solution_grid()
    assert any(
        len({solution[cell.row][cell.col] for cell in c.cells} & {1, 2}) == 1
        for c in puzzle.cages
    )

    grid = filled_grid(values)
    assert ClassicSudoku(board=values).validate()
    assert not validate_grid(grid, puzzle)
    assert check_solution(grid, puzzle) is SolutionStatus.INCORRECT


def test_detects_duplicate_values_within_a_cage():
    # (0, 0) and (3, 2) both hold 1 but share no row, column or box
    puzzle = assemble_puzzle("t", "medium", SOLVED, [cage("1", [(0, 0), (3, 2)], 2)])
    assert not validate_grid(filled_grid(SOLVED), puzzle)


@pytest.mark.parametrize(
    "first, second",
    [
        ((0, 0), (0, 1)),  # row
        ((0, 0), (1, 0)),  # column
        ((0, 0), (1, 1)),  # box
        ((6, 6), (8, 8)),  # last box
        ((3, 4), (5, 3)),  # centre box
    ],
)
def test_detects_duplicate_values_in_a_unit(first, second):
    puzzle = generate_puzzle("test123", "medium")
    grid = create_empty_grid()
    grid[first[0]][first[1]] = UserCell(value=1)
    grid[second[0]][second[1]] = UserCell(value=1)
    assert not validate_grid(grid, puzzle)


def test_incomplete_cage_does_not_fail():
    puzzle = generate_puzzle("test123", "medium")
    values = [list(row) for row in puzzle.solution]
    values[4][4] = None
    assert validate_grid(filled_grid(values), puzzle)


def test_empty_grid_is_valid():
    puzzle = generate_puzzle("test123", "easy")
    assert validate_grid(create_empty_grid(), puzzle)


def test_accepts_json_shaped_grids():
    puzzle = assemble_puzzle("t", "medium", SOLVED, [cage("1", [(0, 0), (0, 1)], 3)])
    grid = [[{"value": v, "notes": []} for v in row] for row in SOLVED]
    assert validate_grid(grid, puzzle)
    grid[0][1] = {"notes": [2]}
    assert validate_grid(grid, puzzle)


def test_broken_row_does_not_hide_later_duplicates():
    puzzle = generate_puzzle("test123", "medium")
    grid = create_empty_grid()
    grid[0] = None
    grid[5][0] = UserCell(value=1)
    grid[5][1] = UserCell(value=1)
    assert not validate_grid(grid, puzzle)

    grid[5][1] = UserCell()
    grid[7][0] = UserCell(value=1)
    assert not validate_grid(grid, puzzle)


def test_malformed_grids_never_raise():
    puzzle = generate_puzzle("test123", "medium")
    assert validate_grid(None, puzzle)
    assert validate_grid([], puzzle)
    assert validate_grid([[UserCell(value=1)]], puzzle)
    assert validate_grid([[{"value": "9"}, {"value": 42}, {"value": True}]], puzzle)
    assert not validate_grid([[1, 1]], puzzle)


def test_validation_is_pure():
    puzzle = generate_puzzle("test123", "medium")
    grid = filled_grid(puzzle.solution)
    snapshot = [row[:] for row in grid]
    assert validate_grid(grid, puzzle) == validate_grid(grid, puzzle)
    assert grid == snapshot


# ---------- Checking ----------


def test_check_solution_statuses():
    puzzle = generate_puzzle("check", "medium")
    assert check_solution(create_empty_grid(), puzzle) is SolutionStatus.INCOMPLETE
    assert check_solution(filled_grid(puzzle.solution), puzzle) is SolutionStatus.SOLVED

    values = [list(row) for row in puzzle.solution]
    values[0][0], values[0][1] = values[0][1], values[0][0]
    assert check_solution(filled_grid(values), puzzle) is SolutionStatus.INCORRECT


# ---------- Serialization and display ----------


def test_puzzle_dict_is_json_compatible():
    puzzle = generate_puzzle("share", "hard")
    data = json.loads(json.dumps(puzzle.to_dict()))
    assert data["seed"] == "share"
    assert data["difficulty"] == "hard"
    assert len(data["preFilledCells"]) == 15
    assert Puzzle.from_dict(data) == puzzle


@pytest.mark.parametrize(
    "data",
    [
        None,
        "not a puzzle",
        {},
        {"seed": "x", "difficulty": "medium", "cages": [], "solution": [[1] * 9] * 9},
        {"seed": "x", "difficulty": "nope", "cages": [], "solution": SOLVED},
        {"seed": "x", "difficulty": "easy", "cages": [{"sum": 3}], "solution": SOLVED},
    ],
)
def test_puzzle_from_bad_dict_returns_none(data):
    assert Puzzle.from_dict(data) is None


def _tamper(data, change):
    data = json.loads(json.dumps(data))
    change(data)
    return data


@pytest.mark.parametrize(
    "change",
    [
        lambda d: d["cages"].pop(),
        lambda d: d["cages"][0]["cells"].append(d["cages"][1]["cells"][0]),
        lambda d: d["cages"][0].update(sum=d["cages"][0]["sum"] + 1),
        lambda d: d["preFilledCells"][0].update(
            value=d["preFilledCells"][0]["value"] % 9 + 1
        ),
    ],
    ids=["missing-cage", "shared-cell", "wrong-sum", "wrong-given"],
)
def test_puzzle_from_inconsistent_dict_returns_none(change):
    data = generate_puzzle("share", "easy").to_dict()
    assert Puzzle.from_dict(data) is not None
    assert Puzzle.from_dict(_tamper(data, change)) is None


def test_show_prints_solution_and_cages(capsys):
    puzzle = generate_puzzle("show", "easy")
    puzzle.show()
    out = capsys.readouterr().out
    assert "KILLER SUDOKU PUZZLE 'show'" in out
    assert "Difficulty: easy" in out
    assert out.count("+--") >= 8
    assert puzzle.cage_at(8, 8).id in puzzle.format_cages()
