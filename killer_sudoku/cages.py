# cages.py

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Set, Tuple, Union

from .base_sudoku import SIZE, Grid, Pos, orthogonal_neighbors
from .difficulty import MIN_CAGE_SIZE, Difficulty, DifficultySettings
from .random_stream import RandomStream

log = logging.getLogger(__name__)

CELL_COUNT = SIZE * SIZE
MAX_PARTITION_ATTEMPTS = 50
# coprime with 81, so successive attempts start their scans at different cells
START_OFFSET_STEP = 17


# --------------------------
# Cage data model
# --------------------------


@dataclass(frozen=True)
class CellCoord:
    row: int
    col: int

    @property
    def pos(self) -> Pos:
        return (self.row, self.col)

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col}

    @classmethod
    def from_dict(cls, data: Any) -> "CellCoord":
        row, col = data["row"], data["col"]
        if not all(isinstance(v, int) and 0 <= v < SIZE for v in (row, col)):
            raise ValueError(f"Cell out of range: {data!r}")
        return cls(row, col)


@dataclass(frozen=True)
class Cage:
    """
    Connected group of cells whose (distinct) digits add up to `sum`.
    """

    id: str
    cells: Tuple[CellCoord, ...]
    sum: int

    @property
    def size(self) -> int:
        return len(self.cells)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "sum": self.sum,
            "cells": [cell.to_dict() for cell in self.cells],
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Cage":
        cells = tuple(CellCoord.from_dict(cell) for cell in data["cells"])
        if not cells or not isinstance(data["sum"], int):
            raise ValueError(f"Malformed cage: {data!r}")
        return cls(str(data.get("id", "")), cells, data["sum"])


# --------------------------
# Attempt outcomes
# --------------------------


class FailureReason(str, Enum):
    NO_MERGE_TARGET = "no_merge_target"
    ISOLATED_CELL = "isolated_cell"


@dataclass(frozen=True)
class CagePartition:
    cages: Tuple[Cage, ...]
    attempt: int = 0


@dataclass(frozen=True)
class PartitionFailure:
    reason: FailureReason
    cell: CellCoord
    attempt: int = 0


PartitionResult = Union[CagePartition, PartitionFailure]


# --------------------------
# Start cell selection
# --------------------------


class StartStrategy(Enum):
    GROW = "grow"  # unused cell with at least one unused, growable neighbour
    MERGE = "merge"  # leftover cell touching an existing cage
    ANY = "any"  # anything still unused


@dataclass(frozen=True)
class StartCell:
    pos: Pos
    strategy: StartStrategy


def _scan_order(offset: int) -> Iterator[Pos]:
    for i in range(CELL_COUNT):
        yield divmod((offset + i) % CELL_COUNT, SIZE)


def choose_start_cell(
    used: Set[Pos], solution: Grid, offset: int = 0
) -> Optional[StartCell]:
    """
    Pick where the next cage starts, trying strategies in priority order
    (GROW, then MERGE, then ANY). Each strategy scans row-major,
    starting at `offset` and wrapping around. None once every cell is used.
    """
    free = [pos for pos in _scan_order(offset) if pos not in used]
    if not free:
        return None

    for r, c in free:
        digit = solution[r][c]
        for nr, nc in orthogonal_neighbors(r, c):
            if (nr, nc) not in used and solution[nr][nc] != digit:
                return StartCell((r, c), StartStrategy.GROW)

    for r, c in free:
        if any(nb in used for nb in orthogonal_neighbors(r, c)):
            return StartCell((r, c), StartStrategy.MERGE)

    return StartCell(free[0], StartStrategy.ANY)


# --------------------------
# Partitioning
# --------------------------


@dataclass
class _CageBuilder:
    id: str
    cells: List[Pos] = field(default_factory=list)
    digits: Set[int] = field(default_factory=set)
    total: int = 0

    def add(self, pos: Pos, solution: Grid) -> None:
        r, c = pos
        self.cells.append(pos)
        self.digits.add(solution[r][c])
        self.total += solution[r][c]

    def freeze(self) -> Cage:
        return Cage(
            self.id,
            tuple(CellCoord(r, c) for r, c in self.cells),
            self.total,
        )


def _growth_candidates(
    builder: _CageBuilder, used: Set[Pos], solution: Grid
) -> List[Pos]:
    candidates: List[Pos] = []
    for r, c in builder.cells:
        for nr, nc in orthogonal_neighbors(r, c):
            if (nr, nc) in used or (nr, nc) in candidates:
                continue
            if solution[nr][nc] in builder.digits:
                continue
            candidates.append((nr, nc))
    return candidates


def _merge_targets(
    pos: Pos,
    owner: Dict[Pos, _CageBuilder],
    solution: Grid,
    settings: DifficultySettings,
) -> List[_CageBuilder]:
    r, c = pos
    targets: List[_CageBuilder] = []
    for nb in orthogonal_neighbors(r, c):
        builder = owner.get(nb)
        if builder is None or builder in targets:
            continue
        if solution[r][c] in builder.digits:
            continue
        if settings.strict_max_cage_size and len(builder.cells) >= settings.max_cage_size:
            continue
        targets.append(builder)
    return targets


def partition_cages(
    solution: Grid,
    random: RandomStream,
    difficulty: Union[Difficulty, str],
    attempt: int = 0,
) -> PartitionResult:
    """
    One attempt at splitting the grid into cages.

    Cages are grown from a start cell to a random target size in
    [2, max_cage_size] by adding random orthogonal neighbours whose digit
    is not yet in the cage. A leftover cell that cannot start a cage of
    its own is merged into a random adjacent cage that can take it; if
    none can, the attempt fails and a PartitionFailure is returned.
    """
    settings = Difficulty.parse(difficulty).settings
    offset = (attempt * START_OFFSET_STEP) % CELL_COUNT

    used: Set[Pos] = set()
    owner: Dict[Pos, _CageBuilder] = {}
    builders: List[_CageBuilder] = []

    def claim(pos: Pos, builder: _CageBuilder) -> None:
        builder.add(pos, solution)
        used.add(pos)
        owner[pos] = builder

    while len(used) < CELL_COUNT:
        start = choose_start_cell(used, solution, offset)
        if start is None:
            break

        if start.strategy is StartStrategy.GROW:
            builder = _CageBuilder(str(len(builders) + 1))
            builders.append(builder)
            claim(start.pos, builder)

            target = MIN_CAGE_SIZE + random.randint_below(
                settings.max_cage_size - MIN_CAGE_SIZE + 1
            )
            while len(builder.cells) < target:
                candidates = _growth_candidates(builder, used, solution)
                if not candidates:
                    break
                claim(random.choice(candidates), builder)

        elif start.strategy is StartStrategy.MERGE:
            targets = _merge_targets(start.pos, owner, solution, settings)
            if not targets:
                return PartitionFailure(
                    FailureReason.NO_MERGE_TARGET, CellCoord(*start.pos), attempt
                )
            claim(start.pos, random.choice(targets))

        else:
            return PartitionFailure(
                FailureReason.ISOLATED_CELL, CellCoord(*start.pos), attempt
            )

    return CagePartition(tuple(b.freeze() for b in builders), attempt)


def partition(
    solution: Grid,
    random: RandomStream,
    difficulty: Union[Difficulty, str],
    max_attempts: int = MAX_PARTITION_ATTEMPTS,
) -> PartitionResult:
    """
    Run partition attempts on the shared stream until one succeeds.
    Returns the last failure when all `max_attempts` attempts fail.
    """
    assert max_attempts > 0, "Need at least one attempt"

    result: PartitionResult = PartitionFailure(
        FailureReason.ISOLATED_CELL, CellCoord(0, 0)
    )
    for attempt in range(max_attempts):
        result = partition_cages(solution, random, difficulty, attempt)
        if isinstance(result, CagePartition):
            return result
        log.debug(
            "Cage partition attempt %d failed (%s at %d,%d)",
            attempt,
            result.reason.value,
            result.cell.row,
            result.cell.col,
        )
    return result


def cage_map(cages: Sequence[Cage]) -> Dict[Pos, Cage]:
    """Cell -> owning cage lookup."""
    return {cell.pos: cage for cage in cages for cell in cage.cells}
