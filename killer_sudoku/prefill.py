# prefill.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Tuple, Union

from .base_sudoku import SIZE, Grid
from .difficulty import Difficulty
from .random_stream import RandomStream


@dataclass(frozen=True)
class PreFilledCell:
    """A given: revealed from the start and not editable by the player."""

    row: int
    col: int
    value: int

    def to_dict(self) -> Dict[str, int]:
        return {"row": self.row, "col": self.col, "value": self.value}

    @classmethod
    def from_dict(cls, data: Any) -> "PreFilledCell":
        row, col, value = data["row"], data["col"], data["value"]
        if not all(isinstance(v, int) for v in (row, col, value)):
            raise ValueError(f"Malformed pre-filled cell: {data!r}")
        if not (0 <= row < SIZE and 0 <= col < SIZE and 1 <= value <= SIZE):
            raise ValueError(f"Pre-filled cell out of range: {data!r}")
        return cls(row, col, value)


def select_pre_filled(
    solution: Grid,
    random: RandomStream,
    difficulty: Union[Difficulty, str],
) -> Tuple[PreFilledCell, ...]:
    """
    Reveal a difficulty-sized set of distinct cells, drawn uniformly
    from all 81. Hardcore puzzles reveal nothing.
    """
    count = Difficulty.parse(difficulty).settings.pre_filled_count
    if count <= 0:
        return ()

    picked = random.sample(range(SIZE * SIZE), count)
    cells = []
    for idx in picked:
        r, c = divmod(idx, SIZE)
        cells.append(PreFilledCell(r, c, solution[r][c]))
    return tuple(cells)
