# difficulty.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

MIN_CAGE_SIZE = 2


@dataclass(frozen=True)
class DifficultySettings:
    max_cage_size: int
    pre_filled_count: int
    # when True, merging a leftover cell may not push a cage past max_cage_size
    strict_max_cage_size: bool = False


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    HARDCORE = "hardcore"

    @classmethod
    def parse(cls, value: Union["Difficulty", str]) -> "Difficulty":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ValueError(
                f"Unknown difficulty {value!r}; expected one of "
                f"{', '.join(d.value for d in cls)}"
            ) from None

    @property
    def settings(self) -> DifficultySettings:
        return _SETTINGS[self]

    def __str__(self) -> str:
        return self.value


_SETTINGS: Dict[Difficulty, DifficultySettings] = {
    Difficulty.EASY: DifficultySettings(3, 35, strict_max_cage_size=True),
    Difficulty.MEDIUM: DifficultySettings(4, 25),
    Difficulty.HARD: DifficultySettings(5, 15),
    Difficulty.HARDCORE: DifficultySettings(5, 0),
}
