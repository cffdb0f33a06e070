# realms/engine/dice.py
"""
Dice notation values.

Damage strings such as "1d6+1" are parsed once, when area data loads, into a
Dice value. Rolling and averaging are then plain operations on that value.
"""

from __future__ import annotations

import random
import re
from dataclasses import dataclass

DICE_PATTERN = re.compile(r"(\d+)d(\d+)(?:\s*([+-])\s*(\d+))?", re.IGNORECASE)
FIXED_PATTERN = re.compile(r"^\s*([+-]?\d+)")


@dataclass(frozen=True)
class Dice:
    """
    A roll of `count` dice with `sides` faces plus a flat `modifier`.

    A value with count == 0 is fixed damage: it always rolls its modifier.
    """
    count: int
    sides: int
    modifier: int = 0

    @classmethod
    def parse(cls, notation: str | int | None) -> "Dice":
        """
        Parse "NdM", "NdM+K" or "NdM-K".

        Anything that is not dice notation is treated as fixed damage using
        its leading integer, or 1 when there is none.
        """
        if notation is None:
            return cls.fixed(1)
        if isinstance(notation, int):
            return cls.fixed(notation)

        match = DICE_PATTERN.search(notation)
        if match:
            count, sides, sign, mod = match.groups()
            modifier = int(mod) if mod else 0
            if sign == "-":
                modifier = -modifier
            return cls(count=int(count), sides=int(sides), modifier=modifier)

        fixed = FIXED_PATTERN.match(notation)
        return cls.fixed(int(fixed.group(1)) if fixed else 1)

    @classmethod
    def fixed(cls, value: int) -> "Dice":
        return cls(count=0, sides=0, modifier=value)

    @property
    def is_fixed(self) -> bool:
        return self.count == 0 or self.sides == 0

    def roll(self, rng: random.Random | None = None) -> int:
        """Roll the dice. The result is never below 1."""
        rng = rng or random
        total = self.modifier
        if not self.is_fixed:
            total += sum(rng.randint(1, self.sides) for _ in range(self.count))
        return max(1, total)

    def average(self) -> float:
        """Expected value of a roll (before the minimum-of-1 clamp)."""
        if self.is_fixed:
            return float(self.modifier)
        return self.count * (self.sides / 2 + 0.5) + self.modifier

    def __str__(self) -> str:
        if self.is_fixed:
            return str(self.modifier)
        if self.modifier > 0:
            return f"{self.count}d{self.sides}+{self.modifier}"
        if self.modifier < 0:
            return f"{self.count}d{self.sides}{self.modifier}"
        return f"{self.count}d{self.sides}"
