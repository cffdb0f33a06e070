# realms/engine/systems/skills.py
"""
SkillBook - skill definitions and level-gated awarding.

Skills unlock when the player reaches their level. Cooldowns are counted in
ticks and decremented by the TickScheduler.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional

if TYPE_CHECKING:
    from ..world import WorldPlayer


@dataclass(frozen=True)
class SkillData:
    id: str
    name: str
    description: str = ""
    level: int = 1
    cost: int = 0  # Stamina
    cooldown: int = 0  # Ticks
    damage_multiplier: Optional[float] = None


class SkillBook:
    """All skills known to the game, keyed by skill id."""

    def __init__(self, skills: Iterable[SkillData] = ()) -> None:
        self._skills: Dict[str, SkillData] = {skill.id: skill for skill in skills}

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._skills

    def __iter__(self) -> Iterator[SkillData]:
        return iter(self._skills.values())

    def __len__(self) -> int:
        return len(self._skills)

    def get(self, skill_id: str) -> SkillData | None:
        return self._skills.get(skill_id)

    def award_skills(self, player: "WorldPlayer") -> List[SkillData]:
        """Teach the player every skill their level qualifies for. Returns the new ones."""
        learned = []
        for skill in sorted(self._skills.values(), key=lambda s: (s.level, s.id)):
            if skill.level <= player.level and player.learn_skill(skill.id):
                learned.append(skill)
        return learned

    def award_message(self, player: "WorldPlayer") -> str | None:
        learned = self.award_skills(player)
        if not learned:
            return None
        return "\n".join(f'You have learned a new skill: "{skill.name}"!' for skill in learned)

    def next_skill(self, level: int) -> SkillData | None:
        """The lowest-level skill still above `level`."""
        upcoming = [skill for skill in self._skills.values() if skill.level > level]
        if not upcoming:
            return None
        return min(upcoming, key=lambda s: (s.level, s.id))
