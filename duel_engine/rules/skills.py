from __future__ import annotations

from typing import Optional, Sequence

from duel_engine.core.commands import Skill
from duel_engine.core.models import Combatant, Player
from duel_engine.core.types import SkillStatus


class SkillResolver:
    """
    전투원 + 스킬 템플릿에 대한 무상태 질의.
    - 사용 가능 여부(직업 제한 + 쿨다운)
    - 데미지 계산(평탄 가산: base_damage + STR, 분산/치명 없음)
    - 표시용 상태
    """

    def matches_profession(self, combatant: Optional[Combatant], skill: Optional[Skill]) -> bool:
        """
        직업 제한 확인. 적은 직업 제한을 무시한다.
        """
        if combatant is None or skill is None:
            return False
        if not isinstance(combatant, Player):
            return True
        if skill.allowed_profession is None:
            return True
        return combatant.profession == skill.allowed_profession

    def can_use(self, combatant: Optional[Combatant], skill: Optional[Skill]) -> bool:
        if combatant is None or skill is None:
            return False
        if not self.matches_profession(combatant, skill):
            return False
        return combatant.cooldowns.is_ready(skill)

    def calculate_damage(self, combatant: Optional[Combatant], skill: Optional[Skill]) -> int:
        if combatant is None or skill is None:
            return 0
        return int(skill.base_damage) + int(combatant.stats.strength)

    def basic_attack_damage(self, combatant: Optional[Combatant]) -> int:
        if combatant is None:
            return 0
        return int(combatant.stats.strength)

    def status(self, combatant: Optional[Combatant], skill: Optional[Skill]) -> SkillStatus:
        if combatant is None or skill is None:
            return "INVALID"
        if not self.matches_profession(combatant, skill):
            return "WRONG_PROFESSION"
        if not combatant.cooldowns.is_ready(skill):
            return "ON_COOLDOWN"
        return "READY"

    def status_text(self, combatant: Optional[Combatant], skill: Optional[Skill]) -> str:
        if combatant is None or skill is None:
            return "Invalid"
        st = self.status(combatant, skill)
        if st == "ON_COOLDOWN":
            return combatant.cooldowns.status_text(skill)
        if st == "WRONG_PROFESSION":
            return "Wrong Profession"
        return "READY"

    # ----------------- skill list helpers -----------------

    @staticmethod
    def skill_at(skills: Sequence[Skill], index: Optional[int]) -> Optional[Skill]:
        if index is None or not 0 <= index < len(skills):
            return None
        return skills[index]

    @staticmethod
    def find_index(skills: Sequence[Skill], target: Optional[Skill]) -> int:
        if target is None:
            return -1
        for i, s in enumerate(skills):
            if s.skill_id == target.skill_id:
                return i
        return -1
