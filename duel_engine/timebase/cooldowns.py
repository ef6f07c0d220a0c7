# duel_engine/timebase/cooldowns.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping

from duel_engine.core.commands import Skill
from duel_engine.core.types import SkillID


def final_cooldown(skill: Skill, cooldown_reduction: int) -> int:
    """
    (기본 쿨다운, CDR) -> 실제 등록될 쿨다운(턴)
    규칙:
      - base == 0 이면 0 (항상 준비)
      - 그 외에는 max(1, base - CDR)  (CDR로 0까지 줄어들지 않는다)
    """
    if not skill.has_cooldown:
        return 0
    return max(1, skill.base_cooldown - max(0, int(cooldown_reduction)))


@dataclass
class CooldownTracker:
    """
    전투원 1명의 스킬 쿨다운 장부.
    - key = Skill.skill_id, value = 남은 턴
    - 엔트리가 없으면 준비 완료. 0 이하 값은 저장하지 않고 바로 지운다.
    - 입력은 호출자가 검증했다고 보고 예외 없이 조용히 클램프한다.
    """
    _entries: Dict[SkillID, int] = field(default_factory=dict)

    # ----------------- mutation -----------------

    def apply(self, skill: Skill, cooldown_reduction: int = 0) -> int:
        """
        스킬 사용 직후 쿨다운 등록. 등록된 값(없으면 0)을 돌려준다.
        """
        turns = final_cooldown(skill, cooldown_reduction)
        self.set(skill, turns)
        return turns

    def set(self, skill: Skill, turns: int) -> None:
        if int(turns) <= 0:
            self._entries.pop(skill.skill_id, None)
        else:
            self._entries[skill.skill_id] = int(turns)

    def tick(self) -> None:
        """
        턴 시작 시 1 감소. 0 이하가 된 엔트리는 제거.
        """
        for k in list(self._entries.keys()):
            self._entries[k] -= 1
            if self._entries[k] <= 0:
                del self._entries[k]

    def reset(self) -> None:
        self._entries.clear()

    # ----------------- queries -----------------

    def is_ready(self, skill: Skill) -> bool:
        return self._entries.get(skill.skill_id, 0) <= 0

    def remaining(self, skill: Skill) -> int:
        return self._entries.get(skill.skill_id, 0)

    def count_ready(self, skills: Iterable[Skill]) -> int:
        return sum(1 for s in skills if self.is_ready(s))

    def has_active(self) -> bool:
        return bool(self._entries)

    def progress(self, skill: Skill, cooldown_reduction: int = 0) -> float:
        """
        회복 게이지(0.0 ~ 1.0). 1.0 = 준비 완료.
        """
        remaining = self.remaining(skill)
        if remaining <= 0:
            return 1.0
        full = final_cooldown(skill, cooldown_reduction)
        if full <= 0:
            return 1.0
        return max(0.0, min(1.0, (full - remaining) / full))

    def status_text(self, skill: Skill) -> str:
        remaining = self.remaining(skill)
        if remaining <= 0:
            return "READY"
        return f"Cooldown: {remaining} turn" + ("" if remaining == 1 else "s")

    # ----------------- persistence -----------------

    def snapshot(self) -> Dict[str, int]:
        return {str(k): int(v) for k, v in self._entries.items()}

    def restore(self, entries: Mapping[str, int]) -> None:
        self._entries = {SkillID(str(k)): int(v) for k, v in entries.items() if int(v) > 0}
