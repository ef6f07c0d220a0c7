from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from duel_engine.core.types import Profession, SkillID


BASIC_ATTACK_NAME = "Basic Attack"


def stable_skill_id(name: str) -> SkillID:
    """
    스킬 이름 -> 안정적인 id
    - 같은 이름이면 항상 같은 id ("Berserker Rage" -> "skill_berserker_rage")
    - 여러 전투원이 같은 템플릿을 공유해도 쿨다운 키가 어긋나지 않게 한다.
    """
    return SkillID("skill_" + name.strip().lower().replace(" ", "_"))


@dataclass(frozen=True)
class Skill:
    """
    Skill = 공유되는 불변 템플릿.
    - 쿨다운 상태는 여기 두지 않는다. (전투원의 CooldownTracker가 가진다)
    - allowed_profession=None 이면 누구나 사용 가능
    - skill_id는 name에서 파생되므로 생성자로 받지 않는다.
    """
    name: str
    base_damage: int = 0
    base_cooldown: int = 0
    allowed_profession: Optional[Profession] = None
    skill_id: SkillID = field(init=False)

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Skill name cannot be empty")
        # frozen dataclass라 object.__setattr__로 정규화
        object.__setattr__(self, "name", self.name.strip())
        object.__setattr__(self, "base_damage", max(0, int(self.base_damage)))
        object.__setattr__(self, "base_cooldown", max(0, int(self.base_cooldown)))
        object.__setattr__(self, "skill_id", stable_skill_id(self.name))

    @property
    def has_cooldown(self) -> bool:
        return self.base_cooldown > 0
