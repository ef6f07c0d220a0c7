from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Literal, Optional

from duel_engine.core.commands import BASIC_ATTACK_NAME, Skill
from duel_engine.core.models import Combatant, Enemy
from duel_engine.core.types import Archetype
from duel_engine.rules.skills import SkillResolver

logger = logging.getLogger(__name__)

BASIC_ATTACK_INDEX: int = -1

# 스킬 역할(인덱스) 규약: 0=기본기, 1=보조기, 마지막=궁극기
BASIC_SLOT = 0
SECONDARY_SLOT = 1
ULTIMATE_SLOT = 2

# 적응형(ADAPTIVE) 구간 경계 (상대 HP 비율)
LOW_HP_THRESHOLD: float = 0.4
MEDIUM_HP_THRESHOLD: float = 0.7

DecisionTag = Literal[
    "INVALID",
    "NO_SKILLS",
    "ALL_ON_COOLDOWN",
    "BURST",             # 공격형: 준비된 최고 데미지
    "EXECUTE",           # 궁극기로 확정 처치
    "OPENING_STRIKE",    # 상대 풀피 상태에서 궁극기 선공
    "STEADY_PRESSURE",
    "WAITING",
    "FILLER",
    "LETHAL",            # 적응형 저HP: 궁극기로 처치 가능
    "MAX_DAMAGE",
    "COMBO_SETUP",       # 적응형 중HP: 궁극기 후 보조기 2회 이내 처치
    "POKE",
    "AVOID_WASTE",
    "HIGHEST_AVAILABLE",
]


@dataclass(frozen=True)
class AIDecision:
    """
    AI 선택 결과.
    - skill_index = BASIC_ATTACK_INDEX(-1) 이면 기본 공격
    - reasoning: 사람이 읽는 설명, tag: 테스트/집계용 분류
    """
    skill_index: int
    skill_name: str
    reasoning: str
    tag: DecisionTag

    @property
    def is_basic_attack(self) -> bool:
        return self.skill_index == BASIC_ATTACK_INDEX

    def __str__(self) -> str:
        return f"{self.skill_name} - {self.reasoning}"


def _basic(reasoning: str, tag: DecisionTag) -> AIDecision:
    return AIDecision(BASIC_ATTACK_INDEX, BASIC_ATTACK_NAME, reasoning, tag)


def _use(skills: tuple[Skill, ...], index: int, reasoning: str, tag: DecisionTag) -> AIDecision:
    return AIDecision(index, skills[index].name, reasoning, tag)


class DecisionEngine:
    """
    상대(적) AI.
    (자신 상태, 상대 상태, 자신 쿨다운) -> AIDecision 의 순수 함수.
    분기는 생성 시 고정된 archetype 태그로만 한다(표시 이름 비교 없음).
    """

    DESCRIPTIONS: Dict[Archetype, str] = {
        "AGGRESSIVE": "Aggressive: Prioritizes burst damage",
        "STRATEGIC": "Strategic: Uses ultimate for executes",
        "ADAPTIVE": "Adaptive: Adjusts strategy based on your HP",
        "DEFAULT": "Standard: Uses available skills",
    }

    def __init__(self, skills: SkillResolver | None = None) -> None:
        self.skills = skills or SkillResolver()
        self._table: Dict[Archetype, Callable[[Enemy, Combatant], AIDecision]] = {
            "AGGRESSIVE": self._aggressive,
            "STRATEGIC": self._strategic,
            "ADAPTIVE": self._adaptive,
            "DEFAULT": self._default,
        }

    # ----------------- entry point -----------------

    def choose(self, me: Optional[Enemy], opponent: Optional[Combatant]) -> AIDecision:
        if me is None or opponent is None:
            return _basic("Invalid state", "INVALID")
        if not me.has_skills:
            return _basic("No skills available", "NO_SKILLS")

        decide = self._table.get(me.archetype, self._default)
        decision = decide(me, opponent)
        logger.debug("ai[%s] %s -> %s (%s)", me.archetype, me.name, decision.skill_name, decision.tag)
        return decision

    # ----------------- helpers -----------------

    def _ready(self, me: Enemy, index: int) -> bool:
        return 0 <= index < len(me.skills) and me.cooldowns.is_ready(me.skills[index])

    def _damage(self, me: Enemy, index: int) -> int:
        return self.skills.calculate_damage(me, me.skills[index])

    def _lethal_indices(self, me: Enemy, opponent: Combatant) -> list[int]:
        hp = opponent.stats.hp
        return [
            i for i in range(len(me.skills))
            if self._ready(me, i) and self._damage(me, i) >= hp
        ]

    # ----------------- archetypes -----------------

    def _aggressive(self, me: Enemy, opponent: Combatant) -> AIDecision:
        """
        공격형: 준비된 스킬 중 데미지가 가장 큰 것 (동률이면 뒤쪽 = 궁극기 > 보조기 > 기본기)
        """
        ready = [i for i in range(len(me.skills)) if self._ready(me, i)]
        if not ready:
            return _basic("All skills on cooldown", "ALL_ON_COOLDOWN")
        best = max(ready, key=lambda i: (self._damage(me, i), i))
        if best == len(me.skills) - 1 and best > 0:
            why = "Maximum burst damage"
        elif best > 0:
            why = "High damage attack"
        else:
            why = "Basic attack"
        return _use(me.skills, best, why, "BURST")

    def _strategic(self, me: Enemy, opponent: Combatant) -> AIDecision:
        """
        전략형:
          1) 궁극기 준비 + 확정 처치 -> 처형(EXECUTE)
          2) 궁극기 준비 + 상대 풀피 -> 선공(OPENING_STRIKE)
          3) 보조기 -> 기본기 -> 궁극기(채우기) -> 기본 공격
        """
        if len(me.skills) < 3:
            return self._default(me, opponent)

        sk = me.skills
        hp = opponent.stats.hp

        if self._ready(me, ULTIMATE_SLOT):
            ult_dmg = self._damage(me, ULTIMATE_SLOT)
            if ult_dmg >= hp:
                return _use(sk, ULTIMATE_SLOT, f"Execute! ({ult_dmg} damage >= {hp} HP)", "EXECUTE")
            if hp == opponent.stats.max_hp:
                return _use(sk, ULTIMATE_SLOT, "Opening intimidation strike", "OPENING_STRIKE")

        if self._ready(me, SECONDARY_SLOT):
            return _use(sk, SECONDARY_SLOT, "Steady pressure", "STEADY_PRESSURE")
        if self._ready(me, BASIC_SLOT):
            return _use(sk, BASIC_SLOT, "Waiting for ultimate", "WAITING")
        if self._ready(me, ULTIMATE_SLOT):
            return _use(sk, ULTIMATE_SLOT, "Nothing else ready", "FILLER")
        return _basic("All skills on cooldown", "ALL_ON_COOLDOWN")

    def _adaptive(self, me: Enemy, opponent: Combatant) -> AIDecision:
        """
        적응형: 상대 HP 비율로 3구간
          - 저(<40%): 처치 가능한 궁극기 > 준비된 최고 데미지 > 기본기
          - 중(40~70%): 궁극기 후 잔여 HP가 보조기 2회 안(0 < 잔여 < 2*보조기)이면 궁극기,
                        아니면 보조기 > 궁극기 > 기본기
          - 고(>70%): 보조기(견제) > 궁극기(보조기 불가 시, 놀리지 않기) > 기본기
        한 구간에서 아무것도 준비되지 않았으면 다음 구간 규칙으로 내려간다.
        """
        if len(me.skills) < 3:
            return self._default(me, opponent)

        sk = me.skills
        hp = opponent.stats.hp
        ratio = opponent.stats.hp_ratio

        ult_ready = self._ready(me, ULTIMATE_SLOT)
        sec_ready = self._ready(me, SECONDARY_SLOT)
        basic_ready = self._ready(me, BASIC_SLOT)
        ult_dmg = self._damage(me, ULTIMATE_SLOT)
        sec_dmg = self._damage(me, SECONDARY_SLOT)

        if ratio < LOW_HP_THRESHOLD:
            if ult_ready:
                if ult_dmg >= hp:
                    return _use(sk, ULTIMATE_SLOT, f"Lethal: {ult_dmg} damage for kill!", "LETHAL")
                return _use(sk, ULTIMATE_SLOT, "Maximum damage - going for kill", "MAX_DAMAGE")
            if sec_ready:
                return _use(sk, SECONDARY_SLOT, "High damage pressure", "MAX_DAMAGE")
            if basic_ready:
                return _use(sk, BASIC_SLOT, "Waiting for cooldowns", "WAITING")

        if ratio < MEDIUM_HP_THRESHOLD:
            if ult_ready:
                remainder = hp - ult_dmg
                if 0 < remainder < sec_dmg * 2:
                    return _use(sk, ULTIMATE_SLOT, "Setting up kill combo", "COMBO_SETUP")
            if sec_ready:
                return _use(sk, SECONDARY_SLOT, "Steady damage buildup", "STEADY_PRESSURE")
            if ult_ready:
                return _use(sk, ULTIMATE_SLOT, "Efficient cooldown usage", "AVOID_WASTE")
            if basic_ready:
                return _use(sk, BASIC_SLOT, "Efficient resource management", "FILLER")

        if sec_ready:
            return _use(sk, SECONDARY_SLOT, "Efficient poke damage", "POKE")
        if ult_ready:
            return _use(sk, ULTIMATE_SLOT, "Avoiding wasted cooldown uptime", "AVOID_WASTE")
        if basic_ready:
            return _use(sk, BASIC_SLOT, "Conservative approach", "FILLER")
        return _basic("All skills on cooldown", "ALL_ON_COOLDOWN")

    def _default(self, me: Enemy, opponent: Combatant) -> AIDecision:
        for i in range(len(me.skills) - 1, -1, -1):
            if self._ready(me, i):
                return _use(me.skills, i, "Highest available skill", "HIGHEST_AVAILABLE")
        return _basic("All skills on cooldown", "ALL_ON_COOLDOWN")

    # ----------------- auxiliary queries -----------------

    def execute_skill(self, me: Optional[Enemy], opponent: Optional[Combatant]) -> Optional[Skill]:
        """
        지금 확정 처치가 가능한 준비된 스킬(앞쪽 우선). 없으면 None.
        """
        if me is None or opponent is None or not me.has_skills:
            return None
        lethal = self._lethal_indices(me, opponent)
        return me.skills[lethal[0]] if lethal else None

    def can_execute(self, me: Optional[Enemy], opponent: Optional[Combatant]) -> bool:
        return self.execute_skill(me, opponent) is not None

    def threat_level(self, me: Optional[Enemy], opponent: Optional[Combatant]) -> int:
        """
        위협도
          3 = 확정 처치 가능
          2 = 궁극기 사용 예정
          1 = 보조기 사용 예정
          0 = 기본기/기본 공격
        """
        if me is None or opponent is None:
            return 0
        if self.can_execute(me, opponent):
            return 3
        decision = self.choose(me, opponent)
        if decision.is_basic_attack:
            return 0
        if decision.skill_index == len(me.skills) - 1 and decision.skill_index >= ULTIMATE_SLOT:
            return 2
        if decision.skill_index > BASIC_SLOT:
            return 1
        return 0

    def intent(self, me: Optional[Enemy], opponent: Optional[Combatant]) -> str:
        return self.choose(me, opponent).skill_name

    def formatted_intent(self, me: Optional[Enemy], opponent: Optional[Combatant]) -> str:
        """
        실행하지 않고 다음 행동을 미리 보여주는 문자열.
        """
        decision = self.choose(me, opponent)
        if me is None or opponent is None:
            return decision.skill_name

        if decision.is_basic_attack:
            return f"{BASIC_ATTACK_NAME} ({self.skills.basic_attack_damage(me)} DMG)"

        skill = me.skill_at(decision.skill_index)
        if skill is None:
            return decision.skill_name
        dmg = self.skills.calculate_damage(me, skill)
        if dmg >= opponent.stats.hp:
            return f"⚠ {decision.skill_name} ({dmg} DMG - LETHAL!)"
        return f"{decision.skill_name} ({dmg} DMG)"

    def describe(self, archetype: Optional[Archetype]) -> str:
        if archetype is None:
            return self.DESCRIPTIONS["DEFAULT"]
        return self.DESCRIPTIONS.get(archetype, self.DESCRIPTIONS["DEFAULT"])
