from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from duel_engine.core.types import Archetype, CombatantID, Profession, Side, Specialization
from duel_engine.core.commands import Skill
from duel_engine.initiative.action_value import TurnScheduler
from duel_engine.rules.indices.derived import DerivedStats, compute_derived_stats
from duel_engine.timebase.cooldowns import CooldownTracker


@dataclass
class StatBlock:
    """
    1차 스탯 + 파생 스탯.
    - 1차 스탯(STR/AGI/INT)이 바뀔 때마다 파생 스탯을 다시 계산한다.
    - 불변식: 0 <= hp <= max_hp
    - STR 증가분만큼 max_hp가 늘면 hp도 같은 양만큼 늘어난다(새 max로 클램프).
      AGI/INT 변화는 hp를 건드리지 않는다.
    """
    _strength: int
    _agility: int
    _intelligence: int
    _hp: Optional[int] = None
    _derived: DerivedStats = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._strength = max(0, int(self._strength))
        self._agility = max(0, int(self._agility))
        self._intelligence = max(0, int(self._intelligence))
        self._recompute()
        # 생성 시 hp 미지정이면 풀피
        self._hp = self._clamp_hp(self.max_hp if self._hp is None else self._hp)

    @classmethod
    def of(cls, strength: int, agility: int, intelligence: int, *, hp: Optional[int] = None) -> "StatBlock":
        """
        공개 생성자. hp=None 이면 풀피, 그 외에는 [0, max_hp]로 클램프.
        """
        return cls(_strength=strength, _agility=agility, _intelligence=intelligence, _hp=hp)

    def _recompute(self) -> None:
        self._derived = compute_derived_stats(
            strength=self._strength,
            agility=self._agility,
            intelligence=self._intelligence,
        )

    def _clamp_hp(self, v: int) -> int:
        v = int(v)
        if v < 0:
            return 0
        if v > self.max_hp:
            return self.max_hp
        return v

    # ----------------- primaries -----------------

    @property
    def strength(self) -> int:
        return self._strength

    @property
    def agility(self) -> int:
        return self._agility

    @property
    def intelligence(self) -> int:
        return self._intelligence

    def primaries(self) -> Tuple[int, int, int]:
        return self._strength, self._agility, self._intelligence

    # ----------------- derived -----------------

    @property
    def max_hp(self) -> int:
        return self._derived.max_hp

    @property
    def evasion(self) -> int:
        return self._derived.evasion

    @property
    def accuracy(self) -> int:
        return self._derived.accuracy

    @property
    def cooldown_reduction(self) -> int:
        return self._derived.cooldown_reduction

    @property
    def speed(self) -> int:
        return self._derived.speed

    @property
    def hp(self) -> int:
        return int(self._hp or 0)

    @hp.setter
    def hp(self, value: int) -> None:
        self._hp = self._clamp_hp(int(value))

    @property
    def is_dead(self) -> bool:
        return self.hp <= 0

    @property
    def hp_ratio(self) -> float:
        if self.max_hp <= 0:
            return 0.0
        return self.hp / self.max_hp

    # ----------------- mutation -----------------

    def increase_strength(self, amount: int) -> None:
        if amount == 0:
            return
        old_max = self.max_hp
        self._strength = max(0, self._strength + int(amount))
        self._recompute()
        self.hp = self.hp + (self.max_hp - old_max)

    def increase_agility(self, amount: int) -> None:
        if amount == 0:
            return
        self._agility = max(0, self._agility + int(amount))
        self._recompute()

    def increase_intelligence(self, amount: int) -> None:
        if amount == 0:
            return
        self._intelligence = max(0, self._intelligence + int(amount))
        self._recompute()

    def take_damage(self, amount: int) -> int:
        """
        피해 적용. 실제로 깎인 양을 돌려준다.
        - 0 이하 입력은 무시
        """
        if amount <= 0:
            return 0
        before = self.hp
        self.hp = before - int(amount)
        return before - self.hp

    def full_heal(self) -> None:
        self._hp = self.max_hp


@dataclass
class Combatant:
    """
    전투원 공통부.
    - StatBlock 1개, CooldownTracker 1개를 단독 소유한다.
    - skills는 공유 템플릿에 대한 읽기 전용 참조(tuple)
    """
    cid: CombatantID
    name: str
    stats: StatBlock
    skills: Tuple[Skill, ...] = ()
    cooldowns: CooldownTracker = field(default_factory=CooldownTracker)

    side: Side = field(init=False, default="PLAYER")

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ValueError("Combatant name cannot be empty")
        self.name = self.name.strip()
        self.skills = tuple(self.skills or ())

    @property
    def is_dead(self) -> bool:
        return self.stats.is_dead

    @property
    def has_skills(self) -> bool:
        return len(self.skills) > 0

    def skill_at(self, index: int) -> Optional[Skill]:
        if 0 <= index < len(self.skills):
            return self.skills[index]
        return None


@dataclass
class Player(Combatant):
    profession: Profession = "WARRIOR"

    def __post_init__(self) -> None:
        super().__post_init__()
        self.side = "PLAYER"


@dataclass
class Enemy(Combatant):
    """
    archetype은 생성 시 고정된다. AI 분기는 이름이 아니라 이 태그로만 한다.
    """
    archetype: Archetype = "DEFAULT"
    specialization: Optional[Specialization] = None

    def __post_init__(self) -> None:
        super().__post_init__()
        self.side = "ENEMY"


@dataclass
class BattleState:
    """
    전투 1회의 가변 상태. 엔진이 만들고 호출자가 들고 다닌다.
    - events: 사람이 읽기 위한 로그 문자열 (테스트/리포트용)
    - turn_started: 이번 턴의 쿨다운 tick이 이미 끝났는지 (거절 후 재시도 시 중복 tick 방지)
    - scheduler: 이 전투 전용 AV 턴 큐. 같은 엔진의 다른 전투와 공유하지 않는다.
    """
    player: Player
    enemy: Enemy
    scheduler: TurnScheduler = field(default_factory=TurnScheduler)
    turn: int = 1
    last_actor: Optional[Side] = None
    turn_started: bool = False
    ended: bool = False
    events: List[str] = field(default_factory=list)

    def combatant(self, side: Side) -> Combatant:
        return self.player if side == "PLAYER" else self.enemy

    def opponent_of(self, side: Side) -> Combatant:
        return self.enemy if side == "PLAYER" else self.player

    def side_of(self, cid: Optional[CombatantID]) -> Optional[Side]:
        if cid is None:
            return None
        if cid == self.player.cid:
            return "PLAYER"
        if cid == self.enemy.cid:
            return "ENEMY"
        return None
