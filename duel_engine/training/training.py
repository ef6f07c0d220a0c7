from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from duel_engine.core.models import Combatant, Enemy
from duel_engine.core.types import Specialization
from duel_engine.rules.checks import weighted_choice

logger = logging.getLogger(__name__)


# ==============================
# ⚠ 훈련 밸런스는 여기서만 ⚠
# ==============================
MIN_TRAINING_AMOUNT: int = 1
MAX_TRAINING_AMOUNT: int = 100

SPECIALIZED_WEIGHT: float = 0.6   # 특화 스탯
SECONDARY_WEIGHT: float = 0.2     # 나머지 스탯 각각

STATS: Tuple[Specialization, ...] = ("STRENGTH", "AGILITY", "INTELLIGENCE")

_ALIASES: Dict[str, Specialization] = {
    "STR": "STRENGTH",
    "STRENGTH": "STRENGTH",
    "AGI": "AGILITY",
    "AGILITY": "AGILITY",
    "INT": "INTELLIGENCE",
    "INTELLIGENCE": "INTELLIGENCE",
}


@dataclass(frozen=True)
class TrainingResult:
    """
    훈련 1회 결과. 잘못된 입력도 예외가 아니라 success=False로 돌려준다.
    """
    success: bool
    name: str
    stat: str
    amount: int
    old_value: int
    new_value: int
    message: str
    specialization: Optional[Specialization] = None

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class GroupTrainingResult:
    success: bool
    results: List[TrainingResult] = field(default_factory=list)
    message: str = ""

    @property
    def count(self) -> int:
        return len(self.results)

    def by_name(self, name: str) -> Optional[TrainingResult]:
        for r in self.results:
            if r.name == name:
                return r
        return None


def normalize_stat(stat: Optional[str]) -> Optional[Specialization]:
    if stat is None:
        return None
    return _ALIASES.get(stat.strip().upper())


def is_valid_amount(amount: int) -> bool:
    return MIN_TRAINING_AMOUNT <= amount <= MAX_TRAINING_AMOUNT


def get_stat(c: Combatant, stat: Specialization) -> int:
    s, a, i = c.stats.primaries()
    return {"STRENGTH": s, "AGILITY": a, "INTELLIGENCE": i}[stat]


def dominant_stat(c: Combatant) -> Specialization:
    """
    가장 높은 1차 스탯. 동률이면 STR > AGI > INT 순.
    """
    s, a, i = c.stats.primaries()
    if s >= a and s >= i:
        return "STRENGTH"
    if a >= i:
        return "AGILITY"
    return "INTELLIGENCE"


def _apply(c: Combatant, stat: Specialization, amount: int) -> Tuple[int, int]:
    old = get_stat(c, stat)
    if stat == "STRENGTH":
        c.stats.increase_strength(amount)
    elif stat == "AGILITY":
        c.stats.increase_agility(amount)
    else:
        c.stats.increase_intelligence(amount)
    return old, get_stat(c, stat)


def _fail(name: str, stat: str, message: str) -> TrainingResult:
    return TrainingResult(False, name, stat, 0, 0, 0, message)


# ------------------------------
# 플레이어 / 단일 스탯 훈련
# ------------------------------
def train_stat(c: Optional[Combatant], stat: Optional[str], amount: int) -> TrainingResult:
    """
    지정한 스탯을 amount만큼 올린다.
    - stat: STR/AGI/INT 또는 전체 이름(대소문자 무시)
    - amount: 1..100
    """
    if c is None:
        return _fail("Unknown", "", "Invalid combatant")
    if stat is None or not stat.strip():
        return _fail(c.name, "", "Invalid stat specified")
    if not is_valid_amount(amount):
        return _fail(
            c.name, stat,
            f"Training amount must be between {MIN_TRAINING_AMOUNT} and {MAX_TRAINING_AMOUNT}",
        )
    norm = normalize_stat(stat)
    if norm is None:
        return _fail(c.name, stat, f"Unknown stat: {stat}. Use STR, AGI, or INT")

    old, new = _apply(c, norm, amount)
    logger.debug("train: %s %s %d -> %d", c.name, norm, old, new)
    return TrainingResult(
        True, c.name, norm, amount, old, new,
        f"{c.name} trained {norm} +{amount} ({old} → {new})",
        specialization=getattr(c, "specialization", None),
    )


def train_player(c: Optional[Combatant], stat: Optional[str], amount: int) -> TrainingResult:
    return train_stat(c, stat, amount)


# ------------------------------
# 적 특화 훈련 (가중치 추첨)
# ------------------------------
def specialization_of(enemy: Enemy) -> Specialization:
    """
    생성 시 지정된 특화. 없으면 가장 높은 스탯으로 판단한다.
    """
    return enemy.specialization or dominant_stat(enemy)


def specialization_weights(spec: Specialization) -> List[float]:
    return [SPECIALIZED_WEIGHT if s == spec else SECONDARY_WEIGHT for s in STATS]


def train_enemy(enemy: Optional[Enemy], amount: int, *, rng: random.Random) -> TrainingResult:
    """
    특화 스탯 60%, 나머지 각 20% 확률로 스탯 1개를 골라 amount만큼 올린다.
    """
    if enemy is None:
        return _fail("Unknown", "", "Invalid enemy")
    if not is_valid_amount(amount):
        return _fail(enemy.name, "", "Invalid training amount")

    spec = specialization_of(enemy)
    stat = weighted_choice(STATS, specialization_weights(spec), rng=rng)
    old, new = _apply(enemy, stat, amount)
    logger.debug("enemy train: %s [%s] %s %d -> %d", enemy.name, spec, stat, old, new)
    return TrainingResult(
        True, enemy.name, stat, amount, old, new,
        f"{enemy.name} trained {stat} +{amount} ({old} → {new}) [{spec} specialist]",
        specialization=spec,
    )


def train_group(enemies: Sequence[Optional[Enemy]], amount: int, *, rng: random.Random) -> GroupTrainingResult:
    if not enemies:
        return GroupTrainingResult(False, [], "No enemies to train")
    results = [train_enemy(e, amount, rng=rng) for e in enemies if e is not None]
    return GroupTrainingResult(True, results, f"Group training complete: {len(results)} enemies trained")


def train_group_stat(enemies: Sequence[Optional[Enemy]], stat: str, amount: int) -> GroupTrainingResult:
    if not enemies:
        return GroupTrainingResult(False, [], "No enemies to train")
    norm = normalize_stat(stat)
    if norm is None:
        return GroupTrainingResult(False, [], f"Invalid stat: {stat}")
    results = [train_stat(e, norm, amount) for e in enemies if e is not None]
    return GroupTrainingResult(True, results, f"Group trained {norm} +{amount} ({len(results)} enemies)")
