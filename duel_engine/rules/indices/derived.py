from __future__ import annotations

import math
from dataclasses import dataclass


# ==============================
# ⚠ 밸런스 조절은 여기서만 ⚠
# ==============================
BASE_HP: int = 60
HP_PER_STRENGTH: int = 3

EVASION_SCALER: float = 1.8
ACCURACY_SCALER: float = 2.2
BASE_ACCURACY: int = 75

CDR_INT_THRESHOLD: int = 20
CDR_SCALER: float = 0.5
SPEED_SCALER: float = 1.5


@dataclass(frozen=True)
class DerivedStats:
    """
    1차 스탯(STR/AGI/INT)에서 결정론적으로 계산되는 2차 스탯 묶음.
    StatBlock이 1차 스탯이 바뀔 때마다 통째로 다시 만든다.
    """
    max_hp: int
    evasion: int
    accuracy: int
    cooldown_reduction: int
    speed: int


def compute_max_hp(strength: int) -> int:
    """
    최대 HP
    - 60 + 3 * STR
    """
    return int(BASE_HP + HP_PER_STRENGTH * int(strength))


def compute_evasion(agility: int) -> int:
    """
    회피
    - floor(1.8 * sqrt(AGI))
    """
    return int(math.floor(EVASION_SCALER * math.sqrt(max(0, int(agility)))))


def compute_accuracy(intelligence: int) -> int:
    """
    명중
    - 75 + floor(2.2 * sqrt(INT))
    """
    return int(BASE_ACCURACY + math.floor(ACCURACY_SCALER * math.sqrt(max(0, int(intelligence)))))


def compute_cooldown_reduction(intelligence: int) -> int:
    """
    쿨감(CDR)
    - floor(0.5 * sqrt(max(0, INT - 20)))
    - INT 20 이하는 0
    """
    above = max(0, int(intelligence) - CDR_INT_THRESHOLD)
    return int(math.floor(CDR_SCALER * math.sqrt(above)))


def compute_speed(agility: int) -> int:
    """
    속도
    - floor(1.5 * sqrt(AGI))
    NOTE: 0이 나올 수 있다. 0 나눗셈 방지는 스케줄러가 담당한다.
    """
    return int(math.floor(SPEED_SCALER * math.sqrt(max(0, int(agility)))))


def compute_derived_stats(*, strength: int, agility: int, intelligence: int) -> DerivedStats:
    return DerivedStats(
        max_hp=compute_max_hp(strength),
        evasion=compute_evasion(agility),
        accuracy=compute_accuracy(intelligence),
        cooldown_reduction=compute_cooldown_reduction(intelligence),
        speed=compute_speed(agility),
    )
