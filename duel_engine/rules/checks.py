from __future__ import annotations
import random
from dataclasses import dataclass
from typing import Sequence, TypeVar


# ==============================
# ⚠ 판정(추첨)은 여기서만 ⚠
# ==============================
# 모든 추첨은 호출자가 넘겨준 rng(random.Random)로만 한다.
# 프로세스 전역 random 모듈 상태는 쓰지 않는다(재현 가능한 테스트를 위해).

T = TypeVar("T")


@dataclass(frozen=True)
class HitResult:
    hit: bool
    roll: int     # 1..100
    chance: int   # 5..95


def roll_percent(rng: random.Random) -> int:
    """
    1..100 균등 정수.
    """
    return rng.randint(1, 100)


def roll_hit(*, chance: int, rng: random.Random) -> HitResult:
    """
    명중 판정

    규칙:
      - roll ~ UniformInt[1, 100]
      - roll <= chance -> HIT
      - 그 외           -> MISS
    """
    if not 0 <= chance <= 100:
        raise ValueError("chance must be within 0..100")
    roll = roll_percent(rng)
    return HitResult(hit=roll <= chance, roll=roll, chance=int(chance))


def weighted_choice(options: Sequence[T], weights: Sequence[float], *, rng: random.Random) -> T:
    """
    가중치 추첨 (훈련 스탯 선택 등)

    규칙:
      - roll ~ Uniform[0, sum(weights))
      - 누적 가중치를 처음 넘는 항목을 고른다.

    주의:
      - weights는 0 이상이어야 하고 합이 0이면 설계 오류라 예외.
    """
    if len(options) != len(weights) or not options:
        raise ValueError("options/weights must be non-empty and the same length")
    if any(w < 0 for w in weights):
        raise ValueError("weights must be >= 0")
    total = float(sum(weights))
    if total <= 0:
        raise ValueError("sum(weights) must be > 0")

    roll = rng.random() * total
    acc = 0.0
    for opt, w in zip(options, weights):
        acc += w
        if roll < acc:
            return opt
    return options[-1]
