from __future__ import annotations


MIN_HIT_CHANCE: int = 5   # 밸런싱 시 여기만 바꾸면 됨
MAX_HIT_CHANCE: int = 95


def compute_hit_chance(
    accuracy: int,
    evasion: int,
    *,
    lo: int = MIN_HIT_CHANCE,
    hi: int = MAX_HIT_CHANCE,
) -> int:
    """
    명중률(정수 %)
    - clamp(accuracy - evasion, 5, 95)
    - 극단적인 명중/회피 값이 와도 항상 [5, 95] 범위
    """
    raw = int(accuracy) - int(evasion)
    if raw < lo:
        return int(lo)
    if raw > hi:
        return int(hi)
    return raw
