from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional, Tuple

from duel_engine.core.types import CombatantID

logger = logging.getLogger(__name__)


# ==============================
# ⚠ 턴 속도 밸런스는 여기서만 ⚠
# ==============================
BASE_AV: float = 10000.0
MIN_SPEED: int = 1


def reset_av_for(speed: int, *, base_av: float = BASE_AV) -> float:
    """
    행동 직후(또는 전투 시작 시) AV
    - base / max(speed, 1)   (속도 0은 1로 취급)
    """
    return float(base_av) / max(MIN_SPEED, int(speed))


@dataclass(frozen=True)
class TurnEntry:
    """
    전투원 1명의 AV 상태. 불변 값으로 두고 바뀔 때마다 교체한다.
    - order: 등록 순서. 완전 동률일 때 작은 쪽이 먼저 행동한다.
    """
    cid: CombatantID
    speed: int
    action_value: float
    order: int


@dataclass(frozen=True)
class TurnOrderEntry:
    cid: CombatantID
    action_value: float   # 그 턴이 올 때의 AV (경과 시간)
    turn_number: int      # 1부터

    def __str__(self) -> str:
        return f"Turn {self.turn_number}: {self.cid} (AV: {self.action_value:.2f})"


def _pick_actor(state: Dict[CombatantID, TurnEntry]) -> TurnEntry:
    # AV 오름차순, 동률이면 등록 순서
    return min(state.values(), key=lambda e: (e.action_value, e.order))


def _step(state: Dict[CombatantID, TurnEntry], *, base_av: float) -> Tuple[Dict[CombatantID, TurnEntry], TurnEntry]:
    """
    시간 1스텝 진행(순수 함수).
    - 행동자 AV만큼 전원의 AV를 감소(0 바닥)
    - 행동자 AV만 base/speed로 리셋
    """
    actor = _pick_actor(state)
    elapsed = actor.action_value
    nxt: Dict[CombatantID, TurnEntry] = {}
    for cid, e in state.items():
        if cid == actor.cid:
            nxt[cid] = replace(e, action_value=reset_av_for(e.speed, base_av=base_av))
        else:
            nxt[cid] = replace(e, action_value=max(0.0, e.action_value - elapsed))
    return nxt, actor


class TurnScheduler:
    """
    Action Value(AV) 기반 턴 큐.

    규칙:
      - 초기 AV = 10000 / max(speed, 1). AV가 낮을수록 먼저 행동한다.
      - current_turn(): AV가 가장 낮은 전투원. 완전 동률이면 먼저 등록된 쪽.
        (엔진은 플레이어를 먼저 등록하므로 동률이면 플레이어가 먼저)
      - advance(): 행동 1회가 끝날 때마다 정확히 1번.
        데미지/쿨다운 적용 후, 다음 current_turn() 질의 전에 호출한다.
      - preview(n): 사본으로만 시뮬레이션. 라이브 상태는 절대 바꾸지 않는다.
      - update_speed(): 준비도(readiness) 비율을 유지한 채 AV를 비례 재조정한다.
    """

    def __init__(self, *, base_av: float = BASE_AV) -> None:
        self.base_av = float(base_av)
        self._state: Dict[CombatantID, TurnEntry] = {}

    # ----------------- lifecycle -----------------

    def initialize(self, speeds: Iterable[Tuple[CombatantID, int]]) -> None:
        state: Dict[CombatantID, TurnEntry] = {}
        for order, (cid, speed) in enumerate(speeds):
            if cid in state:
                raise ValueError(f"Duplicate cid: {cid}")
            spd = max(MIN_SPEED, int(speed))
            state[cid] = TurnEntry(
                cid=cid, speed=spd, action_value=reset_av_for(spd, base_av=self.base_av), order=order
            )
        if not state:
            raise ValueError("TurnScheduler needs at least one combatant")
        self._state = state
        logger.debug("scheduler initialized: %s", self.format_status())

    def end_battle(self) -> None:
        self._state = {}

    @property
    def active(self) -> bool:
        return bool(self._state)

    # ----------------- turn determination -----------------

    def current_turn(self) -> Optional[CombatantID]:
        if not self._state:
            return None
        return _pick_actor(self._state).cid

    def advance(self) -> Optional[CombatantID]:
        """
        현재 행동자의 턴을 소비하고 시간을 흘린다. 행동한 cid를 돌려준다.
        """
        if not self._state:
            return None
        self._state, actor = _step(self._state, base_av=self.base_av)
        logger.debug("advance: %s acted after %.2f", actor.cid, actor.action_value)
        return actor.cid

    # ----------------- preview -----------------

    def preview(self, turns: int) -> List[TurnOrderEntry]:
        if not self._state or turns <= 0:
            return []
        sim = dict(self._state)
        out: List[TurnOrderEntry] = []
        for i in range(int(turns)):
            sim, actor = _step(sim, base_av=self.base_av)
            out.append(TurnOrderEntry(cid=actor.cid, action_value=actor.action_value, turn_number=i + 1))
        return out

    def turn_order_list(self, turns: int) -> List[str]:
        return [f"{e.turn_number}. {e.cid}" for e in self.preview(turns)]

    def format_turn_order(self, turns: int, *, highlight: Optional[CombatantID] = None) -> str:
        if not self._state:
            return "No battle active"
        lines = ["=== Turn Order ==="]
        for e in self.preview(turns):
            icon = "►" if highlight is not None and e.cid == highlight else "▼"
            lines.append(f"{icon} {e.turn_number}. {e.cid}")
        return "\n".join(lines)

    # ----------------- AV queries -----------------

    def action_value(self, cid: CombatantID) -> float:
        e = self._state.get(cid)
        return e.action_value if e is not None else 0.0

    def speed(self, cid: CombatantID) -> int:
        e = self._state.get(cid)
        return e.speed if e is not None else 0

    def reset_value(self, cid: CombatantID) -> float:
        e = self._state.get(cid)
        if e is None:
            return 0.0
        return reset_av_for(e.speed, base_av=self.base_av)

    def readiness(self, cid: CombatantID) -> float:
        """
        행동 게이지(0.0 ~ 1.0)
        - 1 - currentAV / resetAV
        - 0.0 = 방금 행동함, 1.0 = 바로 행동 가능
        """
        e = self._state.get(cid)
        if e is None:
            return 0.0
        return 1.0 - min(1.0, e.action_value / self.reset_value(cid))

    # ----------------- speed changes -----------------

    def update_speed(self, cid: CombatantID, new_speed: int) -> None:
        """
        전투 중 속도 변화.
        준비도 비율(currentAV / resetAV)을 유지한 채 새 resetAV에 맞춰 AV를 재조정한다.
        """
        e = self._state.get(cid)
        if e is None:
            return
        ratio = e.action_value / reset_av_for(e.speed, base_av=self.base_av)
        spd = max(MIN_SPEED, int(new_speed))
        self._state[cid] = replace(e, speed=spd, action_value=reset_av_for(spd, base_av=self.base_av) * ratio)
        logger.debug("speed update: %s %d -> %d (ratio=%.3f)", cid, e.speed, spd, ratio)

    # ----------------- statistics -----------------

    def turn_distribution(self, turns: int) -> Dict[CombatantID, int]:
        """
        앞으로 turns 턴 동안 각자 몇 번 행동하는지(밸런스 분석용).
        """
        counts: Dict[CombatantID, int] = {cid: 0 for cid in self._state}
        for e in self.preview(turns):
            counts[e.cid] += 1
        return counts

    def turns_until(self, cid: CombatantID, *, horizon: int = 10) -> int:
        """
        cid가 행동하기 전까지 남은 다른 턴 수. 0 = 다음 행동자.
        horizon 안에 오지 않으면 horizon을 돌려준다.
        """
        for i, e in enumerate(self.preview(horizon)):
            if e.cid == cid:
                return i
        return horizon

    def speed_advantage(self, a: CombatantID, b: CombatantID) -> float:
        """
        a의 b 대비 속도 우위(%). 양수면 a가 빠르다.
        """
        sa, sb = self.speed(a), self.speed(b)
        if sb <= 0:
            return 0.0
        return (sa - sb) / sb * 100.0

    def format_status(self) -> str:
        if not self._state:
            return "No battle active"
        parts = [f"{e.cid} [AV: {e.action_value:.2f}, SPD: {e.speed}]" for e in self._state.values()]
        return "; ".join(parts)

    # ----------------- snapshot -----------------

    def snapshot(self) -> Dict[CombatantID, TurnEntry]:
        return dict(self._state)
