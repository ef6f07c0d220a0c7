# duel_engine/engine/engine.py

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from duel_engine.ai.decision import AIDecision, DecisionEngine
from duel_engine.core.models import BattleState, Enemy, Player
from duel_engine.core.types import Side, Winner
from duel_engine.initiative.action_value import BASE_AV, MIN_SPEED, TurnOrderEntry, TurnScheduler
from duel_engine.rules.attack import CombatOutcome, CombatResolver, reject_outcome
from duel_engine.rules.indices.hit import MAX_HIT_CHANCE, MIN_HIT_CHANCE
from duel_engine.rules.skills import SkillResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TurnResult:
    """
    take_turn() 1회의 결과.
    - decision은 적 턴일 때만 채워진다.
    - advanced=False 이면 행동이 거절되어 턴이 넘어가지 않은 것
    """
    side: Side
    outcome: CombatOutcome
    decision: Optional[AIDecision] = None
    advanced: bool = False
    battle_over: bool = False


@dataclass(frozen=True)
class BattleConfig:
    min_hit_chance: int = MIN_HIT_CHANCE
    max_hit_chance: int = MAX_HIT_CHANCE
    base_av: float = BASE_AV
    preview_turns: int = 5
    seed: Optional[int] = None


class BattleEngine:
    """
    1대1 전투 오케스트레이션.

    턴 1회 순서(동기):
      0) 스탯 변화로 바뀐 속도를 스케줄러에 반영 (sync_speed)
      1) 쿨다운 tick (양쪽 모두)
      2) 현재 행동자의 행동 1회 해결 (플레이어 입력 또는 AI 결정)
      3) 데미지/쿨다운 반영
      4) 스케줄러 advance
      5) 전투 종료 확인

    턴 큐(AV)는 BattleState마다 따로 가진다. 엔진 하나로 여러 전투를 번갈아 돌려도 서로 섞이지 않는다.
    """

    def __init__(self, config: BattleConfig | None = None, *, rng: random.Random | None = None) -> None:
        self.config = config or BattleConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.skills = SkillResolver()
        self.combat = CombatResolver(
            self.skills,
            rng=self.rng,
            min_hit_chance=self.config.min_hit_chance,
            max_hit_chance=self.config.max_hit_chance,
        )
        self.ai = DecisionEngine(self.skills)

    # ----------------- lifecycle -----------------

    def start(self, player: Player, enemy: Enemy) -> BattleState:
        if player.cid == enemy.cid:
            raise ValueError(f"Duplicate cid: {player.cid}")

        self.combat.prepare_battle(player, enemy)
        # 플레이어를 먼저 등록한다 -> AV 동률이면 플레이어가 먼저 행동
        scheduler = TurnScheduler(base_av=self.config.base_av)
        scheduler.initialize([
            (player.cid, player.stats.speed),
            (enemy.cid, enemy.stats.speed),
        ])

        bs = BattleState(player=player, enemy=enemy, scheduler=scheduler)
        bs.events.append(
            f"BATTLE_START: {player.name}(HP {player.stats.hp}, SPD {player.stats.speed}) "
            f"vs {enemy.name}(HP {enemy.stats.hp}, SPD {enemy.stats.speed})"
        )
        logger.info("battle start: %s vs %s", player.name, enemy.name)
        return bs

    def end(self, bs: BattleState) -> None:
        if bs.ended:
            return
        bs.ended = True
        bs.scheduler.end_battle()
        bs.events.append(f"BATTLE_END: winner={self.winner(bs)}")
        logger.info("battle end: winner=%s after %d turns", self.winner(bs), bs.turn - 1)

    def is_battle_over(self, bs: BattleState) -> bool:
        return bs.ended or self.combat.is_combat_over(bs.player, bs.enemy)

    def winner(self, bs: BattleState) -> Winner:
        return self.combat.winner(bs.player, bs.enemy, last_actor=bs.last_actor)

    # ----------------- turn steps -----------------

    def current_side(self, bs: BattleState) -> Optional[Side]:
        return bs.side_of(bs.scheduler.current_turn())

    def sync_speed(self, bs: BattleState, side: Side) -> bool:
        """
        전투원의 현재 스탯 속도를 턴 큐에 반영한다.
        - 준비도 비율은 유지하고 AV만 새 resetAV에 맞춰 재조정
        - 속도가 그대로면 아무것도 하지 않고 False
        """
        c = bs.combatant(side)
        old = bs.scheduler.speed(c.cid)
        new = c.stats.speed
        if not bs.scheduler.active or old == max(MIN_SPEED, new):
            return False
        bs.scheduler.update_speed(c.cid, new)
        bs.events.append(f"SPEED_CHANGE: {c.name} {old} -> {bs.scheduler.speed(c.cid)}")
        return True

    def tick_turn_start(self, bs: BattleState) -> None:
        """
        턴 시작 시 양쪽 쿨다운 1 감소. 같은 턴에 두 번 부르면 두 번째는 무시.
        """
        if bs.turn_started:
            return
        bs.player.cooldowns.tick()
        bs.enemy.cooldowns.tick()
        bs.turn_started = True
        bs.events.append(f"TURN_START: turn={bs.turn} actor={self.current_side(bs)}")

    def resolve_player_action(self, bs: BattleState, skill_index: Optional[int] = None) -> CombatOutcome:
        """
        skill_index=None 이면 기본 공격.
        """
        if skill_index is None:
            out = self.combat.basic_attack(bs.player, bs.enemy)
        else:
            out = self.combat.attack_with_index(bs.player, bs.enemy, bs.player.skills, skill_index)
        self._record(bs, "PLAYER", out)
        return out

    def resolve_opponent_action(self, bs: BattleState) -> Tuple[AIDecision, CombatOutcome]:
        decision = self.ai.choose(bs.enemy, bs.player)
        bs.events.append(f"AI_DECISION: {bs.enemy.name} -> {decision.skill_name} [{decision.tag}] {decision.reasoning}")

        if decision.is_basic_attack:
            out = self.combat.basic_attack(bs.enemy, bs.player)
        else:
            out = self.combat.attack_with_index(bs.enemy, bs.player, bs.enemy.skills, decision.skill_index)
        self._record(bs, "ENEMY", out)
        return decision, out

    def take_turn(self, bs: BattleState, player_choice: Optional[int] = None) -> TurnResult:
        """
        현재 행동자의 턴 1회를 끝까지 진행한다.
        - player_choice는 플레이어 턴일 때만 쓰인다 (None = 기본 공격).
        - 거절된 행동이면 advance 하지 않는다. 같은 턴으로 다시 호출하면 된다.
        """
        if not self.is_battle_over(bs):
            self.sync_speed(bs, "PLAYER")
            self.sync_speed(bs, "ENEMY")

        side = self.current_side(bs)
        if side is None or self.is_battle_over(bs):
            out = reject_outcome("INVALID", "Battle is not active", actor=bs.player, target=bs.enemy)
            return TurnResult(side=side or "PLAYER", outcome=out, battle_over=self.is_battle_over(bs))

        self.tick_turn_start(bs)

        decision: Optional[AIDecision] = None
        if side == "PLAYER":
            out = self.resolve_player_action(bs, player_choice)
        else:
            decision, out = self.resolve_opponent_action(bs)

        if not out.success:
            return TurnResult(side=side, outcome=out, decision=decision)

        bs.scheduler.advance()
        bs.turn += 1
        bs.turn_started = False

        over = self.is_battle_over(bs)
        if over:
            self.end(bs)
        return TurnResult(side=side, outcome=out, decision=decision, advanced=True, battle_over=over)

    def run(self, bs: BattleState, *, max_turns: int = 500) -> Winner:
        """
        양쪽 모두 AI로 끝까지 진행 (시뮬레이션/밸런스 확인용).
        플레이어 쪽은 같은 DecisionEngine 기본 규칙(가장 높은 준비된 스킬)을 쓴다.
        """
        for _ in range(max_turns):
            if self.is_battle_over(bs):
                break
            choice: Optional[int] = None
            if self.current_side(bs) == "PLAYER":
                choice = self._autopilot_choice(bs)
            self.take_turn(bs, choice)
        if self.is_battle_over(bs):
            self.end(bs)
        return self.winner(bs)

    def _autopilot_choice(self, bs: BattleState) -> Optional[int]:
        for i in range(len(bs.player.skills) - 1, -1, -1):
            if self.skills.can_use(bs.player, bs.player.skills[i]):
                return i
        return None

    def _record(self, bs: BattleState, side: Side, out: CombatOutcome) -> None:
        if out.success:
            bs.last_actor = side
            bs.events.append(
                f"ACTION: {out.message} (roll={out.roll}, chance={out.hit_chance}%)"
            )
        else:
            bs.events.append(f"REJECTED[{out.reason}]: {out.message}")
        logger.debug("turn %d %s: %s", bs.turn, side, out.message)

    # ----------------- display queries (non-mutating) -----------------

    def hp(self, bs: BattleState, side: Side) -> Tuple[int, int]:
        c = bs.combatant(side)
        return c.stats.hp, c.stats.max_hp

    def readiness(self, bs: BattleState, side: Side) -> int:
        """
        행동 게이지(%) 0..100
        """
        return int(round(bs.scheduler.readiness(bs.combatant(side).cid) * 100))

    def turn_order(self, bs: BattleState, turns: Optional[int] = None) -> List[TurnOrderEntry]:
        return bs.scheduler.preview(self.config.preview_turns if turns is None else turns)

    def format_turn_order(self, bs: BattleState, turns: Optional[int] = None) -> str:
        n = self.config.preview_turns if turns is None else turns
        return bs.scheduler.format_turn_order(n, highlight=bs.player.cid)

    def skill_statuses(self, bs: BattleState, side: Side = "PLAYER") -> Dict[str, str]:
        c = bs.combatant(side)
        return {s.name: self.skills.status_text(c, s) for s in c.skills}

    def opponent_intent(self, bs: BattleState) -> str:
        return self.ai.formatted_intent(bs.enemy, bs.player)

    def threat_level(self, bs: BattleState) -> int:
        return self.ai.threat_level(bs.enemy, bs.player)

    def hit_chance(self, bs: BattleState, side: Side) -> int:
        return self.combat.hit_chance(bs.combatant(side), bs.opponent_of(side))
