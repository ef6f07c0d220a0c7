from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Optional, Sequence

from duel_engine.core.commands import BASIC_ATTACK_NAME, Skill
from duel_engine.core.models import Combatant, Enemy, Player
from duel_engine.core.types import RejectReason, Side, Winner
from duel_engine.rules.checks import roll_hit
from duel_engine.rules.indices.hit import MAX_HIT_CHANCE, MIN_HIT_CHANCE, compute_hit_chance
from duel_engine.rules.skills import SkillResolver

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"


@dataclass(frozen=True)
class CombatOutcome:
    """
    공격 1회의 결과. CombatResolver가 돌려주는 유일한 값 타입.
    - 거절된 행동도 예외가 아니라 success=False + reason으로 표현한다.
    - message는 사람이 읽기 위한 로그 문자열
    """
    success: bool
    hit: bool
    damage: int
    actor: str
    target: str
    skill_name: str
    message: str
    reason: Optional[RejectReason] = None
    roll: Optional[int] = None
    hit_chance: Optional[int] = None

    def __str__(self) -> str:
        return self.message


def reject_outcome(
    reason: RejectReason,
    message: str,
    *,
    actor: Optional[Combatant] = None,
    target: Optional[Combatant] = None,
    skill_name: str = UNKNOWN,
) -> CombatOutcome:
    return CombatOutcome(
        success=False,
        hit=False,
        damage=0,
        actor=actor.name if actor is not None else UNKNOWN,
        target=target.name if target is not None else UNKNOWN,
        skill_name=skill_name,
        message=message,
        reason=reason,
    )


class CombatResolver:
    """
    공격 1회 오케스트레이션.

    흐름:
      1) 입력 검증(누락/이미 쓰러진 대상) -> INVALID, 상태 변경 없음
      2) 사용 가능 검증(쿨다운/직업) -> COOLDOWN | WRONG_PROFESSION, 상태 변경 없음
      3) 명중률 = clamp(ACC - EVA, 5, 95)
      4) roll ~ [1, 100], roll <= 명중률 이면 HIT
      5) HIT면 데미지 적용(0 바닥), MISS면 0
      6) 명중/빗나감과 무관하게 쿨다운 등록 (쿨다운은 '시도'의 비용)
      7) CombatOutcome 반환
    """

    def __init__(
        self,
        skills: SkillResolver | None = None,
        *,
        rng: random.Random | None = None,
        min_hit_chance: int = MIN_HIT_CHANCE,
        max_hit_chance: int = MAX_HIT_CHANCE,
    ) -> None:
        self.skills = skills or SkillResolver()
        self.rng = rng or random.Random()
        self.min_hit_chance = int(min_hit_chance)
        self.max_hit_chance = int(max_hit_chance)

    # ----------------- attacks -----------------

    def attack(
        self,
        actor: Optional[Combatant],
        target: Optional[Combatant],
        skill: Optional[Skill],
        *,
        rng: random.Random | None = None,
    ) -> CombatOutcome:
        if actor is None or target is None or skill is None:
            return reject_outcome(
                "INVALID", "Invalid combat action", actor=actor, target=target,
                skill_name=skill.name if skill is not None else UNKNOWN,
            )

        if target.is_dead:
            return reject_outcome(
                "INVALID", f"{target.name} is already defeated", actor=actor, target=target, skill_name=skill.name
            )

        if not self.skills.can_use(actor, skill):
            if not self.skills.matches_profession(actor, skill):
                reason: RejectReason = "WRONG_PROFESSION"
                why = "Wrong profession"
            else:
                reason = "COOLDOWN"
                why = "Skill on cooldown"
            return reject_outcome(
                reason, f"{actor.name} cannot use {skill.name} ({why})", actor=actor, target=target, skill_name=skill.name
            )

        damage_on_hit = self.skills.calculate_damage(actor, skill)
        out = self._resolve_hit(actor, target, skill.name, damage_on_hit, rng=rng)

        # 명중 여부와 무관하게 쿨다운 소비
        turns = actor.cooldowns.apply(skill, actor.stats.cooldown_reduction)
        logger.debug("cooldown set: %s %s=%d", actor.name, skill.skill_id, turns)
        return out

    def attack_with_index(
        self,
        actor: Optional[Combatant],
        target: Optional[Combatant],
        skills: Sequence[Skill],
        index: Optional[int],
        *,
        rng: random.Random | None = None,
    ) -> CombatOutcome:
        skill = self.skills.skill_at(skills, index)
        if skill is None:
            return reject_outcome("INVALID", "Invalid skill index", actor=actor, target=target)
        return self.attack(actor, target, skill, rng=rng)

    def basic_attack(
        self,
        actor: Optional[Combatant],
        target: Optional[Combatant],
        *,
        rng: random.Random | None = None,
    ) -> CombatOutcome:
        """
        기본 공격:
          - 스킬 없음, 쿨다운 없음
          - 데미지 = STR
          - 명중률 공식은 스킬 공격과 동일
        """
        if actor is None or target is None:
            return reject_outcome(
                "INVALID", "Invalid combat action", actor=actor, target=target, skill_name=BASIC_ATTACK_NAME
            )
        if target.is_dead:
            return reject_outcome(
                "INVALID", f"{target.name} is already defeated", actor=actor, target=target, skill_name=BASIC_ATTACK_NAME
            )

        return self._resolve_hit(
            actor, target, BASIC_ATTACK_NAME, self.skills.basic_attack_damage(actor), rng=rng
        )

    def _resolve_hit(
        self,
        actor: Combatant,
        target: Combatant,
        skill_name: str,
        damage_on_hit: int,
        *,
        rng: random.Random | None,
    ) -> CombatOutcome:
        chance = self.hit_chance(actor, target)
        hr = roll_hit(chance=chance, rng=rng or self.rng)

        if hr.hit:
            dealt = target.stats.take_damage(damage_on_hit)
            # 표시용 damage는 계산값(오버킬 포함), 실제 감소량은 hp로 확인
            damage = int(damage_on_hit)
            message = f"{actor.name} used {skill_name} and dealt {damage} damage to {target.name}!"
            logger.debug("hit: %s -> %s roll=%d chance=%d dmg=%d (hp -%d)",
                         actor.name, target.name, hr.roll, chance, damage, dealt)
        else:
            damage = 0
            message = f"{actor.name} used {skill_name} but missed {target.name}!"
            logger.debug("miss: %s -> %s roll=%d chance=%d", actor.name, target.name, hr.roll, chance)

        return CombatOutcome(
            success=True,
            hit=hr.hit,
            damage=damage,
            actor=actor.name,
            target=target.name,
            skill_name=skill_name,
            message=message,
            roll=hr.roll,
            hit_chance=chance,
        )

    # ----------------- queries -----------------

    def hit_chance(self, actor: Optional[Combatant], target: Optional[Combatant]) -> int:
        if actor is None or target is None:
            return 0
        return compute_hit_chance(
            actor.stats.accuracy,
            target.stats.evasion,
            lo=self.min_hit_chance,
            hi=self.max_hit_chance,
        )

    def preview_damage(self, actor: Optional[Combatant], skill: Optional[Skill]) -> int:
        if skill is None:
            return self.skills.basic_attack_damage(actor)
        return self.skills.calculate_damage(actor, skill)

    # ----------------- battle lifecycle -----------------

    def prepare_battle(self, *combatants: Combatant) -> None:
        """
        전투 시작 전 1회: 쿨다운 초기화 + 풀피. 전투 중간에는 부르지 않는다.
        """
        for c in combatants:
            c.cooldowns.reset()
            c.stats.full_heal()

    def is_combat_over(self, player: Optional[Player], enemy: Optional[Enemy]) -> bool:
        return player is None or enemy is None or player.is_dead or enemy.is_dead

    def winner(
        self,
        player: Optional[Player],
        enemy: Optional[Enemy],
        *,
        last_actor: Optional[Side] = None,
    ) -> Winner:
        """
        승자 판정
        - 한쪽만 쓰러졌으면 살아남은 쪽
        - 둘 다 살아 있으면 ONGOING
        - 둘 다 쓰러졌으면(동시 사망) 마지막으로 행동한 쪽이 이긴다 (방어자가 진다).
          last_actor가 없으면 플레이어가 진다.
        """
        player_dead = player is None or player.is_dead
        enemy_dead = enemy is None or enemy.is_dead

        if enemy_dead and not player_dead:
            return "PLAYER"
        if player_dead and not enemy_dead:
            return "ENEMY"
        if not player_dead and not enemy_dead:
            return "ONGOING"
        return last_actor if last_actor is not None else "ENEMY"
