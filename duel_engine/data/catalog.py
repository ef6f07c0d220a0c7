from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from duel_engine.core.commands import Skill
from duel_engine.core.models import Enemy, Player, StatBlock
from duel_engine.core.types import Archetype, CombatantID, Profession, Specialization


# ------------------------------
# 플레이어 기본 스탯 / 직업 보너스
# ------------------------------
PLAYER_BASE_STAT: int = 20
PROFESSION_BONUS: int = 5

PROFESSION_SPECIALIZATION: Dict[Profession, Specialization] = {
    "WARRIOR": "STRENGTH",
    "MAGE": "INTELLIGENCE",
    "ROGUE": "AGILITY",
}

PROFESSION_DESCRIPTIONS: Dict[Profession, str] = {
    "WARRIOR": "Balanced fighter with consistent damage and high HP",
    "MAGE": "Powerful spellcaster with devastating burst damage",
    "ROGUE": "Swift assassin with speed advantage and evasion",
}


# ------------------------------
# 직업별 스킬 템플릿 (기본기 / 보조기 / 궁극기)
# 템플릿은 모듈 수명 동안 1개씩만 만들어 공유한다.
# ------------------------------
PROFESSION_SKILLS: Dict[Profession, Tuple[Skill, ...]] = {
    "WARRIOR": (
        Skill("Strike", base_damage=8, base_cooldown=0, allowed_profession="WARRIOR"),
        Skill("Slash", base_damage=17, base_cooldown=2, allowed_profession="WARRIOR"),
        Skill("Berserker Rage", base_damage=30, base_cooldown=3, allowed_profession="WARRIOR"),
    ),
    "MAGE": (
        Skill("Magic Bolt", base_damage=6, base_cooldown=0, allowed_profession="MAGE"),
        Skill("Fireball", base_damage=20, base_cooldown=3, allowed_profession="MAGE"),
        Skill("Meteor Strike", base_damage=42, base_cooldown=5, allowed_profession="MAGE"),
    ),
    "ROGUE": (
        Skill("Quick Stab", base_damage=10, base_cooldown=0, allowed_profession="ROGUE"),
        Skill("Backstab", base_damage=18, base_cooldown=2, allowed_profession="ROGUE"),
        Skill("Assassinate", base_damage=33, base_cooldown=3, allowed_profession="ROGUE"),
    ),
}


@dataclass(frozen=True)
class EnemyTemplate:
    """
    적 정의(읽기 전용). 실제 전투원은 spawn_enemy()로 매번 새 StatBlock을 만들어 쓴다.
    """
    key: str
    name: str
    stats: Tuple[int, int, int]   # (STR, AGI, INT)
    skills: Tuple[Skill, ...]
    archetype: Archetype
    specialization: Specialization


ENEMY_TEMPLATES: Tuple[EnemyTemplate, ...] = (
    EnemyTemplate(
        key="killer_bunny",
        name="Killer Bunny",
        stats=(20, 30, 20),
        skills=(
            Skill("Rapid Bite", base_damage=8, base_cooldown=0),
            Skill("Pounce", base_damage=18, base_cooldown=2),
            Skill("Frenzy", base_damage=28, base_cooldown=3),
        ),
        archetype="AGGRESSIVE",
        specialization="AGILITY",
    ),
    EnemyTemplate(
        key="minotaur",
        name="Minotaur",
        stats=(30, 20, 20),
        skills=(
            Skill("Axe Swing", base_damage=10, base_cooldown=0),
            Skill("Charge", base_damage=20, base_cooldown=2),
            Skill("Earthquake", base_damage=35, base_cooldown=3),
        ),
        archetype="STRATEGIC",
        specialization="STRENGTH",
    ),
    EnemyTemplate(
        key="mindflayer",
        name="Mindflayer",
        stats=(20, 20, 30),
        skills=(
            Skill("Mind Spike", base_damage=7, base_cooldown=0),
            Skill("Psychic Blast", base_damage=19, base_cooldown=3),
            Skill("Mind Shatter", base_damage=40, base_cooldown=5),
        ),
        archetype="ADAPTIVE",
        specialization="INTELLIGENCE",
    ),
)

_BY_KEY: Dict[str, EnemyTemplate] = {t.key: t for t in ENEMY_TEMPLATES}


# ------------------------------
# 조회
# ------------------------------
def skills_for(profession: Profession) -> Tuple[Skill, ...]:
    if profession not in PROFESSION_SKILLS:
        raise ValueError(f"Unknown profession: {profession}")
    return PROFESSION_SKILLS[profession]


def enemy_template(key: str) -> EnemyTemplate:
    """
    key 또는 표시 이름(대소문자 무시)으로 템플릿을 찾는다.
    """
    norm = key.strip().lower()
    if norm in _BY_KEY:
        return _BY_KEY[norm]
    for t in ENEMY_TEMPLATES:
        if t.name.lower() == norm:
            return t
    raise ValueError(f"Unknown enemy: {key}")


def enemy_names() -> List[str]:
    return [t.name for t in ENEMY_TEMPLATES]


# ------------------------------
# 생성
# ------------------------------
def player_stats(profession: Optional[Profession]) -> Tuple[int, int, int]:
    """
    기본 20/20/20 + 직업 특화 스탯 +5
    """
    s = a = i = PLAYER_BASE_STAT
    spec = PROFESSION_SPECIALIZATION.get(profession) if profession else None
    if spec == "STRENGTH":
        s += PROFESSION_BONUS
    elif spec == "AGILITY":
        a += PROFESSION_BONUS
    elif spec == "INTELLIGENCE":
        i += PROFESSION_BONUS
    return s, a, i


def create_player(
    name: str,
    profession: Profession,
    *,
    stats: Optional[Tuple[int, int, int]] = None,
    cid: str = "P1",
) -> Player:
    s, a, i = stats if stats is not None else player_stats(profession)
    return Player(
        cid=CombatantID(cid),
        name=name,
        stats=StatBlock.of(s, a, i),
        skills=skills_for(profession),
        profession=profession,
    )


def spawn_enemy(key: str, *, cid: str = "E1") -> Enemy:
    t = enemy_template(key)
    s, a, i = t.stats
    return Enemy(
        cid=CombatantID(cid),
        name=t.name,
        stats=StatBlock.of(s, a, i),
        skills=t.skills,
        archetype=t.archetype,
        specialization=t.specialization,
    )


def spawn_all_enemies() -> List[Enemy]:
    return [spawn_enemy(t.key, cid=f"E{n}") for n, t in enumerate(ENEMY_TEMPLATES, start=1)]


def copy_enemy(template: Enemy, *, cid: Optional[str] = None) -> Enemy:
    """
    같은 스킬 템플릿을 공유하는 새 인스턴스(스탯/쿨다운은 새로).
    """
    s, a, i = template.stats.primaries()
    return Enemy(
        cid=CombatantID(cid) if cid is not None else template.cid,
        name=template.name,
        stats=StatBlock.of(s, a, i),
        skills=template.skills,
        archetype=template.archetype,
        specialization=template.specialization,
    )
