import random

from duel_engine.core.commands import Skill
from duel_engine.core.models import Enemy, Player, StatBlock
from duel_engine.core.types import CombatantID
from duel_engine.data.catalog import create_player, skills_for
from duel_engine.rules.attack import CombatResolver
from duel_engine.rules.indices.hit import compute_hit_chance

from conftest import FixedRoll, make_enemy


def _fixture_pair():
    """
    명중 80 (INT 6 -> 75 + floor(2.2*sqrt6)=80) vs 회피 10 (AGI 36 -> floor(1.8*6)=10)
    """
    attacker = Player(
        cid=CombatantID("P1"),
        name="Hero",
        stats=StatBlock.of(20, 20, 6),
        skills=skills_for("WARRIOR"),
        profession="WARRIOR",
    )
    defender = make_enemy(stats=(20, 36, 20))
    return attacker, defender


def test_hit_chance_is_clamped_for_extreme_inputs():
    """
    TITLE: 명중률은 극단값에서도 항상 [5, 95]
    SETUP:
      - accuracy/evasion을 -1000..1000 범위에서 격자 탐색
    EXPECTED:
      - 모든 결과가 5..95
      - 경계 안에서는 accuracy - evasion 그대로
    """
    for acc in range(-1000, 1001, 125):
        for eva in range(-1000, 1001, 125):
            c = compute_hit_chance(acc, eva)
            assert 5 <= c <= 95

    assert compute_hit_chance(80, 10) == 70
    assert compute_hit_chance(200, 0) == 95
    assert compute_hit_chance(0, 200) == 5


def test_fixture_accuracy_80_vs_evasion_10_hits_on_70_misses_on_71():
    """
    TITLE: 명중 80 / 회피 10 -> 명중률 70. roll 70이면 명중, 71이면 빗나감
    SETUP:
      - INT 6 공격자(명중 80), AGI 36 방어자(회피 10)
      - randint를 고정하는 rng(FixedRoll) 주입
    EXPECTED:
      - hit_chance == 70
      - roll 70: hit, damage = 8 + 20 = 28, 방어자 hp 120 -> 92
      - roll 71: miss, damage 0, hp 변화 없음
    """
    attacker, defender = _fixture_pair()
    assert attacker.stats.accuracy == 80
    assert defender.stats.evasion == 10

    cr = CombatResolver()
    assert cr.hit_chance(attacker, defender) == 70

    strike = attacker.skills[0]
    out = cr.attack(attacker, defender, strike, rng=FixedRoll(70))
    print(out)
    assert out.success and out.hit
    assert out.roll == 70 and out.hit_chance == 70
    assert out.damage == 28
    assert defender.stats.hp == 92
    assert out.message == "Hero used Strike and dealt 28 damage to Dummy!"

    out = cr.attack(attacker, defender, strike, rng=FixedRoll(71))
    print(out)
    assert out.success and not out.hit
    assert out.damage == 0
    assert defender.stats.hp == 92
    assert out.message == "Hero used Strike but missed Dummy!"


def test_seeded_rolls_match_hit_rule():
    """
    TITLE: 시드 고정 rng로 여러 번 공격했을 때 hit 여부가 항상 roll <= 70 규칙과 일치
    SETUP:
      - 같은 시드의 rng 두 개: 하나는 resolver에, 하나는 기대값 계산용
    EXPECTED:
      - 각 공격의 roll이 기대 rng의 randint(1,100)과 같고
      - hit == (roll <= 70)
    """
    attacker, defender = _fixture_pair()
    cr = CombatResolver(rng=random.Random(777))
    mirror = random.Random(777)

    hits = 0
    for _ in range(50):
        defender.stats.full_heal()
        out = cr.basic_attack(attacker, defender)
        expected_roll = mirror.randint(1, 100)
        assert out.roll == expected_roll
        assert out.hit == (expected_roll <= 70)
        hits += int(out.hit)
    print(f"hits={hits}/50")


def test_cooldown_consumed_on_hit_and_miss():
    """
    TITLE: 쿨다운은 명중/빗나감과 무관하게 '시도'에 소비된다
    STEPS:
      1) Slash를 roll 100(확정 빗나감)으로 사용
      2) 같은 턴에 다시 사용
    EXPECTED:
      - 1) success=True, hit=False, 쿨다운 2턴 등록
      - 2) COOLDOWN 거절, 상태 변경 없음
    """
    attacker, defender = _fixture_pair()
    cr = CombatResolver()
    slash = attacker.skills[1]

    out = cr.attack(attacker, defender, slash, rng=FixedRoll(100))
    assert out.success and not out.hit
    assert attacker.cooldowns.remaining(slash) == 2

    hp_before = defender.stats.hp
    out = cr.attack(attacker, defender, slash, rng=FixedRoll(1))
    assert not out.success
    assert out.reason == "COOLDOWN"
    assert out.roll is None
    assert defender.stats.hp == hp_before
    assert attacker.cooldowns.remaining(slash) == 2


def test_wrong_profession_is_rejected_without_mutation():
    """
    TITLE: 직업이 맞지 않는 스킬은 WRONG_PROFESSION으로 거절되고 쿨다운도 등록되지 않는다
    """
    p = create_player("Hero", "WARRIOR")
    e = make_enemy()
    fireball = skills_for("MAGE")[1]

    out = CombatResolver().attack(p, e, fireball, rng=FixedRoll(1))
    assert not out.success
    assert out.reason == "WRONG_PROFESSION"
    assert e.stats.hp == e.stats.max_hp
    assert p.cooldowns.is_ready(fireball)


def test_invalid_inputs_and_dead_target():
    """
    TITLE: 누락 입력 / 이미 쓰러진 대상 / 범위 밖 인덱스는 INVALID (예외 없음)
    """
    p = create_player("Hero", "WARRIOR")
    e = make_enemy()
    cr = CombatResolver()

    assert cr.attack(None, e, p.skills[0]).reason == "INVALID"
    assert cr.attack(p, None, p.skills[0]).reason == "INVALID"
    assert cr.attack(p, e, None).reason == "INVALID"
    assert cr.basic_attack(p, None).reason == "INVALID"

    bad = cr.attack_with_index(p, e, p.skills, 7)
    assert bad.reason == "INVALID"
    assert bad.message == "Invalid skill index"

    e.stats.take_damage(999)
    out = cr.attack(p, e, p.skills[0], rng=FixedRoll(1))
    assert not out.success and out.reason == "INVALID"
    assert p.cooldowns.is_ready(p.skills[0])

    basic = cr.basic_attack(p, e, rng=FixedRoll(1))
    assert basic.reason == "INVALID"
    assert basic.message == "Dummy is already defeated"
    assert basic.skill_name == "Basic Attack"


def test_basic_attack_uses_strength_and_no_cooldown():
    """
    TITLE: 기본 공격 데미지 = STR, 쿨다운 없음
    """
    p = create_player("Hero", "WARRIOR")
    e = make_enemy()
    out = CombatResolver().basic_attack(p, e, rng=FixedRoll(1))
    assert out.hit and out.damage == 25
    assert out.skill_name == "Basic Attack"
    assert e.stats.hp == 95
    assert not p.cooldowns.has_active()


def test_overkill_floors_hp_at_zero():
    """
    TITLE: 오버킬 피해여도 hp는 0에서 멈춘다
    """
    p = create_player("Hero", "WARRIOR")
    e = make_enemy()
    e.stats.hp = 10
    out = CombatResolver().attack(p, e, p.skills[2], rng=FixedRoll(1))
    assert out.hit and out.damage == 55
    assert e.stats.hp == 0
    assert e.is_dead


def test_winner_and_simultaneous_death_tie_break():
    """
    TITLE: 승자 판정과 동시 사망 규칙
    SETUP:
      - 양쪽 생존 / 한쪽 사망 / 양쪽 사망 케이스
    EXPECTED:
      - 양쪽 생존: ONGOING
      - 한쪽만 사망: 살아남은 쪽
      - 양쪽 사망: 마지막으로 행동한 쪽 승리(방어자 패배), 기록 없으면 ENEMY
    """
    cr = CombatResolver()
    p = create_player("Hero", "WARRIOR")
    e = make_enemy()

    assert cr.winner(p, e) == "ONGOING"
    assert not cr.is_combat_over(p, e)

    e.stats.hp = 0
    assert cr.winner(p, e) == "PLAYER"
    assert cr.is_combat_over(p, e)

    e.stats.full_heal()
    p.stats.hp = 0
    assert cr.winner(p, e) == "ENEMY"

    e.stats.hp = 0
    assert cr.winner(p, e, last_actor="PLAYER") == "PLAYER"
    assert cr.winner(p, e, last_actor="ENEMY") == "ENEMY"
    assert cr.winner(p, e) == "ENEMY"


def test_prepare_battle_resets_cooldowns_and_heals():
    p = create_player("Hero", "WARRIOR")
    p.cooldowns.apply(p.skills[2])
    p.stats.take_damage(50)

    CombatResolver().prepare_battle(p)
    assert p.stats.hp == p.stats.max_hp
    assert all(p.cooldowns.is_ready(s) for s in p.skills)


def test_preview_damage():
    p = create_player("Hero", "WARRIOR")
    cr = CombatResolver()
    assert cr.preview_damage(p, p.skills[1]) == 42
    assert cr.preview_damage(p, None) == 25


def test_enemy_custom_skill_on_player():
    """
    TITLE: 직업 제한 없는 스킬을 적이 사용 (CDR 0 -> 쿨다운 그대로)
    """
    e = Enemy(
        cid=CombatantID("E9"),
        name="Brute",
        stats=StatBlock.of(30, 20, 20),
        skills=(Skill("Smash", base_damage=12, base_cooldown=2),),
        archetype="DEFAULT",
    )
    p = create_player("Hero", "WARRIOR")
    out = CombatResolver().attack(e, p, e.skills[0], rng=FixedRoll(50))
    assert out.hit and out.damage == 42
    assert p.stats.hp == 135 - 42
    assert e.cooldowns.remaining(e.skills[0]) == 2
