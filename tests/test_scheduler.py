import pytest

from duel_engine.core.types import CombatantID
from duel_engine.initiative.action_value import BASE_AV, TurnScheduler, reset_av_for

P = CombatantID("P1")
E = CombatantID("E1")


def _sched(p_speed: int, e_speed: int) -> TurnScheduler:
    s = TurnScheduler()
    s.initialize([(P, p_speed), (E, e_speed)])
    return s


def test_initial_av_and_faster_acts_first():
    """
    TITLE: 초기 AV = 10000/speed, AV가 낮은 쪽이 먼저 행동
    SETUP:
      - P speed 12, E speed 6
    EXPECTED:
      - AV(P) = 833.33.., AV(E) = 1666.66..
      - current_turn == P
    """
    s = _sched(12, 6)
    assert s.action_value(P) == pytest.approx(BASE_AV / 12)
    assert s.action_value(E) == pytest.approx(BASE_AV / 6)
    assert s.current_turn() == P


def test_advance_subtracts_elapsed_and_resets_actor():
    """
    TITLE: advance()는 행동자 AV만큼 전원을 감소시키고 행동자만 리셋한다
    STEPS:
      1) P(12) vs E(6) 에서 advance 1회
    EXPECTED:
      - 돌려준 cid == P
      - AV(P) = 10000/12 로 리셋
      - AV(E) = 1666.67 - 833.33 = 833.33
      - E의 readiness = 0.5
    """
    s = _sched(12, 6)
    assert s.advance() == P
    assert s.action_value(P) == pytest.approx(BASE_AV / 12)
    assert s.action_value(E) == pytest.approx(BASE_AV / 6 - BASE_AV / 12)
    assert s.readiness(E) == pytest.approx(0.5)
    assert s.readiness(P) == pytest.approx(0.0)


def test_exact_tie_breaks_toward_first_registered():
    """
    TITLE: AV 완전 동률이면 먼저 등록된 쪽(플레이어)이 행동하고, 이후 교대로 행동
    EXPECTED:
      - 같은 속도에서 턴 순서 P, E, P, E, ...
    """
    s = _sched(6, 6)
    order = [s.advance() for _ in range(6)]
    assert order == [P, E, P, E, P, E]


def test_zero_speed_is_treated_as_one():
    s = _sched(0, 6)
    assert s.speed(P) == 1
    assert s.action_value(P) == pytest.approx(BASE_AV)
    assert reset_av_for(0) == BASE_AV


def test_preview_is_pure_and_repeatable():
    """
    TITLE: preview(n)는 순수 함수: 두 번 불러도 같은 결과, 라이브 AV는 그대로
    SETUP:
      - P(7) vs E(5), advance 3회로 임의 상태를 만든다
    EXPECTED:
      - preview(10) 두 번 결과가 동일
      - preview 전후 AV/current_turn 동일
      - preview의 첫 항목 == 다음 advance() 결과
    """
    s = _sched(7, 5)
    for _ in range(3):
        s.advance()

    before = s.snapshot()
    first = s.preview(10)
    second = s.preview(10)
    print("\n".join(str(e) for e in first))

    assert first == second
    assert s.snapshot() == before
    assert [e.turn_number for e in first] == list(range(1, 11))
    assert first[0].cid == s.current_turn()
    assert s.advance() == first[0].cid
    assert s.preview(0) == []


def test_doubling_speed_doubles_turn_share():
    """
    TITLE: 속도를 2배로 하면 긴 구간에서 행동 횟수도 약 2배
    SETUP:
      - P speed 12, E speed 6 (AGI 64 vs 16)
      - 300턴 시뮬레이션
    EXPECTED:
      - P/E 행동 비율이 1.9 ~ 2.1
    """
    s = _sched(12, 6)
    dist = s.turn_distribution(300)
    print(dist)
    assert dist[P] + dist[E] == 300
    assert 1.9 <= dist[P] / dist[E] <= 2.1


def test_update_speed_preserves_readiness():
    """
    TITLE: 전투 중 속도 변화는 준비도 비율을 유지한 채 AV를 비례 재조정한다
    SETUP:
      - P(12) vs E(6), advance 1회 -> E readiness 0.5
    STEPS:
      - E speed 6 -> 12
    EXPECTED:
      - E readiness 그대로 0.5
      - E AV = (10000/12) * 0.5
    """
    s = _sched(12, 6)
    s.advance()
    s.update_speed(E, 12)
    assert s.speed(E) == 12
    assert s.readiness(E) == pytest.approx(0.5)
    assert s.action_value(E) == pytest.approx(BASE_AV / 12 * 0.5)
    # 모르는 cid는 무시
    s.update_speed(CombatantID("X"), 3)


def test_turns_until_and_speed_advantage():
    s = _sched(12, 6)
    assert s.turns_until(P) == 0
    assert s.turns_until(E) == 2
    assert s.speed_advantage(P, E) == pytest.approx(100.0)
    assert s.speed_advantage(E, P) == pytest.approx(-50.0)


def test_initialize_validation_and_end_battle():
    """
    TITLE: 중복 cid/빈 입력은 ValueError, end_battle 후에는 비활성
    """
    s = TurnScheduler()
    with pytest.raises(ValueError):
        s.initialize([(P, 5), (P, 6)])
    with pytest.raises(ValueError):
        s.initialize([])

    s.initialize([(P, 5), (E, 6)])
    assert s.active
    s.end_battle()
    assert not s.active
    assert s.current_turn() is None
    assert s.advance() is None
    assert s.preview(3) == []
    assert s.format_turn_order(3) == "No battle active"


def test_format_turn_order_highlights():
    s = _sched(12, 6)
    text = s.format_turn_order(3, highlight=P)
    lines = text.splitlines()
    assert lines[0] == "=== Turn Order ==="
    assert lines[1] == "► 1. P1"
    # P(12)가 두 번 행동한 뒤 E(6) 차례 (AV 동률은 먼저 등록된 P)
    assert lines[2] == "► 2. P1"
    assert lines[3] == "▼ 3. E1"
    assert s.turn_order_list(3) == ["1. P1", "2. P1", "3. E1"]
