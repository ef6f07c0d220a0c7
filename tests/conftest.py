from __future__ import annotations

import random
from datetime import datetime
from pathlib import Path

import pytest

from duel_engine.core.commands import Skill
from duel_engine.core.models import Enemy, Player, StatBlock
from duel_engine.core.types import CombatantID
from duel_engine.data.catalog import create_player, spawn_enemy

RESULT_DIR = Path("test-result")


class FixedRoll(random.Random):
    """
    randint가 항상 같은 값을 돌려주는 rng. 명중 경계값 테스트용.
    """

    def __init__(self, roll: int) -> None:
        super().__init__(0)
        self.roll = roll

    def randint(self, a: int, b: int) -> int:
        return self.roll


# ------------------------------
# fixtures
# ------------------------------
@pytest.fixture
def rng() -> random.Random:
    return random.Random(12345)


@pytest.fixture
def warrior() -> Player:
    return create_player("Hero", "WARRIOR")


@pytest.fixture
def minotaur() -> Enemy:
    return spawn_enemy("minotaur")


def make_enemy(
    archetype="DEFAULT",
    *,
    stats=(20, 20, 20),
    skills=None,
    name="Dummy",
    cid="E1",
) -> Enemy:
    if skills is None:
        skills = (
            Skill("Jab", base_damage=5, base_cooldown=0),
            Skill("Hook", base_damage=15, base_cooldown=2),
            Skill("Haymaker", base_damage=30, base_cooldown=3),
        )
    return Enemy(
        cid=CombatantID(cid),
        name=name,
        stats=StatBlock.of(*stats),
        skills=skills,
        archetype=archetype,
    )


# ------------------------------
# per-test report (test-result/*.txt)
# ------------------------------
def _timestamp() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def pytest_sessionstart(session: pytest.Session) -> None:
    RESULT_DIR.mkdir(parents=True, exist_ok=True)


def _get_test_doc(item: pytest.Item) -> str:
    fn = getattr(item, "function", None)
    doc = getattr(fn, "__doc__", None) if fn else None
    if not doc:
        return "(설명 없음. 테스트에 TITLE/SETUP/EXPECTED docstring을 달 것)"
    return doc.strip()


def _get_captured_output(rep: pytest.TestReport) -> str:
    # 캡처된 stdout/stderr/log는 rep.sections에 ("Captured stdout call", "...") 형태로 들어온다
    chunks = []
    for name, content in getattr(rep, "sections", []):
        if name.startswith("Captured"):
            chunks.append(f"[{name}]\n{content}")
    return "\n".join(chunks).strip()


@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo):
    outcome = yield
    rep: pytest.TestReport = outcome.get_result()
    if rep.when != "call":
        return

    test_file = Path(str(item.fspath)).stem if getattr(item, "fspath", None) else "unknown"
    out_path = RESULT_DIR / f"{_timestamp()}_{test_file}.txt"

    status = "PASS" if rep.passed else "FAIL" if rep.failed else "SKIP"
    details = f"\n[TRACEBACK]\n{rep.longrepr}" if rep.failed and rep.longrepr else ""
    captured = _get_captured_output(rep)
    if captured:
        captured = f"\n[CAPTURED OUTPUT]\n{captured}\n"

    block = (
        "============================================================\n"
        f"[{status}] {rep.nodeid} ({rep.duration:.3f}s)\n"
        "------------------------------------------------------------\n"
        "[EXPERIMENT]\n"
        f"{_get_test_doc(item)}\n"
        f"{captured}\n"
        f"{details}\n"
    )

    with out_path.open("a", encoding="utf-8") as f:
        f.write(block)
