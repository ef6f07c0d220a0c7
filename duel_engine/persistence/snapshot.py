from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Union

from duel_engine.core.models import Combatant, Enemy, Player, StatBlock
from duel_engine.core.types import PROFESSIONS, CombatantID
from duel_engine.data.catalog import skills_for

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

PathLike = Union[str, Path]


def dump_combatant(c: Combatant) -> Dict[str, Any]:
    """
    전투원 1명의 StatBlock + CooldownTracker를 JSON 호환 dict로.
    파생 스탯은 저장하지 않는다(불러올 때 1차 스탯에서 다시 계산).
    """
    s, a, i = c.stats.primaries()
    out: Dict[str, Any] = {
        "version": FORMAT_VERSION,
        "cid": str(c.cid),
        "name": c.name,
        "side": c.side,
        "stats": {"strength": s, "agility": a, "intelligence": i, "hp": c.stats.hp},
        "cooldowns": c.cooldowns.snapshot(),
    }
    if isinstance(c, Player):
        out["profession"] = c.profession
    elif isinstance(c, Enemy):
        out["archetype"] = c.archetype
    return out


def _int_field(d: Mapping[str, Any], key: str) -> int:
    v = d.get(key)
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValueError(f"stats.{key} must be an int (got {v!r})")
    return v


def _read_stats(payload: Mapping[str, Any]) -> StatBlock:
    if payload.get("version") != FORMAT_VERSION:
        raise ValueError(f"Unsupported snapshot version: {payload.get('version')!r}")
    raw = payload.get("stats")
    if not isinstance(raw, Mapping):
        raise ValueError("Snapshot is missing 'stats'")
    hp = raw.get("hp")
    if hp is not None and (isinstance(hp, bool) or not isinstance(hp, int)):
        raise ValueError(f"stats.hp must be an int (got {hp!r})")
    # hp는 StatBlock이 max_hp로 클램프한다
    return StatBlock.of(
        _int_field(raw, "strength"),
        _int_field(raw, "agility"),
        _int_field(raw, "intelligence"),
        hp=hp,
    )


def _read_cooldowns(payload: Mapping[str, Any]) -> Dict[str, int]:
    raw = payload.get("cooldowns", {})
    if not isinstance(raw, Mapping):
        raise ValueError("'cooldowns' must be a mapping")
    out: Dict[str, int] = {}
    for k, v in raw.items():
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError(f"cooldown {k!r} must be an int (got {v!r})")
        out[str(k)] = v
    return out


def load_combatant_state(c: Combatant, payload: Mapping[str, Any]) -> Combatant:
    """
    기존 전투원에 저장된 스탯/쿨다운을 덮어쓴다. 스킬 목록과 태그는 건드리지 않는다.
    payload 전체를 먼저 검증하고, 실패하면 c는 그대로다.
    """
    stats = _read_stats(payload)
    cooldowns = _read_cooldowns(payload)
    c.stats = stats
    c.cooldowns.restore(cooldowns)
    return c


def load_player(payload: Mapping[str, Any]) -> Player:
    """
    저장된 플레이어를 새로 만든다. 스킬은 직업 카탈로그에서 다시 붙인다.
    """
    profession = payload.get("profession")
    if profession not in PROFESSIONS:
        raise ValueError(f"Unknown profession: {profession!r}")
    name = payload.get("name")
    if not isinstance(name, str):
        raise ValueError("Snapshot is missing 'name'")

    player = Player(
        cid=CombatantID(str(payload.get("cid", "P1"))),
        name=name,
        stats=_read_stats(payload),
        skills=skills_for(profession),
        profession=profession,
    )
    player.cooldowns.restore(_read_cooldowns(payload))
    return player


def save_json(path: PathLike, c: Combatant) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(dump_combatant(c), ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("saved %s -> %s", c.name, p)
    return p


def load_json(path: PathLike) -> Dict[str, Any]:
    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Corrupt snapshot file: {p} ({e})") from e
    if not isinstance(data, dict):
        raise ValueError(f"Snapshot root must be an object: {p}")
    return data
