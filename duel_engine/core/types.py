from __future__ import annotations
from typing import Literal, NewType

CombatantID = NewType("CombatantID", str)
SkillID = NewType("SkillID", str)

Side = Literal["PLAYER", "ENEMY"]
Winner = Literal["PLAYER", "ENEMY", "ONGOING"]

Profession = Literal["WARRIOR", "MAGE", "ROGUE"]
Archetype = Literal["AGGRESSIVE", "STRATEGIC", "ADAPTIVE", "DEFAULT"]
Specialization = Literal["STRENGTH", "AGILITY", "INTELLIGENCE"]

SkillStatus = Literal["READY", "ON_COOLDOWN", "WRONG_PROFESSION", "INVALID"]
RejectReason = Literal["INVALID", "COOLDOWN", "WRONG_PROFESSION"]

PROFESSIONS: tuple[Profession, ...] = ("WARRIOR", "MAGE", "ROGUE")
ARCHETYPES: tuple[Archetype, ...] = ("AGGRESSIVE", "STRATEGIC", "ADAPTIVE", "DEFAULT")
