from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

TargetKind = Literal["hero", "creature"]

# Attacker id used when a hero swings its equipped weapon.
HERO_ATTACKER = "hero"


@dataclass(frozen=True)
class TargetRef:
    kind: TargetKind
    player_id: str
    instance_id: str | None = None

    @staticmethod
    def hero(player_id: str) -> "TargetRef":
        return TargetRef(kind="hero", player_id=player_id, instance_id=None)

    @staticmethod
    def creature(player_id: str, instance_id: str) -> "TargetRef":
        return TargetRef(kind="creature", player_id=player_id, instance_id=instance_id)

    def is_face(self) -> bool:
        return self.kind == "hero"

    def __str__(self) -> str:
        if self.kind == "hero":
            return f"{self.player_id}:face"
        return f"{self.player_id}:{self.instance_id}"


@dataclass(frozen=True)
class PlayCardAction:
    player_id: str
    card_id: str
    target: TargetRef | None = None
    position: int | None = None


@dataclass(frozen=True)
class AttackAction:
    player_id: str
    attacker_id: str
    target: TargetRef


@dataclass(frozen=True)
class EndTurnAction:
    player_id: str


@dataclass(frozen=True)
class ConcedeAction:
    player_id: str


@dataclass(frozen=True)
class MulliganAction:
    player_id: str
    card_ids: tuple[str, ...] = ()


Action = PlayCardAction | AttackAction | EndTurnAction | ConcedeAction | MulliganAction


def describe_action(action: Action) -> str:
    if isinstance(action, PlayCardAction):
        suffix = f" -> {action.target}" if action.target is not None else ""
        return f"play {action.card_id}{suffix}"
    if isinstance(action, AttackAction):
        return f"attack {action.attacker_id} -> {action.target}"
    if isinstance(action, EndTurnAction):
        return "end turn"
    if isinstance(action, ConcedeAction):
        return "concede"
    if isinstance(action, MulliganAction):
        return f"mulligan {', '.join(action.card_ids) or 'nothing'}"
    return "unknown"
