from __future__ import annotations

from .actions import Action, AttackAction, ConcedeAction, EndTurnAction, MulliganAction, PlayCardAction, TargetRef
from .creature import CreatureInstance
from .match import GameEvent, MatchState
from .player import PlayerState


def _target_to_dict(t: TargetRef | None) -> dict[str, object] | None:
    if t is None:
        return None
    return {"kind": t.kind, "player_id": t.player_id, "instance_id": t.instance_id}


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, PlayCardAction):
        return {
            "type": "play",
            "player_id": a.player_id,
            "card_id": a.card_id,
            "target": _target_to_dict(a.target),
            "position": a.position,
        }
    if isinstance(a, AttackAction):
        return {
            "type": "attack",
            "player_id": a.player_id,
            "attacker_id": a.attacker_id,
            "target": _target_to_dict(a.target),
        }
    if isinstance(a, EndTurnAction):
        return {"type": "end_turn", "player_id": a.player_id}
    if isinstance(a, ConcedeAction):
        return {"type": "concede", "player_id": a.player_id}
    if isinstance(a, MulliganAction):
        return {"type": "mulligan", "player_id": a.player_id, "card_ids": list(a.card_ids)}
    return {"type": "unknown"}


def event_to_dict(e: GameEvent, include_timestamp: bool = True) -> dict[str, object]:
    out: dict[str, object] = {
        "sequence": e.sequence,
        "type": e.type,
        "player_id": e.player_id,
        "payload": dict(e.payload),
    }
    if include_timestamp:
        out["timestamp"] = e.timestamp
    return out


def _creature_to_dict(c: CreatureInstance) -> dict[str, object]:
    return {
        "instance_id": c.instance_id,
        "card_id": c.card_id,
        "attack": c.attack,
        "health": c.health,
        "max_health": c.max_health,
        "keywords": sorted(c.keywords),
        "state": c.display_state,
        "silenced": c.silenced,
    }


def _player_to_dict(p: PlayerState) -> dict[str, object]:
    return {
        "player_id": p.player_id,
        "name": p.name,
        "hero_class": p.hero_class,
        "health": p.health,
        "max_mana": p.max_mana,
        "mana": p.mana,
        "fatigue": p.fatigue,
        "draw_pile": [c.id for c in p.draw_pile],
        "hand": [c.id for c in p.hand],
        "battlefield": [_creature_to_dict(c) for c in p.battlefield],
        "weapon": (
            {"card_id": p.weapon.card.id, "attack": p.weapon.attack, "durability": p.weapon.durability}
            if p.weapon is not None
            else None
        ),
        "turns_taken": p.turns_taken,
    }


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state.

    Event timestamps are wall-clock and left out, so two runs with the same
    seed and actions produce equal snapshots.
    """
    return {
        "game_id": state.game_id,
        "seed": state.seed,
        "turn": state.turn,
        "phase": state.phase,
        "current_player_index": state.current_player_index,
        "winner_id": state.winner_id,
        "win_reason": state.win_reason,
        "players": [_player_to_dict(p) for p in state.players],
        "history": [event_to_dict(e, include_timestamp=False) for e in state.history],
        "action_log": [action_to_dict(a) for a in state.action_log],
    }
