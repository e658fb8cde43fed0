from __future__ import annotations

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Literal

from .actions import HERO_ATTACKER, Action, AttackAction, EndTurnAction, PlayCardAction
from .creature import CreatureInstance
from .match import (
    MatchState,
    creatures_that_can_attack,
    lookup_target,
    snapshot_match,
    step,
    validate_action,
    valid_attack_targets,
    valid_targets_for_card,
)
from .types import (
    BuffEffect,
    Card,
    CreatureCard,
    GiveKeywordEffect,
    HealEffect,
    SpellCard,
    WeaponCard,
    abilities_for,
    requires_target,
)

logger = logging.getLogger(__name__)

Strategy = Literal["aggressive", "defensive", "tempo", "control"]
MoveKind = Literal["play_card", "attack", "end_turn"]

# Card plays scoring within this distance of the best move count as "close".
CLOSE_MARGIN = 3.0
LETHAL_VALUE = 100.0


@dataclass(frozen=True)
class DifficultyProfile:
    name: str
    thinking_time: float  # seconds
    strategy: Strategy
    mistake_chance: float
    look_ahead_depth: int
    considers_opponent_hand: bool = False
    uses_card_synergies: bool = False


DIFFICULTIES: dict[str, DifficultyProfile] = {
    "easy": DifficultyProfile("easy", 0.5, "aggressive", 0.30, 1),
    "medium": DifficultyProfile("medium", 1.0, "tempo", 0.15, 2, uses_card_synergies=True),
    "hard": DifficultyProfile("hard", 1.5, "control", 0.05, 3, True, True),
    "expert": DifficultyProfile("expert", 2.0, "control", 0.0, 4, True, True),
}


def get_difficulty(name: str) -> DifficultyProfile:
    profile = DIFFICULTIES.get(name.lower())
    if profile is None:
        logger.warning("Unknown AI difficulty %r, using medium", name)
        return DIFFICULTIES["medium"]
    return profile


@dataclass(frozen=True)
class ScoredMove:
    action: Action
    kind: MoveKind
    value: float
    description: str
    card_cost: int = 0
    is_lethal: bool = False
    creature_combat: bool = False


@dataclass(frozen=True)
class AIDecision:
    action: Action
    reasoning: str
    value: float
    was_mistake: bool
    candidates: int


def evaluate_creature_play(card: CreatureCard) -> float:
    value = float(card.attack + card.health - card.cost)
    if "taunt" in card.keywords:
        value += 2
    if "charge" in card.keywords:
        value += 1
    return value


def evaluate_spell_play(card: SpellCard, targeted: bool) -> float:
    value = float(10 - card.cost)
    if targeted:
        value += 2
    return value


def evaluate_weapon_play(card: WeaponCard) -> float:
    return float(card.attack + card.durability - card.cost)


def evaluate_face_attack(damage: int, enemy_health: int) -> float:
    if damage >= enemy_health:
        return LETHAL_VALUE
    return float(damage * 2)


def evaluate_creature_attack(attack: int, health: int, defender: CreatureInstance) -> float:
    value = 0.0
    if attack >= defender.health and not defender.has("divine_shield"):
        value += defender.health + 5
    if defender.attack >= health:
        value -= attack + health
    return value


def _is_beneficial(card: Card) -> bool:
    effects = [e for a in abilities_for(card, "battlecry") for e in a.effects]
    return bool(effects) and all(isinstance(e, (HealEffect, BuffEffect, GiveKeywordEffect)) for e in effects)


def _attack_moves(
    state: MatchState, index: int, attacker_id: str, name: str, attack: int, health: int
) -> list[ScoredMove]:
    ps = state.players[index]
    enemy = state.players[state.opponent(index)]
    moves: list[ScoredMove] = []
    for target in valid_attack_targets(state, index):
        action = AttackAction(player_id=ps.player_id, attacker_id=attacker_id, target=target)
        if target.is_face():
            value = evaluate_face_attack(attack, enemy.health)
            moves.append(
                ScoredMove(
                    action,
                    "attack",
                    value,
                    f"Attack face with {name}",
                    is_lethal=value >= LETHAL_VALUE,
                )
            )
            continue
        defender = lookup_target(state, target)
        assert isinstance(defender, CreatureInstance)
        moves.append(
            ScoredMove(
                action,
                "attack",
                evaluate_creature_attack(attack, health, defender),
                f"Attack {defender.name} with {name}",
                creature_combat=attacker_id != HERO_ATTACKER,
            )
        )
    return moves


def generate_moves(state: MatchState, index: int) -> list[ScoredMove]:
    """Every candidate intent for the player, scored, in generation order.

    End turn is always included with value 0.
    """
    ps = state.players[index]
    moves: list[ScoredMove] = []

    seen: set[str] = set()
    for card in ps.hand:
        if card.id in seen or card.cost > ps.mana:
            continue
        seen.add(card.id)
        if isinstance(card, CreatureCard):
            if ps.is_battlefield_full():
                continue
            action = PlayCardAction(player_id=ps.player_id, card_id=card.id)
            moves.append(ScoredMove(action, "play_card", evaluate_creature_play(card), f"Play {card.name}", card.cost))
        elif isinstance(card, WeaponCard):
            action = PlayCardAction(player_id=ps.player_id, card_id=card.id)
            moves.append(ScoredMove(action, "play_card", evaluate_weapon_play(card), f"Equip {card.name}", card.cost))
        elif requires_target(card):
            targets = valid_targets_for_card(state, index, card)
            if _is_beneficial(card):
                # Equal scores keep generation order, so offer friendly targets first.
                targets.sort(key=lambda t: t.player_id != ps.player_id)
            for target in targets:
                action = PlayCardAction(player_id=ps.player_id, card_id=card.id, target=target)
                moves.append(
                    ScoredMove(
                        action,
                        "play_card",
                        evaluate_spell_play(card, targeted=True),
                        f"Cast {card.name} on {target}",
                        card.cost,
                    )
                )
        else:
            action = PlayCardAction(player_id=ps.player_id, card_id=card.id)
            moves.append(
                ScoredMove(action, "play_card", evaluate_spell_play(card, targeted=False), f"Cast {card.name}", card.cost)
            )

    for creature in creatures_that_can_attack(state, index):
        moves.extend(_attack_moves(state, index, creature.instance_id, creature.name, creature.attack, creature.health))

    if ps.can_hero_attack():
        assert ps.weapon is not None
        moves.extend(_attack_moves(state, index, HERO_ATTACKER, ps.weapon.card.name, ps.weapon.attack, ps.health))

    moves.append(ScoredMove(EndTurnAction(player_id=ps.player_id), "end_turn", 0.0, "End turn"))
    return moves


def rank_moves(moves: Sequence[ScoredMove]) -> list[ScoredMove]:
    # Stable: equal scores keep generation order.
    return sorted(moves, key=lambda m: m.value, reverse=True)


def choose_by_strategy(ranked: Sequence[ScoredMove], strategy: Strategy) -> ScoredMove:
    """Pick a move from a best-first list according to a strategy."""
    top = ranked[0]
    if strategy == "aggressive":
        for m in ranked:
            if isinstance(m.action, AttackAction) and m.action.target.is_face():
                return m
    elif strategy == "tempo":
        close = [m for m in ranked if m.kind == "play_card" and m.value >= top.value - CLOSE_MARGIN]
        if close:
            return max(close, key=lambda m: m.card_cost)
    elif strategy == "control":
        close = [m for m in ranked if m.kind == "play_card" and m.value >= top.value - CLOSE_MARGIN]
        if close:
            return close[0]
    elif strategy == "defensive":
        for m in ranked:
            if m.is_lethal:
                return m
        for m in ranked:
            if m.creature_combat:
                return m
    return top


@dataclass
class AIPlayer:
    """Computer opponent.

    Decisions are pure reads of the match; the only randomness is mistake
    injection, drawn from the injected `rng`.
    """

    profile: DifficultyProfile
    rng: random.Random
    decision_history: list[AIDecision] = field(default_factory=list)
    total_thinking_time: float = 0.0

    @staticmethod
    def create(difficulty: str = "medium", seed: int | None = None) -> "AIPlayer":
        return AIPlayer(profile=get_difficulty(difficulty), rng=random.Random(seed))

    def decide(self, state: MatchState, index: int | None = None) -> AIDecision:
        idx = state.current_player_index if index is None else index
        moves = generate_moves(state, idx)
        ranked = rank_moves(moves)
        logger.debug("AI (%s) considering %d candidate moves", self.profile.name, len(ranked))

        choice = choose_by_strategy(ranked, self.profile.strategy)
        was_mistake = False
        if len(ranked) > 1 and self.profile.mistake_chance > 0 and self.rng.random() < self.profile.mistake_chance:
            rank = min(len(ranked), self.rng.randint(2, 4))
            choice = ranked[rank - 1]
            was_mistake = True

        reasoning = f"{choice.description} (value {choice.value:g}, {self.profile.strategy})"
        if was_mistake:
            reasoning += " (AI mistake)"
        decision = AIDecision(
            action=choice.action,
            reasoning=reasoning,
            value=choice.value,
            was_mistake=was_mistake,
            candidates=len(ranked),
        )
        self.decision_history.append(decision)
        logger.info("AI (%s) decided: %s", self.profile.name, reasoning)
        return decision

    async def decide_async(
        self,
        state: MatchState,
        index: int | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> AIDecision:
        """Decide on a snapshot in a worker thread, then wait out the thinking time.

        The returned intent must be re-validated against the live match.
        """
        started = time.monotonic()
        snap = snapshot_match(state)
        decision = await asyncio.to_thread(self.decide, snap, index)
        elapsed = time.monotonic() - started
        remaining = self.profile.thinking_time - elapsed
        if remaining > 0:
            await sleep(remaining)
        self.total_thinking_time += max(elapsed, self.profile.thinking_time)
        return decision

    def choose_mulligan(self, hand: Sequence[Card]) -> tuple[str, ...]:
        replace = [c.id for c in hand if c.cost > 4 or (c.cost == 0 and not isinstance(c, CreatureCard))]
        return tuple(replace)

    def statistics(self) -> dict[str, object]:
        total = len(self.decision_history)
        mistakes = sum(1 for d in self.decision_history if d.was_mistake)
        return {
            "difficulty": self.profile.name,
            "strategy": self.profile.strategy,
            "total_decisions": total,
            "mistakes": mistakes,
            "average_value": sum(d.value for d in self.decision_history) / total if total else 0.0,
            "average_thinking_time": self.total_thinking_time / total if total else 0.0,
        }


def ai_take_turn(state: MatchState, index: int, ai: AIPlayer, max_actions: int = 60) -> list[AIDecision]:
    """Drive the AI player's whole turn synchronously.

    Every intent is checked with `validate_action` before being applied; an
    illegal one ends the turn instead.
    """
    decisions: list[AIDecision] = []
    end_turn = EndTurnAction(player_id=state.players[index].player_id)
    for _ in range(max_actions):
        if state.is_game_over() or state.phase != "main" or state.current_player_index != index:
            return decisions
        decision = ai.decide(state, index)
        decisions.append(decision)
        if not validate_action(state, decision.action).ok:
            logger.warning("AI produced an illegal intent, ending turn: %s", decision.reasoning)
            step(state, end_turn)
            return decisions
        step(state, decision.action)
        if isinstance(decision.action, EndTurnAction):
            return decisions

    if not state.is_game_over() and state.phase == "main" and state.current_player_index == index:
        logger.warning("AI hit the action cap of %d, ending turn", max_actions)
        step(state, end_turn)
    return decisions

