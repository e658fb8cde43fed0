from __future__ import annotations

import copy
import logging
import random
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Literal

from .actions import (
    HERO_ATTACKER,
    Action,
    AttackAction,
    ConcedeAction,
    EndTurnAction,
    MulliganAction,
    PlayCardAction,
    TargetRef,
    describe_action,
)
from .creature import CreatureInstance
from .deck import Deck, build_draw_pile, validate_deck
from .player import STARTING_HEALTH, DrawResult, PlayerState, Weapon
from .types import (
    Ability,
    BuffEffect,
    Card,
    CardDatabase,
    CreatureCard,
    DamageEffect,
    DestroyEffect,
    DrawEffect,
    Effect,
    FreezeEffect,
    GainManaEffect,
    GiveKeywordEffect,
    HealEffect,
    SilenceEffect,
    SummonEffect,
    TargetKind,
    Trigger,
    WeaponCard,
    abilities_for,
    chosen_target_kinds,
    requires_target,
)

logger = logging.getLogger(__name__)

Phase = Literal["init", "mulligan", "start_turn", "main", "end_turn", "game_over"]
WinReason = Literal["opponent_defeated", "concede"]
EventType = Literal[
    "game_started",
    "card_drawn",
    "card_burned",
    "fatigue_damage",
    "mulligan",
    "turn_started",
    "turn_ended",
    "card_played",
    "creature_summoned",
    "creature_died",
    "attack",
    "damage",
    "heal",
    "weapon_equipped",
    "weapon_destroyed",
    "game_ended",
]
RejectCode = Literal[
    "game_over",
    "unknown_player",
    "wrong_phase",
    "not_your_turn",
    "card_not_in_hand",
    "not_enough_mana",
    "battlefield_full",
    "target_required",
    "invalid_target",
    "attacker_not_found",
    "cannot_attack",
    "already_mulliganed",
    "unknown_action",
]

Character = PlayerState | CreatureInstance


@dataclass(frozen=True)
class MatchConfig:
    starting_health: int = STARTING_HEALTH
    starting_hand: int = 3
    mulligan: bool = False  # when False the match starts the first turn immediately


@dataclass(frozen=True)
class GameEvent:
    type: EventType
    player_id: str
    payload: dict[str, object]
    timestamp: float
    sequence: int


@dataclass
class StepResult:
    ok: bool
    events: list[GameEvent]
    error: str | None = None
    code: RejectCode | None = None


def _reject(code: RejectCode, message: str) -> StepResult:
    return StepResult(ok=False, events=[], error=message, code=code)


@dataclass
class MatchState:
    game_id: str
    cards: CardDatabase
    config: MatchConfig
    seed: int
    rng: random.Random
    players: list[PlayerState]
    turn: int = 0
    current_player_index: int = 0
    phase: Phase = "init"
    winner_id: str | None = None
    win_reason: WinReason | None = None
    history: list[GameEvent] = field(default_factory=list)
    action_log: list[Action] = field(default_factory=list)
    mulligan_done: set[str] = field(default_factory=set)
    next_instance: int = 1

    def opponent(self, index: int) -> int:
        return 1 - index

    def current_player(self) -> PlayerState:
        return self.players[self.current_player_index]

    def opponent_player(self) -> PlayerState:
        return self.players[self.opponent(self.current_player_index)]

    def index_of(self, player_id: str) -> int | None:
        for i, p in enumerate(self.players):
            if p.player_id == player_id:
                return i
        return None

    def player_by_id(self, player_id: str) -> PlayerState | None:
        idx = self.index_of(player_id)
        return self.players[idx] if idx is not None else None

    def is_game_over(self) -> bool:
        return self.phase == "game_over"

    def winner(self) -> PlayerState | None:
        if self.winner_id is None:
            return None
        return self.player_by_id(self.winner_id)


def _emit(state: MatchState, event_type: EventType, player_id: str, **payload: object) -> GameEvent:
    event = GameEvent(
        type=event_type,
        player_id=player_id,
        payload=dict(payload),
        timestamp=time.time(),
        sequence=len(state.history),
    )
    state.history.append(event)
    return event


def _draw(state: MatchState, index: int) -> DrawResult:
    ps = state.players[index]
    result = ps.draw_card()
    if result.outcome == "drawn":
        assert result.card is not None
        _emit(state, "card_drawn", ps.player_id, card_id=result.card.id)
    elif result.outcome == "burned":
        assert result.card is not None
        _emit(state, "card_burned", ps.player_id, card_id=result.card.id)
    else:
        _emit(state, "fatigue_damage", ps.player_id, amount=result.fatigue_damage)
    return result


def _transition(state: MatchState, new_phase: Phase) -> None:
    old_phase = state.phase
    logger.debug("Game %s: transitioning from %s to %s", state.game_id, old_phase, new_phase)
    _cleanup_phase(state, old_phase, new_phase)
    state.phase = new_phase
    _enter_phase(state, new_phase)


def _cleanup_phase(state: MatchState, phase: Phase, next_phase: Phase) -> None:
    if phase == "end_turn":
        state.current_player().end_turn()
        if next_phase == "start_turn":
            state.current_player_index = state.opponent(state.current_player_index)
    elif phase in ("init", "mulligan", "start_turn", "main", "game_over"):
        pass


def _enter_phase(state: MatchState, phase: Phase) -> None:
    if phase == "start_turn":
        _start_turn(state)
    elif phase == "end_turn":
        _run_triggers(state, state.current_player_index, "end_of_turn")
        _resolve_deaths(state)
        _check_game_over(state)
    elif phase == "game_over":
        logger.info("Game %s ended. Winner: %s (%s)", state.game_id, state.winner_id, state.win_reason)
    elif phase == "main":
        logger.debug("Main phase started - waiting for %s", state.current_player().player_id)
    elif phase in ("init", "mulligan"):
        pass


def _start_turn(state: MatchState) -> None:
    state.turn += 1
    index = state.current_player_index
    ps = state.players[index]
    logger.debug("Turn %d started for player %s", state.turn, ps.player_id)
    _emit(state, "turn_started", ps.player_id, turn_number=state.turn)

    ps.increase_max_mana()
    ps.refresh_mana()

    # The very first turn of the game skips the draw.
    if state.turn > 1:
        _draw(state, index)

    ps.start_turn()
    _run_triggers(state, index, "start_of_turn")
    _resolve_deaths(state)

    if _check_game_over(state):
        return
    _transition(state, "main")


def _check_game_over(state: MatchState) -> bool:
    if state.phase == "game_over":
        return True
    # Seat order: if both heroes fall together, the first seat loses.
    for idx, ps in enumerate(state.players):
        if ps.is_dead():
            winner = state.players[state.opponent(idx)]
            _declare_winner(state, winner.player_id, "opponent_defeated")
            return True
    return False


def _declare_winner(state: MatchState, winner_id: str, reason: WinReason) -> None:
    state.winner_id = winner_id
    state.win_reason = reason
    _emit(state, "game_ended", winner_id, winner_id=winner_id, reason=reason)
    _transition(state, "game_over")


def valid_attack_targets(state: MatchState, attacker_index: int) -> list[TargetRef]:
    """Legal attack targets against the attacker's opponent.

    Stealthed creatures cannot be attacked; if any visible Taunt creature is
    alive only Taunt creatures are legal, otherwise every visible creature and
    the enemy hero are.
    """
    defender = state.players[state.opponent(attacker_index)]
    visible = [c for c in defender.battlefield if c.is_alive() and not c.has("stealth")]
    taunts = [c for c in visible if c.has("taunt")]
    if taunts:
        return [TargetRef.creature(defender.player_id, c.instance_id) for c in taunts]
    targets = [TargetRef.creature(defender.player_id, c.instance_id) for c in visible]
    targets.append(TargetRef.hero(defender.player_id))
    return targets


def _targets_for_kind(state: MatchState, index: int, kind: TargetKind) -> list[TargetRef]:
    me = state.players[index]
    enemy = state.players[state.opponent(index)]
    enemy_creatures = [
        TargetRef.creature(enemy.player_id, c.instance_id)
        for c in enemy.battlefield
        if c.is_alive() and not c.has("stealth")
    ]
    friendly_creatures = [TargetRef.creature(me.player_id, c.instance_id) for c in me.battlefield if c.is_alive()]
    if kind == "enemy_creature":
        return enemy_creatures
    if kind == "friendly_creature":
        return friendly_creatures
    if kind == "any_creature":
        return enemy_creatures + friendly_creatures
    if kind == "enemy_character":
        return enemy_creatures + [TargetRef.hero(enemy.player_id)]
    if kind == "friendly_character":
        return friendly_creatures + [TargetRef.hero(me.player_id)]
    if kind == "any_character":
        return enemy_creatures + [TargetRef.hero(enemy.player_id)] + friendly_creatures + [TargetRef.hero(me.player_id)]
    return []


def valid_targets_for_card(state: MatchState, index: int, card: Card) -> list[TargetRef]:
    """All targets the player could pick when playing `card` right now.

    Returns an empty list for cards that take no target.
    """
    out: list[TargetRef] = []
    for kind in chosen_target_kinds(card):
        for t in _targets_for_kind(state, index, kind):
            if t not in out:
                out.append(t)
    return out


def lookup_target(state: MatchState, ref: TargetRef) -> Character | None:
    ps = state.player_by_id(ref.player_id)
    if ps is None:
        return None
    if ref.kind == "hero":
        return ps
    assert ref.instance_id is not None
    return ps.get_creature(ref.instance_id)


def _owner_index(state: MatchState, creature: CreatureInstance) -> int | None:
    for i, ps in enumerate(state.players):
        if any(c is creature for c in ps.battlefield):
            return i
    return None


def _ref_for(state: MatchState, character: Character) -> TargetRef:
    if isinstance(character, PlayerState):
        return TargetRef.hero(character.player_id)
    owner = _owner_index(state, character)
    owner_id = state.players[owner].player_id if owner is not None else ""
    return TargetRef.creature(owner_id, character.instance_id)


def _resolve_targets(
    state: MatchState,
    index: int,
    kind: TargetKind,
    source: CreatureInstance | None,
    chosen: TargetRef | None,
) -> list[Character]:
    me = state.players[index]
    enemy = state.players[state.opponent(index)]
    if kind == "none":
        return []
    if kind == "self":
        return [source] if source is not None else [me]
    if kind == "enemy_hero":
        return [enemy]
    if kind == "friendly_hero":
        return [me]
    if kind == "all_enemy_creatures":
        return [c for c in enemy.battlefield if c.is_alive()]
    if kind == "all_friendly_creatures":
        return [c for c in me.battlefield if c.is_alive()]
    if kind == "all_creatures":
        return [c for c in me.battlefield + enemy.battlefield if c.is_alive()]
    if kind == "random_enemy":
        pool: list[Character] = [enemy]
        pool.extend(c for c in enemy.battlefield if c.is_alive())
        return [state.rng.choice(pool)]
    # Chosen kinds: only the picked target, and only if it fits this effect.
    if chosen is None or chosen not in _targets_for_kind(state, index, kind):
        return []
    found = lookup_target(state, chosen)
    return [found] if found is not None else []


def _deal_damage(
    state: MatchState, target: Character, amount: int, source: CreatureInstance | None
) -> int:
    if amount <= 0:
        return 0
    ref = _ref_for(state, target)
    dealt = target.take_damage(amount)
    _emit(state, "damage", ref.player_id, target=str(ref), amount=dealt)
    if source is not None:
        source.damage_dealt_this_turn += dealt
        if isinstance(target, CreatureInstance) and dealt > 0 and source.has("poisonous"):
            target.destroy()
        if dealt > 0 and source.has("lifesteal"):
            owner = _owner_index(state, source)
            if owner is not None:
                _heal(state, state.players[owner], dealt)
    return dealt


def _heal(state: MatchState, target: Character, amount: int) -> int:
    healed = target.heal(amount)
    if healed > 0:
        ref = _ref_for(state, target)
        _emit(state, "heal", ref.player_id, target=str(ref), amount=healed)
    return healed


def summon_creature(
    state: MatchState, index: int, card: CreatureCard, position: int | None = None
) -> CreatureInstance | None:
    """Put a new instance of `card` onto a player's battlefield.

    Returns None when the battlefield is full.
    """
    ps = state.players[index]
    if ps.is_battlefield_full():
        return None
    instance_id = f"{ps.player_id}-c{state.next_instance}"
    state.next_instance += 1
    inst = CreatureInstance.from_card(card, instance_id)
    added = ps.add_to_battlefield(inst, position)
    assert added
    _emit(
        state,
        "creature_summoned",
        ps.player_id,
        instance_id=inst.instance_id,
        card_id=card.id,
        position=ps.battlefield.index(inst),
    )
    return inst


def _resolve_effect(
    state: MatchState,
    index: int,
    effect: Effect,
    source: CreatureInstance | None,
    chosen: TargetRef | None,
    from_spell: bool,
) -> None:
    me = state.players[index]
    if isinstance(effect, DamageEffect):
        amount = effect.amount + (me.spell_damage_bonus() if from_spell else 0)
        for t in _resolve_targets(state, index, effect.target, source, chosen):
            _deal_damage(state, t, amount, source=None if from_spell else source)
    elif isinstance(effect, HealEffect):
        for t in _resolve_targets(state, index, effect.target, source, chosen):
            _heal(state, t, effect.amount)
    elif isinstance(effect, DrawEffect):
        for _ in range(max(0, effect.count)):
            _draw(state, index)
    elif isinstance(effect, GainManaEffect):
        me.gain_mana(effect.amount)
    elif isinstance(effect, SummonEffect):
        token = state.cards.find(effect.token_card_id)
        if not isinstance(token, CreatureCard):
            logger.warning("Summon effect references non-creature %s", effect.token_card_id)
            return
        for _ in range(max(0, effect.count)):
            if summon_creature(state, index, token) is None:
                break
    elif isinstance(effect, DestroyEffect):
        for t in _resolve_targets(state, index, effect.target, source, chosen):
            if isinstance(t, CreatureInstance):
                t.destroy()
    elif isinstance(effect, SilenceEffect):
        for t in _resolve_targets(state, index, effect.target, source, chosen):
            if isinstance(t, CreatureInstance):
                t.silence()
    elif isinstance(effect, BuffEffect):
        for t in _resolve_targets(state, index, effect.target, source, chosen):
            if isinstance(t, CreatureInstance):
                t.buff(effect.attack_delta, effect.health_delta, effect.duration)
    elif isinstance(effect, GiveKeywordEffect):
        for t in _resolve_targets(state, index, effect.target, source, chosen):
            if isinstance(t, CreatureInstance):
                t.add_keyword(effect.keyword)
    elif isinstance(effect, FreezeEffect):
        for t in _resolve_targets(state, index, effect.target, source, chosen):
            if isinstance(t, CreatureInstance):
                t.freeze()


def _resolve_ability(
    state: MatchState,
    index: int,
    ability: Ability,
    source: CreatureInstance | None,
    chosen: TargetRef | None = None,
    from_spell: bool = False,
) -> None:
    logger.debug("Resolving %s (%s) for %s", ability.id, ability.trigger, state.players[index].player_id)
    for eff in ability.effects:
        _resolve_effect(state, index, eff, source, chosen, from_spell)


def _run_triggers(state: MatchState, index: int, trigger: Trigger) -> None:
    for creature in list(state.players[index].battlefield):
        if not creature.is_alive():
            continue
        for ability in list(creature.abilities):
            if ability.trigger == trigger:
                _resolve_ability(state, index, ability, source=creature)


def _resolve_deaths(state: MatchState) -> None:
    while True:
        dead: list[tuple[int, CreatureInstance]] = []
        for idx, ps in enumerate(state.players):
            for c in list(ps.battlefield):
                if c.is_dead():
                    ps.remove_from_battlefield(c.instance_id)
                    _emit(state, "creature_died", ps.player_id, instance_id=c.instance_id, card_id=c.card_id)
                    dead.append((idx, c))
        if not dead:
            return
        for idx, c in dead:
            for ability in c.abilities:
                if ability.trigger == "deathrattle":
                    _resolve_ability(state, idx, ability, source=c)


def _check_play(state: MatchState, index: int, action: PlayCardAction) -> StepResult | None:
    ps = state.players[index]
    hand_index = ps.find_in_hand(action.card_id)
    if hand_index is None:
        return _reject("card_not_in_hand", f"{action.card_id} is not in your hand.")
    card = ps.hand[hand_index]
    if card.cost > ps.mana:
        return _reject("not_enough_mana", "Not enough mana.")
    if isinstance(card, CreatureCard) and ps.is_battlefield_full():
        return _reject("battlefield_full", "Battlefield is full.")

    needs_target = requires_target(card)
    if needs_target or action.target is not None:
        targets = valid_targets_for_card(state, index, card)
        if needs_target and action.target is None:
            if not targets:
                return _reject("invalid_target", "No valid targets.")
            return _reject("target_required", "Select a target.")
        if action.target not in targets:
            return _reject("invalid_target", "Invalid target.")
    return None


def _check_attack(state: MatchState, index: int, action: AttackAction) -> StepResult | None:
    ps = state.players[index]
    if action.attacker_id == HERO_ATTACKER:
        if not ps.can_hero_attack():
            return _reject("cannot_attack", "Your hero cannot attack.")
    else:
        attacker = ps.get_creature(action.attacker_id)
        if attacker is None:
            return _reject("attacker_not_found", f"No creature {action.attacker_id} on your battlefield.")
        if not attacker.can_attack():
            if attacker.state == "summoned":
                return _reject("cannot_attack", "Summoning sickness.")
            return _reject("cannot_attack", f"{attacker.name} cannot attack.")

    if action.target not in valid_attack_targets(state, index):
        defender = state.players[state.opponent(index)]
        if defender.has_taunt():
            return _reject("invalid_target", "Invalid target (Taunt).")
        return _reject("invalid_target", "Invalid target.")
    return None


def _check_mulligan(state: MatchState, index: int, action: MulliganAction) -> StepResult | None:
    ps = state.players[index]
    if ps.player_id in state.mulligan_done:
        return _reject("already_mulliganed", "Mulligan already submitted.")
    in_hand = Counter(c.id for c in ps.hand)
    for cid, n in Counter(action.card_ids).items():
        if in_hand[cid] < n:
            return _reject("card_not_in_hand", f"{cid} is not in your hand.")
    return None


def _check(state: MatchState, action: Action) -> StepResult | None:
    if state.phase == "game_over":
        return _reject("game_over", "Match already ended.")
    index = state.index_of(action.player_id)
    if index is None:
        return _reject("unknown_player", f"Unknown player {action.player_id}.")

    if isinstance(action, ConcedeAction):
        return None
    if isinstance(action, MulliganAction):
        if state.phase != "mulligan":
            return _reject("wrong_phase", "Not in the mulligan phase.")
        return _check_mulligan(state, index, action)

    if state.phase != "main":
        return _reject("wrong_phase", f"Cannot act during {state.phase}.")
    if index != state.current_player_index:
        return _reject("not_your_turn", "Not your turn.")

    if isinstance(action, PlayCardAction):
        return _check_play(state, index, action)
    if isinstance(action, AttackAction):
        return _check_attack(state, index, action)
    if isinstance(action, EndTurnAction):
        return None
    return _reject("unknown_action", "Unknown action.")


def validate_action(state: MatchState, action: Action) -> StepResult:
    """Run every legality check for `action` without touching the state."""
    rejection = _check(state, action)
    if rejection is not None:
        return rejection
    return StepResult(ok=True, events=[])


def _play_card(state: MatchState, index: int, action: PlayCardAction) -> None:
    ps = state.players[index]
    hand_index = ps.find_in_hand(action.card_id)
    assert hand_index is not None
    card = ps.hand[hand_index]
    paid = ps.spend_mana(card.cost)
    assert paid
    ps.remove_from_hand(hand_index)
    ps.has_played_card_this_turn = True
    _emit(
        state,
        "card_played",
        ps.player_id,
        card_id=card.id,
        cost=card.cost,
        target=str(action.target) if action.target is not None else None,
    )

    if isinstance(card, CreatureCard):
        inst = summon_creature(state, index, card, action.position)
        assert inst is not None
        for ability in abilities_for(card, "battlecry"):
            _resolve_ability(state, index, ability, source=inst, chosen=action.target)
    elif isinstance(card, WeaponCard):
        old = ps.equip_weapon(Weapon.from_card(card))
        if old is not None:
            _emit(state, "weapon_destroyed", ps.player_id, card_id=old.card.id)
        _emit(state, "weapon_equipped", ps.player_id, card_id=card.id)
        for ability in abilities_for(card, "battlecry"):
            _resolve_ability(state, index, ability, source=None, chosen=action.target)
    else:
        for ability in abilities_for(card, "battlecry"):
            _resolve_ability(state, index, ability, source=None, chosen=action.target, from_spell=True)

    _resolve_deaths(state)
    _check_game_over(state)


def _hero_attack(state: MatchState, index: int, target: Character, action: AttackAction) -> None:
    ps = state.players[index]
    weapon = ps.weapon
    assert weapon is not None
    ps.hero_attacks_this_turn += 1
    _emit(state, "attack", ps.player_id, attacker_id=HERO_ATTACKER, target=str(action.target), damage=weapon.attack)

    dealt = _deal_damage(state, target, weapon.attack, source=None)
    if isinstance(target, CreatureInstance):
        if "poisonous" in weapon.card.keywords and dealt > 0:
            target.destroy()
        _deal_damage(state, ps, target.attack, source=target)
    if "lifesteal" in weapon.card.keywords and dealt > 0:
        _heal(state, ps, dealt)

    weapon.durability -= 1
    if weapon.is_broken():
        ps.weapon = None
        _emit(state, "weapon_destroyed", ps.player_id, card_id=weapon.card.id)


def _attack(state: MatchState, index: int, action: AttackAction) -> None:
    target = lookup_target(state, action.target)
    assert target is not None

    if action.attacker_id == HERO_ATTACKER:
        _hero_attack(state, index, target, action)
    else:
        ps = state.players[index]
        attacker = ps.get_creature(action.attacker_id)
        assert attacker is not None
        declared = attacker.declare_attack()
        assert declared
        for ability in list(attacker.abilities):
            if ability.trigger == "on_attack":
                _resolve_ability(state, index, ability, source=attacker)

        _emit(
            state,
            "attack",
            ps.player_id,
            attacker_id=attacker.instance_id,
            target=str(action.target),
            damage=attacker.attack,
        )
        if attacker.is_alive():
            if isinstance(target, CreatureInstance):
                if target.is_alive():
                    # Combat damage is simultaneous; read both attack values first.
                    to_defender = attacker.attack
                    to_attacker = target.attack
                    _deal_damage(state, target, to_defender, source=attacker)
                    _deal_damage(state, attacker, to_attacker, source=target)
            else:
                _deal_damage(state, target, attacker.attack, source=attacker)

    _resolve_deaths(state)
    _check_game_over(state)


def _end_turn(state: MatchState) -> None:
    ps = state.current_player()
    logger.debug("Ending turn for player %s", ps.player_id)
    _emit(state, "turn_ended", ps.player_id, turn_number=state.turn)
    _transition(state, "end_turn")
    if state.phase == "game_over":
        return
    _transition(state, "start_turn")


def _concede(state: MatchState, index: int) -> None:
    winner = state.players[state.opponent(index)]
    _declare_winner(state, winner.player_id, "concede")


def _mulligan(state: MatchState, index: int, action: MulliganAction) -> None:
    ps = state.players[index]
    returned: list[Card] = []
    for cid in action.card_ids:
        card = ps.remove_card_from_hand(cid)
        assert card is not None
        returned.append(card)
    for _ in returned:
        _draw(state, index)
    ps.draw_pile.extend(returned)
    state.rng.shuffle(ps.draw_pile)
    _emit(state, "mulligan", ps.player_id, replaced=len(returned))
    state.mulligan_done.add(ps.player_id)
    if len(state.mulligan_done) == len(state.players):
        _transition(state, "start_turn")


def step(state: MatchState, action: Action) -> StepResult:
    """Apply a single intent to the match state.

    Illegal intents are rejected with a result code and leave the state
    unchanged. Legal ones mutate `state` in place; the outcome is deterministic
    for a given (seed, decks, action sequence).
    """
    if state.phase == "game_over":
        return _reject("game_over", "Match already ended.")

    # Log first so replay has a full record of attempted actions
    state.action_log.append(action)

    rejection = _check(state, action)
    if rejection is not None:
        logger.warning("Rejected %s from %s: %s", describe_action(action), action.player_id, rejection.error)
        return rejection

    index = state.index_of(action.player_id)
    assert index is not None
    start = len(state.history)

    if isinstance(action, PlayCardAction):
        _play_card(state, index, action)
    elif isinstance(action, AttackAction):
        _attack(state, index, action)
    elif isinstance(action, EndTurnAction):
        _end_turn(state)
    elif isinstance(action, ConcedeAction):
        _concede(state, index)
    elif isinstance(action, MulliganAction):
        _mulligan(state, index, action)

    return StepResult(ok=True, events=state.history[start:])


def new_match(
    cards: CardDatabase,
    deck0: Deck,
    deck1: Deck,
    seed: int,
    config: MatchConfig | None = None,
    *,
    player_ids: tuple[str, str] = ("player1", "player2"),
    player_names: tuple[str, str] = ("Player", "Opponent"),
    ai_controlled: tuple[bool, bool] = (False, False),
    game_id: str | None = None,
) -> MatchState:
    """Create a match and run it up to the first player's main phase.

    With `config.mulligan` set the match instead waits in the mulligan phase
    for both players' MulliganAction. Raises ValueError for invalid decks.
    """
    cfg = config or MatchConfig()
    for deck in (deck0, deck1):
        validation = validate_deck(deck)
        if not validation.is_valid:
            raise ValueError(f"Invalid deck {deck.id}: " + "; ".join(validation.errors))

    rng = random.Random(seed)
    players: list[PlayerState] = []
    for i, deck in enumerate((deck0, deck1)):
        players.append(
            PlayerState(
                player_id=player_ids[i],
                name=player_names[i],
                draw_pile=build_draw_pile(deck, rng),
                is_ai=ai_controlled[i],
                hero_class=deck.hero_class,
                health=cfg.starting_health,
                max_health=cfg.starting_health,
            )
        )

    state = MatchState(
        game_id=game_id or f"game_{seed}",
        cards=cards,
        config=cfg,
        seed=seed,
        rng=rng,
        players=players,
    )
    logger.info("Creating new game: %s", state.game_id)
    _emit(state, "game_started", "", player1_id=players[0].player_id, player2_id=players[1].player_id)

    for _ in range(cfg.starting_hand):
        _draw(state, 0)
        _draw(state, 1)
    for ps in players:
        logger.debug("Player %s drew %d cards", ps.player_id, ps.hand_size())

    _transition(state, "mulligan")
    if not cfg.mulligan:
        _transition(state, "start_turn")
    return state


def replay(
    cards: CardDatabase,
    deck0: Deck,
    deck1: Deck,
    seed: int,
    actions: Iterable[Action],
    config: MatchConfig | None = None,
    **kwargs: object,
) -> MatchState:
    state = new_match(cards, deck0, deck1, seed, config, **kwargs)  # type: ignore[arg-type]
    for a in actions:
        step(state, a)
        if state.is_game_over():
            break
    return state


def snapshot_match(state: MatchState) -> MatchState:
    """Deep copy of the match for read-only work off the control thread.

    The card catalog is immutable and shared rather than copied.
    """
    memo: dict[int, object] = {id(state.cards): state.cards}
    for card in state.cards.cards.values():
        memo[id(card)] = card
    return copy.deepcopy(state, memo=memo)


def creatures_that_can_attack(state: MatchState, index: int) -> list[CreatureInstance]:
    return [c for c in state.players[index].battlefield if c.can_attack()]
