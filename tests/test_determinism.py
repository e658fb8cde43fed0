from __future__ import annotations

import random

from spiresmiths.engine.ai import AIPlayer, ai_take_turn, get_difficulty
from spiresmiths.engine.deck import Deck
from spiresmiths.engine.match import MatchState, new_match, replay, snapshot_match
from spiresmiths.engine.serialize import snapshot
from spiresmiths.engine.types import CardDatabase


def _piles(state: MatchState) -> list[list[str]]:
    return [[card.id for card in p.draw_pile] for p in state.players]


def test_replay_matches_original(cards: CardDatabase, decks: dict[str, Deck]) -> None:
    deck0, deck1 = decks["elemental_mage"], decks["warrior_aggro"]
    state = new_match(cards, deck0, deck1, seed=2024, ai_controlled=(True, True))
    ais = [AIPlayer(get_difficulty("easy"), random.Random(1)), AIPlayer(get_difficulty("hard"), random.Random(2))]
    while not state.is_game_over() and state.turn <= 100:
        index = state.current_player_index
        ai_take_turn(state, index, ais[index])

    assert state.action_log
    replayed = replay(cards, deck0, deck1, 2024, state.action_log, ai_controlled=(True, True))
    assert snapshot(replayed) == snapshot(state)


def test_same_seed_same_opening(cards: CardDatabase, starter: Deck) -> None:
    a = new_match(cards, starter, starter, seed=99)
    b = new_match(cards, starter, starter, seed=99)
    c = new_match(cards, starter, starter, seed=100)
    assert snapshot(a) == snapshot(b)
    assert _piles(a) != _piles(c)


def test_snapshot_match_is_independent(cards: CardDatabase, starter: Deck) -> None:
    state = new_match(cards, starter, starter, seed=5)
    snap = snapshot_match(state)
    assert snapshot(snap) == snapshot(state)
    assert snap.cards is state.cards
    assert snap.players[0].hand[0] is state.players[0].hand[0]

    snap.players[0].health = 1
    snap.players[0].hand.clear()
    assert state.players[0].health == 30
    assert len(state.players[0].hand) == 3
