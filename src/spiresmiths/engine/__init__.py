"""Deterministic, headless rules engine and AI opponent for SpireSmiths.

IMPORTANT: This package must never import a UI toolkit.
"""

from .actions import AttackAction, ConcedeAction, EndTurnAction, MulliganAction, PlayCardAction, TargetRef
from .ai import AIDecision, AIPlayer, DifficultyProfile, ai_take_turn, get_difficulty
from .deck import Deck, validate_deck
from .match import GameEvent, MatchConfig, MatchState, StepResult, new_match, replay, step, validate_action
from .session import GameSession, start_game
from .types import Card, CardDatabase, CardType, Keyword, Rarity

__all__ = [
    "AIDecision",
    "AIPlayer",
    "AttackAction",
    "Card",
    "CardDatabase",
    "CardType",
    "ConcedeAction",
    "Deck",
    "DifficultyProfile",
    "EndTurnAction",
    "GameEvent",
    "GameSession",
    "Keyword",
    "MatchConfig",
    "MatchState",
    "MulliganAction",
    "PlayCardAction",
    "Rarity",
    "StepResult",
    "TargetRef",
    "ai_take_turn",
    "get_difficulty",
    "new_match",
    "replay",
    "start_game",
    "step",
    "validate_action",
    "validate_deck",
]
