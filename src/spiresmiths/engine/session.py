from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from .actions import Action, EndTurnAction, MulliganAction
from .ai import AIDecision, AIPlayer, get_difficulty
from .deck import Deck
from .match import MatchConfig, MatchState, StepResult, new_match, step, validate_action
from .types import CardDatabase

logger = logging.getLogger(__name__)

HUMAN_ID = "player1"
AI_ID = "player2"
AI_NAME = "AI Opponent"


@dataclass
class GameSession:
    """A human-vs-AI match plus the AI that plays one side of it.

    The session is the single place that mutates the match; AI intents are
    checked against the live state before they are applied.
    """

    state: MatchState
    ai: AIPlayer
    human_id: str = HUMAN_ID
    ai_id: str = AI_ID

    @property
    def ai_index(self) -> int:
        idx = self.state.index_of(self.ai_id)
        assert idx is not None
        return idx

    def is_ai_turn(self) -> bool:
        return (
            self.state.phase == "main"
            and not self.state.is_game_over()
            and self.state.current_player_index == self.ai_index
        )

    def submit(self, action: Action) -> StepResult:
        return step(self.state, action)

    def submit_ai_mulligan(self) -> StepResult | None:
        if self.state.phase != "mulligan" or self.ai_id in self.state.mulligan_done:
            return None
        hand = self.state.players[self.ai_index].hand
        return step(self.state, MulliganAction(player_id=self.ai_id, card_ids=self.ai.choose_mulligan(hand)))

    def _apply(self, decision: AIDecision) -> StepResult:
        check = validate_action(self.state, decision.action)
        if not check.ok:
            logger.warning("Discarding stale AI intent (%s): %s", check.code, decision.reasoning)
            return step(self.state, EndTurnAction(player_id=self.ai_id))
        return step(self.state, decision.action)

    def run_ai_turn(self, max_actions: int = 60) -> list[StepResult]:
        results: list[StepResult] = []
        for _ in range(max_actions):
            if not self.is_ai_turn():
                break
            decision = self.ai.decide(self.state, self.ai_index)
            results.append(self._apply(decision))
        if self.is_ai_turn():
            results.append(step(self.state, EndTurnAction(player_id=self.ai_id)))
        return results

    async def run_ai_turn_async(
        self,
        max_actions: int = 60,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> list[StepResult]:
        results: list[StepResult] = []
        for _ in range(max_actions):
            if not self.is_ai_turn():
                break
            decision = await self.ai.decide_async(self.state, self.ai_index, sleep=sleep)
            results.append(self._apply(decision))
        if self.is_ai_turn():
            results.append(step(self.state, EndTurnAction(player_id=self.ai_id)))
        return results


def start_game(
    cards: CardDatabase,
    player_deck: Deck,
    ai_deck: Deck,
    player_name: str = "Player",
    ai_difficulty: str = "medium",
    seed: int = 0,
    config: MatchConfig | None = None,
    ai_seed: int | None = None,
) -> GameSession:
    """Start a human-vs-AI match.

    The AI's mistake RNG is seeded from `ai_seed` (or `seed`), so the whole
    session is reproducible.
    """
    state = new_match(
        cards,
        player_deck,
        ai_deck,
        seed,
        config,
        player_ids=(HUMAN_ID, AI_ID),
        player_names=(player_name, AI_NAME),
        ai_controlled=(False, True),
    )
    ai = AIPlayer(profile=get_difficulty(ai_difficulty), rng=random.Random(seed if ai_seed is None else ai_seed))
    session = GameSession(state=state, ai=ai)
    logger.info("Started %s vs %s (%s)", player_name, AI_NAME, ai.profile.name)
    session.submit_ai_mulligan()
    return session
