from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import random
from collections.abc import Sequence
from pathlib import Path

from spiresmiths.engine.actions import EndTurnAction
from spiresmiths.engine.ai import AIPlayer, get_difficulty
from spiresmiths.engine.match import MatchState, new_match, step, validate_action
from spiresmiths.paths import get_paths
from spiresmiths.services.content import ContentError, ContentService
from spiresmiths.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spiresmiths-sim", description="Play a headless AI vs AI match.")
    parser.add_argument("--difficulty", default="medium", help="difficulty of the first player")
    parser.add_argument("--opponent-difficulty", default="medium", help="difficulty of the second player")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--player-deck", default="basic_starter")
    parser.add_argument("--ai-deck", default="basic_starter")
    parser.add_argument("--max-turns", type=int, default=60)
    parser.add_argument("--telemetry", type=Path, default=None, help="append match events to this JSONL file")
    parser.add_argument("--no-delay", action="store_true", help="skip AI thinking time")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


async def play_match(state: MatchState, ais: Sequence[AIPlayer], max_turns: int) -> None:
    """Let the AIs play `state` until someone wins or the turn limit is hit."""
    while not state.is_game_over() and state.turn <= max_turns:
        index = state.current_player_index
        ps = state.players[index]
        decision = await ais[index].decide_async(state, index)
        check = validate_action(state, decision.action)
        if not check.ok:
            logger.warning("Discarding stale intent from %s (%s)", ps.player_id, check.code)
            step(state, EndTurnAction(player_id=ps.player_id))
            continue
        step(state, decision.action)


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    try:
        cards = content.load_cards_db()
        deck0 = content.load_deck(args.player_deck, cards)
        deck1 = content.load_deck(args.ai_deck, cards)
    except ContentError as e:
        logger.error("%s", e)
        return 2

    seed = args.seed if args.seed is not None else random.SystemRandom().randrange(2**31)
    ais: list[AIPlayer] = []
    for i, name in enumerate((args.difficulty, args.opponent_difficulty)):
        profile = get_difficulty(name)
        if args.no_delay:
            profile = dataclasses.replace(profile, thinking_time=0.0)
        ais.append(AIPlayer(profile=profile, rng=random.Random(seed + i + 1)))

    state = new_match(
        cards,
        deck0,
        deck1,
        seed,
        player_names=(f"AI ({ais[0].profile.name})", f"AI ({ais[1].profile.name})"),
        ai_controlled=(True, True),
    )
    asyncio.run(play_match(state, ais, args.max_turns))

    if args.telemetry is not None:
        TelemetryService(args.telemetry).record_match(state)

    winner = state.winner()
    if winner is None:
        print(f"Seed {seed}: no winner after {state.turn} turns")
    else:
        print(f"Seed {seed}: {winner.name} ({winner.player_id}) won on turn {state.turn} by {state.win_reason}")
    for p in state.players:
        print(f"  {p.player_id}: health {p.health}, board {len(p.battlefield)}, hand {len(p.hand)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
