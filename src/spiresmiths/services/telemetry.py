from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Mapping

from spiresmiths.engine.match import MatchState
from spiresmiths.engine.serialize import event_to_dict


@dataclass
class TelemetryService:
    """Append-only JSONL export of game events."""

    path: Path

    def log(self, event_type: str, payload: Mapping[str, object]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        rec = {
            "ts": datetime.now(tz=timezone.utc).isoformat(),
            "type": event_type,
            "payload": dict(payload),
        }
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(rec, ensure_ascii=False) + "\n")

    def record_match(self, state: MatchState) -> None:
        for event in state.history:
            self.log(f"match.{event.type}", {"game_id": state.game_id, **event_to_dict(event)})
        self.log(
            "match.summary",
            {
                "game_id": state.game_id,
                "seed": state.seed,
                "turns": state.turn,
                "winner_id": state.winner_id,
                "reason": state.win_reason,
                "players": [p.statistics() for p in state.players],
                "actions": len(state.action_log),
            },
        )
