from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

from spiresmiths.engine.actions import ConcedeAction
from spiresmiths.engine.match import MatchState, step
from spiresmiths.services.telemetry import TelemetryService


def _read(path: Path) -> list[dict]:
    return [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]


def test_log_appends_json_lines(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "events.jsonl"
    telemetry = TelemetryService(path)
    telemetry.log("session.start", {"mode": "sim"})
    telemetry.log("session.end", {})

    records = _read(path)
    assert [r["type"] for r in records] == ["session.start", "session.end"]
    assert records[0]["payload"] == {"mode": "sim"}
    assert "ts" in records[0]


def test_record_match_exports_history(tmp_path: Path, make_match: Callable[..., MatchState]) -> None:
    state = make_match(seed=4)
    step(state, ConcedeAction("player2"))
    path = tmp_path / "match.jsonl"
    TelemetryService(path).record_match(state)

    records = _read(path)
    assert len(records) == len(state.history) + 1
    assert records[0]["type"] == "match.game_started"
    assert records[-2]["type"] == "match.game_ended"
    summary = records[-1]
    assert summary["type"] == "match.summary"
    assert summary["payload"]["winner_id"] == "player1"
    assert summary["payload"]["reason"] == "concede"
    assert summary["payload"]["seed"] == 4
