from __future__ import annotations

import json
from pathlib import Path

import pytest

from spiresmiths.client.sim.main import main


def test_sim_runs_a_seeded_match(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "sim.jsonl"
    code = main(["--seed", "7", "--no-delay", "--max-turns", "80", "--telemetry", str(path)])
    assert code == 0

    out = capsys.readouterr().out
    assert out.startswith("Seed 7:")
    lines = path.read_text(encoding="utf-8").splitlines()
    assert json.loads(lines[-1])["type"] == "match.summary"


def test_sim_is_reproducible(capsys: pytest.CaptureFixture[str]) -> None:
    args = ["--seed", "11", "--no-delay", "--difficulty", "easy", "--opponent-difficulty", "expert"]
    main(args)
    first = capsys.readouterr().out
    main(args)
    assert capsys.readouterr().out == first


def test_sim_unknown_deck(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--seed", "1", "--no-delay", "--ai-deck", "missing_deck"]) == 2
