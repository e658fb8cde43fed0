from __future__ import annotations

import json
import shutil
from pathlib import Path
from typing import Callable

import pytest

from spiresmiths.paths import get_paths
from spiresmiths.services.content import ContentError, ContentService


def test_content_schemas_validate() -> None:
    paths = get_paths()
    assert (paths.data_dir / "cards.json").is_file()
    assert (paths.schema_dir / "decks.schema.json").is_file()
    content = ContentService(paths.data_dir, paths.schema_dir)
    content.validate_all()


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    src = get_paths().data_dir
    for name in ("cards.json", "decks.json"):
        shutil.copy(src / name, tmp_path / name)
    return tmp_path


def _service(data_dir: Path) -> ContentService:
    return ContentService(data_dir, get_paths().schema_dir)


def _edit(path: Path, fn: Callable[[dict], None]) -> None:
    raw = json.loads(path.read_text(encoding="utf-8"))
    fn(raw)
    path.write_text(json.dumps(raw), encoding="utf-8")


def test_copied_content_loads(data_dir: Path) -> None:
    content = _service(data_dir)
    cards = content.load_cards_db()
    assert "fireball" in cards.cards
    assert set(content.load_decks(cards)) == {"basic_starter", "elemental_mage", "warrior_aggro"}


def test_spell_with_attack_is_rejected(data_dir: Path) -> None:
    def add_attack(raw: dict) -> None:
        for card in raw["cards"]:
            if card["id"] == "fireball":
                card["attack"] = 3

    _edit(data_dir / "cards.json", add_attack)
    with pytest.raises(ContentError, match="Schema validation failed"):
        _service(data_dir).load_cards_db()


def test_invalid_json(data_dir: Path) -> None:
    (data_dir / "cards.json").write_text("{ not json", encoding="utf-8")
    with pytest.raises(ContentError, match="Invalid JSON"):
        _service(data_dir).load_cards_db()


def test_missing_file(data_dir: Path) -> None:
    (data_dir / "decks.json").unlink()
    with pytest.raises(ContentError, match="Missing content file"):
        _service(data_dir).validate_all()


def test_duplicate_card_id(data_dir: Path) -> None:
    _edit(data_dir / "cards.json", lambda raw: raw["cards"].append(dict(raw["cards"][0])))
    with pytest.raises(ContentError, match="Duplicate card id"):
        _service(data_dir).load_cards_db()


def test_deck_with_unknown_card(data_dir: Path) -> None:
    def swap(raw: dict) -> None:
        raw["decks"][0]["cards"][0]["card_id"] = "no_such_card"

    _edit(data_dir / "decks.json", swap)
    with pytest.raises(ContentError, match="unknown card no_such_card"):
        _service(data_dir).validate_all()


def test_deck_with_too_many_copies(data_dir: Path) -> None:
    def triple(raw: dict) -> None:
        raw["decks"][0]["cards"][0]["count"] = 3

    _edit(data_dir / "decks.json", triple)
    with pytest.raises(ContentError, match="Invalid deck basic_starter"):
        _service(data_dir).validate_all()


def test_unknown_deck_id(data_dir: Path) -> None:
    with pytest.raises(ContentError, match="Unknown deck: nope"):
        _service(data_dir).load_deck("nope")
