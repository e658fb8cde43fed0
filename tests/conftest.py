from __future__ import annotations

from typing import Callable

import pytest

from spiresmiths.engine.deck import Deck
from spiresmiths.engine.match import MatchConfig, MatchState, new_match
from spiresmiths.engine.types import CardDatabase
from spiresmiths.paths import get_paths
from spiresmiths.services.content import ContentService


@pytest.fixture(scope="session")
def content() -> ContentService:
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir)


@pytest.fixture(scope="session")
def cards(content: ContentService) -> CardDatabase:
    return content.load_cards_db()


@pytest.fixture()
def decks(content: ContentService, cards: CardDatabase) -> dict[str, Deck]:
    return content.load_decks(cards)


@pytest.fixture()
def starter(decks: dict[str, Deck]) -> Deck:
    return decks["basic_starter"]


@pytest.fixture()
def make_match(cards: CardDatabase, decks: dict[str, Deck]) -> Callable[..., MatchState]:
    def _make(seed: int = 1, deck_id: str = "basic_starter", config: MatchConfig | None = None) -> MatchState:
        deck = decks[deck_id]
        return new_match(cards, deck, deck, seed, config)

    return _make
