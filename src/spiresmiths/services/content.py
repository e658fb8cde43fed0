from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from spiresmiths.engine.deck import Deck, DeckEntry, validate_deck
from spiresmiths.engine.types import (
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
    Keyword,
    SilenceEffect,
    SpellCard,
    SummonEffect,
    WeaponCard,
)

logger = logging.getLogger(__name__)


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _parse_keywords(raw: object) -> tuple[Keyword, ...]:
    if not isinstance(raw, list):
        raise ContentError("keywords must be a list")
    # trust schema for allowed values
    return tuple(k for k in raw if isinstance(k, str))  # type: ignore[misc]


def _parse_effect(raw: Mapping[str, object]) -> Effect:
    t = raw.get("type")
    if t == "damage":
        return DamageEffect(type="damage", amount=_require_int(raw, "amount"), target=_require_str(raw, "target"))  # type: ignore[arg-type]
    if t == "heal":
        return HealEffect(type="heal", amount=_require_int(raw, "amount"), target=_require_str(raw, "target"))  # type: ignore[arg-type]
    if t == "draw":
        return DrawEffect(type="draw", count=_require_int(raw, "count"))
    if t == "gain_mana":
        return GainManaEffect(type="gain_mana", amount=_require_int(raw, "amount"))
    if t == "summon":
        return SummonEffect(
            type="summon",
            token_card_id=_require_str(raw, "token_card_id"),
            count=_require_int(raw, "count"),
        )
    if t == "destroy":
        return DestroyEffect(type="destroy", target=_require_str(raw, "target"))  # type: ignore[arg-type]
    if t == "silence":
        return SilenceEffect(type="silence", target=_require_str(raw, "target"))  # type: ignore[arg-type]
    if t == "buff":
        duration = raw.get("duration", -1)
        if not isinstance(duration, int):
            raise ContentError("Expected int for duration")
        return BuffEffect(
            type="buff",
            attack_delta=_require_int(raw, "attack_delta"),
            health_delta=_require_int(raw, "health_delta"),
            target=_require_str(raw, "target"),  # type: ignore[arg-type]
            duration=duration,
        )
    if t == "give_keyword":
        return GiveKeywordEffect(
            type="give_keyword",
            keyword=_require_str(raw, "keyword"),  # type: ignore[arg-type]
            target=_require_str(raw, "target"),  # type: ignore[arg-type]
        )
    if t == "freeze":
        return FreezeEffect(type="freeze", target=_require_str(raw, "target"))  # type: ignore[arg-type]
    raise ContentError(f"Unknown effect type: {t}")


def _parse_ability(raw: Mapping[str, object]) -> Ability:
    effects_raw = raw.get("effects")
    if not isinstance(effects_raw, list):
        raise ContentError("ability.effects must be a list")
    effects = tuple(_parse_effect(e) for e in effects_raw if isinstance(e, dict))
    desc = raw.get("description", "")
    return Ability(
        id=_require_str(raw, "id"),
        name=_require_str(raw, "name"),
        trigger=_require_str(raw, "trigger"),  # type: ignore[arg-type]
        effects=effects,
        description=desc if isinstance(desc, str) else "",
    )


def _parse_card(item: Mapping[str, object]) -> Card:
    ctype = _require_str(item, "type")
    abilities_raw = item.get("abilities", [])
    if not isinstance(abilities_raw, list):
        raise ContentError("abilities must be a list")
    abilities = tuple(_parse_ability(a) for a in abilities_raw if isinstance(a, dict))
    desc = item.get("description", "")
    set_id = item.get("set", "core")
    collectible = item.get("collectible", True)
    common = dict(
        id=_require_str(item, "id"),
        name=_require_str(item, "name"),
        cost=_require_int(item, "cost"),
        rarity=_require_str(item, "rarity"),
        keywords=_parse_keywords(item.get("keywords", [])),
        abilities=abilities,
        description=desc if isinstance(desc, str) else "",
        set_id=set_id if isinstance(set_id, str) else "core",
        collectible=bool(collectible),
    )
    if ctype == "creature":
        return CreatureCard(
            type="creature", attack=_require_int(item, "attack"), health=_require_int(item, "health"), **common  # type: ignore[arg-type]
        )
    if ctype == "weapon":
        return WeaponCard(
            type="weapon",
            attack=_require_int(item, "attack"),
            durability=_require_int(item, "durability"),
            **common,  # type: ignore[arg-type]
        )
    if ctype == "spell":
        return SpellCard(type="spell", **common)  # type: ignore[arg-type]
    raise ContentError(f"Unknown card type: {ctype}")


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def _load_validated(self, name: str) -> dict[str, object]:
        path = self._data_dir / f"{name}.json"
        raw = _load_json(path)
        schema = _load_json(self._schema_dir / f"{name}.schema.json")
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError(f"{name}.json must be an object")
        return raw

    def load_cards_db(self) -> CardDatabase:
        raw = self._load_validated("cards")
        raw_cards = raw.get("cards")
        if not isinstance(raw_cards, list):
            raise ContentError("cards.json.cards must be a list")

        cards: dict[str, Card] = {}
        for item in raw_cards:
            if not isinstance(item, dict):
                continue
            card = _parse_card(item)
            if card.id in cards:
                raise ContentError(f"Duplicate card id: {card.id}")
            cards[card.id] = card

        db = CardDatabase(cards=cards)
        problems = db.validate()
        if problems:
            raise ContentError("Card validation failed:\n" + "\n".join(f"- {p}" for p in problems))
        logger.info("Loaded %d cards from %s", len(cards), self._data_dir / "cards.json")
        return db

    def load_decks(self, cards: CardDatabase | None = None) -> dict[str, Deck]:
        db = cards if cards is not None else self.load_cards_db()
        raw = self._load_validated("decks")
        raw_decks = raw.get("decks")
        if not isinstance(raw_decks, list):
            raise ContentError("decks.json.decks must be a list")

        decks: dict[str, Deck] = {}
        for item in raw_decks:
            if not isinstance(item, dict):
                continue
            deck_id = _require_str(item, "id")
            entries: list[DeckEntry] = []
            for e in item.get("cards", []):  # type: ignore[union-attr]
                if not isinstance(e, dict):
                    continue
                card_id = _require_str(e, "card_id")
                card = db.find(card_id)
                if card is None:
                    raise ContentError(f"Deck {deck_id} references unknown card {card_id}")
                entries.append(DeckEntry(card=card, count=_require_int(e, "count")))
            deck = Deck(
                id=deck_id,
                name=_require_str(item, "name"),
                entries=entries,
                hero_class=_require_str(item, "hero_class"),  # type: ignore[arg-type]
            )
            validation = validate_deck(deck)
            if not validation.is_valid:
                raise ContentError(f"Invalid deck {deck_id}:\n" + "\n".join(f"- {p}" for p in validation.errors))
            for w in validation.warnings:
                logger.warning("Deck %s: %s", deck_id, w)
            decks[deck_id] = deck
        logger.info("Loaded %d decks", len(decks))
        return decks

    def load_deck(self, deck_id: str, cards: CardDatabase | None = None) -> Deck:
        decks = self.load_decks(cards)
        deck = decks.get(deck_id)
        if deck is None:
            raise ContentError(f"Unknown deck: {deck_id} (available: {', '.join(sorted(decks))})")
        return deck

    def validate_all(self) -> None:
        # Load is validation (schema + parse + rules)
        cards = self.load_cards_db()
        _ = self.load_decks(cards)
