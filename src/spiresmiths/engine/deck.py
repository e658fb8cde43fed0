from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Literal, Mapping

from .types import Card, CardDatabase, CardType, validate_card

DECK_SIZE = 30
MAX_CARD_COPIES = 2
MAX_LEGENDARY_COPIES = 1

HeroClass = Literal[
    "neutral", "warrior", "mage", "priest", "rogue", "hunter", "warlock", "shaman", "paladin", "druid"
]


def max_copies(card: Card) -> int:
    return MAX_LEGENDARY_COPIES if card.rarity == "legendary" else MAX_CARD_COPIES


@dataclass
class DeckEntry:
    card: Card
    count: int


@dataclass(frozen=True)
class DeckEditResult:
    ok: bool
    message: str


@dataclass
class DeckValidation:
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class Deck:
    """A deck definition: (card, count) entries plus a hero class.

    Play never touches a Deck; matches consume a shuffled copy produced by
    `build_draw_pile`.
    """

    id: str
    name: str
    entries: list[DeckEntry] = field(default_factory=list)
    hero_class: HeroClass = "neutral"

    @staticmethod
    def from_counts(
        cards: CardDatabase,
        deck_id: str,
        name: str,
        counts: Mapping[str, int],
        hero_class: HeroClass = "neutral",
    ) -> "Deck":
        entries = [DeckEntry(card=cards.get(cid), count=n) for cid, n in counts.items()]
        return Deck(id=deck_id, name=name, entries=entries, hero_class=hero_class)

    def total_cards(self) -> int:
        return sum(e.count for e in self.entries)

    def total_mana_cost(self) -> int:
        return sum(e.card.cost * e.count for e in self.entries)

    def average_mana_cost(self) -> float:
        total = self.total_cards()
        if total == 0:
            return 0.0
        return self.total_mana_cost() / total

    def mana_curve(self) -> list[int]:
        """Card counts by cost, index 0..10 with 10+ grouped in the last bucket."""
        curve = [0] * 11
        for e in self.entries:
            curve[min(e.card.cost, 10)] += e.count
        return curve

    def cards_by_type(self) -> dict[CardType, list[DeckEntry]]:
        out: dict[CardType, list[DeckEntry]] = {}
        for e in self.entries:
            out.setdefault(e.card.type, []).append(e)
        return out

    def find(self, card_id: str) -> DeckEntry | None:
        for e in self.entries:
            if e.card.id == card_id:
                return e
        return None

    def add_card(self, card: Card, count: int = 1) -> DeckEditResult:
        if count < 1:
            return DeckEditResult(ok=False, message="Card count must be positive")
        limit = max_copies(card)
        existing = self.find(card.id)
        current = existing.count if existing is not None else 0
        if current + count > limit:
            return DeckEditResult(
                ok=False,
                message=f"Cannot add {count} more copies of {card.name} (would exceed limit of {limit})",
            )
        if existing is not None:
            existing.count += count
        else:
            self.entries.append(DeckEntry(card=card, count=count))
        return DeckEditResult(ok=True, message=f"Added {count}x {card.name}")

    def remove_card(self, card_id: str, count: int = 1) -> DeckEditResult:
        for i, e in enumerate(self.entries):
            if e.card.id != card_id:
                continue
            if e.count <= count:
                self.entries.pop(i)
            else:
                e.count -= count
            return DeckEditResult(ok=True, message=f"Removed {card_id}")
        return DeckEditResult(ok=False, message="Card not found in deck")

    def statistics(self) -> dict[str, object]:
        by_type = self.cards_by_type()
        return {
            "total_cards": self.total_cards(),
            "creature_count": sum(e.count for e in by_type.get("creature", [])),
            "spell_count": sum(e.count for e in by_type.get("spell", [])),
            "weapon_count": sum(e.count for e in by_type.get("weapon", [])),
            "average_mana_cost": self.average_mana_cost(),
            "mana_curve": self.mana_curve(),
            "is_valid": validate_deck(self).is_valid,
        }

    def copy(self) -> "Deck":
        return Deck(
            id=f"{self.id}_copy",
            name=f"{self.name} (Copy)",
            entries=[DeckEntry(card=e.card, count=e.count) for e in self.entries],
            hero_class=self.hero_class,
        )


def validate_deck(deck: Deck) -> DeckValidation:
    """Check deck construction rules. Never raises."""
    result = DeckValidation()

    total = deck.total_cards()
    if total != DECK_SIZE:
        result.errors.append(f"Deck must contain exactly {DECK_SIZE} cards (currently has {total})")

    seen: set[str] = set()
    for e in deck.entries:
        card = e.card
        if card.id in seen:
            result.errors.append(f"Duplicate entries for card: {card.name}")
        seen.add(card.id)

        if e.count < 1:
            result.errors.append(f"Invalid count for {card.name}: {e.count}")
        limit = max_copies(card)
        if e.count > limit:
            result.errors.append(f"Too many copies of {card.name} ({e.count}/{limit})")

        for err in validate_card(card):
            result.errors.append(f"Invalid card {card.name}: {err}")

    curve = deck.mana_curve()
    high = sum(curve[8:])
    if high > total * 0.3:
        result.warnings.append("Deck has many high-cost cards - consider adding more low-cost cards")
    low = curve[1] + curve[2]
    if low < total * 0.15:
        result.warnings.append("Deck has few low-cost cards - consider adding early game options")

    return result


def build_draw_pile(deck: Deck, rng: random.Random) -> list[Card]:
    """Expand a deck into individual cards and shuffle them into a new list."""
    pile: list[Card] = []
    for e in deck.entries:
        pile.extend([e.card] * e.count)
    rng.shuffle(pile)
    return pile
