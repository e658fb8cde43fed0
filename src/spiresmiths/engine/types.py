from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Literal

CardType = Literal["creature", "spell", "weapon"]
Rarity = Literal["common", "rare", "epic", "legendary"]
Keyword = Literal[
    "taunt",
    "charge",
    "divine_shield",
    "stealth",
    "lifesteal",
    "windfury",
    "spell_damage",
    "poisonous",
]

CARD_TYPES: tuple[CardType, ...] = ("creature", "spell", "weapon")
RARITIES: tuple[Rarity, ...] = ("common", "rare", "epic", "legendary")
KEYWORDS: tuple[Keyword, ...] = (
    "taunt",
    "charge",
    "divine_shield",
    "stealth",
    "lifesteal",
    "windfury",
    "spell_damage",
    "poisonous",
)

Trigger = Literal["battlecry", "deathrattle", "start_of_turn", "end_of_turn", "on_attack"]
TRIGGERS: tuple[Trigger, ...] = ("battlecry", "deathrattle", "start_of_turn", "end_of_turn", "on_attack")

EffectType = Literal[
    "damage", "heal", "draw", "gain_mana", "summon", "destroy", "silence", "buff", "give_keyword", "freeze"
]

TargetKind = Literal[
    "none",
    "self",
    "enemy_hero",
    "friendly_hero",
    "all_enemy_creatures",
    "all_friendly_creatures",
    "all_creatures",
    "random_enemy",
    "enemy_creature",
    "friendly_creature",
    "any_creature",
    "enemy_character",
    "friendly_character",
    "any_character",
]

# Target kinds the caster picks when playing the card.
CHOSEN_TARGETS: frozenset[str] = frozenset(
    {
        "enemy_creature",
        "friendly_creature",
        "any_creature",
        "enemy_character",
        "friendly_character",
        "any_character",
    }
)


@dataclass(frozen=True)
class DamageEffect:
    type: Literal["damage"]
    amount: int
    target: TargetKind


@dataclass(frozen=True)
class HealEffect:
    type: Literal["heal"]
    amount: int
    target: TargetKind


@dataclass(frozen=True)
class DrawEffect:
    type: Literal["draw"]
    count: int


@dataclass(frozen=True)
class GainManaEffect:
    type: Literal["gain_mana"]
    amount: int


@dataclass(frozen=True)
class SummonEffect:
    type: Literal["summon"]
    token_card_id: str
    count: int


@dataclass(frozen=True)
class DestroyEffect:
    type: Literal["destroy"]
    target: TargetKind


@dataclass(frozen=True)
class SilenceEffect:
    type: Literal["silence"]
    target: TargetKind


@dataclass(frozen=True)
class BuffEffect:
    type: Literal["buff"]
    attack_delta: int
    health_delta: int
    target: TargetKind
    duration: int = -1  # turns; -1 lasts until silenced


@dataclass(frozen=True)
class GiveKeywordEffect:
    type: Literal["give_keyword"]
    keyword: Keyword
    target: TargetKind


@dataclass(frozen=True)
class FreezeEffect:
    type: Literal["freeze"]
    target: TargetKind


Effect = (
    DamageEffect
    | HealEffect
    | DrawEffect
    | GainManaEffect
    | SummonEffect
    | DestroyEffect
    | SilenceEffect
    | BuffEffect
    | GiveKeywordEffect
    | FreezeEffect
)


def effect_target(effect: Effect) -> TargetKind:
    """Target kind of an effect; effects without a target report "none"."""
    if isinstance(effect, (DrawEffect, GainManaEffect, SummonEffect)):
        return "none"
    return effect.target


@dataclass(frozen=True)
class Ability:
    id: str
    name: str
    trigger: Trigger
    effects: tuple[Effect, ...]
    description: str = ""


@dataclass(frozen=True)
class CreatureCard:
    type: Literal["creature"]
    id: str
    name: str
    cost: int
    rarity: Rarity
    attack: int
    health: int
    keywords: tuple[Keyword, ...] = ()
    abilities: tuple[Ability, ...] = ()
    description: str = ""
    set_id: str = "core"
    collectible: bool = True


@dataclass(frozen=True)
class SpellCard:
    type: Literal["spell"]
    id: str
    name: str
    cost: int
    rarity: Rarity
    keywords: tuple[Keyword, ...] = ()
    abilities: tuple[Ability, ...] = ()
    description: str = ""
    set_id: str = "core"
    collectible: bool = True


@dataclass(frozen=True)
class WeaponCard:
    type: Literal["weapon"]
    id: str
    name: str
    cost: int
    rarity: Rarity
    attack: int
    durability: int
    keywords: tuple[Keyword, ...] = ()
    abilities: tuple[Ability, ...] = ()
    description: str = ""
    set_id: str = "core"
    collectible: bool = True


Card = CreatureCard | SpellCard | WeaponCard


def abilities_for(card: Card, trigger: Trigger) -> list[Ability]:
    return [a for a in card.abilities if a.trigger == trigger]


def chosen_target_kinds(card: Card) -> list[TargetKind]:
    """Chosen target kinds across the card's on-play abilities, in order."""
    kinds: list[TargetKind] = []
    for ability in abilities_for(card, "battlecry"):
        for eff in ability.effects:
            kind = effect_target(eff)
            if kind in CHOSEN_TARGETS and kind not in kinds:
                kinds.append(kind)
    return kinds


def requires_target(card: Card) -> bool:
    """Spells with a chosen-target effect cannot be cast without a target.

    Creature battlecries with chosen targets are optional and fizzle when no
    target is given.
    """
    return card.type == "spell" and bool(chosen_target_kinds(card))


def validate_card(card: Card) -> list[str]:
    """Return a list of problems with a card definition (empty when valid)."""
    errors: list[str] = []
    if not card.name:
        errors.append("Card name cannot be empty")
    if card.cost < 0:
        errors.append("Card cost cannot be negative")
    if card.rarity not in RARITIES:
        errors.append(f"Unknown rarity: {card.rarity}")

    if isinstance(card, CreatureCard):
        if card.attack < 0 or card.health <= 0:
            errors.append("Creature stats must be valid (attack >= 0, health > 0)")
    elif isinstance(card, WeaponCard):
        if card.attack <= 0 or card.durability <= 0:
            errors.append("Weapon stats must be positive")
    elif not isinstance(card, SpellCard):
        errors.append(f"Unknown card type: {getattr(card, 'type', '?')}")

    for kw in card.keywords:
        if kw not in KEYWORDS:
            errors.append(f"Unknown keyword: {kw}")
    for ability in card.abilities:
        if ability.trigger not in TRIGGERS:
            errors.append(f"Unknown ability trigger: {ability.trigger}")
        for eff in ability.effects:
            if isinstance(eff, GiveKeywordEffect) and eff.keyword not in KEYWORDS:
                errors.append(f"Unknown keyword in ability {ability.id}: {eff.keyword}")
    return errors


@dataclass(frozen=True)
class CardDatabase:
    """Immutable card catalog used by the engine.

    Built once by the content service and passed into every match; nothing in
    the engine keeps a process-wide registry.
    """

    cards: dict[str, Card]

    def get(self, card_id: str) -> Card:
        return self.cards[card_id]

    def find(self, card_id: str) -> Card | None:
        return self.cards.get(card_id)

    def all_ids(self) -> Sequence[str]:
        return list(self.cards.keys())

    def all_cards(self) -> list[Card]:
        return list(self.cards.values())

    def by_type(self, card_type: CardType) -> list[Card]:
        return [c for c in self.cards.values() if c.type == card_type]

    def by_rarity(self, rarity: Rarity) -> list[Card]:
        return [c for c in self.cards.values() if c.rarity == rarity]

    def by_set(self, set_id: str) -> list[Card]:
        return [c for c in self.cards.values() if c.set_id == set_id]

    def search(self, query: str) -> list[Card]:
        q = query.lower()
        return [c for c in self.cards.values() if q in c.name.lower()]

    def filter(
        self,
        *,
        card_type: CardType | None = None,
        rarity: Rarity | None = None,
        set_id: str | None = None,
        min_cost: int | None = None,
        max_cost: int | None = None,
        keywords: Sequence[Keyword] = (),
        collectible_only: bool = False,
    ) -> list[Card]:
        out: list[Card] = []
        for card in self.cards.values():
            if card_type is not None and card.type != card_type:
                continue
            if rarity is not None and card.rarity != rarity:
                continue
            if set_id is not None and card.set_id != set_id:
                continue
            if min_cost is not None and card.cost < min_cost:
                continue
            if max_cost is not None and card.cost > max_cost:
                continue
            if any(kw not in card.keywords for kw in keywords):
                continue
            if collectible_only and not card.collectible:
                continue
            out.append(card)
        return out

    def statistics(self) -> dict[str, object]:
        by_type: dict[str, int] = {}
        by_rarity: dict[str, int] = {}
        by_set: dict[str, int] = {}
        for card in self.cards.values():
            by_type[card.type] = by_type.get(card.type, 0) + 1
            by_rarity[card.rarity] = by_rarity.get(card.rarity, 0) + 1
            by_set[card.set_id] = by_set.get(card.set_id, 0) + 1
        total = len(self.cards)
        avg = sum(c.cost for c in self.cards.values()) / total if total else 0.0
        return {
            "total_cards": total,
            "by_type": by_type,
            "by_rarity": by_rarity,
            "by_set": by_set,
            "average_cost": avg,
        }

    def validate(self) -> list[str]:
        errors: list[str] = []
        for card_id, card in self.cards.items():
            if card_id != card.id:
                errors.append(f"Card registered as {card_id} has id {card.id}")
            for err in validate_card(card):
                errors.append(f"Invalid card {card.id}: {err}")
            for ability in card.abilities:
                for eff in ability.effects:
                    if isinstance(eff, SummonEffect):
                        token = self.cards.get(eff.token_card_id)
                        if not isinstance(token, CreatureCard):
                            errors.append(
                                f"Invalid card {card.id}: summons unknown creature {eff.token_card_id}"
                            )
        return errors
