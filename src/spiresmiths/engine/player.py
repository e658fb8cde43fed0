from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .creature import CreatureInstance
from .deck import HeroClass
from .types import Card, WeaponCard

STARTING_HEALTH = 30
MAX_MANA = 10
MAX_HAND_SIZE = 10
MAX_BATTLEFIELD_SIZE = 7

DrawOutcome = Literal["drawn", "burned", "fatigue"]


@dataclass(frozen=True)
class DrawResult:
    outcome: DrawOutcome
    card: Card | None = None
    fatigue_damage: int = 0


@dataclass
class Weapon:
    card: WeaponCard
    attack: int
    durability: int

    @staticmethod
    def from_card(card: WeaponCard) -> "Weapon":
        return Weapon(card=card, attack=card.attack, durability=card.durability)

    def is_broken(self) -> bool:
        return self.durability <= 0


@dataclass
class PlayerState:
    """One contestant's resources.

    Every method is total over valid inputs: illegal requests return False /
    None and leave the state untouched, so the match must check results.
    """

    player_id: str
    name: str
    draw_pile: list[Card]
    is_ai: bool = False
    hero_class: HeroClass = "neutral"
    health: int = STARTING_HEALTH
    max_health: int = STARTING_HEALTH
    mana: int = 0
    max_mana: int = 0
    hand: list[Card] = field(default_factory=list)
    battlefield: list[CreatureInstance] = field(default_factory=list)
    weapon: Weapon | None = None
    fatigue: int = 0
    has_played_card_this_turn: bool = False
    hero_attacks_this_turn: int = 0
    cards_drawn_this_turn: int = 0
    turns_taken: int = 0

    def is_alive(self) -> bool:
        return self.health > 0

    def is_dead(self) -> bool:
        return self.health <= 0

    def hand_size(self) -> int:
        return len(self.hand)

    def is_hand_full(self) -> bool:
        return len(self.hand) >= MAX_HAND_SIZE

    def is_battlefield_full(self) -> bool:
        return len(self.battlefield) >= MAX_BATTLEFIELD_SIZE

    def playable_cards(self) -> list[Card]:
        return [c for c in self.hand if c.cost <= self.mana]

    def can_play_any_card(self) -> bool:
        return any(c.cost <= self.mana for c in self.hand)

    def add_to_hand(self, card: Card) -> bool:
        if self.is_hand_full():
            return False
        self.hand.append(card)
        return True

    def remove_from_hand(self, index: int) -> Card | None:
        if index < 0 or index >= len(self.hand):
            return None
        return self.hand.pop(index)

    def find_in_hand(self, card_id: str) -> int | None:
        for i, card in enumerate(self.hand):
            if card.id == card_id:
                return i
        return None

    def remove_card_from_hand(self, card_id: str) -> Card | None:
        idx = self.find_in_hand(card_id)
        if idx is None:
            return None
        return self.hand.pop(idx)

    def draw_card(self) -> DrawResult:
        if not self.draw_pile:
            self.fatigue += 1
            self.take_damage(self.fatigue)
            return DrawResult(outcome="fatigue", card=None, fatigue_damage=self.fatigue)

        card = self.draw_pile.pop(0)
        if self.is_hand_full():
            return DrawResult(outcome="burned", card=card)

        self.hand.append(card)
        self.cards_drawn_this_turn += 1
        return DrawResult(outcome="drawn", card=card)

    def take_damage(self, amount: int) -> int:
        if amount <= 0:
            return 0
        dealt = min(amount, self.health)
        self.health -= dealt
        return dealt

    def heal(self, amount: int) -> int:
        if amount <= 0:
            return 0
        healed = min(amount, self.max_health - self.health)
        self.health += healed
        return healed

    def gain_mana(self, amount: int) -> None:
        self.mana = min(self.mana + amount, MAX_MANA)

    def spend_mana(self, amount: int) -> bool:
        if self.mana < amount:
            return False
        self.mana -= amount
        return True

    def increase_max_mana(self) -> None:
        if self.max_mana < MAX_MANA:
            self.max_mana += 1

    def refresh_mana(self) -> None:
        self.mana = self.max_mana

    def add_to_battlefield(self, creature: CreatureInstance, position: int | None = None) -> bool:
        if self.is_battlefield_full():
            return False
        if position is None:
            position = len(self.battlefield)
        position = max(0, min(position, len(self.battlefield)))
        self.battlefield.insert(position, creature)
        return True

    def remove_from_battlefield(self, instance_id: str) -> CreatureInstance | None:
        for i, creature in enumerate(self.battlefield):
            if creature.instance_id == instance_id:
                return self.battlefield.pop(i)
        return None

    def get_creature(self, instance_id: str) -> CreatureInstance | None:
        for creature in self.battlefield:
            if creature.instance_id == instance_id:
                return creature
        return None

    def equip_weapon(self, weapon: Weapon) -> Weapon | None:
        """Equip a weapon, returning the one it replaced (if any)."""
        old = self.weapon
        self.weapon = weapon
        return old

    def can_hero_attack(self) -> bool:
        return (
            self.is_alive()
            and self.weapon is not None
            and not self.weapon.is_broken()
            and self.weapon.attack > 0
            and self.hero_attacks_this_turn < 1
        )

    def has_taunt(self) -> bool:
        return any(c.is_alive() and c.has("taunt") and not c.has("stealth") for c in self.battlefield)

    def spell_damage_bonus(self) -> int:
        return sum(1 for c in self.battlefield if c.is_alive() and c.has("spell_damage"))

    def start_turn(self) -> None:
        self.has_played_card_this_turn = False
        self.hero_attacks_this_turn = 0
        self.cards_drawn_this_turn = 0
        for creature in self.battlefield:
            creature.start_turn()

    def end_turn(self) -> None:
        self.turns_taken += 1

    def statistics(self) -> dict[str, object]:
        return {
            "health": self.health,
            "max_health": self.max_health,
            "mana": self.mana,
            "max_mana": self.max_mana,
            "hand_size": len(self.hand),
            "board_size": len(self.battlefield),
            "deck_size": len(self.draw_pile),
            "fatigue": self.fatigue,
            "weapon": self.weapon.card.id if self.weapon is not None else None,
        }
