from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .types import Ability, CreatureCard, Keyword

CreatureState = Literal["summoned", "ready", "attacked", "exhausted", "silenced", "frozen", "sleeping"]
ModifierStat = Literal["attack", "health"]


@dataclass
class Modifier:
    stat: ModifierStat
    amount: int
    turns_remaining: int = -1  # -1: until silenced


@dataclass
class CreatureInstance:
    """A creature on a battlefield.

    `state` tracks the attack cycle (summoned -> ready -> attacked/exhausted,
    or sleeping while a freeze is served). Frozen and silenced are overlays
    kept in their own flags; `display_state` folds them back in.
    """

    instance_id: str
    card: CreatureCard
    base_attack: int
    base_health: int
    attack: int
    health: int
    max_health: int
    keywords: set[Keyword]
    abilities: list[Ability]
    state: CreatureState = "summoned"
    attack_ready: bool = False
    frozen: bool = False
    silenced: bool = False
    destroyed: bool = False
    times_attacked_this_turn: int = 0
    damage_taken_this_turn: int = 0
    damage_dealt_this_turn: int = 0
    modifiers: list[Modifier] = field(default_factory=list)

    @staticmethod
    def from_card(card: CreatureCard, instance_id: str) -> "CreatureInstance":
        inst = CreatureInstance(
            instance_id=instance_id,
            card=card,
            base_attack=card.attack,
            base_health=card.health,
            attack=card.attack,
            health=card.health,
            max_health=card.health,
            keywords=set(card.keywords),
            abilities=list(card.abilities),
        )
        if inst.has("charge"):
            inst.state = "ready"
            inst.attack_ready = True
        return inst

    @property
    def card_id(self) -> str:
        return self.card.id

    @property
    def name(self) -> str:
        return self.card.name

    @property
    def display_state(self) -> CreatureState:
        if self.frozen:
            return "frozen"
        if self.silenced and self.state == "ready":
            return "silenced"
        return self.state

    def has(self, kw: Keyword) -> bool:
        return kw in self.keywords

    def add_keyword(self, kw: Keyword) -> None:
        self.keywords.add(kw)

    def remove_keyword(self, kw: Keyword) -> None:
        self.keywords.discard(kw)

    def is_alive(self) -> bool:
        return self.health > 0 and not self.destroyed

    def is_dead(self) -> bool:
        return not self.is_alive()

    def can_attack(self) -> bool:
        if not self.is_alive() or self.frozen:
            return False
        if self.state in ("attacked", "exhausted"):
            return False
        if not self.attack_ready:
            return False
        if self.has("windfury"):
            return self.times_attacked_this_turn < 2
        return self.times_attacked_this_turn < 1

    def declare_attack(self) -> bool:
        """Spend one attack. Returns False (and changes nothing) if not allowed."""
        if not self.can_attack():
            return False
        self.times_attacked_this_turn += 1
        if self.has("windfury") and self.times_attacked_this_turn < 2:
            self.state = "ready"
        elif self.times_attacked_this_turn >= 2:
            self.state = "exhausted"
        else:
            self.state = "attacked"
        self.remove_keyword("stealth")
        return True

    def take_damage(self, amount: int) -> int:
        if amount <= 0:
            return 0
        if self.has("divine_shield"):
            self.remove_keyword("divine_shield")
            return 0
        dealt = min(amount, self.health)
        self.health -= dealt
        self.damage_taken_this_turn += dealt
        return dealt

    def heal(self, amount: int) -> int:
        if amount <= 0:
            return 0
        healed = min(amount, self.max_health - self.health)
        self.health += healed
        return healed

    def buff(self, attack_delta: int = 0, health_delta: int = 0, duration: int = -1) -> None:
        if attack_delta:
            self.attack += attack_delta
            self.modifiers.append(Modifier(stat="attack", amount=attack_delta, turns_remaining=duration))
        if health_delta:
            self.max_health += health_delta
            self.health += health_delta
            if self.health > self.max_health:
                self.health = self.max_health
            self.modifiers.append(Modifier(stat="health", amount=health_delta, turns_remaining=duration))

    def set_attack(self, value: int) -> None:
        self.attack = max(0, value)

    def set_health(self, value: int) -> None:
        self.health = max(0, value)
        self.max_health = max(self.max_health, value)

    def silence(self) -> None:
        self.keywords = set()
        self.abilities = []
        self.modifiers = []
        self.frozen = False
        self.silenced = True
        self.attack = self.base_attack
        self.max_health = self.base_health
        self.health = min(self.health, self.max_health)

    def freeze(self) -> None:
        self.frozen = True
        self.attack_ready = False

    def destroy(self) -> None:
        self.destroyed = True

    def start_turn(self) -> None:
        """Owner's turn begins: clear summoning sickness and per-turn counters."""
        self.times_attacked_this_turn = 0
        self.damage_taken_this_turn = 0
        self.damage_dealt_this_turn = 0
        if self.frozen:
            # Sit this turn out; the freeze is used up.
            self.frozen = False
            self.attack_ready = False
            self.state = "sleeping"
        else:
            self.attack_ready = True
            self.state = "ready"
        self._tick_modifiers()

    def _tick_modifiers(self) -> None:
        kept: list[Modifier] = []
        for m in self.modifiers:
            if m.turns_remaining > 0:
                m.turns_remaining -= 1
            if m.turns_remaining == 0:
                self._revert(m)
            else:
                kept.append(m)
        self.modifiers = kept

    def _revert(self, m: Modifier) -> None:
        if m.stat == "attack":
            self.attack = max(0, self.attack - m.amount)
        else:
            self.max_health -= m.amount
            self.health = min(self.health, self.max_health)

    def __str__(self) -> str:
        state_info = "" if self.display_state == "ready" else f" ({self.display_state})"
        kw_info = f" [{', '.join(sorted(self.keywords))}]" if self.keywords else ""
        return f"{self.name} [{self.attack}/{self.health}]{state_info}{kw_info}"
