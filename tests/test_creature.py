from __future__ import annotations

from spiresmiths.engine.creature import CreatureInstance
from spiresmiths.engine.types import CardDatabase, CreatureCard


def _spawn(cards: CardDatabase, card_id: str, instance_id: str = "c1") -> CreatureInstance:
    card = cards.get(card_id)
    assert isinstance(card, CreatureCard)
    return CreatureInstance.from_card(card, instance_id)


def test_divine_shield_absorbs_first_hit() -> None:
    card = CreatureCard(
        type="creature",
        id="bastion",
        name="Bastion",
        cost=6,
        rarity="rare",
        attack=2,
        health=8,
        keywords=("divine_shield",),
    )
    c = CreatureInstance.from_card(card, "b1")

    assert c.take_damage(5) == 0
    assert c.health == 8
    assert not c.has("divine_shield")

    assert c.take_damage(5) == 5
    assert c.health == 3
    assert c.is_alive()


def test_shield_bearer_breaks_then_dies(cards: CardDatabase) -> None:
    c = _spawn(cards, "shield_bearer")
    assert c.has("divine_shield")
    assert c.take_damage(1) == 0
    assert c.health == 3
    assert c.take_damage(5) == 3
    assert c.is_dead()


def test_zero_damage_keeps_divine_shield(cards: CardDatabase) -> None:
    c = _spawn(cards, "shield_bearer")
    assert c.take_damage(0) == 0
    assert c.has("divine_shield")


def test_silence_reverts_buffs(cards: CardDatabase) -> None:
    c = _spawn(cards, "grave_keeper")
    assert (c.attack, c.health) == (2, 2)
    c.buff(attack_delta=3, health_delta=3)
    assert (c.attack, c.health, c.max_health) == (5, 5, 5)

    c.silence()
    assert (c.attack, c.health, c.max_health) == (2, 2, 2)
    assert c.abilities == []
    assert c.silenced
    assert c.display_state in ("summoned", "silenced")


def test_silence_keeps_damage(cards: CardDatabase) -> None:
    c = _spawn(cards, "earth_guardian")
    c.take_damage(4)
    c.silence()
    assert c.health == 2
    assert not c.has("taunt")


def test_summoning_sickness_and_charge(cards: CardDatabase) -> None:
    plain = _spawn(cards, "fire_elemental")
    assert plain.state == "summoned"
    assert not plain.can_attack()
    plain.start_turn()
    assert plain.can_attack()

    scout = _spawn(cards, "swift_scout")
    assert scout.state == "ready"
    assert scout.can_attack()


def test_single_attack_per_turn(cards: CardDatabase) -> None:
    c = _spawn(cards, "fire_elemental")
    c.start_turn()
    assert c.declare_attack()
    assert c.state == "attacked"
    assert not c.declare_attack()
    c.start_turn()
    assert c.can_attack()


def test_windfury_attacks_twice(cards: CardDatabase) -> None:
    c = _spawn(cards, "air_djinn")
    assert c.declare_attack()
    assert c.state == "ready"
    assert c.declare_attack()
    assert c.state == "exhausted"
    assert not c.can_attack()


def test_freeze_skips_next_attack_window(cards: CardDatabase) -> None:
    c = _spawn(cards, "fire_elemental")
    c.start_turn()
    c.freeze()
    assert not c.can_attack()
    assert c.display_state == "frozen"

    c.start_turn()
    assert not c.frozen
    assert c.state == "sleeping"
    assert not c.can_attack()

    c.start_turn()
    assert c.can_attack()


def test_timed_buff_expires(cards: CardDatabase) -> None:
    c = _spawn(cards, "fire_elemental")
    c.buff(attack_delta=2, duration=1)
    assert c.attack == 5
    c.start_turn()
    assert c.attack == 3
    assert c.modifiers == []


def test_attacking_breaks_stealth(cards: CardDatabase) -> None:
    c = _spawn(cards, "shadow_stalker")
    c.start_turn()
    assert c.has("stealth")
    c.declare_attack()
    assert not c.has("stealth")


def test_heal_is_clamped(cards: CardDatabase) -> None:
    c = _spawn(cards, "earth_guardian")
    c.take_damage(2)
    assert c.heal(10) == 2
    assert c.health == 6
    assert str(c).startswith("Earth Guardian [2/6]")


def test_set_stats_directly(cards: CardDatabase) -> None:
    c = _spawn(cards, "water_spirit")
    c.set_attack(4)
    c.set_health(6)
    assert (c.attack, c.health, c.max_health) == (4, 6, 6)

    c.set_health(2)
    assert (c.health, c.max_health) == (2, 6)
    c.set_attack(-3)
    assert c.attack == 0
