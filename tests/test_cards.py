from __future__ import annotations

from spiresmiths.engine.types import (
    Ability,
    CardDatabase,
    CreatureCard,
    SummonEffect,
    chosen_target_kinds,
    requires_target,
    validate_card,
)

ORIGINAL_CARDS = [
    "fire_elemental",
    "water_spirit",
    "earth_guardian",
    "air_djinn",
    "arcane_dragon",
    "lightning_bolt",
    "healing_light",
    "fireball",
    "meteor",
    "iron_sword",
    "flame_sword",
    "novice_warrior",
    "apprentice_mage",
    "village_guard",
    "swift_scout",
    "magic_missile",
    "minor_healing",
]


def test_catalog_contains_core_and_basic_sets(cards: CardDatabase) -> None:
    for cid in ORIGINAL_CARDS:
        assert cards.find(cid) is not None, cid
    assert {c.id for c in cards.by_set("basic")} == {
        "novice_warrior",
        "apprentice_mage",
        "village_guard",
        "swift_scout",
        "magic_missile",
        "minor_healing",
    }
    assert cards.validate() == []


def test_card_stats_parsed(cards: CardDatabase) -> None:
    dragon = cards.get("arcane_dragon")
    assert isinstance(dragon, CreatureCard)
    assert (dragon.cost, dragon.attack, dragon.health) == (8, 8, 8)
    assert dragon.rarity == "legendary"
    assert dragon.keywords == ("spell_damage",)

    djinn = cards.get("air_djinn")
    assert set(djinn.keywords) == {"charge", "windfury"}


def test_validate_card_reports_problems() -> None:
    bad = CreatureCard(type="creature", id="bad", name="", cost=-1, rarity="common", attack=1, health=0)
    errors = validate_card(bad)
    assert "Card name cannot be empty" in errors
    assert "Card cost cannot be negative" in errors
    assert any("Creature stats" in e for e in errors)


def test_target_requirements(cards: CardDatabase) -> None:
    assert requires_target(cards.get("fireball"))
    assert not requires_target(cards.get("arcane_intellect"))
    # Creature battlecries never force a target.
    assert not requires_target(cards.get("battle_medic"))
    assert chosen_target_kinds(cards.get("battle_medic")) == ["friendly_character"]
    assert chosen_target_kinds(cards.get("frost_bolt")) == ["enemy_creature"]
    assert chosen_target_kinds(cards.get("meteor")) == []


def test_filter_and_search(cards: CardDatabase) -> None:
    cheap = cards.filter(card_type="creature", max_cost=1)
    assert {c.id for c in cheap} >= {"novice_warrior", "ember_imp"}
    assert all(c.cost <= 1 and c.type == "creature" for c in cheap)

    collectible = {c.id for c in cards.filter(collectible_only=True)}
    assert "spirit_wolf" not in collectible
    assert "wolf_caller" in collectible

    taunts = {c.id for c in cards.filter(keywords=["taunt"])}
    assert taunts == {"earth_guardian", "village_guard"}

    assert {c.id for c in cards.search("sword")} == {"iron_sword", "flame_sword"}


def test_statistics_counts_every_card(cards: CardDatabase) -> None:
    stats = cards.statistics()
    assert stats["total_cards"] == len(cards.all_ids())
    by_type = stats["by_type"]
    assert isinstance(by_type, dict)
    assert by_type["weapon"] == 2


def test_database_validate_flags_unknown_summon_token() -> None:
    caller = CreatureCard(
        type="creature",
        id="caller",
        name="Caller",
        cost=2,
        rarity="common",
        attack=1,
        health=1,
        abilities=(
            Ability(
                id="call",
                name="Call",
                trigger="battlecry",
                effects=(SummonEffect(type="summon", token_card_id="ghost", count=1),),
            ),
        ),
    )
    db = CardDatabase(cards={"caller": caller})
    errors = db.validate()
    assert len(errors) == 1
    assert "ghost" in errors[0]
