from __future__ import annotations

from spiresmiths.engine.creature import CreatureInstance
from spiresmiths.engine.player import MAX_BATTLEFIELD_SIZE, MAX_HAND_SIZE, PlayerState
from spiresmiths.engine.types import CardDatabase, CreatureCard


def _player(cards: CardDatabase, pile: list[str]) -> PlayerState:
    return PlayerState(player_id="p", name="P", draw_pile=[cards.get(cid) for cid in pile])


def test_draws_come_from_the_front(cards: CardDatabase) -> None:
    p = _player(cards, ["fireball", "meteor", "novice_warrior"])
    first = p.draw_card()
    second = p.draw_card()
    assert first.outcome == "drawn"
    assert first.card is not None and first.card.id == "fireball"
    assert second.card is not None and second.card.id == "meteor"
    assert [c.id for c in p.hand] == ["fireball", "meteor"]
    assert len(p.draw_pile) == 1


def test_fatigue_escalates(cards: CardDatabase) -> None:
    p = _player(cards, [])
    damages = [p.draw_card().fatigue_damage for _ in range(3)]
    assert damages == [1, 2, 3]
    assert p.fatigue == 3
    assert p.health == 30 - 6
    assert p.hand == []


def test_full_hand_burns_card(cards: CardDatabase) -> None:
    p = _player(cards, ["fireball"])
    p.hand = [cards.get("novice_warrior")] * MAX_HAND_SIZE
    result = p.draw_card()
    assert result.outcome == "burned"
    assert result.card is not None and result.card.id == "fireball"
    assert len(p.hand) == MAX_HAND_SIZE
    assert p.draw_pile == []


def test_three_big_hits_kill(cards: CardDatabase) -> None:
    p = _player(cards, [])
    for _ in range(3):
        p.take_damage(10)
    assert p.health == 0
    assert p.is_dead()
    assert p.take_damage(5) == 0


def test_mana_ramp_caps_at_ten(cards: CardDatabase) -> None:
    p = _player(cards, [])
    for _ in range(12):
        p.increase_max_mana()
    p.refresh_mana()
    assert p.max_mana == 10
    assert p.mana == 10
    assert p.spend_mana(7)
    assert not p.spend_mana(4)
    assert p.mana == 3
    p.gain_mana(20)
    assert p.mana == 10


def test_battlefield_capacity_and_positions(cards: CardDatabase) -> None:
    p = _player(cards, [])
    card = cards.get("novice_warrior")
    assert isinstance(card, CreatureCard)
    for i in range(MAX_BATTLEFIELD_SIZE):
        assert p.add_to_battlefield(CreatureInstance.from_card(card, f"c{i}"))
    assert p.is_battlefield_full()
    assert not p.add_to_battlefield(CreatureInstance.from_card(card, "extra"))

    removed = p.remove_from_battlefield("c3")
    assert removed is not None
    assert p.add_to_battlefield(CreatureInstance.from_card(card, "front"), position=0)
    assert p.battlefield[0].instance_id == "front"
    assert p.get_creature("c3") is None


def test_heal_and_hand_helpers(cards: CardDatabase) -> None:
    p = _player(cards, [])
    p.take_damage(4)
    assert p.heal(10) == 4
    assert p.health == 30

    p.add_to_hand(cards.get("fireball"))
    p.add_to_hand(cards.get("magic_missile"))
    p.mana = 1
    assert [c.id for c in p.playable_cards()] == ["magic_missile"]
    assert p.can_play_any_card()
    p.mana = 0
    assert p.can_play_any_card()
    p.remove_card_from_hand("magic_missile")
    assert not p.can_play_any_card()
    assert p.find_in_hand("fireball") == 0
    removed = p.remove_card_from_hand("fireball")
    assert removed is not None and removed.id == "fireball"
    assert p.find_in_hand("fireball") is None


def test_taunt_ignores_stealthed_creatures(cards: CardDatabase) -> None:
    p = _player(cards, [])
    guard = cards.get("village_guard")
    assert isinstance(guard, CreatureCard)
    inst = CreatureInstance.from_card(guard, "g")
    p.add_to_battlefield(inst)
    assert p.has_taunt()
    inst.add_keyword("stealth")
    assert not p.has_taunt()
