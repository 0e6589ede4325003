import json
from uuid import uuid4

import pytest
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.converter import DataConverter
from src.crud import CreateData
from src.domain.exceptions import DuplicateCardAssignment, IncompleteSquad, UnknownFormation
from src.domain.formations import get_formation
from src.domain.squad_rules import validate_squad
from src.models.schema_models import CardSchema
from src.seed_cards import load_cards
from src.services import squad_db
from src.services.squad_builder import SquadBuilderSession

data_converter = DataConverter()


async def store_cards(user_id, cards):
    for card in cards:
        await squad_db.create_card_data(data_converter.convert_card_to_cardschema(card))
        await squad_db.grant_card(user_id, card.card_id)


async def test_cards_by_id_set_ignores_duplicates_and_missing(session_factory, make_card):
    user_id = uuid4()
    striker, keeper = make_card("ST", name="Ajax"), make_card("GK", name="Atlas")
    await store_cards(user_id, [striker, keeper])

    cards = await squad_db.read_cards_by_ids([striker.card_id, striker.card_id, uuid4()])

    assert [card.name for card in cards] == ["Ajax"]
    assert await squad_db.read_cards_by_ids([]) == []


async def test_owned_cards_keep_acquisition_order(session_factory, make_card):
    user_id, other_user = uuid4(), uuid4()
    cards = [make_card("ST", name=f"card {i}") for i in range(4)]
    await store_cards(user_id, cards[:3])
    await store_cards(other_user, cards[3:])
    await squad_db.grant_card(user_id, cards[0].card_id)  # second copy

    owned = await squad_db.read_owned_cards(user_id)

    assert [card.name for card in owned] == ["card 0", "card 1", "card 2"]
    assert await squad_db.read_user_card_ids(user_id) == [
        cards[0].card_id, cards[1].card_id, cards[2].card_id, cards[0].card_id
    ]
    assert await squad_db.count_cards() == 4


async def test_card_positions_are_normalized(session_factory, make_card):
    card = make_card("st", name="lowercase")
    await store_cards(uuid4(), [card])

    [loaded] = await squad_db.read_cards_by_ids([card.card_id])
    assert loaded.position == "ST"


async def test_save_and_reload_round_trip(session_factory, perfect_squad, make_card):
    user_id = uuid4()
    formation = get_formation("4-3-3")
    positions, cards = perfect_squad(formation, 85, 75, 65)
    # one winger on the wrong flank
    swapped = make_card("LW", 90, 90, 90, name="Swapped")
    cards[swapped.card_id] = swapped
    del cards[positions["RW"]]
    positions["RW"] = swapped.card_id
    await store_cards(user_id, cards.values())

    builder = SquadBuilderSession(user_id, "4-3-3")
    for slot_id, card_id in positions.items():
        await builder.place_card(slot_id, card_id)
    rating, chemistry = builder.rating(), builder.chemistry()
    saved = await builder.save()

    stored = await squad_db.read_squad(saved.squad_id)
    assert stored.formation_id == "4-3-3"
    assert stored.positions == positions
    assert stored.active

    reloaded = SquadBuilderSession.from_squad(stored)
    assert await reloaded.load_card_details() == 11
    assert validate_squad(stored.positions, formation).is_complete
    assert reloaded.rating() == rating == 74  # (10 * 75 + 67) / 11
    assert reloaded.chemistry() == chemistry == 91


async def test_incomplete_squad_is_never_written(session_factory, perfect_squad):
    user_id = uuid4()
    formation = get_formation("4-4-2")
    positions, _ = perfect_squad(formation)
    del positions["ST2"]

    with pytest.raises(IncompleteSquad) as exc_info:
        await squad_db.save_squad(user_id, "4-4-2", positions)

    assert exc_info.value.filled_count == 10
    assert str(exc_info.value) == "need 11, have 10"
    assert await squad_db.read_active_squad(user_id) is None


async def test_rule_errors_are_raised_before_storage(session_factory, perfect_squad):
    user_id = uuid4()
    positions, _ = perfect_squad(get_formation("4-4-2"))
    positions["ST2"] = positions["ST1"]

    with pytest.raises(DuplicateCardAssignment):
        await squad_db.save_squad(user_id, "4-4-2", positions)
    with pytest.raises(UnknownFormation):
        await squad_db.save_squad(user_id, "4-6-0", positions)
    assert await squad_db.read_active_squad(user_id) is None


async def test_saving_a_new_active_squad_deactivates_the_old_one(session_factory, perfect_squad):
    user_id = uuid4()
    first_positions, _ = perfect_squad(get_formation("4-4-2"))
    second_positions, _ = perfect_squad(get_formation("3-5-2"))

    first = await squad_db.save_squad(user_id, "4-4-2", first_positions)
    second = await squad_db.save_squad(user_id, "3-5-2", second_positions)

    active = await squad_db.read_active_squad(user_id)
    assert active.squad_id == second.squad_id
    assert (await squad_db.read_squad(first.squad_id)).active is False


async def test_storage_failure_is_reported_as_retryable(session_factory, perfect_squad, monkeypatch):
    user_id = uuid4()
    positions, _ = perfect_squad(get_formation("4-4-2"))

    async def broken_add(squad, session):
        raise OSError("connection reset")

    monkeypatch.setattr(CreateData, "add_squad_data", broken_add)

    with pytest.raises(squad_db.SquadStorageError):
        await squad_db.save_squad(user_id, "4-4-2", positions)
    assert await squad_db.read_active_squad(user_id) is None


async def test_squad_read_failure_is_not_reported_as_missing(session_factory, monkeypatch):
    async def unreachable(*args, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr(AsyncSession, "execute", unreachable)

    with pytest.raises(squad_db.SquadStorageError):
        await squad_db.read_squad(uuid4())
    with pytest.raises(squad_db.SquadStorageError):
        await squad_db.read_active_squad(uuid4())


def test_card_stats_outside_0_100_are_rejected(make_card):
    with pytest.raises(ValidationError):
        CardSchema(card_id=uuid4(), name="Broken", position="ST", rarity="rare",
                   attack=150, control=-5, defense=80)
    with pytest.raises(ValidationError):
        data_converter.convert_card_to_cardschema(make_card("ST", 101, 80, 80))

    edge = CardSchema(card_id=uuid4(), name="Edge", position="GK", rarity="common",
                      attack=0, control=100, defense=100)
    assert (edge.attack, edge.control, edge.defense) == (0, 100, 100)


def test_seed_file_with_out_of_range_stats_is_rejected(tmp_path):
    seed_file = tmp_path / "cards.json"
    seed_file.write_text(json.dumps([
        {"name": "Fine", "position": "ST", "rarity": "common", "attack": 70, "control": 60, "defense": 40},
        {"name": "Broken", "position": "CB", "rarity": "epic", "attack": 80, "control": -1, "defense": 90},
    ]))

    with pytest.raises(ValidationError):
        load_cards(seed_file)
