"""DB service layer for squad-building use cases.

- Routers and builder sessions do not touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- A squad is only written after validate_squad passes.
"""

import logging
from typing import Iterable, List, Mapping
from uuid import UUID

from uuid6 import uuid7

from src.converter import DataConverter
from src.crud import CreateData, ReadData, UpdateData
from src.db import Session
from src.domain.cards import Card
from src.domain.exceptions import IncompleteSquad
from src.domain.formations import get_formation
from src.domain.squad_assignment import SquadAssignment
from src.domain.squad_rules import validate_squad
from src.models.schema_models import CardSchema, SquadSchema, UserCardSchema

data_converter = DataConverter()


class SquadStorageError(RuntimeError):
    """The storage collaborator failed; the caller may retry the save."""


async def read_cards_by_ids(card_ids: Iterable[UUID]) -> List[Card]:
    async with Session() as session:
        cards = await ReadData.read_cards_by_ids(card_ids, session)
    if cards is None:
        raise SquadStorageError("Failed to read card data")
    return [data_converter.convert_cardschema_to_card(card) for card in cards]


async def read_owned_cards(user_id: UUID) -> List[Card]:
    """Cards a user owns, in acquisition order, each card id once."""
    async with Session() as session:
        user_cards = await ReadData.read_user_cards(user_id, session)
    if user_cards is None:
        raise SquadStorageError("Failed to read user cards")

    owned = {}
    for user_card in user_cards:
        if user_card.card is None:
            logging.warning(f"user_cards row {user_card.user_card_id} points at missing card {user_card.card_id}")
            continue
        owned.setdefault(user_card.card_id, data_converter.convert_cardschema_to_card(user_card.card))
    return list(owned.values())


async def read_user_card_ids(user_id: UUID) -> List[UUID]:
    async with Session() as session:
        card_ids = await ReadData.read_user_card_ids(user_id, session)
    if card_ids is None:
        raise SquadStorageError("Failed to read user card ids")
    return card_ids


async def count_cards() -> int:
    async with Session() as session:
        total = await ReadData.count_cards(session)
    if total is None:
        raise SquadStorageError("Failed to count cards")
    return total


async def read_squad(squad_id: UUID) -> SquadSchema | None:
    """Stored squad, None when it does not exist.

    Raises:
        SquadStorageError: the read failed, retry by calling again
    """
    try:
        async with Session() as session:
            return await ReadData.read_squad_data(squad_id, session)
    except Exception as e:
        raise SquadStorageError("Failed to read squad data") from e


async def read_active_squad(user_id: UUID) -> SquadSchema | None:
    try:
        async with Session() as session:
            return await ReadData.read_active_squad(user_id, session)
    except Exception as e:
        raise SquadStorageError("Failed to read active squad data") from e


async def create_card_data(card: CardSchema) -> None:
    async with Session() as session:
        success = await CreateData.create_card_data(card, session)
        if not success:
            raise SquadStorageError("Failed to create card data")


async def grant_card(user_id: UUID, card_id: UUID) -> None:
    user_card = UserCardSchema(user_card_id=uuid7(), user_id=user_id, card_id=card_id)
    async with Session() as session:
        success = await CreateData.create_user_card_data(user_card, session)
        if not success:
            raise SquadStorageError("Failed to create user card data")


async def save_squad(
    user_id: UUID,
    formation_id: str,
    positions: Mapping[str, UUID],
    active: bool = True,
) -> SquadSchema:
    """Validate and persist a squad.

    The assignment is rebuilt through SquadAssignment so unknown slots and
    duplicate cards are rejected, then checked for completeness. Nothing is
    written unless both pass.

    Args:
        user_id (UUID): Owner of the squad
        formation_id (str): Formation the slots belong to
        positions (Mapping[str, UUID]): slot_id -> card_id
        active (bool): Make this the user's active squad

    Raises:
        UnknownFormation: formation_id is not in the catalog
        SlotNotInFormation: a slot id does not belong to the formation
        DuplicateCardAssignment: a card is placed twice
        IncompleteSquad: fewer than eleven slots are filled
        SquadStorageError: the write failed, retry by calling again

    Returns:
        SquadSchema: The stored squad
    """
    formation = get_formation(formation_id)
    assignment = SquadAssignment(formation, positions)
    completeness = validate_squad(assignment.positions, formation)
    if not completeness.is_complete:
        raise IncompleteSquad(completeness.filled_count, completeness.required_count)

    squad = SquadSchema(
        squad_id=uuid7(),
        user_id=user_id,
        formation_id=formation.formation_id,
        positions=assignment.positions,
        active=active,
    )
    try:
        async with Session() as session:
            async with session.begin():
                if active:
                    await UpdateData.deactivate_user_squads(user_id, session)
                await CreateData.add_squad_data(squad, session)
    except Exception as e:
        logging.error(f"Failed to save squad for user {user_id}: {e}")
        raise SquadStorageError("Failed to save squad data") from e

    logging.info(f"Saved squad {squad.squad_id} ({formation.formation_id}) for user {user_id}")
    stored = await read_squad(squad.squad_id)
    if stored is None:
        raise SquadStorageError(f"Saved squad {squad.squad_id} could not be read back")
    return stored
