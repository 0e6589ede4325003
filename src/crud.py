from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload
from typing import Iterable, List
from uuid import UUID
import logging

from src.models.schema_models import (
    CardSchema,
    SquadSchema,
    UserCardSchema,
)
from src.models.schemas import (
    Base,
    Card,
    Squad,
    UserCard,
)


def _positions_to_json(positions: dict) -> dict:
    return {slot_id: str(card_id) for slot_id, card_id in positions.items()}


class CreateData:
    @staticmethod
    async def create_table(engine) -> None:
        """Create table if not exists"""
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        except IntegrityError as e:
            logging.warning(f"Table already exists or other integrity error: {e}")

    @staticmethod
    async def create_card_data(card: CardSchema, session: AsyncSession) -> bool:
        """Create card data

        Args:
            card (CardSchema): Card with base stats, position and rarity
        """
        async with session:
            try:
                new_card = Card(
                    card_id=card.card_id,
                    name=card.name,
                    character_type=card.character_type,
                    position=card.position,
                    rarity=card.rarity,
                    attack=card.attack,
                    control=card.control,
                    defense=card.defense,
                    lore=card.lore,
                    image_url=card.image_url,
                )
                session.add(new_card)
                await session.commit()
                return True
            except Exception as e:
                logging.error(f"Failed to create card data: {e}")
                await session.rollback()
                return False

    @staticmethod
    async def create_user_card_data(user_card: UserCardSchema, session: AsyncSession) -> bool:
        """Grant a card to a user

        Args:
            user_card (UserCardSchema): Ownership row
        """
        async with session:
            try:
                new_user_card = UserCard(
                    user_card_id=user_card.user_card_id,
                    user_id=user_card.user_id,
                    card_id=user_card.card_id,
                )
                if user_card.acquired_at is not None:
                    new_user_card.acquired_at = user_card.acquired_at
                session.add(new_user_card)
                await session.commit()
                return True
            except Exception as e:
                logging.error(f"Failed to create user card data: {e}")
                await session.rollback()
                return False

    @staticmethod
    async def add_squad_data(squad: SquadSchema, session: AsyncSession) -> None:
        """Add squad data without committing.

        The caller owns the transaction (session.begin()).
        """
        new_squad = Squad(
            squad_id=squad.squad_id,
            user_id=squad.user_id,
            formation_id=squad.formation_id,
            positions=_positions_to_json(squad.positions),
            active=squad.active,
        )
        session.add(new_squad)
        await session.flush()


class ReadData:
    @staticmethod
    async def read_cards_by_ids(card_ids: Iterable[UUID], session: AsyncSession) -> List[CardSchema]:
        """Read card details for a set of card ids

        Args:
            card_ids (Iterable[UUID]): Card ids, duplicates are ignored

        Returns:
            List[CardSchema]: Cards found, missing ids are simply absent
        """
        unique_ids = list(dict.fromkeys(card_ids))
        if not unique_ids:
            return []
        async with session:
            try:
                stmt = select(Card).where(Card.card_id.in_(unique_ids))
                result = await session.execute(stmt)
                return [CardSchema.model_validate(card) for card in result.scalars().all()]
            except Exception as e:
                logging.error(f"Failed to read card data: {e}")
                return None

    @staticmethod
    async def count_cards(session: AsyncSession) -> int:
        async with session:
            try:
                result = await session.execute(select(func.count()).select_from(Card))
                return result.scalar_one()
            except Exception as e:
                logging.error(f"Failed to count card data: {e}")
                return None

    @staticmethod
    async def read_user_card_ids(user_id: UUID, session: AsyncSession) -> List[UUID]:
        """Read the ids of every card a user owns, in acquisition order"""
        async with session:
            try:
                stmt = (
                    select(UserCard.card_id)
                    .where(UserCard.user_id == user_id)
                    .order_by(UserCard.acquired_at, UserCard.user_card_id)
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
            except Exception as e:
                logging.error(f"Failed to read user card ids: {e}")
                return None

    @staticmethod
    async def read_user_cards(user_id: UUID, session: AsyncSession) -> List[UserCardSchema]:
        """Read a user's collection joined with the card rows

        Args:
            user_id (UUID): Owner of the collection

        Returns:
            List[UserCardSchema]: Ownership rows in acquisition order
        """
        async with session:
            try:
                stmt = (
                    select(UserCard)
                    .options(joinedload(UserCard.card))
                    .where(UserCard.user_id == user_id)
                    .order_by(UserCard.acquired_at, UserCard.user_card_id)
                )
                result = await session.execute(stmt)
                return [
                    UserCardSchema.model_validate(user_card)
                    for user_card in result.scalars().all()
                ]
            except Exception as e:
                logging.error(f"Failed to read user cards: {e}")
                return None

    @staticmethod
    async def read_squad_data(squad_id: UUID, session: AsyncSession) -> SquadSchema:
        """Read one squad, None when it does not exist. Read failures propagate."""
        async with session:
            try:
                stmt = select(Squad).where(Squad.squad_id == squad_id)
                result = await session.execute(stmt)
                result = result.scalars().first()

                if result is None:
                    return None

                return SquadSchema.model_validate(result)
            except Exception as e:
                logging.error(f"Failed to read squad data: {e}")
                raise

    @staticmethod
    async def read_active_squad(user_id: UUID, session: AsyncSession) -> SquadSchema:
        """Read the user's active squad, the most recently created one wins"""
        async with session:
            try:
                stmt = (
                    select(Squad)
                    .where(Squad.user_id == user_id, Squad.active.is_(True))
                    .order_by(Squad.created_at.desc(), Squad.squad_id.desc())
                    .limit(1)
                )
                result = await session.execute(stmt)
                result = result.scalars().first()

                if result is None:
                    return None

                return SquadSchema.model_validate(result)
            except Exception as e:
                logging.error(f"Failed to read active squad data: {e}")
                raise


class UpdateData:
    @staticmethod
    async def deactivate_user_squads(user_id: UUID, session: AsyncSession) -> None:
        """Mark every squad of the user inactive without committing."""
        stmt = (
            update(Squad)
            .where(Squad.user_id == user_id, Squad.active.is_(True))
            .values(active=False)
        )
        await session.execute(stmt)
