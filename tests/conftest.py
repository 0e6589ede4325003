from uuid import uuid4

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from src.domain.cards import Card
from src.domain.formations import Formation
from src.models.schemas import Base
from src.services import squad_db


@pytest.fixture
def make_card():
    def _make_card(position, attack=80, control=80, defense=80, name=None, rarity="common"):
        return Card(
            card_id=uuid4(),
            name=name or f"{position} card",
            position=position,
            rarity=rarity,
            attack=attack,
            control=control,
            defense=defense,
        )

    return _make_card


@pytest.fixture
def perfect_squad(make_card):
    """Eleven cards whose positions match every slot of a formation exactly."""

    def _perfect_squad(formation: Formation, attack=80, control=80, defense=80):
        positions, cards = {}, {}
        for slot in formation.slots:
            card = make_card(slot.position.value, attack, control, defense, name=f"{slot.slot_id} player")
            positions[slot.slot_id] = card.card_id
            cards[card.card_id] = card
        return positions, cards

    return _perfect_squad


@pytest_asyncio.fixture
async def session_factory(tmp_path, monkeypatch):
    """Point the service layer at a throwaway SQLite database."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'squads.sqlite3'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(
        class_=AsyncSession, autoflush=True, expire_on_commit=False, bind=engine
    )
    monkeypatch.setattr(squad_db, "Session", factory)
    yield factory
    await engine.dispose()
