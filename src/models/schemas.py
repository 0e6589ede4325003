from sqlalchemy import JSON
from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column
from sqlalchemy.types import Boolean, Integer, String, Uuid, DateTime, TEXT
from sqlalchemy.dialects.postgresql import JSONB
from uuid6 import uuid7
from datetime import datetime


class Base(DeclarativeBase):
    pass


class Card(Base):
    __tablename__ = "cards"
    card_id = Column(Uuid, primary_key=True, default=uuid7)
    name = Column(String, nullable=False)
    character_type = Column(String, nullable=True)
    position = Column(String, nullable=False)
    rarity = Column(String, nullable=False, default="common")
    attack = Column(Integer, nullable=False)
    control = Column(Integer, nullable=False)
    defense = Column(Integer, nullable=False)
    lore = Column(TEXT, nullable=True)
    image_url = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.now)

    owners = relationship(
        "UserCard",
        primaryjoin="Card.card_id == foreign(UserCard.card_id)",
        back_populates="card",
    )


class UserCard(Base):
    __tablename__ = "user_cards"
    user_card_id = Column(Uuid, primary_key=True, default=uuid7)
    user_id = Column(Uuid, nullable=False, index=True)
    card_id = Column(Uuid, nullable=False)
    acquired_at = Column(DateTime, default=datetime.now)

    card = relationship(
        "Card",
        primaryjoin="foreign(UserCard.card_id) == Card.card_id",
        back_populates="owners",
    )


class Squad(Base):
    __tablename__ = "squads"
    squad_id = Column(Uuid, primary_key=True, default=uuid7)
    user_id = Column(Uuid, nullable=False, index=True)
    formation_id = Column(String, nullable=False)
    # {slot_id: card_id}, JSONB on PostgreSQL
    positions = Column(JSON().with_variant(JSONB(), "postgresql"), nullable=False)
    active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)
