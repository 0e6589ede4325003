from pydantic import BaseModel, Field
from typing import Dict, Optional
from uuid import UUID
from datetime import datetime


class CardSchema(BaseModel):
    card_id: UUID
    name: str
    character_type: Optional[str] = None
    position: str
    rarity: str
    attack: int = Field(ge=0, le=100)
    control: int = Field(ge=0, le=100)
    defense: int = Field(ge=0, le=100)
    lore: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class UserCardSchema(BaseModel):
    user_card_id: UUID
    user_id: UUID
    card_id: UUID
    acquired_at: Optional[datetime] = None
    card: Optional[CardSchema] = None

    class Config:
        from_attributes = True


class SquadSchema(BaseModel):
    squad_id: UUID
    user_id: UUID
    formation_id: str
    positions: Dict[str, UUID]
    active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
