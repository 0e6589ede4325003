from pydantic import BaseModel
from uuid import UUID
from typing import Optional, Dict, List

from src.domain.chemistry_rules import ChemistryTier
from src.models.schema_models import CardSchema


class SlotModel(BaseModel):
    slot_id: str
    position: str
    x: int
    y: int


class FormationModel(BaseModel):
    formation_id: str
    slots: List[SlotModel]


class CardStatsModel(BaseModel):
    attack: int
    control: int
    defense: int

    class Config:
        from_attributes = True


class CandidateCardModel(BaseModel):
    card: CardSchema
    chemistry: ChemistryTier
    stats: CardStatsModel
    rating: int


class SquadAssignmentModel(BaseModel):
    formation_id: str
    positions: Dict[str, UUID] = {}  # slot_id -> card_id


class SquadSaveModel(SquadAssignmentModel):
    active: bool = True


class SlotEvaluationModel(BaseModel):
    slot_id: str
    required_position: str
    card_id: Optional[UUID] = None
    chemistry: Optional[ChemistryTier] = None
    stats: Optional[CardStatsModel] = None
    rating: Optional[int] = None


class SquadStatsModel(BaseModel):
    formation_id: str
    rating: int
    chemistry: int
    stars: int
    filled_count: int
    required_count: int
    is_complete: bool
    slots: List[SlotEvaluationModel]


class CollectionModel(BaseModel):
    owned_count: int
    total_count: int
    completion: int  # percent of the catalog owned
    cards: List[CardSchema]
