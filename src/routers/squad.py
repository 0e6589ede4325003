import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Query, status, HTTPException

from src.converter import DataConverter
from src.domain.cards import sort_by_rarity
from src.domain.exceptions import (
    DuplicateCardAssignment,
    IncompleteSquad,
    SlotNotInFormation,
    SquadRuleError,
    UnknownFormation,
)
from src.domain.formations import get_formation
from src.domain.squad_rules import collection_completion, filter_by_position, rank_candidates
from src.models.dc_models import (
    CandidateCardModel,
    CollectionModel,
    SquadAssignmentModel,
    SquadSaveModel,
    SquadStatsModel,
)
from src.models.schema_models import SquadSchema
from src.services import squad_db
from src.services.squad_builder import SquadBuilderSession

squad_router = APIRouter()
data_converter = DataConverter()


def raise_http_error(error: Exception):
    """Translate squad rule and storage errors to HTTP errors

    Raises:
        HTTPException: Always
    """
    if isinstance(error, UnknownFormation):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))
    if isinstance(error, (SlotNotInFormation, DuplicateCardAssignment)):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, IncompleteSquad):
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(error))
    if isinstance(error, squad_db.SquadStorageError):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Storage unavailable, please retry",
        )
    raise error


async def evaluate_assignment(user_id: UUID, formation_id: str, positions: dict) -> SquadStatsModel:
    builder = SquadBuilderSession(user_id, formation_id)
    for slot_id, card_id in positions.items():
        builder.assignment.assign(slot_id, card_id)
    await builder.load_card_details()
    evaluation = builder.evaluate()
    builder.close()
    return data_converter.convert_evaluation_to_statsmodel(evaluation)


class CollectionAPI:
    @staticmethod
    @squad_router.get("/users/{user_id}/collection", response_model=CollectionModel)
    async def get_collection(user_id: UUID, position: Optional[str] = None):
        """Owned cards, rarest first. Completion always counts the whole collection."""
        try:
            owned_cards = await squad_db.read_owned_cards(user_id)
            total_count = await squad_db.count_cards()
        except squad_db.SquadStorageError as e:
            raise_http_error(e)
        return CollectionModel(
            owned_count=len(owned_cards),
            total_count=total_count,
            completion=collection_completion(len(owned_cards), total_count),
            cards=[
                data_converter.convert_card_to_cardschema(c)
                for c in sort_by_rarity(filter_by_position(owned_cards, position))
            ],
        )

    @staticmethod
    @squad_router.get("/users/{user_id}/candidates", response_model=List[CandidateCardModel])
    async def get_candidates(
        user_id: UUID,
        formation_id: str,
        slot_id: str,
        exclude: List[UUID] = Query(default=[]),
        search: Optional[str] = None,
        position: Optional[str] = None,
    ):
        """Owned cards for one slot, best chemistry first.

        `exclude` lists the cards already placed in other slots.
        """
        try:
            required_position = get_formation(formation_id).required_position(slot_id)
            owned_cards = await squad_db.read_owned_cards(user_id)
        except (SquadRuleError, squad_db.SquadStorageError) as e:
            raise_http_error(e)
        candidates = rank_candidates(
            owned_cards,
            required_position,
            exclude_card_ids=exclude,
            search=search,
            position_filter=position,
        )
        return [data_converter.convert_candidate_to_model(c) for c in candidates]


class SquadAPI:
    @staticmethod
    @squad_router.post("/users/{user_id}/squads/evaluate", response_model=SquadStatsModel)
    async def evaluate_squad(user_id: UUID, squad: SquadAssignmentModel):
        try:
            return await evaluate_assignment(user_id, squad.formation_id, squad.positions)
        except (SquadRuleError, squad_db.SquadStorageError) as e:
            raise_http_error(e)

    @staticmethod
    @squad_router.post(
        "/users/{user_id}/squads",
        response_model=SquadSchema,
        status_code=status.HTTP_201_CREATED,
    )
    async def save_squad(user_id: UUID, squad: SquadSaveModel):
        try:
            return await squad_db.save_squad(
                user_id, squad.formation_id, squad.positions, active=squad.active
            )
        except (SquadRuleError, squad_db.SquadStorageError) as e:
            logging.info(f"Rejected squad save for user {user_id}: {e}")
            raise_http_error(e)

    @staticmethod
    @squad_router.get("/users/{user_id}/squads/active", response_model=SquadSchema)
    async def get_active_squad(user_id: UUID):
        try:
            squad = await squad_db.read_active_squad(user_id)
        except squad_db.SquadStorageError as e:
            raise_http_error(e)
        if squad is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No active squad")
        return squad

    @staticmethod
    @squad_router.get("/squads/{squad_id}", response_model=SquadSchema)
    async def get_squad(squad_id: UUID):
        try:
            squad = await squad_db.read_squad(squad_id)
        except squad_db.SquadStorageError as e:
            raise_http_error(e)
        if squad is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Squad not found")
        return squad

    @staticmethod
    @squad_router.get("/squads/{squad_id}/stats", response_model=SquadStatsModel)
    async def get_squad_stats(squad_id: UUID):
        try:
            squad = await squad_db.read_squad(squad_id)
            if squad is None:
                raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Squad not found")
            return await evaluate_assignment(squad.user_id, squad.formation_id, squad.positions)
        except (SquadRuleError, squad_db.SquadStorageError) as e:
            raise_http_error(e)
