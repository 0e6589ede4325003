import logging
from typing import List

from fastapi import APIRouter, status, HTTPException

from src.converter import DataConverter
from src.domain.exceptions import UnknownFormation
from src.domain.formations import get_formation, list_formations
from src.models.dc_models import FormationModel

formation_router = APIRouter()
data_converter = DataConverter()


class FormationAPI:
    @staticmethod
    @formation_router.get("/formations", response_model=List[FormationModel])
    async def get_formations():
        return [data_converter.convert_formation_to_model(f) for f in list_formations()]

    @staticmethod
    @formation_router.get("/formations/{formation_id}", response_model=FormationModel)
    async def get_formation_detail(formation_id: str):
        try:
            formation = get_formation(formation_id)
        except UnknownFormation as e:
            logging.info(f"Formation lookup failed: {e}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        return data_converter.convert_formation_to_model(formation)
