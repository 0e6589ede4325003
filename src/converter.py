from typing import Optional

from src.domain.cards import Card
from src.domain.chemistry_rules import CardStats
from src.domain.formations import Formation, get_formation
from src.domain.squad_assignment import SquadAssignment
from src.domain.squad_rules import CandidateCard, SquadEvaluation
from src.models.dc_models import (
    CandidateCardModel,
    CardStatsModel,
    FormationModel,
    SlotEvaluationModel,
    SlotModel,
    SquadStatsModel,
)
from src.models.schema_models import CardSchema, SquadSchema


class DataConverter:
    """This class is used to convert data between storage schemas, domain records and client models."""

    def convert_cardschema_to_card(self, card: CardSchema) -> Card:
        """Convert a stored card row to the read-only domain record

        Positions are normalized to upper case so "st" and "ST" compare equal.
        """
        return Card(
            card_id=card.card_id,
            name=card.name,
            position=card.position.strip().upper(),
            rarity=card.rarity.strip().lower(),
            attack=card.attack,
            control=card.control,
            defense=card.defense,
            character_type=card.character_type,
            lore=card.lore,
            image_url=card.image_url,
        )

    def convert_card_to_cardschema(self, card: Card) -> CardSchema:
        return CardSchema(
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

    def convert_squadschema_to_assignment(self, squad: SquadSchema) -> SquadAssignment:
        """Rebuild an assignment from a stored squad.

        Raises:
            UnknownFormation: the stored formation id is no longer in the catalog
        """
        return SquadAssignment(get_formation(squad.formation_id), squad.positions)

    def convert_formation_to_model(self, formation: Formation) -> FormationModel:
        return FormationModel(
            formation_id=formation.formation_id,
            slots=[
                SlotModel(slot_id=slot.slot_id, position=slot.position.value, x=slot.x, y=slot.y)
                for slot in formation.slots
            ],
        )

    def _stats_model(self, stats: Optional[CardStats]) -> Optional[CardStatsModel]:
        if stats is None:
            return None
        return CardStatsModel(attack=stats.attack, control=stats.control, defense=stats.defense)

    def convert_candidate_to_model(self, candidate: CandidateCard) -> CandidateCardModel:
        return CandidateCardModel(
            card=self.convert_card_to_cardschema(candidate.card),
            chemistry=candidate.tier,
            stats=self._stats_model(candidate.stats),
            rating=candidate.rating,
        )

    def convert_evaluation_to_statsmodel(self, evaluation: SquadEvaluation) -> SquadStatsModel:
        return SquadStatsModel(
            formation_id=evaluation.formation_id,
            rating=evaluation.rating,
            chemistry=evaluation.chemistry,
            stars=evaluation.stars,
            filled_count=evaluation.completeness.filled_count,
            required_count=evaluation.completeness.required_count,
            is_complete=evaluation.completeness.is_complete,
            slots=[
                SlotEvaluationModel(
                    slot_id=slot.slot_id,
                    required_position=slot.required_position,
                    card_id=slot.card_id,
                    chemistry=slot.tier,
                    stats=self._stats_model(slot.stats),
                    rating=slot.rating,
                )
                for slot in evaluation.slots
            ],
        )
