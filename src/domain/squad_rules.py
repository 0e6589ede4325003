"""Squad level rules: rating, chemistry score, completeness and candidate ranking.

Everything here is a pure function of a formation, a slot -> card mapping
and whatever card details the caller has cached. Placed cards without
cached details are skipped, never guessed.

Rounding is round-half-up on exact integer fractions (2.5 -> 3).
"""
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional
from uuid import UUID

from src.domain.cards import Card
from src.domain.chemistry_rules import (
    CHEMISTRY_POINTS,
    TIER_ORDER,
    CardStats,
    ChemistryTier,
    adjust_stats,
    evaluate_chemistry,
)
from src.domain.formations import SQUAD_SIZE, Formation, SlotId
from src.domain.squad_assignment import SquadAssignment

MAX_POINTS_PER_SLOT = CHEMISTRY_POINTS[ChemistryTier.perfect]

# (minimum rating, stars), checked top down
STAR_BANDS = [(90, 5), (80, 4), (70, 3), (60, 2)]

ALL_POSITIONS_FILTER = "ALL"


def round_half_up_div(numerator: int, denominator: int) -> int:
    """Divide two non-negative integers and round half up."""
    return (2 * numerator + denominator) // (2 * denominator)


def card_rating(stats: CardStats) -> int:
    return round_half_up_div(sum(stats.as_tuple()), 3)


@dataclass(frozen=True)
class SlotEvaluation:
    slot_id: SlotId
    required_position: str
    card_id: Optional[UUID] = None
    tier: Optional[ChemistryTier] = None
    stats: Optional[CardStats] = None
    rating: Optional[int] = None


def evaluate_slot(formation: Formation, slot_id: SlotId, card: Optional[Card]) -> SlotEvaluation:
    required_position = formation.required_position(slot_id)
    if card is None:
        return SlotEvaluation(slot_id=slot_id, required_position=required_position.value)
    tier = evaluate_chemistry(card.position, required_position)
    stats = adjust_stats(card.stats, tier)
    return SlotEvaluation(
        slot_id=slot_id,
        required_position=required_position.value,
        card_id=card.card_id,
        tier=tier,
        stats=stats,
        rating=card_rating(stats),
    )


def _evaluated_slots(
    formation: Formation,
    positions: Mapping[SlotId, UUID],
    card_details: Mapping[UUID, Card],
) -> List[SlotEvaluation]:
    evaluations = []
    for slot_id in formation.slot_ids:
        card_id = positions.get(slot_id)
        if card_id is None or card_id not in card_details:
            continue
        evaluations.append(evaluate_slot(formation, slot_id, card_details[card_id]))
    return evaluations


def calculate_squad_rating(
    formation: Formation,
    positions: Mapping[SlotId, UUID],
    card_details: Mapping[UUID, Card],
) -> int:
    """Round-half-up mean of the per-card effective ratings, 0 when nothing is filled."""
    ratings = [slot.rating for slot in _evaluated_slots(formation, positions, card_details)]
    if not ratings:
        return 0
    return round_half_up_div(sum(ratings), len(ratings))


def calculate_squad_chemistry(
    formation: Formation,
    positions: Mapping[SlotId, UUID],
    card_details: Mapping[UUID, Card],
) -> int:
    """Chemistry score in [0, 100].

    The denominator is always eleven full-chemistry slots, so a partially
    filled squad cannot reach 100.
    """
    points = sum(
        CHEMISTRY_POINTS[slot.tier]
        for slot in _evaluated_slots(formation, positions, card_details)
    )
    return round_half_up_div(points * 100, SQUAD_SIZE * MAX_POINTS_PER_SLOT)


def star_count(rating: int) -> int:
    for minimum, stars in STAR_BANDS:
        if rating >= minimum:
            return stars
    return 1


@dataclass(frozen=True)
class SquadCompleteness:
    filled_count: int
    required_count: int = SQUAD_SIZE

    @property
    def is_complete(self) -> bool:
        return self.filled_count == self.required_count

    @property
    def message(self) -> str:
        if self.is_complete:
            return "ok"
        return f"need {self.required_count}, have {self.filled_count}"


def validate_squad(positions: Mapping[SlotId, UUID], formation: Formation) -> SquadCompleteness:
    """Check that all eleven slots hold eleven distinct cards.

    Slot ids outside the formation are ignored. A card placed twice only
    counts once, so the squad stays incomplete.
    """
    placed = [
        positions[slot_id]
        for slot_id in formation.slot_ids
        if positions.get(slot_id) is not None
    ]
    return SquadCompleteness(filled_count=len(set(placed)))


@dataclass(frozen=True)
class SquadEvaluation:
    formation_id: str
    rating: int
    chemistry: int
    stars: int
    completeness: SquadCompleteness
    slots: List[SlotEvaluation] = field(default_factory=list)


def evaluate_squad(assignment: SquadAssignment) -> SquadEvaluation:
    """Evaluate every slot of the active formation plus the squad totals."""
    formation = assignment.formation
    positions = assignment.positions
    slots = []
    for slot_id in formation.slot_ids:
        card_id = positions.get(slot_id)
        card = assignment.card_details.get(card_id) if card_id is not None else None
        evaluation = evaluate_slot(formation, slot_id, card)
        if card is None and card_id is not None:
            # placed but details still loading
            evaluation = SlotEvaluation(
                slot_id=slot_id,
                required_position=evaluation.required_position,
                card_id=card_id,
            )
        slots.append(evaluation)

    rating = calculate_squad_rating(formation, positions, assignment.card_details)
    return SquadEvaluation(
        formation_id=formation.formation_id,
        rating=rating,
        chemistry=calculate_squad_chemistry(formation, positions, assignment.card_details),
        stars=star_count(rating),
        completeness=validate_squad(positions, formation),
        slots=slots,
    )


@dataclass(frozen=True)
class CandidateCard:
    card: Card
    tier: ChemistryTier
    stats: CardStats
    rating: int


def matches_position_filter(card: Card, position_filter: Optional[str]) -> bool:
    if not position_filter or position_filter.upper() == ALL_POSITIONS_FILTER:
        return True
    return card.position == position_filter.upper()


def filter_by_position(cards: Iterable[Card], position_filter: Optional[str] = None) -> List[Card]:
    """Collection listing filter, "ALL" or None keeps everything."""
    return [card for card in cards if matches_position_filter(card, position_filter)]


def rank_candidates(
    cards: Iterable[Card],
    slot_position: str,
    exclude_card_ids: Iterable[UUID] = (),
    search: Optional[str] = None,
    position_filter: Optional[str] = None,
) -> List[CandidateCard]:
    """Rank owned cards for a slot, best chemistry first.

    Cards already placed elsewhere are dropped. The sort is stable, so cards
    of the same tier keep their fetch order.

    Args:
        cards (Iterable[Card]): Owned cards in fetch order
        slot_position (str): Canonical position the slot requires
        exclude_card_ids (Iterable[UUID]): Cards placed in other slots
        search (Optional[str]): Case-insensitive name fragment
        position_filter (Optional[str]): Only keep cards of this position, "ALL" keeps everything

    Returns:
        List[CandidateCard]: Candidates with their tier and effective stats
    """
    excluded = set(exclude_card_ids)
    needle = search.lower() if search else None
    candidates = []
    for card in cards:
        if card.card_id in excluded:
            continue
        if needle and needle not in card.name.lower():
            continue
        if not matches_position_filter(card, position_filter):
            continue
        tier = evaluate_chemistry(card.position, slot_position)
        stats = adjust_stats(card.stats, tier)
        candidates.append(CandidateCard(card=card, tier=tier, stats=stats, rating=card_rating(stats)))
    return sorted(candidates, key=lambda candidate: TIER_ORDER[candidate.tier])


def collection_completion(owned_count: int, total_count: int) -> int:
    """Percentage of the card catalog a user owns."""
    if total_count <= 0:
        return 0
    return round_half_up_div(owned_count * 100, total_count)
