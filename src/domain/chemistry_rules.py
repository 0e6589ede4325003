"""Position compatibility and chemistry rules.

This module is the only place where the compatibility table lives.
Candidate ranking, field display and squad aggregation all call through it.

Rule of thumb:
- OK: position comparisons, stat penalties, integer math.
- Not OK: touching DB sessions, FastAPI, or cached card details.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet


class CanonicalPosition(str, Enum):
    """Formation independent role label used for compatibility lookups."""
    GK = "GK"
    CB = "CB"
    LB = "LB"
    RB = "RB"
    CDM = "CDM"
    CM = "CM"
    CAM = "CAM"
    LM = "LM"
    RM = "RM"
    LW = "LW"
    RW = "RW"
    ST = "ST"
    CF = "CF"


class ChemistryTier(str, Enum):
    perfect = "perfect"
    good = "good"
    poor = "poor"


P = CanonicalPosition

# Keyed by the slot's required position. Not symmetric: ST accepts RW but LW does not.
COMPATIBLE_POSITIONS: Dict[CanonicalPosition, FrozenSet[CanonicalPosition]] = {
    P.ST: frozenset({P.ST, P.CF, P.LW, P.RW}),
    P.LW: frozenset({P.LW, P.ST, P.LM}),
    P.RW: frozenset({P.RW, P.ST, P.RM}),
    P.CAM: frozenset({P.CAM, P.CM, P.LM, P.RM}),
    P.CM: frozenset({P.CM, P.CAM, P.CDM}),
    P.CDM: frozenset({P.CDM, P.CM, P.CB}),
    P.LM: frozenset({P.LM, P.LW, P.LB}),
    P.RM: frozenset({P.RM, P.RW, P.RB}),
    P.LB: frozenset({P.LB, P.LM, P.CB}),
    P.RB: frozenset({P.RB, P.RM, P.CB}),
    P.CB: frozenset({P.CB, P.CDM}),
    P.GK: frozenset({P.GK}),
}

# Sort key for candidate lists (lower is better).
TIER_ORDER: Dict[ChemistryTier, int] = {
    ChemistryTier.perfect: 0,
    ChemistryTier.good: 1,
    ChemistryTier.poor: 2,
}

# Points per filled slot for the squad chemistry score.
CHEMISTRY_POINTS: Dict[ChemistryTier, int] = {
    ChemistryTier.perfect: 10,
    ChemistryTier.good: 6,
    ChemistryTier.poor: 0,
}

# Poor chemistry keeps 3/4 of every stat.
POOR_CHEMISTRY_NUMERATOR = 3
POOR_CHEMISTRY_DENOMINATOR = 4


def compatible_positions(slot_position: str) -> FrozenSet[CanonicalPosition]:
    """Return the positions accepted as a partial match for a slot.

    Positions missing from the table get an empty set, so only an exact
    match scores anything for them.
    """
    return COMPATIBLE_POSITIONS.get(slot_position, frozenset())


def evaluate_chemistry(card_position: str, slot_position: str) -> ChemistryTier:
    """Classify how well a card's position fits a slot.

    Both arguments are canonical positions, never numbered slot ids.
    Legacy strings outside CanonicalPosition are accepted and are only
    ever a perfect match for themselves.

    Args:
        card_position (str): Canonical position printed on the card
        slot_position (str): Canonical position the slot requires

    Returns:
        ChemistryTier: perfect, good or poor
    """
    if card_position == slot_position:
        return ChemistryTier.perfect
    if card_position in compatible_positions(slot_position):
        return ChemistryTier.good
    return ChemistryTier.poor


@dataclass(frozen=True)
class CardStats:
    attack: int
    control: int
    defense: int

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.attack, self.control, self.defense)


def _penalize(value: int) -> int:
    # floor(value * 0.75) without float rounding
    return value * POOR_CHEMISTRY_NUMERATOR // POOR_CHEMISTRY_DENOMINATOR


def adjust_stats(stats: CardStats, tier: ChemistryTier) -> CardStats:
    """Apply the chemistry penalty to a card's base stats.

    Perfect and good chemistry leave the stats untouched. Poor chemistry
    floors 75% of each stat independently.

    Args:
        stats (CardStats): Base attack, control and defense in [0, 100]
        tier (ChemistryTier): Result of evaluate_chemistry

    Returns:
        CardStats: Effective stats for display and rating
    """
    if tier != ChemistryTier.poor:
        return stats
    return CardStats(
        attack=_penalize(stats.attack),
        control=_penalize(stats.control),
        defense=_penalize(stats.defense),
    )
