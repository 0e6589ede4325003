import pytest

from src.domain.chemistry_rules import (
    COMPATIBLE_POSITIONS,
    CanonicalPosition,
    CardStats,
    ChemistryTier,
    adjust_stats,
    compatible_positions,
    evaluate_chemistry,
)

ALL_POSITIONS = list(CanonicalPosition)


@pytest.mark.parametrize("position", ALL_POSITIONS)
def test_same_position_is_perfect(position):
    assert evaluate_chemistry(position, position) == ChemistryTier.perfect


def test_tier_follows_compatibility_table_for_every_pair():
    for card_position in ALL_POSITIONS:
        for slot_position in ALL_POSITIONS:
            tier = evaluate_chemistry(card_position, slot_position)
            if card_position == slot_position:
                assert tier == ChemistryTier.perfect
            elif card_position in COMPATIBLE_POSITIONS.get(slot_position, frozenset()):
                assert tier == ChemistryTier.good
            else:
                assert tier == ChemistryTier.poor


def test_compatibility_is_not_symmetric():
    assert evaluate_chemistry(CanonicalPosition.RW, CanonicalPosition.ST) == ChemistryTier.good
    assert evaluate_chemistry(CanonicalPosition.ST, CanonicalPosition.RW) == ChemistryTier.good
    assert evaluate_chemistry("RW", "LW") == ChemistryTier.poor
    assert evaluate_chemistry("LW", "RW") == ChemistryTier.poor
    assert evaluate_chemistry("CB", "CDM") == ChemistryTier.good
    assert evaluate_chemistry("CDM", "CB") == ChemistryTier.good
    assert evaluate_chemistry("CF", "ST") == ChemistryTier.good
    assert evaluate_chemistry("ST", "CF") == ChemistryTier.poor


def test_goalkeeper_only_accepts_goalkeeper():
    assert compatible_positions("GK") == frozenset({CanonicalPosition.GK})
    for position in ALL_POSITIONS:
        if position != CanonicalPosition.GK:
            assert evaluate_chemistry(position, "GK") == ChemistryTier.poor
            assert evaluate_chemistry("GK", position) == ChemistryTier.poor


def test_unlisted_slot_position_has_empty_compatible_set():
    assert compatible_positions("CF") == frozenset()
    assert compatible_positions("DEF") == frozenset()
    assert evaluate_chemistry("ST", "CF") == ChemistryTier.poor
    assert evaluate_chemistry("DEF", "DEF") == ChemistryTier.perfect
    assert evaluate_chemistry("DEF", "CB") == ChemistryTier.poor


def test_plain_strings_and_enum_members_agree():
    assert evaluate_chemistry("LM", CanonicalPosition.LB) == ChemistryTier.good
    assert evaluate_chemistry(CanonicalPosition.LM, "LB") == ChemistryTier.good


@pytest.mark.parametrize("tier", [ChemistryTier.perfect, ChemistryTier.good])
@pytest.mark.parametrize("stats", [CardStats(0, 0, 0), CardStats(81, 55, 100), CardStats(100, 100, 100)])
def test_perfect_and_good_leave_stats_unchanged(tier, stats):
    assert adjust_stats(stats, tier) == stats


def test_poor_chemistry_takes_three_quarters():
    assert adjust_stats(CardStats(80, 80, 80), ChemistryTier.poor) == CardStats(60, 60, 60)


def test_poor_chemistry_floors_each_stat():
    adjusted = adjust_stats(CardStats(81, 1, 99), ChemistryTier.poor)
    assert adjusted.attack == 60  # floor(60.75)
    assert adjusted.control == 0  # floor(0.75)
    assert adjusted.defense == 74  # floor(74.25)


def test_poor_chemistry_never_goes_negative():
    assert adjust_stats(CardStats(0, 0, 0), ChemistryTier.poor) == CardStats(0, 0, 0)
