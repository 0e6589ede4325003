"""Formation catalog.

A formation is a fixed set of eleven named slots. Slot ids (e.g. "CB1") are
scoped to their formation; each one maps to exactly one canonical position.
Adding a formation is a data change only.
"""
from dataclasses import dataclass
from typing import Dict, List, Tuple

from src.domain.chemistry_rules import CanonicalPosition
from src.domain.exceptions import SlotNotInFormation, UnknownFormation

SQUAD_SIZE = 11

SlotId = str


@dataclass(frozen=True)
class Slot:
    """A single on-field slot with its required position and pitch coordinate."""
    slot_id: SlotId
    position: CanonicalPosition
    x: int  # percent of pitch width
    y: int  # percent of pitch height, 0 is the opponent's goal line


@dataclass(frozen=True)
class Formation:
    formation_id: str
    slots: Tuple[Slot, ...]

    @property
    def slot_ids(self) -> List[SlotId]:
        return [slot.slot_id for slot in self.slots]

    def has_slot(self, slot_id: SlotId) -> bool:
        return any(slot.slot_id == slot_id for slot in self.slots)

    def get_slot(self, slot_id: SlotId) -> Slot:
        for slot in self.slots:
            if slot.slot_id == slot_id:
                return slot
        raise SlotNotInFormation(slot_id, self.formation_id)

    def required_position(self, slot_id: SlotId) -> CanonicalPosition:
        """Return the canonical position a slot requires.

        Raises:
            SlotNotInFormation: slot_id does not belong to this formation
        """
        return self.get_slot(slot_id).position


def _formation(formation_id: str, *slots: Tuple[str, CanonicalPosition, int, int]) -> Formation:
    formation = Formation(
        formation_id=formation_id,
        slots=tuple(Slot(slot_id, position, x, y) for slot_id, position, x, y in slots),
    )
    ids = formation.slot_ids
    if len(ids) != SQUAD_SIZE or len(set(ids)) != SQUAD_SIZE:
        raise ValueError(f"Formation {formation_id} must have {SQUAD_SIZE} unique slots")
    return formation


P = CanonicalPosition

FORMATION_442 = _formation(
    "4-4-2",
    ("GK", P.GK, 50, 90),
    ("LB", P.LB, 15, 70),
    ("CB1", P.CB, 35, 70),
    ("CB2", P.CB, 65, 70),
    ("RB", P.RB, 85, 70),
    ("LM", P.LM, 15, 45),
    ("CM1", P.CM, 40, 45),
    ("CM2", P.CM, 60, 45),
    ("RM", P.RM, 85, 45),
    ("ST1", P.ST, 35, 15),
    ("ST2", P.ST, 65, 15),
)

FORMATION_433 = _formation(
    "4-3-3",
    ("GK", P.GK, 50, 90),
    ("LB", P.LB, 15, 70),
    ("CB1", P.CB, 35, 70),
    ("CB2", P.CB, 65, 70),
    ("RB", P.RB, 85, 70),
    ("CDM", P.CDM, 50, 50),
    ("CM1", P.CM, 30, 45),
    ("CM2", P.CM, 70, 45),
    ("LW", P.LW, 15, 15),
    ("ST", P.ST, 50, 15),
    ("RW", P.RW, 85, 15),
)

FORMATION_352 = _formation(
    "3-5-2",
    ("GK", P.GK, 50, 90),
    ("CB1", P.CB, 25, 70),
    ("CB2", P.CB, 50, 70),
    ("CB3", P.CB, 75, 70),
    ("LM", P.LM, 10, 45),
    ("CM1", P.CM, 30, 45),
    ("CDM", P.CDM, 50, 50),
    ("CM2", P.CM, 70, 45),
    ("RM", P.RM, 90, 45),
    ("ST1", P.ST, 35, 15),
    ("ST2", P.ST, 65, 15),
)

FORMATION_4231 = _formation(
    "4-2-3-1",
    ("GK", P.GK, 50, 90),
    ("LB", P.LB, 15, 70),
    ("CB1", P.CB, 35, 70),
    ("CB2", P.CB, 65, 70),
    ("RB", P.RB, 85, 70),
    ("CDM1", P.CDM, 35, 55),
    ("CDM2", P.CDM, 65, 55),
    ("LW", P.LW, 15, 30),
    ("CAM", P.CAM, 50, 30),
    ("RW", P.RW, 85, 30),
    ("ST", P.ST, 50, 15),
)

DEFAULT_FORMATION_ID = FORMATION_442.formation_id

FORMATIONS: Dict[str, Formation] = {
    FORMATION_442.formation_id: FORMATION_442,
    FORMATION_433.formation_id: FORMATION_433,
    FORMATION_352.formation_id: FORMATION_352,
    FORMATION_4231.formation_id: FORMATION_4231,
}


def get_formation(formation_id: str) -> Formation:
    if formation_id not in FORMATIONS:
        raise UnknownFormation(formation_id)
    return FORMATIONS[formation_id]


def list_formations() -> List[Formation]:
    return list(FORMATIONS.values())
