"""Typed outcomes raised by the squad rules.

All of them are local, recoverable conditions. Callers are expected to
handle them; none of them indicates a storage failure.
"""


class SquadRuleError(Exception):
    """Base class for squad rule violations."""


class UnknownFormation(SquadRuleError):
    def __init__(self, formation_id: str):
        self.formation_id = formation_id
        super().__init__(f"Unknown formation: {formation_id}")


class SlotNotInFormation(SquadRuleError):
    def __init__(self, slot_id: str, formation_id: str):
        self.slot_id = slot_id
        self.formation_id = formation_id
        super().__init__(f"Slot {slot_id} is not part of formation {formation_id}")


class DuplicateCardAssignment(SquadRuleError):
    def __init__(self, card_id, occupied_slot_id: str):
        self.card_id = card_id
        self.occupied_slot_id = occupied_slot_id
        super().__init__(f"Card {card_id} is already placed in slot {occupied_slot_id}")


class IncompleteSquad(SquadRuleError):
    """Raised when a save is attempted before all slots are filled."""

    def __init__(self, filled_count: int, required_count: int = 11):
        self.filled_count = filled_count
        self.required_count = required_count
        super().__init__(f"need {required_count}, have {filled_count}")
