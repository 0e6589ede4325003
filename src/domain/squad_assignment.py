"""Mutable slot -> card mapping for one squad being built.

Invariants kept at every mutation:
- every slot id belongs to the active formation
- a card id occupies at most one slot
"""
import logging
from typing import Dict, Iterable, List, Mapping, Optional
from uuid import UUID

from src.domain.cards import Card
from src.domain.exceptions import DuplicateCardAssignment, SlotNotInFormation
from src.domain.formations import Formation, SlotId


class SquadAssignment:
    def __init__(self, formation: Formation, positions: Optional[Mapping[SlotId, UUID]] = None):
        self.formation = formation
        self._positions: Dict[SlotId, UUID] = {}
        # card details fetched so far, keyed by card id
        self.card_details: Dict[UUID, Card] = {}
        for slot_id, card_id in (positions or {}).items():
            self.assign(slot_id, card_id)

    @property
    def formation_id(self) -> str:
        return self.formation.formation_id

    @property
    def positions(self) -> Dict[SlotId, UUID]:
        """Copy of the filled slots, in formation slot order."""
        return {
            slot_id: self._positions[slot_id]
            for slot_id in self.formation.slot_ids
            if slot_id in self._positions
        }

    @property
    def filled_count(self) -> int:
        return len(self._positions)

    def card_in(self, slot_id: SlotId) -> Optional[UUID]:
        return self._positions.get(slot_id)

    def slot_of(self, card_id: UUID) -> Optional[SlotId]:
        for slot_id, placed_card_id in self._positions.items():
            if placed_card_id == card_id:
                return slot_id
        return None

    def placed_card_ids(self, excluding_slot: Optional[SlotId] = None) -> List[UUID]:
        return [
            card_id
            for slot_id, card_id in self._positions.items()
            if slot_id != excluding_slot
        ]

    def assign(self, slot_id: SlotId, card_id: UUID) -> Optional[UUID]:
        """Place a card in a slot, replacing whatever card was there.

        Args:
            slot_id (SlotId): Slot of the active formation
            card_id (UUID): Owned card to place

        Raises:
            SlotNotInFormation: slot_id is not part of the active formation
            DuplicateCardAssignment: the card already sits in another slot

        Returns:
            Optional[UUID]: The card previously in the slot, if any
        """
        if not self.formation.has_slot(slot_id):
            raise SlotNotInFormation(slot_id, self.formation_id)
        occupied_slot_id = self.slot_of(card_id)
        if occupied_slot_id is not None and occupied_slot_id != slot_id:
            raise DuplicateCardAssignment(card_id, occupied_slot_id)
        previous = self._positions.get(slot_id)
        self._positions[slot_id] = card_id
        return previous

    def remove(self, slot_id: SlotId) -> Optional[UUID]:
        if not self.formation.has_slot(slot_id):
            raise SlotNotInFormation(slot_id, self.formation_id)
        return self._positions.pop(slot_id, None)

    def change_formation(self, formation: Formation) -> List[SlotId]:
        """Switch formation, keeping cards whose slot id exists in both.

        Returns:
            List[SlotId]: Slots whose cards were dropped
        """
        dropped = [slot_id for slot_id in self._positions if not formation.has_slot(slot_id)]
        for slot_id in dropped:
            del self._positions[slot_id]
        if dropped:
            logging.debug(f"Formation {self.formation_id} -> {formation.formation_id} dropped {dropped}")
        self.formation = formation
        return dropped

    def cache_card(self, card: Card) -> None:
        self.card_details[card.card_id] = card

    def cache_cards(self, cards: Iterable[Card]) -> None:
        for card in cards:
            self.cache_card(card)

    def missing_card_ids(self) -> List[UUID]:
        """Placed cards whose details have not been fetched yet."""
        return [
            card_id
            for card_id in self.positions.values()
            if card_id not in self.card_details
        ]
