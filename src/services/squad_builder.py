"""One user's squad-building session.

The session owns its SquadAssignment and card-detail cache; nothing here is
global. Rule checks run synchronously before any await. Card-detail fetches
are tagged with the session generation and the slot they were issued for,
and a result whose view went stale is discarded.
"""
import logging
from typing import Awaitable, Callable, Iterable, List, Optional
from uuid import UUID

from src.domain.cards import Card
from src.domain.formations import DEFAULT_FORMATION_ID, SlotId, get_formation
from src.domain.squad_assignment import SquadAssignment
from src.domain.squad_rules import (
    CandidateCard,
    SquadCompleteness,
    SquadEvaluation,
    calculate_squad_chemistry,
    calculate_squad_rating,
    evaluate_squad,
    rank_candidates,
    validate_squad,
)
from src.models.schema_models import SquadSchema
from src.services import squad_db

CardLoader = Callable[[Iterable[UUID]], Awaitable[List[Card]]]


class SessionClosed(RuntimeError):
    pass


class SquadBuilderSession:
    def __init__(
        self,
        user_id: UUID,
        formation_id: str = DEFAULT_FORMATION_ID,
        card_loader: Optional[CardLoader] = None,
    ):
        self.user_id = user_id
        self.assignment = SquadAssignment(get_formation(formation_id))
        self._card_loader = card_loader or squad_db.read_cards_by_ids
        self._generation = 0
        self.closed = False

    @classmethod
    def from_squad(cls, squad: SquadSchema, card_loader: Optional[CardLoader] = None) -> "SquadBuilderSession":
        """Resume editing a stored squad. Call load_card_details() before reading stats."""
        session = cls(squad.user_id, squad.formation_id, card_loader)
        for slot_id, card_id in squad.positions.items():
            session.assignment.assign(slot_id, card_id)
        return session

    @property
    def formation_id(self) -> str:
        return self.assignment.formation_id

    def _check_open(self) -> None:
        if self.closed:
            raise SessionClosed("Squad builder session is closed")

    async def _fetch(self, card_ids: List[UUID], slot_id: Optional[SlotId] = None) -> Optional[int]:
        """Load card details into the cache; None when the result was stale and dropped."""
        generation = self._generation
        cards = await self._card_loader(card_ids)
        stale = self.closed or generation != self._generation
        if slot_id is not None and self.assignment.card_in(slot_id) not in card_ids:
            stale = True
        if stale:
            logging.info(f"Discarding card details fetched for a stale squad view: {card_ids}")
            return None
        self.assignment.cache_cards(cards)
        return len(cards)

    async def place_card(self, slot_id: SlotId, card_id: UUID) -> Optional[UUID]:
        """Put a card in a slot and fetch its details if they are not cached.

        A fetch that resolves after the slot was re-assigned, or after the
        session closed, is dropped. One that resolves after a formation change
        is dropped and issued again when the card kept its slot.

        Raises:
            SlotNotInFormation: slot_id is not part of the active formation
            DuplicateCardAssignment: the card already sits in another slot

        Returns:
            Optional[UUID]: The card previously in the slot, if any
        """
        self._check_open()
        previous = self.assignment.assign(slot_id, card_id)
        while card_id not in self.assignment.card_details:
            if await self._fetch([card_id], slot_id) is not None:
                break
            if self.closed or self.assignment.card_in(slot_id) != card_id:
                break
        return previous

    def remove_card(self, slot_id: SlotId) -> Optional[UUID]:
        self._check_open()
        return self.assignment.remove(slot_id)

    def change_formation(self, formation_id: str) -> List[SlotId]:
        """Switch formation; outstanding fetches for the old one are discarded.

        Cards kept in a shared slot id are fetched again by the place_card
        call that is still waiting on them. Cards restored by from_squad need
        load_card_details().

        Raises:
            UnknownFormation: formation_id is not in the catalog
        """
        self._check_open()
        formation = get_formation(formation_id)
        self._generation += 1
        return self.assignment.change_formation(formation)

    async def load_card_details(self) -> int:
        """Fetch details for every placed card that is not cached yet."""
        self._check_open()
        missing = self.assignment.missing_card_ids()
        if not missing:
            return 0
        return await self._fetch(missing) or 0

    def candidates(
        self,
        owned_cards: Iterable[Card],
        slot_id: SlotId,
        search: Optional[str] = None,
        position_filter: Optional[str] = None,
    ) -> List[CandidateCard]:
        """Rank owned cards for a slot, hiding cards placed in other slots."""
        return rank_candidates(
            owned_cards,
            self.assignment.formation.required_position(slot_id),
            exclude_card_ids=self.assignment.placed_card_ids(excluding_slot=slot_id),
            search=search,
            position_filter=position_filter,
        )

    def rating(self) -> int:
        return calculate_squad_rating(
            self.assignment.formation, self.assignment.positions, self.assignment.card_details
        )

    def chemistry(self) -> int:
        return calculate_squad_chemistry(
            self.assignment.formation, self.assignment.positions, self.assignment.card_details
        )

    def completeness(self) -> SquadCompleteness:
        return validate_squad(self.assignment.positions, self.assignment.formation)

    def evaluate(self) -> SquadEvaluation:
        return evaluate_squad(self.assignment)

    async def save(self, active: bool = True) -> SquadSchema:
        """Persist the squad; validation runs before any write is issued."""
        self._check_open()
        return await squad_db.save_squad(
            self.user_id, self.formation_id, self.assignment.positions, active=active
        )

    def close(self) -> None:
        self.closed = True
        self._generation += 1
