"""Read-only card records as the rules engine sees them."""
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional
from uuid import UUID

from src.domain.chemistry_rules import CardStats


class Rarity(str, Enum):
    common = "common"
    rare = "rare"
    epic = "epic"
    legendary = "legendary"

    @property
    def rank(self) -> int:
        return list(Rarity).index(self)


@dataclass(frozen=True)
class Card:
    card_id: UUID
    name: str
    position: str  # canonical position; legacy rows may hold values outside CanonicalPosition
    rarity: str
    attack: int
    control: int
    defense: int
    character_type: Optional[str] = None
    lore: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def stats(self) -> CardStats:
        return CardStats(self.attack, self.control, self.defense)


def rarity_rank(rarity: str) -> int:
    """Rank of a rarity label, unknown labels rank below common."""
    try:
        return Rarity(rarity.lower()).rank
    except ValueError:
        return -1


def sort_by_rarity(cards: Iterable[Card], descending: bool = True) -> List[Card]:
    """Order cards by rarity tier, keeping fetch order inside a tier."""
    cards = list(cards)
    if descending:
        return sorted(cards, key=lambda card: -rarity_rank(card.rarity))
    return sorted(cards, key=lambda card: rarity_rank(card.rarity))
