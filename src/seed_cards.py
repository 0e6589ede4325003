import argparse
import asyncio
import json
import logging
import pathlib
from typing import List
from uuid import UUID

from uuid6 import uuid7

from src.crud import CreateData
from src.db import engine
from src.models.schema_models import CardSchema
from src.services import squad_db

logging.basicConfig(level=logging.INFO)


def load_cards(file_path: pathlib.Path) -> List[CardSchema]:
    """Read card rows from a JSON list; rows without card_id get a new uuid7"""
    rows = json.loads(file_path.read_text(encoding="utf-8"))
    cards = []
    for row in rows:
        row.setdefault("card_id", str(uuid7()))
        cards.append(CardSchema.model_validate(row))
    return cards


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed the card catalog")
    parser.add_argument("--file", type=pathlib.Path, help="JSON list of cards", required=True)
    parser.add_argument("--user-id", type=UUID, help="Grant every seeded card to this user")
    return parser


async def main(file_path: pathlib.Path, user_id: UUID | None):
    await CreateData.create_table(engine)
    cards = load_cards(file_path)
    for card in cards:
        await squad_db.create_card_data(card)
        if user_id is not None:
            await squad_db.grant_card(user_id, card.card_id)
    logging.info(f"Seeded {len(cards)} cards from {file_path}")
    await engine.dispose()


if __name__ == "__main__":
    parser = get_parser()
    args = parser.parse_args()
    asyncio.run(main(args.file, args.user_id))
