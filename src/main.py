import logging
from fastapi import FastAPI
from contextlib import asynccontextmanager

from src.crud import CreateData
from src.db import engine
from src.load_secrets import log_level
from src.routers import formation
from src.routers import squad

logging.basicConfig(level=log_level)


@asynccontextmanager
async def lifespan(app):
    """Create the cards, user_cards and squads tables.
    This function is called to start the server.
    """
    await CreateData.create_table(engine)
    try:
        yield
    finally:
        await engine.dispose()
        logging.info("Stop Server")


app = FastAPI(lifespan=lifespan)
app.include_router(formation.formation_router)
app.include_router(squad.squad_router)
