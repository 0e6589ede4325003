from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.load_secrets import database_backend

if database_backend == "postgres":
    from src.create_postgres_engine import engine
else:
    from src.create_sqlite_engine import engine

# Centralized session factory to avoid creating it in router modules.
Session = async_sessionmaker(
    class_=AsyncSession,
    autoflush=True,
    expire_on_commit=False,
    bind=engine,
)
