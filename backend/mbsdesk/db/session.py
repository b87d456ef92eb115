# backend/mbsdesk/db/session.py

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine


def create_session_factory(database_url: str) -> tuple[AsyncEngine, async_sessionmaker]:
    """Build the engine and session factory once, at application startup."""
    engine = create_async_engine(database_url, echo=False)
    return engine, async_sessionmaker(autoflush=False, bind=engine, expire_on_commit=False)
