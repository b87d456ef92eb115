from __future__ import annotations

import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker

from mbsdesk.db.models import Base, StoredDocument
from mbsdesk.db.session import create_session_factory
from mbsdesk.store.base import Document, DocumentStore


class SqlDocumentStore(DocumentStore):
    """Documents kept as JSON rows keyed by (collection, doc_id).

    Used for local development where no Firebase project is available.
    """

    name = "sql"

    def __init__(self, engine: AsyncEngine, session_factory: async_sessionmaker) -> None:
        self._engine = engine
        self._session_factory = session_factory

    @classmethod
    def from_url(cls, database_url: str) -> "SqlDocumentStore":
        engine, session_factory = create_session_factory(database_url)
        return cls(engine, session_factory)

    async def create_tables(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def prepare(self) -> None:
        await self.create_tables()

    async def _get(self, collection: str, doc_id: str) -> Document | None:
        async with self._session_factory() as session:
            result = await session.execute(
                select(StoredDocument).where(
                    StoredDocument.collection == collection,
                    StoredDocument.doc_id == doc_id,
                )
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None
            return dict(row.payload or {})

    async def _list(self, collection: str) -> dict[str, Document]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(StoredDocument)
                .where(StoredDocument.collection == collection)
                .order_by(StoredDocument.doc_id)
            )
            return {row.doc_id: dict(row.payload or {}) for row in result.scalars().all()}

    async def _merge(
        self, collection: str, doc_id: str, fields: Document, timestamp_field: str | None
    ) -> None:
        now = datetime.datetime.utcnow()
        if timestamp_field:
            fields[timestamp_field] = now.isoformat()

        async with self._session_factory() as session:
            result = await session.execute(
                select(StoredDocument).where(
                    StoredDocument.collection == collection,
                    StoredDocument.doc_id == doc_id,
                )
            )
            row = result.scalar_one_or_none()
            if row is None:
                session.add(StoredDocument(collection=collection, doc_id=doc_id, payload=fields))
            else:
                # Reassign so the JSON column is flagged dirty.
                row.payload = {**(row.payload or {}), **fields}
                row.updated_at = now
            await session.commit()

    async def close(self) -> None:
        await self._engine.dispose()
