from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any

from mbsdesk.errors import UpstreamFailure

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentStore(ABC):
    """Key/document access used by every handler.

    Backends implement the underscored hooks; the public methods wrap any
    backend error in ``UpstreamFailure`` so handlers only ever see domain
    errors.
    """

    name = "store"

    async def get(self, collection: str, doc_id: str) -> Document | None:
        try:
            return await self._get(collection, doc_id)
        except Exception as exc:
            raise UpstreamFailure(f"Failed to read {collection}/{doc_id}.") from exc

    async def get_many(self, collection: str, doc_ids: list[str]) -> list[Document | None]:
        """Fetch several independent documents concurrently, preserving order."""
        return list(await asyncio.gather(*(self.get(collection, doc_id) for doc_id in doc_ids)))

    async def list_collection(self, collection: str) -> dict[str, Document]:
        try:
            return await self._list(collection)
        except Exception as exc:
            raise UpstreamFailure(f"Failed to list {collection}.") from exc

    async def merge(
        self,
        collection: str,
        doc_id: str,
        fields: Document,
        timestamp_field: str | None = None,
    ) -> None:
        """Merge ``fields`` into the document, creating it when absent.

        When ``timestamp_field`` is given the backend stamps it with its own
        notion of "now" (a server timestamp for Firestore).
        """
        try:
            await self._merge(collection, doc_id, dict(fields), timestamp_field)
        except Exception as exc:
            raise UpstreamFailure(f"Failed to write {collection}/{doc_id}.") from exc

    async def prepare(self) -> None:
        """Create whatever the backend needs before the first read."""
        return None

    async def close(self) -> None:
        return None

    @abstractmethod
    async def _get(self, collection: str, doc_id: str) -> Document | None: ...

    @abstractmethod
    async def _list(self, collection: str) -> dict[str, Document]: ...

    @abstractmethod
    async def _merge(
        self, collection: str, doc_id: str, fields: Document, timestamp_field: str | None
    ) -> None: ...
