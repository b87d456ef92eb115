from __future__ import annotations

from mbsdesk.config.settings import Settings
from mbsdesk.store.base import DocumentStore


def build_store(config: Settings) -> DocumentStore:
    if config.document_store == "sql":
        from mbsdesk.store.sql import SqlDocumentStore

        return SqlDocumentStore.from_url(config.database_url)

    from mbsdesk.store.firestore import FirestoreDocumentStore

    return FirestoreDocumentStore.from_settings(config.firebase)
