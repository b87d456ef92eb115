from __future__ import annotations

import logging

import firebase_admin
from firebase_admin import credentials, firestore, firestore_async

from mbsdesk.config.settings import FirebaseSettings
from mbsdesk.store.base import Document, DocumentStore

logger = logging.getLogger(__name__)

_APP_NAME = "mbsdesk"


def _get_or_init_app(config: FirebaseSettings) -> firebase_admin.App:
    try:
        return firebase_admin.get_app(_APP_NAME)
    except ValueError:
        pass

    info = config.service_account_info()
    if info is None:
        raise RuntimeError(
            "Firebase credentials are not configured. Set FIREBASE_SERVICE_ACCOUNT, "
            "FIREBASE_SERVICE_ACCOUNT_KEY or the discrete FIREBASE_* fields."
        )
    options = {"databaseURL": config.database_url} if config.database_url else None
    app = firebase_admin.initialize_app(credentials.Certificate(info), options, name=_APP_NAME)
    logger.info("Firebase app initialized for project %s", info.get("project_id"))
    return app


class FirestoreDocumentStore(DocumentStore):
    name = "firestore"

    def __init__(self, client) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, config: FirebaseSettings) -> "FirestoreDocumentStore":
        app = _get_or_init_app(config)
        return cls(firestore_async.client(app))

    async def _get(self, collection: str, doc_id: str) -> Document | None:
        snapshot = await self._client.collection(collection).document(doc_id).get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    async def _list(self, collection: str) -> dict[str, Document]:
        documents: dict[str, Document] = {}
        async for snapshot in self._client.collection(collection).stream():
            documents[snapshot.id] = snapshot.to_dict() or {}
        return documents

    async def _merge(
        self, collection: str, doc_id: str, fields: Document, timestamp_field: str | None
    ) -> None:
        if timestamp_field:
            fields[timestamp_field] = firestore.SERVER_TIMESTAMP
        await self._client.collection(collection).document(doc_id).set(fields, merge=True)
