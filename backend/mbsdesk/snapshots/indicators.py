from __future__ import annotations

import logging

from mbsdesk.errors import NotFound
from mbsdesk.normalize.fields import derived_change, reshape
from mbsdesk.normalize.tables import (
    FRED_COLLECTION,
    INDICATOR_CHANGE_PLACES,
    INDICATOR_DOCUMENTS,
    INDICATOR_RULES,
)
from mbsdesk.schemas.market import IndicatorEntry
from mbsdesk.store.base import Document, DocumentStore

logger = logging.getLogger(__name__)


def normalize_indicator(document: Document) -> IndicatorEntry:
    entry = reshape(document, INDICATOR_RULES)
    # Monthly series that have not moved are shown as unavailable, not as 0.00.
    entry["monthly_change"] = derived_change(
        document.get("latest"),
        document.get("last_month"),
        INDICATOR_CHANGE_PLACES,
        zero_as_null=True,
    )
    return IndicatorEntry(**entry)


async def fetch_indicators(store: DocumentStore) -> dict[str, IndicatorEntry]:
    documents = await store.get_many(FRED_COLLECTION, list(INDICATOR_DOCUMENTS))

    indicators: dict[str, IndicatorEntry] = {}
    for doc_id, document in zip(INDICATOR_DOCUMENTS, documents):
        if document is None:
            logger.warning('Document with ID "%s" not found in collection.', doc_id)
            continue
        series_id = document.get("series_id") or doc_id
        indicators[str(series_id)] = normalize_indicator(document)
    return indicators


async def fetch_fred_reports(store: DocumentStore) -> dict[str, Document]:
    reports = await store.list_collection(FRED_COLLECTION)
    if not reports:
        logger.warning("No FRED reports found in the store.")
        raise NotFound("No data found.", body_key="message")
    return reports
