from __future__ import annotations

import logging
from dataclasses import dataclass, field

from mbsdesk.normalize.fields import derived_change, reshape
from mbsdesk.normalize.tables import FRED_COLLECTION, RATE_DOCUMENTS, RATE_PLACES, RATE_RULES
from mbsdesk.schemas.market import RateEntry
from mbsdesk.store.base import Document, DocumentStore

logger = logging.getLogger(__name__)


def normalize_rate(document: Document) -> RateEntry:
    entry = reshape(document, RATE_RULES)
    # Zero is a real "unchanged" reading for daily rates.
    entry["daily_change"] = derived_change(
        document.get("latest"), document.get("yesterday"), RATE_PLACES
    )
    return RateEntry(**entry)


async def fetch_daily_rates(store: DocumentStore) -> dict[str, RateEntry | None]:
    keys = list(RATE_DOCUMENTS)
    documents = await store.get_many(FRED_COLLECTION, [RATE_DOCUMENTS[key] for key in keys])

    rates: dict[str, RateEntry | None] = {}
    for key, document in zip(keys, documents):
        if document is None:
            logger.warning("Document for %s not found.", key)
            rates[key] = None
            continue
        rates[key] = normalize_rate(document)
    return rates


@dataclass
class RollSummary:
    updated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    missing: list[str] = field(default_factory=list)


async def roll_rate_history(store: DocumentStore) -> RollSummary:
    """Copy each rate's ``latest`` reading into ``yesterday`` ahead of the next refresh."""
    summary = RollSummary()
    for doc_id in RATE_DOCUMENTS.values():
        document = await store.get(FRED_COLLECTION, doc_id)
        if document is None:
            logger.warning("Document not found: %s", doc_id)
            summary.missing.append(doc_id)
            continue

        latest = document.get("latest")
        latest_date = document.get("latest_date")
        if latest is None or latest == "" or not latest_date:
            logger.warning("Skipped %s: missing latest or latest_date", doc_id)
            summary.skipped.append(doc_id)
            continue

        await store.merge(
            FRED_COLLECTION,
            doc_id,
            {"yesterday": latest, "yesterday_date": latest_date},
        )
        logger.info("Rolled %s: %s (%s)", doc_id, latest, latest_date)
        summary.updated.append(doc_id)
    return summary
