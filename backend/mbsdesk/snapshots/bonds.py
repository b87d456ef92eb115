from __future__ import annotations

import logging

from mbsdesk.errors import NotFound
from mbsdesk.normalize.fields import as_text, reshape
from mbsdesk.normalize.tables import (
    LEGACY_DOC,
    LEGACY_MBS_COLLECTION,
    LEGACY_TREASURY_COLLECTION,
    MARKET_COLLECTION,
    MBS_PREFIXES,
    MBS_PRODUCTS_DOC,
    SHADOW_BONDS_DOC,
    SHADOW_PREFIXES,
    US10Y_DOC,
    US30Y_DOC,
    bond_rules,
    instrument_rules,
    legacy_mbs_rules,
    legacy_treasury_rules,
    treasury_rules,
)
from mbsdesk.schemas.market import (
    AllBondsResponse,
    InstrumentReading,
    ShadowBondsResponse,
    TopDashboardResponse,
    TreasuryReading,
)
from mbsdesk.store.base import Document, DocumentStore

logger = logging.getLogger(__name__)

_MARKET_DOCS = [MBS_PRODUCTS_DOC, SHADOW_BONDS_DOC, US10Y_DOC, US30Y_DOC]


async def fetch_top_dashboard(store: DocumentStore) -> TopDashboardResponse:
    mbs, shadow, us10y, us30y = await store.get_many(MARKET_COLLECTION, _MARKET_DOCS)
    if mbs is None or shadow is None or us10y is None or us30y is None:
        raise NotFound("One or more documents not found.")

    return TopDashboardResponse(
        UMBS_5_5=InstrumentReading(**reshape(mbs, instrument_rules("UMBS_5_5"))),
        GNMA_5_5=InstrumentReading(**reshape(mbs, instrument_rules("GNMA_5_5"))),
        UMBS_5_5_Shadow=InstrumentReading(**reshape(shadow, instrument_rules("UMBS_5_5_Shadow"))),
        US10Y=TreasuryReading(**reshape(us10y, treasury_rules("US10Y"))),
        US30Y=TreasuryReading(**reshape(us30y, treasury_rules("US30Y"))),
    )


def _first_present(documents: list[Document], key: str) -> str | None:
    for document in documents:
        value = document.get(key)
        if value:
            return as_text(value)
    return None


async def fetch_all_bonds(store: DocumentStore) -> AllBondsResponse:
    """Every MBS, shadow and treasury instrument; absent documents read as empty."""
    fetched = await store.get_many(MARKET_COLLECTION, _MARKET_DOCS)
    for doc_id, document in zip(_MARKET_DOCS, fetched):
        if document is None:
            logger.warning("Document %s/%s not found, serving nulls.", MARKET_COLLECTION, doc_id)
    mbs, shadow, us10y, us30y = [document or {} for document in fetched]

    instruments = {prefix: reshape(mbs, bond_rules(prefix)) for prefix in MBS_PREFIXES}
    instruments.update({prefix: reshape(shadow, bond_rules(prefix)) for prefix in SHADOW_PREFIXES})
    instruments["US10Y"] = reshape(us10y, bond_rules("US10Y"))
    instruments["US30Y"] = reshape(us30y, bond_rules("US30Y"))

    return AllBondsResponse(
        last_updated=_first_present([shadow, us10y, us30y, mbs], "last_updated"),
        trading_day_date=_first_present([shadow], "trading_day_date"),
        **instruments,
    )


async def fetch_shadow_bonds(store: DocumentStore) -> ShadowBondsResponse:
    shadow = await store.get(MARKET_COLLECTION, SHADOW_BONDS_DOC)
    if shadow is None:
        raise NotFound("Shadow Bonds data not found", body_key="message")

    return ShadowBondsResponse(
        last_updated=_first_present([shadow], "last_updated"),
        trading_day_date=_first_present([shadow], "trading_day_date"),
        **{prefix: reshape(shadow, instrument_rules(prefix)) for prefix in SHADOW_PREFIXES},
    )


async def fetch_legacy_mbs(store: DocumentStore) -> dict[str, str | None]:
    document = await store.get(LEGACY_MBS_COLLECTION, LEGACY_DOC)
    if document is None:
        raise NotFound("Document not found")
    return reshape(document, legacy_mbs_rules())


async def fetch_legacy_treasury(store: DocumentStore, prefix: str) -> dict[str, str | None]:
    document = await store.get(LEGACY_TREASURY_COLLECTION, LEGACY_DOC)
    if document is None:
        raise NotFound("Document not found")
    return reshape(document, legacy_treasury_rules(prefix))
