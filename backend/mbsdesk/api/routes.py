from fastapi import APIRouter, Depends, status

from mbsdesk.api.deps import get_settings, get_store
from mbsdesk.config.settings import Settings
from mbsdesk.jobs.queue import enqueue_rate_history_roll
from mbsdesk.providers.finnhub import fetch_live_quotes
from mbsdesk.providers.fred import fetch_series
from mbsdesk.schemas.market import (
    AllBondsResponse,
    IndicatorEntry,
    RateEntry,
    RollHistoryJob,
    SeriesObservation,
    ShadowBondsResponse,
    StockQuote,
    TopDashboardResponse,
)
from mbsdesk.snapshots.bonds import (
    fetch_all_bonds,
    fetch_legacy_mbs,
    fetch_legacy_treasury,
    fetch_shadow_bonds,
    fetch_top_dashboard,
)
from mbsdesk.snapshots.indicators import fetch_fred_reports, fetch_indicators
from mbsdesk.snapshots.rates import fetch_daily_rates
from mbsdesk.store.base import DocumentStore

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/dashboard/top", response_model=TopDashboardResponse)
async def get_top_dashboard(store: DocumentStore = Depends(get_store)) -> TopDashboardResponse:
    return await fetch_top_dashboard(store)


@router.get("/bonds", response_model=AllBondsResponse)
async def get_all_bonds(store: DocumentStore = Depends(get_store)) -> AllBondsResponse:
    return await fetch_all_bonds(store)


@router.get("/bonds/mbs", response_model=dict[str, str | None])
async def get_mbs(store: DocumentStore = Depends(get_store)) -> dict[str, str | None]:
    return await fetch_legacy_mbs(store)


@router.get("/bonds/shadow", response_model=ShadowBondsResponse)
async def get_shadow_bonds(store: DocumentStore = Depends(get_store)) -> ShadowBondsResponse:
    return await fetch_shadow_bonds(store)


@router.get("/treasuries/us10y", response_model=dict[str, str | None])
async def get_us10y(store: DocumentStore = Depends(get_store)) -> dict[str, str | None]:
    return await fetch_legacy_treasury(store, "US10Y")


@router.get("/treasuries/us30y", response_model=dict[str, str | None])
async def get_us30y(store: DocumentStore = Depends(get_store)) -> dict[str, str | None]:
    return await fetch_legacy_treasury(store, "US30Y")


@router.get("/rates/daily", response_model=dict[str, RateEntry | None])
async def get_daily_rates(
    store: DocumentStore = Depends(get_store),
) -> dict[str, RateEntry | None]:
    return await fetch_daily_rates(store)


@router.post(
    "/rates/roll-history",
    response_model=RollHistoryJob,
    status_code=status.HTTP_202_ACCEPTED,
)
def roll_history(config: Settings = Depends(get_settings)) -> RollHistoryJob:
    job = enqueue_rate_history_roll(config)
    return RollHistoryJob(job_id=job.id)


@router.get("/indicators", response_model=dict[str, IndicatorEntry])
async def get_indicators(store: DocumentStore = Depends(get_store)) -> dict[str, IndicatorEntry]:
    return await fetch_indicators(store)


@router.get("/fred/reports")
async def get_fred_reports(store: DocumentStore = Depends(get_store)) -> dict:
    return await fetch_fred_reports(store)


@router.get("/fred/series/{series_id}", response_model=SeriesObservation)
async def get_fred_series(
    series_id: str, config: Settings = Depends(get_settings)
) -> SeriesObservation:
    return await fetch_series(series_id, config.providers)


@router.get("/stocks/live", response_model=dict[str, StockQuote | None])
async def get_live_stocks(
    config: Settings = Depends(get_settings),
) -> dict[str, StockQuote | None]:
    return await fetch_live_quotes(config.providers)
