from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PriceFields(BaseModel):
    current: Optional[str] = None
    change: Optional[str] = None
    open: Optional[str] = None
    high: Optional[str] = None
    low: Optional[str] = None
    prevClose: Optional[str] = None


class InstrumentReading(PriceFields):
    last_updated: Optional[str] = None


class BondReading(PriceFields):
    close: Optional[str] = None
    geminiChange: Optional[str] = None
    status: Optional[str] = None


class TreasuryReading(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    yield_: Optional[str] = Field(default=None, alias="yield")
    change: Optional[str] = None
    last_updated: Optional[str] = None


class TopDashboardResponse(BaseModel):
    UMBS_5_5: InstrumentReading
    GNMA_5_5: InstrumentReading
    UMBS_5_5_Shadow: InstrumentReading
    US10Y: TreasuryReading
    US30Y: TreasuryReading


class AllBondsResponse(BaseModel):
    last_updated: Optional[str] = None
    UMBS_5_5: BondReading
    UMBS_6_0: BondReading
    GNMA_5_5: BondReading
    GNMA_6_0: BondReading
    UMBS_5_5_Shadow: BondReading
    UMBS_6_0_Shadow: BondReading
    GNMA_5_5_Shadow: BondReading
    GNMA_6_0_Shadow: BondReading
    US10Y: BondReading
    US30Y: BondReading
    trading_day_date: Optional[str] = None


class ShadowBondsResponse(BaseModel):
    last_updated: Optional[str] = None
    trading_day_date: Optional[str] = None
    UMBS_5_5_Shadow: InstrumentReading
    UMBS_6_0_Shadow: InstrumentReading
    GNMA_5_5_Shadow: InstrumentReading
    GNMA_6_0_Shadow: InstrumentReading


class RateEntry(BaseModel):
    latest: Optional[str] = None
    latest_date: Optional[str] = None
    yesterday: Optional[str] = None
    yesterday_date: Optional[str] = None
    last_month: Optional[str] = None
    last_month_date: Optional[str] = None
    year_ago: Optional[str] = None
    year_ago_date: Optional[str] = None
    daily_change: Optional[str] = None


class IndicatorEntry(BaseModel):
    latest: Optional[str] = None
    latest_date: Optional[str] = None
    last_month: Optional[str] = None
    last_month_date: Optional[str] = None
    year_ago: Optional[str] = None
    year_ago_date: Optional[str] = None
    monthly_change: Optional[str] = None


class StockQuote(BaseModel):
    current: str
    change: str
    percentChange: str


class SeriesObservation(BaseModel):
    series_id: str
    date: str
    value: float


class RollHistoryJob(BaseModel):
    job_id: str
    status: Literal["queued"] = "queued"
