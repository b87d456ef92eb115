import asyncio

import pytest

from fakes import FakeStore
from mbsdesk.errors import NotFound, UpstreamFailure
from mbsdesk.snapshots.bonds import (
    fetch_all_bonds,
    fetch_legacy_mbs,
    fetch_legacy_treasury,
    fetch_shadow_bonds,
    fetch_top_dashboard,
)
from mbsdesk.snapshots.indicators import fetch_fred_reports, fetch_indicators
from mbsdesk.snapshots.rates import fetch_daily_rates, roll_rate_history


def market_documents() -> dict:
    return {
        "market_data": {
            "mbs_products": {
                "UMBS_5_5_Current": 99.55,
                "UMBS_5_5_Daily_Change": -0.05,
                "UMBS_5_5_Open": 99.6,
                "last_updated": "2025-06-02 14:05:00",
            },
            "shadow_bonds": {
                "UMBS_5_5_Shadow_Current": "99.10",
                "UMBS_5_5_Shadow_Daily_Change": "0.02",
                "last_updated": "2025-06-02 14:00:00",
            },
            "us10y_current": {"US10Y_Current": 4.425, "last_updated": "2025-06-02 13:59:00"},
            "us30y_current": {"US30Y_Current": "4.95", "US30Y_Daily_Change": "-0.01"},
        }
    }


def test_top_dashboard_fills_missing_fields_with_null() -> None:
    store = FakeStore(market_documents())

    result = asyncio.run(fetch_top_dashboard(store))

    assert result.UMBS_5_5.current == "99.55"
    assert result.UMBS_5_5.change == "-0.05"
    assert result.UMBS_5_5.high is None
    assert result.UMBS_5_5.last_updated == "2025-06-02T14:05:00"
    assert result.GNMA_5_5.current is None
    assert result.UMBS_5_5_Shadow.current == "99.10"
    assert result.US10Y.yield_ == "4.425"
    assert result.US10Y.change is None
    assert result.US30Y.last_updated is None

    dumped = result.model_dump(by_alias=True)
    assert dumped["US10Y"] == {"yield": "4.425", "change": None, "last_updated": "2025-06-02T13:59:00"}
    assert set(dumped["GNMA_5_5"]) == {
        "current",
        "change",
        "open",
        "high",
        "low",
        "prevClose",
        "last_updated",
    }


def test_top_dashboard_missing_document_is_not_found() -> None:
    documents = market_documents()
    del documents["market_data"]["us30y_current"]
    store = FakeStore(documents)

    with pytest.raises(NotFound) as excinfo:
        asyncio.run(fetch_top_dashboard(store))

    assert excinfo.value.status_code == 404


def test_store_failure_becomes_upstream_failure() -> None:
    store = FakeStore(market_documents(), fail=True)

    with pytest.raises(UpstreamFailure) as excinfo:
        asyncio.run(fetch_top_dashboard(store))

    assert excinfo.value.status_code == 500


def test_all_bonds_uses_fallback_keys_and_tolerates_missing_documents() -> None:
    store = FakeStore(
        {
            "market_data": {
                "shadow_bonds": {
                    "UMBS_5_5_Shadow_current": "99.1",
                    "UMBS_5_5_Shadow_TodayHigh": "99.3",
                    "UMBS_5_5_Shadow_High": "99.9",
                    "UMBS_5_5_Shadow_PriorDayClose": 99.05,
                    "UMBS_5_5_Shadow_Status": "open",
                    "trading_day_date": "2025-06-02",
                    "last_updated": "2025-06-02 10:00",
                }
            }
        }
    )

    result = asyncio.run(fetch_all_bonds(store))

    shadow = result.UMBS_5_5_Shadow
    assert shadow.current == "99.1"
    assert shadow.high == "99.3"
    assert shadow.prevClose == "99.05"
    assert shadow.status == "open"
    assert shadow.close is None
    assert result.UMBS_5_5.current is None
    assert result.US10Y.current is None
    assert result.last_updated == "2025-06-02 10:00"
    assert result.trading_day_date == "2025-06-02"


def test_shadow_bonds_not_found_uses_message_key() -> None:
    with pytest.raises(NotFound) as excinfo:
        asyncio.run(fetch_shadow_bonds(FakeStore()))

    assert excinfo.value.body_key == "message"


def test_legacy_documents_map_flat_fields() -> None:
    store = FakeStore(
        {
            "mbs_data": {"market_data": {"UMBS_5_5_Current": 99.5, "timestamp": "2025-06-02 09:30:00"}},
            "bonds_for_umbs": {"market_data": {"US10Y": 4.41, "US30Y": 4.9, "timestamp": "2025-06-02"}},
        }
    )

    mbs = asyncio.run(fetch_legacy_mbs(store))
    us10y = asyncio.run(fetch_legacy_treasury(store, "US10Y"))

    assert mbs["UMBS_5_5_Current"] == "99.5"
    assert mbs["GNMA_6_0_Open"] is None
    assert mbs["last_updated"] == "2025-06-02T09:30:00"
    assert us10y == {"US10Y_Current": "4.41", "US10Y_Daily_Change": None, "last_updated": "2025-06-02"}


def test_daily_rates_derive_change_and_fix_three_places() -> None:
    store = FakeStore(
        {
            "fred_reports": {
                "30Y Fixed Rate Conforming": {
                    "latest": "4.500",
                    "latest_date": "2025-06-02",
                    "yesterday": "4.250",
                    "last_month": 6.9,
                    "year_ago": None,
                },
                "30Y FHA Mortgage Index": {"latest": "6.1", "yesterday": "pending"},
                "15Y Mortgage Avg US": {"latest": 5.9, "yesterday": 5.9},
            }
        }
    )

    rates = asyncio.run(fetch_daily_rates(store))

    fixed = rates["fixed30Y"]
    assert fixed is not None
    assert fixed.latest == "4.500"
    assert fixed.daily_change == "0.250"
    assert fixed.last_month == "6.900"
    assert fixed.year_ago is None
    assert rates["fha30Y"].daily_change is None
    assert rates["fixed15Y"].daily_change == "0.000"
    assert rates["va30Y"] is None
    assert set(rates) == {"fixed30Y", "va30Y", "fha30Y", "jumbo30Y", "usda30Y", "fixed15Y"}


def test_indicators_key_by_series_and_drop_zero_change() -> None:
    store = FakeStore(
        {
            "fred_reports": {
                "Total Housing Starts": {"series_id": "HOUST", "latest": 100, "last_month": 100},
                "Consumer Sentiment": {
                    "series_id": "UMCSENT",
                    "latest": "52.2",
                    "latest_date": "2025-05-01",
                    "last_month": "50.8",
                },
            }
        }
    )

    indicators = asyncio.run(fetch_indicators(store))

    assert set(indicators) == {"HOUST", "UMCSENT"}
    assert indicators["HOUST"].monthly_change is None
    assert indicators["HOUST"].latest == "100"
    assert indicators["UMCSENT"].monthly_change == "1.40"
    assert indicators["UMCSENT"].year_ago is None


def test_fred_reports_empty_collection_is_not_found() -> None:
    with pytest.raises(NotFound) as excinfo:
        asyncio.run(fetch_fred_reports(FakeStore()))

    assert excinfo.value.body_key == "message"


def test_roll_rate_history_copies_latest_into_yesterday() -> None:
    store = FakeStore(
        {
            "fred_reports": {
                "30Y Fixed Rate Conforming": {"latest": "6.85", "latest_date": "2025-06-02"},
                "30Y VA Mortgage Index": {"latest": "6.40"},
            }
        }
    )

    summary = asyncio.run(roll_rate_history(store))

    assert summary.updated == ["30Y Fixed Rate Conforming"]
    assert summary.skipped == ["30Y VA Mortgage Index"]
    assert len(summary.missing) == 4
    fixed = store.documents["fred_reports"]["30Y Fixed Rate Conforming"]
    assert fixed["yesterday"] == "6.85"
    assert fixed["yesterday_date"] == "2025-06-02"
    assert "yesterday" not in store.documents["fred_reports"]["30Y VA Mortgage Index"]


def test_legacy_treasury_daily_change_is_always_null() -> None:
    store = FakeStore(
        {
            "bonds_for_umbs": {
                "market_data": {"US30Y": 4.9, "US30Y_Daily_Change": "0.03", "timestamp": "2025-06-02"}
            }
        }
    )

    us30y = asyncio.run(fetch_legacy_treasury(store, "US30Y"))

    assert us30y["US30Y_Current"] == "4.9"
    assert us30y["US30Y_Daily_Change"] is None
