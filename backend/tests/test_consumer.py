import asyncio

from mbsdesk.config.settings import ConsumerSettings
from mbsdesk.consumer.poller import DataGroup, Poller, default_groups
from mbsdesk.consumer.render import (
    NEGATIVE,
    PLACEHOLDER,
    POSITIVE,
    Board,
    Cell,
    format_timestamp,
    render_change,
    render_rates,
    render_stocks,
    render_top,
)


def stock_payload(current: str, change: str, percent: str) -> dict:
    return {"SPY": {"current": current, "change": change, "percentChange": percent}}


def test_negative_change_is_styled_without_plus() -> None:
    assert render_change(-0.125) == Cell("-0.125", NEGATIVE)


def test_zero_change_has_no_class() -> None:
    assert render_change(0) == Cell("0", None)
    assert render_change("0.000") == Cell("0.000", None)


def test_positive_change_gets_plus_prefix() -> None:
    assert render_change("0.250") == Cell("+0.250", POSITIVE)
    assert render_change("+0.03%") == Cell("+0.03%", POSITIVE)


def test_missing_values_render_placeholder() -> None:
    assert render_change(None) == Cell(PLACEHOLDER)
    assert render_change("") == Cell(PLACEHOLDER)
    assert render_change("N/A") == Cell("N/A")


def test_format_timestamp() -> None:
    assert format_timestamp("2025-06-02T14:05:00") == "2:05 PM 6/2/2025"
    assert format_timestamp("2025-06-02 00:30:00") == "12:30 AM 6/2/2025"
    assert format_timestamp(None) == PLACEHOLDER
    assert format_timestamp("yesterday") == "yesterday"


def test_render_top_fills_every_cell() -> None:
    cells = render_top(
        {
            "UMBS_5_5": {"current": "99.55", "change": "-0.05", "last_updated": "2025-06-02T14:05:00"},
            "US10Y": {"yield": "4.425", "change": "0.01"},
        }
    )

    assert cells["UMBS_5_5_current"] == Cell("99.55")
    assert cells["UMBS_5_5_change"] == Cell("-0.05", NEGATIVE)
    assert cells["UMBS_5_5_high"] == Cell(PLACEHOLDER)
    assert cells["GNMA_5_5_current"] == Cell(PLACEHOLDER)
    assert cells["US10Y_yield"] == Cell("4.425")
    assert cells["US10Y_change"] == Cell("+0.01", POSITIVE)
    assert cells["US30Y_yield"] == Cell(PLACEHOLDER)
    assert cells["last_updated"] == Cell("2:05 PM 6/2/2025")


def test_render_rates_handles_null_entries() -> None:
    cells = render_rates({"fixed30Y": {"latest": "6.850", "daily_change": "-0.020"}, "va30Y": None})

    assert cells["fixed30Y_latest"] == Cell("6.850")
    assert cells["fixed30Y_daily_change"] == Cell("-0.020", NEGATIVE)
    assert cells["va30Y_latest"] == Cell(PLACEHOLDER)


def test_failed_group_keeps_previous_cells_and_others_update() -> None:
    responses = {
        "http://desk/stocks/live": [
            stock_payload("510.00", "5.00", "0.99%"),
            stock_payload("511.00", "6.00", "1.19%"),
        ],
        "http://desk/rates/daily": [{"fixed30Y": {"latest": "6.850"}}, RuntimeError("503")],
    }

    async def fetch(url: str) -> dict:
        outcome = responses[url].pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    groups = [
        DataGroup("rates", "/rates/daily", 120, render_rates),
        DataGroup("stocks", "/stocks/live", 60, render_stocks),
    ]
    poller = Poller("http://desk/", groups, fetch=fetch)

    first = asyncio.run(poller.run_once())
    second = asyncio.run(poller.run_once())

    assert first == {"rates": True, "stocks": True}
    assert second == {"rates": False, "stocks": True}
    assert poller.board.get("fixed30Y_latest") == Cell("6.850")
    assert poller.board.get("SPY_current") == Cell("511.00")
    assert poller.board.get("SPY_change") == Cell("+6.00", POSITIVE)
    assert poller.board.get("never_rendered") == Cell(PLACEHOLDER)


def test_new_cycle_supersedes_in_flight_cycle() -> None:
    group = DataGroup("stocks", "/stocks/live", 60, render_stocks)

    async def scenario() -> tuple[asyncio.Task, bool, Board]:
        release = asyncio.Event()
        calls: list[str] = []

        async def fetch(url: str) -> dict:
            calls.append(url)
            if len(calls) == 1:
                await release.wait()
                return stock_payload("1.00", "0.00", "0.00%")
            return stock_payload("2.00", "-0.10", "-4.76%")

        poller = Poller("http://desk", [group], fetch=fetch)
        stale = poller.trigger(group)
        await asyncio.sleep(0)
        fresh = poller.trigger(group)
        ok = await fresh
        release.set()
        await asyncio.gather(stale, return_exceptions=True)
        return stale, ok, poller.board

    stale, ok, board = asyncio.run(scenario())

    assert stale.cancelled()
    assert ok is True
    assert board.get("SPY_current") == Cell("2.00")
    assert board.get("SPY_change") == Cell("-0.10", NEGATIVE)


def test_run_stops_when_event_is_set() -> None:
    seen: list[str] = []

    async def fetch(url: str) -> dict:
        seen.append(url)
        return {}

    async def scenario() -> None:
        stop = asyncio.Event()
        poller = Poller("http://desk", default_groups(ConsumerSettings()), fetch=fetch)
        runner = asyncio.create_task(poller.run(stop))
        await asyncio.sleep(0.01)
        stop.set()
        await asyncio.wait_for(runner, timeout=1)

    asyncio.run(scenario())

    assert sorted(seen) == [
        "http://desk/dashboard/top",
        "http://desk/rates/daily",
        "http://desk/stocks/live",
    ]
