"""Polling loop that keeps the ticker board current.

Each data group (top dashboard, rates, stocks) polls on its own interval and
fails on its own: a failed fetch is logged and leaves that group's cells as
they were. Starting a new cycle for a group cancels that group's previous
cycle if it is still in flight, so a slow response can never overwrite a
newer one.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping
from urllib.request import Request, urlopen

from mbsdesk.config.settings import ConsumerSettings, settings
from mbsdesk.consumer.render import Board, Cell, render_rates, render_stocks, render_top

logger = logging.getLogger(__name__)

Fetcher = Callable[[str], Awaitable[Mapping[str, Any]]]


@dataclass(frozen=True)
class DataGroup:
    name: str
    path: str
    interval_seconds: float
    render: Callable[[Mapping[str, Any]], dict[str, Cell]]


def default_groups(config: ConsumerSettings) -> list[DataGroup]:
    return [
        DataGroup("top", "/dashboard/top", config.top_interval_seconds, render_top),
        DataGroup("rates", "/rates/daily", config.rates_interval_seconds, render_rates),
        DataGroup("stocks", "/stocks/live", config.stocks_interval_seconds, render_stocks),
    ]


def _get_json(url: str, timeout: float) -> Mapping[str, Any]:
    request = Request(url, headers={"Accept": "application/json"})
    with urlopen(request, timeout=timeout) as response:
        payload = json.loads(response.read().decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Expected a JSON object from {url}")
    return payload


def http_fetcher(timeout: float = 10) -> Fetcher:
    async def fetch(url: str) -> Mapping[str, Any]:
        return await asyncio.to_thread(_get_json, url, timeout)

    return fetch


class Poller:
    def __init__(
        self,
        base_url: str,
        groups: list[DataGroup],
        board: Board | None = None,
        fetch: Fetcher | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.groups = groups
        self.board = board or Board()
        self._fetch = fetch or http_fetcher()
        self._in_flight: dict[str, asyncio.Task] = {}

    async def refresh(self, group: DataGroup) -> bool:
        """Fetch and render one group. Returns False when the cycle failed."""
        url = f"{self.base_url}{group.path}"
        try:
            payload = await self._fetch(url)
            cells = group.render(payload)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.error("Refreshing %s from %s failed: %s", group.name, url, exc)
            return False
        self.board.update(cells)
        return True

    def trigger(self, group: DataGroup) -> asyncio.Task:
        previous = self._in_flight.get(group.name)
        if previous is not None and not previous.done():
            logger.info("Superseding in-flight %s cycle", group.name)
            previous.cancel()
        task = asyncio.create_task(self.refresh(group), name=f"poll-{group.name}")
        self._in_flight[group.name] = task
        return task

    async def run_once(self) -> dict[str, bool]:
        tasks = [self.trigger(group) for group in self.groups]
        results = await asyncio.gather(*tasks, return_exceptions=True)
        return {
            group.name: result is True for group, result in zip(self.groups, results)
        }

    async def _loop(self, group: DataGroup, stop: asyncio.Event) -> None:
        while not stop.is_set():
            self.trigger(group)
            try:
                await asyncio.wait_for(stop.wait(), timeout=group.interval_seconds)
            except asyncio.TimeoutError:
                continue

    async def run(self, stop: asyncio.Event | None = None) -> None:
        stop = stop or asyncio.Event()
        try:
            await asyncio.gather(*(self._loop(group, stop) for group in self.groups))
        finally:
            for task in self._in_flight.values():
                task.cancel()


def _print_board(board: Board) -> None:
    for cell_id, cell in sorted(board.snapshot().items()):
        marker = f" [{cell.css_class}]" if cell.css_class else ""
        print(f"{cell_id:<28} {cell.text}{marker}")


def main() -> None:
    parser = argparse.ArgumentParser(description="Poll the mbsdesk API and print the ticker board")
    parser.add_argument("--base-url", default=settings.consumer.base_url)
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    args = parser.parse_args()

    logging.basicConfig(level=settings.log_level.upper())
    poller = Poller(args.base_url, default_groups(settings.consumer))
    if args.once:
        asyncio.run(poller.run_once())
        _print_board(poller.board)
        return
    asyncio.run(poller.run())


if __name__ == "__main__":
    main()
