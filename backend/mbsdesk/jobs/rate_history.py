from __future__ import annotations

import asyncio
from dataclasses import asdict

from mbsdesk.config.settings import Settings, settings
from mbsdesk.snapshots.rates import roll_rate_history
from mbsdesk.store.factory import build_store


async def _roll(config: Settings) -> dict[str, list[str]]:
    store = build_store(config)
    try:
        await store.prepare()
        summary = await roll_rate_history(store)
    finally:
        await store.close()
    return asdict(summary)


def run_rate_history_roll(config: Settings | None = None) -> dict[str, list[str]]:
    return asyncio.run(_roll(config or settings))
