from __future__ import annotations

import asyncio
import json
import logging
import re
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from mbsdesk.config.settings import ProviderSettings
from mbsdesk.errors import InvalidRequest, NotFound, UpstreamFailure
from mbsdesk.normalize.fields import parse_number
from mbsdesk.schemas.market import SeriesObservation
from mbsdesk.schemas.provider import ProviderResponse

logger = logging.getLogger(__name__)

_OBSERVATIONS_URL = "https://api.stlouisfed.org/fred/series/observations"
_SERIES_ID_RE = re.compile(r"^[A-Z0-9_]{1,32}$")

# FRED marks a missing observation with a lone dot.
_MISSING_VALUE = "."


def _build_url(params: dict[str, str]) -> str:
    return f"{_OBSERVATIONS_URL}?{urlencode(params)}"


def fetch_latest_observation(series_id: str, api_key: str | None, timeout: float = 10) -> ProviderResponse:
    if not api_key:
        return ProviderResponse(provider="fred", symbol=series_id, status="missing_key")

    url = _build_url(
        {
            "series_id": series_id,
            "api_key": api_key,
            "file_type": "json",
            "sort_order": "desc",
            "limit": "1",
        }
    )
    try:
        with urlopen(Request(url), timeout=timeout) as response:
            payload = json.loads(response.read().decode("utf-8"))
    except HTTPError as exc:
        logger.error("FRED API error for %s: status %s", series_id, exc.code)
        status = "rate_limited" if exc.code == 429 else "error"
        return ProviderResponse(provider="fred", symbol=series_id, status=status)
    except (URLError, OSError, ValueError) as exc:
        logger.error("FRED request for %s failed: %s", series_id, exc)
        return ProviderResponse(provider="fred", symbol=series_id, status="error")

    if not isinstance(payload, dict):
        return ProviderResponse(provider="fred", symbol=series_id, status="error")
    if not payload.get("observations"):
        return ProviderResponse(provider="fred", symbol=series_id, payload=payload, status="empty")
    return ProviderResponse(provider="fred", symbol=series_id, payload=payload, status="ok")


def normalize_series_id(series_id: str) -> str:
    cleaned = series_id.strip().upper()
    if not _SERIES_ID_RE.match(cleaned):
        raise InvalidRequest("series_id must be an alphanumeric FRED series identifier.")
    return cleaned


async def fetch_series(series_id: str, config: ProviderSettings) -> SeriesObservation:
    normalized = normalize_series_id(series_id)
    response = await asyncio.to_thread(
        fetch_latest_observation, normalized, config.fred_api_key, config.request_timeout_seconds
    )
    if response.status == "missing_key":
        raise UpstreamFailure("FRED API key is not configured on the server.")
    if response.status in ("error", "rate_limited"):
        raise UpstreamFailure(f"Failed to fetch {normalized} from FRED.")

    observations = response.payload.get("observations") or []
    latest = observations[0] if observations else None
    if not isinstance(latest, dict) or latest.get("value") in (None, _MISSING_VALUE):
        raise NotFound(f"No valid data found for {normalized}.", body_key="message")

    value = parse_number(latest.get("value"))
    if value is None:
        raise NotFound(f"No valid data found for {normalized}.", body_key="message")
    return SeriesObservation(series_id=normalized, date=str(latest.get("date")), value=float(value))
