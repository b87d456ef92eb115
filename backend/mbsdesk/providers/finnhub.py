from __future__ import annotations

import asyncio
import json
import logging
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from mbsdesk.config.settings import ProviderSettings
from mbsdesk.errors import UpstreamFailure
from mbsdesk.normalize.fields import format_decimal, parse_number
from mbsdesk.normalize.tables import EQUITY_PLACES
from mbsdesk.schemas.market import StockQuote
from mbsdesk.schemas.provider import ProviderResponse

logger = logging.getLogger(__name__)

_QUOTE_PATH = "/api/v1/quote"


def _build_url(path: str, params: dict[str, str]) -> str:
    return f"https://finnhub.io{path}?{urlencode(params)}"


def fetch_quote(symbol: str, api_key: str | None, timeout: float = 10) -> ProviderResponse:
    if not api_key:
        return ProviderResponse(provider="finnhub", symbol=symbol, status="missing_key")

    url = _build_url(_QUOTE_PATH, {"symbol": symbol, "token": api_key})
    request = Request(url)
    try:
        with urlopen(request, timeout=timeout) as response:
            body = response.read().decode("utf-8")
        payload = json.loads(body)
    except HTTPError as exc:
        logger.error("Finnhub API error for %s: status %s", symbol, exc.code)
        status = "rate_limited" if exc.code == 429 else "error"
        return ProviderResponse(provider="finnhub", symbol=symbol, status=status)
    except (URLError, OSError, ValueError) as exc:
        logger.error("Finnhub request for %s failed: %s", symbol, exc)
        return ProviderResponse(provider="finnhub", symbol=symbol, status="error")

    if not isinstance(payload, dict):
        return ProviderResponse(provider="finnhub", symbol=symbol, status="error")

    has_values = payload.get("c") is not None and payload.get("pc") is not None
    if not has_values:
        return ProviderResponse(provider="finnhub", symbol=symbol, payload=payload, status="empty")

    return ProviderResponse(provider="finnhub", symbol=symbol, payload=payload, status="ok")


def normalize_quote(payload: dict) -> StockQuote | None:
    """Current price with change and percent change against the previous close.

    Returns None when the quote lacks either price or the previous close is 0,
    which is how Finnhub reports unknown symbols.
    """
    current = parse_number(payload.get("c"))
    previous_close = parse_number(payload.get("pc"))
    if current is None or previous_close is None or previous_close == 0:
        return None

    change = current - previous_close
    percent = change / previous_close * 100
    return StockQuote(
        current=format_decimal(current, EQUITY_PLACES),
        change=format_decimal(change, EQUITY_PLACES),
        percentChange=f"{format_decimal(percent, EQUITY_PLACES)}%",
    )


async def fetch_live_quotes(config: ProviderSettings) -> dict[str, StockQuote | None]:
    if not config.finnhub_api_key:
        logger.error("FINNHUB_API_KEY environment variable is not set.")
        raise UpstreamFailure("Finnhub API key is not configured on the server.")

    symbols = list(config.live_stock_symbols)
    responses = await asyncio.gather(
        *(
            asyncio.to_thread(
                fetch_quote, symbol, config.finnhub_api_key, config.request_timeout_seconds
            )
            for symbol in symbols
        )
    )

    quotes: dict[str, StockQuote | None] = {}
    for symbol, response in zip(symbols, responses):
        quote = normalize_quote(response.payload) if response.status == "ok" else None
        if quote is None:
            logger.warning("Incomplete or missing quote for %s (status=%s)", symbol, response.status)
        quotes[symbol] = quote
    return quotes
