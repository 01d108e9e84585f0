"""
Market data service — cached intraday forex series for the dashboard chart.

Series are cached for ``CACHE_TTL`` seconds per currency pair, so a busy
dashboard costs one provider call per pair every five minutes.
"""

import logging
import re
from typing import List, Optional

from yieldbook.clients.twelvedata import PricePoint, TwelveDataClient
from yieldbook.core.cache import TTLCache, market_data_cache
from yieldbook.core.exceptions import ValidationFailure

logger = logging.getLogger(__name__)

CURRENCY_CODE = re.compile(r"^[A-Za-z]{3}$")


class MarketDataService:
    CACHE_PREFIX = "forex:"

    def __init__(self, client: TwelveDataClient, cache: Optional[TTLCache] = None):
        self._client = client
        self._cache = cache if cache is not None else market_data_cache

    async def get_forex_series(self, base: str, quote: str) -> List[PricePoint]:
        if not (CURRENCY_CODE.match(base or "") and CURRENCY_CODE.match(quote or "")):
            raise ValidationFailure("Currency codes must be three letters, e.g. USD and NGN.")

        cache_key = f"{self.CACHE_PREFIX}{base.upper()}/{quote.upper()}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug("Cache hit for %s", cache_key)
            return cached

        series = await self._client.time_series(base, quote)
        self._cache.set(cache_key, series)
        return series
