"""MarketDataService — trending topics and token prices.

Three free, keyless feeds become the scouts' sentiment topics:
CoinGecko's trending list, CoinGecko's highest-volume coins and the
busiest DexScreener pairs. DexScreener also gives launched tokens a
live price. Every call degrades to an empty result on timeout, rate
limit or bad payload so a swarm cycle never aborts on market data.
"""

from __future__ import annotations

import asyncio
import logging
import math
import time
from typing import Any

import httpx
from pydantic import BaseModel

from genmon.engine.dna import round_half_up
from genmon.engine.scouting import TopicSentiment

_logger = logging.getLogger(__name__)

TRENDING_TTL = 90.0
PAIRS_TTL = 60.0
TRENDING_FETCH = 15
GAINERS_FETCH = 15
DEX_TRENDING_QUERIES = ("WETH", "SOL", "MON", "USDC", "PEPE")


class TrendingCoin(BaseModel):
    """A CoinGecko coin with its rank-based score and 24h change."""

    name: str
    symbol: str
    price_change_24h: float = 0.0
    score: int = 0


class DexPair(BaseModel):
    """A DEX trading pair as reported by DexScreener."""

    chain_id: str = ""
    dex_id: str = ""
    pair_address: str = ""
    base_symbol: str = ""
    base_name: str = ""
    base_address: str = ""
    price_usd: float = 0.0
    price_change_24h: float = 0.0
    volume_24h: float = 0.0
    liquidity_usd: float = 0.0
    url: str = ""


class MarketDataService:
    """Fetches market data with a small in-process TTL cache."""

    def __init__(
        self,
        coingecko_url: str = "https://api.coingecko.com/api/v3",
        dexscreener_url: str = "https://api.dexscreener.com",
        timeout: float = 8.0,
    ) -> None:
        self._coingecko_url = coingecko_url.rstrip("/")
        self._dexscreener_url = dexscreener_url.rstrip("/")
        self._timeout = timeout
        self._cache: dict[str, tuple[float, Any]] = {}

    def _cached(self, key: str) -> Any | None:
        entry = self._cache.get(key)
        if entry and time.monotonic() < entry[0]:
            return entry[1]
        return None

    def _store(self, key: str, value: Any, ttl: float) -> None:
        self._cache[key] = (time.monotonic() + ttl, value)

    async def _get_json(self, url: str, params: dict | None = None) -> Any | None:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.get(
                    url, params=params, headers={"accept": "application/json"},
                )
                resp.raise_for_status()
                return resp.json()
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            _logger.warning("Market data request to %s failed: %s", url, e)
            return None

    async def get_market_sentiment(self, limit: int = 10) -> list[TopicSentiment]:
        """Blend trending coins, top gainers and busy DEX pairs into scout topics.

        Each source gets a few slots, a symbol is used once (first source
        wins), and the best `limit` entries come back highest score first.
        A failing source contributes nothing.
        """
        trending, gainers, dex_pairs = await asyncio.gather(
            self.get_trending_coins(),
            self.get_top_gainers(GAINERS_FETCH),
            self.get_dex_trending(),
        )

        topics: list[TopicSentiment] = []
        seen: set[str] = set()

        def add(source: str, symbol: str, topic: str, score: float) -> None:
            key = symbol.lower()
            if not key or key in seen:
                return
            seen.add(key)
            topics.append(TopicSentiment(
                topic=topic,
                score=max(10, min(100, round_half_up(score))),
                source=source,
            ))

        for coin in trending[:max(2, math.ceil(limit * 0.2))]:
            change = coin.price_change_24h
            bonus = min(20.0, change) if change > 0 else max(-20.0, change / 2)
            add("coingecko", coin.symbol, f"{coin.name} ({coin.symbol})", coin.score + bonus)

        for coin in gainers[:max(1, math.ceil(limit * 0.1))]:
            add("coingecko", coin.symbol, f"{coin.name} ({coin.symbol})", 50 + coin.price_change_24h)

        for pair in dex_pairs[:max(1, math.ceil(limit * 0.1))]:
            volume = 30 if pair.volume_24h > 1_000_000 else 20 if pair.volume_24h > 100_000 else 10
            change = min(20.0, max(-10.0, pair.price_change_24h))
            name = pair.base_name or pair.base_symbol
            add("dexscreener", pair.base_symbol, f"{name} ({pair.base_symbol})", 40 + volume + change)

        topics.sort(key=lambda t: t.score, reverse=True)
        return topics[:limit]

    async def get_trending_coins(self) -> list[TrendingCoin]:
        """CoinGecko's trending list. Rank 1 scores 100, then -6 per rank."""
        cached = self._cached("trending")
        if cached is not None:
            return cached

        data = await self._get_json(f"{self._coingecko_url}/search/trending")
        if not isinstance(data, dict):
            return []

        coins = []
        for idx, item in enumerate((data.get("coins") or [])[:TRENDING_FETCH]):
            try:
                c = item.get("item") or {}
                change = ((c.get("data") or {}).get("price_change_percentage_24h") or {}).get("usd")
                coins.append(TrendingCoin(
                    name=c["name"],
                    symbol=c["symbol"],
                    price_change_24h=float(change or 0),
                    score=max(10, 100 - idx * 6),
                ))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                _logger.debug("Skipping malformed trending coin: %s", e)

        if coins:
            self._store("trending", coins, TRENDING_TTL)
        return coins

    async def get_top_gainers(self, limit: int = 10) -> list[TrendingCoin]:
        """Highest-volume coins on CoinGecko with their 24h change."""
        key = f"gainers:{limit}"
        cached = self._cached(key)
        if cached is not None:
            return cached

        data = await self._get_json(
            f"{self._coingecko_url}/coins/markets",
            params={
                "vs_currency": "usd",
                "order": "volume_desc",
                "per_page": limit,
                "page": 1,
                "sparkline": "false",
                "price_change_percentage": "24h",
            },
        )
        if not isinstance(data, list):
            return []

        coins = []
        for idx, c in enumerate(data):
            try:
                coins.append(TrendingCoin(
                    name=c["name"],
                    symbol=c["symbol"].upper(),
                    price_change_24h=float(c.get("price_change_percentage_24h") or 0),
                    score=max(10, 100 - idx * 8),
                ))
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                _logger.debug("Skipping malformed market entry: %s", e)

        if coins:
            self._store(key, coins, TRENDING_TTL)
        return coins

    async def get_dex_trending(self) -> list[DexPair]:
        """Busiest pairs across a few popular searches, one per symbol and chain."""
        cached = self._cached("dex_trending")
        if cached is not None:
            return cached

        found: list[DexPair] = []
        for query in DEX_TRENDING_QUERIES:
            data = await self._get_json(
                f"{self._dexscreener_url}/latest/dex/search", params={"q": query},
            )
            if not isinstance(data, dict):
                continue
            for p in (data.get("pairs") or [])[:5]:
                try:
                    found.append(self._parse_pair(p))
                except (TypeError, ValueError, AttributeError) as e:
                    _logger.debug("Skipping malformed pair: %s", e)

        pairs = []
        seen = set()
        for pair in sorted(found, key=lambda p: p.volume_24h, reverse=True):
            key = (pair.base_symbol, pair.chain_id)
            if key in seen:
                continue
            seen.add(key)
            pairs.append(pair)
        pairs = pairs[:15]

        if pairs:
            self._store("dex_trending", pairs, TRENDING_TTL)
        return pairs

    async def search_dex_pairs(self, query: str) -> list[DexPair]:
        """Pairs matching a token address or symbol, best match first."""
        key = f"pairs:{query}"
        cached = self._cached(key)
        if cached is not None:
            return cached

        data = await self._get_json(
            f"{self._dexscreener_url}/latest/dex/search", params={"q": query},
        )
        if not isinstance(data, dict):
            return []

        pairs = []
        for p in (data.get("pairs") or [])[:20]:
            try:
                pairs.append(self._parse_pair(p))
            except (TypeError, ValueError, AttributeError) as e:
                _logger.debug("Skipping malformed pair: %s", e)
        self._store(key, pairs, PAIRS_TTL)
        return pairs

    @staticmethod
    def _parse_pair(p: dict[str, Any]) -> DexPair:
        base = p.get("baseToken") or {}
        return DexPair(
            chain_id=p.get("chainId") or "",
            dex_id=p.get("dexId") or "",
            pair_address=p.get("pairAddress") or "",
            base_symbol=base.get("symbol") or "",
            base_name=base.get("name") or "",
            base_address=base.get("address") or "",
            price_usd=float(p.get("priceUsd") or 0),
            price_change_24h=float((p.get("priceChange") or {}).get("h24") or 0),
            volume_24h=float((p.get("volume") or {}).get("h24") or 0),
            liquidity_usd=float((p.get("liquidity") or {}).get("usd") or 0),
            url=p.get("url") or "",
        )
