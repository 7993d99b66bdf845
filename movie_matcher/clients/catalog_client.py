"""
TMDB catalog client with response caching, rate limiting using aiolimiter,
and retry/backoff on rate limits and transient failures.
"""
import asyncio
import math
import re
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote, urlencode
from aiohttp import ClientError, ClientSession, ClientTimeout
from aiolimiter import AsyncLimiter
from loguru import logger

from movie_matcher.cache import QueryCache
from movie_matcher.config import (
    BACKDROP_BASE_URL,
    CONCURRENCY,
    DEFAULT_RETRY_AFTER,
    MAX_RETRIES,
    PLACEHOLDER_POSTER,
    POSTER_BASE_URL,
    REQUEST_TIMEOUT,
    RETRY_BASE_DELAY,
    TMDB_API_KEY,
    TMDB_BASE_URL,
)
from movie_matcher.exceptions import (
    CatalogRequestError,
    CatalogUnavailable,
    ConfigurationError,
)
from movie_matcher.models import CatalogCandidate

_API_KEY_PARAM = re.compile(r"api_key=[^&]*")


def get_poster_url(path: Optional[str]) -> str:
    """Full poster URL for a catalog image path, or the placeholder image."""
    if not path:
        return PLACEHOLDER_POSTER
    return f"{POSTER_BASE_URL}{path}"


def get_backdrop_url(path: Optional[str]) -> str:
    """Full backdrop URL for a catalog image path, or an empty string."""
    if not path:
        return ""
    return f"{BACKDROP_BASE_URL}{path}"


def _mask(url: str) -> str:
    return _API_KEY_PARAM.sub("api_key=***", url)


def _parse_retry_after(value: Optional[str]) -> float:
    if value is None:
        return DEFAULT_RETRY_AFTER
    try:
        seconds = float(value)
    except ValueError:
        return DEFAULT_RETRY_AFTER
    if not math.isfinite(seconds):
        return DEFAULT_RETRY_AFTER
    return max(seconds, 0.0)


def _candidate(item: Dict[str, Any]) -> CatalogCandidate:
    try:
        return CatalogCandidate.from_api(item)
    except (KeyError, TypeError, ValueError) as e:
        raise CatalogRequestError(f"Malformed movie in catalog response: {e}") from e


class CatalogClient:
    """
    Client for the TMDB movie search and details endpoints.

    Every response is cached by its full request URL in a QueryCache, so
    repeated lookups never hit the network twice. Outbound requests go
    through an AsyncLimiter and share one aiohttp session.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = TMDB_BASE_URL,
        cache: Optional[QueryCache] = None,
        max_retries: int = MAX_RETRIES,
        retry_base_delay: float = RETRY_BASE_DELAY,
        requests_per_second: int = CONCURRENCY,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.cache = cache if cache is not None else QueryCache()
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.timeout = timeout
        self.rate_limiter = AsyncLimiter(max_rate=requests_per_second, time_period=1.0)
        self._session: Optional[ClientSession] = None

    @classmethod
    def from_env(cls, cache: Optional[QueryCache] = None) -> "CatalogClient":
        """Client configured from TMDB_API_KEY / TMDB_BASE_URL."""
        return cls(api_key=TMDB_API_KEY, base_url=TMDB_BASE_URL, cache=cache)

    def configure(self, api_key: str, base_url: Optional[str] = None) -> None:
        """Set the API key (and optionally the API host) used for requests."""
        self.api_key = api_key
        if base_url:
            self.base_url = base_url.rstrip("/")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def require_configured(self) -> None:
        if not self.is_configured:
            raise ConfigurationError(
                "TMDB API key is not configured. Call configure() with your API key first."
            )

    async def _get_session(self) -> ClientSession:
        """Get or create the aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = ClientSession(timeout=ClientTimeout(total=self.timeout))
        return self._session

    def _build_url(self, endpoint: str, params: Dict[str, Any]) -> str:
        query = {"api_key": self.api_key}
        query.update({k: v for k, v in params.items() if v is not None})
        return f"{self.base_url}/{endpoint}?{urlencode(query, quote_via=quote)}"

    async def _get_json(self, url: str) -> Tuple[int, Optional[str], Any]:
        """Issue one GET and return (status, Retry-After header, decoded body or None)."""
        async with self.rate_limiter:
            session = await self._get_session()
            async with session.get(url, headers={"Accept": "application/json"}) as resp:
                retry_after = resp.headers.get("Retry-After")
                if resp.status >= 400:
                    return resp.status, retry_after, None
                data = await resp.json(content_type=None)
                return resp.status, retry_after, data

    async def _fetch_with_cache(self, url: str) -> Any:
        """
        Fetch a catalog URL, serving it from the cache when possible.

        Rate-limited responses wait for the Retry-After hint; network errors,
        malformed bodies and 5xx responses back off exponentially. Both share
        the same attempt budget.

        Args:
            url: Fully built request URL, also used as cache key.

        Returns:
            Decoded JSON response.

        Raises:
            CatalogRequestError: For non-retryable HTTP errors.
            CatalogUnavailable: When every attempt failed.
        """
        cached = self.cache.get(url)
        if cached is not None:
            logger.debug(f"💾 Cache hit for {_mask(url)}")
            return cached

        delay = self.retry_base_delay
        last_error: Optional[BaseException] = None
        last_status: Optional[int] = None

        for attempt in range(1, self.max_retries + 1):
            start = time.perf_counter()
            logger.debug(f"▶️ GET {_mask(url)} (attempt {attempt}/{self.max_retries})")
            try:
                status, retry_after, data = await self._get_json(url)
            except (ClientError, asyncio.TimeoutError, ValueError) as e:
                last_error = e
                last_status = None
                logger.debug(f"⚠️ Catalog request failed: {e!r}")
            else:
                if status == 429:
                    wait = _parse_retry_after(retry_after)
                    last_error = None
                    last_status = status
                    if attempt < self.max_retries:
                        logger.warning(f"⏳ Rate limited by catalog, waiting {wait:.1f}s")
                        await asyncio.sleep(wait)
                    continue
                if status >= 500:
                    last_error = None
                    last_status = status
                    logger.debug(f"⚠️ Catalog returned {status} for {_mask(url)}")
                elif status >= 400:
                    raise CatalogRequestError(f"TMDB API error: {status}", status=status)
                else:
                    self.cache.set(url, data)
                    duration = time.perf_counter() - start
                    logger.debug(f"✅ Completed {_mask(url)} in {duration:.2f}s")
                    return data

            if attempt < self.max_retries:
                logger.warning(f"🔁 Retrying catalog request in {delay:.1f}s")
                await asyncio.sleep(delay)
                delay *= 2

        message = f"Catalog unavailable after {self.max_retries} attempts"
        if last_status is not None:
            message += f" (last status {last_status})"
        raise CatalogUnavailable(message, status=last_status) from last_error

    async def search_movies(self, query: str, year: Optional[int] = None) -> List[CatalogCandidate]:
        """
        Search the catalog for movies matching a title.

        Args:
            query: Free-text title.
            year: Optional release year filter.

        Returns:
            List[CatalogCandidate]: Candidates in catalog ranking order.

        Raises:
            CatalogRequestError: If the response is not a search result payload.
        """
        self.require_configured()
        url = self._build_url(
            "search/movie",
            {"query": query, "include_adult": "false", "year": year if year else None},
        )
        data = await self._fetch_with_cache(url)
        if not isinstance(data, dict):
            raise CatalogRequestError(f"Malformed search response for '{query}'")
        results = data.get("results") or []
        if not isinstance(results, list):
            raise CatalogRequestError(f"Malformed search results for '{query}'")
        return [_candidate(item) for item in results if isinstance(item, dict) and item.get("id") is not None]

    async def get_movie_details(self, movie_id: int) -> CatalogCandidate:
        """Fetch a single movie by its catalog id."""
        self.require_configured()
        url = self._build_url(f"movie/{int(movie_id)}", {})
        data = await self._fetch_with_cache(url)
        if not isinstance(data, dict):
            raise CatalogRequestError(f"Malformed details response for movie {movie_id}")
        return _candidate(data)

    def clear_cache(self, prefix: Optional[str] = None) -> int:
        """Clear cached responses whose URL starts with prefix, or all of them."""
        return self.cache.invalidate(prefix)

    async def close(self):
        """Close the aiohttp session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
