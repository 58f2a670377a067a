"""
Base API Client with rate limiting, caching, and error handling.
All API clients (Enka.Network, asset hosts, etc.) inherit from this.

Requests are made exactly once: the transport adapter is mounted with
retries disabled and failures are raised to the caller, which decides how to
surface them.
"""

from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Optional, Dict, Any, Tuple, Union
import random
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry
import time
import logging
from datetime import datetime, timedelta
import threading

from core.constants import CACHE_MAX_SIZE, ENKA_USER_AGENT

# Get logger - configuration should be done by application entrypoint, not library modules
logger = logging.getLogger(__name__)


class APIError(Exception):
    """Non-success API response or transport failure.

    status_code is None when no HTTP response was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(message)


class RateLimitExceeded(APIError):
    """Raised when API rate limit is hit"""

    def __init__(self, retry_after: int = 60):
        self.retry_after = retry_after
        super().__init__(
            f"Rate limit exceeded. Retry after {retry_after} seconds.",
            status_code=429,
        )


class RateLimiter:
    """Thread-safe rate limiter enforcing a minimum interval between calls"""

    def __init__(self, calls_per_second: float = 1.0):
        """
        Args:
            calls_per_second: Maximum requests per second (e.g., 0.5 = 1 req per 2 sec)
        """
        if calls_per_second <= 0:
            raise ValueError("calls_per_second must be positive")
        self.calls_per_second = calls_per_second
        self.min_interval = 1.0 / calls_per_second
        self.last_call_time = 0.0
        self.lock = threading.RLock()

    def wait_if_needed(self) -> None:
        """Block if necessary to respect rate limit"""
        with self.lock:
            current_time = time.time()
            time_since_last_call = current_time - self.last_call_time

            if time_since_last_call < self.min_interval:
                sleep_time = self.min_interval - time_since_last_call
                # Small jitter so concurrent API workers do not fire in lockstep
                jitter = min(0.25, 0.1 * self.min_interval)
                sleep_time += random.uniform(0, jitter)
                logger.debug(f"Rate limiting: sleeping {sleep_time:.2f}s (with jitter)")
                time.sleep(sleep_time)

            self.last_call_time = time.time()


class ResponseCache:
    """Thread-safe in-memory cache with TTL and LRU eviction."""

    def __init__(self, default_ttl: int = 60, max_size: int = CACHE_MAX_SIZE):
        """
        Args:
            default_ttl: Time-to-live in seconds
            max_size: Maximum cache entries before LRU eviction
        """
        self.cache: OrderedDict[str, tuple[Any, datetime]] = OrderedDict()
        self.default_ttl = default_ttl
        self.max_size = max_size
        self.lock = threading.RLock()
        self.hits = 0
        self.misses = 0
        self.sets = 0
        self.evictions = 0

    def get(self, key: str) -> Optional[Any]:
        """Get cached value if not expired. Moves item to end for LRU ordering."""
        with self.lock:
            if key in self.cache:
                value, expiry = self.cache[key]
                if datetime.now() < expiry:
                    self.cache.move_to_end(key)
                    logger.debug(f"Cache hit: {key}")
                    self.hits += 1
                    return value
                del self.cache[key]
                logger.debug(f"Cache expired: {key}")
            self.misses += 1
        return None

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store value in cache with expiry. Evicts oldest if at capacity."""
        with self.lock:
            if key in self.cache:
                del self.cache[key]
            while len(self.cache) >= self.max_size:
                oldest_key, _ = self.cache.popitem(last=False)
                logger.debug(f"Cache evicted (LRU): {oldest_key}")
                self.evictions += 1

            ttl = ttl or self.default_ttl
            self.cache[key] = (value, datetime.now() + timedelta(seconds=ttl))
            logger.debug(
                "Cache set: %s (TTL: %ss, size: %s/%s)",
                key,
                ttl,
                len(self.cache),
                self.max_size,
            )
            self.sets += 1

    def stats(self) -> Dict[str, int]:
        """Return simple cache metrics for observability."""
        with self.lock:
            return {
                "hits": self.hits,
                "misses": self.misses,
                "sets": self.sets,
                "evictions": self.evictions,
                "size": len(self.cache),
                "capacity": self.max_size,
            }


TimeoutType = Union[int, float, Tuple[int, int], Tuple[float, float]]


class BaseAPIClient(ABC):
    """
    Abstract base class for all API clients.
    Provides rate limiting, caching and error handling.
    """

    # Connection pool settings
    POOL_CONNECTIONS = 10  # Number of connection pools to cache
    POOL_MAXSIZE = 20      # Max connections per pool
    MAX_RETRIES = 0        # One attempt per request

    def __init__(
            self,
            base_url: str,
            rate_limit: float = 1.0,
            cache_ttl: int = 60,
            user_agent: Optional[str] = None,
            timeout: TimeoutType = 10,
            session: Optional[requests.Session] = None,
    ):
        """
        Args:
            base_url: Base URL for the API
            rate_limit: Requests per second (e.g., 0.5 = 1 req per 2 sec)
            cache_ttl: Default cache time-to-live in seconds
            user_agent: Custom User-Agent header
            timeout: Request timeout in seconds, or (connect, read)
            session: Pre-built session (tests inject a fake one)
        """
        self.base_url = base_url.rstrip('/')
        self.rate_limiter = RateLimiter(calls_per_second=rate_limit)
        self.cache = ResponseCache(default_ttl=cache_ttl)
        self.timeout: TimeoutType = timeout
        self.user_agent = user_agent or ENKA_USER_AGENT

        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(
                pool_connections=self.POOL_CONNECTIONS,
                pool_maxsize=self.POOL_MAXSIZE,
                max_retries=Retry(total=self.MAX_RETRIES, raise_on_status=False),
            )
            session.mount('https://', adapter)
            session.mount('http://', adapter)
        self.session = session
        self.session.headers.update({
            'User-Agent': self.user_agent,
            'Accept': 'application/json'
        })

        logger.info(f"Initialized {self.__class__.__name__} - Rate: {rate_limit} req/s, Cache TTL: {cache_ttl}s")

    @abstractmethod
    def _get_cache_key(self, endpoint: str, params: Optional[Dict] = None) -> str:
        """
        Generate unique cache key for request.
        Subclasses must implement this.
        """

    def _response_ttl(self, endpoint: str, json_data: Any) -> Optional[int]:
        """TTL for a successful response; None uses the cache default."""
        return None

    def _make_request(
            self,
            method: str,
            endpoint: str,
            params: Optional[Dict] = None,
            data: Optional[Dict] = None,
            use_cache: bool = True,
            timeout_override: Optional[TimeoutType] = None,
    ) -> Any:
        """
        Make one HTTP request with rate limiting and caching.

        Args:
            method: HTTP method (GET, POST, etc.)
            endpoint: API endpoint (will be appended to base_url)
            params: Query parameters
            data: Request body (for POST/PUT)
            use_cache: Whether to use cache for this request

        Returns:
            Decoded JSON response

        Raises:
            RateLimitExceeded: If API returns 429
            APIError: For other error statuses, transport failures and
                non-JSON bodies
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        cacheable = method.upper() == 'GET' and use_cache

        if cacheable:
            cached_response = self.cache.get(self._get_cache_key(endpoint, params))
            if cached_response is not None:
                return cached_response

        self.rate_limiter.wait_if_needed()

        try:
            logger.debug(f"{method} {url} - params: {params}")
            response = self.session.request(
                method=method,
                url=url,
                params=params,
                json=data,
                timeout=(timeout_override if timeout_override is not None else self.timeout)
            )
        except requests.RequestException as e:
            logger.error(f"Request failed: {e}")
            raise APIError(f"Request failed: {e}") from e

        if response.status_code == 429:
            try:
                retry_after = int(response.headers.get('Retry-After', 60))
            except (TypeError, ValueError):
                retry_after = 60
            logger.warning(f"Rate limited! Retry after {retry_after}s")
            raise RateLimitExceeded(retry_after=retry_after)

        if response.status_code >= 400:
            body = response.text[:200]
            error_msg = f"API error {response.status_code}: {body}"
            logger.error(error_msg)
            raise APIError(error_msg, status_code=response.status_code, body=body)

        try:
            json_data = response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            raise APIError(f"Invalid JSON response: {e}", status_code=response.status_code) from e

        if cacheable:
            self.cache.set(
                self._get_cache_key(endpoint, params),
                json_data,
                ttl=self._response_ttl(endpoint, json_data),
            )

        logger.info(f"Request successful: {method} {endpoint}")
        return json_data

    def get(self, endpoint: str, params: Optional[Dict] = None, use_cache: bool = True,
            timeout_override: Optional[TimeoutType] = None) -> Any:
        """GET request wrapper"""
        return self._make_request('GET', endpoint, params=params, use_cache=use_cache,
                                  timeout_override=timeout_override)

    def close(self) -> None:
        """Clean up resources"""
        self.session.close()
        logger.info(f"Closed {self.__class__.__name__}")

    def __enter__(self):
        """Context manager entry - returns self for use in 'with' blocks."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensures session is closed."""
        self.close()
        return False  # Don't suppress exceptions
