"""TfL line-status feed fetcher and parser."""

import logging
import os
import time
from typing import Dict, Iterable, List, Optional, Tuple

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .catalog import parse_status_record
from .exceptions import FetchError
from .models import LineStatusRecord, TransportMode

logger = logging.getLogger(__name__)

TFL_API_BASE = "https://api.tfl.gov.uk"

# Modes requested in one combined status call
DEFAULT_MODES: Tuple[TransportMode, ...] = (
    TransportMode.UNDERGROUND,
    TransportMode.OVERGROUND,
    TransportMode.LIGHT_RAIL,
    TransportMode.NATIONAL_RAIL,
)


def make_session(max_retries: int = 3) -> requests.Session:
    """HTTP session that retries idempotent requests on throttling and 5xx."""
    sess = requests.Session()
    retry = Retry(
        total=max_retries, connect=max_retries, read=max_retries,
        backoff_factor=0.5,
        status_forcelist=(429, 500, 502, 503, 504),
        allowed_methods=frozenset(["GET", "HEAD"]),
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    sess.mount("https://", adapter)
    sess.mount("http://", adapter)
    sess.headers.update({"Accept": "application/json"})
    return sess


class TfLClient:
    """Fetches and parses TfL line statuses."""

    def __init__(
        self,
        app_key: Optional[str] = None,
        timeout: int = 10,
        cache_ttl: int = 30,
        max_retries: int = 3,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the TfL client.

        Args:
            app_key: TfL application key. Defaults to the TFL_APP_KEY environment variable.
            timeout: Request timeout in seconds.
            cache_ttl: Seconds a fetched feed is reused before refetching.
            max_retries: Transport-level retries per request.
            session: Optional preconfigured requests session.
        """
        self.app_key = app_key if app_key is not None else os.getenv("TFL_APP_KEY", "").strip()
        self.timeout = timeout
        self._cache: Dict[str, Tuple[List[LineStatusRecord], float]] = {}  # url -> (records, timestamp)
        self._cache_ttl = cache_ttl
        self._session = session or make_session(max_retries)

    @staticmethod
    def status_url(modes: Iterable[TransportMode] = DEFAULT_MODES) -> str:
        """Status endpoint covering the given modes."""
        param = ",".join(m.value for m in modes)
        return f"{TFL_API_BASE}/Line/Mode/{param}/status"

    def fetch_line_statuses(self, modes: Iterable[TransportMode] = DEFAULT_MODES) -> List[LineStatusRecord]:
        """
        Get the current status of every line in the given modes.

        Args:
            modes: Transport modes to include in the combined request.

        Returns:
            List of LineStatusRecord, in feed order.

        Raises:
            FetchError: If the feed can't be fetched or isn't a JSON list.
            MalformedRecord: If a feed entry fails validation.
        """
        url = self.status_url(modes)

        now = time.time()
        if url in self._cache:
            records, timestamp = self._cache[url]
            if now - timestamp < self._cache_ttl:
                logger.debug(f"Using cached statuses for {url}")
                return list(records)

        payload = self._fetch_json(url)
        if not isinstance(payload, list):
            raise FetchError(url, "expected a JSON list of lines", retryable=False)

        records = [parse_status_record(raw, i) for i, raw in enumerate(payload)]
        self._cache[url] = (records, now)
        logger.info(f"Fetched status for {len(records)} lines")
        return list(records)

    def _fetch_json(self, url: str):
        params = {"app_key": self.app_key} if self.app_key else {}
        logger.debug(f"Fetching {url}")
        try:
            response = self._session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Failed to fetch {url}: {e}")
            raise FetchError(url, str(e)) from e

        if response.status_code != 200:
            logger.error(f"Failed to fetch {url}: HTTP {response.status_code}")
            raise FetchError(
                url,
                response.reason or "unexpected status",
                status_code=response.status_code,
                retryable=response.status_code == 429 or response.status_code >= 500,
            )

        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            raise FetchError(url, f"invalid JSON: {e}") from e

    def clear_cache(self) -> None:
        """Manually clear the cache."""
        self._cache.clear()

    def close(self) -> None:
        self._session.close()
