"""Sheet fetching with caching.

This module contains the SheetFetcher class which downloads a CSV export,
runs it through the parser and a row mapper, and keeps the result in a
time-boxed cache. Failures never propagate: they come back as a FetchResult
carrying a user-facing message and an error kind.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, List, Mapping, Optional, Sequence, TypeVar
import os
import logging
import time
import requests

from .cache import FetchCache
from .csv_parser import parse_csv, strip_bom
from .error_handling import ErrorHandler
from .errors import ErrorKind, TransportError, NON_CSV_MESSAGE
from .exams import map_exam_rows
from .mapper import RecordMapper
from .models import JobPosting, MockExam, SheetFeed

logger = logging.getLogger(__name__)

T = TypeVar("T")

CSV_ACCEPT = "text/csv, application/csv;q=0.9, */*;q=0.1"


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of a fetch.

    Attributes:
        data: Fetched records; empty on failure
        error: User-facing error message, if the fetch failed
        error_kind: Category of the failure
        stale: True for a placeholder built from expired cache data
        from_cache: True when data came from the cache
    """
    data: List[T] = field(default_factory=list)
    error: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    stale: bool = False
    from_cache: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict:
        return {
            "data": [item.to_dict() for item in self.data],
            "error": self.error,
            "kind": self.error_kind.value if self.error_kind else None,
            "stale": self.stale,
        }


class SheetFetcher(Generic[T]):
    """Fetches a CSV sheet and maps its rows, with a TTL cache.

    Features:
    - HTTP download with explicit timeout and content-type check
    - Local file paths for offline use
    - Stale-while-revalidate placeholder callback
    - Retry with backoff for transient transport failures
    """

    def __init__(self, feed: SheetFeed,
                 map_rows: Callable[[Sequence[Mapping[str, str]]], List[T]],
                 cache: Optional[FetchCache] = None,
                 session: Optional[requests.Session] = None,
                 error_handler: Optional[ErrorHandler] = None,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        """Initialize the fetcher.

        Args:
            feed: Feed configuration object
            map_rows: Maps parsed CSV rows to records
            cache: Cache handle; a new one using feed.cache_ttl by default
            session: requests session used for HTTP
            error_handler: Error classifier; a new one by default
            sleep: Function used to wait between retries
        """
        self.feed = feed
        self.map_rows = map_rows
        self.cache = cache if cache is not None else FetchCache(ttl_seconds=feed.cache_ttl)
        self.session = session or requests.Session()
        self.error_handler = error_handler or ErrorHandler(sleep=sleep)

    def fetch(self, force_refresh: bool = False,
              on_placeholder: Optional[Callable[[FetchResult], Any]] = None) -> FetchResult:
        """Fetch records, serving from cache while it is fresh.

        Args:
            force_refresh: Skip the cache and go to the network
            on_placeholder: Called with expired cached data (stale=True)
                before the network request, when such data exists

        Returns:
            FetchResult with data, or with error and error_kind set
        """
        entry = self.cache.get()
        if not force_refresh and self.cache.is_fresh(entry):
            logger.info(f"Serving {len(entry.data)} records for {self.feed.name} from cache")
            return FetchResult(data=entry.data, from_cache=True)

        if not force_refresh and entry is not None and on_placeholder is not None:
            logger.info(f"Serving stale data for {self.feed.name} while refreshing")
            on_placeholder(FetchResult(data=entry.data, stale=True, from_cache=True))

        logger.info(f"Starting fetch for {self.feed.name}")
        try:
            records = self._load()
        except Exception as e:
            error = self.error_handler.classify(e, self.feed.name)
            self.cache.invalidate()
            return FetchResult(error=error.user_message, error_kind=error.kind)

        self.cache.store(records)
        self.error_handler.reset(self.feed.name)
        logger.info(f"Successfully fetched {len(records)} records from {self.feed.name}")
        return FetchResult(data=records)

    def _load(self) -> List[T]:
        text = self._download_with_retries()
        rows = parse_csv(strip_bom(text))
        return self.map_rows(rows)

    def _download_with_retries(self) -> str:
        retries = 0
        while True:
            try:
                return self._download()
            except requests.exceptions.RequestException as e:
                error = self._as_transport_error(e)
                if not self.error_handler.should_retry(error, self.feed.name,
                                                       retries, self.feed.max_retries):
                    raise error from e
                retries += 1

    def _as_transport_error(self, error: requests.exceptions.RequestException) -> TransportError:
        if isinstance(error, requests.exceptions.HTTPError):
            return self.error_handler.from_http_error(error)
        return TransportError(cause=error)

    def _download(self) -> str:
        """Download the sheet as text.

        Returns:
            Decoded CSV text

        Raises:
            TransportError: If the response is not CSV
            RequestException: If the request fails
        """
        if os.path.isfile(self.feed.url):
            logger.info(f"Reading {self.feed.name} from local file {self.feed.url}")
            with open(self.feed.url, "r", encoding="utf-8", errors="replace") as f:
                return f.read()

        headers = {"Accept": CSV_ACCEPT}
        headers.update(self.feed.headers or {})
        logger.info(f"Fetching CSV from {self.feed.url}")
        response = self.session.get(self.feed.url, headers=headers, timeout=self.feed.timeout)
        response.raise_for_status()

        content_type = response.headers.get("Content-Type", "")
        if "csv" not in content_type.lower():
            logger.error(f"Non-CSV response from {self.feed.name}: {content_type or 'no content type'}")
            raise TransportError(NON_CSV_MESSAGE)

        return response.content.decode("utf-8", errors="replace")


class PostingFetcher(SheetFetcher[JobPosting]):
    """Fetches job postings."""

    def __init__(self, feed: SheetFeed, mapper: Optional[RecordMapper] = None, **kwargs) -> None:
        self.mapper = mapper or RecordMapper()
        super().__init__(feed, self.mapper.map_rows, **kwargs)

    def fetch_postings(self, force_refresh: bool = False,
                       on_placeholder: Optional[Callable[[FetchResult], Any]] = None) -> FetchResult:
        return self.fetch(force_refresh=force_refresh, on_placeholder=on_placeholder)


class ExamFetcher(SheetFetcher[MockExam]):
    """Fetches the practice exam catalog."""

    def __init__(self, feed: SheetFeed, **kwargs) -> None:
        super().__init__(feed, map_exam_rows, **kwargs)

    def fetch_exams(self, force_refresh: bool = False) -> FetchResult:
        return self.fetch(force_refresh=force_refresh)
