"""
PressAccess incident feed client for Sentinel.

This module pages through the Riverside County Sheriff public JSON feed
(newest first) and returns normalized incidents.
"""

from datetime import datetime
from typing import List, Optional, Tuple
from pydantic import ValidationError
from sentinel.adapters.http.client import HttpClient
from sentinel.common.errors import HttpError, UpstreamError
from sentinel.common.retry import retry_with_backoff
from sentinel.core.models import NormalizedIncident
from sentinel.core.normalize import normalize_record, to_utc
from sentinel.observability import metrics
from sentinel.observability.logging_setup import get_logger
from sentinel.settings import UPSTREAM_BASE

log = get_logger("sentinel.pressaccess")

# the feed only answers requests that look like they came from its own site
BROWSER_HEADERS = {
    "Accept": "application/json, text/plain, */*",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://publicaccess.riversidesheriff.org/",
    "Origin": "https://publicaccess.riversidesheriff.org",
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    ),
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-origin",
}


class PressAccessClient:
    """Paged reader for the public incident feed"""

    def __init__(self, http: HttpClient, base_url: str = UPSTREAM_BASE, *,
                 retries: int = 1, retry_base_delay: float = 0.5):
        """
        Args:
            http: Shared HTTP transport
            base_url: Feed endpoint
            retries: Retries per page after the first attempt
            retry_base_delay: First backoff delay (seconds)
        """
        self.http = http
        self.base_url = base_url
        self.retries = retries
        self.retry_base_delay = retry_base_delay

    async def fetch_incidents(self, page_size: int = 1000, page_number: int = 1,
                              station: Optional[str] = None) -> List[NormalizedIncident]:
        """
        Fetch and normalize one page.

        Args:
            page_size: Records per page
            page_number: 1-based page number
            station: Station filter, empty for all stations

        Returns:
            Normalized incidents in feed order; records without an id or
            failing validation are dropped

        Raises:
            UpstreamError: Bad status, network failure or non-array payload
        """
        _, incidents = await self._fetch_page(page_size, page_number, station)
        return incidents

    async def _fetch_page(self, page_size: int, page_number: int,
                          station: Optional[str]) -> Tuple[int, List[NormalizedIncident]]:
        params = {
            "PageSize": str(page_size),
            "PageNumber": str(page_number),
            "Cd_Station": station or "",
        }
        log.debug(f"fetching page {page_number} size:{page_size} station:{station or '-'}")

        async def _get():
            return await self.http.get_json(self.base_url, params=params, headers=BROWSER_HEADERS)

        try:
            data = await retry_with_backoff(
                _get,
                max_retries=self.retries,
                base_delay=self.retry_base_delay,
                max_delay=5.0,
                retry_on=(HttpError,),
            )
        except HttpError as e:
            metrics.upstream_pages.labels(outcome="error").inc()
            raise UpstreamError(f"incident feed page {page_number} failed: {e}") from e

        if not isinstance(data, list):
            metrics.upstream_pages.labels(outcome="invalid").inc()
            raise UpstreamError(f"incident feed returned {type(data).__name__}, expected a list")

        metrics.upstream_pages.labels(outcome="ok").inc()
        incidents = []
        for position, record in enumerate(data):
            if not isinstance(record, dict):
                metrics.feed_record_failures.inc()
                continue
            try:
                incident = normalize_record(record)
            except ValidationError as e:
                metrics.feed_record_failures.inc()
                log.bind(page=page_number, record=position).warning(
                    f"skipping feed record: {e.error_count()} validation error(s)"
                )
                continue
            if incident is not None:
                incidents.append(incident)
        log.debug(f"page {page_number}: {len(data)} records, {len(incidents)} normalized")
        return len(data), incidents

    async def fetch_incidents_until(self,
                                    since: Optional[datetime] = None,
                                    max_pages: int = 10,
                                    page_size: int = 1000,
                                    station: Optional[str] = None) -> List[NormalizedIncident]:
        """
        Page through the feed until the time window is covered.

        Pagination stops at the first of: an empty page, a record older than
        `since` (records before it on the same page are kept), a short page,
        or `max_pages`. A failing page ends pagination and the records
        gathered so far are returned.

        Args:
            since: Oldest received_at of interest; naive values are Pacific time
            max_pages: Safety cap on requests
            page_size: Records per page
            station: Station filter

        Returns:
            Incidents newest first
        """
        since = to_utc(since)
        collected: List[NormalizedIncident] = []
        for page in range(1, max_pages + 1):
            try:
                received, incidents = await self._fetch_page(page_size, page, station)
            except Exception as e:
                log.bind(page=page).error(f"pagination aborted: {e!r}")
                break

            if received == 0:
                log.bind(page=page).debug("empty page, no more data")
                break

            reached_cutoff = False
            for incident in incidents:
                if since is not None and incident.received_at < since:
                    reached_cutoff = True
                    break
                collected.append(incident)

            if reached_cutoff:
                log.bind(page=page).debug("reached records older than cutoff")
                break
            if received < page_size:
                log.bind(page=page).debug(f"short page ({received} < {page_size}), last page")
                break

        metrics.incidents_fetched.labels(source="pressaccess").inc(len(collected))
        log.info(f"fetched {len(collected)} incidents from the feed")
        return collected
