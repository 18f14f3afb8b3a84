"""
HTML table fallback source for Sentinel.

When the JSON feed is unusable the public PressAccess pages are fetched
and their incident table is parsed with BeautifulSoup.
"""

from typing import List, Optional, Sequence
from bs4 import BeautifulSoup
from sentinel.adapters.http.client import HttpClient
from sentinel.common.errors import HttpError, IngestionError
from sentinel.core.models import NormalizedIncident
from sentinel.core.normalize import RowParseError, has_required_headers, map_headers, parse_table_row
from sentinel.observability import metrics
from sentinel.observability.logging_setup import get_logger
from sentinel.settings import HTML_MIRRORS

log = get_logger("sentinel.html_table")

HTML_HEADERS = {
    "Accept": "text/html,application/xhtml+xml",
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124 Safari/537.36"
    ),
}


def _text(node) -> str:
    return node.get_text(" ", strip=True)


def parse_incident_table(html: str) -> Optional[List[NormalizedIncident]]:
    """
    Parse the first incident table in a page.

    Args:
        html: Page markup

    Returns:
        Incidents from the first table carrying incident and call type
        columns, or None when the page has no such table
    """
    soup = BeautifulSoup(html, "html.parser")
    for table in soup.find_all("table"):
        headers = [_text(th) for th in table.select("thead th")]
        body_rows = [row for row in table.find_all("tr") if row.find_parent("thead") is None]
        if not headers:
            first = table.find("tr")
            if first is None:
                continue
            headers = [_text(cell) for cell in first.find_all(["th", "td"])]
            body_rows = [row for row in table.find_all("tr") if row is not first]
        if not has_required_headers(headers):
            continue

        columns = map_headers(headers)
        incidents: List[NormalizedIncident] = []
        for index, row in enumerate(body_rows):
            cells = [_text(td) for td in row.find_all("td")]
            if not cells:
                continue
            parsed = parse_table_row(cells, columns, index)
            if isinstance(parsed, RowParseError):
                metrics.row_parse_failures.inc()
                log.bind(row=parsed.row_index).warning(f"skipping table row: {parsed.reason}")
                continue
            incidents.append(parsed)
        return incidents
    return None


class HtmlTableSource:
    """Scrapes the public incident table from the first reachable mirror"""

    def __init__(self, http: HttpClient, mirrors: Sequence[str] = tuple(HTML_MIRRORS)):
        self.http = http
        self.mirrors = list(mirrors)

    async def fetch_html(self) -> str:
        for url in self.mirrors:
            try:
                return await self.http.get_text(url, headers=HTML_HEADERS)
            except HttpError as e:
                log.bind(mirror=url, status=e.status).warning(f"mirror unavailable: {e}")
        raise IngestionError("unable to fetch the incident page from any known mirror")

    async def fetch_incidents(self) -> List[NormalizedIncident]:
        """
        Fetch and parse the incident table.

        Raises:
            IngestionError: No mirror answered or no incident table was found
        """
        html = await self.fetch_html()
        incidents = parse_incident_table(html)
        if incidents is None:
            raise IngestionError("no incident table found in the mirror page")
        metrics.incidents_fetched.labels(source="html").inc(len(incidents))
        log.info(f"parsed {len(incidents)} incidents from the HTML table")
        return incidents
