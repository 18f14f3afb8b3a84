"""
Incident sources for Sentinel: the JSON feed and the HTML table fallback.
"""

from .html_table import HtmlTableSource, parse_incident_table
from .pressaccess import PressAccessClient

__all__ = ["HtmlTableSource", "PressAccessClient", "parse_incident_table"]
