"""
Address helpers for Sentinel.

Public safety feeds redact house numbers to the hundred block, e.g.
"2600 *** BLOCK AMANDA AV". These pure functions turn such strings into
something a geocoder can match and build the provider query strings.
"""

import re
from typing import Optional

COUNTY_SUFFIX = "Riverside County, CA"

# digits, optional star mask, literal BLOCK, then the street tokens
BLOCK_ADDRESS_RE = re.compile(r"(\d+)\s+(?:\*+\s+)?BLOCK\s+(.+)", re.IGNORECASE)

UNDEFINED_RE = re.compile(r"undefined", re.IGNORECASE)


def parse_block_address(address: Optional[str]) -> Optional[str]:
    """
    Simplify a block address, keeping the block number.

    Args:
        address: Raw address text

    Returns:
        "<number> <street>" or None when the text is not a block address
    """
    if not address:
        return None
    match = BLOCK_ADDRESS_RE.search(address)
    if not match:
        return None
    street = match.group(2).strip()
    if not street:
        return None
    return f"{match.group(1)} {street}"


def is_undefined_address(address: Optional[str]) -> bool:
    """True when the feed published its "undefined" placeholder."""
    return bool(address) and bool(UNDEFINED_RE.search(address))


def is_geocodable(address: Optional[str]) -> bool:
    return bool(address and address.strip()) and not is_undefined_address(address)


def with_area(address: str, area: Optional[str]) -> str:
    return f"{address}, {area}" if area else address


def county_query(address: str, area: Optional[str]) -> str:
    return f"{with_area(address, area)}, {COUNTY_SUFFIX}"
