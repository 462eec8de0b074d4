"""
Unit Utilities
==============

Hex/wei conversions, address checks and timestamp formatting.
"""

import re
from datetime import datetime
from typing import Optional

import pytz

ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")

WEI_PER_ETH = 10 ** 18
WEI_PER_GWEI = 10 ** 9


def hex_to_decimal(value: str) -> int:
    """Parse a 0x-prefixed hex quantity. Empty or "0x" is zero."""
    stripped = value[2:] if value.startswith("0x") else value
    if not stripped:
        return 0
    return int(stripped, 16)


def to_eth(value: str) -> float:
    """Convert a hex wei amount to ETH."""
    return hex_to_decimal(value) / WEI_PER_ETH


def to_gwei(value: str) -> float:
    """Convert a hex wei amount to gwei."""
    return hex_to_decimal(value) / WEI_PER_GWEI


def is_valid_address(address: str) -> bool:
    """Ethereum addresses are 42 characters long (including the 0x prefix)."""
    return bool(ADDRESS_RE.match(address or ""))


def normalize_address(address: str) -> str:
    return address.strip().lower()


def format_timestamp(timestamp: int, tz_name: Optional[str] = None) -> str:
    """
    Format a unix timestamp for display.

    Args:
        timestamp: Seconds since epoch
        tz_name: pytz timezone name (default UTC)

    Returns:
        "YYYY-MM-DD HH:MM:SS TZ"
    """
    tz = pytz.timezone(tz_name) if tz_name else pytz.utc
    dt = datetime.fromtimestamp(timestamp, tz=pytz.utc).astimezone(tz)
    return dt.strftime("%Y-%m-%d %H:%M:%S %Z")
