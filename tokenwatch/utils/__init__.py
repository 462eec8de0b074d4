from .units import (
    hex_to_decimal,
    to_eth,
    to_gwei,
    is_valid_address,
    normalize_address,
    format_timestamp,
)

__all__ = [
    "hex_to_decimal",
    "to_eth",
    "to_gwei",
    "is_valid_address",
    "normalize_address",
    "format_timestamp",
]
