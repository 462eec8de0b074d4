"""
Token Models
============

Dataclasses for discovered tokens and their risk checks.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class CheckOutcome(Enum):
    """Result of a single risk check."""
    TRUE = "true"
    FALSE = "false"
    UNKNOWN = "unknown"  # upstream lookup failed

    @classmethod
    def from_bool(cls, value: Optional[bool]) -> "CheckOutcome":
        if value is None:
            return cls.UNKNOWN
        return cls.TRUE if value else cls.FALSE

    @property
    def is_true(self) -> bool:
        return self is CheckOutcome.TRUE


class Verdict(Enum):
    """Classification state of a monitored candidate."""
    PENDING = "pending"    # keep checking
    BUY = "buy"            # to_buy set, notify once
    REJECTED = "rejected"  # honeypot, removed
    EXPIRED = "expired"    # never renounced within the TTL, removed


@dataclass
class TokenMeta:
    """Token and pair data from honeypot.is."""
    contract_address: str
    name: str
    symbol: str
    decimals: int
    pair_address: str
    pair_type: str
    pair_symbol: str
    is_honeypot: bool
    honeypot_reason: Optional[str]
    buy_tax: float   # percent
    sell_tax: float  # percent
    liquidity_usd: float
    is_open_source: Optional[bool] = None
    has_proxy_calls: Optional[bool] = None
    flags_description: Optional[List[str]] = None


@dataclass
class CandidateToken:
    """
    A newly created pair being monitored until it reaches a verdict.

    The check outcomes start UNKNOWN and are refreshed every cycle by the
    risk classifier.
    """
    # Discovery data
    pair_address: str
    contract_address: str  # "" when the token could not be resolved
    creator: str
    creation_tx_hash: str
    created_at: int  # unix timestamp of the pair creation
    name: str = ""
    symbol: str = ""

    # Classification state
    to_buy: bool = False
    honeypot: CheckOutcome = CheckOutcome.UNKNOWN
    liquidity_locked: CheckOutcome = CheckOutcome.UNKNOWN
    renounced: CheckOutcome = CheckOutcome.UNKNOWN

    # Last honeypot.is snapshot, kept for alert formatting
    meta: Optional[TokenMeta] = field(default=None, repr=False)

    def age(self, now: float) -> float:
        """Seconds since the pair was created."""
        return now - self.created_at

    @property
    def display_name(self) -> str:
        if self.symbol:
            return f"{self.name} ({self.symbol})" if self.name else self.symbol
        return self.contract_address or self.pair_address
