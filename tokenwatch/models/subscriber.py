"""
Subscriber Models
=================

Per-chat settings record.
"""

from dataclasses import dataclass


@dataclass
class SubscriberSettings:
    """Flags a chat can toggle with bot commands."""
    hide_zero_balances: bool = False
    auto_snipe: bool = False
