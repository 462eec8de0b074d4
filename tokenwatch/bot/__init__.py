"""
Bot Package
===========

Telegram chat command front-end.
"""

from .commands import CommandBot, TelegramUpdates, estimate_swap_fees, parse_command

__all__ = [
    "CommandBot",
    "TelegramUpdates",
    "estimate_swap_fees",
    "parse_command",
]
