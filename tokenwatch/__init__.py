"""
tokenwatch
==========

Ethereum wallet watcher and new-token risk monitor with Telegram alerts.
"""

__version__ = "0.3.0"
