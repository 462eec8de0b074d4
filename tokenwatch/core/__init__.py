"""
Core Package
============

Monitoring state and loops.

Components:
- budget.py: ComputeBudget (Alchemy compute-unit accounting, monthly reset)
- cursor.py: CursorStore (per subscriber/address diff cursors)
- subscribers.py: SubscriberRegistry (watch lists and settings)
- wallet_watch.py: WalletWatcher (new transfer alerts)
- discovery.py: TokenDiscovery (new pair scanning)
- classifier.py: RiskClassifier and verdict reduction
- candidates.py: CandidateMonitor (candidate lifecycle)
- scheduler.py: PeriodicTask (interval loops)
"""

from .budget import ComputeBudget
from .cursor import CursorStore, newer_than
from .subscribers import SubscriberRegistry
from .wallet_watch import WalletWatcher
from .discovery import TokenDiscovery
from .classifier import (
    RiskClassifier,
    honeypot_outcome,
    liquidity_outcome,
    renounce_outcome,
    reduce_candidate,
)
from .candidates import CandidateMonitor
from .scheduler import PeriodicTask

__all__ = [
    "ComputeBudget",
    "CursorStore",
    "newer_than",
    "SubscriberRegistry",
    "WalletWatcher",
    "TokenDiscovery",
    "RiskClassifier",
    "honeypot_outcome",
    "liquidity_outcome",
    "renounce_outcome",
    "reduce_candidate",
    "CandidateMonitor",
    "PeriodicTask",
]
