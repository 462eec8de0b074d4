"""
Shared Data Models
==================

This package contains dataclasses used across the project.
"""

from .activity import ActivityRecord, ContractCreation
from .subscriber import SubscriberSettings
from .token import CandidateToken, CheckOutcome, TokenMeta, Verdict

__all__ = [
    "ActivityRecord",
    "ContractCreation",
    "SubscriberSettings",
    "CandidateToken",
    "CheckOutcome",
    "TokenMeta",
    "Verdict",
]
