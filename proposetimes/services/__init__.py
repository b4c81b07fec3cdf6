"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .slot_proposer import (
    ProposalResult,
    ProviderClientProtocol,
    SlotProposerService,
    choose_duration,
    group_slots_by_day,
    select_by_day,
)

__all__ = [
    "ProposalResult",
    "ProviderClientProtocol",
    "SlotProposerService",
    "choose_duration",
    "group_slots_by_day",
    "select_by_day",
]
