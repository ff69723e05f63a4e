"""
Type definitions for the Autocrat client
"""

from .common import (
    to_pubkey,
    ProposalState,
    ProposalAccount,
    ProposalInstruction,
    UpdateDaoParams,
)
from .result import TxResult, TxStatus

__all__ = [
    "to_pubkey",
    "ProposalState",
    "ProposalAccount",
    "ProposalInstruction",
    "UpdateDaoParams",
    "TxResult",
    "TxStatus",
]
