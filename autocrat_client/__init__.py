"""
Autocrat Client - SDK for the Autocrat futarchy governance program on Solana

Builds and submits instructions for:
- DAO initialization and parameter updates
- Proposal creation (instructions, part one, part two) and finalization
- Conditional token minting and redemption
- Pass/fail market AMM positions, liquidity and swaps
"""

from .client import AutocratClient
from .provider import Provider
from .program import Program, load_idl
from .instructions import AutocratInstructions, InstructionHandler, InstructionBuilder
from .types import (
    ProposalAccount,
    ProposalInstruction,
    ProposalState,
    UpdateDaoParams,
    TxResult,
    TxStatus,
)
from .errors import (
    AutocratError,
    RpcError,
    TransactionError,
    AccountNotFound,
    IdlError,
    SignerError,
    ConfigurationError,
    ErrorCode,
)
from .constants import AUTOCRAT_PROGRAM_ID, AUTOCRAT_LUTS

__all__ = [
    # Client
    "AutocratClient",
    "Provider",
    "Program",
    "load_idl",
    # Instruction builders
    "AutocratInstructions",
    "InstructionHandler",
    "InstructionBuilder",
    # Types
    "ProposalAccount",
    "ProposalInstruction",
    "ProposalState",
    "UpdateDaoParams",
    "TxResult",
    "TxStatus",
    # Errors
    "AutocratError",
    "RpcError",
    "TransactionError",
    "AccountNotFound",
    "IdlError",
    "SignerError",
    "ConfigurationError",
    "ErrorCode",
    # Constants
    "AUTOCRAT_PROGRAM_ID",
    "AUTOCRAT_LUTS",
]

__version__ = "0.1.0"
