"""
Common type definitions for Autocrat instructions and accounts
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey


def to_pubkey(value: Union[str, Pubkey]) -> Pubkey:
    """Accept a base58 string or a Pubkey and return a Pubkey"""
    if isinstance(value, Pubkey):
        return value
    return Pubkey.from_string(value)


class ProposalState(Enum):
    """Lifecycle state of a proposal as stored on-chain"""
    PENDING = "Pending"
    PASSED = "Passed"
    FAILED = "Failed"


@dataclass(frozen=True)
class ProposalAccount:
    """
    Account reference inside a stored proposal instruction

    Attributes:
        pubkey: Account address
        is_signer: Whether the account signs the instruction
        is_writable: Whether the account is writable
    """
    pubkey: Pubkey
    is_signer: bool = False
    is_writable: bool = False

    def to_account_meta(self) -> AccountMeta:
        return AccountMeta(self.pubkey, is_signer=self.is_signer, is_writable=self.is_writable)


@dataclass(frozen=True)
class ProposalInstruction:
    """
    Instruction stored in a ProposalInstructions account and executed by
    finalize_proposal when the proposal passes.

    Attributes:
        program_id: Program invoked when the proposal executes
        accounts: Accounts referenced by the instruction
        data: Raw instruction data
    """
    program_id: Pubkey
    accounts: List[ProposalAccount] = field(default_factory=list)
    data: bytes = b""

    @classmethod
    def from_instruction(cls, instruction: Instruction) -> "ProposalInstruction":
        """Convert a solders Instruction into its stored form"""
        return cls(
            program_id=instruction.program_id,
            accounts=[
                ProposalAccount(meta.pubkey, meta.is_signer, meta.is_writable)
                for meta in instruction.accounts
            ],
            data=bytes(instruction.data),
        )

    def to_instruction(self) -> Instruction:
        return Instruction(
            self.program_id,
            self.data,
            [account.to_account_meta() for account in self.accounts],
        )


@dataclass(frozen=True)
class UpdateDaoParams:
    """
    DAO parameter update; unset fields keep their on-chain value.

    Only takes effect when executed by a passed proposal.
    """
    pass_threshold_bps: Optional[int] = None
    slots_per_proposal: Optional[int] = None
    amm_initial_quote_liquidity_amount: Optional[int] = None
    amm_swap_fee_bps: Optional[int] = None
