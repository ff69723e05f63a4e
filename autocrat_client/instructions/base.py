"""
Instruction builder interfaces

AutocratClient never builds instructions itself: every dispatch method
forwards to a builder that satisfies these interfaces. The default
implementation is AutocratInstructions; tests substitute a mock.

Handlers return an InstructionHandler, a ready-to-send bundle of
instructions plus the extra keypairs that must co-sign them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, TYPE_CHECKING, runtime_checkable

from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from ..errors import TransactionError
from ..types import TxResult, UpdateDaoParams

if TYPE_CHECKING:
    from ..client import AutocratClient


@dataclass
class InstructionHandler:
    """
    Instructions built for one operation, bound to the client that built them

    Attributes:
        client: Client whose provider and lookup tables are used to send
        instructions: Instructions in execution order
        signers: Keypairs that must sign besides the provider wallet
        compute_units: Optional compute unit limit override
    """
    client: "AutocratClient"
    instructions: List[Instruction]
    signers: List[Keypair] = field(default_factory=list)
    compute_units: Optional[int] = None

    async def build(self) -> bytes:
        """Unsigned versioned transaction compiled against the client's lookup tables"""
        return await self.client.provider.tx_builder.build(
            self.instructions,
            luts=self.client.luts,
            compute_units=self.compute_units,
        )

    async def simulate(self) -> Dict[str, Any]:
        """
        Simulate the transaction

        Raises:
            TransactionError: If the program returns an error; custom program
                errors carry the IDL name and message
        """
        try:
            return await self.client.provider.tx_builder.simulate(await self.build())
        except TransactionError as e:
            description = self.client.program.describe_error(e.details.get("err"))
            if description is None:
                raise
            raise TransactionError.simulation_failed(
                description, e.logs, err=e.details.get("err")
            ) from e

    async def rpc(
        self,
        wait_confirmation: bool = True,
        skip_preflight: Optional[bool] = None,
    ) -> TxResult:
        """Sign with the provider wallet plus signers and send"""
        return await self.client.provider.send_and_confirm(
            self.instructions,
            signers=self.signers,
            luts=self.client.luts,
            compute_units=self.compute_units,
            skip_preflight=skip_preflight,
            wait_confirmation=wait_confirmation,
        )


@runtime_checkable
class DaoInstructionBuilder(Protocol):
    async def initialize_dao_handler(
        self,
        client: "AutocratClient",
        meta_mint: Optional[Pubkey] = None,
        usdc_mint: Optional[Pubkey] = None,
    ) -> InstructionHandler:
        ...

    async def update_dao_handler(
        self,
        client: "AutocratClient",
        dao_params: UpdateDaoParams,
    ) -> InstructionHandler:
        ...


@runtime_checkable
class ProposalInstructionBuilder(Protocol):
    async def create_proposal_instructions_handler(
        self,
        client: "AutocratClient",
        instructions: Sequence[Any],
        proposal_instructions_keypair: Keypair,
    ) -> InstructionHandler:
        ...

    async def add_proposal_instructions_handler(
        self,
        client: "AutocratClient",
        instructions: Sequence[Any],
        proposal_instructions_addr: Pubkey,
    ) -> InstructionHandler:
        ...

    async def create_proposal_part_one_handler(
        self,
        client: "AutocratClient",
        description_url: str,
        proposal_instructions_addr: Pubkey,
    ) -> InstructionHandler:
        ...

    async def create_proposal_part_two_handler(
        self,
        client: "AutocratClient",
        initial_pass_market_price_quote_units_per_base_unit_bps: int,
        initial_fail_market_price_quote_units_per_base_unit_bps: int,
        quote_liquidity_amount_per_amm: int,
    ) -> InstructionHandler:
        ...

    async def finalize_proposal_handler(
        self,
        client: "AutocratClient",
        proposal_addr: Pubkey,
    ) -> InstructionHandler:
        ...


@runtime_checkable
class ConditionalTokenInstructionBuilder(Protocol):
    async def mint_conditional_tokens_handler(
        self,
        client: "AutocratClient",
        proposal_addr: Pubkey,
        meta_amount: int,
        usdc_amount: int,
    ) -> InstructionHandler:
        ...

    async def redeem_conditional_tokens_handler(
        self,
        client: "AutocratClient",
        proposal_addr: Pubkey,
    ) -> InstructionHandler:
        ...


@runtime_checkable
class AmmInstructionBuilder(Protocol):
    async def create_amm_position_cpi_handler(
        self,
        client: "AutocratClient",
        amm: Pubkey,
    ) -> InstructionHandler:
        ...

    async def add_liquidity_cpi_handler(
        self,
        client: "AutocratClient",
        amm_addr: Pubkey,
        amm_position_addr: Pubkey,
        max_base_amount: int,
        max_quote_amount: int,
    ) -> InstructionHandler:
        ...

    async def remove_liquidity_cpi_handler(
        self,
        client: "AutocratClient",
        proposal_addr: Pubkey,
        amm_addr: Pubkey,
        remove_bps: int,
    ) -> InstructionHandler:
        ...

    async def swap_cpi_handler(
        self,
        client: "AutocratClient",
        proposal_addr: Pubkey,
        amm_addr: Pubkey,
        is_quote_to_base: bool,
        input_amount: int,
        min_output_amount: int,
    ) -> InstructionHandler:
        ...


@runtime_checkable
class InstructionBuilder(
    DaoInstructionBuilder,
    ProposalInstructionBuilder,
    ConditionalTokenInstructionBuilder,
    AmmInstructionBuilder,
    Protocol,
):
    """Every instruction category the client dispatches to"""
