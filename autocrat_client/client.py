"""
AutocratClient - entry point for the Autocrat governance program

Holds a provider, a typed program handle and the resolved address lookup
tables. Every operation is delegated to an instruction builder; the client
itself performs no validation or computation.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional, Sequence, Tuple, Union, TYPE_CHECKING

from solders.address_lookup_table_account import AddressLookupTableAccount
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .config import config as global_config
from .errors import AccountNotFound
from .instructions import AutocratInstructions, InstructionBuilder, InstructionHandler
from .program import Program, load_idl
from .types import UpdateDaoParams

if TYPE_CHECKING:
    from .provider import Provider

logger = logging.getLogger(__name__)


class AutocratClient:
    """
    Autocrat client

    Usage:
        provider = Provider.create(rpc_url, keypair_path="/path/to/keypair.json")
        client = await AutocratClient.create_client(provider)

        handler = await client.mint_conditional_tokens(proposal, 1_000, 1_000)
        result = await handler.rpc()
    """

    def __init__(
        self,
        provider: "Provider",
        program_id: Union[str, Pubkey],
        luts: Sequence[Optional[AddressLookupTableAccount]],
        builder: Optional[InstructionBuilder] = None,
    ):
        """
        Assemble a client from already-resolved parts (no network I/O)

        Args:
            provider: Connection/signing context, shared and never mutated
            program_id: Autocrat program address
            luts: Resolved lookup tables, in order
            builder: Instruction builder (defaults to AutocratInstructions)
        """
        self._provider = provider
        self._program = Program(load_idl(), program_id, provider)
        self._luts: Tuple[Optional[AddressLookupTableAccount], ...] = tuple(luts)
        self._ixs = builder if builder is not None else AutocratInstructions()

    @classmethod
    async def create_client(
        cls,
        provider: "Provider",
        program_id: Optional[Union[str, Pubkey]] = None,
        lut_addresses: Optional[Sequence[str]] = None,
        allow_missing_luts: bool = False,
        builder: Optional[InstructionBuilder] = None,
    ) -> "AutocratClient":
        """
        Resolve the lookup tables and build a client

        Args:
            provider: Connection/signing context
            program_id: Program address override (default AUTOCRAT_PROGRAM_ID)
            lut_addresses: Lookup table addresses (default AUTOCRAT_LUTS)
            allow_missing_luts: Keep absent tables as None instead of failing
            builder: Instruction builder override

        Raises:
            AccountNotFound: A lookup table does not exist (unless allowed)
            RpcError: Any lookup table fetch failed
        """
        if program_id is None:
            program_id = global_config.autocrat.program_id
        if lut_addresses is None:
            lut_addresses = global_config.autocrat.lut_addresses

        addresses = [str(address) for address in lut_addresses]
        luts = await asyncio.gather(
            *(provider.connection.get_address_lookup_table(address) for address in addresses)
        )

        for address, lut in zip(addresses, luts):
            if lut is None:
                if not allow_missing_luts:
                    raise AccountNotFound.lookup_table(address)
                logger.warning(f"Lookup table {address} not found, keeping empty slot")

        logger.debug(f"Resolved {len(luts)} lookup tables for program {program_id}")
        return cls(provider, program_id, luts, builder=builder)

    @property
    def provider(self) -> "Provider":
        return self._provider

    @property
    def program(self) -> Program:
        return self._program

    @property
    def luts(self) -> Tuple[Optional[AddressLookupTableAccount], ...]:
        return self._luts

    @property
    def builder(self) -> InstructionBuilder:
        return self._ixs

    # ========== DAO ==========

    async def initialize_dao(
        self,
        meta_mint: Optional[Pubkey] = None,
        usdc_mint: Optional[Pubkey] = None,
    ) -> InstructionHandler:
        return await self._ixs.initialize_dao_handler(self, meta_mint, usdc_mint)

    # Only executable on-chain by a passed proposal
    async def update_dao(self, dao_params: UpdateDaoParams) -> InstructionHandler:
        return await self._ixs.update_dao_handler(self, dao_params)

    # ========== Proposals ==========

    async def create_proposal_instructions(
        self,
        instructions: Sequence[Any],
        proposal_instructions_keypair: Keypair,
    ) -> InstructionHandler:
        return await self._ixs.create_proposal_instructions_handler(
            self, instructions, proposal_instructions_keypair
        )

    async def add_proposal_instructions(
        self,
        instructions: Sequence[Any],
        proposal_instructions_addr: Pubkey,
    ) -> InstructionHandler:
        return await self._ixs.add_proposal_instructions_handler(
            self, instructions, proposal_instructions_addr
        )

    async def create_proposal_part_one(
        self,
        description_url: str,
        proposal_instructions_addr: Pubkey,
    ) -> InstructionHandler:
        return await self._ixs.create_proposal_part_one_handler(
            self, description_url, proposal_instructions_addr
        )

    async def create_proposal_part_two(
        self,
        initial_pass_market_price_quote_units_per_base_unit_bps: int,
        initial_fail_market_price_quote_units_per_base_unit_bps: int,
        quote_liquidity_amount_per_amm: int,
    ) -> InstructionHandler:
        return await self._ixs.create_proposal_part_two_handler(
            self,
            initial_pass_market_price_quote_units_per_base_unit_bps,
            initial_fail_market_price_quote_units_per_base_unit_bps,
            quote_liquidity_amount_per_amm,
        )

    async def finalize_proposal(self, proposal_addr: Pubkey) -> InstructionHandler:
        return await self._ixs.finalize_proposal_handler(self, proposal_addr)

    # ========== Conditional tokens ==========

    async def mint_conditional_tokens(
        self,
        proposal_addr: Pubkey,
        meta_amount: int,
        usdc_amount: int,
    ) -> InstructionHandler:
        return await self._ixs.mint_conditional_tokens_handler(
            self, proposal_addr, meta_amount, usdc_amount
        )

    async def redeem_conditional_tokens(self, proposal_addr: Pubkey) -> InstructionHandler:
        return await self._ixs.redeem_conditional_tokens_handler(self, proposal_addr)

    # ========== AMM ==========

    async def create_amm_position_cpi(self, amm: Pubkey) -> InstructionHandler:
        return await self._ixs.create_amm_position_cpi_handler(self, amm)

    async def add_liquidity_cpi(
        self,
        amm_addr: Pubkey,
        amm_position_addr: Pubkey,
        max_base_amount: int,
        max_quote_amount: int,
    ) -> InstructionHandler:
        return await self._ixs.add_liquidity_cpi_handler(
            self, amm_addr, amm_position_addr, max_base_amount, max_quote_amount
        )

    async def remove_liquidity_cpi(
        self,
        proposal_addr: Pubkey,
        amm_addr: Pubkey,
        remove_bps: int,
    ) -> InstructionHandler:
        return await self._ixs.remove_liquidity_cpi_handler(
            self, proposal_addr, amm_addr, remove_bps
        )

    async def swap_cpi(
        self,
        proposal_addr: Pubkey,
        amm_addr: Pubkey,
        is_quote_to_base: bool,
        input_amount: int,
        min_output_amount: int,
    ) -> InstructionHandler:
        return await self._ixs.swap_cpi_handler(
            self, proposal_addr, amm_addr, is_quote_to_base, input_amount, min_output_amount
        )

    def __repr__(self) -> str:
        return f"AutocratClient(program={self._program.program_id}, luts={len(self._luts)})"
