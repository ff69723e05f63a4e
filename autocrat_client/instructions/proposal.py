"""
Proposal instruction handlers

A proposal is created in steps:
1. create_proposal_instructions / add_proposal_instructions store the
   instructions to execute if the proposal passes
2. create_proposal_part_one creates the proposal and its vault
3. create_proposal_part_two creates the conditional mints and the pass/fail
   markets, seeding both AMMs with liquidity
4. finalize_proposal settles the proposal and executes the stored
   instructions when it passed
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Sequence, Union, TYPE_CHECKING

from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey

from ..constants import AMM_PROGRAM_ID, SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID, ASSOCIATED_TOKEN_PROGRAM_ID
from ..errors import AccountNotFound
from ..types import ProposalInstruction
from .base import InstructionHandler
from .pda import (
    get_dao_address,
    get_dao_treasury_address,
    get_proposal_address,
    get_proposal_vault_address,
    get_conditional_mint_addresses,
    get_amm_address,
    get_amm_auth_address,
)
from .token import get_associated_token_address

if TYPE_CHECKING:
    from ..client import AutocratClient

logger = logging.getLogger(__name__)


def _to_proposal_instructions(instructions: Sequence[Any]) -> List[Any]:
    # solders Instructions are converted; ProposalInstruction/dicts pass through to the coder
    return [
        ProposalInstruction.from_instruction(ix) if isinstance(ix, Instruction) else ix
        for ix in instructions
    ]


async def create_proposal_instructions_handler(
    client: "AutocratClient",
    instructions: Sequence[Union[Instruction, ProposalInstruction]],
    proposal_instructions_keypair: Keypair,
) -> InstructionHandler:
    """
    Store instructions in a new ProposalInstructions account

    The account is created at proposal_instructions_keypair's address, so
    the keypair co-signs the transaction.
    """
    ix = client.program.instruction(
        "create_proposal_instructions",
        {
            "proposer": client.provider.pubkey,
            "proposal_instructions": proposal_instructions_keypair.pubkey(),
            "system_program": SYSTEM_PROGRAM_ID,
        },
        _to_proposal_instructions(instructions),
    )
    return InstructionHandler(client, [ix], signers=[proposal_instructions_keypair])


async def add_proposal_instructions_handler(
    client: "AutocratClient",
    instructions: Sequence[Union[Instruction, ProposalInstruction]],
    proposal_instructions_addr: Union[str, Pubkey],
) -> InstructionHandler:
    """Append instructions to an existing ProposalInstructions account"""
    ix = client.program.instruction(
        "add_proposal_instructions",
        {
            "proposer": client.provider.pubkey,
            "proposal_instructions": proposal_instructions_addr,
        },
        _to_proposal_instructions(instructions),
    )
    return InstructionHandler(client, [ix])


async def create_proposal_part_one_handler(
    client: "AutocratClient",
    description_url: str,
    proposal_instructions_addr: Union[str, Pubkey],
) -> InstructionHandler:
    """Create the next proposal (numbered by the DAO's proposal count) and its vault"""
    program_id = client.program.program_id
    dao = get_dao_address(program_id)
    dao_account = await client.program.account.dao.fetch(dao)

    number = dao_account["proposal_count"]
    proposal = get_proposal_address(number, program_id)
    logger.debug(f"create_proposal_part_one: proposal #{number} at {proposal}")

    ix = client.program.instruction(
        "create_proposal_part_one",
        {
            "proposer": client.provider.pubkey,
            "dao": dao,
            "proposal": proposal,
            "proposal_vault": get_proposal_vault_address(number, program_id),
            "proposal_instructions": proposal_instructions_addr,
            "system_program": SYSTEM_PROGRAM_ID,
        },
        description_url,
    )
    return InstructionHandler(client, [ix])


async def create_proposal_part_two_handler(
    client: "AutocratClient",
    initial_pass_market_price_quote_units_per_base_unit_bps: int,
    initial_fail_market_price_quote_units_per_base_unit_bps: int,
    quote_liquidity_amount_per_amm: int,
) -> InstructionHandler:
    """Create conditional mints and pass/fail markets for the latest proposal"""
    program_id = client.program.program_id
    dao = get_dao_address(program_id)
    dao_account = await client.program.account.dao.fetch(dao)

    if dao_account["proposal_count"] == 0:
        raise AccountNotFound.no_proposal(str(dao))
    number = dao_account["proposal_count"] - 1
    proposal = get_proposal_address(number, program_id)
    proposal_vault = get_proposal_vault_address(number, program_id)
    meta_mint = dao_account["meta_mint"]
    usdc_mint = dao_account["usdc_mint"]
    proposer = client.provider.pubkey

    accounts: Dict[str, Any] = {
        "proposer": proposer,
        "dao": dao,
        "proposal": proposal,
        "proposal_vault": proposal_vault,
        "meta_mint": meta_mint,
        "usdc_mint": usdc_mint,
        "pass_market_amm": get_amm_address(proposal, True),
        "fail_market_amm": get_amm_address(proposal, False),
        "proposer_meta_ata": get_associated_token_address(proposer, meta_mint),
        "proposer_usdc_ata": get_associated_token_address(proposer, usdc_mint),
        "meta_vault_ata": get_associated_token_address(proposal_vault, meta_mint),
        "usdc_vault_ata": get_associated_token_address(proposal_vault, usdc_mint),
        "amm_program": AMM_PROGRAM_ID,
        "amm_auth_pda": get_amm_auth_address(program_id),
        "token_program": TOKEN_PROGRAM_ID,
        "associated_token_program": ASSOCIATED_TOKEN_PROGRAM_ID,
        "system_program": SYSTEM_PROGRAM_ID,
    }
    accounts.update(get_conditional_mint_addresses(proposal, program_id))

    ix = client.program.instruction(
        "create_proposal_part_two",
        accounts,
        initial_pass_market_price_quote_units_per_base_unit_bps,
        initial_fail_market_price_quote_units_per_base_unit_bps,
        quote_liquidity_amount_per_amm,
    )
    return InstructionHandler(client, [ix])


def _stored_instruction_accounts(
    stored_instructions: Sequence[Dict[str, Any]],
    dao_treasury: Pubkey,
) -> List[AccountMeta]:
    """
    Remaining accounts for finalize_proposal

    Every account the stored instructions touch, then their program ids.
    The treasury is a PDA: the program signs for it, so it is passed as a
    non-signer.
    """
    metas: List[AccountMeta] = []
    for stored in stored_instructions:
        for acc in stored["accounts"]:
            pubkey = acc["pubkey"]
            metas.append(
                AccountMeta(
                    pubkey,
                    is_signer=acc["is_signer"] and pubkey != dao_treasury,
                    is_writable=acc["is_writable"],
                )
            )
        metas.append(AccountMeta(stored["program_id"], is_signer=False, is_writable=False))
    return metas


async def finalize_proposal_handler(
    client: "AutocratClient",
    proposal_addr: Union[str, Pubkey],
) -> InstructionHandler:
    """Settle a proposal; its stored instructions run if it passed"""
    program_id = client.program.program_id
    dao = get_dao_address(program_id)
    dao_treasury = get_dao_treasury_address(dao, program_id)

    proposal = await client.program.account.proposal.fetch(proposal_addr)
    stored = await client.program.account.proposal_instructions.fetch(proposal["instructions"])

    ix = client.program.instruction(
        "finalize_proposal",
        {
            "proposal": proposal_addr,
            "instructions": proposal["instructions"],
            "dao": dao,
            "dao_treasury": dao_treasury,
            "pass_market_amm": proposal["pass_market_amm"],
            "fail_market_amm": proposal["fail_market_amm"],
        },
        remaining_accounts=_stored_instruction_accounts(stored["instructions"], dao_treasury),
    )
    logger.debug(
        f"finalize_proposal: {proposal_addr} with {len(stored['instructions'])} stored instructions"
    )
    return InstructionHandler(client, [ix])


async def fetch_dao_and_proposal(client: "AutocratClient", proposal_addr: Union[str, Pubkey]):
    """Fetch the DAO and a proposal concurrently"""
    dao = get_dao_address(client.program.program_id)
    return await asyncio.gather(
        client.program.account.dao.fetch(dao),
        client.program.account.proposal.fetch(proposal_addr),
    )
