"""
Conditional token handlers

Minting deposits META/USDC into the proposal vault and returns equal
amounts of pass- and fail-conditional tokens. Redeeming burns the
conditional tokens of the winning side for the underlying tokens once the
proposal is finalized.
"""

from __future__ import annotations

from typing import Any, Dict, List, Union, TYPE_CHECKING

from solders.instruction import Instruction
from solders.pubkey import Pubkey

from ..constants import (
    CONDITIONAL_MINT_SEEDS,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
    RENT_SYSVAR_ID,
)
from .base import InstructionHandler
from .pda import get_dao_address, get_proposal_vault_address
from .proposal import fetch_dao_and_proposal
from .token import get_associated_token_address, build_create_ata_idempotent_instruction

if TYPE_CHECKING:
    from ..client import AutocratClient


def _user_ata_name(mint_name: str) -> str:
    # conditional_on_pass_meta_mint -> conditional_on_pass_meta_user_ata
    return mint_name[:-len("_mint")] + "_user_ata"


def _vault_ata_name(mint_name: str) -> str:
    return mint_name[:-len("_mint")] + "_vault_ata"


async def _conditional_accounts(
    client: "AutocratClient",
    proposal_addr: Union[str, Pubkey],
) -> Dict[str, Any]:
    """Accounts shared by mint and redeem"""
    program_id = client.program.program_id
    user = client.provider.pubkey
    dao_account, proposal = await fetch_dao_and_proposal(client, proposal_addr)

    meta_mint = dao_account["meta_mint"]
    usdc_mint = dao_account["usdc_mint"]
    proposal_vault = get_proposal_vault_address(proposal["number"], program_id)

    accounts: Dict[str, Any] = {
        "user": user,
        "dao": get_dao_address(program_id),
        "proposal": proposal_addr,
        "proposal_vault": proposal_vault,
        "meta_mint": meta_mint,
        "usdc_mint": usdc_mint,
        "meta_user_ata": get_associated_token_address(user, meta_mint),
        "usdc_user_ata": get_associated_token_address(user, usdc_mint),
        "meta_vault_ata": get_associated_token_address(proposal_vault, meta_mint),
        "usdc_vault_ata": get_associated_token_address(proposal_vault, usdc_mint),
        "associated_token_program": ASSOCIATED_TOKEN_PROGRAM_ID,
        "token_program": TOKEN_PROGRAM_ID,
        "system_program": SYSTEM_PROGRAM_ID,
    }
    for mint_name in CONDITIONAL_MINT_SEEDS:
        mint = proposal[mint_name]
        accounts[mint_name] = mint
        accounts[_user_ata_name(mint_name)] = get_associated_token_address(user, mint)
        accounts[_vault_ata_name(mint_name)] = get_associated_token_address(proposal_vault, mint)
    return accounts


async def mint_conditional_tokens_handler(
    client: "AutocratClient",
    proposal_addr: Union[str, Pubkey],
    meta_amount: int,
    usdc_amount: int,
) -> InstructionHandler:
    """
    Deposit META/USDC for pass and fail conditional tokens

    The user's conditional token accounts are created first if missing.
    """
    accounts = await _conditional_accounts(client, proposal_addr)
    user = accounts["user"]

    instructions: List[Instruction] = [
        build_create_ata_idempotent_instruction(user, user, accounts[mint_name])
        for mint_name in CONDITIONAL_MINT_SEEDS
    ]
    instructions.append(
        client.program.instruction(
            "mint_conditional_tokens",
            accounts,
            meta_amount,
            usdc_amount,
        )
    )
    return InstructionHandler(client, instructions)


async def redeem_conditional_tokens_handler(
    client: "AutocratClient",
    proposal_addr: Union[str, Pubkey],
) -> InstructionHandler:
    """Redeem conditional tokens of a finalized proposal"""
    accounts = await _conditional_accounts(client, proposal_addr)
    accounts["rent"] = RENT_SYSVAR_ID

    ix = client.program.instruction("redeem_conditional_tokens", accounts)
    return InstructionHandler(client, [ix])
