"""
AMM handlers

The autocrat program wraps the pass/fail market AMMs and invokes the AMM
program through CPI, signing with its amm_auth PDA. Conditional mints are
read from the AMM account; vault token accounts are owned by the AMM.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Union, TYPE_CHECKING

from solders.pubkey import Pubkey

from ..constants import AMM_PROGRAM_ID, SYSTEM_PROGRAM_ID, TOKEN_PROGRAM_ID, ASSOCIATED_TOKEN_PROGRAM_ID
from ..types import to_pubkey
from .base import InstructionHandler
from .pda import get_dao_address, get_amm_position_address, get_amm_auth_address
from .token import get_associated_token_address

if TYPE_CHECKING:
    from ..client import AutocratClient

logger = logging.getLogger(__name__)


async def _amm_token_accounts(client: "AutocratClient", amm_addr: Union[str, Pubkey]) -> Dict[str, Any]:
    amm = to_pubkey(amm_addr)
    user = client.provider.pubkey
    amm_account = await client.program.account.amm.fetch(amm)

    base_mint = amm_account["conditional_base_mint"]
    quote_mint = amm_account["conditional_quote_mint"]
    return {
        "user": user,
        "amm": amm,
        "conditional_base_mint": base_mint,
        "conditional_quote_mint": quote_mint,
        "user_ata_conditional_base": get_associated_token_address(user, base_mint),
        "user_ata_conditional_quote": get_associated_token_address(user, quote_mint),
        "vault_ata_conditional_base": get_associated_token_address(amm, base_mint),
        "vault_ata_conditional_quote": get_associated_token_address(amm, quote_mint),
        "amm_program": AMM_PROGRAM_ID,
        "amm_auth_pda": get_amm_auth_address(client.program.program_id),
        "token_program": TOKEN_PROGRAM_ID,
        "associated_token_program": ASSOCIATED_TOKEN_PROGRAM_ID,
        "system_program": SYSTEM_PROGRAM_ID,
    }


async def create_amm_position_cpi_handler(
    client: "AutocratClient",
    amm: Union[str, Pubkey],
) -> InstructionHandler:
    """Open the wallet's liquidity position in an AMM"""
    user = client.provider.pubkey
    ix = client.program.instruction(
        "create_amm_position",
        {
            "user": user,
            "amm": amm,
            "amm_position": get_amm_position_address(amm, user),
            "amm_program": AMM_PROGRAM_ID,
            "system_program": SYSTEM_PROGRAM_ID,
        },
    )
    return InstructionHandler(client, [ix])


async def add_liquidity_cpi_handler(
    client: "AutocratClient",
    amm_addr: Union[str, Pubkey],
    amm_position_addr: Union[str, Pubkey],
    max_base_amount: int,
    max_quote_amount: int,
) -> InstructionHandler:
    accounts = await _amm_token_accounts(client, amm_addr)
    accounts["amm_position"] = amm_position_addr

    ix = client.program.instruction(
        "add_liquidity",
        accounts,
        max_base_amount,
        max_quote_amount,
    )
    return InstructionHandler(client, [ix])


async def remove_liquidity_cpi_handler(
    client: "AutocratClient",
    proposal_addr: Union[str, Pubkey],
    amm_addr: Union[str, Pubkey],
    remove_bps: int,
) -> InstructionHandler:
    """Withdraw remove_bps (out of 10_000) of the wallet's position"""
    accounts = await _amm_token_accounts(client, amm_addr)
    accounts["dao"] = get_dao_address(client.program.program_id)
    accounts["proposal"] = proposal_addr
    accounts["amm_position"] = get_amm_position_address(accounts["amm"], accounts["user"])

    ix = client.program.instruction("remove_liquidity", accounts, remove_bps)
    return InstructionHandler(client, [ix])


async def swap_cpi_handler(
    client: "AutocratClient",
    proposal_addr: Union[str, Pubkey],
    amm_addr: Union[str, Pubkey],
    is_quote_to_base: bool,
    input_amount: int,
    min_output_amount: int,
) -> InstructionHandler:
    accounts = await _amm_token_accounts(client, amm_addr)
    accounts["dao"] = get_dao_address(client.program.program_id)
    accounts["proposal"] = proposal_addr

    logger.debug(
        f"swap: amm={accounts['amm']} quote_to_base={is_quote_to_base} "
        f"in={input_amount} min_out={min_output_amount}"
    )
    ix = client.program.instruction(
        "swap",
        accounts,
        is_quote_to_base,
        input_amount,
        min_output_amount,
    )
    return InstructionHandler(client, [ix])
