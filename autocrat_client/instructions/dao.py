"""
DAO instruction handlers
"""

from __future__ import annotations

import logging
from typing import Optional, Union, TYPE_CHECKING

from solders.pubkey import Pubkey

from ..constants import META_MINT, USDC_MINT, SYSTEM_PROGRAM_ID
from ..types import UpdateDaoParams, to_pubkey
from .base import InstructionHandler
from .pda import get_dao_address, get_dao_treasury_address

if TYPE_CHECKING:
    from ..client import AutocratClient

logger = logging.getLogger(__name__)


async def initialize_dao_handler(
    client: "AutocratClient",
    meta_mint: Optional[Union[str, Pubkey]] = None,
    usdc_mint: Optional[Union[str, Pubkey]] = None,
) -> InstructionHandler:
    """
    Create the DAO singleton and its treasury

    Args:
        meta_mint: Governance token mint (defaults to META)
        usdc_mint: Quote token mint (defaults to USDC)
    """
    program_id = client.program.program_id
    dao = get_dao_address(program_id)

    ix = client.program.instruction(
        "initialize_dao",
        {
            "payer": client.provider.pubkey,
            "dao": dao,
            "dao_treasury": get_dao_treasury_address(dao, program_id),
            "meta_mint": to_pubkey(META_MINT if meta_mint is None else meta_mint),
            "usdc_mint": to_pubkey(USDC_MINT if usdc_mint is None else usdc_mint),
            "system_program": SYSTEM_PROGRAM_ID,
        },
    )
    logger.debug(f"initialize_dao: dao={dao}")
    return InstructionHandler(client, [ix])


async def update_dao_handler(
    client: "AutocratClient",
    dao_params: UpdateDaoParams,
) -> InstructionHandler:
    """
    Update DAO parameters

    The treasury must sign, so this instruction only succeeds when stored
    in a proposal and executed by finalize_proposal.
    """
    program_id = client.program.program_id
    dao = get_dao_address(program_id)

    ix = client.program.instruction(
        "update_dao",
        {
            "dao": dao,
            "dao_treasury": get_dao_treasury_address(dao, program_id),
        },
        dao_params,
    )
    return InstructionHandler(client, [ix])
