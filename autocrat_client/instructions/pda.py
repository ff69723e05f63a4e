"""
Program-derived addresses for the Autocrat and AMM programs
"""

import struct
from typing import Dict, Union

from solders.pubkey import Pubkey

from ..constants import (
    AUTOCRAT_PROGRAM_ID,
    AMM_PROGRAM_ID,
    DAO_SEED,
    PROPOSAL_SEED,
    PROPOSAL_VAULT_SEED,
    AMM_SEED,
    AMM_POSITION_SEED,
    AMM_AUTH_SEED,
    PASS_MARKET_SEED,
    FAIL_MARKET_SEED,
    CONDITIONAL_MINT_SEEDS,
)
from ..types import to_pubkey

PubkeyLike = Union[str, Pubkey]


def _program(program_id: PubkeyLike = None, default: str = AUTOCRAT_PROGRAM_ID) -> Pubkey:
    return to_pubkey(default if program_id is None else program_id)


def get_dao_address(program_id: PubkeyLike = None) -> Pubkey:
    """The DAO singleton"""
    address, _ = Pubkey.find_program_address([DAO_SEED], _program(program_id))
    return address


def get_dao_treasury_address(dao: PubkeyLike, program_id: PubkeyLike = None) -> Pubkey:
    """Treasury PDA, seeded by the DAO key; signs passed proposals"""
    address, _ = Pubkey.find_program_address([bytes(to_pubkey(dao))], _program(program_id))
    return address


def get_proposal_address(number: int, program_id: PubkeyLike = None) -> Pubkey:
    seeds = [PROPOSAL_SEED, struct.pack("<Q", number)]
    address, _ = Pubkey.find_program_address(seeds, _program(program_id))
    return address


def get_proposal_vault_address(number: int, program_id: PubkeyLike = None) -> Pubkey:
    seeds = [PROPOSAL_VAULT_SEED, struct.pack("<Q", number)]
    address, _ = Pubkey.find_program_address(seeds, _program(program_id))
    return address


def get_conditional_mint_address(
    kind: str,
    proposal: PubkeyLike,
    program_id: PubkeyLike = None,
) -> Pubkey:
    """
    Conditional mint of a proposal

    Args:
        kind: One of the CONDITIONAL_MINT_SEEDS keys, e.g.
            "conditional_on_pass_meta_mint"
    """
    seeds = [CONDITIONAL_MINT_SEEDS[kind], bytes(to_pubkey(proposal))]
    address, _ = Pubkey.find_program_address(seeds, _program(program_id))
    return address


def get_conditional_mint_addresses(
    proposal: PubkeyLike,
    program_id: PubkeyLike = None,
) -> Dict[str, Pubkey]:
    """All four conditional mints keyed by account name"""
    return {
        kind: get_conditional_mint_address(kind, proposal, program_id)
        for kind in CONDITIONAL_MINT_SEEDS
    }


def get_amm_address(
    proposal: PubkeyLike,
    is_pass_market: bool,
    amm_program_id: PubkeyLike = None,
) -> Pubkey:
    """Pass or fail market AMM of a proposal"""
    market_seed = PASS_MARKET_SEED if is_pass_market else FAIL_MARKET_SEED
    seeds = [AMM_SEED, bytes(to_pubkey(proposal)), market_seed]
    address, _ = Pubkey.find_program_address(seeds, _program(amm_program_id, AMM_PROGRAM_ID))
    return address


def get_amm_position_address(
    amm: PubkeyLike,
    user: PubkeyLike,
    amm_program_id: PubkeyLike = None,
) -> Pubkey:
    seeds = [AMM_POSITION_SEED, bytes(to_pubkey(amm)), bytes(to_pubkey(user))]
    address, _ = Pubkey.find_program_address(seeds, _program(amm_program_id, AMM_PROGRAM_ID))
    return address


def get_amm_auth_address(program_id: PubkeyLike = None) -> Pubkey:
    """Authority PDA the autocrat program signs AMM CPIs with"""
    address, _ = Pubkey.find_program_address([AMM_AUTH_SEED], _program(program_id))
    return address
