"""
Autocrat Constants

Program ids, lookup tables, PDA seeds and well-known accounts used by the
instruction builders. Addresses are base58 strings; convert with
Pubkey.from_string where a solders type is needed.
"""

import hashlib
from typing import Tuple


def _anchor_discriminator(name: str) -> bytes:
    """Compute Anchor discriminator for instruction name"""
    return hashlib.sha256(f"global:{name}".encode("utf-8")).digest()[:8]


def _anchor_account_discriminator(name: str) -> bytes:
    """Compute Anchor discriminator for account name"""
    return hashlib.sha256(f"account:{name}".encode("utf-8")).digest()[:8]


# Autocrat program (mainnet)
AUTOCRAT_PROGRAM_ID = "autoQP9RmUNkzzKRXsMkWicDVZ3h29vvyMDcAYjCxxg"

# AMM program invoked through CPI by the autocrat AMM instructions
AMM_PROGRAM_ID = "AMM5G2nxuKUwCLRYTW7qqEwuoqCtNSjtbipwEmm2g8bH"

# Address lookup tables resolved by AutocratClient.create_client.
# Order matters: callers may index into client.luts positionally.
AUTOCRAT_LUTS: Tuple[str, ...] = ()

# Default DAO mints used by initialize_dao when none are given
META_MINT = "METADDFL6wWMWEoKTFJwcThTbUmtarRJZjRpzUvkxhr"
USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"

# Token Programs
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

# Associated Token Program
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"

# System Program
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"

# Rent Sysvar
RENT_SYSVAR_ID = "SysvarRent111111111111111111111111111111111"

# PDA seeds
DAO_SEED = b"WWCACOTMICMIBMHAFTTWYGHMB"
PROPOSAL_SEED = b"proposal"
PROPOSAL_VAULT_SEED = b"proposal_vault"
AMM_SEED = b"amm"
AMM_POSITION_SEED = b"amm_position"
AMM_AUTH_SEED = b"amm_auth"
PASS_MARKET_SEED = b"pass"
FAIL_MARKET_SEED = b"fail"
CONDITIONAL_MINT_SEEDS = {
    "conditional_on_pass_meta_mint": b"conditional_on_pass_meta",
    "conditional_on_pass_usdc_mint": b"conditional_on_pass_usdc",
    "conditional_on_fail_meta_mint": b"conditional_on_fail_meta",
    "conditional_on_fail_usdc_mint": b"conditional_on_fail_usdc",
}
