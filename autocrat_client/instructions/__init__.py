"""
Instruction builders for the Autocrat program

AutocratInstructions is the default builder AutocratClient dispatches to;
each method is a module-level handler taking the client first.
"""

from .base import (
    InstructionHandler,
    InstructionBuilder,
    DaoInstructionBuilder,
    ProposalInstructionBuilder,
    ConditionalTokenInstructionBuilder,
    AmmInstructionBuilder,
)
from .dao import initialize_dao_handler, update_dao_handler
from .proposal import (
    create_proposal_instructions_handler,
    add_proposal_instructions_handler,
    create_proposal_part_one_handler,
    create_proposal_part_two_handler,
    finalize_proposal_handler,
)
from .vault import mint_conditional_tokens_handler, redeem_conditional_tokens_handler
from .amm import (
    create_amm_position_cpi_handler,
    add_liquidity_cpi_handler,
    remove_liquidity_cpi_handler,
    swap_cpi_handler,
)


class AutocratInstructions:
    """Default InstructionBuilder backed by the handler functions"""

    initialize_dao_handler = staticmethod(initialize_dao_handler)
    update_dao_handler = staticmethod(update_dao_handler)

    create_proposal_instructions_handler = staticmethod(create_proposal_instructions_handler)
    add_proposal_instructions_handler = staticmethod(add_proposal_instructions_handler)
    create_proposal_part_one_handler = staticmethod(create_proposal_part_one_handler)
    create_proposal_part_two_handler = staticmethod(create_proposal_part_two_handler)
    finalize_proposal_handler = staticmethod(finalize_proposal_handler)

    mint_conditional_tokens_handler = staticmethod(mint_conditional_tokens_handler)
    redeem_conditional_tokens_handler = staticmethod(redeem_conditional_tokens_handler)

    create_amm_position_cpi_handler = staticmethod(create_amm_position_cpi_handler)
    add_liquidity_cpi_handler = staticmethod(add_liquidity_cpi_handler)
    remove_liquidity_cpi_handler = staticmethod(remove_liquidity_cpi_handler)
    swap_cpi_handler = staticmethod(swap_cpi_handler)


__all__ = [
    "AutocratInstructions",
    "InstructionHandler",
    "InstructionBuilder",
    "DaoInstructionBuilder",
    "ProposalInstructionBuilder",
    "ConditionalTokenInstructionBuilder",
    "AmmInstructionBuilder",
]
