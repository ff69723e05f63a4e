"""
Test Program Handle

Instruction building and account fetching through the IDL.
"""

import hashlib
import struct
import sys
import unittest
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from solders.pubkey import Pubkey

from autocrat_client.constants import AUTOCRAT_PROGRAM_ID
from autocrat_client.errors import AccountNotFound, IdlError, ErrorCode
from autocrat_client.program import Program, custom_error_code, load_idl

from mocks import dao_account, encode_account, make_provider, run


def _program(accounts=None):
    provider = make_provider(accounts)
    return Program(load_idl(), AUTOCRAT_PROGRAM_ID, provider), provider


class TestLoadIdl(unittest.TestCase):

    def test_cached(self):
        self.assertIs(load_idl(), load_idl())

    def test_declares_all_instructions(self):
        self.assertEqual(
            {ix["name"] for ix in load_idl()["instructions"]},
            {
                "initializeDao", "updateDao",
                "createProposalInstructions", "addProposalInstructions",
                "createProposalPartOne", "createProposalPartTwo",
                "mintConditionalTokens", "redeemConditionalTokens",
                "finalizeProposal", "createAmmPosition",
                "addLiquidity", "removeLiquidity", "swap",
            },
        )


class TestInstruction(unittest.TestCase):

    def setUp(self):
        self.program, self.provider = _program()

    def test_discriminator(self):
        expected = hashlib.sha256(b"global:finalize_proposal").digest()[:8]
        self.assertEqual(self.program.instruction_discriminator("finalize_proposal"), expected)

    def test_accounts_follow_idl_order_and_flags(self):
        accounts = {
            "proposal": Pubkey.new_unique(),
            "instructions": Pubkey.new_unique(),
            "dao": Pubkey.new_unique(),
            "dao_treasury": Pubkey.new_unique(),
            "pass_market_amm": Pubkey.new_unique(),
            "fail_market_amm": Pubkey.new_unique(),
        }

        ix = self.program.instruction("finalize_proposal", accounts)

        self.assertEqual(ix.program_id, Pubkey.from_string(AUTOCRAT_PROGRAM_ID))
        self.assertEqual([m.pubkey for m in ix.accounts], list(accounts.values()))
        self.assertEqual(
            [(m.is_signer, m.is_writable) for m in ix.accounts],
            [(False, True), (False, True), (False, False), (False, True), (False, True), (False, True)],
        )
        self.assertEqual(bytes(ix.data), self.program.instruction_discriminator("finalize_proposal"))

    def test_args_encoded_after_discriminator(self):
        accounts = {
            "user": Pubkey.new_unique(),
            "amm": Pubkey.new_unique(),
            "amm_position": Pubkey.new_unique(),
            "conditional_base_mint": Pubkey.new_unique(),
            "conditional_quote_mint": Pubkey.new_unique(),
            "user_ata_conditional_base": Pubkey.new_unique(),
            "user_ata_conditional_quote": Pubkey.new_unique(),
            "vault_ata_conditional_base": Pubkey.new_unique(),
            "vault_ata_conditional_quote": Pubkey.new_unique(),
            "amm_program": Pubkey.new_unique(),
            "amm_auth_pda": Pubkey.new_unique(),
            "token_program": Pubkey.new_unique(),
            "associated_token_program": Pubkey.new_unique(),
            "system_program": Pubkey.new_unique(),
        }

        ix = self.program.instruction("add_liquidity", accounts, 1_000, 2_000)

        data = bytes(ix.data)
        self.assertEqual(data[:8], hashlib.sha256(b"global:add_liquidity").digest()[:8])
        self.assertEqual(data[8:], struct.pack("<QQ", 1_000, 2_000))
        self.assertTrue(ix.accounts[0].is_signer)

    def test_string_accounts_accepted(self):
        ix = self.program.instruction(
            "add_proposal_instructions",
            {"proposer": "11111111111111111111111111111111", "proposal_instructions": Pubkey.new_unique()},
            [],
        )
        self.assertEqual(str(ix.accounts[0].pubkey), "11111111111111111111111111111111")

    def test_missing_account(self):
        with self.assertRaises(IdlError) as ctx:
            self.program.instruction("update_dao", {"dao": Pubkey.new_unique()}, {})
        self.assertEqual(ctx.exception.code, ErrorCode.IDL_MISSING_ACCOUNT)
        self.assertEqual(ctx.exception.name, "dao_treasury")

    def test_wrong_arg_count(self):
        with self.assertRaises(IdlError):
            self.program.instruction("swap", {}, True, 1)

    def test_unknown_instruction(self):
        with self.assertRaises(IdlError) as ctx:
            self.program.instruction("vote", {})
        self.assertEqual(ctx.exception.code, ErrorCode.IDL_UNKNOWN_INSTRUCTION)

    def test_error_message_lookup(self):
        self.assertIn("ProposalTooYoung", self.program.error_message(6000))
        self.assertIsNone(self.program.error_message(1))

    def test_describe_custom_error(self):
        err = {"InstructionError": [2, {"Custom": 6002}]}
        self.assertEqual(custom_error_code(err), 6002)
        self.assertEqual(
            self.program.describe_error(err),
            "ProposalStillPending: Proposal is still pending",
        )

    def test_describe_non_custom_error(self):
        self.assertIsNone(custom_error_code("AccountNotFound"))
        self.assertIsNone(custom_error_code({"InstructionError": [0, "InvalidAccountData"]}))
        self.assertIsNone(self.program.describe_error({"InstructionError": [0, {"Custom": 42}]}))
        self.assertIsNone(self.program.describe_error(None))


class TestAccountFetch(unittest.TestCase):

    def test_fetch_decodes(self):
        address = Pubkey.new_unique()
        dao = dao_account(proposal_count=7)
        program, _ = _program({str(address): encode_account("Dao", dao)})

        fetched = run(program.account.dao.fetch(address))

        self.assertEqual(fetched, dao)

    def test_fetch_missing_raises(self):
        program, _ = _program()
        with self.assertRaises(AccountNotFound) as ctx:
            run(program.account.dao.fetch(Pubkey.new_unique()))
        self.assertEqual(ctx.exception.code, ErrorCode.ACCOUNT_NOT_FOUND)

    def test_fetch_nullable_missing(self):
        program, _ = _program()
        self.assertIsNone(run(program.account.proposal.fetch_nullable(Pubkey.new_unique())))

    def test_discriminator_mismatch(self):
        address = Pubkey.new_unique()
        program, _ = _program({str(address): encode_account("Dao", dao_account())})

        with self.assertRaises(AccountNotFound) as ctx:
            run(program.account.amm_position.fetch(address))
        self.assertEqual(ctx.exception.code, ErrorCode.ACCOUNT_INVALID_DATA)

    def test_unknown_account_namespace(self):
        program, _ = _program()
        with self.assertRaises(AttributeError):
            program.account.vote_record
        with self.assertRaises(IdlError):
            program.account["VoteRecord"]
        self.assertIs(program.account["Dao"], program.account.dao)


if __name__ == "__main__":
    unittest.main()
