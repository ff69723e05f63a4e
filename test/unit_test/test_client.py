"""
Test AutocratClient

Client construction, lookup table resolution and dispatch to the
instruction builder.
"""

import os
import sys
import unittest
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from autocrat_client import AutocratClient, Provider
from autocrat_client import provider as provider_module
from autocrat_client.config import config, reload_config
from autocrat_client.constants import AUTOCRAT_PROGRAM_ID
from autocrat_client.errors import AccountNotFound, ConfigurationError, ErrorCode, RpcError
from autocrat_client.instructions import AutocratInstructions, InstructionBuilder
from autocrat_client.types import UpdateDaoParams

from mocks import make_lut, make_provider, run


def _provider_with_luts(tables):
    """Provider whose lookup table fetches resolve from `tables` (address -> lut)"""
    provider = make_provider()

    async def get_address_lookup_table(address):
        return tables.get(address)

    provider.connection.get_address_lookup_table = AsyncMock(side_effect=get_address_lookup_table)
    return provider


class TestCreateClient(unittest.TestCase):

    def test_luts_preserve_order_and_length(self):
        addresses = [str(Pubkey.new_unique()) for _ in range(3)]
        tables = {address: make_lut(Pubkey.from_string(address)) for address in addresses}
        provider = _provider_with_luts(tables)

        client = run(AutocratClient.create_client(provider, lut_addresses=addresses))

        self.assertEqual(len(client.luts), 3)
        self.assertEqual([str(lut.key) for lut in client.luts], addresses)
        self.assertIs(client.provider, provider)

    def test_default_program_id(self):
        self.addCleanup(reload_config)
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("AUTOCRAT_PROGRAM_ID", None)
            reload_config()
            client = run(AutocratClient.create_client(_provider_with_luts({}), lut_addresses=[]))

        self.assertEqual(client.program.program_id, Pubkey.from_string(AUTOCRAT_PROGRAM_ID))

    def test_reloaded_program_id_reaches_client(self):
        program_id = str(Pubkey.new_unique())
        self.addCleanup(reload_config)
        with patch.dict(os.environ, {"AUTOCRAT_PROGRAM_ID": program_id}):
            self.assertIs(reload_config(), config)
            client = run(AutocratClient.create_client(_provider_with_luts({}), lut_addresses=[]))

        self.assertEqual(client.program.program_id, Pubkey.from_string(program_id))

    def test_reloaded_luts_reach_client(self):
        address = str(Pubkey.new_unique())
        provider = _provider_with_luts({address: make_lut(Pubkey.from_string(address))})
        self.addCleanup(reload_config)
        with patch.dict(os.environ, {"AUTOCRAT_LUTS": address}):
            reload_config()
            client = run(AutocratClient.create_client(provider))

        self.assertEqual([str(lut.key) for lut in client.luts], [address])

    def test_program_id_override(self):
        provider = _provider_with_luts({})
        program_id = Pubkey.new_unique()

        client = run(AutocratClient.create_client(provider, program_id=program_id, lut_addresses=[]))

        self.assertEqual(client.program.program_id, program_id)

    def test_empty_lut_list_makes_no_calls(self):
        provider = _provider_with_luts({})

        client = run(AutocratClient.create_client(provider, lut_addresses=[]))

        self.assertEqual(client.luts, ())
        provider.connection.get_address_lookup_table.assert_not_awaited()

    def test_missing_lut_fails_fast(self):
        present = str(Pubkey.new_unique())
        absent = str(Pubkey.new_unique())
        provider = _provider_with_luts({present: make_lut(Pubkey.from_string(present))})

        with self.assertRaises(AccountNotFound) as ctx:
            run(AutocratClient.create_client(provider, lut_addresses=[present, absent]))
        self.assertEqual(ctx.exception.code, ErrorCode.LOOKUP_TABLE_NOT_FOUND)
        self.assertIn(absent, str(ctx.exception))

    def test_missing_lut_allowed(self):
        present = str(Pubkey.new_unique())
        absent = str(Pubkey.new_unique())
        provider = _provider_with_luts({present: make_lut(Pubkey.from_string(present))})

        client = run(AutocratClient.create_client(
            provider, lut_addresses=[absent, present], allow_missing_luts=True
        ))

        self.assertEqual(len(client.luts), 2)
        self.assertIsNone(client.luts[0])
        self.assertEqual(str(client.luts[1].key), present)

    def test_fetch_failure_propagates(self):
        provider = make_provider()
        provider.connection.get_address_lookup_table = AsyncMock(
            side_effect=RpcError.connection_failed("https://rpc")
        )

        with self.assertRaises(RpcError):
            run(AutocratClient.create_client(provider, lut_addresses=[str(Pubkey.new_unique())]))

    def test_second_fetch_failure_propagates(self):
        first = str(Pubkey.new_unique())
        second = str(Pubkey.new_unique())
        provider = make_provider()

        async def get_address_lookup_table(address):
            if address == second:
                raise RpcError.connection_failed("https://rpc")
            return make_lut(Pubkey.from_string(address))

        provider.connection.get_address_lookup_table = AsyncMock(side_effect=get_address_lookup_table)

        with self.assertRaises(RpcError):
            run(AutocratClient.create_client(provider, lut_addresses=[first, second]))
        self.assertEqual(provider.connection.get_address_lookup_table.await_count, 2)


class TestDirectConstruction(unittest.TestCase):

    def test_no_network_io(self):
        provider = make_provider()
        lut = make_lut()

        client = AutocratClient(provider, Pubkey.new_unique(), [lut])

        self.assertEqual(client.luts, (lut,))
        provider.connection.get_address_lookup_table.assert_not_called()
        provider.connection.get_account_info.assert_not_called()

    def test_default_builder(self):
        client = AutocratClient(make_provider(), Pubkey.new_unique(), [])
        self.assertIsInstance(client.builder, AutocratInstructions)
        self.assertIsInstance(client.builder, InstructionBuilder)


class TestDispatch(unittest.TestCase):
    """Every client method forwards its arguments unchanged to the builder"""

    METHODS = [
        "initialize_dao_handler",
        "update_dao_handler",
        "create_proposal_instructions_handler",
        "add_proposal_instructions_handler",
        "create_proposal_part_one_handler",
        "create_proposal_part_two_handler",
        "finalize_proposal_handler",
        "mint_conditional_tokens_handler",
        "redeem_conditional_tokens_handler",
        "create_amm_position_cpi_handler",
        "add_liquidity_cpi_handler",
        "remove_liquidity_cpi_handler",
        "swap_cpi_handler",
    ]

    def setUp(self):
        self.builder = MagicMock()
        self.results = {}
        for name in self.METHODS:
            sentinel = object()
            self.results[name] = sentinel
            setattr(self.builder, name, AsyncMock(return_value=sentinel))
        self.client = AutocratClient(make_provider(), Pubkey.new_unique(), [], builder=self.builder)

    def _check(self, name, coro, *expected_args):
        result = run(coro)
        self.assertIs(result, self.results[name])
        getattr(self.builder, name).assert_awaited_once_with(self.client, *expected_args)

    def test_initialize_dao_defaults(self):
        self._check("initialize_dao_handler", self.client.initialize_dao(), None, None)

    def test_initialize_dao(self):
        meta, usdc = Pubkey.new_unique(), Pubkey.new_unique()
        self._check("initialize_dao_handler", self.client.initialize_dao(meta, usdc), meta, usdc)

    def test_update_dao(self):
        params = UpdateDaoParams(pass_threshold_bps=100)
        self._check("update_dao_handler", self.client.update_dao(params), params)

    def test_create_proposal_instructions(self):
        instructions = [object()]
        keypair = Keypair()
        self._check(
            "create_proposal_instructions_handler",
            self.client.create_proposal_instructions(instructions, keypair),
            instructions,
            keypair,
        )

    def test_add_proposal_instructions(self):
        instructions = [object(), object()]
        address = Pubkey.new_unique()
        self._check(
            "add_proposal_instructions_handler",
            self.client.add_proposal_instructions(instructions, address),
            instructions,
            address,
        )

    def test_create_proposal_part_one(self):
        address = Pubkey.new_unique()
        self._check(
            "create_proposal_part_one_handler",
            self.client.create_proposal_part_one("https://example.com", address),
            "https://example.com",
            address,
        )

    def test_create_proposal_part_two(self):
        self._check(
            "create_proposal_part_two_handler",
            self.client.create_proposal_part_two(10_000, 9_000, 500),
            10_000,
            9_000,
            500,
        )

    def test_finalize_proposal(self):
        proposal = Pubkey.new_unique()
        self._check("finalize_proposal_handler", self.client.finalize_proposal(proposal), proposal)

    def test_mint_conditional_tokens(self):
        proposal = Pubkey.new_unique()
        self._check(
            "mint_conditional_tokens_handler",
            self.client.mint_conditional_tokens(proposal, 0, 7),
            proposal,
            0,
            7,
        )

    def test_redeem_conditional_tokens(self):
        proposal = Pubkey.new_unique()
        self._check(
            "redeem_conditional_tokens_handler",
            self.client.redeem_conditional_tokens(proposal),
            proposal,
        )

    def test_create_amm_position_cpi(self):
        amm = Pubkey.new_unique()
        self._check("create_amm_position_cpi_handler", self.client.create_amm_position_cpi(amm), amm)

    def test_add_liquidity_cpi(self):
        amm, position = Pubkey.new_unique(), Pubkey.new_unique()
        self._check(
            "add_liquidity_cpi_handler",
            self.client.add_liquidity_cpi(amm, position, 5, 6),
            amm,
            position,
            5,
            6,
        )

    def test_remove_liquidity_cpi(self):
        proposal, amm = Pubkey.new_unique(), Pubkey.new_unique()
        self._check(
            "remove_liquidity_cpi_handler",
            self.client.remove_liquidity_cpi(proposal, amm, 10_000),
            proposal,
            amm,
            10_000,
        )

    def test_swap_cpi(self):
        proposal, amm = Pubkey.new_unique(), Pubkey.new_unique()
        self._check(
            "swap_cpi_handler",
            self.client.swap_cpi(proposal, amm, True, 100, 90),
            proposal,
            amm,
            True,
            100,
            90,
        )

    def test_builder_errors_propagate(self):
        self.builder.finalize_proposal_handler = AsyncMock(
            side_effect=AccountNotFound.account("missing", "Proposal")
        )
        with self.assertRaises(AccountNotFound):
            run(self.client.finalize_proposal(Pubkey.new_unique()))


class TestProvider(unittest.TestCase):

    def test_create_explicit(self):
        keypair = Keypair()
        provider = Provider.create(rpc_url="https://rpc.example.com", keypair=keypair)

        self.assertEqual(provider.pubkey, keypair.pubkey())
        self.assertEqual(provider.connection.endpoint, "https://rpc.example.com")
        self.assertEqual(provider.tx_builder.pubkey, keypair.pubkey())
        run(provider.aclose())

    def test_create_without_url(self):
        empty = MagicMock()
        empty.rpc.url = ""
        with patch.object(provider_module, "global_config", empty):
            with self.assertRaises(ConfigurationError):
                Provider.create(keypair=Keypair())

    def test_send_and_confirm_delegates(self):
        provider = Provider.create(rpc_url="https://rpc.example.com", keypair=Keypair())
        provider.tx_builder.build_and_send = AsyncMock(return_value="result")
        extra = Keypair()
        lut = make_lut()

        result = run(provider.send_and_confirm(["ix"], signers=(extra,), luts=(lut,)))

        self.assertEqual(result, "result")
        provider.tx_builder.build_and_send.assert_awaited_once_with(
            ["ix"],
            luts=(lut,),
            compute_units=None,
            skip_preflight=None,
            wait_confirmation=True,
            additional_signers=[extra],
        )
        run(provider.aclose())


if __name__ == "__main__":
    unittest.main()
