"""
Provider - connection and signing context

Bundles the RPC connection, the wallet signer and a transaction builder.
Instruction builders read accounts through `connection` and submit
through `tx_builder`.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Union, TYPE_CHECKING

from solders.address_lookup_table_account import AddressLookupTableAccount
from solders.instruction import Instruction
from solders.pubkey import Pubkey

from .config import config as global_config
from .errors import ConfigurationError
from .infra import RpcClient, RpcClientConfig, TxBuilder, TxBuilderConfig, Signer, create_signer
from .types import TxResult

if TYPE_CHECKING:
    from solders.keypair import Keypair


class Provider:
    """
    Connection + wallet

    Usage:
        # From environment (SOLANA_RPC_URL, SOLANA_KEYPAIR_PATH)
        provider = Provider.create()

        # Explicit
        provider = Provider.create(
            rpc_url="https://api.mainnet-beta.solana.com",
            keypair_path="/path/to/keypair.json",
        )

        async with provider:
            client = await AutocratClient.create_client(provider)
    """

    def __init__(
        self,
        connection: RpcClient,
        wallet: Signer,
        tx_config: Optional[TxBuilderConfig] = None,
    ):
        self._connection = connection
        self._wallet = wallet
        self._tx_builder = TxBuilder(connection, wallet, config=tx_config)

    @classmethod
    def create(
        cls,
        rpc_url: Optional[Union[str, List[str]]] = None,
        keypair: Optional["Keypair"] = None,
        keypair_path: Optional[str] = None,
        rpc_config: Optional[RpcClientConfig] = None,
        tx_config: Optional[TxBuilderConfig] = None,
    ) -> "Provider":
        """
        Create provider from arguments, falling back to the global config

        Raises:
            ConfigurationError: No RPC url given or configured
            SignerError: No keypair given or configured
        """
        rpc_url = rpc_url or global_config.rpc.url
        if not rpc_url:
            raise ConfigurationError.missing("SOLANA_RPC_URL")

        connection = RpcClient(rpc_url, config=rpc_config)
        wallet = create_signer(keypair=keypair, keypair_path=keypair_path)
        return cls(connection, wallet, tx_config=tx_config)

    @property
    def connection(self) -> RpcClient:
        return self._connection

    @property
    def wallet(self) -> Signer:
        return self._wallet

    @property
    def tx_builder(self) -> TxBuilder:
        return self._tx_builder

    @property
    def pubkey(self) -> Pubkey:
        """Wallet public key"""
        return self._wallet.pubkey

    async def send_and_confirm(
        self,
        instructions: Sequence[Instruction],
        signers: Sequence["Keypair"] = (),
        luts: Sequence[Optional[AddressLookupTableAccount]] = (),
        compute_units: Optional[int] = None,
        skip_preflight: Optional[bool] = None,
        wait_confirmation: bool = True,
    ) -> TxResult:
        """Build, sign (wallet + signers) and send a transaction"""
        return await self._tx_builder.build_and_send(
            instructions,
            luts=luts,
            compute_units=compute_units,
            skip_preflight=skip_preflight,
            wait_confirmation=wait_confirmation,
            additional_signers=list(signers),
        )

    async def aclose(self):
        await self._connection.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    def __repr__(self) -> str:
        return f"Provider(wallet={self.pubkey}, endpoint={self._connection.endpoint})"
