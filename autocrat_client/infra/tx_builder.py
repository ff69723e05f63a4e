"""
Transaction builder and sender

Provides utilities for:
- Building versioned transactions compressed with address lookup tables
- Adding compute budget instructions
- Simulating, sending and confirming transactions
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from solders.address_lookup_table_account import AddressLookupTableAccount
from solders.compute_budget import set_compute_unit_limit, set_compute_unit_price
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import MessageV0
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import VersionedTransaction

from .rpc import RpcClient
from .solana_signer import Signer
from ..types import TxResult, TxStatus, to_pubkey
from ..errors import TransactionError, RpcError
from ..config import config as global_config

logger = logging.getLogger(__name__)


@dataclass
class TxBuilderConfig:
    """
    Transaction builder runtime configuration

    Allows per-builder overrides while pulling defaults from the global
    config (autocrat_client.config.TxConfig).

    Usage:
        config = TxBuilderConfig(compute_units=400_000, skip_preflight=True)
        builder = TxBuilder(rpc, signer, config=config)
    """
    compute_units: int = None
    compute_unit_price: int = None
    skip_preflight: bool = None
    preflight_commitment: str = None
    max_retries: int = None
    confirmation_timeout: float = None
    retry_delay: float = None

    def __post_init__(self):
        """Apply defaults from global config for any unset values"""
        if self.compute_units is None:
            self.compute_units = global_config.tx.compute_units
        if self.compute_unit_price is None:
            self.compute_unit_price = global_config.tx.compute_unit_price
        if self.skip_preflight is None:
            self.skip_preflight = global_config.tx.skip_preflight
        if self.preflight_commitment is None:
            self.preflight_commitment = global_config.tx.preflight_commitment
        if self.max_retries is None:
            self.max_retries = global_config.tx.max_retries
        if self.confirmation_timeout is None:
            self.confirmation_timeout = global_config.tx.confirmation_timeout
        if self.retry_delay is None:
            self.retry_delay = global_config.tx.retry_delay


class TxBuilder:
    """
    Transaction builder and sender

    Usage:
        builder = TxBuilder(rpc, signer)

        # Build and send
        result = await builder.build_and_send(instructions, luts=client.luts)

        # Or step by step
        tx_bytes = await builder.build(instructions, luts=client.luts)
        signed_bytes, sig = builder.sign(tx_bytes)
        result = await builder.send(signed_bytes)
    """

    def __init__(
        self,
        rpc: RpcClient,
        signer: Signer,
        config: Optional[TxBuilderConfig] = None,
    ):
        self._rpc = rpc
        self._signer = signer
        self._config = config or TxBuilderConfig()

    @property
    def pubkey(self) -> Pubkey:
        """Signer's public key"""
        return self._signer.pubkey

    @property
    def config(self) -> TxBuilderConfig:
        return self._config

    async def build(
        self,
        instructions: Sequence[Instruction],
        luts: Sequence[Optional[AddressLookupTableAccount]] = (),
        payer: Optional[str] = None,
        compute_units: Optional[int] = None,
        compute_unit_price: Optional[int] = None,
        recent_blockhash: Optional[str] = None,
    ) -> bytes:
        """
        Build unsigned versioned transaction

        Args:
            instructions: List of instructions
            luts: Address lookup tables used to compress account keys
                (None entries are skipped)
            payer: Fee payer pubkey (defaults to signer)
            compute_units: Compute unit limit
            compute_unit_price: Priority fee in microlamports per CU
            recent_blockhash: Optional blockhash (fetched if not provided)

        Returns:
            Unsigned transaction bytes
        """
        all_instructions: List[Instruction] = []

        cu_limit = compute_units or self._config.compute_units
        cu_price = compute_unit_price or self._config.compute_unit_price

        if cu_limit > 0:
            all_instructions.append(set_compute_unit_limit(cu_limit))
        if cu_price > 0:
            all_instructions.append(set_compute_unit_price(cu_price))

        all_instructions.extend(instructions)

        if recent_blockhash is None:
            blockhash_info = await self._rpc.get_latest_blockhash()
            recent_blockhash = blockhash_info.get("blockhash")

        if not recent_blockhash:
            raise TransactionError.send_failed("Failed to get recent blockhash")

        tables = [lut for lut in luts if lut is not None]
        payer_pubkey = to_pubkey(payer) if payer else self.pubkey
        message = MessageV0.try_compile(
            payer_pubkey,
            all_instructions,
            tables,
            Hash.from_string(recent_blockhash),
        )
        logger.debug(
            f"Compiled message: {len(all_instructions)} instructions, "
            f"{len(tables)} lookup tables, {message.header.num_required_signatures} signers"
        )

        # Placeholder signatures sized to the required signer count
        null_signatures = [Signature.default()] * message.header.num_required_signatures
        return bytes(VersionedTransaction.populate(message, null_signatures))

    def sign(
        self,
        unsigned_tx: bytes,
        additional_signers: Optional[Sequence[Keypair]] = None,
    ) -> Tuple[bytes, str]:
        """
        Sign transaction with the wallet and any additional keypairs

        Returns:
            (signed_tx_bytes, signature_base58)
        """
        return self._signer.sign_transaction(unsigned_tx, additional_signers or ())

    async def send(
        self,
        signed_tx: bytes,
        skip_preflight: Optional[bool] = None,
        wait_confirmation: bool = True,
    ) -> TxResult:
        """
        Send signed transaction

        Args:
            signed_tx: Signed transaction bytes
            skip_preflight: Skip simulation (default from config)
            wait_confirmation: Wait for confirmation

        Returns:
            TxResult with status and signature
        """
        skip = skip_preflight if skip_preflight is not None else self._config.skip_preflight

        for attempt in range(self._config.max_retries):
            try:
                signature = await self._rpc.send_transaction(
                    signed_tx,
                    skip_preflight=skip,
                    preflight_commitment=self._config.preflight_commitment,
                )
            except RpcError as e:
                if e.recoverable and attempt < self._config.max_retries - 1:
                    logger.warning(f"Send failed (attempt {attempt + 1}), retrying: {e}")
                    await asyncio.sleep(self._config.retry_delay)
                    continue
                raise TransactionError.send_failed(str(e)) from e

            logger.info(f"Transaction sent: {signature}")

            if not wait_confirmation:
                return TxResult(status=TxStatus.PENDING, signature=signature)

            confirmed = await self._rpc.confirm_transaction(
                signature,
                timeout_seconds=self._config.confirmation_timeout,
            )
            if confirmed is True:
                return TxResult.success(signature)
            if confirmed is False:
                return TxResult.failed(
                    "Transaction failed on-chain (check explorer for details)",
                    signature=signature,
                )
            return TxResult.timeout(signature)

        raise TransactionError.send_failed("No send attempts made (max_retries=0)")

    async def simulate(self, unsigned_tx: bytes) -> Dict[str, Any]:
        """
        Simulate transaction execution

        Raises:
            TransactionError: If the simulation reports an error
        """
        result = await self._rpc.simulate_transaction(unsigned_tx)
        value = (result or {}).get("value") or {}
        if value.get("err"):
            raise TransactionError.simulation_failed(
                str(value["err"]), value.get("logs") or [], err=value["err"]
            )
        return result

    async def build_and_send(
        self,
        instructions: Sequence[Instruction],
        luts: Sequence[Optional[AddressLookupTableAccount]] = (),
        compute_units: Optional[int] = None,
        compute_unit_price: Optional[int] = None,
        skip_preflight: Optional[bool] = None,
        wait_confirmation: bool = True,
        simulate_first: bool = False,
        additional_signers: Optional[Sequence[Keypair]] = None,
    ) -> TxResult:
        """
        Build, sign, and send transaction in one call

        Returns:
            TxResult
        """
        unsigned_tx = await self.build(
            instructions,
            luts=luts,
            compute_units=compute_units,
            compute_unit_price=compute_unit_price,
        )

        if simulate_first:
            await self.simulate(unsigned_tx)

        signed_tx, _ = self.sign(unsigned_tx, additional_signers)

        return await self.send(
            signed_tx,
            skip_preflight=skip_preflight,
            wait_confirmation=wait_confirmation,
        )
