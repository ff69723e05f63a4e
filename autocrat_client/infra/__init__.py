"""
Infrastructure: RPC, signing, lookup tables and transaction building
"""

from .rpc import RpcClient, RpcClientConfig
from .lookup_table import decode_address_lookup_table
from .solana_signer import Signer, LocalSigner, create_signer
from .tx_builder import TxBuilder, TxBuilderConfig

__all__ = [
    "RpcClient",
    "RpcClientConfig",
    "decode_address_lookup_table",
    "Signer",
    "LocalSigner",
    "create_signer",
    "TxBuilder",
    "TxBuilderConfig",
]
