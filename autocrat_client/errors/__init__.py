"""
Error definitions for the Autocrat client
"""

from .exceptions import (
    ErrorCode,
    AutocratError,
    RpcError,
    TransactionError,
    AccountNotFound,
    IdlError,
    SignerError,
    ConfigurationError,
)

__all__ = [
    "ErrorCode",
    "AutocratError",
    "RpcError",
    "TransactionError",
    "AccountNotFound",
    "IdlError",
    "SignerError",
    "ConfigurationError",
]
