"""
Exception definitions for the Autocrat client
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(Enum):
    """
    Unified error codes for Autocrat client operations

    1xxx - RPC errors
    2xxx - Transaction errors
    4xxx - Account errors
    5xxx - IDL / encoding errors
    6xxx - Signer errors
    9xxx - Configuration errors
    """
    # RPC errors (recoverable)
    RPC_CONNECTION_FAILED = "1001"
    RPC_TIMEOUT = "1002"
    RPC_RATE_LIMITED = "1003"
    RPC_INVALID_RESPONSE = "1004"

    # Transaction errors
    TX_SIMULATION_FAILED = "2001"
    TX_SEND_FAILED = "2002"
    TX_CONFIRMATION_FAILED = "2003"
    TX_INVALID_BLOCKHASH = "2005"

    # Account errors
    ACCOUNT_NOT_FOUND = "4001"
    LOOKUP_TABLE_NOT_FOUND = "4002"
    ACCOUNT_INVALID_DATA = "4003"

    # IDL errors
    IDL_UNKNOWN_INSTRUCTION = "5001"
    IDL_UNKNOWN_ACCOUNT = "5002"
    IDL_UNKNOWN_TYPE = "5003"
    IDL_MISSING_ACCOUNT = "5004"
    IDL_INVALID_VALUE = "5005"

    # Signer errors
    SIGNER_NOT_CONFIGURED = "6001"
    SIGNER_FAILED = "6002"

    # Configuration errors
    CONFIG_INVALID = "9001"
    CONFIG_MISSING = "9002"


class AutocratError(Exception):
    """
    Base exception for all Autocrat client errors

    Attributes:
        message: Human-readable error message
        code: Error code for programmatic handling
        recoverable: Whether the error might succeed on retry
        original_error: The underlying exception if any
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode,
        recoverable: bool = False,
        original_error: Optional[Exception] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.recoverable = recoverable
        self.original_error = original_error
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, message={self.message!r})"

    @property
    def should_retry(self) -> bool:
        """Indicate if the operation should be retried"""
        return self.recoverable


class RpcError(AutocratError):
    """
    RPC-related errors - typically recoverable

    Raised when:
    - Connection to RPC endpoint fails
    - Request times out
    - Rate limit is hit
    - The node answers with a JSON-RPC error
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.RPC_CONNECTION_FAILED,
        original_error: Optional[Exception] = None,
        endpoint: Optional[str] = None,
    ):
        super().__init__(
            message,
            code,
            recoverable=True,
            original_error=original_error,
            details={"endpoint": endpoint} if endpoint else None,
        )
        self.endpoint = endpoint

    @classmethod
    def connection_failed(cls, endpoint: str, error: Exception = None) -> "RpcError":
        return cls(
            f"Failed to connect to RPC endpoint: {endpoint}",
            ErrorCode.RPC_CONNECTION_FAILED,
            original_error=error,
            endpoint=endpoint,
        )

    @classmethod
    def timeout(cls, endpoint: str, timeout_seconds: float) -> "RpcError":
        return cls(
            f"RPC request timed out after {timeout_seconds}s",
            ErrorCode.RPC_TIMEOUT,
            endpoint=endpoint,
        )

    @classmethod
    def rate_limited(cls, endpoint: str) -> "RpcError":
        return cls(
            "RPC rate limit exceeded",
            ErrorCode.RPC_RATE_LIMITED,
            endpoint=endpoint,
        )


class TransactionError(AutocratError):
    """
    Transaction execution errors

    Raised when:
    - Transaction simulation fails
    - Transaction send fails
    - Confirmation fails
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.TX_SEND_FAILED,
        signature: Optional[str] = None,
        logs: Optional[list] = None,
        recoverable: bool = False,
    ):
        super().__init__(
            message,
            code,
            recoverable=recoverable,
            details={"signature": signature, "logs": logs},
        )
        self.signature = signature
        self.logs = logs or []

    @classmethod
    def simulation_failed(cls, error: str, logs: list = None, err: Any = None) -> "TransactionError":
        instance = cls(
            f"Transaction simulation failed: {error}",
            ErrorCode.TX_SIMULATION_FAILED,
            logs=logs,
            recoverable=False,
        )
        # Raw RPC error value, e.g. {"InstructionError": [0, {"Custom": 6000}]}
        instance.details["err"] = err
        return instance

    @classmethod
    def send_failed(cls, error: str) -> "TransactionError":
        recoverable = "timeout" in error.lower() or "connection" in error.lower()
        return cls(
            f"Failed to send transaction: {error}",
            ErrorCode.TX_SEND_FAILED,
            recoverable=recoverable,
        )

    @classmethod
    def confirmation_failed(cls, signature: str, error: str) -> "TransactionError":
        return cls(
            f"Transaction confirmation failed: {error}",
            ErrorCode.TX_CONFIRMATION_FAILED,
            signature=signature,
            recoverable=True,
        )


class AccountNotFound(AutocratError):
    """
    On-chain account missing or unreadable - not recoverable

    Raised when:
    - An address lookup table does not exist
    - A program account (DAO, proposal, AMM) does not exist
    - Account data does not match the expected layout
    """

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        code: ErrorCode = ErrorCode.ACCOUNT_NOT_FOUND,
    ):
        super().__init__(
            message,
            code,
            recoverable=False,
            details={"address": address},
        )
        self.address = address

    @classmethod
    def account(cls, address: str, account_type: str = "Account") -> "AccountNotFound":
        return cls(f"{account_type} not found: {address}", address=address)

    @classmethod
    def lookup_table(cls, address: str) -> "AccountNotFound":
        return cls(
            f"Address lookup table not found: {address}",
            address=address,
            code=ErrorCode.LOOKUP_TABLE_NOT_FOUND,
        )

    @classmethod
    def no_proposal(cls, dao: str) -> "AccountNotFound":
        return cls(
            f"DAO {dao} has no proposals; create_proposal_part_one must run first",
            address=dao,
        )

    @classmethod
    def invalid_data(cls, address: str, reason: str) -> "AccountNotFound":
        return cls(
            f"Account {address} has invalid data: {reason}",
            address=address,
            code=ErrorCode.ACCOUNT_INVALID_DATA,
        )


class IdlError(AutocratError):
    """
    Errors raised while encoding or decoding through the program IDL

    Raised when:
    - An instruction, account or type is not declared in the IDL
    - A required instruction account was not supplied
    - A value does not fit its IDL type
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.IDL_INVALID_VALUE,
        name: Optional[str] = None,
    ):
        super().__init__(message, code, recoverable=False, details={"name": name})
        self.name = name

    @classmethod
    def unknown_instruction(cls, name: str) -> "IdlError":
        return cls(f"Instruction not in IDL: {name}", ErrorCode.IDL_UNKNOWN_INSTRUCTION, name)

    @classmethod
    def unknown_account(cls, name: str) -> "IdlError":
        return cls(f"Account type not in IDL: {name}", ErrorCode.IDL_UNKNOWN_ACCOUNT, name)

    @classmethod
    def unknown_type(cls, name: str) -> "IdlError":
        return cls(f"Type not in IDL: {name}", ErrorCode.IDL_UNKNOWN_TYPE, name)

    @classmethod
    def missing_account(cls, instruction: str, account: str) -> "IdlError":
        return cls(
            f"Missing account '{account}' for instruction '{instruction}'",
            ErrorCode.IDL_MISSING_ACCOUNT,
            account,
        )

    @classmethod
    def invalid_value(cls, type_name: str, reason: str) -> "IdlError":
        return cls(f"Invalid value for {type_name}: {reason}", ErrorCode.IDL_INVALID_VALUE, type_name)


class SignerError(AutocratError):
    """
    Signing-related errors

    Raised when:
    - No signer configured
    - Signing operation fails
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.SIGNER_FAILED,
        recoverable: bool = False,
    ):
        super().__init__(message, code, recoverable=recoverable)

    @classmethod
    def not_configured(cls) -> "SignerError":
        return cls(
            "No signer configured. Provide a keypair or SOLANA_KEYPAIR_PATH.",
            ErrorCode.SIGNER_NOT_CONFIGURED,
        )

    @classmethod
    def failed(cls, reason: str) -> "SignerError":
        return cls(f"Signing failed: {reason}", ErrorCode.SIGNER_FAILED)


class ConfigurationError(AutocratError):
    """
    Configuration-related errors

    Raised when:
    - Required configuration is missing
    - Configuration values are invalid
    """

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.CONFIG_INVALID,
    ):
        super().__init__(message, code, recoverable=False)

    @classmethod
    def missing(cls, param: str) -> "ConfigurationError":
        return cls(f"Missing required configuration: {param}", ErrorCode.CONFIG_MISSING)

    @classmethod
    def invalid(cls, param: str, reason: str) -> "ConfigurationError":
        return cls(f"Invalid configuration '{param}': {reason}", ErrorCode.CONFIG_INVALID)
