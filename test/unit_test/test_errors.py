"""
Test Errors Module

Tests for autocrat_client.errors package.
"""

import sys
from pathlib import Path

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))


def test_error_code():
    """Test ErrorCode enum"""
    from autocrat_client.errors import ErrorCode

    print("Testing ErrorCode...")

    assert ErrorCode.RPC_CONNECTION_FAILED.value == "1001"
    assert ErrorCode.ACCOUNT_NOT_FOUND.value == "4001"
    assert ErrorCode.LOOKUP_TABLE_NOT_FOUND.value == "4002"
    assert ErrorCode.IDL_UNKNOWN_INSTRUCTION.value == "5001"

    print("  ErrorCode: PASSED")


def test_autocrat_error():
    """Test AutocratError base class"""
    from autocrat_client.errors import AutocratError, ErrorCode

    print("Testing AutocratError...")

    error = AutocratError(
        message="Test error",
        code=ErrorCode.RPC_CONNECTION_FAILED,
        recoverable=True,
    )

    # __str__ returns "[code] message" format
    assert "[1001] Test error" == str(error)
    assert error.code == ErrorCode.RPC_CONNECTION_FAILED
    assert error.recoverable is True
    assert error.should_retry is True
    assert error.details == {}

    print("  AutocratError: PASSED")


def test_rpc_error():
    """Test RpcError constructors"""
    from autocrat_client.errors import RpcError, ErrorCode

    print("Testing RpcError...")

    error1 = RpcError.connection_failed("https://rpc.example.com")
    assert error1.code == ErrorCode.RPC_CONNECTION_FAILED
    assert error1.recoverable is True
    assert error1.endpoint == "https://rpc.example.com"

    error2 = RpcError.timeout("https://rpc.example.com", 30.0)
    assert error2.code == ErrorCode.RPC_TIMEOUT

    error3 = RpcError.rate_limited("https://rpc.example.com")
    assert error3.code == ErrorCode.RPC_RATE_LIMITED

    print("  RpcError: PASSED")


def test_account_not_found():
    """Test AccountNotFound constructors"""
    from autocrat_client.errors import AccountNotFound, AutocratError, ErrorCode

    print("Testing AccountNotFound...")

    error = AccountNotFound.lookup_table("LutAddress111")
    assert isinstance(error, AutocratError)
    assert error.code == ErrorCode.LOOKUP_TABLE_NOT_FOUND
    assert error.address == "LutAddress111"
    assert error.recoverable is False
    assert "LutAddress111" in str(error)

    error2 = AccountNotFound.account("DaoAddress111", "Dao")
    assert error2.code == ErrorCode.ACCOUNT_NOT_FOUND
    assert str(error2) == "[4001] Dao not found: DaoAddress111"

    error3 = AccountNotFound.invalid_data("Addr", "bad discriminator")
    assert error3.code == ErrorCode.ACCOUNT_INVALID_DATA

    print("  AccountNotFound: PASSED")


def test_idl_error():
    """Test IdlError constructors"""
    from autocrat_client.errors import IdlError, ErrorCode

    print("Testing IdlError...")

    error = IdlError.missing_account("swap", "amm")
    assert error.code == ErrorCode.IDL_MISSING_ACCOUNT
    assert error.name == "amm"
    assert "swap" in str(error)

    assert IdlError.unknown_instruction("foo").code == ErrorCode.IDL_UNKNOWN_INSTRUCTION
    assert IdlError.unknown_type("Foo").code == ErrorCode.IDL_UNKNOWN_TYPE

    print("  IdlError: PASSED")


def test_transaction_error():
    """Test TransactionError constructors"""
    from autocrat_client.errors import TransactionError, ErrorCode

    print("Testing TransactionError...")

    error = TransactionError.simulation_failed("custom program error: 0x1770", ["log1"])
    assert error.code == ErrorCode.TX_SIMULATION_FAILED
    assert error.logs == ["log1"]
    assert error.recoverable is False

    assert TransactionError.send_failed("connection reset").recoverable is True
    assert TransactionError.send_failed("invalid signature").recoverable is False

    print("  TransactionError: PASSED")


def test_signer_and_config_errors():
    """Test SignerError and ConfigurationError"""
    from autocrat_client.errors import SignerError, ConfigurationError, ErrorCode

    print("Testing SignerError/ConfigurationError...")

    assert SignerError.not_configured().code == ErrorCode.SIGNER_NOT_CONFIGURED
    assert ConfigurationError.missing("SOLANA_RPC_URL").code == ErrorCode.CONFIG_MISSING
    assert "keypair" in str(ConfigurationError.invalid("keypair", "bad"))

    print("  SignerError/ConfigurationError: PASSED")


if __name__ == "__main__":
    test_error_code()
    test_autocrat_error()
    test_rpc_error()
    test_account_not_found()
    test_idl_error()
    test_transaction_error()
    test_signer_and_config_errors()
