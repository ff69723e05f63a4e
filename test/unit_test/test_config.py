"""
Test Configuration Module

Tests for environment-driven configuration and logging setup.
"""

import logging
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from autocrat_client.config import (
    AutocratConfig,
    LoggingConfig,
    RpcConfig,
    TxConfig,
    reload_config,
    setup_logging,
)
from autocrat_client.constants import AUTOCRAT_PROGRAM_ID
from autocrat_client.infra import RpcClientConfig, TxBuilderConfig


class TestAutocratConfig(unittest.TestCase):
    """Program id and lookup table settings"""

    def test_program_id_default(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("AUTOCRAT_PROGRAM_ID", None)
            self.assertEqual(AutocratConfig().program_id, AUTOCRAT_PROGRAM_ID)

    def test_program_id_from_env(self):
        with patch.dict(os.environ, {"AUTOCRAT_PROGRAM_ID": "11111111111111111111111111111111"}):
            self.assertEqual(AutocratConfig().program_id, "11111111111111111111111111111111")

    def test_luts_from_env_are_split_and_ordered(self):
        with patch.dict(os.environ, {"AUTOCRAT_LUTS": " LutA , LutB,,LutC "}):
            self.assertEqual(AutocratConfig().lut_addresses, ("LutA", "LutB", "LutC"))

    def test_luts_default_is_tuple(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("AUTOCRAT_LUTS", None)
            self.assertIsInstance(AutocratConfig().lut_addresses, tuple)


class TestEnvParsing(unittest.TestCase):
    """Typed env parsing falls back on bad values"""

    def test_invalid_int_uses_default(self):
        with patch.dict(os.environ, {"TX_COMPUTE_UNITS": "lots"}):
            self.assertEqual(TxConfig().compute_units, 200_000)

    def test_float_and_bool(self):
        with patch.dict(os.environ, {"RPC_TIMEOUT_SECONDS": "12.5", "TX_SKIP_PREFLIGHT": "yes"}):
            self.assertEqual(RpcConfig().timeout_seconds, 12.5)
            self.assertTrue(TxConfig().skip_preflight)


class TestRuntimeConfig(unittest.TestCase):
    """Runtime configs fall back to global config for unset fields"""

    def test_rpc_client_config_defaults(self):
        config = RpcClientConfig()
        self.assertGreater(config.timeout_seconds, 0)
        self.assertGreater(config.max_retries, 0)
        self.assertIn(config.commitment, ("processed", "confirmed", "finalized"))

    def test_rpc_client_config_override(self):
        config = RpcClientConfig(timeout_seconds=60.0, max_retries=5, commitment="finalized")
        self.assertEqual(config.timeout_seconds, 60.0)
        self.assertEqual(config.max_retries, 5)
        self.assertEqual(config.commitment, "finalized")

    def test_tx_builder_config_override(self):
        config = TxBuilderConfig(compute_units=400_000, skip_preflight=True)
        self.assertEqual(config.compute_units, 400_000)
        self.assertTrue(config.skip_preflight)
        self.assertIsNotNone(config.confirmation_timeout)

    def test_reload_reaches_runtime_configs(self):
        self.addCleanup(reload_config)
        with patch.dict(os.environ, {"RPC_MAX_RETRIES": "9", "TX_COMPUTE_UNITS": "123456"}):
            reload_config()
            self.assertEqual(RpcClientConfig().max_retries, 9)
            self.assertEqual(TxBuilderConfig().compute_units, 123456)


class TestSetupLogging(unittest.TestCase):
    """Logging setup with rotation"""

    def test_file_and_console_handlers(self):
        import tempfile
        from logging.handlers import RotatingFileHandler

        with tempfile.TemporaryDirectory() as tmp:
            log_file = os.path.join(tmp, "logs", "autocrat.log")
            log_config = LoggingConfig(
                log_file=log_file,
                log_level="DEBUG",
                console_output=True,
            )
            logger = setup_logging(log_config, logger_name="autocrat_client_test")
            try:
                self.assertEqual(logger.level, logging.DEBUG)
                kinds = {type(h) for h in logger.handlers}
                self.assertIn(RotatingFileHandler, kinds)
                self.assertIn(logging.StreamHandler, kinds)
                self.assertTrue(Path(log_file).exists())
            finally:
                for handler in logger.handlers[:]:
                    handler.close()
                    logger.removeHandler(handler)

    def test_console_only(self):
        log_config = LoggingConfig(log_file="", log_level="WARNING", console_output=True)
        logger = setup_logging(log_config, logger_name="autocrat_client_console_test")
        try:
            self.assertEqual(len(logger.handlers), 1)
            self.assertEqual(logger.level, logging.WARNING)
        finally:
            for handler in logger.handlers[:]:
                handler.close()
                logger.removeHandler(handler)


if __name__ == "__main__":
    unittest.main()
