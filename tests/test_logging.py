"""Tests for logging setup."""

import io
import logging

from simplerest import ClientConfig
from simplerest.logging_config import setup_logging


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_configures_package_logger(self):
        """Test level, handler and propagation come from the config."""
        logger = setup_logging(ClientConfig(log_level="DEBUG"))
        assert logger.name == "simplerest"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_default_level_is_warning(self):
        """Test the default config logs warnings and above."""
        assert setup_logging(ClientConfig()).level == logging.WARNING

    def test_repeated_setup_replaces_handlers(self):
        """Test a second call does not stack handlers."""
        setup_logging(ClientConfig(log_level="INFO"))
        logger = setup_logging(ClientConfig(log_level="ERROR"))
        assert len(logger.handlers) == 1
        assert logger.level == logging.ERROR

    def test_console_stream(self):
        """Test records from submodules reach the given stream."""
        stream = io.StringIO()
        setup_logging(ClientConfig(log_level="INFO"), stream=stream)
        logging.getLogger("simplerest.core.client").info("hello")
        assert "INFO" in stream.getvalue()
        assert "simplerest.core.client: hello" in stream.getvalue()

    def test_file_handler(self, tmp_path):
        """Test logging to a file in a directory that does not exist yet."""
        log_file = tmp_path / "logs" / "simplerest.log"
        logger = setup_logging(ClientConfig(log_level="INFO", log_file=log_file), stream=io.StringIO())
        logging.getLogger("simplerest.core").info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert len(logger.handlers) == 2
        assert "hello" in log_file.read_text(encoding="utf-8")
