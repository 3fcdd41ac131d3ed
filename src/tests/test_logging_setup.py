"""
Test suite for logging setup
Following TDD approach with AAA pattern and descriptive naming
"""

import logging
import tempfile
import pytest
from pathlib import Path
from paginated_api.config_loader import ClientConfig
from paginated_api.logging_setup import configure_logging, configure_logging_from_config


class TestLoggingSetup:
    """Test suite for logging configuration"""

    def teardown_method(self):
        """Remove handlers installed by each test"""
        root_logger = logging.getLogger()
        for handler in list(root_logger.handlers):
            if type(handler) in (logging.StreamHandler, logging.FileHandler):
                root_logger.removeHandler(handler)
                handler.close()

    def test_configure_logging_with_level_sets_package_logger_level(self):
        """
        Test that the requested level applies to the package logger
        """
        # Act
        package_logger = configure_logging('DEBUG')

        # Assert
        assert package_logger.name == 'paginated_api'
        assert package_logger.level == logging.DEBUG
        assert any(isinstance(handler, logging.StreamHandler)
                   for handler in logging.getLogger().handlers)

    def test_configure_logging_with_log_file_writes_records_to_file(self):
        """
        Test that records from library modules reach the configured log file
        """
        # Arrange
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "logs" / "client.log"

            # Act
            configure_logging('INFO', str(log_file))
            logging.getLogger('paginated_api.http_client').warning("Retrying GET /v1/project")
            for handler in logging.getLogger().handlers:
                handler.flush()

            # Assert
            assert log_file.exists()
            contents = log_file.read_text()
            assert "paginated_api.http_client - WARNING - Retrying GET /v1/project" in contents

            self.teardown_method()

    def test_configure_logging_with_unknown_level_raises_value_error(self):
        """
        Test that a misspelled level name is rejected
        """
        # Act & Assert
        with pytest.raises(ValueError) as exc_info:
            configure_logging('CHATTY')

        assert "Unknown logging level" in str(exc_info.value)

    def test_configure_logging_from_config_uses_config_level(self):
        """
        Test that ClientConfig logging settings are applied
        """
        # Arrange
        config = ClientConfig(log_level='warning')

        # Act
        package_logger = configure_logging_from_config(config)

        # Assert
        assert package_logger.level == logging.WARNING
