"""
Test suite for ConfigLoader component
Following TDD approach with AAA pattern and descriptive naming
"""

import pytest
import tempfile
import os
from pathlib import Path
from unittest.mock import patch
from paginated_api.config_loader import ConfigLoader, ClientConfig, ConfigurationError


VALID_TOML = """
[api]
base_url = "https://api.example.com"
api_key_env = "EXAMPLE_API_KEY"

[timeouts]
request_timeout_ms = 30000
connect_timeout_ms = 5000

[retries]
max_retries = 3
base_delay_ms = 500

[pagination]
limit = 50

[logging]
level = "DEBUG"
log_file_name = "logs/client.log"
"""


def write_toml(content):
    with tempfile.NamedTemporaryFile(mode='w', suffix='.toml', delete=False) as f:
        f.write(content)
        return Path(f.name)


class TestConfigLoader:
    """Test suite for ConfigLoader configuration resolution functionality"""

    def test_load_toml_config_with_valid_file_returns_field_values(self):
        """
        Test that a valid TOML file is mapped onto config fields
        """
        # Arrange
        config_path = write_toml(VALID_TOML)

        try:
            # Act
            with patch.dict(os.environ, {'EXAMPLE_API_KEY': 'sk-from-file-env'}, clear=True):
                values = ConfigLoader.load_toml_config(config_path)

            # Assert
            assert values == {
                'base_url': 'https://api.example.com',
                'timeout_ms': 30000,
                'connect_timeout_ms': 5000,
                'max_retries': 3,
                'base_delay_ms': 500,
                'page_limit': 50,
                'log_level': 'DEBUG',
                'log_file': 'logs/client.log',
                'api_key': 'sk-from-file-env'
            }
        finally:
            config_path.unlink()

    def test_load_toml_config_with_missing_file_raises_file_not_found(self):
        """
        Test that a missing configuration file is reported
        """
        # Act & Assert
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load_toml_config(Path("/nonexistent/client.toml"))

    def test_load_toml_config_with_invalid_syntax_raises_configuration_error(self):
        """
        Test that malformed TOML raises ConfigurationError
        """
        # Arrange
        config_path = write_toml("[api\nbase_url = ")

        try:
            # Act & Assert
            with pytest.raises(ConfigurationError) as exc_info:
                ConfigLoader.load_toml_config(config_path)

            assert "Invalid TOML syntax" in str(exc_info.value)
        finally:
            config_path.unlink()

    def test_resolve_with_environment_only_uses_environment_and_defaults(self):
        """
        Test that environment variables fill in values and defaults apply otherwise
        """
        # Arrange
        environment = {
            'PAGINATED_API_KEY': 'sk-env',
            'PAGINATED_API_BASE_URL': 'https://env.example.com',
            'PAGINATED_API_MAX_RETRIES': '4'
        }

        # Act
        with patch.dict(os.environ, environment, clear=True):
            config = ConfigLoader.resolve()

        # Assert
        assert config == ClientConfig(
            base_url='https://env.example.com',
            api_key='sk-env',
            max_retries=4
        )
        assert config.timeout_ms == 60000
        assert config.page_limit == 100

    def test_resolve_with_file_overrides_environment(self):
        """
        Test that TOML values take precedence over environment values
        """
        # Arrange
        config_path = write_toml(VALID_TOML)
        environment = {
            'PAGINATED_API_KEY': 'sk-env',
            'PAGINATED_API_BASE_URL': 'https://env.example.com',
            'PAGINATED_API_TIMEOUT_MS': '1000'
        }

        try:
            # Act
            with patch.dict(os.environ, environment, clear=True):
                config = ConfigLoader.resolve(config_path)

            # Assert
            assert config.base_url == 'https://api.example.com'
            assert config.timeout_ms == 30000
            # EXAMPLE_API_KEY is unset so the default variable still supplies the key
            assert config.api_key == 'sk-env'
        finally:
            config_path.unlink()

    def test_resolve_with_explicit_overrides_wins_over_all_sources(self):
        """
        Test that explicit keyword values take precedence over file and environment
        """
        # Arrange
        config_path = write_toml(VALID_TOML)

        try:
            # Act
            with patch.dict(os.environ, {'EXAMPLE_API_KEY': 'sk-file'}, clear=True):
                config = ConfigLoader.resolve(config_path, api_key='sk-explicit', max_retries=0)

            # Assert
            assert config.api_key == 'sk-explicit'
            assert config.max_retries == 0
            assert config.base_delay_ms == 500
        finally:
            config_path.unlink()

    def test_resolve_without_api_key_raises_configuration_error(self):
        """
        Test that a missing API key is reported with guidance
        """
        # Act & Assert
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                ConfigLoader.resolve(base_url='https://api.example.com')

        assert "API key" in str(exc_info.value)
        assert "PAGINATED_API_KEY" in str(exc_info.value)

    def test_resolve_with_multiple_problems_lists_all_of_them(self):
        """
        Test that validation collects every problem before raising
        """
        # Act & Assert
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                ConfigLoader.resolve(page_limit=0)

        message = str(exc_info.value)
        assert "API key" in message
        assert "base_url" in message
        assert "page_limit must be positive" in message

    def test_resolve_with_non_integer_environment_value_raises_configuration_error(self):
        """
        Test that numeric settings must parse as integers
        """
        # Arrange
        environment = {
            'PAGINATED_API_KEY': 'sk-env',
            'PAGINATED_API_BASE_URL': 'https://env.example.com',
            'PAGINATED_API_TIMEOUT_MS': 'soon'
        }

        # Act & Assert
        with patch.dict(os.environ, environment, clear=True):
            with pytest.raises(ConfigurationError) as exc_info:
                ConfigLoader.resolve()

        assert "timeout_ms" in str(exc_info.value)

    def test_resolve_with_unknown_override_raises_configuration_error(self):
        """
        Test that misspelled options are rejected
        """
        # Act & Assert
        with pytest.raises(ConfigurationError) as exc_info:
            ConfigLoader.resolve(api_keey='sk-typo')

        assert "api_keey" in str(exc_info.value)
