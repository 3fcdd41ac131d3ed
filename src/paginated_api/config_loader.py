"""
ConfigLoader module for resolving client configuration from TOML files,
environment variables and explicit overrides
"""

import os
import tomllib
from pathlib import Path
from dataclasses import dataclass, fields, replace
from typing import Dict, Any, List, Optional


class ConfigurationError(Exception):
    """Raised when configuration is invalid or incomplete"""
    pass


DEFAULT_API_KEY_ENV = 'PAGINATED_API_KEY'

# Environment variables and the config fields they populate
ENVIRONMENT_VARIABLES = {
    'PAGINATED_API_BASE_URL': 'base_url',
    'PAGINATED_API_TIMEOUT_MS': 'timeout_ms',
    'PAGINATED_API_MAX_RETRIES': 'max_retries',
}


@dataclass(frozen=True)
class ClientConfig:
    """Resolved configuration for the API client"""
    base_url: Optional[str] = None
    api_key: Optional[str] = None
    timeout_ms: int = 60000
    connect_timeout_ms: int = 10000
    max_retries: int = 2
    base_delay_ms: int = 1000
    page_limit: int = 100
    log_level: str = 'INFO'
    log_file: Optional[str] = None


class ConfigLoader:
    """Loads client configuration with overrides > TOML > environment > defaults"""

    # TOML (section, key) pairs and the config fields they populate
    TOML_KEYS = {
        ('api', 'base_url'): 'base_url',
        ('timeouts', 'request_timeout_ms'): 'timeout_ms',
        ('timeouts', 'connect_timeout_ms'): 'connect_timeout_ms',
        ('retries', 'max_retries'): 'max_retries',
        ('retries', 'base_delay_ms'): 'base_delay_ms',
        ('pagination', 'limit'): 'page_limit',
        ('logging', 'level'): 'log_level',
        ('logging', 'log_file_name'): 'log_file',
    }

    INTEGER_FIELDS = ('timeout_ms', 'connect_timeout_ms', 'max_retries',
                      'base_delay_ms', 'page_limit')

    @staticmethod
    def load_toml_config(config_path: Path) -> Dict[str, Any]:
        """
        Load configuration values from a TOML file

        Args:
            config_path: Path to the TOML configuration file

        Returns:
            Dictionary of ClientConfig field names to values found in the file

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If TOML syntax is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'rb') as f:
                config_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {config_path}: {e}")

        values: Dict[str, Any] = {}
        for (section, key), field_name in ConfigLoader.TOML_KEYS.items():
            section_data = config_data.get(section, {})
            if key in section_data:
                values[field_name] = section_data[key]

        # Secrets stay in the environment; the file only names the variable
        api_key_env = config_data.get('api', {}).get('api_key_env')
        if api_key_env:
            api_key = os.getenv(api_key_env)
            if api_key:
                values['api_key'] = api_key

        return values

    @staticmethod
    def load_environment() -> Dict[str, Any]:
        """
        Read configuration values from environment variables

        Returns:
            Dictionary of ClientConfig field names to values that are set
        """
        values: Dict[str, Any] = {}

        api_key = os.getenv(DEFAULT_API_KEY_ENV)
        if api_key:
            values['api_key'] = api_key

        for env_var_name, field_name in ENVIRONMENT_VARIABLES.items():
            value = os.getenv(env_var_name)
            if value:
                values[field_name] = value

        return values

    @classmethod
    def resolve(cls, config_path: Optional[Path] = None, **overrides: Any) -> ClientConfig:
        """
        Resolve the effective configuration from every source

        Args:
            config_path: Optional TOML configuration file
            **overrides: Explicit values taking precedence over all other sources

        Returns:
            Validated ClientConfig

        Raises:
            ConfigurationError: If required values are missing or invalid
        """
        known_fields = {f.name for f in fields(ClientConfig)}
        unknown = sorted(set(overrides) - known_fields)
        if unknown:
            raise ConfigurationError(f"Unknown configuration options: {', '.join(unknown)}")

        values = cls.load_environment()
        if config_path is not None:
            values.update(cls.load_toml_config(Path(config_path)))
        values.update({key: value for key, value in overrides.items() if value is not None})

        config = replace(ClientConfig(), **cls._coerce_integers(values))
        cls.validate(config)
        return config

    @classmethod
    def _coerce_integers(cls, values: Dict[str, Any]) -> Dict[str, Any]:
        coerced = dict(values)
        invalid = []
        for field_name in cls.INTEGER_FIELDS:
            if field_name not in coerced:
                continue
            try:
                coerced[field_name] = int(coerced[field_name])
            except (TypeError, ValueError):
                invalid.append(f"'{field_name}' must be an integer, got {coerced[field_name]!r}")
        if invalid:
            raise ConfigurationError(f"Invalid configuration values: {'; '.join(invalid)}")
        return coerced

    @staticmethod
    def validate(config: ClientConfig) -> None:
        """
        Validate that required values are present and numeric limits are sane

        Args:
            config: ClientConfig to validate

        Raises:
            ConfigurationError: Listing every missing or invalid item
        """
        problems: List[str] = []

        if not config.api_key:
            problems.append(
                f"API key (set {DEFAULT_API_KEY_ENV}, name a variable with "
                f"api_key_env in [api], or pass api_key)"
            )
        if not config.base_url:
            problems.append("base_url (set PAGINATED_API_BASE_URL, [api] base_url, or pass base_url)")
        if config.timeout_ms <= 0:
            problems.append("timeout_ms must be positive")
        if config.connect_timeout_ms <= 0:
            problems.append("connect_timeout_ms must be positive")
        if config.max_retries < 0:
            problems.append("max_retries must not be negative")
        if config.base_delay_ms < 0:
            problems.append("base_delay_ms must not be negative")
        if config.page_limit <= 0:
            problems.append("page_limit must be positive")

        if problems:
            raise ConfigurationError(
                f"Invalid or missing configuration items: {', '.join(problems)}"
            )
