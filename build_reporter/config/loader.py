"""Configuration loader with YAML parsing and environment variable substitution."""

import yaml
import os
import re
from pathlib import Path
from typing import Any
from .models import ReporterConfig
from .settings import Settings


class ConfigLoader:
    """Load and validate build reporter configuration."""

    @staticmethod
    def load_from_file(config_path: str) -> ReporterConfig:
        """
        Load configuration from YAML file with environment variable substitution.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            ReporterConfig: Validated configuration object

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            pydantic.ValidationError: If configuration validation fails
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_file, 'r') as f:
            raw_config = yaml.safe_load(f) or {}

        # Substitute environment variables
        raw_config = ConfigLoader._substitute_env_vars(raw_config)

        # Validate with Pydantic
        return ReporterConfig(**raw_config)

    @staticmethod
    def load_from_env() -> ReporterConfig:
        """
        Build configuration from environment variables only.

        Returns:
            ReporterConfig: Validated configuration object

        Raises:
            ValueError: If DATADOG_API_KEY is not set
            pydantic.ValidationError: If a value fails validation
        """
        Settings.validate_required()
        settings = Settings()
        return ReporterConfig(
            datadog={
                "api_key": settings.DATADOG_API_KEY,
                "base_url": settings.DATADOG_BASE_URL,
                "timeout_s": settings.DATADOG_TIMEOUT_S,
            },
            logging={"level": settings.LOG_LEVEL},
        )

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """
        Recursively substitute ${ENV_VAR} placeholders with environment values.

        Args:
            obj: Object to process (str, dict, list, or primitive)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, str):
            # Replace ${VAR_NAME} with os.getenv('VAR_NAME')
            pattern = r'\$\{(\w+)\}'
            return re.sub(pattern, lambda m: os.getenv(m.group(1), ''), obj)

        elif isinstance(obj, dict):
            return {k: ConfigLoader._substitute_env_vars(v) for k, v in obj.items()}

        elif isinstance(obj, list):
            return [ConfigLoader._substitute_env_vars(item) for item in obj]

        return obj
