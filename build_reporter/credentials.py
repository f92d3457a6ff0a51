"""API key sources, read at call time."""

from typing import Protocol

from pydantic import SecretStr

from .config.models import DatadogConfig
from .config.settings import Settings


class CredentialStore(Protocol):
    def get_api_key(self) -> SecretStr:
        ...


class StaticCredentialStore:
    """API key taken from the loaded configuration."""

    def __init__(self, config: DatadogConfig):
        self.config = config

    def get_api_key(self) -> SecretStr:
        return self.config.api_key


class EnvCredentialStore:
    """API key re-read from the environment on every call."""

    def __init__(self, variable: str = "DATADOG_API_KEY"):
        self.variable = variable

    def get_api_key(self) -> SecretStr:
        return SecretStr(Settings.get(self.variable))
