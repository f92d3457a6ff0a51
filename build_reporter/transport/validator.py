"""API key validation for the configuration surface."""

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import httpx

from ..config.models import DatadogConfig
from .connection import ConnectionProvider
from .client import HTTP_FORBIDDEN


VALIDATE_ENDPOINT = "v1/validate"


class ValidationState(Enum):
    """Outcome of an API key validation."""

    VALID = "valid"
    INVALID = "invalid"
    CLIENT_ERROR = "client_error"


@dataclass
class ValidationResult:
    """Result of validating a candidate API key."""

    state: ValidationState
    reason: Optional[str] = None

    @property
    def valid(self) -> bool:
        return self.state is ValidationState.VALID

    @property
    def message(self) -> str:
        """Human readable outcome for the configuration screen."""
        if self.state is ValidationState.VALID:
            return "Great! Your API key is valid."
        if self.state is ValidationState.INVALID:
            return "Hmmm, your API key seems to be invalid."
        return f"Client error: {self.reason}"


class CredentialValidator:
    """
    Check a candidate API key against the validate endpoint.

    Shares only the connection provider with the reporting path.
    """

    def __init__(
        self,
        config: DatadogConfig,
        connections: ConnectionProvider = None,
        logger: logging.Logger = None
    ):
        self.config = config
        self.logger = (logger or logging.getLogger(__name__)).getChild(
            self.__class__.__name__
        )
        self.connections = connections or ConnectionProvider(config, logger)

    async def validate(self, candidate_key: str) -> ValidationResult:
        """
        Validate a candidate API key.

        Args:
            candidate_key: Key submitted by the user

        Returns:
            ValidationResult: valid, invalid, or client error with a reason
        """
        url = self.config.base_url + VALIDATE_ENDPOINT

        try:
            async with self.connections.open(url) as client:
                response = await client.get(url, params={"api_key": candidate_key})
                content = response.content
        except (httpx.HTTPError, OSError) as e:
            self.logger.error(f"API key validation request failed: {e}")
            return ValidationResult(ValidationState.CLIENT_ERROR, reason=str(e))

        if response.status_code == HTTP_FORBIDDEN:
            self.logger.warning("API key validation received a 403 error")
            return ValidationResult(
                ValidationState.CLIENT_ERROR,
                reason="Hmmm, your API key may be invalid. We received a 403 error."
            )
        if response.status_code >= 400:
            self.logger.warning(
                f"API key validation received HTTP {response.status_code}"
            )
            return ValidationResult(
                ValidationState.CLIENT_ERROR, reason=f"HTTP {response.status_code}"
            )

        try:
            body = json.loads(content.decode("utf-8"))
            valid = body["valid"]
        except (UnicodeDecodeError, json.JSONDecodeError, KeyError, TypeError) as e:
            self.logger.error(f"Unexpected validation response: {e}")
            return ValidationResult(
                ValidationState.CLIENT_ERROR, reason=f"Unexpected response: {e}"
            )

        if valid is True:
            self.logger.info("API key is valid")
            return ValidationResult(ValidationState.VALID)

        self.logger.info("API key is invalid")
        return ValidationResult(ValidationState.INVALID)
