"""Client for posting telemetry payloads to the monitoring API."""

import json
import logging
import time
from dataclasses import dataclass
from functools import wraps
from typing import Optional

import httpx
from pydantic import SecretStr

from ..config.models import DatadogConfig
from ..payloads import Payload, PayloadKind, serialize
from .connection import ConnectionProvider
from .errors import (
    ApiRejection,
    AuthenticationError,
    MalformedResponse,
    TransportError,
    TransportFailure,
)


HTTP_FORBIDDEN = 403


@dataclass
class SendResult:
    """Outcome of one API call."""

    kind: PayloadKind
    endpoint: str
    success: bool
    error: Optional[Exception] = None
    status_code: Optional[int] = None
    timestamp: Optional[float] = None

    def __post_init__(self):
        """Set timestamp if not provided."""
        if self.timestamp is None:
            self.timestamp = time.time()

    @property
    def failure_kind(self) -> Optional[str]:
        if self.error is None:
            return None
        return getattr(self.error, "kind", type(self.error).__name__)


def safe_send(func):
    """
    Decorator turning send failures into a failed SendResult.

    Every failure is logged with the payload kind and failure kind so that
    one failed call never prevents the sibling calls from being attempted.
    """
    @wraps(func)
    async def wrapper(self, payload, *args, **kwargs):
        kind = payload.kind
        try:
            status_code = await func(self, payload, *args, **kwargs)
        except TransportFailure as e:
            if isinstance(e, AuthenticationError):
                self.logger.error(
                    f"API call of type '{kind.value}' failed: your API key may be invalid ({e})"
                )
            else:
                self.logger.error(f"API call of type '{kind.value}' failed with {e.kind}: {e}")
            return SendResult(
                kind=kind,
                endpoint=kind.endpoint,
                success=False,
                error=e,
                status_code=e.status_code
            )

        self.logger.info(f"API call of type '{kind.value}' was sent successfully")
        return SendResult(
            kind=kind,
            endpoint=kind.endpoint,
            success=True,
            status_code=status_code
        )
    return wrapper


class DatadogClient:
    """
    Posts one payload per call to the monitoring API.

    The API key travels as the ``api_key`` query parameter. A call is
    successful only when the response body is a JSON object whose
    ``status`` field is "ok". No call is ever retried.
    """

    def __init__(
        self,
        config: DatadogConfig,
        connections: ConnectionProvider = None,
        logger: logging.Logger = None
    ):
        """
        Initialize API client.

        Args:
            config: API connection configuration
            connections: Optional connection provider (built from config if omitted)
            logger: Optional logger instance
        """
        self.config = config
        self.logger = (logger or logging.getLogger(__name__)).getChild(
            self.__class__.__name__
        )
        self.connections = connections or ConnectionProvider(config, logger)

    def url_for(self, endpoint: str) -> str:
        return self.config.base_url + endpoint

    @safe_send
    async def post(self, payload: Payload, api_key: SecretStr) -> int:
        """
        Post a payload to its endpoint.

        Args:
            payload: Metric, event or service check payload
            api_key: API key, read from the credential store at call time

        Returns:
            int: HTTP status code of the accepted call; safe_send wraps it,
            or the classified failure, into the SendResult seen by callers
        """
        key = api_key.get_secret_value() if api_key is not None else ""
        if not key:
            raise AuthenticationError("API key is not configured")

        url = self.url_for(payload.kind.endpoint)
        body = serialize(payload)
        self.logger.debug(
            f"Posting {payload.kind.value} payload to {payload.kind.endpoint}: "
            f"{body.decode('utf-8')}"
        )

        try:
            async with self.connections.open(url) as client:
                response = await client.post(
                    url,
                    params={"api_key": key},
                    content=body,
                    headers={
                        "Content-Type": "application/json",
                        "Cache-Control": "no-cache",
                    }
                )
                content = response.content
        except httpx.HTTPError as e:
            raise TransportError(f"Client error: {type(e).__name__}: {e}") from e
        except OSError as e:
            raise TransportError(f"Client error: {e}") from e

        check_status(response.status_code)
        parse_envelope(content, response.status_code)
        return response.status_code


def check_status(status_code: int) -> None:
    """
    Classify the HTTP status code of a response.

    Raises:
        AuthenticationError: On HTTP 403, whatever the body says
        TransportError: On any other HTTP error status
    """
    if status_code == HTTP_FORBIDDEN:
        raise AuthenticationError("Received a 403 error", status_code=status_code)
    if status_code >= 400:
        raise TransportError(f"HTTP {status_code}", status_code=status_code)


def parse_envelope(content: bytes, status_code: Optional[int] = None) -> dict:
    """
    Parse a POST response envelope and require status "ok".

    Args:
        content: Raw response body
        status_code: HTTP status code, attached to raised errors

    Returns:
        dict: Parsed envelope

    Raises:
        MalformedResponse: Body is not a JSON object or has no status field
        ApiRejection: Status field is present but not "ok"
    """
    try:
        envelope = json.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedResponse(
            f"Response is not valid JSON: {e}", status_code=status_code
        ) from e

    if not isinstance(envelope, dict) or "status" not in envelope:
        raise MalformedResponse(
            "Response has no status field", status_code=status_code
        )

    if envelope["status"] != "ok":
        raise ApiRejection(
            f"API returned status {envelope['status']!r}", status_code=status_code
        )

    return envelope
