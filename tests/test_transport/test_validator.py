"""Tests for CredentialValidator."""

import pytest
from unittest.mock import AsyncMock, patch

import httpx

from build_reporter.transport.validator import (
    CredentialValidator,
    ValidationResult,
    ValidationState,
)


@pytest.fixture
def validator(datadog_config, logger):
    return CredentialValidator(datadog_config, logger=logger)


@pytest.fixture
def mock_http():
    with patch('build_reporter.transport.connection.httpx.AsyncClient') as mock_client_class:
        mock_client = AsyncMock()
        mock_client_class.return_value.__aenter__.return_value = mock_client
        yield mock_client_class, mock_client


@pytest.mark.asyncio
async def test_valid_key(validator, mock_http):
    """Test {"valid": true} is a valid key."""
    _, mock_client = mock_http
    mock_client.get.return_value = httpx.Response(200, json={"valid": True})

    result = await validator.validate("candidate")

    assert result.state is ValidationState.VALID
    assert result.valid
    assert result.message == "Great! Your API key is valid."
    args, kwargs = mock_client.get.call_args
    assert args[0] == "https://api.example.test/api/v1/validate"
    assert kwargs["params"] == {"api_key": "candidate"}


@pytest.mark.asyncio
async def test_invalid_key(validator, mock_http):
    """Test {"valid": false} is an invalid key."""
    _, mock_client = mock_http
    mock_client.get.return_value = httpx.Response(200, json={"valid": False})

    result = await validator.validate("candidate")

    assert result.state is ValidationState.INVALID
    assert not result.valid
    assert "invalid" in result.message


@pytest.mark.asyncio
async def test_forbidden_is_client_error(validator, mock_http):
    """Test HTTP 403 yields a client error."""
    mock_client_class, mock_client = mock_http
    mock_client.get.return_value = httpx.Response(403, json={"errors": ["Forbidden"]})

    result = await validator.validate("candidate")

    assert result.state is ValidationState.CLIENT_ERROR
    assert "403" in result.reason
    mock_client_class.return_value.__aexit__.assert_awaited_once()


@pytest.mark.asyncio
async def test_server_error_is_logged_client_error(validator, mock_http):
    """Test a non-403 HTTP error yields a client error and a warning."""
    _, mock_client = mock_http
    mock_client.get.return_value = httpx.Response(500, text="Internal Server Error")

    with patch.object(validator.logger, "warning") as mock_warning:
        result = await validator.validate("candidate")

    assert result.state is ValidationState.CLIENT_ERROR
    assert result.reason == "HTTP 500"
    mock_warning.assert_called_once_with("API key validation received HTTP 500")


@pytest.mark.asyncio
async def test_network_failure_is_client_error(validator, mock_http):
    """Test transport exceptions yield a client error."""
    _, mock_client = mock_http
    mock_client.get.side_effect = httpx.ConnectError("Connection refused")

    result = await validator.validate("candidate")

    assert result.state is ValidationState.CLIENT_ERROR
    assert result.message.startswith("Client error:")


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(200, content=b"not json"),
    httpx.Response(200, json={"status": "ok"}),
    httpx.Response(200, json=["valid"]),
])
async def test_unexpected_response_is_client_error(validator, mock_http, response):
    """Test unparseable or incomplete responses yield a client error."""
    _, mock_client = mock_http
    mock_client.get.return_value = response

    result = await validator.validate("candidate")

    assert result.state is ValidationState.CLIENT_ERROR


def test_client_error_message():
    """Test client error message carries the reason."""
    result = ValidationResult(ValidationState.CLIENT_ERROR, reason="timed out")

    assert result.message == "Client error: timed out"
