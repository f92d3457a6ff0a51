"""HTTP connection provider with proxy support."""

import logging
from typing import Optional

import httpx

from ..config.models import DatadogConfig, Proxy
from ..utils.logger import redact_httpx_logs


class ConnectionProvider:
    """
    Resolve an HTTP client for a target URL.

    Tries the configured proxy first and falls back to a direct connection
    whenever the proxy is absent, bypassed for the host, not an HTTP proxy,
    or fails to resolve. The returned client is not yet opened; callers own
    it and must close it (``async with``).
    """

    def __init__(self, config: DatadogConfig, logger: logging.Logger = None):
        """
        Initialize connection provider.

        Args:
            config: API connection configuration (proxy and timeout)
            logger: Optional logger instance
        """
        self.config = config
        self.logger = (logger or logging.getLogger(__name__)).getChild(
            self.__class__.__name__
        )
        redact_httpx_logs()

    def open(self, url: str) -> httpx.AsyncClient:
        """
        Create a client for the given URL.

        Args:
            url: Target URL (used to resolve the proxy for its host)

        Returns:
            httpx.AsyncClient: Unopened client, proxied or direct
        """
        proxy = self._resolve_proxy(url)

        if proxy is not None:
            self.logger.debug("Attempting to use the proxy configuration")
            try:
                return httpx.AsyncClient(
                    proxy=self._to_httpx_proxy(proxy),
                    timeout=self.config.timeout_s
                )
            except (ValueError, httpx.HTTPError) as e:
                self.logger.warning(f"Failed to use the proxy configuration: {e}")

        self.logger.debug("Using direct connection, without proxy")
        return httpx.AsyncClient(timeout=self.config.timeout_s)

    def _resolve_proxy(self, url: str) -> Optional[Proxy]:
        """
        Resolve the HTTP proxy for the URL's host.

        Args:
            url: Target URL

        Returns:
            Optional[Proxy]: HTTP proxy to use, None for a direct connection
        """
        proxy_config = self.config.proxy
        if proxy_config is None:
            self.logger.debug("Proxy configuration not found")
            return None

        try:
            host = httpx.URL(url).host
            proxy = proxy_config.resolve(host)
        except Exception as e:
            self.logger.warning(
                f"Proxy resolution failed, falling back to direct connection: {e}"
            )
            return None

        if proxy is None:
            self.logger.debug(f"Host {host} bypasses the proxy")
            return None

        if not proxy.is_http:
            self.logger.warning(
                f"Ignoring non-HTTP proxy of type '{proxy.type}', using direct connection"
            )
            return None

        return proxy

    @staticmethod
    def _to_httpx_proxy(proxy: Proxy) -> httpx.Proxy:
        """Convert a resolved proxy into an httpx proxy definition."""
        if proxy.username:
            return httpx.Proxy(proxy.url, auth=(proxy.username, proxy.password or ""))
        return httpx.Proxy(proxy.url)
