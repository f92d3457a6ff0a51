"""Pydantic configuration models for the build reporter."""

from dataclasses import dataclass
from fnmatch import fnmatch
from typing import List, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator


DEFAULT_BASE_URL = "https://app.datadoghq.com/api/"


@dataclass(frozen=True)
class Proxy:
    """A proxy resolved for one target host."""
    type: str
    url: str
    username: Optional[str] = None
    password: Optional[str] = None

    @property
    def is_http(self) -> bool:
        return self.type == "http"


class ProxyConfig(BaseModel):
    """Outbound proxy configuration."""
    host: str
    port: int = Field(default=8080, ge=1, le=65535)
    type: str = "http"  # "http" or "socks"
    username: Optional[str] = None
    password: Optional[SecretStr] = None
    no_proxy_hosts: List[str] = Field(default_factory=list)  # Glob patterns

    @field_validator('type')
    @classmethod
    def validate_type(cls, v: str) -> str:
        """Validate proxy type."""
        v = v.lower()
        if v not in ("http", "socks"):
            raise ValueError('Proxy type must be "http" or "socks"')
        return v

    def resolve(self, host: str) -> Optional[Proxy]:
        """
        Resolve the proxy to use for a target host.

        Args:
            host: Target host name

        Returns:
            Optional[Proxy]: Proxy for the host, None if the host bypasses the proxy
        """
        if any(fnmatch(host.lower(), pattern.lower()) for pattern in self.no_proxy_hosts):
            return None

        scheme = "http" if self.type == "http" else "socks5"
        return Proxy(
            type=self.type,
            url=f"{scheme}://{self.host}:{self.port}",
            username=self.username,
            password=self.password.get_secret_value() if self.password else None,
        )


class DatadogConfig(BaseModel):
    """Monitoring API connection configuration."""
    api_key: SecretStr
    base_url: str = DEFAULT_BASE_URL
    timeout_s: float = Field(default=10.0, gt=0)
    proxy: Optional[ProxyConfig] = None

    @field_validator('base_url')
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate URL format and normalise the trailing slash."""
        if not v.startswith(('http://', 'https://')):
            raise ValueError('URL must start with http:// or https://')
        return v if v.endswith('/') else v + '/'


class ReportingConfig(BaseModel):
    """Names used for the telemetry sent per build."""
    duration_metric: str = "jenkins.job.duration"
    status_check: str = "jenkins.job.status"
    concurrent: bool = True


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"

    @field_validator('level')
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level name."""
        v = v.upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f'Unknown log level: {v}')
        return v


class ReporterConfig(BaseModel):
    """Root configuration model for the build reporter."""
    datadog: DatadogConfig
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
