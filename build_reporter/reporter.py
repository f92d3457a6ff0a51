"""Build reporter: turns a completed build into a metric, an event and a service check."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .build.metadata import BuildHandle, BuildMetadata, Environment, extract
from .build.tags import build_tags
from .config.models import ReporterConfig
from .credentials import CredentialStore, StaticCredentialStore
from .payloads import (
    Payload,
    PayloadKind,
    build_event,
    build_metric,
    build_service_check,
)
from .transport.client import DatadogClient, SendResult
from .transport.connection import ConnectionProvider
from .transport.errors import ReporterError
from .utils.logger import setup_logger


@dataclass
class ReportSummary:
    """Outcome of reporting one build."""

    metadata: BuildMetadata
    tags: List[str]
    results: List[SendResult] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return bool(self.results) and all(r.success for r in self.results)

    @property
    def failures(self) -> List[SendResult]:
        return [r for r in self.results if not r.success]


class BuildReporter:
    """
    Report build completion to the monitoring API.

    Each completed build produces three independent API calls (metric, event,
    service check). A failure in one never prevents the others, and no
    failure is ever raised to the caller of ``on_completed``.
    """

    def __init__(
        self,
        config: ReporterConfig,
        credentials: CredentialStore = None,
        client: DatadogClient = None,
        logger: logging.Logger = None
    ):
        """
        Initialize build reporter.

        Args:
            config: Reporter configuration
            credentials: API key source (defaults to the configured key)
            client: Optional API client (built from config if omitted)
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or setup_logger("build_reporter", config.logging.level)
        self.credentials = credentials or StaticCredentialStore(config.datadog)
        self.client = client or DatadogClient(
            config.datadog,
            ConnectionProvider(config.datadog, self.logger),
            self.logger
        )

    def on_started(self, build: BuildHandle) -> None:
        self.logger.info(
            f"Started build {build.job_display_name} #{build.number}"
        )

    async def on_completed(
        self,
        build: BuildHandle,
        environment: Optional[Environment]
    ) -> Optional[ReportSummary]:
        """
        Report a completed build, logging instead of raising on failure.

        Args:
            build: Completed build
            environment: Build environment variables

        Returns:
            Optional[ReportSummary]: Summary, or None if the report was aborted
        """
        self.logger.info(f"Completed build {build.job_display_name} #{build.number}")
        try:
            return await self.report(build, environment)
        except ReporterError as e:
            self.logger.error(
                f"Build report aborted: {e}",
                extra={"job_name": build.job_display_name, "build_number": build.number}
            )
            return None

    async def report(
        self,
        build: BuildHandle,
        environment: Optional[Environment]
    ) -> ReportSummary:
        """
        Extract build metadata and send all three payloads.

        Args:
            build: Completed build
            environment: Build environment variables

        Returns:
            ReportSummary: Metadata, tags and one SendResult per payload kind

        Raises:
            EnvironmentUnavailable: If the build environment cannot be read
            InvalidBuildRecord: If the build facts cannot form a build record
        """
        metadata = extract(build, environment)
        tags = build_tags(metadata)
        summary = ReportSummary(metadata=metadata, tags=tags)

        self.logger.debug("Build summary", extra={"build": metadata.summary()})

        sends = [
            (PayloadKind.METRIC, lambda: build_metric(
                self.config.reporting.duration_metric, "duration", metadata, tags
            )),
            (PayloadKind.EVENT, lambda: build_event(metadata, tags)),
            (PayloadKind.SERVICE_CHECK, lambda: build_service_check(
                self.config.reporting.status_check, metadata, tags
            )),
        ]

        if self.config.reporting.concurrent:
            results = await asyncio.gather(
                *[self._send(kind, factory) for kind, factory in sends],
                return_exceptions=True
            )
        else:
            results = []
            for kind, factory in sends:
                try:
                    results.append(await self._send(kind, factory))
                except Exception as e:
                    results.append(e)

        for (kind, _), result in zip(sends, results):
            if isinstance(result, Exception):
                self.logger.error(
                    f"API call of type '{kind.value}' failed unexpectedly: {result}",
                    exc_info=result
                )
                result = SendResult(
                    kind=kind, endpoint=kind.endpoint, success=False, error=result
                )
            summary.results.append(result)

        sent = sum(1 for r in summary.results if r.success)
        self.logger.info(
            f"Reported build {metadata.job_name} #{metadata.build_number}: "
            f"{sent}/{len(summary.results)} call(s) succeeded"
        )
        return summary

    async def _send(
        self,
        kind: PayloadKind,
        factory: Callable[[], Payload]
    ) -> SendResult:
        """
        Build one payload and post it.

        A payload that cannot be built fails only its own call.
        """
        try:
            payload = factory()
        except (KeyError, ValueError) as e:
            self.logger.error(f"Could not build {kind.value} payload: {e}")
            return SendResult(kind=kind, endpoint=kind.endpoint, success=False, error=e)

        self.logger.info(f"Sending {kind.value} payload")
        return await self.client.post(payload, self.credentials.get_api_key())
