"""Wire payloads for the series, events and check_run endpoints."""

import time
from enum import Enum
from typing import ClassVar, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from .build.metadata import BuildMetadata
from .utils.status import ServiceCheckStatus


class PayloadKind(str, Enum):
    """Telemetry kinds and the API path each one is posted to."""

    METRIC = "metric"
    EVENT = "event"
    SERVICE_CHECK = "service_check"

    @property
    def endpoint(self) -> str:
        return {
            PayloadKind.METRIC: "v1/series",
            PayloadKind.EVENT: "v1/events",
            PayloadKind.SERVICE_CHECK: "v1/check_run",
        }[self]


# Numeric BuildMetadata fields a metric may report
METRIC_FIELDS = {
    "duration": "duration_seconds",
    "starttime": "start_time_seconds",
    "endtime": "end_time_seconds",
    "number": "build_number",
}


class MetricSeries(BaseModel):
    """One gauge series with a single data point."""
    metric: str
    points: List[Tuple[int, float]]
    type: str = "gauge"
    host: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


class MetricPayload(BaseModel):
    kind: ClassVar[PayloadKind] = PayloadKind.METRIC

    series: List[MetricSeries]


class EventPayload(BaseModel):
    kind: ClassVar[PayloadKind] = PayloadKind.EVENT

    title: str
    text: str = ""
    priority: str = "normal"
    tags: List[str] = Field(default_factory=list)
    alert_type: str = "info"


class ServiceCheckPayload(BaseModel):
    kind: ClassVar[PayloadKind] = PayloadKind.SERVICE_CHECK

    check: str
    host_name: Optional[str] = None
    timestamp: int
    status: ServiceCheckStatus
    tags: List[str] = Field(default_factory=list)


Payload = Union[MetricPayload, EventPayload, ServiceCheckPayload]


def serialize(payload: Payload) -> bytes:
    """Serialize a payload to its UTF-8 JSON request body."""
    return payload.model_dump_json().encode("utf-8")


def build_gauge(
    name: str,
    value: float,
    host: Optional[str],
    tags: Optional[List[str]] = None
) -> MetricPayload:
    """
    Create a single-point gauge payload timestamped with the current time.

    Args:
        name: Metric name (e.g., "jenkins.job.duration")
        value: Gauge value
        host: Reporting host name
        tags: Optional tag list

    Returns:
        MetricPayload: Payload holding one series with one point
    """
    return MetricPayload(series=[
        MetricSeries(
            metric=name,
            points=[(int(time.time()), value)],
            host=host,
            tags=list(tags or []),
        )
    ])


def build_metric(
    name: str,
    key: str,
    metadata: BuildMetadata,
    tags: List[str]
) -> MetricPayload:
    """
    Create a gauge payload for a numeric build field.

    The data point carries the send time, not the build end time.

    Args:
        name: Metric name
        key: Build field to report ("duration", "starttime", "endtime", "number")
        metadata: Build metadata
        tags: Tag set for the build

    Returns:
        MetricPayload: Gauge payload

    Raises:
        KeyError: If key does not name a numeric build field
    """
    if key not in METRIC_FIELDS:
        raise KeyError(f"Unknown metric field: {key}")
    value = getattr(metadata, METRIC_FIELDS[key])
    return build_gauge(name, value, metadata.hostname, tags)


def build_event(metadata: BuildMetadata, tags: List[str]) -> EventPayload:
    """
    Create the build result event.

    Raises:
        ValueError: If the build metadata has no hostname
    """
    if metadata.hostname is None:
        raise ValueError("Cannot build event: hostname is not available")

    verb = "succeeded" if metadata.succeeded else "failed"
    return EventPayload(
        title=f"{metadata.job_name} {verb} on {metadata.hostname}",
        tags=list(tags),
    )


def build_service_check(
    check_name: str,
    metadata: BuildMetadata,
    tags: List[str],
    status: Optional[ServiceCheckStatus] = None
) -> ServiceCheckPayload:
    """
    Create a service check payload timestamped with the current time.

    When no status is given it is derived from the build result:
    OK for "SUCCESS", CRITICAL otherwise.
    """
    if status is None:
        status = ServiceCheckStatus.from_result(metadata.result)
    return ServiceCheckPayload(
        check=check_name,
        host_name=metadata.hostname,
        timestamp=int(time.time()),
        status=status,
        tags=list(tags),
    )
