"""Report build results to the Datadog API as a metric, an event and a service check."""

__version__ = "0.1.0"
