"""HTTP transport to the monitoring API."""
