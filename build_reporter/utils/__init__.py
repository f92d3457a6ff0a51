"""Logging and status helpers."""
