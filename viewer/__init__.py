"""Telemetry viewer client services."""
