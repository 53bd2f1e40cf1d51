"""Telemetry module for OpenTelemetry instrumentation."""
from taskapp.telemetry.instrumentation import TelemetryManager

__all__ = ["TelemetryManager"]
