"""Services for the diagnostics engine."""

from .checker import DiagnosticsService, to_response

__all__ = ["DiagnosticsService", "to_response"]
