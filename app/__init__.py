"""HTTP service for the diagnostics engine."""
