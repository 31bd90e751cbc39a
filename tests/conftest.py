"""Shared fixtures for the diagnostics tests."""

import pytest

from editor_diagnostics import CheckOptions, DiagnosticsEngine


@pytest.fixture
def engine() -> DiagnosticsEngine:
    return DiagnosticsEngine()


@pytest.fixture
def partial() -> CheckOptions:
    """Options for fragments: no whole-document structure warnings."""
    return CheckOptions(allow_partial=True)
