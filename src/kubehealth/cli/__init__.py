# src/kubehealth/cli/__init__.py
"""
KubeHealth CLI Package

This package exposes the top-level Typer `app` so tests and the console
entrypoint can import `kubehealth.cli.app`.
"""

import logging

from ..core.engine import HealthAggregationEngine

# Re-export commonly patched symbols for tests
from ..reporters.console_reporter import ConsoleReporter
from .main import app

logger = logging.getLogger(__name__)

__all__ = ["app", "ConsoleReporter", "HealthAggregationEngine"]
