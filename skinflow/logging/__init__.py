"""Structured logging for the skin diagnosis flow.

Usage:
    import logging

    from skinflow.logging import setup_logging

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Uploading captures", extra={"asset_count": 3})
"""

from skinflow.logging.config import LoggingConfig
from skinflow.logging.context import (
    clear_context,
    correlation_id,
    get_correlation_id,
    get_extra_context,
    invocation_scope,
    set_correlation_id,
    set_extra_context,
    set_flow_stage,
)
from skinflow.logging.formatters import HumanFormatter, JSONFormatter
from skinflow.logging.logger import setup_logging

__all__ = [
    "HumanFormatter",
    "JSONFormatter",
    "LoggingConfig",
    "clear_context",
    "correlation_id",
    "get_correlation_id",
    "get_extra_context",
    "invocation_scope",
    "set_correlation_id",
    "set_extra_context",
    "set_flow_stage",
    "setup_logging",
]
