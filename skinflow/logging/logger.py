"""Root logger setup for Lambda invocations and local runs."""

import logging
import sys
from typing import TextIO

from skinflow.logging.config import LogFormat, LoggingConfig, get_logging_config
from skinflow.logging.formatters import HumanFormatter, JSONFormatter

HANDLER_NAME = "skinflow"


def _build_formatter(config: LoggingConfig, *, interactive: bool) -> logging.Formatter:
    if config.log_format == LogFormat.JSON:
        return JSONFormatter(
            service_name=config.service_name,
            include_timestamp=config.include_timestamp,
            include_location=config.include_location,
        )
    return HumanFormatter(use_colors=interactive)


def setup_logging(
    config: LoggingConfig | None = None,
    stream: TextIO | None = None,
    *,
    force: bool = False,
) -> None:
    """Install the skinflow stream handler on the root logger.

    A warm Lambda container calls this on every invocation. Once the handler
    is installed, later calls return without touching it unless `force` is set.

    Args:
        config: Logging configuration. Loaded from environment if not provided.
        stream: Output stream. Defaults to sys.stdout with colored human output.
        force: Replace an already installed handler.
    """
    root_logger = logging.getLogger()
    if not force and any(handler.get_name() == HANDLER_NAME for handler in root_logger.handlers):
        return

    config = config or get_logging_config()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.set_name(HANDLER_NAME)
    handler.setFormatter(_build_formatter(config, interactive=stream is None))
    root_logger.addHandler(handler)
    root_logger.setLevel(config.log_level.value)

    for noisy_logger in config.quiet_loggers:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)
