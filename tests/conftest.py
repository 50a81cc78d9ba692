"""Shared test fixtures."""

import pytest

from skinflow.config import get_settings
from skinflow.logging.config import get_logging_config
from skinflow.logging.context import clear_context


@pytest.fixture(autouse=True)
def _clear_environment(monkeypatch):
    """Clear environment variables that affect settings."""
    env_vars_to_clear = [
        "SERVICE_NAME",
        "ENVIRONMENT",
        "AWS_REGION",
        "ASSET_BUCKET_NAME",
        "ASSET_PUBLIC_BASE_URL",
        "DIAGNOSIS_SERVICE_URL",
        "ANALYZE_FUNCTION_NAME",
        "SAVE_FUNCTION_NAME",
        "HTTP_TIMEOUT_SECONDS",
        "DIAGNOSIS_MAX_ATTEMPTS",
        "DIAGNOSIS_INITIAL_DELAY_MS",
        "UPLOAD_MAX_WORKERS",
        "RESIZE_MAX_WIDTH",
        "RESIZE_QUALITY",
        "STAGE_PACING_SECONDS",
        "LOG_LEVEL",
        "LOG_FORMAT",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    get_logging_config.cache_clear()
    clear_context()
    yield
    get_settings.cache_clear()
    get_logging_config.cache_clear()
    clear_context()
