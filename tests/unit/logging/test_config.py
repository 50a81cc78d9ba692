"""Tests for logging configuration."""

from skinflow.logging.config import LogFormat, LoggingConfig, LogLevel, get_logging_config


class TestLoggingConfig:
    def test_defaults(self):
        config = LoggingConfig()
        assert config.log_level == LogLevel.INFO
        assert config.log_format == LogFormat.JSON
        assert config.service_name == "skinflow"

    def test_quiet_loggers_include_image_and_aws_libraries(self):
        config = LoggingConfig()
        assert {"boto3", "botocore", "urllib3", "PIL"} <= set(config.quiet_loggers)

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FORMAT", "human")
        config = LoggingConfig()
        assert config.log_level == LogLevel.DEBUG
        assert config.log_format == LogFormat.HUMAN


class TestGetLoggingConfig:
    def test_cached(self):
        assert get_logging_config() is get_logging_config()
