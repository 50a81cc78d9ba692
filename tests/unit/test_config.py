"""Tests for application configuration."""

import pytest

from skinflow.config import Environment, Settings, get_settings, validate_startup_config
from skinflow.exceptions import ConfigurationError


class TestEnvironmentEnum:
    def test_development_value(self):
        assert Environment.DEVELOPMENT.value == "development"

    def test_production_value(self):
        assert Environment.PRODUCTION.value == "production"


class TestSettingsDefaults:
    def test_default_service_name(self):
        settings = Settings()
        assert settings.service_name == "skinflow"

    def test_default_environment(self):
        settings = Settings()
        assert settings.environment == Environment.DEVELOPMENT

    def test_default_bucket(self):
        settings = Settings()
        assert settings.asset_bucket_name == "skin-images-development"

    def test_default_function_names(self):
        settings = Settings()
        assert settings.analyze_function_name == "analyze"
        assert settings.save_function_name == "analyze-save"

    def test_default_retry_policy(self):
        settings = Settings()
        assert settings.diagnosis_max_attempts == 3
        assert settings.diagnosis_initial_delay_ms == 1000

    def test_default_resize_options(self):
        settings = Settings()
        assert settings.resize_max_width == 1024
        assert settings.resize_quality == pytest.approx(0.85)

    def test_quality_threshold_is_per_call(self, monkeypatch):
        monkeypatch.setenv("MIN_ACCEPTABLE_QUALITY_SCORE", "90")
        assert "min_acceptable_quality_score" not in Settings().model_dump()

    def test_default_pacing_is_off(self):
        settings = Settings()
        assert settings.stage_pacing_seconds == 0.0

    def test_default_log_level(self):
        settings = Settings()
        assert settings.log_level == "INFO"


class TestSettingsFromEnvironment:
    def test_custom_bucket(self, monkeypatch):
        monkeypatch.setenv("ASSET_BUCKET_NAME", "skin-images-production")
        settings = Settings()
        assert settings.asset_bucket_name == "skin-images-production"

    def test_custom_environment(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        settings = Settings()
        assert settings.environment == Environment.PRODUCTION

    def test_custom_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        settings = Settings()
        assert settings.log_level == "DEBUG"

    def test_custom_max_attempts(self, monkeypatch):
        monkeypatch.setenv("DIAGNOSIS_MAX_ATTEMPTS", "5")
        settings = Settings()
        assert settings.diagnosis_max_attempts == 5


class TestSettingsValidation:
    def test_invalid_log_level_raises(self):
        with pytest.raises(ValueError, match="log_level must be one of"):
            Settings(log_level="INVALID")

    def test_log_level_case_insensitive(self):
        settings = Settings(log_level="warning")
        assert settings.log_level == "WARNING"

    def test_max_attempts_minimum(self):
        with pytest.raises(ValueError):
            Settings(diagnosis_max_attempts=0)

    def test_resize_quality_must_be_positive(self):
        with pytest.raises(ValueError):
            Settings(resize_quality=0)

    def test_service_url_trailing_slash_stripped(self):
        settings = Settings(diagnosis_service_url="https://edge.example.com/")
        assert settings.diagnosis_service_url == "https://edge.example.com"


class TestSettingsProperties:
    def test_public_base_url_derived_from_bucket(self):
        settings = Settings(asset_bucket_name="skins", aws_region="eu-west-1")
        assert settings.public_base_url == "https://skins.s3.eu-west-1.amazonaws.com"

    def test_public_base_url_override(self):
        settings = Settings(asset_public_base_url="https://cdn.example.com/")
        assert settings.public_base_url == "https://cdn.example.com"

    def test_is_production_true(self):
        settings = Settings(environment=Environment.PRODUCTION)
        assert settings.is_production is True

    def test_is_development_true(self):
        settings = Settings()
        assert settings.is_development is True

    def test_is_development_false(self):
        settings = Settings(environment=Environment.PRODUCTION)
        assert settings.is_development is False


class TestGetSettings:
    def test_cached_returns_same_instance(self):
        first = get_settings()
        second = get_settings()
        assert first is second


class TestValidateStartupConfig:
    def test_returns_settings(self):
        settings = validate_startup_config()
        assert isinstance(settings, Settings)

    def test_local_service_rejected_in_production(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        with pytest.raises(ConfigurationError, match="must not be local"):
            validate_startup_config()

    def test_remote_service_accepted_in_production(self, monkeypatch):
        monkeypatch.setenv("ENVIRONMENT", "production")
        monkeypatch.setenv("DIAGNOSIS_SERVICE_URL", "https://edge.example.com")
        settings = validate_startup_config()
        assert settings.is_production is True
