"""Tests for configuration management."""

import pytest
from pydantic import ValidationError

from s3docs.core.config import Settings

SETTINGS_ENV = [
    "S3_ENDPOINT_URL",
    "S3_REGION",
    "S3_ACCESS_KEY",
    "S3_SECRET_KEY",
    "S3_SESSION_TOKEN",
    "S3_SIGNATURE_VERSION",
    "S3_ADDRESSING_STYLE",
    "PRESIGN_EXPIRES_IN",
    "MAX_CONCURRENT_DELETES",
    "DEV",
    "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and any .env file."""
    for key in SETTINGS_ENV:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


def test_settings_defaults():
    """Test that every field has a usable default."""
    settings = Settings()

    assert settings.s3_endpoint_url is None
    assert settings.s3_region is None
    assert settings.s3_access_key is None
    assert settings.s3_secret_key is None
    assert settings.s3_signature_version == "s3v4"
    assert settings.s3_addressing_style == "auto"
    assert settings.presign_expires_in == 60
    assert settings.max_concurrent_deletes == 10
    assert settings.dev is False
    assert settings.log_level == "INFO"


def test_settings_loads_from_environment(monkeypatch):
    """Test that Settings loads environment variables."""
    env_vars = {
        "S3_ENDPOINT_URL": "http://localhost:9000",
        "S3_REGION": "eu-north-1",
        "S3_ACCESS_KEY": "minioadmin",
        "S3_SECRET_KEY": "minioadmin123",
        "S3_ADDRESSING_STYLE": "path",
        "PRESIGN_EXPIRES_IN": "300",
        "MAX_CONCURRENT_DELETES": "25",
        "DEV": "true",
        "LOG_LEVEL": "debug",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)

    settings = Settings()

    assert settings.s3_endpoint_url == "http://localhost:9000"
    assert settings.s3_region == "eu-north-1"
    assert settings.s3_access_key == "minioadmin"
    assert settings.s3_secret_key == "minioadmin123"
    assert settings.s3_addressing_style == "path"
    assert settings.presign_expires_in == 300
    assert settings.max_concurrent_deletes == 25
    assert settings.dev is True
    assert settings.log_level == "DEBUG"


def test_settings_loads_from_env_file(tmp_path):
    """Test that Settings reads a .env file in the working directory."""
    (tmp_path / ".env").write_text("S3_REGION=eu-west-1\nPRESIGN_EXPIRES_IN=120\n")

    settings = Settings()

    assert settings.s3_region == "eu-west-1"
    assert settings.presign_expires_in == 120


def test_settings_case_insensitive(monkeypatch):
    """Test that environment variable names are case-insensitive."""
    monkeypatch.setenv("s3_region", "us-east-2")

    settings = Settings()

    assert settings.s3_region == "us-east-2"


@pytest.mark.parametrize("value", ["0", "604801"])
def test_presign_expiry_out_of_range(monkeypatch, value):
    """Test that the URL lifetime must be within the SigV4 limits."""
    monkeypatch.setenv("PRESIGN_EXPIRES_IN", value)

    with pytest.raises(ValidationError) as exc_info:
        Settings()

    assert "presign_expires_in" in str(exc_info.value)


def test_max_concurrent_deletes_must_be_positive(monkeypatch):
    """Test that max_concurrent_deletes must be greater than 0."""
    monkeypatch.setenv("MAX_CONCURRENT_DELETES", "0")

    with pytest.raises(ValidationError) as exc_info:
        Settings()

    assert "max_concurrent_deletes" in str(exc_info.value)


def test_invalid_addressing_style(monkeypatch):
    """Test that only auto, virtual and path addressing are accepted."""
    monkeypatch.setenv("S3_ADDRESSING_STYLE", "sideways")

    with pytest.raises(ValidationError) as exc_info:
        Settings()

    assert "s3_addressing_style" in str(exc_info.value)


def test_invalid_log_level(monkeypatch):
    """Test that log_level must name a logging level."""
    monkeypatch.setenv("LOG_LEVEL", "LOUD")

    with pytest.raises(ValidationError) as exc_info:
        Settings()

    assert "Unknown log level" in str(exc_info.value)


def test_client_config_minimal():
    """Test that unset connection fields are left to boto3 defaults."""
    kwargs = Settings().client_config()

    assert set(kwargs) == {"config"}
    assert kwargs["config"].signature_version == "s3v4"
    assert kwargs["config"].s3 == {"addressing_style": "auto"}


def test_client_config_full():
    """Test that connection fields map onto boto3 client arguments."""
    settings = Settings(
        s3_endpoint_url="http://localhost:9000",
        s3_region="eu-north-1",
        s3_access_key="minioadmin",
        s3_secret_key="minioadmin123",
        s3_session_token="token",
        s3_addressing_style="path",
    )

    kwargs = settings.client_config()

    assert kwargs["endpoint_url"] == "http://localhost:9000"
    assert kwargs["region_name"] == "eu-north-1"
    assert kwargs["aws_access_key_id"] == "minioadmin"
    assert kwargs["aws_secret_access_key"] == "minioadmin123"
    assert kwargs["aws_session_token"] == "token"
    assert kwargs["config"].s3 == {"addressing_style": "path"}


def test_client_config_ignores_half_credentials():
    """Test that an access key without a secret falls back to the credential chain."""
    kwargs = Settings(s3_access_key="minioadmin").client_config()

    assert "aws_access_key_id" not in kwargs
    assert "aws_secret_access_key" not in kwargs
