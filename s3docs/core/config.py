"""Configuration management for s3docs.

Settings are loaded from environment variables or a .env file using
pydantic-settings. Every field is optional: credentials left unset fall
back to the boto3 credential chain (environment, shared config, instance
profile).
"""

import logging
from typing import Any, Dict, Optional

from botocore.config import Config
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# SigV4 pre-signed URLs cannot outlive seven days
MAX_PRESIGN_EXPIRES_IN = 604800


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        # S3 Connection (7 fields)
        s3_endpoint_url: Custom endpoint URL (MinIO, R2, ...)
        s3_region: Region name passed to boto3
        s3_access_key: Access key ID
        s3_secret_key: Secret access key
        s3_session_token: Session token for temporary credentials
        s3_signature_version: Signature version used for requests and URLs
        s3_addressing_style: Bucket addressing style (auto, virtual, path)

        # Facade Behaviour (3 fields)
        presign_expires_in: Default pre-signed URL lifetime in seconds
        max_concurrent_deletes: Max in-flight deletes during folder deletion
        dev: Log backend error detail for diagnostics

        # Application (1 field)
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # S3 Connection (7 fields)
    s3_endpoint_url: Optional[str] = Field(
        default=None,
        description="Custom endpoint URL (e.g. http://localhost:9000 for MinIO)",
    )
    s3_region: Optional[str] = Field(
        default=None,
        description="Region name passed to boto3",
    )
    s3_access_key: Optional[str] = Field(
        default=None,
        description="Access key ID",
    )
    s3_secret_key: Optional[str] = Field(
        default=None,
        description="Secret access key",
    )
    s3_session_token: Optional[str] = Field(
        default=None,
        description="Session token for temporary credentials",
    )
    s3_signature_version: str = Field(
        default="s3v4",
        description="Signature version used for requests and pre-signed URLs",
    )
    s3_addressing_style: str = Field(
        default="auto",
        description="Bucket addressing style (auto, virtual, path)",
    )

    # Facade Behaviour (3 fields)
    presign_expires_in: int = Field(
        default=60,
        description="Default pre-signed URL lifetime in seconds",
        ge=1,
        le=MAX_PRESIGN_EXPIRES_IN,
    )
    max_concurrent_deletes: int = Field(
        default=10,
        description="Max in-flight deletes during folder deletion",
        gt=0,
    )
    dev: bool = Field(
        default=False,
        description="Log backend error detail for diagnostics",
    )

    # Application (1 field)
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("s3_addressing_style")
    @classmethod
    def validate_addressing_style(cls, v: str) -> str:
        """Validate the bucket addressing style.

        Raises:
            ValueError: If the style is not auto, virtual or path
        """
        v = v.lower()
        if v not in ("auto", "virtual", "path"):
            raise ValueError("s3_addressing_style must be one of auto, virtual, path")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate that log_level names a stdlib logging level.

        Raises:
            ValueError: If the level is unknown
        """
        v = v.upper()
        if not isinstance(logging.getLevelName(v), int):
            raise ValueError(f"Unknown log level: {v}")
        return v

    def client_config(self) -> Dict[str, Any]:
        """Build boto3 client keyword arguments from these settings.

        Returns:
            Mapping suitable for ``boto3.client("s3", **kwargs)``
        """
        kwargs: Dict[str, Any] = {
            "config": Config(
                signature_version=self.s3_signature_version,
                s3={"addressing_style": self.s3_addressing_style},
            ),
        }
        if self.s3_endpoint_url:
            kwargs["endpoint_url"] = self.s3_endpoint_url
        if self.s3_region:
            kwargs["region_name"] = self.s3_region
        if self.s3_access_key and self.s3_secret_key:
            kwargs["aws_access_key_id"] = self.s3_access_key
            kwargs["aws_secret_access_key"] = self.s3_secret_key
        if self.s3_session_token:
            kwargs["aws_session_token"] = self.s3_session_token
        return kwargs
