# -*- coding: utf-8 -*-
"""Location: ./dataverse_mcp/config.py
Copyright 2025
SPDX-License-Identifier: Apache-2.0

Dataverse MCP Server configuration settings.
This module defines configuration settings for the server using Pydantic.
It loads configuration from environment variables (and an optional ``.env``
file) with sensible defaults.

Examples:
    >>> s = Settings(host="0.0.0.0", port=8080)
    >>> s.resolved_public_base_url
    'http://0.0.0.0:8080'
    >>> Settings(public_base_url="https://CRM.example.com:443/").resolved_public_base_url
    'https://crm.example.com'
"""

# Standard
from functools import lru_cache
from pathlib import Path
from typing import Optional

# Third-Party
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

# First-Party
from dataverse_mcp.models import normalize_base_url


class Settings(BaseSettings):
    """Dataverse MCP Server settings."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # HTTP binding
    app_name: str = "dataverse-mcp"
    host: str = "127.0.0.1"
    port: int = 3001
    public_base_url: Optional[str] = Field(None, description="Prefix of public resource URLs; derived from host/port when unset")
    log_level: str = "INFO"

    # Resource publishing
    resource_scheme: str = "file"
    resource_namespace: str = "files"
    static_dir: Path = Path("wwwroot")
    notification_timeout: Optional[float] = Field(5.0, gt=0, description="Seconds a client session may take to accept a resource notification")

    # Dataverse connection
    dataverse_url: Optional[str] = None
    dataverse_tenant_id: Optional[str] = None
    dataverse_client_id: Optional[str] = None
    dataverse_secret: Optional[SecretStr] = None
    dataverse_api_version: str = "v9.2"
    dataverse_timeout: float = 30.0
    dataverse_authority: str = "https://login.microsoftonline.com"

    # Tool behaviour
    large_result_threshold: int = Field(20, ge=0)
    sampling_max_tokens: int = Field(65536, ge=1)
    sampling_temperature: float = Field(0.0, ge=0.0)

    @field_validator("public_base_url")
    @classmethod
    def _normalize_public_base_url(cls, value: Optional[str]) -> Optional[str]:
        """Normalize ``public_base_url``, rejecting empty and relative values.

        Args:
            value: Configured base URL.

        Returns:
            Optional[str]: Normalized URL, or None when unset.
        """
        return normalize_base_url(value) if value is not None else None

    @property
    def resolved_public_base_url(self) -> str:
        """Base URL used to build public ``/dynamic`` links.

        Returns:
            str: Normalized ``public_base_url``, or ``http://{host}:{port}``.
        """
        if self.public_base_url is not None:
            return self.public_base_url
        return normalize_base_url(f"http://{self.host}:{self.port}")

    def require_dataverse(self) -> None:
        """Fail fast when Dataverse credentials are incomplete.

        Raises:
            ValueError: Naming the first missing setting.

        Examples:
            >>> Settings(dataverse_url=None).require_dataverse()
            Traceback (most recent call last):
            ...
            ValueError: DATAVERSE_URL not configured
        """
        for name in ("dataverse_url", "dataverse_tenant_id", "dataverse_client_id", "dataverse_secret"):
            if not getattr(self, name):
                raise ValueError(f"{name.upper()} not configured")


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings: A cached instance of the Settings class.

    Examples:
        >>> settings = get_settings()
        >>> isinstance(settings, Settings)
        True
        >>> settings is get_settings()
        True
    """
    return Settings()


settings = get_settings()
