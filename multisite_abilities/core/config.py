"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.

Every variable is prefixed with ``MULTISITE_ABILITIES_``.
"""

from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class NetworkConfig(BaseModel):
    """Addressing of the multisite network that new sites are created in."""

    domain: str = Field(
        default="example.com", alias="MULTISITE_ABILITIES_NETWORK_DOMAIN", description="Primary network domain"
    )
    path: str = Field(default="/", alias="MULTISITE_ABILITIES_NETWORK_PATH", description="Network base path")
    scheme: str = Field(default="https", alias="MULTISITE_ABILITIES_SCHEME", description="URL scheme for site URLs")
    subdomain_install: bool = Field(
        default=False,
        alias="MULTISITE_ABILITIES_SUBDOMAIN_INSTALL",
        description="Create sites as subdomains instead of sub-directories",
    )
    main_site_id: int = Field(
        default=1, alias="MULTISITE_ABILITIES_MAIN_SITE_ID", description="Site resolved when no tenant is active"
    )

    model_config = {"populate_by_name": True}


class DatabaseConfig(BaseModel):
    """Database connection configuration."""

    url: str = Field(
        default="sqlite:///./multisite_abilities.db",
        alias="MULTISITE_ABILITIES_DATABASE_URL",
        description="SQLAlchemy database URL",
    )
    echo: bool = Field(default=False, alias="MULTISITE_ABILITIES_DATABASE_ECHO", description="Echo SQL statements")

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        populate_by_name=True,
    )

    # =====================================================================
    # Logging
    # =====================================================================
    log_level: str = Field(default="INFO", alias="MULTISITE_ABILITIES_LOG_LEVEL", description="Root log level")
    log_format: str = Field(
        default="detailed", alias="MULTISITE_ABILITIES_LOG_FORMAT", description="simple, detailed or json"
    )
    log_file_dir: str = Field(default="logs", alias="MULTISITE_ABILITIES_LOG_FILE_DIR")
    enable_file_logging: bool = Field(default=False, alias="MULTISITE_ABILITIES_ENABLE_FILE_LOGGING")

    # =====================================================================
    # Database
    # =====================================================================
    database_url: str = Field(default="sqlite:///./multisite_abilities.db", alias="MULTISITE_ABILITIES_DATABASE_URL")
    database_echo: bool = Field(default=False, alias="MULTISITE_ABILITIES_DATABASE_ECHO")

    # =====================================================================
    # Network
    # =====================================================================
    network_domain: str = Field(default="example.com", alias="MULTISITE_ABILITIES_NETWORK_DOMAIN")
    network_path: str = Field(default="/", alias="MULTISITE_ABILITIES_NETWORK_PATH")
    scheme: str = Field(default="https", alias="MULTISITE_ABILITIES_SCHEME")
    subdomain_install: bool = Field(default=False, alias="MULTISITE_ABILITIES_SUBDOMAIN_INSTALL")
    main_site_id: int = Field(default=1, alias="MULTISITE_ABILITIES_MAIN_SITE_ID")

    # =====================================================================
    # Server / Option policy
    # =====================================================================
    server_host: str = Field(default="127.0.0.1", alias="MULTISITE_ABILITIES_SERVER_HOST")
    server_port: int = Field(default=8000, alias="MULTISITE_ABILITIES_SERVER_PORT")
    api_token: Optional[str] = Field(
        default=None,
        alias="MULTISITE_ABILITIES_API_TOKEN",
        description="Bearer token that identifies a network super admin on the HTTP surface",
    )
    loose_option_comparison: bool = Field(
        default=False,
        alias="MULTISITE_ABILITIES_LOOSE_OPTION_COMPARISON",
        description="Compare unchanged option values by their string form instead of strict equality",
    )

    @property
    def network(self) -> NetworkConfig:
        """Network addressing grouped into one object."""
        return NetworkConfig(
            domain=self.network_domain,
            path=self.network_path,
            scheme=self.scheme,
            subdomain_install=self.subdomain_install,
            main_site_id=self.main_site_id,
        )

    @property
    def database(self) -> DatabaseConfig:
        return DatabaseConfig(url=self.database_url, echo=self.database_echo)


settings = Settings()
