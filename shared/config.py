"""
Shared configuration management for the newsroom CMS services.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Persistence
    data_dir: str = Field(default="data")

    # Webflow
    webflow_api_url: str = Field(default="https://api.webflow.com")
    webflow_api_token: Optional[str] = Field(default=None)
    webflow_site_id: Optional[str] = Field(default=None)
    webflow_authors_collection_id: Optional[str] = Field(default=None)
    webflow_articles_collection_id: Optional[str] = Field(default=None)
    webflow_topics_collection_id: Optional[str] = Field(default=None)
    webflow_sections_collection_id: Optional[str] = Field(default=None)
    webflow_festivals_collection_id: Optional[str] = Field(default=None)
    webflow_streaming_services_collection_id: Optional[str] = Field(default=None)
    webflow_timeout_seconds: float = Field(default=10.0)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
