"""Centralized injector settings using pydantic-settings.

This module provides a single source of truth for all process configuration
loaded from environment variables. The mutation rules themselves live in the
YAML file referenced by ``INJECTOR_CONFIG_FILE``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from identity_injector.constants import (
    DEFAULT_CERT_DIR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_METRICS_PORT,
    DEFAULT_WEBHOOK_PORT,
)


class Settings(BaseSettings):
    """Injector configuration loaded from environment variables.

    All settings have sensible defaults for production use. Override via
    environment variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Mutation configuration
    config_file: str = Field(
        default=DEFAULT_CONFIG_FILE,
        validation_alias="INJECTOR_CONFIG_FILE",
        description="Path of the YAML mutation configuration",
    )

    # Identity value producer
    identity_domain_prefix: str = Field(
        default="",
        validation_alias="IDENTITY_DOMAIN_PREFIX",
        description="Prefix prepended to the domain derived from the namespace",
    )
    identity_domain_suffix: str = Field(
        default="",
        validation_alias="IDENTITY_DOMAIN_SUFFIX",
        description="Suffix appended to the domain derived from the namespace",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )
    log_health_probes: bool = Field(
        default=False,
        validation_alias="LOG_HEALTH_PROBES",
        description="Log health probe and metrics scrape requests",
    )

    # Namespace watching
    namespaces: str = Field(
        default="",
        validation_alias="NAMESPACES",
        description="Comma-separated list of namespaces to serve (empty = all namespaces)",
    )

    # Metrics and observability
    metrics_port: int = Field(
        default=DEFAULT_METRICS_PORT,
        validation_alias="METRICS_PORT",
        description="Port for Prometheus metrics endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Host address to bind metrics server",
    )

    # Admission webhook
    enable_webhooks: bool = Field(
        default=True,
        validation_alias="ENABLE_WEBHOOKS",
        description="Serve the mutating admission webhook",
    )
    webhook_port: int = Field(
        default=DEFAULT_WEBHOOK_PORT,
        validation_alias="WEBHOOK_PORT",
        description="Port for admission webhook server",
    )
    webhook_host: str = Field(
        default="0.0.0.0",
        validation_alias="WEBHOOK_HOST",
        description="Host address to bind the webhook server",
    )
    webhook_cert_dir: str = Field(
        default=DEFAULT_CERT_DIR,
        validation_alias="WEBHOOK_CERT_DIR",
        description="Directory holding tls.crt and tls.key for the webhook server",
    )

    @property
    def watched_namespaces(self) -> list[str] | None:
        """Parse watched namespaces from comma-separated string.

        Returns:
            List of namespace names, or None to serve all namespaces
        """
        if self.namespaces:
            return [ns.strip() for ns in self.namespaces.split(",") if ns.strip()]
        return None


# Global settings instance - initialized once at module import
settings = Settings()
