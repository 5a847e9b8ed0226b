#!/usr/bin/env python3
"""
Identity Injector - Main entry point for the Kopf-based admission webhook.

Usage:
    python -m identity_injector.operator
    # Or via the console script:
    identity-injector

Environment Variables:
    INJECTOR_CONFIG_FILE: Path of the YAML mutation configuration
    NAMESPACES: Comma-separated list of namespaces to serve
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
    WEBHOOK_PORT / WEBHOOK_CERT_DIR: Admission webhook server settings
"""

import logging
import sys

import kopf

from identity_injector.errors import ConfigurationError
from identity_injector.models.config import MutationConfig
from identity_injector.observability.logging import setup_structured_logging
from identity_injector.observability.metrics import MetricsServer
from identity_injector.services.identity import IdentityEnvProducer
from identity_injector.services.pod_mutator import PodMutator, build_mutator
from identity_injector.settings import settings as injector_settings

# Importing the webhook module registers its admission handler with kopf.
# Kopf fails if admission handlers exist without an admission server, so
# the import is skipped when webhooks are disabled.
if injector_settings.enable_webhooks:
    from identity_injector.webhooks import pod as pod_webhook  # noqa: F401

# Global reference to metrics server for cleanup
_global_metrics_server: MetricsServer | None = None


def configure_logging() -> None:
    """Configure structured logging based on injector_settings."""
    setup_structured_logging(
        log_level=injector_settings.log_level.upper(),
        enable_json_formatting=injector_settings.json_logs,
        correlation_id_enabled=injector_settings.correlation_ids,
        log_health_probes=injector_settings.log_health_probes,
    )


def load_mutator(config_file: str | None = None) -> PodMutator:
    """
    Load the mutation configuration and build the pod mutator.

    Args:
        config_file: YAML configuration path (defaults to INJECTOR_CONFIG_FILE)

    Returns:
        Validated pod mutator using the identity value producer

    Raises:
        ConfigurationError: If the file is unreadable or the config is invalid
    """
    path = config_file or injector_settings.config_file
    try:
        config = MutationConfig.load(path)
    except OSError as e:
        raise ConfigurationError(
            f"cannot read injector configuration {path}: {e}",
            user_action="Mount the injector ConfigMap or set INJECTOR_CONFIG_FILE",
            cause=e,
        ) from e

    producer = IdentityEnvProducer(
        domain_prefix=injector_settings.identity_domain_prefix,
        domain_suffix=injector_settings.identity_domain_suffix,
    )
    return build_mutator(config, producer)


@kopf.on.startup()
async def startup_handler(
    settings: kopf.OperatorSettings, memo: kopf.Memo, **_
) -> None:
    """
    Injector startup.

    Builds the pod mutator (failing fast on a bad configuration) and starts
    the metrics endpoint.
    """
    logging.info("Starting Identity Injector...")

    memo.pod_mutator = load_mutator()
    logging.info(f"Loaded injector configuration {memo.pod_mutator.name}")

    trigger = memo.pod_mutator.config.annotation_trigger
    if trigger:
        logging.info(f"Injecting into pods annotated with {trigger}=true")
    else:
        logging.info("Injecting into all pods (no trigger annotation configured)")

    watched_namespaces = injector_settings.watched_namespaces
    if watched_namespaces:
        logging.info(f"Serving namespaces: {', '.join(watched_namespaces)}")

    try:
        metrics_server = MetricsServer(
            port=injector_settings.metrics_port, host=injector_settings.metrics_host
        )
        await metrics_server.start()

        global _global_metrics_server
        _global_metrics_server = metrics_server
    except OSError as e:
        logging.error(f"Failed to start metrics server: {e}")
        logging.warning("Continuing without metrics server")


@kopf.on.cleanup()
async def cleanup_handler(**_) -> None:
    """Stop the metrics server on shutdown."""
    logging.info("Shutting down Identity Injector...")

    global _global_metrics_server
    if _global_metrics_server:
        await _global_metrics_server.stop()
        _global_metrics_server = None


def build_operator_settings() -> kopf.OperatorSettings:
    """Create kopf settings with the admission server configured."""
    settings_obj = kopf.OperatorSettings()
    if injector_settings.enable_webhooks:
        cert_dir = injector_settings.webhook_cert_dir
        settings_obj.admission.server = kopf.WebhookServer(
            port=injector_settings.webhook_port,
            host=injector_settings.webhook_host,
            certfile=f"{cert_dir}/tls.crt",
            pkeyfile=f"{cert_dir}/tls.key",
        )
        logging.info(
            f"Admission webhook ENABLED on port {injector_settings.webhook_port} "
            f"using certificates from {cert_dir}"
        )
    else:
        settings_obj.admission.server = None
        logging.info("Admission webhook DISABLED")
    # MutatingWebhookConfiguration is installed with the deployment manifests
    settings_obj.admission.managed = None
    return settings_obj


def main() -> None:
    """
    Main entry point for the injector.

    This function:
    1. Configures logging
    2. Configures the admission webhook server (must be before kopf.run())
    3. Runs kopf for the configured namespaces
    """
    configure_logging()
    settings_obj = build_operator_settings()
    watched_namespaces = injector_settings.watched_namespaces

    try:
        if watched_namespaces:
            kopf.run(namespaces=watched_namespaces, settings=settings_obj)
        else:
            kopf.run(clusterwide=True, settings=settings_obj)
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Injector failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
