"""
Constants used throughout the identity injector.

This module defines:
- Default annotation and environment variable names
- Webhook and metrics defaults
"""

# Admission webhook identifiers
WEBHOOK_ID = "inject-identity"
MUTATED_ANNOTATION = "identity.injector/mutated-by"

# Identity environment defaults
DEFAULT_DOMAIN_ENV = "ATHENZ_DOMAIN"
DEFAULT_SERVICE_ENV = "ATHENZ_SERVICE"
DEFAULT_SERVICE_ACCOUNT = "default"

# Server defaults
DEFAULT_WEBHOOK_PORT = 8443
DEFAULT_METRICS_PORT = 8081
DEFAULT_CERT_DIR = "/tmp/k8s-webhook-server/serving-certs"
DEFAULT_CONFIG_FILE = "/etc/identity-injector/config.yaml"
