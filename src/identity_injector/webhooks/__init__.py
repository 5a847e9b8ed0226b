"""
Admission webhooks for the identity injector.

This module provides the mutating admission webhook for Pods. It is served by
Kopf's built-in HTTPS server using certificates provisioned externally.
"""
