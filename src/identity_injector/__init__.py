"""
Identity Injector - A Kopf-based mutating admission webhook for pod identity.

The injector rewrites pods at admission time to:
- Remove legacy identity containers
- Prepend identity init and refresh containers rendered from templates
- Inject per-pod identity environment into both containers
- Declare ephemeral volumes required by the injected containers
"""

__version__ = "0.1.0"
