"""
Default value producer deriving identity environment from a pod.

The identity domain is derived from the pod namespace and the service from
its service account, so every workload gets an identity without any extra
annotations.
"""

from collections.abc import Mapping

from identity_injector.constants import (
    DEFAULT_DOMAIN_ENV,
    DEFAULT_SERVICE_ACCOUNT,
    DEFAULT_SERVICE_ENV,
)
from identity_injector.errors import IdentityError
from identity_injector.models.pod import Pod

# Placeholder used while swapping single and double dashes
_DASH = "\x00"


def namespace_to_domain(namespace: str, prefix: str = "", suffix: str = "") -> str:
    """
    Map a namespace to an identity domain.

    A single '-' separates domain components and '--' escapes a literal '-':
    ``my-team--x`` becomes ``my.team-x``.
    """
    domain = namespace.replace("--", _DASH).replace("-", ".").replace(_DASH, "-")
    return f"{prefix}{domain}{suffix}"


class IdentityEnvProducer:
    """Compute identity environment variables for a pod."""

    def __init__(
        self,
        domain_prefix: str = "",
        domain_suffix: str = "",
        domain_env: str = DEFAULT_DOMAIN_ENV,
        service_env: str = DEFAULT_SERVICE_ENV,
        extra_env: Mapping[str, str] | None = None,
    ):
        self.domain_prefix = domain_prefix
        self.domain_suffix = domain_suffix
        self.domain_env = domain_env
        self.service_env = service_env
        self.extra_env = dict(extra_env or {})

    def __call__(self, pod: Pod) -> dict[str, str]:
        namespace = pod.metadata.namespace
        if not namespace:
            raise IdentityError(
                f"pod {pod.ref} has no namespace, cannot derive identity domain",
                user_action="Create the pod in a namespace",
            )
        env = dict(self.extra_env)
        env[self.domain_env] = namespace_to_domain(
            namespace, self.domain_prefix, self.domain_suffix
        )
        env[self.service_env] = pod.spec.service_account_name or DEFAULT_SERVICE_ACCOUNT
        return env
