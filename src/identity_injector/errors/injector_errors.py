"""
Injector error hierarchy with categorization and admission integration.

This module defines the error types raised while building the pod mutator
from its configuration and while mutating individual pods.
"""

import kopf


class InjectorError(Exception):
    """
    Base error class for all injector-related exceptions.

    Provides categorization, retry hints, and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        retryable: bool = False,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize injector error.

        Args:
            message: Human-readable error description
            category: Error category (configuration, mutation, identity)
            retryable: Whether the caller may retry the operation
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.category = category
        self.retryable = retryable
        self.user_action = user_action
        self.cause = cause

    def as_admission_error(self) -> kopf.AdmissionError:
        """Convert to a kopf admission error rejecting the request."""
        return kopf.AdmissionError(str(self))

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ConfigurationError(InjectorError):
    """Error in the static mutation configuration."""

    def __init__(
        self,
        message: str,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category="configuration",
            retryable=False,
            user_action=user_action or "Review and correct the injector configuration",
            cause=cause,
        )


class MissingFieldError(ConfigurationError):
    """One or more required configuration fields are empty."""

    def __init__(self, fields: list[str], config_name: str = "MutationConfig"):
        self.fields = list(fields)
        super().__init__(
            message=f"{config_name}: missing required field(s): {', '.join(self.fields)}",
            user_action=f"Set {', '.join(self.fields)} in the injector configuration",
        )


class BadTemplateError(ConfigurationError):
    """A container template could not be parsed into a container spec."""

    def __init__(self, which: str, raw: str, cause: Exception):
        self.which = which
        self.raw = raw
        super().__init__(
            message=f"bad {which} template {raw!r}: {cause}",
            user_action=f"Fix the {which} container template YAML",
            cause=cause,
        )


class InvalidNameError(ConfigurationError):
    """The configured name is not a qualified (dotted) name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(
            message=f"name {name!r} must contain at least 2 '.' separators",
            user_action="Use a fully qualified name such as 'sia.identity.example.com'",
        )


class MutationError(InjectorError):
    """Pod mutation failed because the value producer failed."""

    def __init__(self, cause: Exception, pod_ref: str | None = None):
        target = f" for pod {pod_ref}" if pod_ref else ""
        super().__init__(
            message=f"failed to compute identity environment{target}: {cause}",
            category="mutation",
            retryable=True,
            cause=cause,
        )


class IdentityError(InjectorError):
    """Identity values could not be derived from the pod."""

    def __init__(self, message: str, user_action: str | None = None):
        super().__init__(
            message=message,
            category="identity",
            retryable=False,
            user_action=user_action,
        )
