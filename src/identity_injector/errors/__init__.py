"""
Error handling module for the identity injector.

This module provides the error hierarchy raised while building the pod
mutator and while mutating pods, with conversion to kopf admission errors.
"""

from .injector_errors import (
    BadTemplateError,
    ConfigurationError,
    IdentityError,
    InjectorError,
    InvalidNameError,
    MissingFieldError,
    MutationError,
)

__all__ = [
    "InjectorError",
    "ConfigurationError",
    "MissingFieldError",
    "BadTemplateError",
    "InvalidNameError",
    "MutationError",
    "IdentityError",
]
