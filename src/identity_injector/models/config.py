"""
Pydantic model for the static mutation configuration.

The configuration names the injector, the annotation that opts a pod in,
the legacy images to strip, and the YAML templates for the injected init
and refresh containers.
"""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from identity_injector.errors import (
    BadTemplateError,
    ConfigurationError,
    InvalidNameError,
    MissingFieldError,
)
from identity_injector.models.pod import Container

# Separator count required for a qualified injector name
NAME_MIN_SEPARATORS = 2


class MutationConfig(BaseModel):
    """Immutable injector configuration, usually loaded from a ConfigMap."""

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    name: str = Field(
        "", description="Injector name, a qualified name with at least 2 dots"
    )
    annotation_trigger: str = Field(
        "",
        alias="annotationTrigger",
        description="Annotation a pod must set to 'true' (empty = all pods)",
    )
    remove_images: tuple[str, ...] = Field(
        (),
        alias="removeImages",
        description="Bare image names (no tag) whose containers are removed",
    )
    init_template: str = Field(
        "", alias="initTemplate", description="YAML spec of the init container"
    )
    refresh_template: str = Field(
        "",
        alias="refreshTemplate",
        description="YAML spec of the refresh sidecar container",
    )

    def missing_fields(self) -> list[str]:
        """Return the names of all required fields that are empty."""
        required = {
            "name": self.name,
            "initTemplate": self.init_template,
            "refreshTemplate": self.refresh_template,
        }
        return [field for field, value in required.items() if not value]

    def assert_valid(self) -> None:
        """
        Check required fields and the name format.

        Raises:
            MissingFieldError: If any required field is empty (all are listed)
            InvalidNameError: If the name is not a qualified name
        """
        missing = self.missing_fields()
        if missing:
            raise MissingFieldError(missing)
        if self.name.count(".") < NAME_MIN_SEPARATORS:
            raise InvalidNameError(self.name)

    def init_container(self) -> Container:
        """Parse a fresh init container from the template."""
        return parse_container_template(self.init_template, "init")

    def refresh_container(self) -> Container:
        """Parse a fresh refresh container from the template."""
        return parse_container_template(self.refresh_template, "refresh")

    @classmethod
    def from_yaml(cls, text: str) -> "MutationConfig":
        """
        Build a configuration from a YAML document.

        Args:
            text: YAML mapping using the camelCase keys

        Returns:
            Parsed configuration (not yet validated, see assert_valid)

        Raises:
            ConfigurationError: If the document is not a YAML mapping
        """
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"injector configuration is not valid YAML: {e}", cause=e
            ) from e
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"injector configuration must be a mapping, got {type(data).__name__}"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigurationError(
                f"invalid injector configuration: {e}", cause=e
            ) from e

    @classmethod
    def load(cls, path: str | Path) -> "MutationConfig":
        """Load a configuration file from disk."""
        return cls.from_yaml(Path(path).read_text(encoding="utf-8"))


def parse_container_template(raw: str, which: str) -> Container:
    """
    Parse a YAML container template into a Container.

    Args:
        raw: Serialized container spec
        which: Template label used in errors ("init" or "refresh")

    Returns:
        A new Container instance

    Raises:
        BadTemplateError: If the YAML is malformed or not a container spec
    """
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise BadTemplateError(which, raw, e) from e
    if not isinstance(data, dict):
        cause = ValueError(f"expected a mapping, got {type(data).__name__}")
        raise BadTemplateError(which, raw, cause) from cause
    try:
        return Container.model_validate(data)
    except ValidationError as e:
        raise BadTemplateError(which, raw, e) from e
