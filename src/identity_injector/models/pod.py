"""
Pydantic models for the parts of a Kubernetes pod the injector rewrites.

Only the fields the mutator reads or writes are typed. Every other field is
kept as an extra attribute so that a pod or container survives a parse and
dump cycle unmodified.
"""

from typing import Any

from kubernetes import client
from pydantic import BaseModel, ConfigDict, Field


class EnvVar(BaseModel):
    """Environment variable entry of a container."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., description="Environment variable name")
    value: str | None = Field(None, description="Literal value")


class VolumeMount(BaseModel):
    """Volume mount of a container."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., description="Name of the pod volume to mount")
    mount_path: str | None = Field(
        None, alias="mountPath", description="Path within the container"
    )


class Container(BaseModel):
    """
    Container specification.

    The image, environment and volume mounts are typed; everything else
    (command, args, resources, probes, ...) is passed through untouched.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = Field(None, description="Container name")
    image: str = Field("", description="Image reference, optionally tagged")
    env: list[EnvVar] | None = Field(None, description="Environment")
    volume_mounts: list[VolumeMount] | None = Field(
        None, alias="volumeMounts", description="Volume mounts"
    )


class Volume(BaseModel):
    """Pod volume. Only the emptyDir source is typed."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(..., description="Volume name, unique within the pod")
    empty_dir: dict[str, Any] | None = Field(
        None, alias="emptyDir", description="Ephemeral volume source"
    )

    @classmethod
    def empty(cls, name: str) -> "Volume":
        """Create an ephemeral emptyDir volume."""
        return cls(name=name, empty_dir={})


class PodMetadata(BaseModel):
    """Pod object metadata."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str | None = None
    generate_name: str | None = Field(None, alias="generateName")
    namespace: str | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None


class PodSpec(BaseModel):
    """Pod specification."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    init_containers: list[Container] = Field(
        default_factory=list, alias="initContainers"
    )
    containers: list[Container] = Field(default_factory=list)
    volumes: list[Volume] = Field(default_factory=list)
    service_account_name: str | None = Field(None, alias="serviceAccountName")


class Pod(BaseModel):
    """A pod as received in an admission request."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    metadata: PodMetadata = Field(default_factory=PodMetadata)
    spec: PodSpec = Field(default_factory=PodSpec)

    @classmethod
    def from_kubernetes(cls, pod: client.V1Pod) -> "Pod":
        """Build a Pod from an official kubernetes client V1Pod object."""
        data = client.ApiClient().sanitize_for_serialization(pod)
        return cls.model_validate(data)

    def to_kubernetes_dict(self) -> dict[str, Any]:
        """Serialize the pod back to Kubernetes camelCase JSON."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @property
    def annotations(self) -> dict[str, str] | None:
        return self.metadata.annotations

    @property
    def ref(self) -> str:
        """Human readable namespace/name reference for messages."""
        name = self.metadata.name or self.metadata.generate_name or "<unnamed>"
        if self.metadata.namespace:
            return f"{self.metadata.namespace}/{name}"
        return name


def dump_containers(containers: list[Container]) -> list[dict[str, Any]]:
    """Serialize containers back to Kubernetes camelCase JSON."""
    return [c.model_dump(by_alias=True, exclude_none=True) for c in containers]


def dump_volumes(volumes: list[Volume]) -> list[dict[str, Any]]:
    """Serialize volumes back to Kubernetes camelCase JSON."""
    return [v.model_dump(by_alias=True, exclude_none=True) for v in volumes]
