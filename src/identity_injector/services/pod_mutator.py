"""
Pod mutator that injects identity provisioning containers.

The mutator rewrites a pod in place:
- removes containers running legacy identity images
- prepends the init and refresh containers rendered from templates
- adds the identity environment produced for the pod to both containers
- declares emptyDir volumes for any mount the injected containers need

It performs no I/O of its own and never logs. Callers observe what happened
through the optional hook and the return value.
"""

from collections.abc import Callable, Iterable, Mapping
from typing import Any

from identity_injector.errors import MutationError
from identity_injector.models.config import MutationConfig
from identity_injector.models.pod import Container, EnvVar, Pod, Volume

ValueProducer = Callable[[Pod], Mapping[str, str]]
MutationHook = Callable[[str, dict[str, Any]], None]

TRIGGER_VALUE = "true"


def strip_image_version(image: str) -> str:
    """Return the image reference without the part after its last ':'."""
    pos = image.rfind(":")
    if pos >= 0:
        return image[:pos]
    return image


def is_triggered(pod: Pod, annotation_trigger: str) -> bool:
    """Check whether the pod opted in to injection."""
    if not annotation_trigger:
        return True
    annotations = pod.annotations
    if annotations is None:
        return False
    return annotations.get(annotation_trigger) == TRIGGER_VALUE


def filter_containers(
    containers: Iterable[Container], remove_images: Iterable[str]
) -> tuple[list[Container], list[Container]]:
    """
    Split containers into those kept and those running a removed image.

    Args:
        containers: Containers in pod order
        remove_images: Bare image names to remove

    Returns:
        Tuple of (kept, removed), both in their original relative order
    """
    removed_names = frozenset(remove_images)
    kept: list[Container] = []
    removed: list[Container] = []
    for container in containers:
        if strip_image_version(container.image) in removed_names:
            removed.append(container)
        else:
            kept.append(container)
    return kept, removed


def add_env(container: Container, entries: list[EnvVar]) -> None:
    """Append environment entries to a container."""
    container.env = [*(container.env or []), *(e.model_copy() for e in entries)]


def missing_volumes(
    containers: Iterable[Container], existing: Iterable[Volume]
) -> list[Volume]:
    """
    Compute emptyDir volumes for mounts that the pod does not declare.

    Args:
        containers: Containers whose volume mounts must be satisfied
        existing: Volumes already declared on the pod

    Returns:
        New volumes in first-mount order
    """
    existing_names = {v.name for v in existing}
    required: dict[str, None] = {}
    for container in containers:
        for mount in container.volume_mounts or []:
            required.setdefault(mount.name, None)
    return [Volume.empty(name) for name in required if name not in existing_names]


class PodMutator:
    """
    Injects identity containers into pods according to a MutationConfig.

    Instances are safe to share between concurrent callers as long as each
    call receives its own pod and the value producer is itself thread-safe.
    """

    def __init__(
        self,
        config: MutationConfig,
        value_producer: ValueProducer,
        hook: MutationHook | None = None,
    ):
        self.config = config
        self.value_producer = value_producer
        self.hook = hook

    @property
    def name(self) -> str:
        return self.config.name

    def _emit(self, event: str, **details: Any) -> None:
        if self.hook is not None:
            self.hook(event, details)

    def mutate(self, pod: Pod) -> bool:
        """
        Mutate a pod in place.

        Args:
            pod: Pod to rewrite, exclusively owned by the caller for the call

        Returns:
            True if the pod was rewritten, False if it was skipped

        Raises:
            MutationError: If the value producer fails; the pod is untouched
        """
        config = self.config
        if not is_triggered(pod, config.annotation_trigger):
            self._emit(
                "skipped",
                reason=f"annotation {config.annotation_trigger!r} not set to 'true'",
            )
            return False

        init_containers, removed_init = filter_containers(
            pod.spec.init_containers, config.remove_images
        )
        containers, removed_main = filter_containers(
            pod.spec.containers, config.remove_images
        )

        init_container = config.init_container()
        refresh_container = config.refresh_container()

        # Producer sees the pod as it would look without legacy containers
        view = pod.model_copy(
            update={
                "spec": pod.spec.model_copy(
                    update={
                        "init_containers": init_containers,
                        "containers": containers,
                    }
                )
            }
        )
        try:
            values = self.value_producer(view)
            entries = [EnvVar(name=k, value=v) for k, v in values.items()]
        except Exception as e:
            raise MutationError(e, pod_ref=pod.ref) from e

        add_env(init_container, entries)
        add_env(refresh_container, entries)

        for c in removed_init:
            self._emit("container_removed", image=c.image, list="initContainers")
        for c in removed_main:
            self._emit("container_removed", image=c.image, list="containers")

        pod.spec.init_containers = [init_container, *init_containers]
        pod.spec.containers = [refresh_container, *containers]

        added = missing_volumes([init_container, refresh_container], pod.spec.volumes)
        for volume in added:
            self._emit("volume_added", volume=volume.name)
        pod.spec.volumes = [*pod.spec.volumes, *added]

        self._emit(
            "mutated",
            env_keys=[e.name for e in entries],
            volumes_added=[v.name for v in added],
        )
        return True


def build_mutator(
    config: MutationConfig,
    value_producer: ValueProducer,
    hook: MutationHook | None = None,
) -> PodMutator:
    """
    Validate a configuration and build a mutator around it.

    Both templates are parsed once here so that a malformed template fails
    at startup rather than on the first matching pod.

    Raises:
        MissingFieldError: If required fields are empty
        InvalidNameError: If the name is not qualified
        BadTemplateError: If a template does not parse (init checked first)
    """
    config.assert_valid()
    config.init_container()
    config.refresh_container()
    return PodMutator(config, value_producer, hook=hook)
