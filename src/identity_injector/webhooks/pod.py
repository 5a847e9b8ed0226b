"""
Mutating admission webhook for Pod resources.

Pods admitted through this webhook get the identity init and refresh
containers injected, legacy identity containers removed, and any volumes
required by the injected containers declared.
"""

import time
from typing import Any

import kopf
from pydantic import ValidationError

from identity_injector.constants import MUTATED_ANNOTATION, WEBHOOK_ID
from identity_injector.errors import InjectorError
from identity_injector.models.pod import Pod, dump_containers, dump_volumes
from identity_injector.observability.logging import (
    InjectorLogger,
    generate_correlation_id,
    set_correlation_id,
)
from identity_injector.observability.metrics import MetricsCollector
from identity_injector.services.pod_mutator import PodMutator
from identity_injector.settings import settings as injector_settings

injector_logger = InjectorLogger(__name__)


def apply_to_patch(pod: Pod, patch: dict[str, Any], injector: str) -> None:
    """Copy the rewritten pod fields into the admission patch."""
    spec_patch = patch.setdefault("spec", {})
    spec_patch["initContainers"] = dump_containers(pod.spec.init_containers)
    spec_patch["containers"] = dump_containers(pod.spec.containers)
    spec_patch["volumes"] = dump_volumes(pod.spec.volumes)
    metadata_patch = patch.setdefault("metadata", {})
    metadata_patch.setdefault("annotations", {})[MUTATED_ANNOTATION] = injector


@kopf.on.mutate("pods", id=WEBHOOK_ID)
async def mutate_pod(
    body: dict,
    patch: kopf.Patch,
    memo: kopf.Memo,
    namespace: str | None = None,
    operation: str = "CREATE",
    dryrun: bool = False,
    **kwargs,
) -> None:
    """
    Inject identity containers into a pod before admission.

    Only pod creation is mutated: containers of an existing pod are
    immutable, so UPDATE requests and pods that already carry the
    mutated-by annotation are admitted unchanged.

    Args:
        body: Pod object from the admission request
        patch: Patch the admitted pod will be modified with
        memo: Operator memo holding the pod mutator built at startup
        namespace: Namespace of the admission request
        operation: Admission operation (CREATE, UPDATE, ...)
        dryrun: Whether this is a dry-run request

    Raises:
        kopf.AdmissionError: If the pod cannot be parsed or mutation fails
    """
    set_correlation_id(generate_correlation_id())

    mutator: PodMutator | None = memo.get("pod_mutator")
    if mutator is None:
        raise kopf.AdmissionError("identity injector is not initialized")

    try:
        pod = Pod.model_validate(dict(body))
    except ValidationError as e:
        error_msg = f"Invalid pod specification: {e}"
        injector_logger.warning(error_msg, operation="validate")
        raise kopf.AdmissionError(error_msg) from e

    # Pods created without metadata.namespace take it from the request
    if not pod.metadata.namespace and namespace:
        pod.metadata.namespace = namespace
    namespace = pod.metadata.namespace

    if operation != "CREATE":
        injector_logger.log_skip(pod.ref, namespace, f"operation is {operation}")
        return
    if MUTATED_ANNOTATION in (pod.annotations or {}):
        injector_logger.log_skip(pod.ref, namespace, "already mutated")
        return
    watched_namespaces = injector_settings.watched_namespaces
    if watched_namespaces and namespace not in watched_namespaces:
        injector_logger.log_skip(pod.ref, namespace, "namespace is not served")
        return

    metrics = MetricsCollector()
    base_hook = injector_logger.mutation_hook(pod.ref, namespace)

    def hook(event: str, details: dict[str, Any]) -> None:
        base_hook(event, details)
        if event == "volume_added":
            metrics.record_volume_added(namespace)
        elif event == "container_removed":
            metrics.record_container_removed(namespace)

    request_mutator = PodMutator(mutator.config, mutator.value_producer, hook=hook)
    start_time = time.time()
    try:
        with metrics.track_mutation(namespace) as state:
            mutated = request_mutator.mutate(pod)
            if not mutated:
                state["result"] = "skipped"
    except InjectorError as e:
        injector_logger.log_mutation_error(
            pod.ref, namespace, e, time.time() - start_time
        )
        raise e.as_admission_error() from e

    if not mutated:
        return

    apply_to_patch(pod, patch, mutator.name)
    injector_logger.log_mutation(
        pod.ref, namespace, mutator.name, time.time() - start_time, dry_run=dryrun
    )
