"""
Test fixtures for pods and injector configurations.

This module provides sample container templates, injector configurations
and pod objects for testing, including valid and invalid configurations.
"""

import copy
from typing import Any

INJECTOR_NAME = "sia.identity.example.com"
TRIGGER_ANNOTATION = "identity.example.com/inject"

INIT_TEMPLATE = """
name: sia-init
image: registry.example.com/identity/sia:2.0
args: ["--mode", "init"]
volumeMounts:
  - name: identity-certs
    mountPath: /var/run/identity
  - name: identity-tokens
    mountPath: /var/run/tokens
"""

REFRESH_TEMPLATE = """
name: sia-refresh
image: registry.example.com/identity/sia:2.0
args: ["--mode", "refresh"]
resources:
  requests:
    cpu: 10m
env:
  - name: REFRESH_INTERVAL
    value: "1h"
volumeMounts:
  - name: identity-certs
    mountPath: /var/run/identity
"""

CONFIG_DATA: dict[str, Any] = {
    "name": INJECTOR_NAME,
    "annotationTrigger": TRIGGER_ANNOTATION,
    "removeImages": ["legacy/sia", "registry.example.com/identity/sia-old"],
    "initTemplate": INIT_TEMPLATE,
    "refreshTemplate": REFRESH_TEMPLATE,
}

CONFIG_YAML = f"""
name: {INJECTOR_NAME}
annotationTrigger: {TRIGGER_ANNOTATION}
removeImages:
  - legacy/sia
  - registry.example.com/identity/sia-old
initTemplate: |
  name: sia-init
  image: registry.example.com/identity/sia:2.0
  volumeMounts:
    - name: identity-certs
      mountPath: /var/run/identity
refreshTemplate: |
  name: sia-refresh
  image: registry.example.com/identity/sia:2.0
"""

# Pod opted in to injection, with one legacy container and one shared volume
TRIGGERED_POD: dict[str, Any] = {
    "apiVersion": "v1",
    "kind": "Pod",
    "metadata": {
        "name": "web-0",
        "namespace": "media-team",
        "labels": {"app": "web"},
        "annotations": {TRIGGER_ANNOTATION: "true"},
    },
    "spec": {
        "serviceAccountName": "frontend",
        "initContainers": [
            {"name": "legacy-sia", "image": "legacy/sia:1.2"},
            {"name": "migrate", "image": "app:1.0", "command": ["migrate"]},
        ],
        "containers": [
            {
                "name": "web",
                "image": "nginx:1.25",
                "ports": [{"containerPort": 80}],
                "volumeMounts": [{"name": "identity-certs", "mountPath": "/certs"}],
            },
            {"name": "old-refresh", "image": "registry.example.com/identity/sia-old:0.9"},
        ],
        "volumes": [
            {"name": "identity-certs", "secret": {"secretName": "preexisting"}},
        ],
        "restartPolicy": "Always",
    },
}

# Pod without any annotations
PLAIN_POD: dict[str, Any] = {
    "apiVersion": "v1",
    "kind": "Pod",
    "metadata": {"name": "batch-1", "namespace": "default"},
    "spec": {
        "containers": [{"name": "job", "image": "busybox:1.36"}],
    },
}


def make_pod(base: dict[str, Any] | None = None, **annotations: str) -> dict[str, Any]:
    """Return a deep copy of a sample pod with extra annotations merged in."""
    pod = copy.deepcopy(base if base is not None else TRIGGERED_POD)
    if annotations:
        pod["metadata"].setdefault("annotations", {}).update(annotations)
    return pod


class RecordingProducer:
    """Value producer returning fixed values and recording the pods it saw."""

    def __init__(self, values: dict[str, str] | None = None):
        self.values = values if values is not None else {"A": "1", "B": "2"}
        self.calls: list[Any] = []

    def __call__(self, pod: Any) -> dict[str, str]:
        self.calls.append(pod)
        return dict(self.values)


class FailingProducer:
    """Value producer that always raises."""

    def __init__(self, error: Exception | None = None):
        self.error = error or RuntimeError("identity backend unavailable")

    def __call__(self, pod: Any) -> dict[str, str]:
        raise self.error
