"""Shared pytest fixtures for injector unit tests."""

import pytest

from identity_injector.models.config import MutationConfig
from identity_injector.models.pod import Pod
from tests.fixtures.pod_resources import CONFIG_DATA, RecordingProducer, make_pod


@pytest.fixture
def config() -> MutationConfig:
    return MutationConfig.model_validate(CONFIG_DATA)


@pytest.fixture
def producer() -> RecordingProducer:
    return RecordingProducer()


@pytest.fixture
def triggered_pod() -> Pod:
    return Pod.model_validate(make_pod())
