"""
Shared pytest fixtures for device-api tests.
"""
import os
from unittest.mock import patch

import pytest

from device_api.application.services.device_mutation_service import DeviceMutationService
from device_api.application.services.device_query_service import DeviceQueryService
from device_api.core.config import reset_settings
from device_api.di.container import reset_container
from device_api.domain.policies.lifecycle_policy import LifecyclePolicy
from device_api.infrastructure.db.memory_device_repository import InMemoryDeviceRepository

from tests.factories import InterleavingRepository


@pytest.fixture
def memory_env():
    """Point settings at the in-memory store and rebuild settings/container around the test."""
    env_vars = {
        "DEVICE_STORE_BACKEND": "memory",
        "DEVICE_UPDATE_MAX_RETRIES": "0",
        "LOG_LEVEL": "WARNING",
    }
    with patch.dict(os.environ, env_vars, clear=False):
        reset_settings()
        reset_container()
        yield env_vars
    reset_settings()
    reset_container()


@pytest.fixture
def repository():
    return InMemoryDeviceRepository()


@pytest.fixture
def interleaving_repository():
    return InterleavingRepository()


@pytest.fixture
def policy():
    return LifecyclePolicy()


@pytest.fixture
def mutation_service(repository, policy):
    return DeviceMutationService(device_repository=repository, lifecycle_policy=policy)


@pytest.fixture
def query_service(repository):
    return DeviceQueryService(device_repository=repository)
