"""
Unit tests for InMemoryDeviceRepository, including its compare-and-swap.
"""
import asyncio
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from device_api.domain.models.device import DeviceChanges, DeviceState
from device_api.domain.results import ErrorKind, ResultHandler
from device_api.infrastructure.db.memory_device_repository import InMemoryDeviceRepository
from tests.factories import CREATED_AT, make_device


async def _insert(repository, **overrides):
    return await repository.insert(make_device(device_id=None, **overrides))


class TestInsertAndLookup:
    @pytest.mark.asyncio
    async def test_insert_assigns_id_and_version_zero(self, repository):
        saved = await _insert(repository, version=7)
        assert saved.id
        assert saved.version == 0
        assert saved.creation_time == CREATED_AT

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, repository):
        first = await _insert(repository)
        second = await _insert(repository)
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_colliding_generated_id_is_skipped(self):
        ids = iter(["a", "a", "b"])
        repository = InMemoryDeviceRepository(id_factory=lambda: next(ids))
        first = await _insert(repository)
        second = await _insert(repository)
        assert (first.id, second.id) == ("a", "b")

    @pytest.mark.asyncio
    async def test_find_by_id_missing(self, repository):
        assert await repository.find_by_id("missing") is None

    @pytest.mark.asyncio
    async def test_returned_devices_are_copies(self, repository):
        saved = await _insert(repository)
        saved.name = "Tampered"
        fetched = await repository.find_by_id(saved.id)
        assert fetched.name == "iPhone 14"


class TestScans:
    @pytest.mark.asyncio
    async def test_find_by_brand_is_exact_and_case_sensitive(self, repository):
        galaxy = await _insert(repository, name="Galaxy", brand="Samsung")
        tab = await _insert(repository, name="Tab", brand="Samsung")
        await _insert(repository, name="Lower", brand="samsung")
        await _insert(repository, name="iPhone", brand="Apple")

        found = await repository.find_by_brand("Samsung")
        assert {device.id for device in found} == {galaxy.id, tab.id}

    @pytest.mark.asyncio
    async def test_find_by_state(self, repository):
        in_use = await _insert(repository, state=DeviceState.IN_USE)
        await _insert(repository, state=DeviceState.AVAILABLE)

        found = await repository.find_by_state(DeviceState.IN_USE)
        assert [device.id for device in found] == [in_use.id]

    @pytest.mark.asyncio
    async def test_find_all_in_insertion_order(self, repository):
        first = await _insert(repository, name="One")
        second = await _insert(repository, name="Two")
        assert [device.id for device in await repository.find_all()] == [first.id, second.id]


class TestConditionalUpdate:
    @pytest.mark.asyncio
    async def test_success_bumps_version(self, repository):
        saved = await _insert(repository)
        result = await repository.conditional_update(saved.id, 0, DeviceChanges(name="New").apply_to)

        assert ResultHandler.is_success(result)
        assert result.value.name == "New"
        assert result.value.version == 1
        assert (await repository.find_by_id(saved.id)).version == 1

    @pytest.mark.asyncio
    async def test_stale_version_conflicts(self, repository):
        saved = await _insert(repository)
        await repository.conditional_update(saved.id, 0, DeviceChanges(name="First").apply_to)

        result = await repository.conditional_update(saved.id, 0, DeviceChanges(name="Second").apply_to)
        assert ResultHandler.is_failure(result)
        assert result.error.kind == ErrorKind.VERSION_CONFLICT
        assert (await repository.find_by_id(saved.id)).name == "First"

    @pytest.mark.asyncio
    async def test_missing_is_not_found(self, repository):
        result = await repository.conditional_update("missing", 0, lambda device: device)
        assert result.error.kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_mutator_cannot_touch_creation_time_or_version(self, repository):
        saved = await _insert(repository)

        def mutator(device):
            device.creation_time = CREATED_AT.replace(year=2000)
            device.version = 99
            device.brand = "Other"
            return device

        result = await repository.conditional_update(saved.id, 0, mutator)
        assert result.value.creation_time == CREATED_AT
        assert result.value.version == 1
        assert result.value.brand == "Other"

    @pytest.mark.asyncio
    async def test_concurrent_writers_same_version_exactly_one_wins(self, repository):
        saved = await _insert(repository)

        results = await asyncio.gather(
            repository.conditional_update(saved.id, 0, DeviceChanges(name="A").apply_to),
            repository.conditional_update(saved.id, 0, DeviceChanges(name="B").apply_to),
        )

        successes = [result for result in results if ResultHandler.is_success(result)]
        failures = [result for result in results if ResultHandler.is_failure(result)]
        assert len(successes) == 1
        assert len(failures) == 1
        assert successes[0].value.version == 1
        assert failures[0].error.kind == ErrorKind.VERSION_CONFLICT

    def test_threaded_writers_same_version_exactly_one_wins(self, repository):
        saved = asyncio.run(_insert(repository))
        writers = 8
        barrier = threading.Barrier(writers)

        def attempt(index):
            barrier.wait()
            return asyncio.run(
                repository.conditional_update(saved.id, 0, DeviceChanges(name=f"W{index}").apply_to)
            )

        with ThreadPoolExecutor(max_workers=writers) as pool:
            results = list(pool.map(attempt, range(writers)))

        assert sum(ResultHandler.is_success(result) for result in results) == 1
        assert all(
            result.error.kind == ErrorKind.VERSION_CONFLICT
            for result in results
            if ResultHandler.is_failure(result)
        )
        assert asyncio.run(repository.find_by_id(saved.id)).version == 1


class TestConditionalDelete:
    @pytest.mark.asyncio
    async def test_delete_removes(self, repository):
        saved = await _insert(repository)
        result = await repository.conditional_delete(saved.id, 0)
        assert ResultHandler.is_success(result)
        assert await repository.find_by_id(saved.id) is None

    @pytest.mark.asyncio
    async def test_delete_stale_version(self, repository):
        saved = await _insert(repository)
        await repository.conditional_update(saved.id, 0, DeviceChanges(state=DeviceState.INACTIVE).apply_to)

        result = await repository.conditional_delete(saved.id, 0)
        assert result.error.kind == ErrorKind.VERSION_CONFLICT
        assert await repository.find_by_id(saved.id) is not None

    @pytest.mark.asyncio
    async def test_delete_missing(self, repository):
        result = await repository.conditional_delete("missing", 0)
        assert result.error.kind == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_racing_delete(self, repository):
        saved = await _insert(repository)

        results = await asyncio.gather(
            repository.conditional_delete(saved.id, 0),
            repository.conditional_update(saved.id, 0, DeviceChanges(name="Late").apply_to),
        )

        assert ResultHandler.is_success(results[0])
        assert results[1].error.kind == ErrorKind.NOT_FOUND
