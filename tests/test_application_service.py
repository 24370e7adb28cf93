"""
Tests for UserApplicationService: transaction scopes and cache behavior.
"""
import pytest

from user_service.application.user_application_service import UserApplicationService
from user_service.domain.exceptions import ConflictError, NotFoundError, ValidationError
from user_service.domain.value_objects import PageRequest, UserId, UserStatus
from user_service.infrastructure.cache_service import UserCache
from tests.fakes import FakeUnitOfWorkFactory


@pytest.fixture
def uow_factory():
    return FakeUnitOfWorkFactory()


@pytest.fixture
def cache():
    return UserCache()


@pytest.fixture
def service(cache, uow_factory):
    return UserApplicationService(cache=cache, uow_factory=uow_factory)


@pytest.mark.asyncio
async def test_create_user_commits_and_caches(service, cache, uow_factory, make_user):
    created = await service.create_user(make_user(phone_number="+1-555-123-4567"))

    unit = uow_factory.units[-1]
    assert not unit.read_only
    assert unit.committed
    assert unit.closed
    assert await cache.get_by_id(created.id) == created
    assert await cache.get_by_email(created.email) == created


@pytest.mark.asyncio
async def test_failed_create_rolls_back_and_caches_nothing(service, cache, uow_factory, make_user):
    await service.create_user(make_user(email="dup@example.com"))
    await cache.clear()

    with pytest.raises(ConflictError):
        await service.create_user(make_user(email="dup@example.com"))

    unit = uow_factory.units[-1]
    assert unit.rolled_back
    assert not unit.committed
    assert await cache.get_by_email("dup@example.com") is None


@pytest.mark.asyncio
async def test_cache_hit_skips_repository(service, uow_factory, make_user):
    created = await service.create_user(make_user())
    repository = uow_factory.repository
    repository.calls.clear()

    assert await service.get_user_by_id(created.id) == created
    assert await service.get_user_by_email(created.email) == created

    assert repository.calls == []


@pytest.mark.asyncio
async def test_cache_miss_reads_in_read_only_unit_and_remembers(service, cache, uow_factory, make_user):
    created = await service.create_user(make_user(phone_number="+1-555-123-4567"))
    await cache.clear()
    uow_factory.repository.calls.clear()

    found = await service.get_user_by_phone_number("+1-555-123-4567")

    assert found == created
    assert uow_factory.units[-1].read_only
    assert not uow_factory.units[-1].committed
    assert uow_factory.repository.calls == ["find_by_phone_number"]

    uow_factory.repository.calls.clear()
    assert await service.get_user_by_id(created.id) == created
    assert uow_factory.repository.calls == []


@pytest.mark.asyncio
async def test_service_without_cache_always_reads_repository(uow_factory, make_user):
    service = UserApplicationService(cache=None, uow_factory=uow_factory)
    created = await service.create_user(make_user())
    uow_factory.repository.calls.clear()

    await service.get_user_by_id(created.id)
    await service.get_user_by_id(created.id)

    assert uow_factory.repository.calls == ["find_by_id", "find_by_id"]


@pytest.mark.asyncio
async def test_lookup_of_missing_user_raises_not_found(service):
    with pytest.raises(NotFoundError):
        await service.get_user_by_email("ghost@example.com")


@pytest.mark.asyncio
async def test_update_user_refreshes_cache(service, cache, make_user):
    created = await service.create_user(make_user(email="before@example.com"))

    updated = await service.update_user(created.id, make_user(email="after@example.com"))

    assert updated.id == created.id
    assert await cache.get_by_id(created.id) == updated
    assert await cache.get_by_email("after@example.com") == updated
    assert await cache.get_by_email("before@example.com") is None


@pytest.mark.asyncio
async def test_change_status(service, cache, make_user):
    created = await service.create_user(make_user(phone_number="+1-555-123-4567"))

    suspended = await service.change_status(created.id, UserStatus.SUSPENDED)
    assert suspended.status == UserStatus.SUSPENDED
    assert suspended.address == created.address
    assert (await cache.get_by_id(created.id)).status == UserStatus.SUSPENDED

    assert (await service.change_status(created.id, "INACTIVE")).status == UserStatus.INACTIVE
    assert (await service.change_status(created.id, UserStatus.ACTIVE)).is_active()


@pytest.mark.asyncio
async def test_change_status_rejects_unknown_status(service, make_user):
    created = await service.create_user(make_user())

    with pytest.raises(ValidationError):
        await service.change_status(created.id, "PAUSED")


@pytest.mark.asyncio
async def test_delete_user_evicts_after_commit(service, cache, uow_factory, make_user):
    created = await service.create_user(make_user())

    await service.delete_user(created.id)

    assert uow_factory.units[-1].committed
    assert await cache.get_by_id(created.id) is None
    with pytest.raises(NotFoundError):
        await service.get_user_by_id(created.id)


@pytest.mark.asyncio
async def test_delete_missing_user_raises_not_found(service):
    with pytest.raises(NotFoundError):
        await service.delete_user(UserId.generate())


@pytest.mark.asyncio
async def test_get_all_users(service, uow_factory, make_user):
    for i in range(3):
        await service.create_user(make_user(email=f"user{i}@example.com"))

    page = await service.get_all_users(PageRequest(page=0, size=2))

    assert len(page.content) == 2
    assert page.total_elements == 3
    assert uow_factory.units[-1].read_only


@pytest.mark.asyncio
async def test_shared_phone_number_resolves_to_earliest_user(cache, uow_factory, make_user):
    cached_service = UserApplicationService(cache=cache, uow_factory=uow_factory)
    uncached_service = UserApplicationService(cache=None, uow_factory=uow_factory)

    first = await cached_service.create_user(
        make_user(name="First", email="first@example.com", phone_number="555-123-4567")
    )
    await cached_service.create_user(
        make_user(name="Second", email="second@example.com", phone_number="555-123-4567")
    )

    from_cache_path = await cached_service.get_user_by_phone_number("555-123-4567")
    again = await cached_service.get_user_by_phone_number("555-123-4567")
    from_database = await uncached_service.get_user_by_phone_number("555-123-4567")

    assert from_cache_path.id == first.id
    assert again.id == first.id
    assert from_database.id == first.id


@pytest.mark.asyncio
async def test_read_racing_an_update_does_not_cache_old_value(cache, uow_factory, make_user):
    service = UserApplicationService(cache=cache, uow_factory=uow_factory)
    created = await service.create_user(make_user(name="Before"))
    await cache.clear()

    repository = uow_factory.repository
    original_find = repository.find_by_id

    async def find_then_update(user_id):
        repository.find_by_id = original_find
        found = await original_find(user_id)
        # Another request commits an update while this read is in flight
        await service.update_user(user_id, make_user(name="After"))
        return found

    repository.find_by_id = find_then_update
    read = await service.get_user_by_id(created.id)

    assert read.name == "Before"
    assert (await cache.get_by_id(created.id)).name == "After"
