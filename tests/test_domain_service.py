"""
Tests for UserDomainService against an in-memory repository.
"""
import pytest

from user_service.domain.entities import Address, User
from user_service.domain.exceptions import ConflictError, NotFoundError, ValidationError
from user_service.domain.services import UserDomainService
from user_service.domain.value_objects import AddressId, PageRequest, UserId, UserRole, UserStatus
from tests.fakes import InMemoryUserRepository


@pytest.fixture
def repository():
    return InMemoryUserRepository()


@pytest.fixture
def service(repository):
    return UserDomainService(repository)


def _address(owner=None, city="New York", phone_number="+1-555-123-4567"):
    return Address.create(
        owner,
        line1="123 Main Street",
        line2=None,
        city=city,
        state="NY",
        postal_code="10001",
        country="United States",
        phone_number=phone_number,
    )


# ============================================
# create_user
# ============================================

@pytest.mark.asyncio
async def test_create_user_assigns_new_identity(service, repository, make_user):
    candidate = make_user(phone_number="+1-555-123-4567").suspend()

    created = await service.create_user(candidate)

    assert created.id != candidate.id
    assert created.status == UserStatus.ACTIVE
    assert created.address.id != candidate.address.id
    assert created.address.user_id == created.id
    assert repository.users[created.id] == created


@pytest.mark.asyncio
async def test_create_user_rejects_duplicate_email(service, repository, make_user):
    await service.create_user(make_user(email="dup@example.com"))

    with pytest.raises(ConflictError) as exc_info:
        await service.create_user(make_user(name="Other", email="dup@example.com"))

    assert exc_info.value.message == "User with email dup@example.com already exists"
    assert len(repository.users) == 1


@pytest.mark.asyncio
async def test_create_user_rejects_none(service, repository):
    with pytest.raises(ValidationError) as exc_info:
        await service.create_user(None)

    assert exc_info.value.message == "User cannot be null"
    assert repository.calls == []


@pytest.mark.asyncio
async def test_create_user_rejects_blank_email(service, repository):
    candidate = User(id=UserId.generate(), name="No Mail", email=" ", role=UserRole.STAFF)

    with pytest.raises(ValidationError) as exc_info:
        await service.create_user(candidate)

    assert exc_info.value.message == "User email cannot be empty"
    assert "save" not in repository.calls


# ============================================
# Lookups
# ============================================

@pytest.mark.asyncio
async def test_lookups_find_created_user(service, make_user):
    created = await service.create_user(make_user(phone_number="+1-555-000-1111"))

    assert await service.get_user_by_id(created.id) == created
    assert await service.get_user_by_email(created.email) == created
    assert await service.get_user_by_phone_number("+1-555-000-1111") == created


@pytest.mark.asyncio
async def test_lookup_failures_raise_not_found(service):
    missing = UserId.generate()

    with pytest.raises(NotFoundError) as exc_info:
        await service.get_user_by_id(missing)
    assert exc_info.value.message == f"User not found with ID: {missing}"
    assert exc_info.value.key == str(missing)

    with pytest.raises(NotFoundError) as exc_info:
        await service.get_user_by_email("ghost@example.com")
    assert exc_info.value.message == "User not found with email: ghost@example.com"

    with pytest.raises(NotFoundError) as exc_info:
        await service.get_user_by_phone_number("000-000-0000")
    assert exc_info.value.message == "User not found with phone number: 000-000-0000"


@pytest.mark.asyncio
async def test_get_all_users_pages(service, make_user):
    for i in range(5):
        await service.create_user(make_user(email=f"user{i}@example.com"))

    page = await service.get_all_users(PageRequest(page=1, size=2))

    assert len(page.content) == 2
    assert page.number == 1
    assert page.total_elements == 5
    assert page.total_pages == 3


# ============================================
# update_user
# ============================================

@pytest.mark.asyncio
async def test_update_user_replaces_fields_and_keeps_ids(service, make_user):
    stored = await service.create_user(make_user(phone_number="+1-555-123-4567"))
    incoming = (
        User.create("Jane Roe", "jane.roe@example.com", UserRole.ADMIN)
        .suspend()
        .with_address(_address(city="Boston", phone_number="+1-555-999-8888"))
    )

    updated = await service.update_user(stored.id, incoming)

    assert updated.id == stored.id
    assert updated.name == "Jane Roe"
    assert updated.email == "jane.roe@example.com"
    assert updated.role == UserRole.ADMIN
    assert updated.status == UserStatus.SUSPENDED
    assert updated.address.id == stored.address.id
    assert updated.address.user_id == stored.id
    assert updated.address.city == "Boston"
    assert updated.address.phone_number == "+1-555-999-8888"


@pytest.mark.asyncio
async def test_update_user_copies_blank_and_missing_address_fields(service, make_user):
    stored = await service.create_user(make_user(phone_number="+1-555-123-4567"))
    assert stored.address.line2 == "Apt 4B"
    incoming_address = Address(
        id=AddressId.generate(),
        line1="1 Elm St",
        line2=None,
        city=" ",
        state="MA",
        postal_code="02101",
        country="USA",
        phone_number="617-555-0100",
    )

    updated = await service.update_user(stored.id, make_user().with_address(incoming_address))

    assert updated.address.id == stored.address.id
    assert updated.address.user_id == stored.id
    assert updated.address.line2 is None
    assert updated.address.city == " "
    assert updated.address.line1 == "1 Elm St"


@pytest.mark.asyncio
async def test_update_user_without_incoming_address_keeps_stored(service, make_user):
    stored = await service.create_user(make_user(phone_number="+1-555-123-4567"))

    updated = await service.update_user(stored.id, make_user(name="Renamed"))

    assert updated.name == "Renamed"
    assert updated.address == stored.address


@pytest.mark.asyncio
async def test_update_user_adds_address_under_fresh_id(service, make_user):
    stored = await service.create_user(make_user())
    incoming_address = _address()
    incoming = make_user().with_address(incoming_address)

    updated = await service.update_user(stored.id, incoming)

    assert updated.address is not None
    assert updated.address.id != incoming_address.id
    assert updated.address.user_id == stored.id


@pytest.mark.asyncio
async def test_update_missing_user_raises_not_found(service, make_user):
    with pytest.raises(NotFoundError):
        await service.update_user(UserId.generate(), make_user())


@pytest.mark.asyncio
async def test_update_user_rejects_none(service, make_user):
    stored = await service.create_user(make_user())

    with pytest.raises(ValidationError):
        await service.update_user(stored.id, None)


@pytest.mark.asyncio
async def test_update_user_rejects_blank_email(service, repository, make_user):
    stored = await service.create_user(make_user())
    incoming = User(id=UserId.generate(), name="X", email="", role=UserRole.STAFF)

    with pytest.raises(ValidationError) as exc_info:
        await service.update_user(stored.id, incoming)

    assert exc_info.value.message == "User email cannot be empty"
    assert repository.users[stored.id] == stored


# ============================================
# delete_user
# ============================================

@pytest.mark.asyncio
async def test_delete_user(service, repository, make_user):
    stored = await service.create_user(make_user())

    await service.delete_user(stored.id)

    assert stored.id not in repository.users
    with pytest.raises(NotFoundError):
        await service.get_user_by_id(stored.id)


@pytest.mark.asyncio
async def test_delete_missing_user_raises_not_found(service, repository):
    with pytest.raises(NotFoundError):
        await service.delete_user(UserId.generate())

    assert "delete_by_id" not in repository.calls
