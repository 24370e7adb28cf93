"""
User Application Service - use-case layer around UserDomainService.

Each use case runs inside its own unit of work:
- read-only units for lookups and listing
- read-write units for create, update, delete

Lookups by ID, email and phone are served from the user cache when
possible. Writes refresh or evict cache entries through post-commit hooks,
so a rolled-back transaction never leaves the cache ahead of the database.
Reads fill the cache only if no write committed while they ran.
"""

from typing import Callable, Optional
import logging

from user_service.domain.entities import User
from user_service.domain.services import UserDomainService
from user_service.domain.unit_of_work import AbstractUnitOfWork, get_unit_of_work
from user_service.domain.value_objects import Page, PageRequest, UserId, UserStatus
from user_service.domain.validation import require_status
from user_service.infrastructure.cache_service import UserCache

logger = logging.getLogger(__name__)

UnitOfWorkFactory = Callable[..., AbstractUnitOfWork]


class UserApplicationService:
    """Transactional, cached entry point for user management use cases"""

    def __init__(
        self,
        cache: Optional[UserCache] = None,
        uow_factory: UnitOfWorkFactory = get_unit_of_work,
    ):
        """
        Args:
            cache: User cache; None disables caching
            uow_factory: Callable taking read_only and returning a unit of work
        """
        self._cache = cache
        self._uow_factory = uow_factory

    async def create_user(self, candidate: User) -> User:
        logger.info(f"Creating new user with email: {candidate.email if candidate else None}")

        async with self._uow_factory(read_only=False) as uow:
            user = await UserDomainService(uow.users).create_user(candidate)
            self._cache_after_commit(uow, user)

        logger.info(f"User created with ID: {user.id}")
        return user

    async def get_user_by_id(self, user_id: UserId) -> User:
        if self._cache is not None:
            cached = await self._cache.get_by_id(user_id)
            if cached is not None:
                logger.debug(f"Cache hit for user {user_id}")
                return cached

        generation = self._cache_generation()
        async with self._uow_factory(read_only=True) as uow:
            user = await UserDomainService(uow.users).get_user_by_id(user_id)

        await self._remember(user, generation)
        return user

    async def get_user_by_email(self, email: str) -> User:
        if self._cache is not None:
            cached = await self._cache.get_by_email(email)
            if cached is not None:
                logger.debug(f"Cache hit for email {email}")
                return cached

        generation = self._cache_generation()
        async with self._uow_factory(read_only=True) as uow:
            user = await UserDomainService(uow.users).get_user_by_email(email)

        await self._remember(user, generation)
        return user

    async def get_user_by_phone_number(self, phone_number: str) -> User:
        """Earliest-created user whose address carries phone_number"""
        if self._cache is not None:
            cached = await self._cache.get_by_phone_number(phone_number)
            if cached is not None:
                logger.debug(f"Cache hit for phone number {phone_number}")
                return cached

        generation = self._cache_generation()
        async with self._uow_factory(read_only=True) as uow:
            user = await UserDomainService(uow.users).get_user_by_phone_number(phone_number)

        await self._remember(user, generation, phone_number=phone_number)
        return user

    async def get_all_users(self, page_request: PageRequest) -> Page[User]:
        async with self._uow_factory(read_only=True) as uow:
            return await UserDomainService(uow.users).get_all_users(page_request)

    async def update_user(self, user_id: UserId, incoming: User) -> User:
        logger.info(f"Updating user with ID: {user_id}")

        async with self._uow_factory(read_only=False) as uow:
            user = await UserDomainService(uow.users).update_user(user_id, incoming)
            self._cache_after_commit(uow, user)

        logger.info(f"User updated with email: {user.email}")
        return user

    async def change_status(self, user_id: UserId, status: UserStatus) -> User:
        """
        Move a user to another status through the full-replace update.

        Raises:
            ValidationError: If status is not a UserStatus
            NotFoundError: If no user exists with user_id
        """
        status = require_status(status)
        transitions = {
            UserStatus.ACTIVE: User.activate,
            UserStatus.INACTIVE: User.deactivate,
            UserStatus.SUSPENDED: User.suspend,
        }

        async with self._uow_factory(read_only=False) as uow:
            service = UserDomainService(uow.users)
            current = await service.get_user_by_id(user_id)
            user = await service.update_user(user_id, transitions[status](current))
            self._cache_after_commit(uow, user)

        logger.info(f"User {user_id} is now {user.status.value}")
        return user

    async def delete_user(self, user_id: UserId) -> None:
        logger.info(f"Deleting user with ID: {user_id}")

        async with self._uow_factory(read_only=False) as uow:
            await UserDomainService(uow.users).delete_user(user_id)
            if self._cache is not None:
                cache = self._cache
                uow.add_post_commit_hook(lambda: cache.evict(user_id))

        logger.info(f"User deleted with ID: {user_id}")

    def _cache_after_commit(self, uow: AbstractUnitOfWork, user: User) -> None:
        if self._cache is not None:
            cache = self._cache
            uow.add_post_commit_hook(lambda: cache.put(user))

    def _cache_generation(self) -> int:
        return self._cache.generation if self._cache is not None else 0

    async def _remember(self, user: User, generation: int, phone_number: Optional[str] = None) -> None:
        if self._cache is not None:
            await self._cache.remember(user, generation, phone_number=phone_number)
