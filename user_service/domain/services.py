"""
User Domain Service - orchestrates the user lifecycle against a repository.

Rules enforced here (rather than inside the entities):
- Email uniqueness on creation
- Existence checks before read/update/delete
- Full-replace merge of incoming data onto the stored aggregate
"""

from dataclasses import replace
from typing import Optional
import logging

from user_service.core.interfaces import IUserRepository
from .entities import Address, User
from .exceptions import ConflictError, NotFoundError, ValidationError
from .validation import is_blank
from .value_objects import Page, PageRequest, UserId

logger = logging.getLogger(__name__)


class UserDomainService:
    """Service for creating, reading, updating and deleting users"""

    def __init__(self, repository: IUserRepository):
        self._repository = repository

    async def create_user(self, candidate: Optional[User]) -> User:
        """
        Create a new user.

        The candidate gets a fresh ID and ACTIVE status; an attached
        address gets its own fresh ID and is linked to the new user.

        Args:
            candidate: User built by the caller (e.g. via User.create)

        Returns:
            The stored user

        Raises:
            ValidationError: If candidate is missing or has a blank email
            ConflictError: If a user with this email already exists
        """
        self._validate_user(candidate)
        logger.info(f"Creating user: {candidate.email}")

        user = candidate.initialize()

        if await self._repository.find_by_email(user.email) is not None:
            logger.warning(f"User with email {user.email} already exists")
            raise ConflictError(f"User with email {user.email} already exists")

        saved = await self._repository.save(user)
        logger.info(f"Created user: {saved.id}")
        return saved

    async def get_user_by_id(self, user_id: UserId) -> User:
        logger.debug(f"Getting user by ID: {user_id}")
        user = await self._repository.find_by_id(user_id)
        if user is None:
            raise NotFoundError(f"User not found with ID: {user_id}", key=str(user_id))
        return user

    async def get_user_by_email(self, email: str) -> User:
        logger.debug(f"Getting user by email: {email}")
        user = await self._repository.find_by_email(email)
        if user is None:
            raise NotFoundError(f"User not found with email: {email}", key=email)
        return user

    async def get_user_by_phone_number(self, phone_number: str) -> User:
        logger.debug(f"Getting user by phone number: {phone_number}")
        user = await self._repository.find_by_phone_number(phone_number)
        if user is None:
            raise NotFoundError(
                f"User not found with phone number: {phone_number}",
                key=phone_number,
            )
        return user

    async def get_all_users(self, page_request: PageRequest) -> Page[User]:
        logger.debug(f"Getting all users with {page_request}")
        return await self._repository.find_all(page_request)

    async def update_user(self, user_id: UserId, incoming: User) -> User:
        """
        Replace a stored user's data with the incoming values.

        The stored user is the authority for the user ID and the address ID.
        Name, email, role, status and every address field come from incoming,
        even blank ones.

        Address merge:
        - both present: stored address ID and owner link, incoming fields
        - only incoming present: incoming fields under a fresh address ID
        - incoming absent: stored address kept as is

        Raises:
            NotFoundError: If no user exists with user_id
            ValidationError: If the rebuilt user has a blank email
        """
        logger.info(f"Updating user: {user_id}")

        existing = await self.get_user_by_id(user_id)
        if incoming is None:
            raise ValidationError("User cannot be null", field="user")

        updated = User(
            id=existing.id,
            name=incoming.name,
            email=incoming.email,
            role=incoming.role,
            status=incoming.status,
            address=self._merge_address(existing, incoming.address),
        )
        self._validate_user(updated)

        saved = await self._repository.save(updated)
        logger.info(f"Updated user: {saved.id}")
        return saved

    async def delete_user(self, user_id: UserId) -> None:
        logger.info(f"Deleting user with ID: {user_id}")

        user = await self.get_user_by_id(user_id)
        await self._repository.delete_by_id(user.id)

        logger.info(f"User with ID: {user_id} successfully deleted")

    @staticmethod
    def _merge_address(existing: User, incoming: Optional[Address]) -> Optional[Address]:
        if incoming is None:
            return existing.address

        if existing.address is None:
            return incoming.initialize(existing.id)

        return replace(
            incoming,
            id=existing.address.id,
            user_id=existing.id,
        )

    @staticmethod
    def _validate_user(user: Optional[User]) -> None:
        if user is None:
            raise ValidationError("User cannot be null", field="user")
        if is_blank(user.email):
            raise ValidationError("User email cannot be empty", field="email")
