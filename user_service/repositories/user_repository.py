"""
User Repository implementation using SQLAlchemy.

Handles conversion between:
- Domain entities (User, Address) → ORM models (UserModel, AddressModel)
- ORM models → Domain entities
"""

from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
import logging

from user_service.core.interfaces import IUserRepository
from user_service.domain.entities import Address, User
from user_service.domain.exceptions import ConflictError, ValidationError
from user_service.domain.value_objects import AddressId, Page, PageRequest, UserId
from user_service.db.models import AddressModel, UserModel

logger = logging.getLogger(__name__)

# Columns declared nullable=False in db.models
REQUIRED_USER_FIELDS = ("name", "email", "role", "status")
REQUIRED_ADDRESS_FIELDS = ("line1", "city", "state", "postal_code", "country")


class UserRepository(IUserRepository):
    """
    SQLAlchemy implementation of IUserRepository.

    The repository flushes but never commits; transaction boundaries
    belong to the unit of work.
    """

    def __init__(self, db_session: AsyncSession):
        """
        Initialize repository with database session.

        Args:
            db_session: SQLAlchemy async session
        """
        self._db = db_session

    async def save(self, user: User) -> User:
        """
        Insert a new user or fully replace a stored one, address included.

        Args:
            user: Domain User aggregate

        Returns:
            Saved user

        Raises:
            ConflictError: If another user already holds this email
            ValidationError: If a non-nullable column would be stored as None
        """
        self._check_storable(user)

        try:
            db_user = await self._db.get(UserModel, str(user.id))

            if db_user is None:
                self._db.add(self._to_orm(user))
                action = "Inserted"
            else:
                await self._apply(db_user, user)
                action = "Replaced"

            await self._db.flush()

            logger.info(f"💾 {action} user {user.id}")
            return user

        except IntegrityError as e:
            if "email" in str(e.orig).lower():
                logger.warning(f"Email uniqueness violated while saving user {user.id}")
                raise ConflictError(f"User with email {user.email} already exists") from e
            logger.error(f"Failed to save user {user.id}: {e}")
            raise

    async def find_by_id(self, user_id: UserId) -> Optional[User]:
        result = await self._db.execute(
            select(UserModel).where(UserModel.id == str(user_id))
        )
        return self._optional_from_orm(result.scalar_one_or_none())

    async def find_by_email(self, email: str) -> Optional[User]:
        result = await self._db.execute(
            select(UserModel).where(UserModel.email == email)
        )
        return self._optional_from_orm(result.scalar_one_or_none())

    async def find_by_phone_number(self, phone_number: str) -> Optional[User]:
        """Find the user whose address carries this phone number"""
        result = await self._db.execute(
            select(UserModel)
            .join(AddressModel, AddressModel.user_id == UserModel.id)
            .where(AddressModel.phone_number == phone_number)
            .order_by(UserModel.created_at, UserModel.id)
            .limit(1)
        )
        return self._optional_from_orm(result.scalars().first())

    async def find_all(self, page_request: PageRequest) -> Page[User]:
        """
        Get one page of users ordered by creation time.

        Args:
            page_request: Zero-based page index and size

        Returns:
            Page of users with the overall total
        """
        total = await self._db.scalar(select(func.count()).select_from(UserModel))

        result = await self._db.execute(
            select(UserModel)
            .order_by(UserModel.created_at, UserModel.id)
            .offset(page_request.offset)
            .limit(page_request.size)
        )
        users = [self._from_orm(row) for row in result.scalars().all()]

        logger.debug(
            f"📖 Retrieved page {page_request.page} "
            f"({len(users)} of {total} users)"
        )

        return Page(
            content=users,
            size=page_request.size,
            number=page_request.page,
            total_elements=total or 0,
        )

    async def delete_by_id(self, user_id: UserId) -> None:
        db_user = await self._db.get(UserModel, str(user_id))
        if db_user is None:
            return

        # ORM cascade removes the owned address row
        await self._db.delete(db_user)
        await self._db.flush()
        logger.info(f"🗑️  Deleted user {user_id}")

    async def exists_by_id(self, user_id: UserId) -> bool:
        found = await self._db.scalar(
            select(UserModel.id).where(UserModel.id == str(user_id))
        )
        return found is not None

    @staticmethod
    def _check_storable(user: User) -> None:
        # Blank values are stored as given; None has no column to go to
        for field in REQUIRED_USER_FIELDS:
            if getattr(user, field) is None:
                raise ValidationError(f"User {field} cannot be null", field=field)
        if user.address is not None:
            for field in REQUIRED_ADDRESS_FIELDS:
                if getattr(user.address, field) is None:
                    raise ValidationError(f"Address {field} cannot be null", field=f"address.{field}")

    # Conversion helpers

    async def _apply(self, db_user: UserModel, user: User) -> None:
        """Copy every field of the domain user onto the stored row"""
        now = datetime.now(timezone.utc)

        db_user.name = user.name
        db_user.email = user.email
        db_user.role = user.role
        db_user.status = user.status
        db_user.updated_at = now
        db_user.version = (db_user.version or 0) + 1

        address = user.address
        if address is None:
            db_user.address = None
            return

        if db_user.address is not None and db_user.address.id != str(address.id):
            # Drop the old row first: addresses.user_id is unique
            db_user.address = None
            await self._db.flush()

        if db_user.address is None:
            db_user.address = self._address_to_orm(address, user.id, now)
        else:
            self._copy_address_fields(db_user.address, address)
            db_user.address.updated_at = now

    def _to_orm(self, user: User) -> UserModel:
        now = datetime.now(timezone.utc)
        address = None
        if user.address is not None:
            address = self._address_to_orm(user.address, user.id, now)

        return UserModel(
            id=str(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            status=user.status,
            created_at=now,
            updated_at=now,
            version=0,
            address=address,
        )

    def _address_to_orm(self, address: Address, user_id: UserId, now: datetime) -> AddressModel:
        db_address = AddressModel(
            id=str(address.id),
            user_id=str(user_id),
            created_at=now,
            updated_at=now,
        )
        self._copy_address_fields(db_address, address)
        return db_address

    @staticmethod
    def _copy_address_fields(db_address: AddressModel, address: Address) -> None:
        db_address.line1 = address.line1
        db_address.line2 = address.line2
        db_address.city = address.city
        db_address.state = address.state
        db_address.postal_code = address.postal_code
        db_address.country = address.country
        db_address.phone_number = address.phone_number

    def _optional_from_orm(self, db_user: Optional[UserModel]) -> Optional[User]:
        return self._from_orm(db_user) if db_user is not None else None

    @staticmethod
    def _from_orm(db_user: UserModel) -> User:
        user_id = UserId.from_string(db_user.id)
        address = None
        if db_user.address is not None:
            db_address = db_user.address
            address = Address(
                id=AddressId.from_string(db_address.id),
                user_id=user_id,
                line1=db_address.line1,
                line2=db_address.line2,
                city=db_address.city,
                state=db_address.state,
                postal_code=db_address.postal_code,
                country=db_address.country,
                phone_number=db_address.phone_number,
            )

        return User(
            id=user_id,
            name=db_user.name,
            email=db_user.email,
            role=db_user.role,
            status=db_user.status,
            address=address,
        )
