"""
Value Objects for type-safe identity, classification and paging.

Value objects are immutable, self-validating, and enforce business rules.
They prevent ID type confusion between:
- User IDs (aggregate root identity)
- Address IDs (owned entity identity, independent of the user ID)
"""

import enum
import math
import uuid
from dataclasses import dataclass, field
from typing import Generic, List, TypeVar, Union

from .exceptions import ValidationError

T = TypeVar('T')


@dataclass(frozen=True)
class UserId:
    """
    User identifier value object.

    Format: UUID (random, version 4)
    Example: 550e8400-e29b-41d4-a716-446655440000

    Generated server-side when a user is created and never changed afterwards.
    """

    value: uuid.UUID

    def __post_init__(self):
        if not isinstance(self.value, uuid.UUID):
            raise ValidationError(
                f"Invalid UserId: {self.value!r}. Must be a UUID.",
                field="id",
            )

    @classmethod
    def generate(cls) -> "UserId":
        return cls(uuid.uuid4())

    @classmethod
    def from_string(cls, value: Union[str, uuid.UUID]) -> "UserId":
        """
        Parse a user ID from its string form.

        Raises:
            ValidationError: If the value is not a valid UUID
        """
        if isinstance(value, uuid.UUID):
            return cls(value)
        try:
            return cls(uuid.UUID(str(value)))
        except ValueError:
            raise ValidationError(
                f"Invalid UserId format: {value}. Expected a UUID.",
                field="id",
            )

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"UserId('{self.value}')"


@dataclass(frozen=True)
class AddressId:
    """
    Address identifier value object.

    Generated independently of the owning user's ID. Reused across
    full-replace updates so the stored address keeps its identity.
    """

    value: uuid.UUID

    def __post_init__(self):
        if not isinstance(self.value, uuid.UUID):
            raise ValidationError(
                f"Invalid AddressId: {self.value!r}. Must be a UUID.",
                field="address.id",
            )

    @classmethod
    def generate(cls) -> "AddressId":
        return cls(uuid.uuid4())

    @classmethod
    def from_string(cls, value: Union[str, uuid.UUID]) -> "AddressId":
        if isinstance(value, uuid.UUID):
            return cls(value)
        try:
            return cls(uuid.UUID(str(value)))
        except ValueError:
            raise ValidationError(
                f"Invalid AddressId format: {value}. Expected a UUID.",
                field="address.id",
            )

    def __str__(self) -> str:
        return str(self.value)

    def __repr__(self) -> str:
        return f"AddressId('{self.value}')"


class UserRole(str, enum.Enum):
    """Role a user holds on the platform"""
    ADMIN = "ADMIN"  # Full system access and management
    ORGANIZER = "ORGANIZER"  # Creates and manages events
    STAFF = "STAFF"  # Limited administrative privileges
    ATTENDEE = "ATTENDEE"  # Attends events and purchases tickets


class UserStatus(str, enum.Enum):
    """Account status controlling platform access"""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"


@dataclass(frozen=True)
class PageRequest:
    """
    Page selection for listing users.

    Page numbers are zero-based. The page request owns its own bounds;
    services pass it through untouched.
    """

    page: int = 0
    size: int = 20
    max_size: int = field(default=100, repr=False, compare=False)

    def __post_init__(self):
        if self.page < 0:
            raise ValidationError(
                f"Page index must be >= 0, got {self.page}",
                field="page",
            )
        if self.size < 1:
            raise ValidationError(
                f"Page size must be >= 1, got {self.size}",
                field="size",
            )
        if self.size > self.max_size:
            raise ValidationError(
                f"Page size must be <= {self.max_size}, got {self.size}",
                field="size",
            )

    @property
    def offset(self) -> int:
        return self.page * self.size


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of results plus the totals needed to navigate the rest"""

    content: List[T]
    size: int
    number: int
    total_elements: int

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)

    @property
    def has_next(self) -> bool:
        return self.number + 1 < self.total_pages

    def __repr__(self) -> str:
        return (
            f"Page(number={self.number}, size={self.size}, "
            f"items={len(self.content)}, total={self.total_elements})"
        )
