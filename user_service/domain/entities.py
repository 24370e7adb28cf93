"""
Domain Entities - Rich business objects with identity and lifecycle.

Entities differ from value objects in that they have:
- Identity (tracked by ID, not by value)
- A lifecycle (created, changed through explicit operations, deleted)
- Business logic (methods that enforce invariants)

Entities here are immutable: every change operation returns a new value
with one field replaced, so the ID of an entity can never drift.

The User entity is an aggregate root - it owns at most one Address.
"""

from dataclasses import dataclass, replace
from typing import Optional, Union

from . import validation
from .exceptions import ValidationError
from .value_objects import AddressId, UserId, UserRole, UserStatus


@dataclass(frozen=True)
class Address:
    """
    Address entity - part of the User aggregate.

    Addresses are owned by exactly one user and cannot exist independently.
    They are deleted when the owning user is deleted (CASCADE).
    The owner link is the user's ID, not an object reference.
    """

    id: AddressId
    line1: Optional[str]
    city: Optional[str]
    state: Optional[str]
    postal_code: Optional[str]
    country: Optional[str]
    phone_number: Optional[str]
    line2: Optional[str] = None
    user_id: Optional[UserId] = None

    @classmethod
    def create(
        cls,
        user: Union["User", UserId, None],
        line1: Optional[str],
        line2: Optional[str],
        city: Optional[str],
        state: Optional[str],
        postal_code: Optional[str],
        country: Optional[str],
        phone_number: Optional[str],
    ) -> "Address":
        """
        Create an address with a fresh ID, storing fields verbatim.

        No validation happens here; use the with_* operations or
        validation.validate_address for that.

        Args:
            user: Owning user (or its ID); None when the owner is not known yet
        """
        user_id = user.id if isinstance(user, User) else user
        return cls(
            id=AddressId.generate(),
            user_id=user_id,
            line1=line1,
            line2=line2,
            city=city,
            state=state,
            postal_code=postal_code,
            country=country,
            phone_number=phone_number,
        )

    def initialize(self, user_id: Optional[UserId] = None) -> "Address":
        """Return a copy with a freshly generated ID, linked to user_id"""
        return replace(self, id=AddressId.generate(), user_id=user_id)

    # Change operations (each returns a new Address)

    def with_user(self, user_id: Optional[UserId]) -> "Address":
        return replace(self, user_id=user_id)

    def with_line1(self, line1: Optional[str]) -> "Address":
        validation.require_not_blank(line1, "line1", "Address line 1 cannot be null or empty")
        return replace(self, line1=line1)

    def with_line2(self, line2: Optional[str]) -> "Address":
        # Optional field: stored as given
        return replace(self, line2=line2)

    def with_city(self, city: Optional[str]) -> "Address":
        validation.require_not_blank(city, "city", "City cannot be null or empty")
        return replace(self, city=city)

    def with_state(self, state: Optional[str]) -> "Address":
        validation.require_not_blank(state, "state", "State cannot be null or empty")
        return replace(self, state=state)

    def with_postal_code(self, postal_code: Optional[str]) -> "Address":
        validation.require_not_blank(postal_code, "postal_code", "Postal code cannot be null or empty")
        return replace(self, postal_code=postal_code)

    def with_country(self, country: Optional[str]) -> "Address":
        validation.require_not_blank(country, "country", "Country cannot be null or empty")
        return replace(self, country=country)

    def with_phone_number(self, phone_number: Optional[str]) -> "Address":
        validation.require_valid_phone_number(phone_number)
        return replace(self, phone_number=phone_number)

    def is_valid(self) -> bool:
        """
        Check that every required field is present and non-blank.

        Only blankness is checked; phone number format is not re-validated.
        """
        required = (
            self.line1,
            self.city,
            self.state,
            self.postal_code,
            self.country,
            self.phone_number,
        )
        return not any(validation.is_blank(value) for value in required)

    @property
    def formatted_address(self) -> str:
        """Single-line form: line1[, line2], city, state postal_code, country"""
        parts = [self.line1]
        if not validation.is_blank(self.line2):
            parts.append(self.line2)
        parts.append(self.city)
        parts.append(f"{self.state} {self.postal_code}")
        parts.append(self.country)
        return ", ".join(str(part) for part in parts)

    def __repr__(self) -> str:
        return f"Address(id={self.id}, user={self.user_id}, city={self.city})"


@dataclass(frozen=True)
class User:
    """
    User aggregate root.

    Invariants (business rules enforced by domain model):
    1. ID is generated on creation and never changes
    2. Name and email are non-blank; email matches the email pattern
    3. Role and status are always members of their enums
    4. The address, if any, is owned by this user

    Email uniqueness is an orchestration rule (see UserDomainService),
    not something a single entity can check.
    """

    id: UserId
    name: str
    email: str
    role: UserRole
    status: UserStatus = UserStatus.ACTIVE
    address: Optional[Address] = None

    @classmethod
    def create(cls, name: Optional[str], email: Optional[str], role: Optional[UserRole]) -> "User":
        """
        Create a new active user with a fresh ID.

        Raises:
            ValidationError: If name is blank, email is blank or malformed,
                or role is missing
        """
        validation.require_not_blank(name, "name", "User name cannot be null or empty")
        if validation.is_blank(email) or not validation.is_valid_email(email):
            raise ValidationError("Invalid email format", field="email")
        role = validation.require_role(role)

        return cls(
            id=UserId.generate(),
            name=name,
            email=email,
            role=role,
            status=UserStatus.ACTIVE,
        )

    def initialize(self) -> "User":
        """
        Return a copy with a fresh identity and ACTIVE status.

        An attached address gets its own fresh ID and is linked to the
        new user ID.
        """
        user_id = UserId.generate()
        address = self.address.initialize(user_id) if self.address is not None else None
        return replace(self, id=user_id, status=UserStatus.ACTIVE, address=address)

    # Status transitions (unconditional, no terminal state)

    def activate(self) -> "User":
        return replace(self, status=UserStatus.ACTIVE)

    def deactivate(self) -> "User":
        return replace(self, status=UserStatus.INACTIVE)

    def suspend(self) -> "User":
        return replace(self, status=UserStatus.SUSPENDED)

    # Field changes (each returns a new User)

    def with_name(self, name: Optional[str]) -> "User":
        validation.require_not_blank(name, "name", "User name cannot be null or empty")
        return replace(self, name=name)

    def with_email(self, email: Optional[str]) -> "User":
        validation.require_valid_email(email)
        return replace(self, email=email)

    def with_role(self, role: Optional[UserRole]) -> "User":
        return replace(self, role=validation.require_role(role))

    def with_status(self, status: Optional[UserStatus]) -> "User":
        return replace(self, status=validation.require_status(status))

    def with_address(self, address: Optional[Address]) -> "User":
        if address is None:
            raise ValidationError("Address cannot be null", field="address")
        return replace(self, address=address)

    def is_active(self) -> bool:
        return self.status == UserStatus.ACTIVE

    def is_suspended(self) -> bool:
        return self.status == UserStatus.SUSPENDED

    @property
    def phone_number(self) -> Optional[str]:
        """Phone number of the owned address, if any"""
        return self.address.phone_number if self.address is not None else None

    def __repr__(self) -> str:
        address_info = f", address={self.address.id}" if self.address else ""
        return (
            f"User(id={self.id}, role={self.role.value}, "
            f"status={self.status.value}{address_info})"
        )
