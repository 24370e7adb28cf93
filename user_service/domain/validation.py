"""
Validation rules for users and addresses.

Pure functions: each either returns the checked value or raises
ValidationError. Entities call the single-field rules from their update
operations; validate_user/validate_address apply the whole rule set to an
aggregate built elsewhere (e.g. from an API payload).
"""

import re
from typing import TYPE_CHECKING, Any, Optional

from .exceptions import ValidationError
from .value_objects import UserRole, UserStatus

if TYPE_CHECKING:
    from .entities import Address, User

EMAIL_PATTERN = re.compile(r"^[\w\-.]+@([\w-]+\.)+[\w-]{2,4}$", re.ASCII)
PHONE_PATTERN = re.compile(r"^[\d\s\-()+]+$", re.ASCII)
MIN_PHONE_DIGITS = 7


def is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def is_valid_email(email: Optional[str]) -> bool:
    return email is not None and EMAIL_PATTERN.fullmatch(email) is not None


def is_valid_phone_number(phone_number: Optional[str]) -> bool:
    """Digits, spaces, dashes, parentheses and plus; at least 7 digits"""
    if phone_number is None or not PHONE_PATTERN.fullmatch(phone_number):
        return False
    digits = re.sub(r"[^0-9]", "", phone_number)
    return len(digits) >= MIN_PHONE_DIGITS


def require_not_blank(value: Optional[str], field: str, message: str) -> str:
    if is_blank(value):
        raise ValidationError(message, field=field)
    return value


def require_valid_email(email: Optional[str]) -> str:
    require_not_blank(email, "email", "Email cannot be null or empty")
    if not is_valid_email(email):
        raise ValidationError("Invalid email format", field="email")
    return email


def require_valid_phone_number(phone_number: Optional[str]) -> str:
    require_not_blank(phone_number, "phone_number", "Phone number cannot be null or empty")
    if not is_valid_phone_number(phone_number):
        raise ValidationError("Invalid phone number format", field="phone_number")
    return phone_number


def require_role(role: Any) -> UserRole:
    if role is None:
        raise ValidationError("User role cannot be null", field="role")
    try:
        return UserRole(role)
    except ValueError:
        raise ValidationError(
            f"Invalid user role: {role}. Must be one of {[r.value for r in UserRole]}",
            field="role",
        )


def require_status(status: Any) -> UserStatus:
    if status is None:
        raise ValidationError("User status cannot be null", field="status")
    try:
        return UserStatus(status)
    except ValueError:
        raise ValidationError(
            f"Invalid user status: {status}. Must be one of {[s.value for s in UserStatus]}",
            field="status",
        )


def validate_address(address: "Address") -> "Address":
    """
    Apply every address rule, failing on the first violation.

    Args:
        address: Address to check

    Returns:
        The same address, unchanged

    Raises:
        ValidationError: If any required field is blank or the phone
            number is malformed
    """
    if address is None:
        raise ValidationError("Address cannot be null", field="address")
    require_not_blank(address.line1, "address.line1", "Address line 1 cannot be null or empty")
    require_not_blank(address.city, "address.city", "City cannot be null or empty")
    require_not_blank(address.state, "address.state", "State cannot be null or empty")
    require_not_blank(address.postal_code, "address.postal_code", "Postal code cannot be null or empty")
    require_not_blank(address.country, "address.country", "Country cannot be null or empty")
    require_valid_phone_number(address.phone_number)
    return address


def validate_user(user: "User") -> "User":
    """
    Apply every user rule (and the address rules, if an address is attached).

    Raises:
        ValidationError: On the first violated rule
    """
    if user is None:
        raise ValidationError("User cannot be null", field="user")
    require_not_blank(user.name, "name", "User name cannot be null or empty")
    require_valid_email(user.email)
    require_role(user.role)
    require_status(user.status)
    if user.address is not None:
        validate_address(user.address)
    return user
