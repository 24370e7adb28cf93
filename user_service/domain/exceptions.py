"""
Domain exceptions.

Every failure the domain core reports is one of three kinds, tagged by
``code`` so outer layers can translate them without isinstance chains:

- ValidationError: a field breaks a format, non-blank or non-null rule
- ConflictError: a uniqueness rule is violated (email already in use)
- NotFoundError: the lookup target does not exist
"""

from typing import Optional


class UserDomainError(Exception):
    """Base exception for domain layer errors"""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(UserDomainError):
    """Raised when a field violates a validation rule"""

    code = "VALIDATION"

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        super().__init__(message)


class ConflictError(UserDomainError):
    """Raised when an operation would break a uniqueness rule"""

    code = "CONFLICT"


class NotFoundError(UserDomainError):
    """Raised when a user doesn't exist"""

    code = "NOT_FOUND"

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)
