"""
Core interfaces for the user service.

The domain depends on these ports; infrastructure provides the adapters
(see user_service/repositories/).
"""
from abc import ABC, abstractmethod
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from user_service.domain.entities import User
    from user_service.domain.value_objects import Page, PageRequest, UserId


class IUserRepository(ABC):
    """
    Interface for user storage and retrieval.

    Implementations must handle:
    - Persisting the whole aggregate (user + owned address) atomically
    - Replacing a stored aggregate in full on save
    - Cascading address removal when the user is deleted
    """

    @abstractmethod
    async def save(self, user: 'User') -> 'User':
        """
        Insert or fully replace a user with its address.

        Args:
            user: Domain User aggregate

        Returns:
            The persisted representation

        Raises:
            ConflictError: If the storage uniqueness constraint on email fails
            ValidationError: If a required field is None (blank strings are stored)
        """
        pass

    @abstractmethod
    async def find_by_id(self, user_id: 'UserId') -> Optional['User']:
        """Get user by ID, None if absent"""
        pass

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional['User']:
        """Get user by email address, None if absent"""
        pass

    @abstractmethod
    async def find_by_phone_number(self, phone_number: str) -> Optional['User']:
        """Get user whose address carries this phone number, None if absent"""
        pass

    @abstractmethod
    async def find_all(self, page_request: 'PageRequest') -> 'Page[User]':
        """
        Get one page of users.

        Args:
            page_request: Zero-based page index and page size

        Returns:
            Page with items and total element count
        """
        pass

    @abstractmethod
    async def delete_by_id(self, user_id: 'UserId') -> None:
        """Delete user (and its address) by ID"""
        pass

    @abstractmethod
    async def exists_by_id(self, user_id: 'UserId') -> bool:
        """Check whether a user with this ID is stored"""
        pass
