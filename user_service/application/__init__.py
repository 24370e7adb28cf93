"""
Application layer - use cases built on the domain.

Wraps the domain service with transaction scopes and caching.
"""

from .user_application_service import UserApplicationService

__all__ = ["UserApplicationService"]
