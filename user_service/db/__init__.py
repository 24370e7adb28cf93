"""Database package - all database-related code."""
from user_service.db.connection import init_db, close_db, get_session_maker
from user_service.db.models import Base, UserModel, AddressModel

__all__ = [
    "init_db",
    "close_db",
    "get_session_maker",
    "Base",
    "UserModel",
    "AddressModel",
]
