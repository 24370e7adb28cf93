"""
SQLAlchemy ORM models for database tables.

Audit columns (created_at, updated_at, version) live only here; the
domain entities never see them.
"""
from sqlalchemy import Column, String, DateTime, Index, ForeignKey, Integer, Enum
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

from user_service.domain.value_objects import UserRole, UserStatus

Base = declarative_base()


class UserModel(Base):
    """
    Users table - one row per platform user.

    The unique constraint on email is the storage-level backstop for the
    email uniqueness rule checked by UserDomainService.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True)  # UUID string
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False)
    role = Column(Enum(UserRole, native_enum=False, length=20), nullable=False)
    status = Column(Enum(UserStatus, native_enum=False, length=20), nullable=False, default=UserStatus.ACTIVE)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())
    version = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index('idx_users_created_at', 'created_at'),
    )

    # Relationships (one-to-one, owned)
    address = relationship(
        "AddressModel",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class AddressModel(Base):
    """
    Addresses table - at most one address per user.

    Rows are owned by their user and removed with it (ORM cascade plus
    ON DELETE CASCADE).
    """
    __tablename__ = "addresses"

    id = Column(String(36), primary_key=True)  # UUID string, independent of user ID
    user_id = Column(String(36), ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False)
    line1 = Column("address_line1", String(100), nullable=False)
    line2 = Column("address_line2", String(100), nullable=True)
    city = Column(String(50), nullable=False)
    state = Column(String(50), nullable=False)
    postal_code = Column(String(20), nullable=False)
    country = Column(String(50), nullable=False)
    phone_number = Column(String(20), nullable=True)
    created_at = Column(DateTime, nullable=False, default=func.now())
    updated_at = Column(DateTime, nullable=False, default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index('idx_addresses_phone_number', 'phone_number'),
    )

    # Relationships
    user = relationship("UserModel", back_populates="address")
