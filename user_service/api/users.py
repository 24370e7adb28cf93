"""
User Management API - CRUD endpoints for platform users.

Request payloads are validated twice: pydantic checks shape and types
(422 on failure), then the mapper builds domain values through the entity
factories and validation rules (400 on failure).
"""
from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Generic, List, Optional, TypeVar
import uuid
import logging

from user_service.application.user_application_service import UserApplicationService
from user_service.config import settings
from user_service.domain.entities import Address, User
from user_service.domain.validation import is_blank, is_valid_email, is_valid_phone_number, validate_user
from user_service.domain.value_objects import PageRequest, UserId, UserRole, UserStatus
from user_service.infrastructure.cache_service import user_cache

logger = logging.getLogger(__name__)

router = APIRouter()

T = TypeVar("T")


# ============================================
# Pydantic Models
# ============================================

def _not_blank(value: str, label: str) -> str:
    if is_blank(value):
        raise ValueError(f"{label} is required")
    return value


class AddressRequest(BaseModel):
    """Postal address attached to a user"""
    line1: str = Field(..., description="Primary address line (street address)", examples=["123 Main Street"])
    line2: Optional[str] = Field(None, description="Apartment, suite, unit, etc.", examples=["Apt 4B"])
    city: str = Field(..., description="City name", examples=["New York"])
    state: str = Field(..., description="State or province", examples=["NY"])
    postal_code: str = Field(..., description="Postal or ZIP code", examples=["10001"])
    country: str = Field(..., description="Country name", examples=["United States"])
    phone_number: str = Field(..., description="Phone number with country code", examples=["+1-555-123-4567"])

    @field_validator("line1", "city", "state", "postal_code", "country")
    @classmethod
    def required_not_blank(cls, value: str, info) -> str:
        return _not_blank(value, info.field_name.replace("_", " ").capitalize())

    @field_validator("phone_number")
    @classmethod
    def valid_phone_number(cls, value: str) -> str:
        _not_blank(value, "Phone number")
        if not is_valid_phone_number(value):
            raise ValueError("Invalid phone number format")
        return value


class UserRequest(BaseModel):
    """Create/replace payload - every field replaces the stored value on update"""
    name: str = Field(..., description="User's full name", examples=["John Doe"])
    email: str = Field(..., description="Email address, unique across the system", examples=["john.doe@example.com"])
    role: UserRole = Field(..., description="User's role on the platform")
    status: UserStatus = Field(..., description="Current account status")
    address: Optional[AddressRequest] = Field(None, description="User's address")

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        return _not_blank(value, "Name")

    @field_validator("email")
    @classmethod
    def valid_email(cls, value: str) -> str:
        _not_blank(value, "Email")
        if not is_valid_email(value):
            raise ValueError("Invalid email format")
        return value


class AddressResponse(BaseModel):
    id: str
    line1: str
    line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str
    phone_number: Optional[str] = None
    formatted_address: str

    @classmethod
    def from_domain(cls, address: Address) -> "AddressResponse":
        return cls(
            id=str(address.id),
            line1=address.line1,
            line2=address.line2,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
            phone_number=address.phone_number,
            formatted_address=address.formatted_address,
        )


class UserResponse(BaseModel):
    """User details response"""
    model_config = ConfigDict(use_enum_values=True)

    id: str
    name: str
    email: str
    role: UserRole
    status: UserStatus
    address: Optional[AddressResponse] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserResponse":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            role=user.role,
            status=user.status,
            address=AddressResponse.from_domain(user.address) if user.address else None,
        )


class PageMetadata(BaseModel):
    size: int = Field(..., description="Number of items per page")
    number: int = Field(..., description="Current page number (zero-based)")
    total_elements: int = Field(..., description="Total number of items across all pages")
    total_pages: int = Field(..., description="Total number of pages")


class PagedResponse(BaseModel, Generic[T]):
    content: List[T]
    metadata: PageMetadata


# ============================================
# Mapping and dependencies
# ============================================

def to_domain(request: UserRequest) -> User:
    """
    Build a domain User from a request payload.

    Raises:
        ValidationError: If the payload breaks a domain rule
    """
    user = User.create(request.name, request.email, request.role).with_status(request.status)
    if request.address is not None:
        address = request.address
        user = user.with_address(Address.create(
            user,
            line1=address.line1,
            line2=address.line2,
            city=address.city,
            state=address.state,
            postal_code=address.postal_code,
            country=address.country,
            phone_number=address.phone_number,
        ))
    return validate_user(user)


def get_user_application_service() -> UserApplicationService:
    """Dependency: application service over the configured database and shared cache"""
    return UserApplicationService(cache=user_cache)


# ============================================
# Endpoints
# ============================================

@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserRequest,
    service: UserApplicationService = Depends(get_user_application_service)
):
    """
    Create a new user.

    The email must be unique across the system (409 otherwise). The new
    user always starts ACTIVE, whatever status the payload carries.
    """
    logger.info(f"Creating user with email: {request.email}")
    user = await service.create_user(to_domain(request))
    return UserResponse.from_domain(user)


@router.get("/users", response_model=PagedResponse[UserResponse])
async def list_users(
    page: int = Query(0, ge=0, description="Zero-based page index"),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size, description="Page size"),
    service: UserApplicationService = Depends(get_user_application_service)
):
    """List users, oldest first"""
    result = await service.get_all_users(
        PageRequest(page=page, size=size, max_size=settings.max_page_size)
    )
    return PagedResponse[UserResponse](
        content=[UserResponse.from_domain(user) for user in result.content],
        metadata=PageMetadata(
            size=result.size,
            number=result.number,
            total_elements=result.total_elements,
            total_pages=result.total_pages,
        ),
    )


@router.get("/users/by-email/{email}", response_model=UserResponse)
async def get_user_by_email(
    email: str,
    service: UserApplicationService = Depends(get_user_application_service)
):
    user = await service.get_user_by_email(email)
    return UserResponse.from_domain(user)


@router.get("/users/by-phone/{phone_number}", response_model=UserResponse)
async def get_user_by_phone_number(
    phone_number: str,
    service: UserApplicationService = Depends(get_user_application_service)
):
    user = await service.get_user_by_phone_number(phone_number)
    return UserResponse.from_domain(user)


@router.get("/users/{user_id}", response_model=UserResponse)
async def get_user(
    user_id: uuid.UUID,
    service: UserApplicationService = Depends(get_user_application_service)
):
    user = await service.get_user_by_id(UserId(user_id))
    return UserResponse.from_domain(user)


@router.put("/users/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: uuid.UUID,
    request: UserRequest,
    service: UserApplicationService = Depends(get_user_application_service)
):
    """
    Replace a user's data.

    All fields in the request replace the stored values. The user ID and
    the stored address ID are kept. Omitting the address leaves the stored
    address unchanged.
    """
    logger.info(f"Updating user {user_id}")
    user = await service.update_user(UserId(user_id), to_domain(request))
    return UserResponse.from_domain(user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: uuid.UUID,
    service: UserApplicationService = Depends(get_user_application_service)
):
    """Permanently delete a user and its address"""
    await service.delete_user(UserId(user_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
