"""Pydantic schemas for API request/response serialization."""

import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from buildsmart.core.roles import Permission, Role

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(email: str) -> str:
    return email.strip().lower()


class CamelModel(BaseModel):
    """Base model that speaks camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---- Tokens / identity ----
class TokenClaims(BaseModel):
    sub: str
    email: str
    role: Role
    permissions: List[Permission] = []
    iat: Optional[int] = None
    exp: int


class CurrentUser(BaseModel):
    """Identity attached to a request, rebuilt from verified token claims."""

    id: str
    email: str
    role: Role
    permissions: List[Permission] = []
    expires_at: Optional[datetime] = None

    @classmethod
    def from_claims(cls, claims: TokenClaims) -> "CurrentUser":
        return cls(
            id=claims.sub,
            email=claims.email,
            role=claims.role,
            permissions=claims.permissions,
            expires_at=datetime.fromtimestamp(claims.exp, tz=timezone.utc),
        )

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


# ---- User records ----
class UserRecord(BaseModel):
    """Credential record plus profile, as held by a user repository."""

    model_config = ConfigDict(from_attributes=True, validate_assignment=True)

    id: str
    name: str
    email: str
    hashed_password: str
    role: Role = Role.WORKER
    site: str
    avatar: Optional[str] = None
    permissions: List[Permission] = []
    employee_id: Optional[str] = None
    department: str = "Construction"
    phone: Optional[str] = None
    is_active: bool = True
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserOut(CamelModel):
    """Client-facing user; never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    email: str
    role: Role
    site: str
    avatar: Optional[str] = None
    permissions: List[Permission] = []
    employee_id: Optional[str] = None
    department: Optional[str] = None
    phone: Optional[str] = None
    is_active: bool = True
    last_login: Optional[datetime] = Field(
        default=None,
        validation_alias=AliasChoices("last_login_at", "lastLogin", "last_login"),
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ---- Auth ----
class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    role: Optional[Role] = None
    site: Optional[str] = None
    employee_id: Optional[str] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        v = normalize_email(v)
        if not EMAIL_RE.match(v):
            raise ValueError("Invalid email format")
        return v


class DemoLoginRequest(BaseModel):
    role: Optional[str] = None


class AuthResponse(BaseModel):
    success: bool = True
    token: str
    user: UserOut
    message: Optional[str] = None


class TokenResponse(BaseModel):
    success: bool = True
    token: str


class UserResponse(BaseModel):
    success: bool = True
    user: UserOut
    message: Optional[str] = None


# ---- Users ----
class UserListResponse(BaseModel):
    success: bool = True
    count: int
    users: List[UserOut]


class UserUpdateRequest(CamelModel):
    """Profile patch. Privileged fields are stripped for non-admin callers."""

    name: Optional[str] = Field(default=None, min_length=1)
    site: Optional[str] = None
    avatar: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    employee_id: Optional[str] = None
    role: Optional[Role] = None
    permissions: Optional[List[Permission]] = None
    is_active: Optional[bool] = None

    @field_validator("name", "site", "department", "role", "permissions", "is_active")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


PRIVILEGED_USER_FIELDS = ("role", "permissions", "is_active")


class PermissionsUpdateRequest(BaseModel):
    permissions: List[Permission]


class UserStats(CamelModel):
    total: int
    active: int
    inactive: int
    by_role: Dict[str, int]


class UserStatsResponse(BaseModel):
    success: bool = True
    stats: UserStats


# ---- Resources ----
class ResourceItem(CamelModel):
    id: str
    resource_type: str
    data: Dict[str, Any]
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ResourceResponse(BaseModel):
    success: bool = True
    item: ResourceItem
    message: Optional[str] = None


class ResourceListResponse(BaseModel):
    success: bool = True
    count: int
    items: List[ResourceItem]


# ---- Roles ----
class RoleDefinitionOut(CamelModel):
    role: Role
    title: str
    description: str
    dashboard_type: str
    permissions: List[Permission]
    features: List[str]
    navigation_items: List[str]
    widgets: List[str]
    primary_color: str
    icon: str


def to_user_out(user: UserRecord) -> UserOut:
    """Serialize a stored user for clients, dropping the password hash."""
    return UserOut.model_validate(user.model_dump(exclude={"hashed_password"}))
