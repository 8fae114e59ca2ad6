"""Password hashing, JWT issuance/verification and RBAC request gates."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from jose.exceptions import JOSEError
from pydantic import ValidationError as PydanticValidationError

from buildsmart.core.config import settings
from buildsmart.core.exceptions import (
    AuthenticationRequiredError,
    ForbiddenError,
    InvalidTokenError,
    SigningError,
    TokenExpiredError,
)
from buildsmart.core.permissions import can_perform_action, has_all_permissions
from buildsmart.core.roles import Permission, Role
from buildsmart.schemas.schemas import CurrentUser, TokenClaims

logger = logging.getLogger("buildsmart.security")

BEARER_PREFIX = "Bearer "


def _password_bytes(password: str) -> bytes:
    # bcrypt only looks at the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt with a fresh random salt."""
    salt = bcrypt.gensalt(rounds=settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def create_access_token(
    user_id: str,
    email: str,
    role: Role,
    permissions: list[Permission],
    expires_delta: Optional[timedelta] = None,
) -> str:
    """Sign a JWT carrying the caller's id, email, role and permissions."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta if expires_delta is not None else timedelta(days=settings.JWT_EXPIRY_DAYS))
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "role": Role(role).value,
        "permissions": [Permission(p).value for p in permissions],
        "iat": int(now.timestamp()),
        "exp": int(expire.timestamp()),
    }
    try:
        return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    except JOSEError as e:
        logger.exception("Token signing failed")
        raise SigningError("Could not issue token") from e


def decode_token(token: str) -> TokenClaims:
    """Verify signature and expiry, returning the embedded claims.

    Raises:
        TokenExpiredError: If the token is past its ``exp``.
        InvalidTokenError: If the signature or payload does not verify.
    """
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise TokenExpiredError("Token expired")
    except JWTError:
        raise InvalidTokenError("Invalid token")
    try:
        return TokenClaims.model_validate(payload)
    except PydanticValidationError:
        raise InvalidTokenError("Invalid token payload")


def resolve_identity(authorization: Optional[str]) -> Optional[CurrentUser]:
    """Turn an Authorization header into an identity.

    Missing or unverifiable tokens yield ``None`` (anonymous); only an expired
    token is an error.
    """
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    try:
        claims = decode_token(token)
    except InvalidTokenError:
        logger.debug("Ignoring unverifiable bearer token")
        return None
    return CurrentUser.from_claims(claims)


def get_current_user_optional(request: Request) -> Optional[CurrentUser]:
    """Identity attached by AuthenticationMiddleware, or None for anonymous."""
    return getattr(request.state, "user", None)


def get_current_user(
    user: Optional[CurrentUser] = Depends(get_current_user_optional),
) -> CurrentUser:
    if user is None:
        raise AuthenticationRequiredError("Authentication required")
    return user


class RequireRole:
    """Dependency that admits only the given roles. Admin always passes."""

    def __init__(self, *allowed_roles: Role):
        self.allowed_roles = tuple(Role(r) for r in allowed_roles)

    async def __call__(self, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.is_admin or not self.allowed_roles or user.role in self.allowed_roles:
            return user
        required = [r.value for r in self.allowed_roles]
        raise ForbiddenError(
            f"Access denied. Required role: {' or '.join(required)}",
            details={"requiredRoles": required, "userRole": user.role.value},
        )


class RequirePermission:
    """Dependency that requires every listed permission. Admin always passes."""

    def __init__(self, *permissions: Permission):
        self.permissions = tuple(Permission(p) for p in permissions)

    async def __call__(self, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if user.is_admin or has_all_permissions(user.permissions, self.permissions):
            return user
        raise ForbiddenError(
            "Insufficient permissions",
            code="PERMISSION_DENIED",
            details={
                "required": [p.value for p in self.permissions],
                "current": [p.value for p in user.permissions],
            },
        )


class RequireAction:
    """Dependency gating an action on a resource type via the action map."""

    def __init__(self, action: str, resource_type: str):
        self.action = action
        self.resource_type = resource_type

    async def __call__(self, user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if can_perform_action(user.role, user.permissions, self.action, self.resource_type):
            return user
        raise ForbiddenError(
            f"Not allowed to {self.action.replace('_', ' ')} on {self.resource_type}",
            code="PERMISSION_DENIED",
            details={"action": self.action, "resourceType": self.resource_type, "userRole": user.role.value},
        )


# Convenience dependencies
require_admin = RequireRole(Role.ADMIN)
require_manager = RequireRole(Role.ADMIN, Role.PROJECT_MANAGER)
require_authenticated = RequireRole()
