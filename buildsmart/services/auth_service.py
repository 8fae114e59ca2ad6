"""Auth service: login, registration, demo login, refresh, profile."""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from buildsmart.core.config import settings
from buildsmart.core.exceptions import (
    AccountInactiveError,
    DemoLoginDisabledError,
    InvalidCredentialsError,
    ResourceConflictError,
    ResourceNotFoundError,
    ValidationError,
)
from buildsmart.core.roles import Role, default_permissions
from buildsmart.core.security import create_access_token, hash_password, verify_password
from buildsmart.repositories.base import Store
from buildsmart.schemas.schemas import CurrentUser, UserRecord, normalize_email

logger = logging.getLogger("buildsmart.auth")

# Canonical demo identities, one per role. Provisioned by seed_demo_users.
DEMO_USERS: Dict[Role, Dict[str, str]] = {
    Role.ADMIN: {"name": "Rajesh Kumar", "email": "rajesh@buildsmart.in"},
    Role.PROJECT_MANAGER: {"name": "Priya Sharma", "email": "priya@buildsmart.in"},
    Role.SUPERVISOR: {"name": "Amit Patel", "email": "amit@buildsmart.in"},
    Role.WORKER: {"name": "Ramesh Singh", "email": "ramesh@buildsmart.in"},
}


def issue_token(user: UserRecord) -> str:
    return create_access_token(user.id, user.email, user.role, user.permissions)


class AuthService:
    """Handles authentication and the credential lifecycle."""

    @staticmethod
    def authenticate(store: Store, email: str, password: str) -> Dict[str, Any]:
        """Verify credentials and return a fresh token with the user.

        Raises:
            ValidationError: If email or password is missing.
            InvalidCredentialsError: If the email is unknown or the password is wrong.
            AccountInactiveError: If the account has been deactivated.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = store.users.get_by_email(normalize_email(email))
        if not user or not verify_password(password, user.hashed_password):
            logger.info("Failed login attempt")
            raise InvalidCredentialsError("Invalid credentials")

        if not user.is_active:
            raise AccountInactiveError("Account is deactivated")

        user.last_login_at = datetime.now(timezone.utc)
        user = store.users.save(user)
        logger.info("User %s logged in as %s", user.id, user.role.value)
        return {"token": issue_token(user), "user": user}

    @staticmethod
    def register(
        store: Store,
        name: str,
        email: str,
        password: str,
        role: Optional[Role] = None,
        site: Optional[str] = None,
        employee_id: Optional[str] = None,
        caller: Optional[CurrentUser] = None,
    ) -> Dict[str, Any]:
        """Create a user and sign them in.

        Self-registration always yields a Worker; only an authenticated Admin
        may register someone into another role.
        """
        if not name or not email or not password:
            raise ValidationError("Name, email, and password are required")
        if len(password) < 6:
            raise ValidationError("Password must be at least 6 characters")

        email = normalize_email(email)
        if store.users.get_by_email(email):
            raise ResourceConflictError("User already exists", code="USER_EXISTS")

        user_role = Role.WORKER
        if role is not None and role != Role.WORKER:
            if caller is not None and caller.is_admin:
                user_role = role
            else:
                logger.warning("Ignoring requested role %s on self-registration", role.value)

        user = store.users.add(UserRecord(
            id=str(uuid.uuid4()),
            name=name.strip(),
            email=email,
            hashed_password=hash_password(password),
            role=user_role,
            site=site or settings.DEFAULT_SITE,
            permissions=default_permissions(user_role),
            employee_id=employee_id,
        ))
        logger.info("Registered user %s as %s", user.id, user.role.value)
        return {"token": issue_token(user), "user": user}

    @staticmethod
    def demo_login(store: Store, role: Optional[str]) -> Dict[str, Any]:
        """Sign in as the demo user for ``role`` without a password.

        Unknown or missing roles resolve to Worker. Demo users must already
        be provisioned (see ``seed_demo_users``).
        """
        if not settings.DEMO_LOGIN_ENABLED:
            raise DemoLoginDisabledError("Demo login is disabled")

        try:
            demo_role = Role(role) if role else Role.WORKER
        except ValueError:
            demo_role = Role.WORKER

        email = DEMO_USERS[demo_role]["email"]
        user = store.users.get_by_email(email)
        if not user:
            logger.error("Demo user %s has not been provisioned", email)
            raise ResourceNotFoundError(f"Demo user for role '{demo_role.value}' is not provisioned")

        logger.info("Demo login as %s", demo_role.value)
        return {"token": issue_token(user), "user": user}

    @staticmethod
    def get_profile(store: Store, current_user: CurrentUser) -> UserRecord:
        """Re-read the caller's record; inactive accounts are refused."""
        user = store.users.get_by_id(current_user.id)
        if not user:
            raise ResourceNotFoundError("User not found")
        if not user.is_active:
            raise AccountInactiveError("Account is deactivated")
        return user

    @staticmethod
    def refresh(store: Store, current_user: CurrentUser) -> str:
        """Issue a new token from the caller's current stored role and permissions."""
        user = store.users.get_by_id(current_user.id)
        if not user or not user.is_active:
            raise AccountInactiveError("User not found or inactive")
        return issue_token(user)


auth_service = AuthService()
