"""Error taxonomy for the BuildSmart API.

Every error carries an HTTP status, a machine-readable ``code`` and a
human-readable message. ``details`` are merged into the JSON error body.
"""

from typing import Any, Dict, Optional

from fastapi.responses import JSONResponse


class BuildSmartError(Exception):
    """Base exception for BuildSmart."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str = "An error occurred",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        if code:
            self.code = code
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(BuildSmartError):
    """Raised when input is missing or malformed."""
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthenticationRequiredError(BuildSmartError):
    """Raised when a gated route is called without a usable credential."""
    status_code = 401
    code = "AUTH_REQUIRED"


class InvalidCredentialsError(BuildSmartError):
    """Raised when the email is unknown or the password is wrong."""
    status_code = 401
    code = "INVALID_CREDENTIALS"


class TokenExpiredError(BuildSmartError):
    """Raised when a token is past its expiry."""
    status_code = 401
    code = "TOKEN_EXPIRED"


class InvalidTokenError(BuildSmartError):
    """Raised when a token signature or payload does not verify."""
    status_code = 401
    code = "INVALID_TOKEN"


class AccountInactiveError(BuildSmartError):
    """Raised when a deactivated account tries to authenticate."""
    status_code = 403
    code = "ACCOUNT_INACTIVE"


class ForbiddenError(BuildSmartError):
    """Raised when the caller lacks the required role or permission."""
    status_code = 403
    code = "FORBIDDEN"


class DemoLoginDisabledError(BuildSmartError):
    """Raised when demo login is turned off."""
    status_code = 403
    code = "DEMO_LOGIN_DISABLED"


class ResourceNotFoundError(BuildSmartError):
    """Raised when a requested resource is not found."""
    status_code = 404
    code = "NOT_FOUND"


class UnknownRoleError(BuildSmartError):
    """Raised for a role name outside the closed role catalog."""
    status_code = 404
    code = "UNKNOWN_ROLE"


class ResourceConflictError(BuildSmartError):
    """Raised when a resource already exists."""
    status_code = 409
    code = "CONFLICT"


class SigningError(BuildSmartError):
    """Raised when a token cannot be signed."""
    status_code = 500
    code = "INTERNAL_ERROR"


def error_response(exc: BuildSmartError) -> JSONResponse:
    """Render an error as ``{success, error, code, ...details}``."""
    content = {"success": False, "error": exc.message, "code": exc.code}
    content.update(exc.details)
    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(status_code=exc.status_code, content=content, headers=headers)
