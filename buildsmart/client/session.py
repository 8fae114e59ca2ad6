"""Client-side holder of the signed-in identity.

Mirrors what a browser app keeps in local storage: the token and the user
object under ``auth_token`` / ``auth_user``. The holder never retries a
failed login, and an expired token drops the session silently.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import httpx
from pydantic import ValidationError as PydanticValidationError

from buildsmart.core.permissions import can_perform_action
from buildsmart.core.roles import Permission, Role, get_navigation_items
from buildsmart.schemas.schemas import UserOut

logger = logging.getLogger("buildsmart.client")

TOKEN_KEY = "auth_token"
USER_KEY = "auth_user"

# Profile fields a client may edit in its local copy of the user
LOCAL_PROFILE_FIELDS = ("name", "avatar", "phone", "department", "site")


class AuthClientError(Exception):
    """An auth failure as reported by the API (``code`` + ``error``)."""

    def __init__(self, code: Optional[str], message: str, status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class SessionExpiredError(AuthClientError):
    """The token expired; the session has been cleared and needs a new login."""


class Storage(ABC):
    """String key/value persistence for the session pair."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        ...

    @abstractmethod
    def remove(self, key: str) -> None:
        ...


class MemoryStorage(Storage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class FileStorage(Storage):
    """A JSON object on disk; survives process restarts."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(os.path.expanduser(str(path)))

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Session file {self.path} is not a JSON object")
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        try:
            data = self._read()
        except ValueError:
            data = {}
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        try:
            data = self._read()
        except ValueError:
            data = {}
        data.pop(key, None)
        self._write(data)


class SessionHolder:
    """Current identity, token, loading flag and last error for one client."""

    def __init__(self, http: httpx.Client, storage: Optional[Storage] = None):
        self.http = http
        self.storage = storage or MemoryStorage()
        self.user: Optional[UserOut] = None
        self.token: Optional[str] = None
        self.loading = True
        self.error: Optional[str] = None
        self._restore()

    # ---- lifecycle ----
    def _restore(self) -> None:
        try:
            token = self.storage.get(TOKEN_KEY)
            raw_user = self.storage.get(USER_KEY)
            if token and raw_user:
                self.user = UserOut.model_validate(json.loads(raw_user))
                self.token = token
        except (ValueError, PydanticValidationError) as e:
            logger.warning("Failed to restore session: %s", e)
            self.user = None
            self.token = None
            self._clear_persisted()
        finally:
            self.loading = False

    def _clear_persisted(self) -> None:
        self.storage.remove(TOKEN_KEY)
        self.storage.remove(USER_KEY)

    def _persist(self) -> None:
        self.storage.set(TOKEN_KEY, self.token)
        self.storage.set(USER_KEY, self.user.model_dump_json(by_alias=True))

    def _authenticate(self, path: str, payload: Dict[str, Any], fallback: str) -> UserOut:
        self.loading = True
        self.error = None
        try:
            response = self.http.post(path, json=payload)
            data = _json_body(response)
            if response.is_error:
                raise AuthClientError(data.get("code"), data.get("error") or fallback, response.status_code)
            self.token = data["token"]
            self.user = UserOut.model_validate(data["user"])
            self._persist()
            return self.user
        except AuthClientError as e:
            self.error = e.message
            raise
        except httpx.HTTPError as e:
            self.error = fallback
            raise AuthClientError("NETWORK_ERROR", fallback) from e
        finally:
            self.loading = False

    def login(self, email: str, password: str) -> UserOut:
        return self._authenticate("/auth/login", {"email": email, "password": password}, "Login failed")

    def demo_login(self, role: Union[Role, str]) -> UserOut:
        role_name = role.value if isinstance(role, Role) else role
        return self._authenticate("/auth/demo-login", {"role": role_name}, "Demo login failed")

    def logout(self) -> None:
        """Drop the identity in memory first, then wipe persisted state."""
        self.user = None
        self.token = None
        self.error = None
        self._clear_persisted()

    def update_user(self, **updates: Any) -> Optional[UserOut]:
        """Merge local profile changes and persist them. No server call.

        Only display fields may change here; role, permissions and the
        active flag come from the server alone.

        Raises:
            ValueError: On a field outside LOCAL_PROFILE_FIELDS or an invalid value.
        """
        if not self.user:
            return None
        rejected = sorted(set(updates) - set(LOCAL_PROFILE_FIELDS))
        if rejected:
            raise ValueError(f"Cannot update {', '.join(rejected)} locally")
        self.user = UserOut.model_validate({**self.user.model_dump(), **updates})
        self._persist()
        return self.user

    def refresh(self) -> str:
        """Swap in a fresh token and reload the profile it was issued for."""
        self.token = self._checked_json("POST", "/auth/refresh", "Token refresh failed")["token"]
        data = self._checked_json("GET", "/auth/me", "Failed to load profile")
        self.user = UserOut.model_validate(data["user"])
        self._persist()
        return self.token

    def _checked_json(self, method: str, path: str, fallback: str) -> Dict[str, Any]:
        response = self.request(method, path)
        data = _json_body(response)
        if response.is_error:
            self.error = data.get("error") or fallback
            raise AuthClientError(data.get("code"), self.error, response.status_code)
        return data

    def request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Send an API request with the bearer token attached.

        An expired-token response ends the session without retrying.
        """
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self.http.request(method, path, headers=headers, **kwargs)
        if response.status_code == 401 and _json_body(response).get("code") == "TOKEN_EXPIRED":
            logger.info("Session expired, signing out")
            self.logout()
            raise SessionExpiredError("TOKEN_EXPIRED", "Session expired, please sign in again", 401)
        return response

    # ---- derived helpers ----
    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and self.token is not None

    def has_permission(self, permission: Union[Permission, str]) -> bool:
        if not self.user:
            return False
        name = permission.value if isinstance(permission, Permission) else permission
        return name in {p.value for p in self.user.permissions}

    def is_role(self, role: Union[Role, str, List[Union[Role, str]]]) -> bool:
        if not self.user:
            return False
        roles = role if isinstance(role, (list, tuple, set)) else [role]
        return self.user.role.value in {r.value if isinstance(r, Role) else r for r in roles}

    def can(self, action: str, resource_type: str) -> bool:
        if not self.user:
            return False
        return can_perform_action(self.user.role, self.user.permissions, action, resource_type)

    def navigation_items(self) -> List[str]:
        return get_navigation_items(self.user.role) if self.user else []


def _json_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
