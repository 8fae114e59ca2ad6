"""Client-side session handling for BuildSmart API consumers."""

from buildsmart.client.session import (
    AuthClientError,
    FileStorage,
    MemoryStorage,
    SessionExpiredError,
    SessionHolder,
)

__all__ = [
    "AuthClientError", "FileStorage", "MemoryStorage",
    "SessionExpiredError", "SessionHolder",
]
