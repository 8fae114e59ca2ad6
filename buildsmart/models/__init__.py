"""Models package: import all models so metadata can discover them."""

from buildsmart.models.user import User
from buildsmart.models.resource import ResourceRecord

__all__ = ["User", "ResourceRecord"]
