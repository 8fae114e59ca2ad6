"""BuildSmart AI: construction-site RBAC and authentication backend."""

__version__ = "0.1.0"
