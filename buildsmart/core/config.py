"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    APP_NAME: str = "BuildSmart AI"
    DEBUG: bool = False
    CORS_ORIGINS: list[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]
    DEFAULT_SITE: str = "Mumbai Metro Line 3 - Phase II"

    # Storage: "sql" (SQLAlchemy) or "json" (flat files under DATA_DIR)
    STORAGE_BACKEND: str = "sql"
    DATABASE_URL: str = "sqlite:///./buildsmart.db"
    DATA_DIR: str = "./data"

    # Auth
    JWT_SECRET: str = "buildsmart-secret-change-in-production"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRY_DAYS: int = 7
    BCRYPT_ROUNDS: int = 10

    # Demo login must stay off for real credential-bearing deployments
    DEMO_LOGIN_ENABLED: bool = True
    DEMO_PASSWORD: str = "demo123"

    # Client
    API_URL: str = "http://localhost:8000/api"
    SESSION_FILE: str = "~/.buildsmart/session.json"
    DEV_TOOLS_ENABLED: bool = False

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True


settings = Settings()
