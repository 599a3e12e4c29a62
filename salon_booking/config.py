"""Configuration for the salon booking service.

Every value comes from the environment (optionally via a .env file).
Defaults are for local development only.
"""
import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from sqlalchemy.engine import URL

DEFAULT_JWT_SECRET = "your_jwt_secret_key"

# Bearer tokens
TOKEN_ALGORITHM = "HS256"
TOKEN_TTL_SECONDS = 3600


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from environment variables."""
    port: int = 4000
    db_host: str = "localhost"
    db_user: str = "root"
    db_password: str = ""
    db_name: str = "salon_booking"
    db_pool_size: int = 10
    database_url_override: Optional[str] = None
    jwt_secret: str = DEFAULT_JWT_SECRET
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from the process environment.

        Returns:
            Settings instance (unset variables fall back to defaults)
        """
        origins = os.getenv("CORS_ORIGINS", "http://localhost:3000")
        return cls(
            port=int(os.getenv("PORT", "4000")),
            db_host=os.getenv("DB_HOST", "localhost"),
            db_user=os.getenv("DB_USER", "root"),
            db_password=os.getenv("DB_PASS", ""),
            db_name=os.getenv("DB_NAME", "salon_booking"),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", "10")),
            database_url_override=os.getenv("DATABASE_URL") or None,
            jwt_secret=os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET),
            cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL; DATABASE_URL wins over the DB_* parts."""
        if self.database_url_override:
            return self.database_url_override

        url = URL.create(
            "postgresql+psycopg",
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            database=self.db_name,
        )
        return url.render_as_string(hide_password=False)

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load .env once and return cached settings."""
    load_dotenv()
    return Settings.from_env()
