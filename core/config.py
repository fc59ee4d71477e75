"""
core/config.py -- Centralized application configuration via pydantic-settings.

All environment variable reads for CourierDesk happen here. No module should
call os.getenv() or os.environ.get() directly -- import get_settings() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. The app
      lifespan reads it once and hands the immutable values to the stores and
      the token codec, so nothing downstream re-reads the environment.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file automatically. Field names map to env var names
      (e.g. secret_key -> SECRET_KEY). Type coercion and validation are built in.

Security notes:
  SECRET_KEY unset: the service still starts with a well-known placeholder so
       a fresh checkout runs out of the box. The placeholder is logged as
       unsafe on every startup. Anyone who knows it can mint admin tokens.

  SECRET_KEY set but shorter than 32 chars is rejected outright. HS256 signing
       relies on key entropy -- a short key weakens every issued token.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or shipments/.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("courierdesk.config")

INSECURE_DEFAULT_SECRET = "change-me-insecure-development-secret-key"

_DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'courierdesk.db'}"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    All fields have defaults so Settings() can be instantiated in test
    environments without a real .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    log_level: str = "INFO"
    # Empty string is the sentinel for "not configured". The model_validator
    # swaps in INSECURE_DEFAULT_SECRET, so callers never see "".
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    # Users and shipments live in the same database; each store opens its own
    # engine against this URL.
    database_url: str = _DEFAULT_DB_URL
    seed_default_users: bool = True

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    token_expire_seconds: int = Field(default=24 * 60 * 60, gt=0)
    # bcrypt cost factor. Existing hashes keep their own cost; changing this
    # only affects newly written hashes.
    bcrypt_rounds: int = Field(default=10, ge=4, le=15)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    cors_origins: list[str] = ["*"]
    allowed_hosts: list[str] = ["*"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Fill in the placeholder key when unset; reject weak explicit keys."""
        if not self.secret_key:
            self.secret_key = INSECURE_DEFAULT_SECRET
            logger.warning(
                "WARNING: SECRET_KEY is not set -- using the built-in placeholder. "
                "This is unsafe for production: anyone can forge session tokens."
            )
        elif len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self

    @property
    def uses_insecure_secret(self) -> bool:
        return self.secret_key == INSECURE_DEFAULT_SECRET


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
