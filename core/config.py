"""
core/config.py -- OrderDesk settings, read once from the environment.

Every environment variable the service understands is a field on Settings.
Other modules call get_settings() and never touch os.environ themselves.

  get_settings()  lru_cache'd, so the process builds Settings exactly once.
                  FastAPI's documented pattern for config objects.
  Settings        pydantic-settings BaseSettings. Field names are the env var
                  names (secret_key <- SECRET_KEY); a .env file in the working
                  directory is read too. Values are coerced and validated.

Signing secret policy (enforced in validate_secret_key):
  SECRET_KEY set            used verbatim, must be >= 64 characters
  unset, DEBUG=true         random key generated, warning logged; tokens
                            issued before a restart stop validating
  unset, DEBUG unset/false  startup fails

The 64-character floor matches the 512-bit HS512 digest. After startup the
value is handed to auth.tokens.TokenIssuer and nothing rewrites it.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or sales/.
"""

import logging
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("orderdesk.config")

_ROOT = Path(__file__).resolve().parent.parent

MIN_SECRET_KEY_LENGTH = 64


class Settings(BaseSettings):
    """Runtime configuration for the API process.

    Every field has a default so tests can build Settings(_env_file=None)
    with only DEBUG or SECRET_KEY in the environment.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Runtime
    # ------------------------------------------------------------------

    debug: bool = False
    # "" means not configured; validate_secret_key replaces or rejects it.
    secret_key: str = ""
    log_level: str = "INFO"

    # ------------------------------------------------------------------
    # Databases (one file per bounded context)
    # ------------------------------------------------------------------

    auth_db_url: str = f"sqlite:///{_ROOT / 'auth' / 'orderdesk_auth.db'}"
    sales_db_url: str = f"sqlite:///{_ROOT / 'sales' / 'orderdesk_sales.db'}"

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    # Set true behind TLS so the access_token cookie is never sent in clear.
    secure_cookies: bool = False
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        if not self.secret_key:
            if not self.debug:
                raise ValueError(
                    "SECRET_KEY is required when DEBUG is off. "
                    "Export SECRET_KEY (at least 64 characters) or put it in .env; "
                    "set DEBUG=true to run with a throwaway key."
                )
            self.secret_key = secrets.token_hex(32)
            logger.warning("DEBUG mode: generated a throwaway SECRET_KEY; tokens will not survive a restart.")
        if len(self.secret_key) < MIN_SECRET_KEY_LENGTH:
            raise ValueError(f"SECRET_KEY must be at least {MIN_SECRET_KEY_LENGTH} characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, building it on first call.

    Tests that change the environment call get_settings.cache_clear() first.
    """
    return Settings()
