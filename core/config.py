"""
core/config.py -- Centralized application configuration via pydantic-settings.

Every tunable of NotesVault is a field on Settings and is read from the
environment (or .env) by pydantic-settings: store_owner comes from
STORE_OWNER, allowed_streams from ALLOWED_STREAMS as a JSON list, and so on.
Modules never touch os.environ; they call get_settings(), which builds
Settings once and caches it.

Security notes:
  SECRET_KEY shorter than 32 chars is rejected outright. Session tokens are
  HS256-signed with it; a short key weakens every issued session.

  The session lifetime is a fixed two hours. It is deliberately not a per-user
  preference: sessions are never renewed and never revoked server-side, so the
  lifetime is the only bound on a leaked token.

Layer rule: core/ is the kernel. This module may not import from api/,
auth/, or content/.
"""

import logging
import secrets
from functools import lru_cache

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("notesvault.config")


class Settings(BaseSettings):
    """NotesVault configuration. Every field has a default except the store
    coordinates, which a deployment must set."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Core
    # ------------------------------------------------------------------

    debug: bool = False
    # Empty string is the sentinel for "not configured". The model_validator
    # below either generates a dev key or raises, so callers never see "".
    secret_key: str = ""

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    secure_cookies: bool = True
    session_cookie_name: str = "notes_session"
    session_expire_seconds: int = 2 * 60 * 60

    # ------------------------------------------------------------------
    # Remote object store (a GitHub-style contents API)
    # ------------------------------------------------------------------

    store_api_url: str = "https://api.github.com"
    store_owner: str = ""
    store_repo: str = ""
    store_branch: str = "main"
    registry_path: str = "admins/admins.json"
    notes_root: str = "notes"
    request_timeout_seconds: float = 10.0
    user_agent: str = "NotesVault-Admin"

    # ------------------------------------------------------------------
    # Upload rules
    # ------------------------------------------------------------------

    allowed_streams: list[str] = ["cbse", "science", "commerce", "arts", "all"]
    max_material_bytes: int = 50 * 1024 * 1024
    max_subject_length: int = 50
    max_commit_message_length: int = 200

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    # notes/class-N/stream/subject/ is four levels deep; the cap leaves room
    # for nested folders but stops a runaway walk.
    listing_max_depth: int = 8
    listing_max_entries: int = 5000
    listing_cache_seconds: int = 60

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    login_rate_limit: str = "10/minute"
    rate_limit_storage_uri: str = "memory://"
    allowed_hosts: list[str] = ["localhost", "127.0.0.1", "*.localhost"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    # ------------------------------------------------------------------
    # Validators
    # ------------------------------------------------------------------

    @model_validator(mode="after")
    def validate_secret_key(self) -> "Settings":
        """Enforce the SECRET_KEY policy.

        Dev mode (DEBUG=true): auto-generate a random key with a warning.
            Sessions will not survive restart -- acceptable for local dev.

        Production mode (DEBUG=false or not set): refuse to start if
            SECRET_KEY is missing. Every instance must share the key, or a
            session minted by one instance is rejected by the next.

        Both modes: reject keys shorter than 32 characters.
        """
        if not self.secret_key:
            if self.debug:
                self.secret_key = secrets.token_hex(32)
                logger.warning(
                    "WARNING: Using auto-generated SECRET_KEY. " "Sessions will not persist across restarts."
                )
            else:
                raise ValueError(
                    "SECRET_KEY is required in production mode. "
                    "Set SECRET_KEY in your environment or .env file. "
                    "To run in development mode, set DEBUG=true."
                )
        if len(self.secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters.")
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the application Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()
