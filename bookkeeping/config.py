"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


def parse_actor_roles(raw: str) -> dict[str, str]:
    """
    Parse an actor-to-role mapping such as "alice=manager,bob=accountant".

    Blank items are ignored. Roles are lowercased, actor names are kept
    as written.
    """
    roles: dict[str, str] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        actor, sep, role = item.partition("=")
        if not sep or not actor.strip() or not role.strip():
            raise ValueError(f"Invalid ACTOR_ROLES item: '{item}'")
        roles[actor.strip()] = role.strip().lower()
    return roles


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Bookkeeping Engine"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./bookkeeping.db"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Journal workflow
    # The role that may approve, reject and post journal entries.
    POSTING_ROLE: str = os.getenv("POSTING_ROLE", "manager").lower()
    ACTOR_ROLES: dict[str, str] = parse_actor_roles(
        os.getenv("ACTOR_ROLES", "")
    )
    # When true, entries created by an actor with posting authority are
    # approved and posted immediately instead of waiting in pending.
    AUTO_APPROVE_MANAGER_ENTRIES: bool = (
        os.getenv("AUTO_APPROVE_MANAGER_ENTRIES", "true").lower() == "true"
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
