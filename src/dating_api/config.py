import logging
import os

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DEFAULT_DB_TIMEOUT = 10.0


class Settings(BaseModel):
    database_url: str = "postgresql://user:password@db:5432/dating"
    redis_url: str = "redis://redis:6379/0"
    db_timeout: float = DEFAULT_DB_TIMEOUT
    session_ttl: int = 20 * 60
    email_domain: str = "dating.app"
    host: str = "0.0.0.0"
    port: int = 8000


def _read_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        logger.info(f"Could not parse {name}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.info(f"{name} must be positive, using {default}")
        return default
    return value


def _read_timeout(raw: str | None) -> float:
    if raw is None:
        return DEFAULT_DB_TIMEOUT
    try:
        timeout = float(raw.strip().rstrip("s"))
    except ValueError:
        logger.info(f"Could not parse DB_TIMEOUT_SECONDS={raw!r}, using {DEFAULT_DB_TIMEOUT}s")
        return DEFAULT_DB_TIMEOUT
    if timeout <= 0:
        logger.info(f"DB_TIMEOUT_SECONDS must be positive, using {DEFAULT_DB_TIMEOUT}s")
        return DEFAULT_DB_TIMEOUT
    return timeout


def load_settings() -> Settings:
    """Read the environment once; the result is passed to every component."""
    defaults = Settings()
    return Settings(
        database_url=os.getenv("DATABASE_URL", defaults.database_url),
        redis_url=os.getenv("REDIS_URL", defaults.redis_url),
        db_timeout=_read_timeout(os.getenv("DB_TIMEOUT_SECONDS")),
        session_ttl=_read_int("SESSION_TTL_SECONDS", defaults.session_ttl),
        email_domain=os.getenv("EMAIL_DOMAIN", defaults.email_domain),
        host=os.getenv("API_HOST", defaults.host),
        port=_read_int("API_PORT", defaults.port),
    )
