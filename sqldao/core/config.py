"""
Runtime settings for sqldao.

Values come from environment variables prefixed with ``SQLDAO_`` (or a local
``.env`` file). Everything has a default so the library works without any
configuration; only ``create_engine()`` without an explicit URL needs
``SQLDAO_DATABASE_URL``.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SQLDAO_",
        env_file=".env",
        env_ignore_empty=True,
        extra="ignore",
    )

    DATABASE_URL: str | None = None
    SQL_ECHO: bool = False

    # Executor logs every normalized statement; INFO when True, DEBUG otherwise.
    LOG_SQL: bool = True

    # Seconds to wait for the mapping document to load. None = wait for the
    # load signal without a bound.
    MAPPER_READY_TIMEOUT: float | None = Field(default=None, gt=0)

    TEMPLATE_STRICT_UNDEFINED: bool = False

    ENTITY_EXCLUDE_DIRS: list[str] = [
        "node_modules",
        "__pycache__",
        ".git",
        ".venv",
        "venv",
        "site-packages",
    ]


settings = Settings()
