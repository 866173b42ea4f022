from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "searchbridge/.env"),
        env_prefix="SEARCHBRIDGE_",
        env_ignore_empty=True,
        extra="ignore",
    )

    ENVIRONMENT: Literal["local", "staging", "development", "production"] = "local"

    # Prepended to every table name, e.g. "wp_" for a stock WordPress install.
    TABLE_PREFIX: str = ""
    SQL_DIALECT: str = "sqlite"
    DATABASE_URI: str = "sqlite:///./searchbridge.db"

    # When False, save and delete only log what they would have written.
    CAN_SAVE: bool = True

    DEFAULT_PAGE_SIZE: int = 25
    PRELOAD_LIMIT: int = 50
    PLUGIN_SCHEMA_PATHS: list[str] = Field(default_factory=list)

    LOG_LEVEL: str = "INFO"


settings = Settings()
