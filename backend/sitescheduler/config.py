from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

from sitescheduler.models.dependency import DependencyType


class Settings(BaseSettings):
    """Runtime settings, read from SITESCHEDULER_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="SITESCHEDULER_",
        env_file=".env",
        extra="ignore",
    )

    debug: bool = False
    log_level: str | None = None  # Overrides the debug-derived level
    log_json: bool = False

    # Used when an edge record arrives without a dependency type
    default_dependency_type: DependencyType = DependencyType.FINISH_TO_START

    # Set to False to skip no_duration / start_before_violated / already_completed
    emit_warnings: bool = True


@lru_cache
def get_settings() -> Settings:
    return Settings()
