"""Application configuration settings."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    database_url: str = ""
    environment: str = "dev"
    # Record store settings
    record_store_backend: str = "sql"  # sql, memory
    batch_operation_ceiling: int = 500  # Hard per-batch operation limit of the store
    batch_safety_margin: int = 100  # Keep batches at 400 operations
    # Authentication settings
    secret_key: str = "examiner-records-secret-key-change-in-production"  # Should be set via environment variable
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    admin_emails: list[str] = []
    fallback_reviewer_identity: str = "system"
    # Subject pass thresholds (a score must be strictly greater to pass)
    default_subject_threshold: int = 49
    english_threshold: int = 59

    def chunk_size_for(self, ops_per_record: int) -> int:
        """Number of records that fit in one batch when each record costs ops_per_record operations."""
        usable = self.batch_operation_ceiling - self.batch_safety_margin
        return max(1, usable // ops_per_record)


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "text"  # "text" or "json"
    ENV: str = "dev"  # dev | staging | prod

    class Config:
        env_prefix = "APP_"


logging_settings = LoggingSettings()
settings = Settings()  # type: ignore
