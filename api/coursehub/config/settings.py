"""Runtime configuration.

Every field maps to an upper-case environment variable of the same name
(``CASSANDRA_HOSTS``, ``AUTH_SECRET_KEY``...) and may also come from a
``.env`` file in the working directory. List fields take JSON arrays.
"""

from functools import lru_cache
from typing import Literal, Self

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEV_SECRET_KEY = "coursehub-dev-secret-change-me-before-deploying!"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = "coursehub"
    environment: Literal["development", "staging", "production", "testing"] = (
        "development"
    )

    # Tokens
    auth_secret_key: str = Field(default=DEV_SECRET_KEY, min_length=32)
    auth_algorithm: str = "HS256"
    auth_access_token_expire_minutes: int = Field(default=60 * 24, gt=0)

    # Admin account ensured at startup when email and password are both set
    bootstrap_admin_email: str | None = None
    bootstrap_admin_password: str | None = None
    bootstrap_admin_name: str = "CourseHub Admin"

    # Cassandra
    cassandra_hosts: list[str] = ["localhost"]
    cassandra_port: int = 9042
    cassandra_keyspace: str = Field(default="coursehub", pattern=r"^[a-zA-Z]\w{0,47}$")
    cassandra_username: str | None = None
    cassandra_password: str | None = None
    cassandra_protocol_version: int = 4
    cassandra_connect_timeout: float = 10.0
    cassandra_datacenter: str = "datacenter1"
    cassandra_replication_factor: int = Field(default=1, ge=1)

    # Ratings: attempts at the conditional write of a course's aggregate
    rating_update_max_attempts: int = Field(default=5, ge=1)

    # Logging
    log_level: LogLevel = "INFO"
    log_format: Literal["json", "console"] = "console"
    log_include_caller_info: bool = False
    log_dir: str = "logs"
    log_file_max_bytes: int = 10 * 1024 * 1024
    log_file_backup_count: int = 5
    log_requests: bool = True
    log_exclude_paths: list[str] = ["/health"]

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]
    cors_max_age: int = 600

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    @model_validator(mode="after")
    def check_production_secret(self) -> Self:
        if self.is_production and self.auth_secret_key == DEV_SECRET_KEY:
            msg = "AUTH_SECRET_KEY must be set in production"
            raise ValueError(msg)
        return self

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def bootstrap_admin_configured(self) -> bool:
        return bool(self.bootstrap_admin_email and self.bootstrap_admin_password)


@lru_cache
def get_settings() -> Settings:
    """Settings are read once per process."""
    return Settings()
