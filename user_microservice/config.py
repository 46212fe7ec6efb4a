"""Configuration management using pydantic-settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the user service."""

    model_config = SettingsConfigDict(
        env_prefix="USER_SERVICE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Service
    service_name: str = "user-service"
    service_version: str = "1.0.0"
    service_description: str = "User registration and profile API"
    route_prefix: str = ""
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"

    # Auth
    auth_service_url: str = "http://localhost:8000"
    auth_timeout: float = 5.0
    required_scopes: list[str] = []

    # Password policy
    password_min_length: int = 8
    password_max_length: int = 128
    password_require_uppercase: bool = True
    password_require_lowercase: bool = True
    password_require_digit: bool = True
    password_require_special: bool = False

    # Privacy
    email_log_prefix_length: int = 3  # characters of the email kept in logs
    expose_error_details: bool = False  # render wrapped causes in 5xx bodies


# Global settings instance
settings = Settings()
