"""
Application configuration for the Flowgraph API.

Manages environment-specific settings, token signing configuration
and the location of the on-disk record files.
"""

from typing import Optional

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application Settings
    APP_NAME: str = "Flowgraph API"
    APP_VERSION: str = "1.0.0"
    APP_DESCRIPTION: str = "GraphQL and REST API over an in-memory conversational flow graph"
    ENVIRONMENT: str = Field(default="development", description="Environment: development, test, staging, production")
    DEBUG: bool = Field(default=False, description="Enable debug mode")

    # Server Settings
    HOST: str = Field(default="localhost", description="Server host")
    PORT: int = Field(default=4000, description="Server port")

    # Data Settings
    DATA_PATH: str = Field(default="./data", description="Directory holding the JSON record files")

    # Token Settings
    JWT_SECRET_KEY: str = Field(
        default="dev-jwt-secret-key-change-in-production",
        description="Secret used to sign and verify bearer tokens",
    )
    JWT_ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    JWT_EXPIRY_SECONDS: int = Field(default=86400, description="JWT token expiry in seconds (24 hours)")
    JWT_LEEWAY_SECONDS: int = Field(default=0, description="Clock skew tolerance when checking token expiry")

    # API Settings
    API_PREFIX: str = Field(default="/api", description="Prefix for REST endpoints")
    GRAPHQL_PATH: str = Field(default="/graphql", description="GraphQL endpoint path")
    GRAPHQL_IDE_ENABLED: Optional[bool] = Field(
        default=None, description="Serve the GraphiQL IDE (defaults to enabled outside production)"
    )
    ALLOWED_HOSTS: list[str] = Field(default=["*"], description="Allowed host headers")
    CORS_ORIGINS: list[str] = Field(default=[], description="Allowed CORS origins")

    # Logging Settings
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")

    # Security Headers
    SECURITY_HEADERS_ENABLED: bool = Field(default=True, description="Enable security headers")

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment value."""
        allowed = ["development", "test", "staging", "production"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        allowed = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed:
            raise ValueError(f"Log level must be one of: {allowed}")
        return v.upper()

    @field_validator("JWT_EXPIRY_SECONDS")
    @classmethod
    def validate_expiry(cls, v):
        """Token lifetime must be positive."""
        if v <= 0:
            raise ValueError("JWT_EXPIRY_SECONDS must be greater than zero")
        return v

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v):
        """Parse allowed hosts from string or list."""
        if isinstance(v, str):
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    @model_validator(mode="after")
    def validate_production_security(self):
        """Validate security settings in production."""
        if self.ENVIRONMENT == "production":
            if self.JWT_SECRET_KEY.startswith("dev-"):
                raise ValueError("Production environment requires a secure JWT_SECRET_KEY (not dev default)")
            if len(self.JWT_SECRET_KEY) < 32:
                raise ValueError(
                    "Production JWT_SECRET_KEY must be at least 32 characters long. "
                    "Generate with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
                )
            self._validate_key_entropy(self.JWT_SECRET_KEY, "JWT_SECRET_KEY")

        return self

    @staticmethod
    def _validate_key_entropy(key: str, key_name: str) -> None:
        """
        Validate that a signing key has sufficient entropy.

        Rejects keys made of few distinct characters, single-case alphabetic
        keys and keys dominated by sequential runs such as "abcd" or "1234".

        Raises:
            ValueError: If key appears to have insufficient entropy
        """
        if len(set(key)) < len(key) / 4:
            raise ValueError(
                f"{key_name} appears to have low entropy (too many repeated characters). "
                "Use a cryptographically random key generator."
            )

        if key.isalpha() and (key.islower() or key.isupper()):
            raise ValueError(
                f"{key_name} should use mixed case and special characters for better entropy. "
                "Generate with: python -c \"import secrets; print(secrets.token_urlsafe(32))\""
            )

        sequential_count = 0
        for i in range(len(key) - 2):
            if ord(key[i + 1]) == ord(key[i]) + 1 and ord(key[i + 2]) == ord(key[i]) + 2:
                sequential_count += 1
        if sequential_count > len(key) / 10:
            raise ValueError(
                f"{key_name} contains too many sequential patterns (possible weak key). "
                "Use a cryptographically random key generator."
            )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.ENVIRONMENT == "development"

    @property
    def expose_error_details(self) -> bool:
        """Whether error responses may include internal exception details."""
        return self.DEBUG or self.is_development

    @property
    def graphql_ide_enabled(self) -> bool:
        """Whether the GraphiQL IDE is served on the GraphQL endpoint."""
        if self.GRAPHQL_IDE_ENABLED is None:
            return not self.is_production
        return self.GRAPHQL_IDE_ENABLED

    model_config = ConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore")


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get the global settings instance.

    Returns:
        Settings instance
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reload_settings() -> Settings:
    """
    Reload settings from environment.

    Returns:
        New settings instance
    """
    global _settings
    _settings = Settings()
    return _settings
