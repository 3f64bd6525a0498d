"""Configuration for the Inkwell service.

Settings are read from environment variables with the INKWELL__ prefix
(e.g., INKWELL__MONGO_URI=mongodb://mongo:27017) and from a local .env file.
"""

from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class InkwellSettings(BaseSettings):
    """Inkwell service configuration settings."""

    # Service address
    HOST: str = "0.0.0.0"
    PORT: int = 8080

    # MongoDB
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "messages"

    # Auth / JWT
    JWT_SECRET: SecretStr = SecretStr("dev-secret-key")
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRES_IN: int = 60 * 60  # seconds
    BCRYPT_ROUNDS: int = 12

    # Feed / uploads
    POSTS_PER_PAGE: int = 2
    UPLOAD_DIR: str = "images"
    GRAPHIQL: bool = True

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None
    LOG_JSON: bool = True

    model_config = SettingsConfigDict(
        env_prefix="INKWELL__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


_config: Optional[InkwellSettings] = None


def get_inkwell_config() -> InkwellSettings:
    """Get the Inkwell configuration singleton.

    Configuration is loaded once and cached.

    Examples:
        ```bash
        export INKWELL__PORT=9000
        export INKWELL__JWT_SECRET=$(openssl rand -hex 32)
        ```

        ```python
        config = get_inkwell_config()
        print(config.MONGO_URI)  # mongodb://localhost:27017
        ```
    """
    global _config
    if _config is None:
        _config = InkwellSettings()
    return _config


def reset_inkwell_config() -> None:
    """Reset the config cache. Useful for testing."""
    global _config
    _config = None
