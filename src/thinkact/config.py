"""Configuration settings for the application."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Pydantic settings class for the application."""

    # Define the settings with default values and types
    # These will be loaded from environment variables or a .env file if not provided
    API_PORT: int = 8000
    DEBUG: bool = False
    LOG_LEVEL: str = "info"  # Options: debug, info, warning, error, critical
    COLOR_OUTPUT: bool = True  # ANSI colors in console output

    # Model client configuration
    MODEL_CLIENT: str = "openai"  # Options: openai, http
    OPENAI_API_KEY: str | None = None
    OPENAI_MODEL: str = "gpt-4.1"
    OPENAI_BASE_URL: str | None = None  # Required by the "http" client
    MODEL_TIMEOUT: float = 60.0
    MODEL_MAX_RETRIES: int = 2

    # Agent configuration
    MAX_TURNS: int | None = None  # None means no limit
    SYSTEM_PROMPT_PATH: str | None = None

    # Built-in tools
    BASH_TIMEOUT: float = 120.0

    class Config:
        """Configuration for Pydantic settings."""

        # Load environment variables from a .env file
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
