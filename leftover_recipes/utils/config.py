"""Configuration management for the Leftover Recipe Service.

Loads environment variables from system environment and .env file.
Priority order: system environment > .env file > hardcoded defaults
"""

import os

from dotenv import load_dotenv


# Load .env file (if exists, silently continues if missing)
load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    def __init__(self) -> None:
        """Initialize configuration from environment variables."""
        # Gemini API Key: checked per request, a missing key is reported as a configuration error
        self.GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
        # Server Port
        self.PORT: int = int(os.getenv("PORT", "7777"))
        # Runtime environment: "development", "test" or "production"
        # Error diagnostics (debug previews, exception details) are only returned outside production
        self.APP_ENV: str = os.getenv("APP_ENV", "production").lower()

        # LLM Model Parameters
        # Temperature: 0.7 leaves room for creative leftover arrangements
        self.TEMPERATURE: float = float(os.getenv("TEMPERATURE", "0.7"))
        # Max Output Tokens: three short recipes fit comfortably in 2048
        self.MAX_OUTPUT_TOKENS: int = int(os.getenv("MAX_OUTPUT_TOKENS", "2048"))
        # Upper bound for a single model call, in seconds
        self.MODEL_TIMEOUT_SECONDS: float = float(os.getenv("MODEL_TIMEOUT_SECONDS", "30"))
        # Send a structured-output schema with the request (Gemini response_schema)
        self.USE_RESPONSE_SCHEMA: bool = os.getenv("USE_RESPONSE_SCHEMA", "true").lower() in ("true", "1", "yes")

        # Rate Limiting: process-wide, trailing window
        self.RATE_LIMIT_MAX_REQUESTS: int = int(os.getenv("RATE_LIMIT_MAX_REQUESTS", "5"))
        self.RATE_LIMIT_WINDOW_SECONDS: float = float(os.getenv("RATE_LIMIT_WINDOW_SECONDS", "60"))

    @property
    def is_production(self) -> bool:
        """True unless APP_ENV names a development or test environment."""
        return self.APP_ENV == "production"

    def validate(self) -> None:
        """Validate configuration values.

        GEMINI_API_KEY is intentionally not checked here: the service starts without it
        and answers each request with a configuration error instead.

        Raises:
            ValueError: If a value is out of range or not one of the allowed options.
        """
        if self.APP_ENV not in ("development", "test", "production"):
            raise ValueError(
                f"APP_ENV must be 'development', 'test' or 'production', got: {self.APP_ENV}"
            )
        if not (0.0 <= self.TEMPERATURE <= 2.0):
            raise ValueError(
                f"TEMPERATURE must be between 0.0 and 2.0, got: {self.TEMPERATURE}"
            )
        if self.MAX_OUTPUT_TOKENS < 256:
            raise ValueError(
                f"MAX_OUTPUT_TOKENS must be at least 256, got: {self.MAX_OUTPUT_TOKENS}"
            )
        if self.MODEL_TIMEOUT_SECONDS <= 0:
            raise ValueError(
                f"MODEL_TIMEOUT_SECONDS must be positive, got: {self.MODEL_TIMEOUT_SECONDS}"
            )
        if self.RATE_LIMIT_MAX_REQUESTS < 1:
            raise ValueError(
                f"RATE_LIMIT_MAX_REQUESTS must be at least 1, got: {self.RATE_LIMIT_MAX_REQUESTS}"
            )
        if self.RATE_LIMIT_WINDOW_SECONDS < 1:
            raise ValueError(
                f"RATE_LIMIT_WINDOW_SECONDS must be at least 1 second, got: {self.RATE_LIMIT_WINDOW_SECONDS}"
            )


# Create module-level config instance and validate immediately
config = Config()
config.validate()
