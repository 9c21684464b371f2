"""plotkit configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files. These settings provide defaults for the CLI; library
callers pass explicit configuration objects instead.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigError(Exception):
    """Raised when required configuration is missing or invalid.

    This exception provides clear, actionable error messages when a
    configuration value needed by a specific operation is unusable.

    Example:
        >>> Settings(TARGET_WIDTH=0, _env_file=None).require_canvas()
        Traceback (most recent call last):
        ...
        ConfigError: Canvas size not configured. Set it in .env file or
        TARGET_WIDTH/TARGET_HEIGHT environment variable.
    """

    def __init__(self, key_name: str, env_var: str) -> None:
        """Initialize configuration error.

        Args:
            key_name: Human-readable name of the missing key.
            env_var: Environment variable name to set.
        """
        self.key_name = key_name
        self.env_var = env_var
        message = (
            f"{key_name} not configured. "
            f"Set it in .env file or {env_var} environment variable."
        )
        super().__init__(message)


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "console"  # "console" or "json"

    # Canvas (output units, millimetres for most plotters)
    TARGET_WIDTH: float = 297.0  # A4 landscape
    TARGET_HEIGHT: float = 210.0
    MARGIN: float = Field(default=0.05, ge=0.0, lt=0.5)  # fraction per side

    # Output
    LAYER_PREFIX: str = "layer"
    DEFAULT_COLOR: str = "black"

    # Execution
    WORKERS: int = Field(default=1, ge=1)  # per-object worker pool size

    # Geometry
    RELATIVE_EPSILON: float = Field(default=1e-9, gt=0.0)

    def require_canvas(self) -> tuple[float, float]:
        """Get the canvas size, raising ConfigError if it is unusable.

        Returns:
            (width, height) of the target canvas.

        Raises:
            ConfigError: If either dimension is not strictly positive.
        """
        if self.TARGET_WIDTH <= 0 or self.TARGET_HEIGHT <= 0:
            raise ConfigError("Canvas size", "TARGET_WIDTH/TARGET_HEIGHT")
        return self.TARGET_WIDTH, self.TARGET_HEIGHT


# Singleton instance for import convenience
settings = Settings()
