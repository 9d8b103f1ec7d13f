"""Application configuration settings."""
import os
import json
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator
from typing import Optional, List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App settings
    app_name: str = "Stackwager Engine"
    app_version: str = "1.0.0"
    debug: bool = False

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000

    # CORS settings - as comma-separated string or JSON array
    cors_origins: str = "http://localhost:5173,http://localhost:3000"

    # Engine settings
    starting_balance: float = 1000.0
    default_bought_blocks: int = 30
    default_win_probability: float = 0.5
    # Gates the [Game] / [RoundOutcomeController] trace messages
    debug_log: bool = False

    # Batch simulation settings
    simulation_default_seed: int = 42
    max_simulation_rounds: int = 5000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("default_win_probability")
    @classmethod
    def clamp_probability(cls, v: float) -> float:
        """Out-of-range probabilities are clamped, not rejected."""
        return max(0.0, min(1.0, v))

    def get_cors_origins(self) -> List[str]:
        """Parse CORS origins from string (comma-separated or JSON)."""
        if not self.cors_origins:
            return ["http://localhost:5173"]

        # Try JSON parse first
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
        except json.JSONDecodeError:
            pass

        # Fall back to comma-separated
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


# Don't use lru_cache so env var updates are picked up in debug mode
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings instance (cached unless DEBUG=true)."""
    global _settings
    if _settings is None or os.getenv("DEBUG", "false").lower() == "true":
        _settings = Settings()
    return _settings
