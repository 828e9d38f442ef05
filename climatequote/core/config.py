"""
Configuration management for climatequote hosts.

The pricing engine never reads these settings: every calculation receives an
explicit ConfigurationSnapshot. Settings here only tell the CLI where to find
its snapshot file and how to log.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings.

    Can be configured via environment variables or .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="CLIMATEQUOTE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    data_dir: Path = Field(default=Path("data"))
    snapshot_file: Path | None = Field(default=None, description="Pricing snapshot JSON used when none is given")

    # Pricing defaults
    category: str = Field(default="airco", description="Settings category of the snapshot")
    default_insulation: Literal["good", "average", "poor"] = Field(
        default="average", description="Insulation class when the quote input has none"
    )
    currency_symbol: str = Field(default="€")

    # Logging
    log_level: str = Field(default="INFO")
    log_to_file: bool = Field(default=False)
    log_dir: Path = Field(default=Path("logs"))

    @property
    def snapshots_dir(self) -> Path:
        return self.data_dir / "snapshots"

    @property
    def resolved_snapshot_file(self) -> Path | None:
        """Configured snapshot file, else ``<data_dir>/snapshots/<category>.json`` if present."""
        if self.snapshot_file is not None:
            return self.snapshot_file
        candidate = self.snapshots_dir / f"{self.category}.json"
        return candidate if candidate.exists() else None


# Global settings instance
settings = Settings()
