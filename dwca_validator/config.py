"""Configuration management for the DwC-A validator"""

import tempfile
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Validator settings"""

    # Uniqueness evaluator
    uniqueness_buffer_threshold: int = Field(default=1000, ge=1)
    sort_chunk_size: int = Field(default=100000, ge=1)  # lines held in memory per sorted run
    line_terminator: str = Field(default="\n", min_length=1)
    temp_dir: Optional[str] = Field(default=None)

    # Record sources
    read_chunk_size: int = Field(default=10000, ge=1)

    # Execution
    max_workers: int = Field(default=4, ge=1)

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    # Application Configuration
    app_name: str = "DwC-A Validator"
    app_version: str = "0.1.0"

    model_config = SettingsConfigDict(
        env_prefix="DWCA_VALIDATOR_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    def get_temp_dir(self) -> str:
        """Directory for spill and sorted files"""
        return self.temp_dir or tempfile.gettempdir()


# Global settings instance
settings = Settings()
