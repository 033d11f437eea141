"""Configuration management using Pydantic settings."""

from typing import Optional
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from segwit_savings.errors import ConfigurationError


class ScannerConfig(BaseSettings):
    """Configuration for the segwit savings scanner."""

    # Airtable Settings
    airtable_api_key: str = Field(description="Airtable API key (personal access token)")
    airtable_base: str = Field(description="Airtable base identifier")
    airtable_table: str = Field(description="Airtable table name or identifier")
    airtable_url: str = Field(default="https://api.airtable.com/v0", description="Airtable REST API root")
    airtable_batch_size: int = Field(default=10, description="Records per Airtable create request")
    persist_errors_fatal: bool = Field(default=True, description="Abort the scan on transient Airtable errors")

    # Block Explorer Settings
    esplora_url: str = Field(default="https://blockstream.info/api", description="Esplora API base URL")
    request_timeout: int = Field(default=30, description="HTTP timeout in seconds")
    max_retries: int = Field(default=5, description="Maximum attempts per HTTP request")
    retry_delay: float = Field(default=1.0, description="Base backoff delay in seconds")
    request_delay: float = Field(default=0.0, description="Minimum delay between explorer requests")

    # Logging Settings
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (json|text)")
    log_file: Optional[str] = Field(default=None, description="Log file path")
    log_max_size_mb: int = Field(default=100, description="Max log file size in MB")
    log_backup_count: int = Field(default=5, description="Number of log backups")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


def load_config(env_file: Optional[str] = None, **overrides) -> ScannerConfig:
    """
    Build the scanner configuration from the environment.

    Raises:
        ConfigurationError: when required settings are missing or invalid
    """
    try:
        if env_file:
            return ScannerConfig(_env_file=env_file, **overrides)
        return ScannerConfig(**overrides)
    except ValidationError as e:
        missing = [
            ".".join(str(part) for part in error["loc"]).upper()
            for error in e.errors()
        ]
        raise ConfigurationError(
            f"Invalid or missing configuration: {', '.join(missing)}"
        ) from e
