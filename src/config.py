"""
Application Configuration Module.

Manages application settings and environment variables using Pydantic for validation.
Provides centralized configuration management with type safety and validation.

Features:
- Environment variable loading and validation
- Secure credential management
- Insight generation, cache and batch tuning
- Path normalization for output directories
"""

from typing import List, Optional
import os

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logger import LogManager


class Settings(BaseSettings):
    """
    Application configuration settings with validation.

    Manages and validates all application settings including:
    - Application identification
    - GitHub authentication and repository selection
    - Logging settings
    - OpenAI configuration
    - Insight cache, deadline and batch settings

    Attributes:
        app_name (str): Name of the application
        dev (bool): Debug mode flag
        log_dir (str): Directory for log files
        log_level (int): Logging level (default: info)
        github_token (Optional[SecretStr]): GitHub API authentication token
        github_repo_urls (str): Comma-separated repository URLs or owner/repo names
        openai_api_key (Optional[SecretStr]): OpenAI API key
        openai_llm_model (str): OpenAI LLM model to use
        insight_timeout_seconds (float): Deadline for a single text generation call
        insight_cache_ttl_seconds (int): Time-to-live of cached insights
        insight_cache_max_entries (int): Maximum number of cached insights
        batch_max_size (int): Maximum number of repositories in one batch
        batch_parallel (bool): Whether batches run concurrently
    """

    # Application settings
    app_name: str = Field(default="RepoVibe", description="Application name")
    dev: bool = Field(default=False, description="Debug mode")
    log_dir: str = Field(default="logs", description="Logging directory")
    log_level: int = Field(default=20, description="Logging level, default info")

    # GitHub configuration
    github_token: Optional[SecretStr] = Field(default=None, description="GitHub token")
    github_repo_urls: str = Field(
        default="", description="Comma-separated GitHub repositories to analyze"
    )
    commit_history_limit: int = Field(
        default=30, description="Number of recent commits collected per repository"
    )
    contributor_limit: int = Field(
        default=30, description="Number of contributors collected per repository"
    )

    # OpenAI configuration
    openai_api_key: Optional[SecretStr] = Field(default=None, description="OpenAI API key")
    openai_llm_model: str = Field(default="gpt-4o-mini", description="OpenAI LLM model")
    openai_encoding_name: str = Field(default="o200k_base", description="Encoding name")
    openai_max_requests_per_minute: int = Field(
        default=500, description="OpenAI max requests per minute"
    )
    openai_max_tokens_per_minute: int = Field(
        default=200000, description="OpenAI max prompt tokens per minute"
    )
    openai_period: int = Field(default=60, description="OpenAI period in seconds")
    openai_max_output_tokens: int = Field(
        default=1024, description="Upper bound on generated tokens per insight"
    )

    # Insight generation configuration
    insight_timeout_seconds: float = Field(
        default=8.0, gt=0, description="Deadline for a single text generation call"
    )
    insight_cache_ttl_seconds: int = Field(
        default=600, gt=0, description="Insight cache time-to-live in seconds"
    )
    insight_cache_max_entries: int = Field(
        default=50, gt=0, description="Maximum number of cached insights"
    )

    # Batch configuration
    batch_max_size: int = Field(
        default=10, gt=0, description="Maximum repositories per batch"
    )
    batch_parallel: bool = Field(default=True, description="Run batches concurrently")

    report_output_dir: str = Field(
        default="reports", description="Directory for JSON analysis output"
    )

    @property
    def repository_urls(self) -> List[str]:
        """
        Get list of repository URLs from configuration.

        Splits and cleans the comma-separated repository URLs string.

        Returns:
            List[str]: List of cleaned repository URLs
        """
        return [url.strip() for url in self.github_repo_urls.split(",") if url.strip()]

    @field_validator("report_output_dir")
    def ensure_absolute_path(cls, v: str) -> str:
        """
        Ensure output directory path is absolute.

        Args:
            v (str): Directory path to validate

        Returns:
            str: Absolute path to output directory
        """
        if not os.path.isabs(v):
            return os.path.abspath(v)
        return v

    # Configure env file loading
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in .env file
    )


# Create global settings instance
settings = Settings()

# Initialize logging configuration
logger = LogManager(
    app_name=settings.app_name.lower(),
    log_dir=settings.log_dir,
    development=settings.dev,
    level=settings.log_level,
).logger
