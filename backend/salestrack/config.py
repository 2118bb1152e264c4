"""
SalesTrack Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory and the document store implementations.
When:  Loaded once at module import time; validated before the app starts.
"""

from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have defaults suitable for local development. Deployments
    backed by GitHub must provide GITHUB_REPO and GITHUB_TOKEN.

    Attributes are grouped by concern.
    """

    # ── Document Store ────────────────────────────────────────────────────
    # Which backend holds the document: "github" (contents API) or "file"
    # (local JSON file, for development and offline use).
    store_backend: str = Field(default="github")

    # Repository in "owner/name" form; the document is a file inside it.
    github_repo: str = Field(default="", description="GitHub repository (owner/name)")
    github_token: str = Field(default="", description="GitHub token with contents:write")
    github_branch: str = Field(default="main")
    github_api_url: str = Field(default="https://api.github.com")

    # Commit message used for every document write.
    store_commit_message: str = Field(default="Update database")

    # Path of the JSON document inside the repository (or under file_store_root).
    document_path: str = Field(default="database.json")

    # Root directory for the "file" backend.
    file_store_root: str = Field(default="./data")

    # Per-request timeout for store HTTP calls, in seconds.
    store_timeout_seconds: float = Field(default=10.0, gt=0, le=120)

    # ── Cache ─────────────────────────────────────────────────────────────
    # Reads within this many seconds of the last refresh are served from memory.
    cache_ttl_seconds: float = Field(default=30.0, ge=0, le=3600)

    # ── Write Retry ───────────────────────────────────────────────────────
    # Retries spent on merges, version conflicts and transport failures
    # before a write is reported as failed.
    write_max_retries: int = Field(default=3, ge=0, le=10)
    # Fixed pause before retrying a write after a transport failure.
    write_backoff_seconds: float = Field(default=1.0, ge=0, le=30)

    # ── Transport Retry ───────────────────────────────────────────────────
    # Tenacity settings for network-level failures inside the GitHub client.
    store_retry_attempts: int = Field(default=3, ge=1, le=10)
    store_retry_min_wait: float = Field(default=1.0, ge=0, le=30)
    store_retry_max_wait: float = Field(default=5.0, ge=0, le=120)

    # ── CORS ──────────────────────────────────────────────────────────────
    # Comma-separated list; "*" allows any origin (the mobile client has none).
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=8000, ge=1024, le=65535)

    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    @field_validator("store_backend")
    @classmethod
    def validate_store_backend(cls, v: str) -> str:
        """Only the GitHub and local-file backends exist."""
        lower = v.lower()
        if lower not in {"github", "file"}:
            raise ValueError(f"Invalid store_backend '{v}'. Must be 'github' or 'file'")
        return lower

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def validate_required_for_production(self) -> None:
        """
        Validates that the selected store backend is fully configured.

        When:   Called during app startup (lifespan).
        Raises: ValueError listing every missing setting.
        """
        errors = []
        if self.store_backend == "github":
            if not self.github_repo or "/" not in self.github_repo:
                errors.append("GITHUB_REPO is not set (expected 'owner/name').")
            if not self.github_token:
                errors.append("GITHUB_TOKEN is not set.")
        if errors:
            raise ValueError(
                "Configuration validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )


# Singleton instance, imported throughout the application
settings = Settings()
