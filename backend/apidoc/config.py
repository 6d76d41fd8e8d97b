"""
apidoc — Application Configuration
===================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory and the documentation router.
When:  Loaded once at module import time; validated before app starts.

The `doc_*` fields describe the documentation copyright block. They are
turned into an immutable `DocumentCopyright` by `document_copyright()`;
the model builder never reads `settings` directly.
"""

from typing import List, Optional, Set

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from apidoc.core.urls import PLACEHOLDER
from apidoc.schemas.document import DocumentCopyright, ResponseCode


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings have sensible defaults for development. Attributes are
    grouped by concern for readability.
    """

    # ── Documentation Copyright ───────────────────────────────────────────
    # What: Free-text header shown by documentation front-ends
    doc_title: str = Field(default="API Documentation")
    doc_team: str = Field(default="")
    doc_version: str = Field(default="1.0.0")
    doc_copyright: str = Field(default="")

    # What: Deliberately inverted switch; True means "this is production,
    # do NOT expose documentation"
    doc_online: bool = Field(default=False)

    # What: False behaves as if no copyright block were configured at all
    doc_enabled: bool = Field(default=True)

    # What: Ignore rules, comma-separated
    # Format: "/internal/*,/users|post,health"
    doc_ignore_urls: str = Field(default="")

    # What: Response-code catalog used by routes that declare none
    # Format: JSON list, e.g. '[{"code": 200, "msg": "ok"}]'
    doc_global_response: List[ResponseCode] = Field(default_factory=list)

    doc_return_record_level: bool = Field(default=False)
    doc_comment_in_return_example: bool = Field(default=True)

    @property
    def ignore_url_set(self) -> Set[str]:
        """Splits comma-separated ignore rules into a set (blank entries dropped)."""
        return {rule.strip() for rule in self.doc_ignore_urls.split(",") if rule.strip()}

    # ── Documentation Routing ─────────────────────────────────────────────
    api_prefix: str = Field(default="/api")
    example_path: str = Field(default="/example/{id}.json")

    # What: Public base URL used in example URLs (e.g. https://api.example.com)
    # Empty: taken from the first documentation request's base URL
    domain: str = Field(default="")

    # What: Token stripped from handler owner names for default module names
    group_suffix: str = Field(default="Controller")

    @field_validator("example_path")
    @classmethod
    def validate_example_path(cls, v: str) -> str:
        """Example path must carry exactly one `{...}` placeholder for the route id."""
        count = len(PLACEHOLDER.findall(v))
        if count != 1:
            raise ValueError(
                f"Invalid example_path '{v}'. Expected exactly one placeholder, found {count}"
            )
        return v

    @field_validator("api_prefix")
    @classmethod
    def validate_api_prefix(cls, v: str) -> str:
        """Normalizes the prefix to a leading slash and no trailing slash."""
        v = v.strip().rstrip("/")
        if v and not v.startswith("/"):
            v = "/" + v
        return v

    # ── CORS ──────────────────────────────────────────────────────────────
    # Format: Comma-separated URLs
    cors_origins: str = Field(default="http://localhost:3000")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",")]

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

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }

    def document_copyright(self) -> Optional[DocumentCopyright]:
        """
        What:    Builds the immutable copyright block handed to the model builder.
        Returns: None when documentation is not configured (`doc_enabled=False`).
        """
        if not self.doc_enabled:
            return None
        return DocumentCopyright(
            title=self.doc_title,
            team=self.doc_team,
            version=self.doc_version,
            copyright=self.doc_copyright,
            online=self.doc_online,
            ignore_url_set=frozenset(self.ignore_url_set),
            global_response=tuple(self.doc_global_response),
            return_record_level=self.doc_return_record_level,
            comment_in_return_example=self.doc_comment_in_return_example,
        )


# Singleton instance, imported throughout the application
settings = Settings()
