"""
Application configuration management
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INCLUDE_PATTERNS = "**/*.ts,**/*.tsx,**/*.js,**/*.jsx,**/*.py,**/*.go,**/*.rs,**/*.java,**/*.cs"
DEFAULT_EXCLUDE_PATTERNS = "node_modules/**,dist/**,build/**,coverage/**,*.min.js,*.bundle.js"

# Ranks used for the inline severity threshold. "all" lets everything through.
SEVERITY_LEVELS = {
    "error": 4,
    "warning": 3,
    "info": 2,
    "all": 1,
}


class Settings(BaseSettings):
    """Application settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # GitHub API Configuration
    github_token: str | None = Field(None)
    github_api_base_url: str = Field("https://api.github.com")
    github_request_delay: float = Field(1.0, ge=0)
    max_github_retries: int = Field(3, ge=0)

    # Application Configuration
    app_name: str = Field("GitHub PR Review Commenter")
    app_version: str = Field("1.0.0")
    debug: bool = Field(False)
    host: str = Field("0.0.0.0")
    port: int = Field(8000)

    # API Configuration
    api_prefix: str = "/api/v1"
    docs_url: str = "/docs"
    redoc_url: str = "/redoc"

    # Logging Configuration
    log_level: str = Field("INFO")
    log_format: str = Field("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    log_file: str | None = Field(None)

    # Review Configuration
    comment_style: Literal["inline", "summary", "both"] = Field("both")
    inline_severity: Literal["error", "warning", "info", "all"] = Field("warning")
    summary_format: Literal["brief", "detailed", "minimal"] = Field("detailed")
    enable_suggestions: bool = Field(True)
    update_existing_comments: bool = Field(True)
    include_patterns: str = Field(DEFAULT_INCLUDE_PATTERNS)
    exclude_patterns: str = Field(DEFAULT_EXCLUDE_PATTERNS)
    max_files: int = Field(50, ge=1, le=200)

    @property
    def include_pattern_list(self) -> list[str]:
        """Include globs as a list"""
        return split_patterns(self.include_patterns)

    @property
    def exclude_pattern_list(self) -> list[str]:
        """Exclude globs as a list"""
        return split_patterns(self.exclude_patterns)

    @property
    def posts_inline(self) -> bool:
        return self.comment_style in ("inline", "both")

    @property
    def posts_summary(self) -> bool:
        return self.comment_style in ("summary", "both")


def split_patterns(value: str) -> list[str]:
    """Split a comma-separated pattern list, dropping blanks"""
    return [pattern.strip() for pattern in value.split(",") if pattern.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()


def get_github_headers(settings: Settings | None = None) -> dict:
    """Get GitHub API headers with authentication"""
    settings = settings or get_settings()
    headers = {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": f"{settings.app_name}/{settings.app_version}",
    }
    if settings.github_token:
        headers["Authorization"] = f"token {settings.github_token}"
    return headers
