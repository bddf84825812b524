import tempfile
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Cached credentials live under the system temp dir, namespaced so other
# tools never collide with (or read) our token file.
CACHE_NAMESPACE = "com.brainium.git-credential-github-app"
CACHE_FILENAME = "creds.json"

# Account whose installation of the app we mint tokens for.
DEFAULT_OWNER = "BrainiumLLC"

# The only remote this helper answers for.
TARGET_PROTOCOL = "https"
TARGET_HOST = "github.com"


def default_cache_file() -> Path:
    return Path(tempfile.gettempdir()) / CACHE_NAMESPACE / CACHE_FILENAME


class Settings(BaseSettings):
    """Helper settings loaded from environment variables.

    The GitHub App credentials default to empty strings and are only
    validated when a token actually has to be minted, so `store`, `erase`
    and cache hits keep working without them.

    Environment variables
    ─────────────────────
    • GITHUB_APP_ID            numeric app id
    • GITHUB_APP_KEY           PEM contents of the app's private key
    • GITHUB_APP_OWNER         account the app is installed on
    • GITHUB_API_URL           REST API base (GitHub Enterprise support)
    • GHAPP_CREDS_CACHE_FILE   override for the cache file location
    • GHAPP_CREDS_DEBUG        console-rendered debug logging
    • GHAPP_CREDS_LOG_LEVEL    stdlib level name, WARNING by default
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # GitHub App. The private key is the PEM contents, not a file path.
    github_app_id: str = ""
    github_app_key: str = ""
    github_app_owner: str = DEFAULT_OWNER
    github_api_url: str = "https://api.github.com"

    cache_file: Path = Field(
        default_factory=default_cache_file,
        validation_alias=AliasChoices("ghapp_creds_cache_file", "cache_file"),
    )

    debug: bool = Field(
        default=False,
        validation_alias=AliasChoices("ghapp_creds_debug", "debug"),
    )
    log_level: str = Field(
        default="WARNING",
        validation_alias=AliasChoices("ghapp_creds_log_level", "log_level"),
    )


def get_settings() -> Settings:
    return Settings()
