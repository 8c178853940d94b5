"""
Configuration management using pydantic-settings.
Loads from config.yaml, .env, and environment variables.
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file at module import
load_dotenv()

logger = logging.getLogger(__name__)


class JellyfinSettings(BaseSettings):
    """Jellyfin API settings."""

    model_config = SettingsConfigDict(
        env_prefix="JELLYFIN_",
        extra="ignore",
    )

    host: str = Field(default="http://localhost:8096", description="Jellyfin server URL")
    api_key: str = Field(default="", description="Jellyfin API key")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_tls: bool = Field(default=True, description="Verify TLS certificates for HTTPS hosts")


class AniListSettings(BaseSettings):
    """AniList API settings and per-user sync policy."""

    model_config = SettingsConfigDict(
        env_prefix="ANILIST_",
        extra="ignore",
    )

    api_url: str = Field(default="https://graphql.anilist.co", description="AniList GraphQL endpoint")
    timeout: float = Field(default=30.0, description="Request timeout in seconds")

    # Tokens: one per Jellyfin username, global token as fallback
    global_token: str = Field(default="", description="Token used when a user has no token of their own")
    user_tokens: dict[str, str] = Field(default_factory=dict, description="Jellyfin username -> AniList token")

    # Per-user policy
    user_auto_add: dict[str, bool] = Field(
        default_factory=dict,
        description="Jellyfin username -> add missing anime to the AniList list (default true)",
    )
    user_bulk_update: dict[str, bool] = Field(
        default_factory=dict,
        description="Jellyfin username -> run a library sync on login (default false)",
    )

    def token_for_user(self, username: str) -> str:
        """Get the AniList token for a Jellyfin user, falling back to the global token."""
        if username in self.user_tokens:
            return self.user_tokens[username]
        if self.global_token:
            logger.debug("Using global AniList token for %s", username)
            return self.global_token
        return ""

    def auto_add_for_user(self, username: str) -> bool:
        """Whether anime missing from the user's list may be added automatically."""
        return self.user_auto_add.get(username, True)

    def bulk_update_for_user(self, username: str) -> bool:
        """Whether a login should trigger a full library sync (bulk updates are intensive)."""
        return self.user_bulk_update.get(username, False)


class SyncSettings(BaseSettings):
    """Sync engine tuning."""

    model_config = SettingsConfigDict(
        env_prefix="SYNC_",
        extra="ignore",
    )

    rate_limit_backoff_seconds: float = Field(default=10.0, description="Wait before the single retry on HTTP 429")
    pacing_seconds: float = Field(default=2.0, description="Delay between series during a library sync")
    search_page_size: int = Field(default=10, description="Candidates requested per AniList search")
    library_names: list[str] = Field(
        default_factory=lambda: ["Animes", "Anime"],
        description="Library names searched for the anime library",
    )
    provider_name: str = Field(default="AniList", description="Jellyfin provider id holding the AniList id")


class PathSettings(BaseSettings):
    """Path configuration settings."""

    data_dir: Path = Field(default=Path("./data"))
    missing_series_file: Path = Field(default=Path("./data/missing_anilist_series.json"))


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    jellyfin: JellyfinSettings = Field(default_factory=JellyfinSettings)
    anilist: AniListSettings = Field(default_factory=AniListSettings)
    sync: SyncSettings = Field(default_factory=SyncSettings)
    paths: PathSettings = Field(default_factory=PathSettings)

    verbose: bool = Field(default=True)
    debug: bool = Field(default=False)
    log_file: Path | None = Field(default=None)

    @classmethod
    def load(cls, config_path: Path | None = None) -> "Settings":
        """Load settings from config.yaml and environment."""
        config_data: dict[str, Any] = {}

        if config_path is None:
            config_path = Path("config.yaml")

        if config_path.exists():
            with open(config_path, encoding="utf-8") as f:
                yaml_content: Any = yaml.safe_load(f)
                yaml_config: dict[str, Any] = yaml_content or {}

            # Map yaml structure to settings
            if "jellyfin" in yaml_config:
                config_data["jellyfin"] = JellyfinSettings(**yaml_config["jellyfin"])  # type: ignore
            if "anilist" in yaml_config:
                anilist_yaml = yaml_config["anilist"]
                if "user_tokens" in anilist_yaml and not isinstance(anilist_yaml["user_tokens"], dict):
                    logger.warning("anilist.user_tokens in config.yaml must be a mapping; ignoring it")
                    del anilist_yaml["user_tokens"]
                config_data["anilist"] = AniListSettings(**anilist_yaml)  # type: ignore
            if "sync" in yaml_config:
                config_data["sync"] = SyncSettings(**yaml_config["sync"])  # type: ignore
            if "paths" in yaml_config:
                config_data["paths"] = PathSettings(**yaml_config["paths"])  # type: ignore
            for key in ("verbose", "debug", "log_file"):
                if key in yaml_config:
                    config_data[key] = yaml_config[key]

        # Sections absent from YAML still pick up their environment variables
        if "jellyfin" not in config_data:
            config_data["jellyfin"] = JellyfinSettings()
        if "anilist" not in config_data:
            config_data["anilist"] = AniListSettings()

        return cls(**config_data)  # type: ignore


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings(config_path: Path | None = None) -> Settings:
    """Reload settings from config."""
    global _settings
    _settings = Settings.load(config_path)
    return _settings
