"""
Configuration management for CFP to Trello.
Loads settings from environment variables and provides defaults.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from .trello_models import PermissionLevel


DEFAULT_TOKEN_FILE = str(Path.home() / ".config" / "cfp-to-trello" / "trello.json")


@dataclass
class TrelloConfig:
    """Trello API and OAuth configuration."""
    api_key: str = ""
    api_secret: str = ""
    api_base_url: str = "https://api.trello.com/1"
    app_name: str = "BDX I/O - CFP to Trello"
    token_file: str = DEFAULT_TOKEN_FILE
    callback_port: int = 8000
    token_validity_days: int = 30
    auth_timeout_seconds: int = 300

    @classmethod
    def from_env(cls) -> "TrelloConfig":
        return cls(
            api_key=os.getenv("TRELLO_KEY", ""),
            api_secret=os.getenv("TRELLO_SECRET", ""),
            api_base_url=os.getenv("TRELLO_API_BASE_URL", "https://api.trello.com/1"),
            app_name=os.getenv("TRELLO_APP_NAME", "BDX I/O - CFP to Trello"),
            token_file=os.getenv("TRELLO_TOKEN_FILE", DEFAULT_TOKEN_FILE),
            callback_port=int(os.getenv("TRELLO_CALLBACK_PORT", "8000")),
            token_validity_days=int(os.getenv("TRELLO_TOKEN_VALIDITY_DAYS", "30")),
            auth_timeout_seconds=int(os.getenv("TRELLO_AUTH_TIMEOUT_SECONDS", "300")),
        )


@dataclass
class ConferenceHallConfig:
    """Conference-Hall (CFP) configuration."""
    base_url: str = "https://conference-hall.io"
    event_id: str = ""
    api_key: str = ""
    export_path: str = ""
    timezone: str = "Europe/Paris"  # Organizer messages are dated in this zone
    dry_run: bool = False

    @classmethod
    def from_env(cls) -> "ConferenceHallConfig":
        return cls(
            base_url=os.getenv("CFP_URL", "https://conference-hall.io"),
            event_id=os.getenv("CFP_EVENT_ID", ""),
            api_key=os.getenv("CFP_API_KEY", ""),
            export_path=os.getenv("CFP_EXPORT_PATH", ""),
            timezone=os.getenv("CFP_TIMEZONE", "Europe/Paris"),
            dry_run=os.getenv("CFP_DRY_RUN", "false").lower() == "true",
        )


@dataclass
class GeoConfig:
    """Speaker geolocation lookup configuration."""
    api_url: str = "https://geo.api.gouv.fr/communes"
    enabled: bool = True

    @classmethod
    def from_env(cls) -> "GeoConfig":
        return cls(
            api_url=os.getenv("GEO_API_URL", "https://geo.api.gouv.fr/communes"),
            enabled=os.getenv("GEO_ENABLED", "true").lower() == "true",
        )


@dataclass
class ImportConfig:
    """Deliberation boards configuration."""
    organization: str = "bdxio"
    board_name_prefix: str = "Délibération"
    visibility: PermissionLevel = PermissionLevel.ORG

    # Formats that get a board (empty = every format of the export)
    formats: list = field(default_factory=list)

    @classmethod
    def from_env(cls) -> "ImportConfig":
        formats = os.getenv("BOARD_FORMATS", "")
        formats_list = [f.strip() for f in formats.split(",") if f.strip()]

        return cls(
            organization=os.getenv("TRELLO_ORGANIZATION", "bdxio"),
            board_name_prefix=os.getenv("BOARD_NAME_PREFIX", "Délibération"),
            visibility=PermissionLevel(os.getenv("BOARD_VISIBILITY", "org").lower()),
            formats=formats_list,
        )


@dataclass
class AppConfig:
    """Main application configuration."""
    trello: TrelloConfig
    conference_hall: ConferenceHallConfig
    geo: GeoConfig
    importer: ImportConfig

    # Application settings
    log_dir: str = "logs"
    debug_mode: bool = False
    dashboard_host: str = "127.0.0.1"
    dashboard_port: int = 8080

    @classmethod
    def from_env(cls) -> "AppConfig":
        return cls(
            trello=TrelloConfig.from_env(),
            conference_hall=ConferenceHallConfig.from_env(),
            geo=GeoConfig.from_env(),
            importer=ImportConfig.from_env(),
            log_dir=os.getenv("LOG_DIR", "logs"),
            debug_mode=os.getenv("DEBUG_MODE", "false").lower() == "true",
            dashboard_host=os.getenv("DASHBOARD_HOST", "127.0.0.1"),
            dashboard_port=int(os.getenv("DASHBOARD_PORT", "8080")),
        )

    def validate(self) -> list[str]:
        """Validate the settings every action needs and return a list of errors."""
        errors = []

        if not self.trello.api_key:
            errors.append("TRELLO_KEY is required")
        if not self.trello.api_secret:
            errors.append("TRELLO_SECRET is required")
        if not self.conference_hall.event_id:
            errors.append("CFP_EVENT_ID is required")

        return errors

    def validate_import(self) -> list[str]:
        """Validate configuration for the import action."""
        errors = self.validate()
        if not self.conference_hall.export_path:
            errors.append("CFP_EXPORT_PATH is required to import a CFP export")
        return errors

    def validate_publish(self) -> list[str]:
        """Validate configuration for the accept/reject actions."""
        errors = self.validate()
        if not self.conference_hall.api_key:
            errors.append("CFP_API_KEY is required to publish deliberations")
        return errors


def load_config() -> AppConfig:
    """Load configuration from environment variables."""
    # Try to load .env file if it exists
    env_file = Path(__file__).parent.parent / ".env"
    if env_file.exists():
        with open(env_file, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#") and "=" in line:
                    key, value = line.split("=", 1)
                    os.environ.setdefault(key.strip(), value.strip().strip('"\''))

    return AppConfig.from_env()
