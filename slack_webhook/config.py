"""
Environment configuration.

Values are read once at process start. A `.env` file next to the
deployment package is loaded first when present.
"""

import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_AUTH_URL = "https://slack.com/oauth/v2/authorize"
DEFAULT_SCOPES = "app_mentions:read,chat:write,commands"


def _flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def _list(name: str, default: str = "") -> list[str]:
    raw = os.getenv(name, default)
    return [s.strip() for s in raw.split(",") if s.strip()]


@dataclass
class Settings:
    """Process configuration for the webhook."""
    verification_token: Optional[str] = None
    signing_secret: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    scopes: list[str] = field(default_factory=list)
    user_scopes: list[str] = field(default_factory=list)
    redirect_uri: Optional[str] = None
    auth_url: str = DEFAULT_AUTH_URL
    install_redirect: str = ""
    table_name: str = "slack-installations"
    is_offline: bool = False
    dynamodb_endpoint: Optional[str] = None
    region: Optional[str] = None
    ignore_bots: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            verification_token=os.getenv("VERIFICATION_TOKEN") or None,
            signing_secret=os.getenv("SLACK_SIGNING_SECRET") or None,
            client_id=os.getenv("SLACK_CLIENT_ID") or None,
            client_secret=os.getenv("SLACK_CLIENT_SECRET") or None,
            scopes=_list("SLACK_SCOPES", DEFAULT_SCOPES),
            user_scopes=_list("SLACK_USER_SCOPES"),
            redirect_uri=os.getenv("SLACK_REDIRECT_URI") or None,
            auth_url=os.getenv("SLACK_AUTH_URL", DEFAULT_AUTH_URL),
            install_redirect=os.getenv("INSTALL_REDIRECT", ""),
            table_name=os.getenv("TABLE_NAME", "slack-installations"),
            is_offline=_flag("IS_OFFLINE"),
            dynamodb_endpoint=os.getenv("CONFIG_DYNAMODB_ENDPOINT") or None,
            region=os.getenv("AWS_REGION") or None,
            ignore_bots=_flag("IGNORE_BOTS"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )


def load_environment(env_file: str | Path | None = None) -> Settings:
    """Load `.env` (if any) and build settings from the environment."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    settings = Settings.from_env()

    missing = [
        var for var, value in (
            ("SLACK_CLIENT_ID", settings.client_id),
            ("SLACK_CLIENT_SECRET", settings.client_secret),
            ("INSTALL_REDIRECT", settings.install_redirect),
        )
        if not value
    ]
    if missing:
        logger.warning(
            f"Missing environment variables: {', '.join(missing)} - installs will fail"
        )
    if not settings.verification_token and not settings.signing_secret:
        logger.warning("No VERIFICATION_TOKEN or SLACK_SIGNING_SECRET - requests are not verified")

    return settings
