"""
Slack API access: the OAuth client used by installs, and the per-dispatch
bot context handed to handlers.
"""

import logging
from functools import cached_property
from typing import Any, Optional

import requests
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError
from slack_sdk.oauth import AuthorizeUrlGenerator

from .config import Settings
from .errors import RemoteApiError
from .models import AuthorizationRecord, Payload

logger = logging.getLogger(__name__)


class SlackOAuthClient:
    """Builds install URLs and exchanges OAuth grant codes."""

    def __init__(self, settings: Settings, web_client: Optional[WebClient] = None):
        self.settings = settings
        self.web_client = web_client or WebClient()

    def get_auth_url(self, query: dict[str, Any]) -> str:
        """Authorization URL carrying the request's `state`."""
        generator = AuthorizeUrlGenerator(
            client_id=self.settings.client_id or "",
            scopes=self.settings.scopes,
            user_scopes=self.settings.user_scopes,
            redirect_uri=self.settings.redirect_uri,
            authorization_url=self.settings.auth_url,
        )
        return generator.generate(state=query.get("state") or "")

    def install(self, query: dict[str, Any]) -> dict[str, Any]:
        """
        Exchange a grant code for an access token.

        Returns:
            The `oauth.v2.access` response body

        Raises:
            RemoteApiError: Slack rejected the exchange
        """
        try:
            response = self.web_client.oauth_v2_access(
                client_id=self.settings.client_id,
                client_secret=self.settings.client_secret,
                code=query["code"],
                redirect_uri=self.settings.redirect_uri,
            )
        except SlackApiError as e:
            logger.error(f"OAuth exchange failed: {e}")
            raise RemoteApiError.from_slack_error(e) from e

        return dict(response.data)


class BotContext:
    """
    An installation acting on one payload.

    Built fresh for every dispatch from the team's authorization record (which
    may be missing for teams that never installed) and the current payload.
    """

    def __init__(self, auth: Optional[AuthorizationRecord], payload: dict):
        self.auth = auth
        self.payload = payload if isinstance(payload, Payload) else Payload(payload or {})

    @property
    def team_id(self) -> Optional[str]:
        if self.auth is not None:
            return self.auth.id
        return self.payload.team_id

    @property
    def token(self) -> Optional[str]:
        return self.auth.access_token if self.auth is not None else None

    @cached_property
    def client(self) -> WebClient:
        """Web API client bound to the bot token."""
        return WebClient(token=self.token)

    def send(self, method: str, **kwargs: Any) -> dict[str, Any]:
        """Call any Web API method as the bot."""
        try:
            response = self.client.api_call(method, json=kwargs)
        except SlackApiError as e:
            logger.error(f"Slack API call {method} failed: {e}")
            raise RemoteApiError.from_slack_error(e) from e
        return dict(response.data)

    def reply(self, message: str | dict[str, Any], **kwargs: Any) -> dict[str, Any]:
        """Post a message to the channel the payload came from."""
        if isinstance(message, str):
            message = {"text": message}
        channel = kwargs.pop("channel", None) or self.payload.channel_id
        if not channel:
            raise RemoteApiError("channel_not_found", ["Payload has no channel to reply to"])
        return self.send("chat.postMessage", channel=channel, **message, **kwargs)

    def respond(self, message: str | dict[str, Any]) -> None:
        """Answer through the payload's `response_url` (commands, interactions)."""
        if isinstance(message, str):
            message = {"text": message}

        response_url = self.payload.get("response_url")
        if not response_url:
            raise RemoteApiError("no_response_url", ["Payload has no response_url"])

        try:
            resp = requests.post(response_url, json=message, timeout=10)
            resp.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.error(f"Response URL request failed: {e}")
            raise RemoteApiError("response_url_failed", [str(e)]) from e

    def __repr__(self) -> str:
        return f"BotContext(team_id={self.team_id!r}, kind={self.payload.kind.value})"
