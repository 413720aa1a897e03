"""
Data models for the Slack webhook.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


WILDCARD = "*"

Handler = Callable[..., Any]


class PayloadKind(Enum):
    """Known kinds of inbound Slack payloads."""
    URL_VERIFICATION = "url_verification"
    EVENT_CALLBACK = "event_callback"
    SLASH_COMMAND = "slash_command"
    OUTGOING_WEBHOOK = "webhook"
    INTERACTIVE_MESSAGE = "interactive_message"
    INTERACTION = "interaction"
    OTHER = "other"


# Interactivity payloads that carry a `type` but no `callback_id` of their own
INTERACTION_TYPES = {
    "block_actions",
    "block_suggestion",
    "dialog_submission",
    "message_action",
    "shortcut",
    "view_submission",
    "view_closed",
}


class Payload(dict):
    """
    One inbound Slack payload.

    Behaves as the raw dict Slack sent, so handlers read fields as usual.
    Every field is optional; `kind` is a best-effort tag and never restricts
    which fields may be present.
    """

    @classmethod
    def from_body(cls, body: Optional[dict]) -> "Payload":
        """
        Build from a request body.

        Interactive messages arrive form-encoded with the real envelope as
        a JSON string in the `payload` field.
        """
        body = dict(body or {})
        if "payload" in body:
            inner = body["payload"]
            if isinstance(inner, str):
                inner = json.loads(inner)
            if inner is not None and not isinstance(inner, dict):
                raise ValueError(f"Interactive payload is not an object: {type(inner).__name__}")
            return cls(inner or {})
        return cls(body)

    @property
    def kind(self) -> PayloadKind:
        if self.get("challenge") is not None or self.get("type") == "url_verification":
            return PayloadKind.URL_VERIFICATION
        if self.get("event") is not None:
            return PayloadKind.EVENT_CALLBACK
        if self.get("command") is not None:
            return PayloadKind.SLASH_COMMAND
        if self.get("trigger_word") is not None:
            return PayloadKind.OUTGOING_WEBHOOK
        if self.get("callback_id") is not None:
            return PayloadKind.INTERACTIVE_MESSAGE
        if self.get("type") in INTERACTION_TYPES:
            return PayloadKind.INTERACTION
        return PayloadKind.OTHER

    @property
    def team_id(self) -> Optional[str]:
        if self.get("team_id"):
            return self["team_id"]
        team = self.get("team")
        if isinstance(team, dict):
            return team.get("id")
        return None

    @property
    def token(self) -> Optional[str]:
        return self.get("token")

    @property
    def challenge(self) -> Optional[str]:
        return self.get("challenge")

    @property
    def event(self) -> dict:
        event = self.get("event")
        return event if isinstance(event, dict) else {}

    @property
    def bot_id(self) -> Optional[str]:
        """Bot id of the sender, looked up on the event when there is one."""
        source = self.get("event") if isinstance(self.get("event"), dict) else self
        return source.get("bot_id")

    @property
    def channel_id(self) -> Optional[str]:
        if self.event.get("channel"):
            return self.event["channel"]
        if self.get("channel_id"):
            return self["channel_id"]
        channel = self.get("channel")
        if isinstance(channel, dict):
            return channel.get("id")
        return channel


@dataclass
class AuthorizationRecord:
    """One installed integration for one team, keyed by team id."""
    id: str
    access_token: Optional[str] = None
    bot_user_id: Optional[str] = None
    installer_id: Optional[str] = None
    scope: Optional[str] = None
    item: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_item(cls, item: dict[str, Any]) -> "AuthorizationRecord":
        """Build from a stored item or an `oauth.v2.access` response."""
        authed_user = item.get("authed_user") or {}
        bot = item.get("bot") or {}
        team = item.get("team") or {}
        return cls(
            id=item.get("id") or item.get("team_id") or team.get("id"),
            access_token=item.get("access_token") or bot.get("bot_access_token"),
            bot_user_id=item.get("bot_user_id") or bot.get("bot_user_id"),
            installer_id=authed_user.get("id") or item.get("user_id"),
            scope=item.get("scope"),
            item=item,
        )


@dataclass(frozen=True)
class HandlerRegistration:
    """A handler registered under one topic key."""
    topic: str
    handler: Handler

    @property
    def name(self) -> str:
        return getattr(self.handler, "__qualname__", None) or repr(self.handler)


@dataclass
class HandlerOutcome:
    """Result of one handler invocation within a dispatch."""
    topic: str
    handler: str
    error: Optional[BaseException] = None
    result: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class DispatchReport:
    """Outcomes of every handler started by one dispatch."""
    topics: list[str]
    outcomes: list[HandlerOutcome] = field(default_factory=list)

    @property
    def failures(self) -> list[HandlerOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def invoked(self) -> int:
        return len(self.outcomes)


@dataclass
class Request:
    """A normalized inbound HTTP request."""
    method: str
    query: dict[str, Any] = field(default_factory=dict)
    body: dict[str, Any] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)


@dataclass
class Response:
    """What the webhook answers with."""
    status: int = 200
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def redirect(cls, url: str) -> "Response":
        return cls(status=302, headers={"Location": url})

    @classmethod
    def text(cls, body: str, status: int = 200) -> "Response":
        return cls(status=status, body=body, headers={"Content-Type": "text/plain"})

    @property
    def location(self) -> Optional[str]:
        return self.headers.get("Location")
