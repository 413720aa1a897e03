"""
Error types raised by the webhook.
"""

from typing import Any, Optional


class SlackWebhookError(Exception):
    """Base class for all webhook errors."""


class UnauthorizedError(SlackWebhookError):
    """Raised when a request fails token or signature verification."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class StorageError(SlackWebhookError):
    """Raised when the record store fails. The original error is chained."""


class RemoteApiError(SlackWebhookError):
    """
    A classified Slack API error.

    Slack reports failures as an envelope like:

        {"ok": false, "error": "invalid_code",
         "response_metadata": {"messages": ["[ERROR] ..."]}}

    `message` holds the `error` string and `messages` the structured detail
    lines from `response_metadata`.
    """

    def __init__(self, message: str, messages: Optional[list[str]] = None):
        super().__init__(message)
        self.message = message
        self.messages = list(messages or [])

    @classmethod
    def from_response(cls, data: Optional[dict[str, Any]]) -> "RemoteApiError":
        """Build from a Slack error envelope. Missing fields are tolerated."""
        data = data or {}
        metadata = data.get("response_metadata") or {}
        return cls(
            data.get("error") or "unknown_error",
            metadata.get("messages") or [],
        )

    @classmethod
    def from_slack_error(cls, error: Exception) -> "RemoteApiError":
        """Build from a `slack_sdk.errors.SlackApiError`."""
        response = getattr(error, "response", None)
        data = getattr(response, "data", None)
        if isinstance(data, dict):
            return cls.from_response(data)
        return cls(str(error))

    def to_dict(self) -> dict[str, Any]:
        return {"error": self.message, "messages": self.messages}

    def __repr__(self) -> str:
        return f"RemoteApiError({self.message!r}, messages={self.messages!r})"
