"""
AWS Lambda / API Gateway adaptation.

Turns proxy events into `Request`s and `Response`s into proxy results.
"""

import base64
import logging
from typing import Any, Optional
from urllib.parse import parse_qsl

from slack_bolt.request.internals import parse_body
from slack_sdk.signature import SignatureVerifier

from .errors import UnauthorizedError
from .models import Request, Response

logger = logging.getLogger(__name__)


def _content_type(headers: dict[str, str]) -> Optional[str]:
    value = headers.get("content-type")
    if not value:
        return None
    return value.split(";")[0].strip()


def _parse_body(raw: str, content_type: Optional[str]) -> dict[str, Any]:
    """
    Parse a JSON or form-encoded body.

    Form fields are only handed to `parse_body` when there really is a
    `payload` field; a slash command whose text mentions "payload" stays a
    plain form.

    Raises:
        ValueError: The body is malformed or not an object
    """
    if content_type == "application/json" or raw.lstrip().startswith(("{", "[")):
        body = parse_body(raw, "application/json")
    else:
        body = dict(parse_qsl(raw, keep_blank_values=True))
        if "payload" in body:
            body = parse_body(raw, content_type)

    if not isinstance(body, dict):
        raise ValueError(f"Request body is not an object: {type(body).__name__}")
    return body


def request_from_event(event: dict[str, Any], signing_secret: Optional[str] = None) -> Request:
    """
    Build a request from a Lambda event.

    Accepts API Gateway proxy events (REST and HTTP API) and events that are
    already normalized to `method` / `query` / `body`. Normalized events carry
    no raw body, so the request signature cannot be checked for them.

    Raises:
        UnauthorizedError: A signing secret is set and the signature is invalid
        ValueError: The body is malformed
    """
    if "method" in event:
        if signing_secret:
            logger.warning("Normalized event received; request signature not verified")
        return Request(
            method=event["method"],
            query=event.get("query") or {},
            body=event.get("body") or {},
            headers=event.get("headers") or {},
        )

    method = event.get("httpMethod") or (
        event.get("requestContext", {}).get("http", {}).get("method", "")
    )
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    raw = event.get("body") or ""
    if event.get("isBase64Encoded") and raw:
        raw = base64.b64decode(raw).decode("utf-8")

    if signing_secret and method.upper() == "POST":
        verifier = SignatureVerifier(signing_secret)
        if not verifier.is_valid_request(raw, headers):
            raise UnauthorizedError("Invalid request signature")

    return Request(
        method=method,
        query=event.get("queryStringParameters") or {},
        body=_parse_body(raw, _content_type(headers)) if raw else {},
        headers=headers,
    )


def to_lambda_response(response: Response) -> dict[str, Any]:
    """API Gateway proxy result for a response."""
    return {
        "statusCode": response.status,
        "headers": dict(response.headers),
        "body": response.body,
    }
