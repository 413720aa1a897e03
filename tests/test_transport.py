"""Tests for Lambda event adaptation and the app entry point."""

import base64
import json
import time
from unittest.mock import MagicMock
from urllib.error import URLError
from urllib.parse import urlencode

import pytest
from slack_sdk.signature import SignatureVerifier

from slack_webhook.app import SlackWebhook
from slack_webhook.errors import StorageError, UnauthorizedError
from slack_webhook.models import Response
from slack_webhook.storage import DynamoStorage
from slack_webhook.transport import request_from_event, to_lambda_response


def proxy_event(method="POST", body="", headers=None, query=None, encoded=False):
    if encoded:
        body = base64.b64encode(body.encode()).decode()
    return {
        "httpMethod": method,
        "headers": headers or {},
        "queryStringParameters": query,
        "body": body,
        "isBase64Encoded": encoded,
    }


class TestRequestFromEvent:
    def test_normalized_event_passes_through(self):
        request = request_from_event({"method": "GET", "query": {"code": "x"}})
        assert request.method == "GET"
        assert request.query == {"code": "x"}
        assert request.body == {}

    def test_json_body(self):
        body = json.dumps({"type": "event_callback", "team_id": "T1"})
        request = request_from_event(proxy_event(body=body, headers={"Content-Type": "application/json"}))
        assert request.method == "POST"
        assert request.body == {"type": "event_callback", "team_id": "T1"}

    def test_form_body(self):
        body = urlencode({"command": "/deploy", "team_id": "T1", "token": "t"})
        request = request_from_event(proxy_event(
            body=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        ))
        assert request.body["command"] == "/deploy"
        assert request.body["team_id"] == "T1"

    def test_base64_body(self):
        body = json.dumps({"team_id": "T1"})
        request = request_from_event(proxy_event(body=body, encoded=True))
        assert request.body == {"team_id": "T1"}

    def test_http_api_method(self):
        event = {
            "requestContext": {"http": {"method": "GET"}},
            "queryStringParameters": {"state": "abc"},
        }
        request = request_from_event(event)
        assert request.method == "GET"
        assert request.query == {"state": "abc"}

    def test_invalid_signature_is_rejected(self):
        event = proxy_event(body="{}", headers={
            "X-Slack-Request-Timestamp": str(int(time.time())),
            "X-Slack-Signature": "v0=bad",
        })
        with pytest.raises(UnauthorizedError):
            request_from_event(event, signing_secret="signing-secret")

    def test_valid_signature_is_accepted(self):
        body = json.dumps({"team_id": "T1"})
        timestamp = str(int(time.time()))
        signature = SignatureVerifier("signing-secret").generate_signature(
            timestamp=timestamp, body=body,
        )
        event = proxy_event(body=body, headers={
            "X-Slack-Request-Timestamp": timestamp,
            "X-Slack-Signature": signature,
        })
        assert request_from_event(event, signing_secret="signing-secret").body == {"team_id": "T1"}

    def test_form_text_mentioning_payload_keeps_fields(self):
        body = urlencode({"command": "/bot-help", "team_id": "T1", "token": "t", "text": "show payload"})
        request = request_from_event(proxy_event(
            body=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        ))
        assert request.body == {"command": "/bot-help", "team_id": "T1", "token": "t", "text": "show payload"}

    def test_form_payload_field_is_unwrapped(self):
        inner = {"type": "interactive_message", "callback_id": "approve", "team": {"id": "T1"}}
        body = urlencode({"payload": json.dumps(inner)})
        request = request_from_event(proxy_event(
            body=body,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        ))
        assert request.body == inner

    def test_malformed_json_body(self):
        event = proxy_event(body="{bad", headers={"Content-Type": "application/json"})
        with pytest.raises(ValueError):
            request_from_event(event)

    def test_json_array_body(self):
        with pytest.raises(ValueError):
            request_from_event(proxy_event(body="[1, 2]"))

    def test_normalized_event_with_signing_secret_warns(self, caplog):
        with caplog.at_level("WARNING", logger="slack_webhook.transport"):
            request = request_from_event({"method": "POST", "body": {"team_id": "T1"}}, signing_secret="s")
        assert request.body == {"team_id": "T1"}
        assert "signature not verified" in caplog.text


class TestToLambdaResponse:
    def test_redirect(self):
        result = to_lambda_response(Response.redirect("https://example.com"))
        assert result == {
            "statusCode": 302,
            "headers": {"Location": "https://example.com"},
            "body": "",
        }


class TestSlackWebhook:
    @pytest.fixture
    def table(self):
        table = MagicMock()
        table.get_item.return_value = {"Item": {"id": "T1", "access_token": "xoxb-1"}}
        return table

    @pytest.fixture
    def app(self, settings, table, oauth_client):
        return SlackWebhook(
            settings,
            storage=DynamoStorage("test-table", table=table),
            client=oauth_client,
        )

    def test_event_is_dispatched(self, app):
        handler = MagicMock()
        app.on("app_mention")(handler)

        body = json.dumps({
            "token": "secret-token",
            "team_id": "T1",
            "event": {"type": "app_mention", "text": "<@U0BOT> hi"},
        })
        result = app.handler(proxy_event(body=body), None)

        assert result["statusCode"] == 200
        handler.assert_called_once()

    def test_challenge(self, app):
        body = json.dumps({"token": "secret-token", "challenge": "xyz", "type": "url_verification"})
        result = app.handler(proxy_event(body=body), None)
        assert result["statusCode"] == 200
        assert result["body"] == "xyz"

    def test_bad_token(self, app):
        result = app.handler(proxy_event(body=json.dumps({"token": "nope"})), None)
        assert result["statusCode"] == 401

    def test_install_redirect(self, app):
        result = app.handler(proxy_event(method="GET", query={"state": "abc"}), None)
        assert result["statusCode"] == 302
        assert "slack.com/oauth/v2/authorize" in result["headers"]["Location"]

    def test_storage_error_is_500(self, app, table):
        table.get_item.side_effect = StorageError("down")
        body = json.dumps({"token": "secret-token", "team_id": "T1"})
        result = app.handler(proxy_event(body=body), None)
        assert result["statusCode"] == 500

    def test_bad_signature_is_401(self, settings, table, oauth_client):
        settings.signing_secret = "signing-secret"
        app = SlackWebhook(settings, storage=DynamoStorage("t", table=table), client=oauth_client)
        result = app.handler(proxy_event(body="{}", headers={"X-Slack-Signature": "v0=bad"}), None)
        assert result["statusCode"] == 401

    def test_malformed_json_is_400(self, app):
        event = proxy_event(body="{bad", headers={"content-type": "application/json"})
        result = app.handler(event, None)
        assert result["statusCode"] == 400

    def test_install_network_error_redirects(self, app, oauth_client):
        oauth_client.install.side_effect = URLError("timed out")
        result = app.handler(proxy_event(method="GET", query={"code": "grant", "state": "abc"}), None)
        assert result["statusCode"] == 302
        assert result["headers"]["Location"].startswith("https://example.com/installed?")
        assert "error=" in result["headers"]["Location"]
