"""Shared fixtures for webhook tests."""

from unittest.mock import MagicMock

import pytest

from slack_webhook.config import Settings
from slack_webhook.dispatcher import Dispatcher
from slack_webhook.install import InstallFlow
from slack_webhook.registry import HandlerRegistry
from slack_webhook.router import Router
from slack_webhook.storage import DynamoStorage


OAUTH_RESPONSE = {
    "ok": True,
    "access_token": "xoxb-bot-token",
    "token_type": "bot",
    "scope": "chat:write,commands",
    "bot_user_id": "U0BOT",
    "app_id": "A123",
    "team": {"id": "T1", "name": "Acme"},
    "authed_user": {"id": "U123", "scope": "", "token_type": "user"},
}


@pytest.fixture
def settings():
    return Settings(
        verification_token="secret-token",
        client_id="123.456",
        client_secret="shh",
        scopes=["chat:write", "commands"],
        install_redirect="https://example.com/installed",
        table_name="test-table",
    )


@pytest.fixture
def registry():
    return HandlerRegistry()


@pytest.fixture
def dispatcher(registry):
    return Dispatcher(registry)


@pytest.fixture
def table():
    return MagicMock()


@pytest.fixture
def storage(table):
    storage = DynamoStorage("test-table", table=table)
    storage.get = MagicMock(wraps=storage.get)
    storage.save = MagicMock(wraps=storage.save)
    return storage


@pytest.fixture
def oauth_client():
    client = MagicMock()
    client.get_auth_url.return_value = (
        "https://slack.com/oauth/v2/authorize?state=abc&client_id=123.456"
    )
    client.install.return_value = dict(OAUTH_RESPONSE)
    return client


@pytest.fixture
def install_flow(oauth_client, storage, dispatcher, settings):
    return InstallFlow(oauth_client, storage, dispatcher, settings.install_redirect)


@pytest.fixture
def router(dispatcher, storage, install_flow, settings):
    return Router(
        dispatcher,
        storage,
        install_flow,
        verification_token=settings.verification_token,
    )
