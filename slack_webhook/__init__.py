"""
Serverless Slack webhook.

Receives OAuth install redirects and Events API / interactivity callbacks,
and fans each payload out to registered handlers.
"""

from .models import (
    WILDCARD,
    AuthorizationRecord,
    DispatchReport,
    HandlerOutcome,
    HandlerRegistration,
    Payload,
    PayloadKind,
    Request,
    Response,
)
from .errors import RemoteApiError, SlackWebhookError, StorageError, UnauthorizedError
from .config import Settings, load_environment
from .registry import HandlerRegistry
from .dispatcher import Dispatcher, classify
from .storage import DynamoStorage, configure_storage, resolve_record_id
from .client import BotContext, SlackOAuthClient
from .install import InstallFlow
from .router import Router
from .app import SlackWebhook

__all__ = [
    'WILDCARD',
    'AuthorizationRecord',
    'DispatchReport',
    'HandlerOutcome',
    'HandlerRegistration',
    'Payload',
    'PayloadKind',
    'Request',
    'Response',
    'RemoteApiError',
    'SlackWebhookError',
    'StorageError',
    'UnauthorizedError',
    'Settings',
    'load_environment',
    'HandlerRegistry',
    'Dispatcher',
    'classify',
    'DynamoStorage',
    'configure_storage',
    'resolve_record_id',
    'BotContext',
    'SlackOAuthClient',
    'InstallFlow',
    'Router',
    'SlackWebhook',
]
