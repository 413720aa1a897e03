"""
Webhook application wiring.
"""

import logging
from typing import Any, Callable, Optional

from .client import SlackOAuthClient
from .config import Settings
from .dispatcher import Dispatcher
from .errors import SlackWebhookError, UnauthorizedError
from .install import InstallFlow
from .models import Handler, HandlerOutcome, Request, Response
from .registry import HandlerRegistry
from .router import Router
from .storage import DynamoStorage, configure_storage
from .transport import request_from_event, to_lambda_response

logger = logging.getLogger(__name__)


class SlackWebhook:
    """
    A Slack app served from one Lambda function.

    Usage:
        app = SlackWebhook(load_environment())

        @app.on("app_mention")
        def handle_mention(payload, bot, storage):
            bot.reply("Hello!")

        def handler(event, context):
            return app.handler(event, context)
    """

    def __init__(
        self,
        settings: Settings,
        registry: Optional[HandlerRegistry] = None,
        storage: Optional[DynamoStorage] = None,
        client: Optional[SlackOAuthClient] = None,
        on_error: Optional[Callable[[HandlerOutcome], None]] = None,
    ):
        self.settings = settings
        self.registry = registry if registry is not None else HandlerRegistry()
        self.storage = storage if storage is not None else configure_storage(settings)
        self.client = client if client is not None else SlackOAuthClient(settings)
        self.dispatcher = Dispatcher(self.registry, on_error=on_error)
        self.install_flow = InstallFlow(
            self.client,
            self.storage,
            self.dispatcher,
            settings.install_redirect,
        )
        self.router = Router(
            self.dispatcher,
            self.storage,
            self.install_flow,
            verification_token=settings.verification_token,
            ignore_bots=settings.ignore_bots,
        )

    def on(self, *topics: str) -> Callable[[Handler], Handler]:
        """Decorator registering a handler on one or more topics."""
        return self.registry.on(*topics)

    def register(self, topic: str, handler: Handler) -> Handler:
        return self.registry.register(topic, handler)

    def handle(self, request: Request) -> Response:
        return self.router.handle(request)

    def handler(self, event: dict[str, Any], context: Any = None) -> dict[str, Any]:
        """Lambda entry point."""
        try:
            request = request_from_event(event, self.settings.signing_secret)
        except UnauthorizedError as e:
            logger.warning(f"Rejected request: {e}")
            return to_lambda_response(Response.text("Unauthorized", status=401))
        except ValueError as e:
            logger.warning(f"Malformed request body: {e}")
            return to_lambda_response(Response.text("Bad Request", status=400))

        try:
            response = self.handle(request)
        except SlackWebhookError:
            logger.exception(f"Failed to handle {request.method} request")
            response = Response.text("Internal Server Error", status=500)

        return to_lambda_response(response)
