"""
Request router for the webhook.

Routes OAuth redirects to the install flow and event/interaction callbacks
through verification into the dispatcher.
"""

import hmac
import logging
from typing import Optional

from .client import BotContext
from .dispatcher import Dispatcher
from .errors import UnauthorizedError
from .install import InstallFlow
from .models import AuthorizationRecord, Payload, Request, Response
from .storage import DynamoStorage

logger = logging.getLogger(__name__)


class Router:
    """Top-level entry point for normalized requests."""

    def __init__(
        self,
        dispatcher: Dispatcher,
        storage: DynamoStorage,
        install_flow: InstallFlow,
        verification_token: Optional[str] = None,
        ignore_bots: bool = False,
    ):
        self.dispatcher = dispatcher
        self.storage = storage
        self.install_flow = install_flow
        self.verification_token = verification_token
        self.ignore_bots = ignore_bots

    def handle(self, request: Request) -> Response:
        method = (request.method or "").upper()

        if method == "GET":
            return self.install_flow.handle(request.query)

        if method == "POST":
            try:
                return self.ingest(request.body)
            except UnauthorizedError as e:
                logger.warning(f"Rejected request: {e}")
                return Response.text("Unauthorized", status=401)
            except ValueError as e:
                logger.warning(f"Malformed payload: {e}")
                return Response.text("Bad Request", status=400)

        logger.warning(f"Unsupported method: {request.method}")
        return Response.text("Method Not Allowed", status=405)

    def ingest(self, body: dict) -> Response:
        """
        Verify, then dispatch an event or interaction payload.

        Raises:
            UnauthorizedError: The payload token does not match
        """
        payload = Payload.from_body(body)

        self.verify_token(payload)

        # Events API URL verification handshake
        if payload.challenge is not None:
            logger.info("Answering URL verification challenge")
            return Response.text(str(payload.challenge))

        if self.ignore_bots and payload.bot_id:
            logger.debug(f"Ignoring bot message from {payload.bot_id}")
            return Response()

        item = self.storage.get(payload.team_id)
        auth = AuthorizationRecord.from_item(item) if item else None
        if auth is None:
            logger.info(f"No installation found for team {payload.team_id}")

        bot = BotContext(auth, payload)
        self.dispatcher.dispatch(payload, bot, self.storage)
        return Response()

    def verify_token(self, payload: Payload) -> None:
        if not self.verification_token:
            return
        token = payload.token or ""
        if not hmac.compare_digest(str(token).encode(), self.verification_token.encode()):
            raise UnauthorizedError("Verification token mismatch")
