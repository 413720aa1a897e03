"""
OAuth install flow.
"""

import json
import logging
from typing import Any
from urllib.parse import urlencode

from .client import BotContext, SlackOAuthClient
from .dispatcher import Dispatcher
from .errors import RemoteApiError
from .models import WILDCARD, AuthorizationRecord, Response
from .storage import DynamoStorage

logger = logging.getLogger(__name__)


class InstallFlow:
    """
    Handles the OAuth redirect leg of an app install.

    Without a `code` the visitor is sent to Slack's authorize page. With one,
    the code is exchanged, the installation saved, and listeners notified on
    "install_success" (or "install_error" when anything fails).
    """

    def __init__(
        self,
        client: SlackOAuthClient,
        storage: DynamoStorage,
        dispatcher: Dispatcher,
        install_redirect: str,
    ):
        self.client = client
        self.storage = storage
        self.dispatcher = dispatcher
        self.install_redirect = install_redirect

    def handle(self, query: dict[str, Any]) -> Response:
        query = dict(query or {})

        if not query.get("code"):
            url = self.client.get_auth_url(query)
            logger.info("Redirecting to Slack authorization")
            return Response.redirect(url)

        try:
            auth = self.client.install(query)
            item = self.storage.save(auth)
        except Exception as error:
            # Network failures from the exchange surface as URLError/timeouts
            return self._fail(error, query)

        record = AuthorizationRecord.from_item(item)
        bot = BotContext(record, query)
        logger.info(f"Installed for team {record.id} by {record.installer_id}")
        self.dispatcher.emit([WILDCARD, "install_success"], record, bot, self.storage)
        return Response.redirect(self._redirect_url(query))

    def _fail(self, error: Exception, query: dict[str, Any]) -> Response:
        logger.warning(f"Install failed: {error}")

        if isinstance(error, RemoteApiError):
            detail = error.to_dict()
        else:
            detail = {"error": str(error), "messages": []}

        self.dispatcher.emit([WILDCARD, "install_error"], error, query, self.storage)
        return Response.redirect(self._redirect_url(query, error=json.dumps(detail)))

    def _redirect_url(self, query: dict[str, Any], **extra: str) -> str:
        params = {"state": query.get("state") or "", **extra}
        separator = "&" if "?" in self.install_redirect else "?"
        return f"{self.install_redirect}{separator}{urlencode(params)}"
