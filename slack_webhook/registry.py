"""
Handler registry mapping topic keys to ordered handler lists.
"""

import logging
from typing import Callable

from .models import Handler, HandlerRegistration

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """
    Publish/subscribe table of handlers.

    Handlers for a topic are kept in registration order. Registering the
    same handler twice under one topic makes it run twice per dispatch.
    """

    def __init__(self):
        self._handlers: dict[str, list[Handler]] = {}
        self._registrations: list[HandlerRegistration] = []

    def register(self, topic: str, handler: Handler) -> Handler:
        """Append a handler to the list for a topic."""
        if not callable(handler):
            raise TypeError(f"Handler for '{topic}' is not callable: {handler!r}")

        self._handlers.setdefault(topic, []).append(handler)
        registration = HandlerRegistration(topic, handler)
        self._registrations.append(registration)
        logger.debug(f"Registered handler {registration.name} on '{topic}'")
        return handler

    def on(self, *topics: str) -> Callable[[Handler], Handler]:
        """
        Decorator to register a function under one or more topics.

        Usage:
            @registry.on("message", "app_mention")
            def handle(payload, bot, storage):
                ...
        """
        def decorator(handler: Handler) -> Handler:
            for topic in topics:
                self.register(topic, handler)
            return handler
        return decorator

    def listeners_for(self, topic: str) -> list[Handler]:
        """Current handlers for a topic, in registration order."""
        return list(self._handlers.get(topic, ()))

    def topics(self) -> list[str]:
        return list(self._handlers.keys())

    def registrations(self) -> list[HandlerRegistration]:
        return list(self._registrations)

    def __len__(self) -> int:
        return len(self._registrations)
