"""
Dispatch engine for inbound Slack payloads.

Handles:
- Classifying a payload into the topic keys it matches
- Running every handler registered on those keys concurrently
- Collecting a per-handler outcome without letting failures escape
"""

import asyncio
import inspect
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Callable, Iterable, Optional

from .models import WILDCARD, DispatchReport, Handler, HandlerOutcome, Payload
from .registry import HandlerRegistry

logger = logging.getLogger(__name__)


def classify(payload: dict) -> list[str]:
    """
    Topic keys a payload matches, in notification order.

    Keys are not deduplicated: a slash command named `/event` on a payload
    that also carries an `event` yields "event" twice, and handlers on that
    key run once per occurrence.
    """
    topics = [WILDCARD]

    if payload.get("type"):
        topics.append(payload["type"])

    event = payload.get("event")
    if event:
        topics.append("event")
        if isinstance(event, dict) and event.get("type"):
            topics.append(event["type"])

    if payload.get("command"):
        topics.extend(["slash_command", payload["command"]])

    if payload.get("trigger_word"):
        topics.extend(["webhook", payload["trigger_word"]])

    if payload.get("callback_id"):
        topics.extend(["interactive_message", payload["callback_id"]])

    return topics


def _handler_name(handler: Handler) -> str:
    return getattr(handler, "__qualname__", None) or repr(handler)


def _invoke(handler: Handler, args: tuple) -> Any:
    """Call a handler, running it to completion if it is a coroutine function."""
    result = handler(*args)
    if inspect.iscoroutine(result):
        result = asyncio.run(result)
    return result


class Dispatcher:
    """Fans payloads out to every handler registered on the matched topics."""

    def __init__(
        self,
        registry: HandlerRegistry,
        on_error: Optional[Callable[[HandlerOutcome], None]] = None,
    ):
        self.registry = registry
        self.on_error = on_error

    def dispatch(self, payload: Payload, bot: Any, storage: Any) -> DispatchReport:
        """
        Notify every handler matching the payload.

        Each handler is called as `handler(payload, bot, storage)`.
        """
        topics = classify(payload)
        logger.info(f"Dispatching payload kind={getattr(payload, 'kind', None)} topics={topics}")
        return self.emit(topics, payload, bot, storage)

    def emit(self, topics: Iterable[str], *args: Any) -> DispatchReport:
        """
        Call every handler on each topic with `args`, all at once.

        Returns after every call has settled. Handler errors are logged and
        recorded in the report; they are never raised.
        """
        topics = list(topics)
        invocations = [
            (topic, handler)
            for topic in topics
            for handler in self.registry.listeners_for(topic)
        ]
        report = DispatchReport(topics=topics)

        if not invocations:
            logger.debug(f"No handlers for topics {topics}")
            return report

        # One worker per invocation so no handler waits on another to start
        with ThreadPoolExecutor(max_workers=len(invocations)) as executor:
            futures = [
                executor.submit(_invoke, handler, args)
                for _, handler in invocations
            ]
            wait(futures)

        for (topic, handler), future in zip(invocations, futures):
            outcome = HandlerOutcome(topic=topic, handler=_handler_name(handler))
            error = future.exception()
            if error is None:
                outcome.result = future.result()
            else:
                outcome.error = error
                self._report_failure(outcome)
            report.outcomes.append(outcome)

        if report.failures:
            logger.warning(
                f"{len(report.failures)} of {report.invoked} handlers failed for topics {topics}"
            )
        return report

    def _report_failure(self, outcome: HandlerOutcome) -> None:
        logger.error(
            f"Handler {outcome.handler} failed on '{outcome.topic}'",
            exc_info=outcome.error,
        )
        if self.on_error is None:
            return
        try:
            self.on_error(outcome)
        except Exception:
            logger.exception("Error hook failed")
