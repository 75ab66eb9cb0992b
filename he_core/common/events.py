# he_core/common/events.py
import logging
from collections import defaultdict
from typing import Callable, Dict, List, Any

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]

_registry: Dict[str, List[Handler]] = defaultdict(list)


def subscribe(event_name: str):
    """
    Decorator to register an event handler.
    Usage:
        @subscribe("encounter.discharged")
        def handler(payload): ...
    """
    def _decorator(fn: Handler) -> Handler:
        _registry[event_name].append(fn)
        return fn
    return _decorator


def publish(event_name: str, payload: Dict[str, Any]) -> None:
    """
    Publish an event to in-process subscribers.
    Handlers run synchronously inside the caller's transaction.
    Keep payloads ID-based to avoid cross-app imports.
    """
    handlers = _registry.get(event_name, [])
    logger.debug("publish %s to %d handler(s)", event_name, len(handlers))
    for handler in handlers:
        handler(payload)
