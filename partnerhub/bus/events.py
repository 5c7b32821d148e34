"""
Event Bus - partner lifecycle notifications.

The CRM engine, lookups, insights and reports emit; anything may subscribe
without the emitter importing it. Payloads are plain dicts and may hold
Company objects, so they are logged through summarize().
"""

from typing import Any, Callable, Dict, List, Optional
import logging

from partnerhub.logging_config import summarize

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], None]


class EventBus:
    """Synchronous in-process pub/sub. Handlers run in subscription order."""

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}

    def on(self, event_name: str, handler: Handler) -> Handler:
        """Subscribe; returns the handler so it can be passed to off()."""
        self._handlers.setdefault(event_name, []).append(handler)
        logger.debug(f"Subscribed {getattr(handler, '__name__', handler)} to '{event_name}'")
        return handler

    def off(self, event_name: str, handler: Handler) -> bool:
        handlers = self._handlers.get(event_name, [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def emit(self, event_name: str, event_data: Optional[Dict[str, Any]] = None) -> int:
        """
        Deliver to every subscriber of event_name.
        A raising handler is logged and skipped. Returns how many handlers succeeded.
        """
        event_data = event_data if event_data is not None else {}
        handlers = list(self._handlers.get(event_name, []))
        logger.debug(f"Event '{event_name}' -> {len(handlers)} handler(s) | {summarize(event_data)}")

        delivered = 0
        for handler in handlers:
            try:
                handler(event_data)
                delivered += 1
            except Exception as e:
                logger.error(f"Handler {getattr(handler, '__name__', handler)} failed on '{event_name}': {e}")
        return delivered

    def clear(self):
        """Drop every subscription (tests)."""
        self._handlers.clear()


bus = EventBus()


# =============================================================================
# EVENTS
# =============================================================================

# Partner records
EVENT_COMPANY_CREATED = 'company_created'        # company_id, company
EVENT_COMPANY_UPDATED = 'company_updated'        # company_id, updates
EVENT_COMPANY_DUPLICATED = 'company_duplicated'  # source_id, company_id
EVENT_COMPANY_DELETED = 'company_deleted'        # company_id
EVENT_CONTACT_LOGGED = 'contact_logged'          # company_id, entry
EVENT_COMPANIES_IMPORTED = 'companies_imported'  # imported, skipped, rejected

# External lookups
EVENT_LOOKUP_COMPLETE = 'lookup_complete'        # kind, status

# AI
EVENT_INSIGHTS_READY = 'insights_ready'          # model, company_count

# Exports
EVENT_EXPORT_WRITTEN = 'export_written'          # path, kind
