"""Change Notifiers — ChangeNotifier implementations for the outbound event hook.

Invariants:
    - emit never raises for a well-formed call; delivery is best effort
    - Event names are the ChangeEvent values (core/domain_types.py)

Design Decisions:
    - The push transport is an external collaborator; this module only ships
      a logging notifier (default) and a fan-out over other notifiers
"""

import logging

logger = logging.getLogger(__name__)


class LoggingChangeNotifier:
    """Writes every change event to the log."""

    async def emit(self, event: str, payload: dict | None = None) -> None:
        entity_id = (payload or {}).get("id")
        logger.info(
            f"Change event {event}",
            extra={"event": event, "entity_id": entity_id},
        )


class FanOutNotifier:
    """Delivers each event to several notifiers; one failing does not stop the rest."""

    def __init__(self, *notifiers):
        self.notifiers = list(notifiers)

    async def emit(self, event: str, payload: dict | None = None) -> None:
        for notifier in self.notifiers:
            try:
                await notifier.emit(event, payload)
            except Exception as e:
                logger.warning(
                    f"Notifier {type(notifier).__name__} failed for {event}: {e}",
                    extra={"event": event},
                    exc_info=True,
                )
