"""Safe Notify — calls the Change Notification Port without risking the operation.

Invariants:
    - Called only after the write succeeded
    - A failing notifier is logged and swallowed; the caller's result stands
"""

import logging

from airsoft_shop.core.domain_types import ChangeEvent
from airsoft_shop.core.repository_protocols import ChangeNotifier

logger = logging.getLogger(__name__)


async def notify(
    notifier: ChangeNotifier | None, event: ChangeEvent, payload: dict | None = None,
) -> None:
    if notifier is None:
        return
    try:
        await notifier.emit(event.value, payload)
    except Exception as e:
        logger.warning(
            f"Change notification {event.value} failed: {e}",
            extra={"event": event.value},
            exc_info=True,
        )
