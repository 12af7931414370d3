"""In-flight network activity tracking.

Backs the readiness flag the UI polls to show or hide a busy indicator.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


class ActivityTracker:
    """Counts network operations currently awaiting the transport."""

    def __init__(self) -> None:
        self._active_count = 0

    @property
    def active_count(self) -> int:
        return self._active_count

    @property
    def busy(self) -> bool:
        """True while at least one network operation is in flight."""
        return self._active_count > 0

    @contextmanager
    def track(self, operation: str) -> Iterator[None]:
        """Mark *operation* as in flight for the duration of the block."""
        self._active_count += 1
        logger.debug("Network operation '%s' started (%d active)", operation, self._active_count)
        try:
            yield
        finally:
            self._active_count -= 1
            logger.debug("Network operation '%s' finished (%d active)", operation, self._active_count)


__all__ = ["ActivityTracker"]
