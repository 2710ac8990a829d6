"""Per-sender cooldown gate.

One instance is owned by the engine. State is in-memory only and resets on
restart, so a fresh process accepts the first message from everyone.
"""
import logging
import threading
import time
from typing import Callable, Dict

logger = logging.getLogger(__name__)

DEFAULT_COOLDOWN_SECONDS = 2.0
# Housekeeping: once the map grows past PRUNE_THRESHOLD senders, forget
# anyone idle for longer than RETENTION_SECONDS.
PRUNE_THRESHOLD = 100
RETENTION_SECONDS = 300.0


class RateLimiter:
    """Accepts at most one event per sender per cooldown window.

    Args:
        cooldown_seconds: Minimum interval between two accepted events.
        clock: Monotonic time source, injectable for tests.
        prune_threshold: Map size that triggers pruning of idle senders.
        retention_seconds: Idle age after which a sender entry may be pruned.
    """

    def __init__(
        self,
        cooldown_seconds: float = DEFAULT_COOLDOWN_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        prune_threshold: int = PRUNE_THRESHOLD,
        retention_seconds: float = RETENTION_SECONDS,
    ):
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._prune_threshold = prune_threshold
        self._retention_seconds = max(retention_seconds, cooldown_seconds)
        self._last_accepted: Dict[str, float] = {}
        self._lock = threading.Lock()

    def allow(self, sender_id: str) -> bool:
        """Check and record in one critical section.

        Returns True when the event should be processed. Rejected events do
        not touch the stored timestamp.
        """
        now = self._clock()
        with self._lock:
            last = self._last_accepted.get(sender_id)
            if last is not None and now - last < self.cooldown_seconds:
                accepted = False
            else:
                self._last_accepted[sender_id] = now
                if len(self._last_accepted) > self._prune_threshold:
                    self._prune(now)
                accepted = True

        if not accepted:
            logger.info(f"[RATE_LIMIT] Ignoring message from {sender_id} (too fast)")
        return accepted

    def _prune(self, now: float) -> None:
        # Caller holds the lock.
        stale = [s for s, t in self._last_accepted.items() if now - t > self._retention_seconds]
        for sender_id in stale:
            del self._last_accepted[sender_id]
        if stale:
            logger.debug(f"[RATE_LIMIT] Pruned {len(stale)} idle senders")

    def reset(self) -> None:
        with self._lock:
            self._last_accepted.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._last_accepted)
