"""
Bounded, detached conversation log writer.

Records are handed off with submit(), which never blocks the reply path.
A fixed pool of workers drains the queue into a blocking sink (normally
ConversationLogger.log_record) through asyncio.to_thread. When the queue
is full the overflow policy decides which record is lost:

    drop_oldest  discard the oldest pending record, keep the new one
    reject       discard the new record

Every drop is logged and counted. Sink failures are logged and counted,
never retried.
"""
import asyncio
import logging
from typing import Callable, List, Optional

from .models.conversation import ConversationRecord

logger = logging.getLogger(__name__)

DROP_OLDEST = "drop_oldest"
REJECT = "reject"
OVERFLOW_POLICIES = (DROP_OLDEST, REJECT)


class ConversationLogQueue:
    def __init__(
        self,
        sink: Callable[[ConversationRecord], None],
        maxsize: int = 1000,
        workers: int = 4,
        overflow_policy: str = DROP_OLDEST,
    ):
        if maxsize <= 0:
            raise ValueError("maxsize must be positive")
        if workers <= 0:
            raise ValueError("workers must be positive")
        if overflow_policy not in OVERFLOW_POLICIES:
            raise ValueError(f"unsupported overflow policy: {overflow_policy}")

        self._sink = sink
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=maxsize)
        self._worker_count = workers
        self._workers: List[asyncio.Task] = []
        self.overflow_policy = overflow_policy
        self.dropped = 0
        self.failed = 0
        self.written = 0

    def submit(self, record: ConversationRecord) -> bool:
        """Enqueue a record without waiting. Returns False when the new record was dropped."""
        try:
            self._queue.put_nowait(record)
            return True
        except asyncio.QueueFull:
            pass

        self.dropped += 1
        if self.overflow_policy == REJECT:
            logger.warning(
                f"[CONV_LOG] Queue full ({self._queue.maxsize}), rejected record for {record.sender_id}"
            )
            return False

        oldest = self._queue.get_nowait()
        self._queue.task_done()
        self._queue.put_nowait(record)
        logger.warning(
            f"[CONV_LOG] Queue full ({self._queue.maxsize}), dropped oldest record for {oldest.sender_id}"
        )
        return True

    def start(self) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"conv-log-worker-{i}")
            for i in range(self._worker_count)
        ]
        logger.info(f"[CONV_LOG] Started {self._worker_count} log workers")

    async def _worker(self, worker_id: int) -> None:
        while True:
            record = await self._queue.get()
            try:
                await asyncio.to_thread(self._sink, record)
                self.written += 1
            except Exception as e:
                self.failed += 1
                logger.error(
                    f"[CONV_LOG] Worker {worker_id} failed to write record for "
                    f"{record.client_id}/{record.sender_id}: {e}"
                )
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued record has been processed."""
        await self._queue.join()

    async def stop(self, timeout: Optional[float] = None) -> None:
        """Drain pending records (up to timeout seconds), then stop the workers."""
        if self._workers:
            try:
                await asyncio.wait_for(self._queue.join(), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning(f"[CONV_LOG] Stopping with {self._queue.qsize()} records still queued")

        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

    def qsize(self) -> int:
        return self._queue.qsize()
