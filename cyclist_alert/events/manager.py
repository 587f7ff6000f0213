"""
Fall event manager with async processing.
Hands detected falls to the alert dispatcher without blocking the sample loop.
"""

import asyncio
import logging
import time
from collections import deque
from datetime import datetime

from ..alerts.dispatcher import AlertDispatcher, AlertResult
from ..detectors.types import FallEvent

logger = logging.getLogger(__name__)


class FallEventManager:
    """
    Queues fall events and dispatches alerts in the background.

    The classifier already enforces the refractory period, so every event
    that reaches the manager is dispatched exactly once.

    Architecture:
    - Sample loop calls trigger_fall() when the classifier fires (non-blocking)
    - Background task processes events from queue
    - Each event: resolve contact and location → compose → send SMS

    trigger_fall() must run on the manager's event loop; from another thread
    use ``loop.call_soon_threadsafe(manager.trigger_fall, event)``.
    """

    def __init__(self, dispatcher: AlertDispatcher, max_queue: int = 0, history: int = 50):
        """
        Initialize event manager.

        Args:
            dispatcher: AlertDispatcher instance
            max_queue: Queue bound (0 = unbounded)
            history: Number of recent AlertResults kept for inspection
        """
        self.dispatcher = dispatcher

        # Event queue
        self.queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)

        # Statistics
        self.total_events_triggered = 0
        self.total_events_processed = 0
        self.total_events_sent = 0
        self.total_events_failed = 0
        self.last_event_time: float = 0
        self.results: deque[AlertResult] = deque(maxlen=history)

        # Running flag
        self.running = False

        logger.info("Initialized FallEventManager")

    def trigger_fall(self, event: FallEvent) -> bool:
        """
        Queue a fall event for dispatch.

        Args:
            event: Event returned by FallClassifier.observe()

        Returns:
            True if event was queued, False if the queue is full
        """
        queued = {
            "event": event,
            "received": time.time(),
        }

        try:
            self.queue.put_nowait(queued)
        except asyncio.QueueFull:
            logger.error("Event queue is full, cannot queue fall event")
            return False

        self.total_events_triggered += 1
        self.last_event_time = queued["received"]
        logger.info(
            f"Fall event triggered and queued "
            f"(total: {self.total_events_triggered})"
        )
        return True

    async def process_events(self):
        """
        Background task: process events from queue.

        Runs until stop() is called. Should be run as an asyncio task:
            task = asyncio.create_task(manager.process_events())
        """
        self.running = True
        logger.info("Event processor started")

        try:
            while self.running:
                # Wait for event (with timeout to allow graceful shutdown)
                try:
                    queued = await asyncio.wait_for(self.queue.get(), timeout=1.0)
                except TimeoutError:
                    continue

                try:
                    await self._process_single_event(queued)
                finally:
                    self.queue.task_done()

        except asyncio.CancelledError:
            logger.info("Event processor cancelled")
            raise

        finally:
            logger.info("Event processor stopped")

    async def _process_single_event(self, queued: dict):
        event: FallEvent = queued["event"]
        received = datetime.fromtimestamp(queued["received"]).isoformat()
        logger.info(f"Processing fall event {event.timestamp_ms} (received {received})")

        self.total_events_processed += 1

        try:
            result = await self.dispatcher.dispatch(event)
        except Exception as e:
            logger.error(f"Error processing fall event: {e}", exc_info=True)
            self.total_events_failed += 1
            return

        self.results.append(result)
        if result.success:
            self.total_events_sent += 1
            logger.info(
                f"Fall event processed successfully "
                f"(sent: {self.total_events_sent}/{self.total_events_processed})"
            )
        else:
            self.total_events_failed += 1
            logger.error(f"Fall alert failed: {result.error}")

    async def stop(self, timeout: float = 30.0):
        """
        Stop event processor gracefully.

        Waits for queued events to be dispatched first.
        """
        logger.info("Stopping event processor...")

        remaining = self.queue.qsize()
        if remaining > 0:
            logger.info(f"Waiting for {remaining} events to process...")
            try:
                await asyncio.wait_for(self.queue.join(), timeout=timeout)
            except TimeoutError:
                logger.warning(
                    f"Timeout waiting for queue to empty, "
                    f"{self.queue.qsize()} events remain"
                )

        self.running = False

    def get_statistics(self) -> dict:
        """
        Get event processing statistics.

        Returns:
            Dictionary with statistics
        """
        return {
            "total_triggered": self.total_events_triggered,
            "total_processed": self.total_events_processed,
            "total_sent": self.total_events_sent,
            "total_failed": self.total_events_failed,
            "queue_size": self.queue.qsize(),
            "success_rate": (
                self.total_events_sent / self.total_events_processed * 100
                if self.total_events_processed > 0
                else 0
            ),
            "last_event_time": self.last_event_time,
        }

    def log_statistics(self):
        """Log current statistics."""
        stats = self.get_statistics()
        logger.info("=" * 60)
        logger.info("Fall Event Statistics")
        logger.info("=" * 60)
        logger.info(f"Events Triggered: {stats['total_triggered']}")
        logger.info(f"Events Processed: {stats['total_processed']}")
        logger.info(f"Alerts Sent: {stats['total_sent']}")
        logger.info(f"Alerts Failed: {stats['total_failed']}")
        logger.info(f"Success Rate: {stats['success_rate']:.1f}%")
        logger.info(f"Queue Size: {stats['queue_size']}")
        logger.info("=" * 60)

    def __repr__(self) -> str:
        """String representation."""
        stats = self.get_statistics()
        return (
            f"FallEventManager("
            f"processed={stats['total_processed']}, "
            f"sent={stats['total_sent']}, "
            f"queue={stats['queue_size']})"
        )
