"""Background sampling orchestration for the telemetry pipeline."""

from __future__ import annotations

import logging
import time
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import lru_cache
from threading import Event, Lock, Thread, current_thread
from typing import Callable, Deque, List, Optional

from models.telemetry import MonitoringState, Reading
from services.aggregator import Statistics, StatisticsAggregator
from services.generator import SampleGenerator, build_generator
from settings import get_settings
from storage.history import HistoryBuffer

logger = logging.getLogger(__name__)

Subscriber = Callable[[Reading], None]


@dataclass(frozen=True)
class TransitionOutcome:
    """Result of a start/stop request; ``changed`` is False for no-op calls."""

    state: MonitoringState
    changed: bool


@dataclass(frozen=True)
class MonitorStatus:
    state: MonitoringState
    tick_interval_ms: int
    buffer_capacity: int
    buffered: int
    ticks: int
    skipped_ticks: int
    subscriber_count: int
    pending_notifications: int
    dropped_notifications: int


class MonitorController:
    """Owns the running/stopped state machine and the sampling ticker.

    Ticks run on a single background thread, so pushes into the history are
    serialized and ordered by generation time. Ticks that fall due while a
    previous tick is still running are skipped. ``stop()`` joins the ticker
    before returning, so no tick runs after it returns.

    Subscribers are fed from a bounded backlog drained by a single-worker
    executor. The ticker never waits on a subscriber; when the backlog is
    full the oldest pending reading is dropped.
    """

    def __init__(
        self,
        generator: SampleGenerator,
        history: HistoryBuffer,
        aggregator: StatisticsAggregator,
        tick_interval_ms: int = 100,
        notification_backlog: int = 100,
    ) -> None:
        if tick_interval_ms <= 0:
            raise ValueError(f"Tick interval must be positive, got {tick_interval_ms} ms.")
        if notification_backlog < 1:
            raise ValueError(
                f"Notification backlog must be at least 1, got {notification_backlog}."
            )
        self.generator = generator
        self.history = history
        self.aggregator = aggregator
        self.tick_interval_ms = tick_interval_ms
        self.notifier = ThreadPoolExecutor(max_workers=1, thread_name_prefix="monitor-notify")
        self._state = MonitoringState.stopped
        self._state_lock = Lock()
        self._closed = False
        self._ticker: Optional[Thread] = None
        self._stop_event: Optional[Event] = None
        self._subscribers: List[Subscriber] = []
        self._subscribers_lock = Lock()
        self._pending: Deque[Reading] = deque(maxlen=notification_backlog)
        self._pending_lock = Lock()
        self._draining = False
        self._dropped_notifications = 0
        self._counters_lock = Lock()
        self._ticks = 0
        self._skipped_ticks = 0

    @property
    def state(self) -> MonitoringState:
        return self._state

    def start(self) -> TransitionOutcome:
        """Begin sampling; a no-op when already running.

        Raises ``RuntimeError`` once the controller has been shut down.
        """
        with self._state_lock:
            if self._closed:
                raise RuntimeError("Monitor has been shut down and cannot be started.")
            if self._state is MonitoringState.running:
                logger.debug("Start ignored, monitor already running", extra={"state": self._state.value})
                return TransitionOutcome(state=self._state, changed=False)

            stop_event = Event()
            ticker = Thread(
                target=self._run,
                args=(stop_event,),
                name="monitor-ticker",
                daemon=True,
            )
            self._stop_event = stop_event
            self._ticker = ticker
            self._state = MonitoringState.running
            ticker.start()

        logger.info(
            "Monitoring started",
            extra={"state": MonitoringState.running.value, "interval_ms": self.tick_interval_ms},
        )
        return TransitionOutcome(state=MonitoringState.running, changed=True)

    def stop(self) -> TransitionOutcome:
        """Stop sampling and wait for the ticker to exit; history is kept."""
        with self._state_lock:
            if self._state is MonitoringState.stopped:
                return TransitionOutcome(state=self._state, changed=False)

            if self._stop_event is not None:
                self._stop_event.set()
            if self._ticker is not None and self._ticker is not current_thread():
                self._ticker.join()
            self._ticker = None
            self._stop_event = None
            self._state = MonitoringState.stopped

        logger.info(
            "Monitoring stopped",
            extra={"state": MonitoringState.stopped.value, "buffered": len(self.history)},
        )
        return TransitionOutcome(state=MonitoringState.stopped, changed=True)

    def get_statistics(self) -> Statistics:
        return self.aggregator.compute(self.history.snapshot())

    def get_history(self, limit: Optional[int] = None) -> tuple[Reading, ...]:
        return self.history.snapshot(limit)

    def latest(self) -> Optional[Reading]:
        return self.history.latest()

    def reset(self) -> None:
        """Drop buffered readings and tick counters without changing state."""
        with self._counters_lock:
            self.history.clear()
            self._ticks = 0
            self._skipped_ticks = 0
        with self._pending_lock:
            self._dropped_notifications = 0
        logger.info("History cleared", extra={"state": self._state.value})

    def subscribe(self, subscriber: Subscriber) -> Callable[[], None]:
        """Register a callback for new readings and return its unsubscribe handle."""
        with self._subscribers_lock:
            self._subscribers.append(subscriber)
            count = len(self._subscribers)
        logger.debug("Subscriber added", extra={"subscriber_count": count})

        def unsubscribe() -> None:
            with self._subscribers_lock:
                if subscriber in self._subscribers:
                    self._subscribers.remove(subscriber)

        return unsubscribe

    def status(self) -> MonitorStatus:
        with self._subscribers_lock:
            subscriber_count = len(self._subscribers)
        with self._pending_lock:
            pending = len(self._pending)
            dropped = self._dropped_notifications
        with self._counters_lock:
            ticks = self._ticks
            skipped = self._skipped_ticks
            buffered = len(self.history)
        return MonitorStatus(
            state=self._state,
            tick_interval_ms=self.tick_interval_ms,
            buffer_capacity=self.history.capacity,
            buffered=buffered,
            ticks=ticks,
            skipped_ticks=skipped,
            subscriber_count=subscriber_count,
            pending_notifications=pending,
            dropped_notifications=dropped,
        )

    def shutdown(self) -> None:
        """Stop sampling for good and release the notification executor."""
        with self._state_lock:
            self._closed = True
        self.stop()
        with self._pending_lock:
            self._pending.clear()
        self.notifier.shutdown(wait=False, cancel_futures=True)

    def _run(self, stop_event: Event) -> None:
        interval = self.tick_interval_ms / 1000.0
        next_deadline = time.monotonic() + interval
        try:
            while not stop_event.wait(max(0.0, next_deadline - time.monotonic())):
                self._tick()
                next_deadline += interval
                overdue = time.monotonic() - next_deadline
                if overdue > 0:
                    skipped = int(overdue // interval) + 1
                    next_deadline += skipped * interval
                    with self._counters_lock:
                        self._skipped_ticks += skipped
                    logger.warning(
                        "Tick overran its interval, skipping overdue ticks",
                        extra={"skipped": skipped, "interval_ms": self.tick_interval_ms},
                    )
        except Exception:
            logger.exception(
                "Ticker failed, monitoring stopped",
                extra={"state": MonitoringState.stopped.value},
            )
            self._retire_failed_ticker(stop_event)

    def _retire_failed_ticker(self, stop_event: Event) -> None:
        # stop() holds the state lock while joining this thread and sets the
        # event first, so give up once the event is set.
        while not self._state_lock.acquire(timeout=0.01):
            if stop_event.is_set():
                return
        try:
            if self._stop_event is stop_event:
                self._ticker = None
                self._stop_event = None
                self._state = MonitoringState.stopped
        finally:
            self._state_lock.release()

    def _tick(self) -> None:
        reading = self.generator.next()
        with self._counters_lock:
            self.history.push(reading)
            self._ticks += 1
        with self._subscribers_lock:
            has_subscribers = bool(self._subscribers)
        if has_subscribers:
            self._enqueue(reading)

    def _enqueue(self, reading: Reading) -> None:
        dropped = 0
        with self._pending_lock:
            overflow = len(self._pending) == self._pending.maxlen
            self._pending.append(reading)
            if overflow:
                self._dropped_notifications += 1
                dropped = self._dropped_notifications
            schedule = not self._draining
            self._draining = True

        if overflow and dropped == 1:
            logger.warning(
                "Subscribers are falling behind, dropping oldest pending readings",
                extra={"tick": reading.sequence},
            )
        if schedule:
            self.notifier.submit(self._drain)

    def _drain(self) -> None:
        while True:
            with self._pending_lock:
                if not self._pending:
                    self._draining = False
                    return
                reading = self._pending.popleft()
            with self._subscribers_lock:
                subscribers = list(self._subscribers)
            for subscriber in subscribers:
                self._deliver(subscriber, reading)

    @staticmethod
    def _deliver(subscriber: Subscriber, reading: Reading) -> None:
        try:
            subscriber(reading)
        except Exception:
            logger.exception("Subscriber failed to handle reading", extra={"tick": reading.sequence})


@lru_cache
def build_default_monitor(
    tick_interval_ms: Optional[int] = None,
    buffer_capacity: Optional[int] = None,
) -> MonitorController:
    """Factory that wires the controller from environment settings."""
    settings = get_settings()
    generator = build_generator(
        distance=settings.distance_range,
        temperature=settings.temperature_range,
        intensity=settings.intensity_range,
        processing_time=settings.processing_time_range,
        seed=settings.seed,
    )
    capacity = settings.buffer_capacity if buffer_capacity is None else buffer_capacity
    interval = settings.tick_interval_ms if tick_interval_ms is None else tick_interval_ms
    return MonitorController(
        generator=generator,
        history=HistoryBuffer(capacity=capacity),
        aggregator=StatisticsAggregator(),
        tick_interval_ms=interval,
        notification_backlog=settings.notification_backlog,
    )
