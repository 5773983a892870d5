"""Cooperative scheduling on top of the Tk event loop."""

from __future__ import annotations

import logging
import queue
import threading
from typing import Any, Callable, Optional, Protocol, Set


logger = logging.getLogger("urdutranslator.scheduler")

POLL_INTERVAL = 0.05


class ScheduledTask:
    """Handle for a delayed callback that can be cancelled before it runs."""

    def __init__(self, callback: Callable[[], None]) -> None:
        self._callback = callback
        self.cancelled = False
        self.done = False
        self.handle: Any = None

    def run(self) -> None:
        if self.cancelled or self.done:
            return
        self.done = True
        self._callback()

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler(Protocol):  # pragma: no cover - protocol is for type checking only
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        ...

    def cancel(self, task: ScheduledTask) -> None:
        ...

    def run_in_background(
        self,
        func: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        ...


class TkScheduler:
    """Single-thread scheduler driven by ``after`` on a Tk widget.

    Every callback runs on the Tk thread. Other threads hand work over with
    :meth:`call_soon_threadsafe`; the queue is drained by a periodic poll.
    """

    def __init__(self, widget, *, poll_interval: float = POLL_INTERVAL) -> None:
        self._widget = widget
        self._poll_ms = max(1, int(poll_interval * 1000))
        self._incoming: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._pending: Set[ScheduledTask] = set()
        self._poll_id: Optional[str] = None
        self._closed = False

    def start(self) -> None:
        if self._poll_id is None and not self._closed:
            self._poll_id = self._widget.after(self._poll_ms, self._drain)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        task = ScheduledTask(callback)
        if self._closed:
            task.cancel()
            return task

        def fire() -> None:
            self._pending.discard(task)
            task.run()

        task.handle = self._widget.after(max(0, int(delay * 1000)), fire)
        self._pending.add(task)
        return task

    def cancel(self, task: ScheduledTask) -> None:
        task.cancel()
        if task in self._pending:
            self._pending.discard(task)
            self._widget.after_cancel(task.handle)

    def call_soon_threadsafe(self, callback: Callable[[], None]) -> None:
        self._incoming.put(callback)

    def run_in_background(
        self,
        func: Callable[[], Any],
        on_success: Callable[[Any], None],
        on_error: Callable[[BaseException], None],
    ) -> None:
        def worker() -> None:
            try:
                result = func()
            except Exception as exc:
                self.call_soon_threadsafe(lambda: on_error(exc))
            else:
                self.call_soon_threadsafe(lambda: on_success(result))

        threading.Thread(target=worker, name="TranslationWorker", daemon=True).start()

    def cancel_all(self) -> None:
        """Cancel pending timers and stop draining cross-thread callbacks."""

        self._closed = True
        for task in list(self._pending):
            self.cancel(task)
        if self._poll_id is not None:
            self._widget.after_cancel(self._poll_id)
            self._poll_id = None

    def _drain(self) -> None:
        self._poll_id = None
        try:
            while True:
                callback = self._incoming.get_nowait()
                try:
                    callback()
                except Exception:
                    logger.exception("Scheduled callback failed")
        except queue.Empty:
            pass
        if not self._closed:
            self._poll_id = self._widget.after(self._poll_ms, self._drain)
