import threading
import time
import unittest

from scheduler import TkScheduler


class FakeWidget:
    """Records ``after`` calls the way a Tk widget would accept them."""

    def __init__(self) -> None:
        self.timers = {}
        self.cancelled = []
        self._next = 0

    def after(self, ms, callback):
        self._next += 1
        timer_id = f"after#{self._next}"
        self.timers[timer_id] = (ms, callback)
        return timer_id

    def after_cancel(self, timer_id) -> None:
        self.timers.pop(timer_id, None)
        self.cancelled.append(timer_id)

    def fire(self, timer_id) -> None:
        _, callback = self.timers.pop(timer_id)
        callback()

    def fire_all(self, ms=None) -> None:
        for timer_id, (delay, _) in list(self.timers.items()):
            if ms is None or delay == ms:
                self.fire(timer_id)


class TkSchedulerTests(unittest.TestCase):
    def setUp(self) -> None:
        self.widget = FakeWidget()
        self.scheduler = TkScheduler(self.widget, poll_interval=0.05)

    def _wait_for_incoming(self) -> None:
        for _ in range(200):
            if not self.scheduler._incoming.empty():
                return
            time.sleep(0.01)
        self.fail("background work never posted a result")

    def test_call_later_converts_to_milliseconds(self) -> None:
        calls = []
        task = self.scheduler.call_later(0.3, lambda: calls.append("ran"))

        self.assertEqual([ms for ms, _ in self.widget.timers.values()], [300])
        self.widget.fire(task.handle)
        self.assertEqual(calls, ["ran"])
        self.assertTrue(task.done)

    def test_cancelled_task_never_runs(self) -> None:
        calls = []
        task = self.scheduler.call_later(1.0, lambda: calls.append("ran"))
        self.scheduler.cancel(task)

        self.assertIn(task.handle, self.widget.cancelled)
        self.assertTrue(task.cancelled)
        task.run()
        self.assertEqual(calls, [])

    def test_thread_callbacks_run_on_poll(self) -> None:
        calls = []
        self.scheduler.start()
        worker = threading.Thread(target=lambda: self.scheduler.call_soon_threadsafe(lambda: calls.append(1)))
        worker.start()
        worker.join()

        self.assertEqual(calls, [])
        self.widget.fire_all(ms=50)
        self.assertEqual(calls, [1])
        self.assertEqual(len(self.widget.timers), 1, "poll should reschedule itself")

    def test_failing_callback_does_not_stop_polling(self) -> None:
        calls = []
        self.scheduler.start()
        self.scheduler.call_soon_threadsafe(lambda: 1 / 0)
        self.scheduler.call_soon_threadsafe(lambda: calls.append("after"))
        with self.assertLogs("urdutranslator.scheduler", level="ERROR"):
            self.widget.fire_all(ms=50)
        self.assertEqual(calls, ["after"])
        self.assertEqual(len(self.widget.timers), 1)

    def test_run_in_background_delivers_result_on_poll(self) -> None:
        results = []
        caller = threading.current_thread()
        self.scheduler.start()
        self.scheduler.run_in_background(
            lambda: "translated",
            lambda value: results.append((value, threading.current_thread() is caller)),
            lambda exc: results.append(exc),
        )
        self._wait_for_incoming()
        self.widget.fire_all(ms=50)
        self.assertEqual(results, [("translated", True)])

    def test_run_in_background_delivers_errors(self) -> None:
        errors = []
        self.scheduler.start()

        def fail():
            raise ValueError("nope")

        self.scheduler.run_in_background(fail, lambda value: None, errors.append)
        self._wait_for_incoming()
        self.widget.fire_all(ms=50)
        self.assertEqual(len(errors), 1)
        self.assertIsInstance(errors[0], ValueError)

    def test_cancel_all_stops_everything(self) -> None:
        calls = []
        self.scheduler.start()
        task = self.scheduler.call_later(1.0, lambda: calls.append("restore"))

        self.scheduler.cancel_all()

        self.assertTrue(task.cancelled)
        self.assertEqual(self.widget.timers, {})
        late = self.scheduler.call_later(0.1, lambda: calls.append("late"))
        self.assertTrue(late.cancelled)
        self.assertEqual(self.widget.timers, {})
        self.scheduler.start()
        self.assertEqual(self.widget.timers, {})


if __name__ == "__main__":
    unittest.main()
