"""Translate-the-selection cycle with clipboard save and restore."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from clipboard_bridge import ClipboardError
from scheduler import ScheduledTask, Scheduler
from translation_service import (
    MAX_INPUT_CHARS,
    MAX_PREVIEW_CHARS,
    EmptySelectionError,
    InputTooLongError,
    TranslationDirection,
    TranslationError,
    validate_source_text,
)


logger = logging.getLogger("urdutranslator.orchestrator")

SETTLE_DELAY = 0.3
RESTORE_DELAY = 1.0


class NotificationLevel(enum.Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    message: str
    level: NotificationLevel


class ClipboardRestoreError(RuntimeError):
    """Raised when the pre-cycle clipboard value could not be written back."""


class TranslationOrchestrator:
    """Runs one capture, translate, replace and restore cycle at a time.

    The orchestrator must only be used from the scheduler's thread. A
    trigger that arrives while a cycle is running is dropped.
    """

    def __init__(
        self,
        client,
        clipboard,
        input_simulator,
        scheduler: Scheduler,
        notify: Callable[[Notification], None],
        *,
        settle_delay: float = SETTLE_DELAY,
        restore_delay: float = RESTORE_DELAY,
        max_chars: int = MAX_INPUT_CHARS,
    ) -> None:
        self._client = client
        self._clipboard = clipboard
        self._input = input_simulator
        self._scheduler = scheduler
        self._notify_callback = notify
        self._settle_delay = settle_delay
        self._restore_delay = restore_delay
        self._max_chars = max_chars
        self._busy = False
        self._restore_task: Optional[ScheduledTask] = None
        self._restore_original = ""

    @property
    def busy(self) -> bool:
        return self._busy

    def trigger(self, direction: TranslationDirection) -> bool:
        """Start a cycle for ``direction``; returns ``False`` if one is running."""

        if self._busy:
            logger.debug("Dropping %s trigger; a translation is already running", direction.value)
            return False
        self._busy = True
        logger.info("Starting %s translation cycle", direction.value)

        try:
            self._flush_restore()
            original = self._clipboard.read_text()
            self._input.copy()
        except Exception as exc:
            self._fail(exc)
            return True

        self._scheduler.call_later(self._settle_delay, lambda: self._capture(original, direction))
        return True

    def preview(
        self,
        text: str,
        direction: TranslationDirection,
        on_result: Optional[Callable[[str], None]] = None,
    ) -> bool:
        """Translate ``text`` for the settings window without touching the clipboard."""

        if self._busy:
            return False
        try:
            text = validate_source_text(text, MAX_PREVIEW_CHARS)
        except EmptySelectionError:
            self._notify("Please enter text to test", NotificationLevel.ERROR)
            return False
        except InputTooLongError as exc:
            self._notify(
                f"Test text too long. Please use less than {exc.limit} characters.",
                NotificationLevel.ERROR,
            )
            return False

        self._busy = True
        self._notify("Testing translation...", NotificationLevel.INFO)

        def on_success(translated: str) -> None:
            self._busy = False
            self._notify(f"Translation: {translated}", NotificationLevel.SUCCESS)
            if on_result is not None:
                on_result(translated)

        def on_error(exc: BaseException) -> None:
            self._busy = False
            if not isinstance(exc, TranslationError):
                logger.error("Unexpected preview failure", exc_info=exc)
            self._notify(f"Test failed: {exc}", NotificationLevel.ERROR)

        self._scheduler.run_in_background(
            lambda: self._client.translate(text, direction, max_chars=MAX_PREVIEW_CHARS),
            on_success,
            on_error,
        )
        return True

    def shutdown(self) -> None:
        """Drop any pending clipboard restore."""

        if self._restore_task is not None and not self._restore_task.done:
            logger.info("Cancelling pending clipboard restore")
            self._scheduler.cancel(self._restore_task)
        self._restore_task = None

    # Cycle steps ------------------------------------------------------

    def _capture(self, original: str, direction: TranslationDirection) -> None:
        try:
            selected = validate_source_text(self._clipboard.read_text(), self._max_chars)
        except Exception as exc:
            self._abort(exc, original)
            return

        self._notify("Translating...", NotificationLevel.INFO)
        self._scheduler.run_in_background(
            lambda: self._client.translate(selected, direction, max_chars=self._max_chars),
            lambda translated: self._replace(original, translated),
            lambda exc: self._abort(exc, original),
        )

    def _replace(self, original: str, translated: str) -> None:
        try:
            self._clipboard.write_text(translated)
            self._input.paste()
        except Exception as exc:
            self._abort(exc, original)
            return

        self._notify("Translation completed!", NotificationLevel.SUCCESS)
        self._restore_original = original
        self._restore_task = self._scheduler.call_later(
            self._restore_delay, lambda: self._restore(original)
        )
        self._busy = False

    def _flush_restore(self) -> None:
        # A new cycle must snapshot the user's clipboard, not the previous translation.
        task = self._restore_task
        if task is None or task.done or task.cancelled:
            return
        self._scheduler.cancel(task)
        self._restore_task = None
        logger.debug("Restoring clipboard early for a new translation cycle")
        self._clipboard.write_text(self._restore_original)

    def _restore(self, original: str) -> None:
        try:
            self._clipboard.write_text(original)
        except Exception as exc:
            logger.warning("%s", ClipboardRestoreError(f"Clipboard restore failed: {exc}"))
        finally:
            self._restore_task = None

    def _abort(self, exc: BaseException, original: str) -> None:
        # The copy chord may have replaced the clipboard with the selection.
        try:
            if self._clipboard.read_text() != original:
                self._clipboard.write_text(original)
        except Exception as restore_exc:
            logger.warning("%s", ClipboardRestoreError(f"Clipboard restore failed: {restore_exc}"))
        self._fail(exc)

    def _fail(self, exc: BaseException) -> None:
        self._busy = False
        if isinstance(exc, (TranslationError, ClipboardError)):
            logger.warning("Translation cycle failed: %s", exc)
        else:
            logger.error("Unexpected error during translation cycle", exc_info=exc)
        self._notify(str(exc) or exc.__class__.__name__, NotificationLevel.ERROR)

    def _notify(self, message: str, level: NotificationLevel) -> None:
        try:
            self._notify_callback(Notification(message, level))
        except Exception:
            logger.exception("Notification callback failed")
