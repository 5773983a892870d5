"""Copy/paste key simulation powered by the keyboard package."""

from __future__ import annotations

import logging
import sys
from typing import Optional

try:
    import keyboard  # type: ignore
except Exception:  # pragma: no cover - keyboard needs OS hooks that may be unavailable
    keyboard = None  # type: ignore


logger = logging.getLogger("urdutranslator.input")


def _modifier_key() -> str:
    return "command" if sys.platform == "darwin" else "ctrl"


def create_input_simulator() -> Optional["KeyboardInputSimulator"]:
    """Create an input simulator backed by the keyboard package if supported."""

    if keyboard is None:
        return None
    return KeyboardInputSimulator(keyboard)


class KeyboardInputSimulator:
    """Send copy and paste chords to the foreground application."""

    def __init__(self, keyboard_module, modifier: Optional[str] = None) -> None:
        self._keyboard = keyboard_module
        self._modifier = modifier or _modifier_key()

    @property
    def copy_chord(self) -> str:
        return f"{self._modifier}+c"

    @property
    def paste_chord(self) -> str:
        return f"{self._modifier}+v"

    def copy(self) -> None:
        self._send(self.copy_chord)

    def paste(self) -> None:
        self._send(self.paste_chord)

    def _send(self, chord: str) -> None:
        # Best effort: a failed chord leaves the clipboard as it was.
        try:
            self._keyboard.send(chord)
        except Exception as exc:
            logger.warning("Failed to simulate %s: %s", chord, exc)


class ClipboardOnlyInputSimulator:
    """Fallback used when key events cannot be synthesised.

    The cycle then relies on the clipboard already holding the selection,
    and the translation only sits in the clipboard until it is restored.
    """

    def copy(self) -> None:
        logger.debug("Copy simulation unavailable; using current clipboard")

    def paste(self) -> None:
        logger.debug("Paste simulation unavailable; skipping paste")
