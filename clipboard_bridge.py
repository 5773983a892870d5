"""Plain-text access to the OS clipboard."""

from __future__ import annotations

import pyperclip


class ClipboardError(RuntimeError):
    """Raised when the clipboard cannot be read or written."""


class ClipboardBridge:
    """Thin wrapper around a pyperclip compatible module."""

    def __init__(self, clipboard_module=pyperclip) -> None:
        self._clipboard = clipboard_module

    def read_text(self) -> str:
        try:
            text = self._clipboard.paste()
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"Failed to read clipboard: {exc}") from exc
        return text if isinstance(text, str) else ""

    def write_text(self, text: str) -> None:
        try:
            self._clipboard.copy(text)
        except pyperclip.PyperclipException as exc:
            raise ClipboardError(f"Failed to write clipboard: {exc}") from exc
