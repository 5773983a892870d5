"""Desktop utility that translates selected text between English and Roman Urdu."""

from __future__ import annotations

import argparse
import contextlib
import logging
import sys
import tempfile
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import IO, Callable, Dict, List, Optional

try:
    import tkinter as tk
    from tkinter import messagebox, scrolledtext
except ImportError as exc:  # pragma: no cover - tkinter ships with the Windows installer
    raise SystemExit("tkinter is required to display the settings window") from exc

try:  # pragma: no cover - optional dependency for system tray support
    import pystray  # type: ignore
    from pystray import MenuItem  # type: ignore
except Exception:  # pragma: no cover - backend selection needs a desktop session
    pystray = None  # type: ignore
    MenuItem = None  # type: ignore

try:  # pragma: no cover - optional dependency for system tray support
    from app_icon import load_icon
except ImportError:  # pragma: no cover - Pillow missing; handled when starting the tray icon
    load_icon = None  # type: ignore

from clipboard_bridge import ClipboardBridge
from hotkey_manager import (
    BaseHotkeyService,
    HotkeyBinding,
    KeyboardHotkeyService,
    build_bindings_from_preferences,
    direction_for_binding,
)
from keyboard_adapter import ClipboardOnlyInputSimulator, create_input_simulator, keyboard
from scheduler import TkScheduler
from settings_store import PREFERENCES_FILE, InvalidApiKeyError, SettingsStore
from translation_orchestrator import Notification, NotificationLevel, TranslationOrchestrator
from translation_service import (
    CHAT_COMPLETIONS_ENDPOINT,
    MAX_PREVIEW_CHARS,
    OpenAIChatClient,
    TranslationDirection,
)


APP_NAME = "UrduEnglishTranslator"
APP_TITLE = "Urdu English Translator"

LOG_FILE_NAME = "urdutranslator.log"
LOG_MAX_BYTES = 2_097_152
LOG_BACKUP_COUNT = 3

STATUS_CLEAR_DELAY = 5.0

logger = logging.getLogger("urdutranslator")


def configure_logging(log_dir: Path = PREFERENCES_FILE.parent, *, verbose: bool = False) -> logging.Logger:
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            log_dir / LOG_FILE_NAME,
            maxBytes=LOG_MAX_BYTES,
            backupCount=LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
    except OSError as exc:
        print(f"File logging disabled: {exc}", file=sys.stderr)
    else:
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)
    return logger


def install_exception_hooks() -> None:
    """Log uncaught exceptions instead of letting them end the process."""

    def log_uncaught(exc_type, exc_value, exc_traceback) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_traceback)
            return
        logger.error("Uncaught exception", exc_info=(exc_type, exc_value, exc_traceback))

    def log_thread_exception(args: threading.ExceptHookArgs) -> None:
        thread_name = args.thread.name if args.thread is not None else "unknown"
        logger.error(
            "Uncaught exception in thread %s",
            thread_name,
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    sys.excepthook = log_uncaught
    threading.excepthook = log_thread_exception


def _resource_path(relative_path: str) -> Path:
    """Return an absolute path to a bundled resource."""

    base_path = Path(getattr(sys, "_MEIPASS", Path(__file__).resolve().parent))  # type: ignore[attr-defined]
    return base_path / relative_path


class SingleInstanceError(RuntimeError):
    """Raised when another instance of the application is already running."""


class SingleInstanceGuard:
    """Cross-platform single instance guard using a filesystem lock."""

    def __init__(self, name: str, lock_dir: Optional[Path] = None) -> None:
        self._lock_path = Path(lock_dir or tempfile.gettempdir()) / f"{name}.lock"
        self._lock_file: Optional[IO[str]] = None

    def acquire(self) -> None:
        if self._lock_file is not None:
            return
        self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock_file = open(self._lock_path, "a+")
        try:
            self._lock(self._lock_file, unlock=False)
        except OSError as exc:
            self._lock_file.close()
            self._lock_file = None
            raise SingleInstanceError("Another instance is already running") from exc

    def release(self) -> None:
        if self._lock_file is None:
            return
        try:
            with contextlib.suppress(OSError):
                self._lock(self._lock_file, unlock=True)
        finally:
            self._lock_file.close()
            self._lock_file = None
            with contextlib.suppress(OSError):
                self._lock_path.unlink()

    @staticmethod
    def _lock(lock_file: IO[str], *, unlock: bool) -> None:
        if sys.platform == "win32":  # pragma: no cover - platform specific
            import msvcrt  # type: ignore

            lock_file.seek(0)
            msvcrt.locking(lock_file.fileno(), msvcrt.LK_UNLCK if unlock else msvcrt.LK_NBLCK, 1)
        else:  # pragma: no cover - exercised on non-Windows platforms
            import fcntl  # type: ignore

            fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN if unlock else fcntl.LOCK_EX | fcntl.LOCK_NB)

    def __enter__(self) -> "SingleInstanceGuard":
        self.acquire()
        return self

    def __exit__(self, *_exc_info: object) -> None:
        self.release()


class StatusPresenter:
    """Shows notifications and clears transient ones after a delay.

    Errors stay visible until replaced; info and success messages are
    cleared after ``clear_delay`` unless something newer is showing.
    """

    def __init__(
        self,
        render: Callable[[str, Optional[NotificationLevel]], None],
        scheduler,
        *,
        clear_delay: float = STATUS_CLEAR_DELAY,
    ) -> None:
        self._render = render
        self._scheduler = scheduler
        self._clear_delay = clear_delay
        self.current: Optional[Notification] = None

    def show(self, notification: Notification) -> None:
        self.current = notification
        self._render(notification.message, notification.level)
        if notification.level is not NotificationLevel.ERROR:
            self._scheduler.call_later(self._clear_delay, lambda: self._clear_if_current(notification))

    def _clear_if_current(self, notification: Notification) -> None:
        if self.current is notification:
            self.current = None
            self._render("", None)


class SettingsWindow:
    """Tk window for the API key, test translations and status messages."""

    _LEVEL_COLOURS = {
        NotificationLevel.INFO: "#1a73e8",
        NotificationLevel.SUCCESS: "#2e7d32",
        NotificationLevel.ERROR: "#c62828",
    }

    def __init__(self, root: "tk.Tk", app: "UrduTranslatorApp") -> None:
        self._root = root
        self._app = app
        root.title(APP_TITLE)
        root.geometry("450x520")
        root.protocol("WM_DELETE_WINDOW", self.hide)
        root.bind("<Escape>", lambda _event: self.hide())

        frame = tk.Frame(root, padx=12, pady=12)
        frame.pack(fill=tk.BOTH, expand=True)

        tk.Label(frame, text="OpenAI API key", anchor="w").pack(fill=tk.X)
        key_row = tk.Frame(frame)
        key_row.pack(fill=tk.X, pady=(2, 10))
        self._key_entry = tk.Entry(key_row, show="*")
        self._key_entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self._key_entry.bind("<Return>", lambda _event: self._save_key())
        tk.Button(key_row, text="Save", command=self._save_key).pack(side=tk.LEFT, padx=(6, 0))

        tk.Label(frame, text=f"Test text (up to {MAX_PREVIEW_CHARS} characters)", anchor="w").pack(fill=tk.X)
        self._test_box = scrolledtext.ScrolledText(frame, wrap=tk.WORD, height=8)
        self._test_box.pack(fill=tk.BOTH, expand=True, pady=(2, 6))
        self._test_box.bind("<Control-Return>", lambda _event: self._run_test(TranslationDirection.EN_TO_ROMAN_UR))

        buttons = tk.Frame(frame)
        buttons.pack(fill=tk.X)
        for direction in TranslationDirection:
            tk.Button(
                buttons,
                text=f"Test {direction.label}",
                command=lambda d=direction: self._run_test(d),
            ).pack(side=tk.LEFT, expand=True, fill=tk.X, padx=2)

        self._status = tk.Label(frame, text="", anchor="w", justify=tk.LEFT, wraplength=400)
        self._status.pack(fill=tk.X, pady=(10, 0))

        labels = app.hotkey_labels()
        tk.Label(
            frame,
            text="\n".join(f"{labels[direction]}: {direction.label}" for direction in TranslationDirection),
            anchor="w",
            justify=tk.LEFT,
            fg="#555555",
        ).pack(fill=tk.X, pady=(10, 0))

        self._presenter = StatusPresenter(self._render_status, app.scheduler)
        app.add_listener(self._presenter.show)
        self._show_initial_status()

    def show(self) -> None:
        self._root.deiconify()
        self._root.lift()
        self._root.focus_force()

    def hide(self) -> None:
        self._root.withdraw()

    def toggle(self) -> None:
        if self._root.state() == "withdrawn":
            self.show()
        else:
            self.hide()

    def _render_status(self, message: str, level: Optional[NotificationLevel]) -> None:
        self._status.configure(text=message, fg=self._LEVEL_COLOURS.get(level, "black"))

    def _show_initial_status(self) -> None:
        if self._app.settings.has_api_key:
            self._presenter.show(Notification("API key loaded successfully!", NotificationLevel.SUCCESS))
        else:
            self._presenter.show(
                Notification("Please set your OpenAI API key to start translating", NotificationLevel.INFO)
            )

    def _save_key(self) -> None:
        if self._app.save_api_key(self._key_entry.get()):
            self._key_entry.delete(0, tk.END)

    def _run_test(self, direction: TranslationDirection) -> None:
        self._app.preview(self._test_box.get("1.0", tk.END), direction)


class SystemTrayController:
    """Manage the system tray icon and its translation menu."""

    def __init__(self, app: "UrduTranslatorApp") -> None:
        self._app = app
        self._icon: Optional["pystray.Icon"] = None

    @staticmethod
    def _is_supported() -> bool:
        return pystray is not None and MenuItem is not None and load_icon is not None

    def start(self) -> None:
        if not self._is_supported():
            logger.warning("System tray icon is unavailable because required dependencies are missing.")
            return

        assert pystray is not None  # noqa: S101 - guarded by _is_supported
        en_to_ur, ur_to_en = self.menu_labels()
        menu = pystray.Menu(
            MenuItem("Show Translator", self._on_show, default=True),
            MenuItem(en_to_ur, self._on_en_to_ur),
            MenuItem(ur_to_en, self._on_ur_to_en),
            pystray.Menu.SEPARATOR,
            MenuItem("Settings", self._on_show),
            pystray.Menu.SEPARATOR,
            MenuItem("Quit", self._on_quit),
        )
        self._icon = pystray.Icon(
            "urdutranslator",
            load_icon(_resource_path("icon/app_icon.png")),
            "\n".join([APP_TITLE, en_to_ur, ur_to_en]),
            menu=menu,
        )
        self._icon.run_detached()

    def menu_labels(self) -> List[str]:
        labels = self._app.hotkey_labels()
        return [f"{direction.label} ({labels[direction]})" for direction in TranslationDirection]

    def stop(self) -> None:
        if self._icon is not None:
            self._icon.stop()
            self._icon = None

    def _on_show(self, _icon, _item) -> None:
        self._app.call_soon(self._app.show_window)

    def _on_en_to_ur(self, _icon, _item) -> None:
        self._app.request_translation(TranslationDirection.EN_TO_ROMAN_UR)

    def _on_ur_to_en(self, _icon, _item) -> None:
        self._app.request_translation(TranslationDirection.ROMAN_UR_TO_EN)

    def _on_quit(self, icon, _item) -> None:
        icon.stop()
        self._icon = None
        self._app.call_soon(self._app.stop)


class UrduTranslatorApp:
    """Wires settings, hotkeys, the tray and the orchestrator together.

    Everything except :meth:`request_translation` and :meth:`call_soon`
    must run on the scheduler thread.
    """

    def __init__(
        self,
        settings: SettingsStore,
        scheduler,
        *,
        client: Optional[OpenAIChatClient] = None,
        clipboard: Optional[ClipboardBridge] = None,
        input_simulator=None,
        keyboard_module=keyboard,
        model: Optional[str] = None,
        endpoint: str = CHAT_COMPLETIONS_ENDPOINT,
    ) -> None:
        self.settings = settings
        self.scheduler = scheduler
        self._listeners: List[Callable[[Notification], None]] = []
        if client is None:
            client = OpenAIChatClient(settings.get_api_key, model=model or settings.model, endpoint=endpoint)
        if input_simulator is None:
            input_simulator = create_input_simulator() or ClipboardOnlyInputSimulator()
        self.orchestrator = TranslationOrchestrator(
            client,
            clipboard or ClipboardBridge(),
            input_simulator,
            scheduler,
            self._broadcast,
        )
        self._keyboard = keyboard_module
        self._hotkey_service: Optional[BaseHotkeyService] = None
        self._bindings: Optional[List[HotkeyBinding]] = None
        self._window: Optional[SettingsWindow] = None
        self._tray: Optional[SystemTrayController] = None
        self._on_stop: Optional[Callable[[], None]] = None
        self.stopped = False

    def add_listener(self, listener: Callable[[Notification], None]) -> None:
        self._listeners.append(listener)

    def attach(
        self,
        window: Optional[SettingsWindow] = None,
        tray: Optional[SystemTrayController] = None,
        on_stop: Optional[Callable[[], None]] = None,
    ) -> None:
        self._window = window
        self._tray = tray
        self._on_stop = on_stop

    def start(self) -> None:
        self._hotkey_service = self._create_hotkey_service()
        if self._hotkey_service is not None:
            try:
                self._hotkey_service.start()
                logger.info("Hotkey service started with %s", self._hotkey_service.describe_bindings())
            except Exception as exc:
                logger.exception("Failed to start hotkey service: %s", exc)
                self._hotkey_service = None
        if self._tray is not None:
            self._tray.start()
        logger.info("%s is running. Select text and press a hotkey to translate.", APP_NAME)

    def stop(self) -> None:
        if self.stopped:
            return
        self.stopped = True
        if self._hotkey_service is not None:
            self._hotkey_service.stop()
            logger.info("Hotkey service stopped")
            self._hotkey_service = None
        if self._tray is not None:
            self._tray.stop()
        self.orchestrator.shutdown()
        cancel_all = getattr(self.scheduler, "cancel_all", None)
        if cancel_all is not None:
            cancel_all()
        if self._on_stop is not None:
            self._on_stop()

    def call_soon(self, callback: Callable[[], None]) -> None:
        self.scheduler.call_soon_threadsafe(callback)

    def request_translation(self, direction: TranslationDirection) -> None:
        """Thread-safe entry point for hotkeys and tray actions."""

        self.call_soon(lambda: self.orchestrator.trigger(direction))

    def handle_hotkey(self, name: str) -> None:
        direction = direction_for_binding(name)
        if direction is None:
            logger.debug("Unknown hotkey event: %s", name)
            return
        self.request_translation(direction)

    def preview(self, text: str, direction: TranslationDirection) -> bool:
        return self.orchestrator.preview(text, direction)

    def save_api_key(self, key: str) -> bool:
        try:
            self.settings.set_api_key(key)
        except InvalidApiKeyError as exc:
            self._broadcast(Notification(str(exc), NotificationLevel.ERROR))
            return False
        self._broadcast(Notification("API key saved successfully!", NotificationLevel.SUCCESS))
        return True

    def show_window(self) -> None:
        if self._window is not None:
            self._window.show()

    def hotkey_bindings(self) -> List[HotkeyBinding]:
        if self._bindings is None:
            self._bindings = build_bindings_from_preferences(self.settings.hotkey_preferences())
        return self._bindings

    def hotkey_labels(self) -> Dict[TranslationDirection, str]:
        """Map each direction to the display text of its configured hotkey."""

        labels = {}
        for binding in self.hotkey_bindings():
            direction = direction_for_binding(binding.name)
            if direction is not None:
                labels[direction] = binding.display
        return labels

    def _create_hotkey_service(self) -> Optional[BaseHotkeyService]:
        if self._keyboard is None:
            logger.warning("The keyboard package is unavailable; global hotkeys are disabled")
            return None
        return KeyboardHotkeyService(self.hotkey_bindings(), self.handle_hotkey, self._keyboard)

    def _broadcast(self, notification: Notification) -> None:
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception("Notification listener failed")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Translate selected text between English and Roman Urdu.")
    parser.add_argument("--model", default=None, help="Chat model to use (default: saved preference or gpt-3.5-turbo).")
    parser.add_argument("--endpoint", default=CHAT_COMPLETIONS_ENDPOINT, help="Chat-completion endpoint URL.")
    parser.add_argument("--hidden", action="store_true", help="Start minimised to the system tray.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    configure_logging(verbose=args.verbose)
    install_exception_hooks()
    try:
        with SingleInstanceGuard(APP_NAME.lower()):
            root = tk.Tk()
            root.report_callback_exception = lambda *exc_info: logger.error(
                "Uncaught exception in Tk callback", exc_info=exc_info
            )
            scheduler = TkScheduler(root)
            settings = SettingsStore().load()
            app = UrduTranslatorApp(settings, scheduler, model=args.model, endpoint=args.endpoint)
            window = SettingsWindow(root, app)
            app.attach(window, SystemTrayController(app), on_stop=root.quit)
            if args.hidden:
                window.hide()
            scheduler.start()
            app.start()
            try:
                root.mainloop()
            except KeyboardInterrupt:  # pragma: no cover - manual console interruption
                pass
            finally:
                app.stop()
                root.destroy()
    except SingleInstanceError:
        root = tk.Tk()
        root.withdraw()
        messagebox.showinfo(APP_TITLE, f"{APP_TITLE} is already running.")
        root.destroy()


if __name__ == "__main__":
    main()
