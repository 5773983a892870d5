"""Global hotkey management based on the keyboard package."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from settings_store import DEFAULT_HOTKEY_PREFERENCES
from translation_service import TranslationDirection


logger = logging.getLogger("urdutranslator.hotkeys")

MODIFIER_ALIASES = {
    "ctrl": "ctrl",
    "control": "ctrl",
    "lcontrol": "ctrl",
    "rcontrol": "ctrl",
    "shift": "shift",
    "lshift": "shift",
    "rshift": "shift",
    "alt": "alt",
    "menu": "alt",
    "option": "alt",
    "win": "windows",
    "windows": "windows",
    "cmd": "windows",
    "command": "windows",
    "super": "windows",
}

MODIFIER_ORDER = ("ctrl", "alt", "shift", "windows")

KEY_ALIASES = {
    "esc": "esc",
    "escape": "esc",
    "return": "enter",
    "enter": "enter",
    "space": "space",
    "tab": "tab",
    "pageup": "page up",
    "pagedown": "page down",
}

BINDING_DIRECTIONS = {
    "en_to_roman_ur": TranslationDirection.EN_TO_ROMAN_UR,
    "roman_ur_to_en": TranslationDirection.ROMAN_UR_TO_EN,
}


@dataclass(frozen=True)
class HotkeyBinding:
    """Represents a single hotkey registration."""

    name: str
    combo: str
    display: str


class BaseHotkeyService:
    """Protocol-like base class for hotkey backends."""

    def start(self) -> None:  # pragma: no cover - interface definition
        raise NotImplementedError

    def stop(self) -> None:  # pragma: no cover - interface definition
        raise NotImplementedError

    def describe_bindings(self) -> Sequence[str]:  # pragma: no cover - interface definition
        raise NotImplementedError


class KeyboardHotkeyService(BaseHotkeyService):
    """Registers bindings with ``keyboard.add_hotkey``.

    ``on_hotkey`` is called with the binding name from the keyboard
    listener thread; callers must hand the event over to their own loop.
    """

    def __init__(
        self,
        bindings: Sequence[HotkeyBinding],
        on_hotkey: Callable[[str], None],
        keyboard_module: Any,
    ) -> None:
        self._bindings: List[HotkeyBinding] = list(bindings)
        self._on_hotkey = on_hotkey
        self._keyboard = keyboard_module
        self._handles: Dict[str, Any] = {}

    @property
    def active_bindings(self) -> List[str]:
        return list(self._handles)

    def start(self) -> None:
        for binding in self._bindings:
            if binding.name in self._handles:
                continue
            try:
                handle = self._keyboard.add_hotkey(
                    binding.combo,
                    lambda name=binding.name: self._dispatch(name),
                    suppress=False,
                )
            except Exception as exc:
                logger.error(
                    "Failed to register hotkey %s (%s): %s",
                    binding.name,
                    binding.display,
                    exc,
                )
                continue
            self._handles[binding.name] = handle
            logger.info("Registered hotkey '%s' as %s", binding.name, binding.display)

    def stop(self) -> None:
        for name, handle in list(self._handles.items()):
            try:
                self._keyboard.remove_hotkey(handle)
            except (KeyError, ValueError) as exc:
                logger.debug("Hotkey %s was already removed: %s", name, exc)
        self._handles.clear()

    def describe_bindings(self) -> Sequence[str]:
        return [f"{binding.name}: {binding.display}" for binding in self._bindings]

    def _dispatch(self, name: str) -> None:
        try:
            self._on_hotkey(name)
        except Exception:
            logger.exception("Error while processing hotkey event %s", name)


def _normalize_token(token: str) -> Optional[str]:
    token = token.strip().lower()
    if not token:
        return None
    if token in MODIFIER_ALIASES:
        return MODIFIER_ALIASES[token]
    if token in KEY_ALIASES:
        return KEY_ALIASES[token]
    if len(token) == 1 and token.isalnum():
        return token
    if token.startswith("f") and token[1:].isdigit() and 1 <= int(token[1:]) <= 24:
        return token
    return None


def build_hotkey_binding(name: str, combo: str) -> HotkeyBinding:
    """Create a :class:`HotkeyBinding` from a textual representation."""

    parts = [part for part in combo.replace("-", "+").split("+") if part.strip()]
    if not parts:
        raise ValueError(f"Invalid hotkey definition: {combo!r}")

    modifiers = set()
    keys: List[str] = []
    for part in parts:
        token = _normalize_token(part)
        if token is None:
            raise ValueError(f"Unknown key token: {part.strip()!r}")
        if token in MODIFIER_ORDER:
            modifiers.add(token)
        else:
            keys.append(token)

    if len(keys) != 1:
        raise ValueError(f"Hotkey combination needs exactly one non-modifier key: {combo!r}")

    ordered = [modifier for modifier in MODIFIER_ORDER if modifier in modifiers] + keys
    display = "+".join(token.title() if len(token) > 1 else token.upper() for token in ordered)
    return HotkeyBinding(name=name, combo="+".join(ordered), display=display)


def build_bindings_from_preferences(hotkeys: Dict[str, object]) -> List[HotkeyBinding]:
    """Return one binding per translation direction, falling back to defaults."""

    bindings = []
    for name, default in DEFAULT_HOTKEY_PREFERENCES.items():
        combo = hotkeys.get(name) if isinstance(hotkeys, dict) else None
        if not isinstance(combo, str) or not combo.strip():
            combo = default
        try:
            bindings.append(build_hotkey_binding(name, combo))
        except ValueError as exc:
            logger.error("Invalid hotkey for %s (%s); using %s", name, exc, default)
            bindings.append(build_hotkey_binding(name, default))
    return bindings


def direction_for_binding(name: str) -> Optional[TranslationDirection]:
    return BINDING_DIRECTIONS.get(name)
