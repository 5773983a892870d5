"""Persistent user preferences, including the API credential."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Optional

from translation_service import DEFAULT_MODEL


logger = logging.getLogger("urdutranslator.settings")

PREFERENCES_FILE = Path.home() / ".urdutranslator_preferences.json"
API_KEY_PREFIX = "sk-"

DEFAULT_HOTKEY_PREFERENCES = {
    "en_to_roman_ur": "ctrl+shift+1",
    "roman_ur_to_en": "ctrl+shift+2",
}


class InvalidApiKeyError(ValueError):
    """Raised when a credential does not look like a provider API key."""


def validate_api_key(key: Optional[str]) -> str:
    key = (key or "").strip()
    if not key or not key.startswith(API_KEY_PREFIX):
        raise InvalidApiKeyError(
            f"Please enter a valid OpenAI API key (should start with {API_KEY_PREFIX})"
        )
    return key


class SettingsStore:
    """Single owner of the preferences file.

    The credential is held in memory once loaded; ``set_api_key`` updates
    memory first and then persists, so a write failure only costs the key
    on the next start.
    """

    def __init__(self, path: Path = PREFERENCES_FILE) -> None:
        self.path = path
        self._data: dict = {}
        self._api_key = ""

    def load(self) -> "SettingsStore":
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            data = {}
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, exc)
            data = {}
        self._data = data if isinstance(data, dict) else {}
        key = self._data.get("api_key")
        self._api_key = key.strip() if isinstance(key, str) else ""
        return self

    @property
    def api_key(self) -> str:
        return self._api_key

    def get_api_key(self) -> str:
        return self._api_key

    @property
    def has_api_key(self) -> bool:
        return bool(self._api_key)

    def set_api_key(self, key: Optional[str]) -> None:
        self._api_key = validate_api_key(key)
        self._data["api_key"] = self._api_key
        self._save()
        logger.info("API key updated")

    @property
    def model(self) -> str:
        model = self._data.get("model")
        return model.strip() if isinstance(model, str) and model.strip() else DEFAULT_MODEL

    def hotkey_preferences(self) -> dict:
        result = copy.deepcopy(DEFAULT_HOTKEY_PREFERENCES)
        stored = self._data.get("hotkeys")
        if not isinstance(stored, dict):
            return result
        for name in result:
            combo = stored.get(name)
            if isinstance(combo, str) and combo.strip():
                result[name] = combo.strip()
        return result

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self._data, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to save preferences to %s: %s", self.path, exc)
