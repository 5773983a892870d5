"""Translation utilities for the UrduEnglishTranslator application."""

from __future__ import annotations

import enum
import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Callable, Optional


logger = logging.getLogger("urdutranslator.translation")

CHAT_COMPLETIONS_ENDPOINT = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-3.5-turbo"
REQUEST_TIMEOUT = 30.0
MAX_OUTPUT_TOKENS = 1000
TEMPERATURE = 0.3

MAX_INPUT_CHARS = 4000
MAX_PREVIEW_CHARS = 1000


class TranslationError(RuntimeError):
    """Raised when the translation service cannot complete a request."""


class MissingCredentialError(TranslationError):
    def __init__(self) -> None:
        super().__init__("API key not set. Please set it in settings.")


class EmptySelectionError(TranslationError):
    def __init__(self) -> None:
        super().__init__("No text selected or cannot access clipboard")


class InputTooLongError(TranslationError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"Text too long. Please select less than {limit} characters.")
        self.limit = limit


class TranslationTimeoutError(TranslationError):
    def __init__(self) -> None:
        super().__init__("Translation timeout. Please check your internet connection.")


class UnauthorizedError(TranslationError):
    def __init__(self) -> None:
        super().__init__("Invalid API key. Please check your OpenAI API key.")


class MalformedResponseError(TranslationError):
    def __init__(self) -> None:
        super().__init__("Invalid response from translation service")


class NetworkFailureError(TranslationError):
    def __init__(self, reason: object) -> None:
        super().__init__(f"Translation failed: {reason}")
        self.reason = reason


class TranslationDirection(enum.Enum):
    EN_TO_ROMAN_UR = "en-to-ur"
    ROMAN_UR_TO_EN = "ur-to-en"

    @property
    def label(self) -> str:
        if self is TranslationDirection.EN_TO_ROMAN_UR:
            return "English → Roman Urdu"
        return "Roman Urdu → English"


@dataclass(frozen=True)
class TranslationRequest:
    source_text: str
    direction: TranslationDirection


def build_prompt(text: str, direction: TranslationDirection) -> str:
    """Return the single-turn instruction sent to the completion service."""

    if direction is TranslationDirection.EN_TO_ROMAN_UR:
        instruction = (
            "Translate this English text to Roman Urdu (Urdu written in Latin letters, "
            "NOT Urdu script). Return only the translation"
        )
    else:
        instruction = "Translate this Roman Urdu text to English. Return only the English translation"
    return f'{instruction}:\n\n"{text}"'


def validate_source_text(text: str, max_chars: int = MAX_INPUT_CHARS) -> str:
    """Return ``text`` trimmed, or raise if it cannot be translated."""

    stripped = (text or "").strip()
    if not stripped:
        raise EmptySelectionError()
    if len(stripped) > max_chars:
        raise InputTooLongError(max_chars)
    return stripped


class OpenAIChatClient:
    """Minimal client for an OpenAI compatible chat-completion endpoint."""

    def __init__(
        self,
        api_key_provider: Callable[[], Optional[str]],
        *,
        model: str = DEFAULT_MODEL,
        endpoint: str = CHAT_COMPLETIONS_ENDPOINT,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self._api_key_provider = api_key_provider
        self.model = model
        self.endpoint = endpoint
        self.timeout = timeout

    def translate(
        self,
        text: str,
        direction: TranslationDirection,
        *,
        max_chars: int = MAX_INPUT_CHARS,
    ) -> str:
        api_key = (self._api_key_provider() or "").strip()
        if not api_key:
            raise MissingCredentialError()
        text = validate_source_text(text, max_chars)

        body = {
            "model": self.model,
            "messages": [{"role": "user", "content": build_prompt(text, direction)}],
            "max_tokens": MAX_OUTPUT_TOKENS,
            "temperature": TEMPERATURE,
        }
        request = urllib.request.Request(
            self.endpoint,
            data=json.dumps(body).encode("utf-8"),
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            method="POST",
        )

        logger.info("Requesting %s translation (%d chars)", direction.value, len(text))
        try:
            with urllib.request.urlopen(request, timeout=self.timeout) as response:
                payload = response.read()
        except urllib.error.HTTPError as exc:
            if exc.code == 401:
                raise UnauthorizedError() from exc
            raise NetworkFailureError(exc) from exc
        except urllib.error.URLError as exc:
            if isinstance(exc.reason, TimeoutError):
                raise TranslationTimeoutError() from exc
            raise NetworkFailureError(exc.reason) from exc
        except TimeoutError as exc:
            raise TranslationTimeoutError() from exc
        except OSError as exc:
            raise NetworkFailureError(exc) from exc
        except http.client.HTTPException as exc:
            raise NetworkFailureError(exc) from exc

        return self._parse_completion(payload)

    def translate_request(self, request: TranslationRequest, *, max_chars: int = MAX_INPUT_CHARS) -> str:
        return self.translate(request.source_text, request.direction, max_chars=max_chars)

    @staticmethod
    def _parse_completion(payload: bytes) -> str:
        try:
            data = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise MalformedResponseError() from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise MalformedResponseError() from exc

        if not isinstance(content, str):
            raise MalformedResponseError()
        return content.strip()
