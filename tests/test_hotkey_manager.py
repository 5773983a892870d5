import unittest

from fakes import FakeKeyboard
from hotkey_manager import (
    KeyboardHotkeyService,
    build_bindings_from_preferences,
    build_hotkey_binding,
    direction_for_binding,
)
from translation_service import TranslationDirection


class BuildHotkeyBindingTests(unittest.TestCase):
    def test_normalises_modifiers_and_order(self) -> None:
        binding = build_hotkey_binding("en_to_roman_ur", "Shift+Control+1")
        self.assertEqual(binding.combo, "ctrl+shift+1")
        self.assertEqual(binding.display, "Ctrl+Shift+1")

    def test_accepts_function_keys_and_aliases(self) -> None:
        self.assertEqual(build_hotkey_binding("a", "cmd-F9").combo, "windows+f9")
        self.assertEqual(build_hotkey_binding("b", "alt+Escape").combo, "alt+esc")
        self.assertEqual(build_hotkey_binding("c", "ctrl+PageUp").display, "Ctrl+Page Up")

    def test_rejects_invalid_combinations(self) -> None:
        for combo in ("", "+", "ctrl+shift", "ctrl+a+b", "ctrl+hyper", "f99"):
            with self.subTest(combo=combo):
                with self.assertRaises(ValueError):
                    build_hotkey_binding("bad", combo)

    def test_bindings_from_preferences_fall_back_to_defaults(self) -> None:
        with self.assertLogs("urdutranslator.hotkeys", level="ERROR"):
            bindings = build_bindings_from_preferences(
                {"en_to_roman_ur": "ctrl+alt+u", "roman_ur_to_en": "ctrl+shift"}
            )
        self.assertEqual(
            [(b.name, b.combo) for b in bindings],
            [("en_to_roman_ur", "ctrl+alt+u"), ("roman_ur_to_en", "ctrl+shift+2")],
        )
        self.assertEqual(len(build_bindings_from_preferences({})), 2)

    def test_direction_for_binding(self) -> None:
        self.assertIs(direction_for_binding("en_to_roman_ur"), TranslationDirection.EN_TO_ROMAN_UR)
        self.assertIs(direction_for_binding("roman_ur_to_en"), TranslationDirection.ROMAN_UR_TO_EN)
        self.assertIsNone(direction_for_binding("state_dump"))


class KeyboardHotkeyServiceTests(unittest.TestCase):
    def setUp(self) -> None:
        self.keyboard = FakeKeyboard()
        self.events = []
        self.bindings = build_bindings_from_preferences({})
        self.service = KeyboardHotkeyService(self.bindings, self.events.append, self.keyboard)

    def test_start_registers_and_dispatches(self) -> None:
        self.service.start()
        self.assertEqual(sorted(combo for combo, _ in self.keyboard.registered.values()), ["ctrl+shift+1", "ctrl+shift+2"])

        self.keyboard.press("ctrl+shift+2")
        self.keyboard.press("ctrl+shift+1")
        self.assertEqual(self.events, ["roman_ur_to_en", "en_to_roman_ur"])

    def test_start_twice_does_not_duplicate(self) -> None:
        self.service.start()
        self.service.start()
        self.assertEqual(len(self.keyboard.registered), 2)

    def test_failed_registration_is_skipped(self) -> None:
        self.keyboard.fail_combos.add("ctrl+shift+1")
        with self.assertLogs("urdutranslator.hotkeys", level="ERROR"):
            self.service.start()
        self.assertEqual(self.service.active_bindings, ["roman_ur_to_en"])

    def test_stop_removes_hotkeys(self) -> None:
        self.service.start()
        self.service.stop()
        self.assertEqual(self.keyboard.registered, {})
        self.assertEqual(len(self.keyboard.removed), 2)
        self.service.stop()

    def test_callback_errors_are_logged(self) -> None:
        def explode(name: str) -> None:
            raise RuntimeError(name)

        service = KeyboardHotkeyService(self.bindings, explode, self.keyboard)
        service.start()
        with self.assertLogs("urdutranslator.hotkeys", level="ERROR"):
            self.keyboard.press("ctrl+shift+1")

    def test_describe_bindings(self) -> None:
        self.assertEqual(
            list(self.service.describe_bindings()),
            ["en_to_roman_ur: Ctrl+Shift+1", "roman_ur_to_en: Ctrl+Shift+2"],
        )


if __name__ == "__main__":
    unittest.main()
