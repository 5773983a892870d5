import unittest
import unittest.mock as mock

import pyperclip

import keyboard_adapter
from clipboard_bridge import ClipboardBridge, ClipboardError
from fakes import FakeKeyboard
from keyboard_adapter import ClipboardOnlyInputSimulator, KeyboardInputSimulator, create_input_simulator


class KeyboardInputSimulatorTests(unittest.TestCase):
    def test_copy_and_paste_send_chords(self) -> None:
        keyboard = FakeKeyboard()
        simulator = KeyboardInputSimulator(keyboard, modifier="ctrl")
        simulator.copy()
        simulator.paste()
        self.assertEqual(keyboard.sent, ["ctrl+c", "ctrl+v"])

    def test_command_modifier_on_macos(self) -> None:
        with mock.patch.object(keyboard_adapter.sys, "platform", "darwin"):
            simulator = KeyboardInputSimulator(FakeKeyboard())
        self.assertEqual(simulator.copy_chord, "command+c")
        self.assertEqual(simulator.paste_chord, "command+v")

    def test_send_failures_are_logged(self) -> None:
        keyboard = mock.Mock()
        keyboard.send.side_effect = ImportError("You must be root to use this library on linux.")
        simulator = KeyboardInputSimulator(keyboard, modifier="ctrl")
        with self.assertLogs("urdutranslator.input", level="WARNING"):
            simulator.copy()

    def test_factory_without_keyboard_package(self) -> None:
        with mock.patch.object(keyboard_adapter, "keyboard", None):
            self.assertIsNone(create_input_simulator())

    def test_factory_with_keyboard_package(self) -> None:
        with mock.patch.object(keyboard_adapter, "keyboard", FakeKeyboard()):
            self.assertIsInstance(create_input_simulator(), KeyboardInputSimulator)

    def test_clipboard_only_simulator_is_inert(self) -> None:
        simulator = ClipboardOnlyInputSimulator()
        simulator.copy()
        simulator.paste()


class ClipboardBridgeTests(unittest.TestCase):
    def test_read_and_write(self) -> None:
        module = mock.Mock()
        module.paste.return_value = "hello"
        bridge = ClipboardBridge(module)

        self.assertEqual(bridge.read_text(), "hello")
        bridge.write_text("salaam")
        module.copy.assert_called_once_with("salaam")

    def test_non_text_clipboard_reads_as_empty(self) -> None:
        module = mock.Mock()
        module.paste.return_value = None
        self.assertEqual(ClipboardBridge(module).read_text(), "")

    def test_pyperclip_errors_become_clipboard_errors(self) -> None:
        module = mock.Mock()
        module.paste.side_effect = pyperclip.PyperclipException("no clipboard mechanism")
        module.copy.side_effect = pyperclip.PyperclipException("no clipboard mechanism")
        bridge = ClipboardBridge(module)

        with self.assertRaises(ClipboardError) as ctx:
            bridge.read_text()
        self.assertIn("Failed to read clipboard", str(ctx.exception))
        with self.assertRaises(ClipboardError):
            bridge.write_text("x")


if __name__ == "__main__":
    unittest.main()
