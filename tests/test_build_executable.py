import importlib.util
import tempfile
import unittest
import unittest.mock as mock
from pathlib import Path

from PIL import Image


_SCRIPT = Path(__file__).resolve().parents[1] / "packaging" / "build_executable.py"
_spec = importlib.util.spec_from_file_location("build_executable", _SCRIPT)
build_executable = importlib.util.module_from_spec(_spec)
_spec.loader.exec_module(build_executable)


class BuildExecutableTests(unittest.TestCase):
    def test_build_command_targets_translator_app(self) -> None:
        command = build_executable.build_command(Path("app.ico"), "onedir")
        self.assertEqual(command[1:3], ["-m", "PyInstaller"])
        self.assertIn("--noconsole", command)
        self.assertEqual(command[command.index("--name") + 1], "UrduEnglishTranslator")
        self.assertEqual(command[command.index("--icon") + 1], "app.ico")
        self.assertTrue(command[-2].endswith("translator_app.py"))
        self.assertEqual(command[-1], "--onedir")
        self.assertEqual(build_executable.build_command(Path("app.ico"), "onefile")[-1], "--onefile")

    def test_invalid_mode_is_rejected(self) -> None:
        with self.assertRaises(SystemExit):
            build_executable.build_command(Path("app.ico"), "zip")

    def test_build_requires_windows(self) -> None:
        with mock.patch.object(build_executable.sys, "platform", "linux"):
            with self.assertRaises(SystemExit) as ctx:
                build_executable.build("onedir")
        self.assertIn("Windows", str(ctx.exception))

    def test_prepare_icon_writes_ico_from_fallback_artwork(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            destination = Path(tmp) / "icon" / "app.ico"
            with mock.patch.object(build_executable, "ICON_SOURCE", Path(tmp) / "missing.png"):
                result = build_executable.prepare_icon(destination)
            self.assertEqual(result, destination)
            with Image.open(destination) as icon:
                self.assertEqual(icon.format, "ICO")
                self.assertEqual(icon.size, (256, 256))


if __name__ == "__main__":
    unittest.main()
