"""Utilities for packaging UrduEnglishTranslator as a Windows executable.

The default build mode produces an ``onedir`` distribution instead of a single
``.exe`` file. Shipping the unpacked directory makes antivirus heuristics
aimed at PyInstaller's one-file bootstrapper far less likely to trigger.
"""

from __future__ import annotations

import argparse
import shutil
import subprocess
import sys
from pathlib import Path


REPO_ROOT = Path(__file__).resolve().parents[1]
OUTPUT_DIR = REPO_ROOT / "package"
EXECUTABLE_NAME = "UrduEnglishTranslator.exe"
_BASE_NAME = EXECUTABLE_NAME.replace(".exe", "")
ICON_SOURCE = REPO_ROOT / "icon" / "app_icon.png"
ICON_CONVERTED = REPO_ROOT / "icon" / "app_icon.ico"
ICON_SIZES = (256, 128, 64, 48, 32, 24, 16)


def _check_platform() -> None:
    if sys.platform != "win32":
        raise SystemExit(
            "PyInstaller can only build a native Windows executable on Windows. "
            "Please run this script from a Windows environment."
        )


def _ensure_pyinstaller() -> None:
    try:
        import PyInstaller  # noqa: F401  # type: ignore
    except ModuleNotFoundError as exc:  # pragma: no cover - dependency check
        raise SystemExit(
            "PyInstaller is required. Install it with `pip install pyinstaller`."
        ) from exc


def prepare_icon(destination: Path = ICON_CONVERTED) -> Path:
    """Write a multi-resolution ICO file for PyInstaller."""

    try:
        from PIL import Image
    except ModuleNotFoundError as exc:  # pragma: no cover - dependency check
        raise SystemExit(
            "Pillow is required to prepare the application icon. "
            "Install it with `pip install pillow`."
        ) from exc

    from app_icon import draw_fallback_icon

    if ICON_SOURCE.exists():
        with Image.open(ICON_SOURCE) as source:
            image = source.convert("RGBA")
    else:
        image = draw_fallback_icon(ICON_SIZES[0])
    width, height = image.size
    if width != height:
        max_dim = max(width, height)
        square = Image.new("RGBA", (max_dim, max_dim), (0, 0, 0, 0))
        square.paste(image, ((max_dim - width) // 2, (max_dim - height) // 2))
        image = square

    sizes = [(size, size) for size in ICON_SIZES if size <= image.size[0]] or [image.size]
    destination.parent.mkdir(parents=True, exist_ok=True)
    image.save(destination, format="ICO", sizes=sizes)
    return destination


def build_command(icon_path: Path, mode: str) -> list[str]:
    if mode not in {"onedir", "onefile"}:
        raise SystemExit("mode must be either 'onedir' or 'onefile'.")

    command = [
        sys.executable,
        "-m",
        "PyInstaller",
        "--clean",
        "--noconfirm",
        "--noconsole",
        "--name",
        _BASE_NAME,
        "--icon",
        str(icon_path),
    ]
    if ICON_SOURCE.exists():
        command.extend(["--add-data", f"{ICON_SOURCE};icon"])
    command.append(str(REPO_ROOT / "translator_app.py"))
    command.append(f"--{mode}")
    return command


def build(mode: str = "onedir") -> Path:
    """Create an executable using PyInstaller and return its location."""

    _check_platform()
    _ensure_pyinstaller()
    command = build_command(prepare_icon(), mode)

    subprocess.run(command, check=True, cwd=REPO_ROOT)

    dist_dir = REPO_ROOT / "dist"
    OUTPUT_DIR.mkdir(exist_ok=True)
    if mode == "onefile":
        executable_path = dist_dir / EXECUTABLE_NAME
        if not executable_path.exists():
            raise SystemExit(f"PyInstaller did not produce the expected executable at {executable_path!s}.")
        result_path = OUTPUT_DIR / EXECUTABLE_NAME
        shutil.move(str(executable_path), result_path)
    else:
        dist_dir_onedir = dist_dir / _BASE_NAME
        if not (dist_dir_onedir / EXECUTABLE_NAME).exists():
            raise SystemExit(
                f"PyInstaller did not produce the expected onedir executable in {dist_dir_onedir!s}."
            )
        final_dir = OUTPUT_DIR / _BASE_NAME
        if final_dir.exists():
            shutil.rmtree(final_dir)
        shutil.copytree(dist_dir_onedir, final_dir)
        result_path = final_dir / EXECUTABLE_NAME

    shutil.rmtree(REPO_ROOT / "build", ignore_errors=True)
    shutil.rmtree(dist_dir, ignore_errors=True)
    spec_file = REPO_ROOT / f"{_BASE_NAME}.spec"
    if spec_file.exists():
        spec_file.unlink()

    return result_path


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Build UrduEnglishTranslator executables")
    parser.add_argument(
        "--mode",
        choices=("onedir", "onefile"),
        default="onedir",
        help="Distribution type: an unpacked directory (default) or a single executable.",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":  # pragma: no cover - manual execution entrypoint
    args = _parse_args()
    path = build(mode=args.mode)
    print(f"Executable created at {path}")
