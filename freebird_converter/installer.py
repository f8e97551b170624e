"""Locating ffmpeg and installing it for the current user on Windows."""

from __future__ import annotations

import os
import shutil
import subprocess
import sys
import tempfile
import urllib.request
import zipfile
from pathlib import Path, PurePosixPath
from typing import Optional, Sequence, Union

from tqdm import tqdm

DOWNLOAD_URL_ENV = "FREEBIRD_FFMPEG_URL"
INSTALL_FLAG = "--install-ffmpeg"

_MODULE = "freebird_converter.installer"
_CHUNK_SIZE = 8192
_BAR_FORMAT = "{l_bar}{bar:40}| {n_fmt}/{total_fmt} [{elapsed}<{remaining}]"

PathLike = Union[str, "os.PathLike[str]"]


class InstallError(RuntimeError):
    """Raised when ffmpeg cannot be located or installed."""


def _require_windows() -> None:
    if sys.platform != "win32":
        raise InstallError("This function is only supported on Windows.")


def _install_paths() -> tuple[Path, Path, Path]:
    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data is None:
        raise InstallError("Unable to retrieve LOCALAPPDATA environment variable")
    install_dir = Path(local_app_data) / "ffmpeg"
    bin_dir = install_dir / "bin"
    return install_dir, bin_dir, bin_dir / "ffmpeg.exe"


def _report_path_added(bin_dir: Path) -> None:
    print(f"Added {bin_dir} to user PATH.")
    print("Please reopen your command prompt for PATH changes to take effect.")


def _ask(prompt: str) -> str:
    try:
        return input(prompt)
    except EOFError:
        return ""


def ensure_ffmpeg() -> None:
    """Make sure ffmpeg is reachable, offering to install it when it is not."""
    _require_windows()
    if shutil.which("ffmpeg"):
        print("ffmpeg is already installed and found in PATH.")
        return

    print("ffmpeg not found in PATH.")
    answer = _ask("Download and install ffmpeg? (Y/N): ").strip().lower()
    if answer not in ("y", "yes"):
        print("Installation cancelled.")
        return

    install_dir, bin_dir, ffmpeg_exe = _install_paths()
    if ffmpeg_exe.exists():
        print(f"ffmpeg already exists at {install_dir}, adding to PATH...")
        add_to_user_path(bin_dir)
        _report_path_added(bin_dir)
        return

    print("Starting installation in a new window...")
    print("You may close this window if you wish; the installation will continue.")
    command = [
        "cmd",
        "/C",
        "start",
        '"Installing ffmpeg"',
        sys.executable,
        "-m",
        _MODULE,
        INSTALL_FLAG,
    ]
    try:
        subprocess.Popen(command)
    except OSError as exc:
        print(f"Failed to launch installation window: {exc}", file=sys.stderr)
        print("Falling back to installation in current window...", file=sys.stderr)
        install_ffmpeg()
    else:
        print("Installation window launched successfully.")


def _download(url: str, destination: Path) -> None:
    with urllib.request.urlopen(url) as response, destination.open("wb") as out:
        total = int(response.headers.get("Content-Length") or 0)
        with tqdm(total=total, unit="B", unit_scale=True, desc="Downloading") as bar:
            for chunk in iter(lambda: response.read(_CHUNK_SIZE), b""):
                out.write(chunk)
                bar.update(len(chunk))


def _enclosed_name(name: str) -> Optional[PurePosixPath]:
    """Return the member path if it stays inside the extraction directory."""
    if "\0" in name:
        return None
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or (path.parts and path.parts[0].endswith(":")):
        return None
    parts = [part for part in path.parts if part != "."]
    if not parts or ".." in parts:
        return None
    return PurePosixPath(*parts)


def _extract(zip_path: Path, extract_dir: Path) -> None:
    with zipfile.ZipFile(zip_path) as archive:
        for info in tqdm(archive.infolist(), unit="file", desc="Extracting"):
            relative = _enclosed_name(info.filename)
            if relative is None:
                continue
            target = extract_dir.joinpath(*relative.parts)
            if info.is_dir():
                target.mkdir(parents=True, exist_ok=True)
            else:
                target.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as src, target.open("wb") as dst:
                    shutil.copyfileobj(src, dst)
            mode = info.external_attr >> 16
            if os.name == "posix" and mode:
                os.chmod(target, mode & 0o7777)


def _locate_root(extract_dir: Path) -> Path:
    entries = list(extract_dir.iterdir())
    if not entries:
        raise InstallError("No files found after extraction")
    if len(entries) == 1 and entries[0].is_dir():
        return entries[0]
    for entry in entries:
        if (entry / "bin").exists():
            return entry
    raise InstallError("Could not locate ffmpeg directory in extracted contents")


def install_ffmpeg() -> None:
    """Download, unpack and install ffmpeg under %LOCALAPPDATA%, then extend PATH."""
    install_dir, bin_dir, ffmpeg_exe = _install_paths()
    if ffmpeg_exe.exists():
        print(f"ffmpeg already exists at {install_dir}, skipping download.")
        add_to_user_path(bin_dir)
        _report_path_added(bin_dir)
        return

    url = os.environ.get(DOWNLOAD_URL_ENV)
    if not url:
        raise InstallError(
            f"Set {DOWNLOAD_URL_ENV} to the address of an ffmpeg zip archive"
        )

    print("Downloading ffmpeg, please wait...")
    temp_dir = Path(tempfile.gettempdir()) / "ffmpeg_install"
    temp_dir.mkdir(parents=True, exist_ok=True)
    zip_path = temp_dir / "ffmpeg.zip"
    _download(url, zip_path)
    print()

    print("Extracting...")
    extract_dir = temp_dir / "extract"
    extract_dir.mkdir(parents=True, exist_ok=True)
    _extract(zip_path, extract_dir)
    print()

    ffmpeg_root = _locate_root(extract_dir)

    if install_dir.exists():
        shutil.rmtree(install_dir)
    install_dir.mkdir(parents=True)
    copy_dir_all(ffmpeg_root, install_dir)

    shutil.rmtree(temp_dir, ignore_errors=True)

    print(f"ffmpeg has been installed to {install_dir}")
    add_to_user_path(bin_dir)
    _report_path_added(bin_dir)


def add_to_user_path(directory: PathLike) -> None:
    """Append ``directory`` to the current user's PATH unless it is already there."""
    directory = Path(directory)
    query = subprocess.run(
        ["cmd", "/C", "reg", "query", "HKCU\\Environment", "/v", "PATH"],
        capture_output=True,
    )

    current_path = ""
    if query.returncode == 0:
        text = query.stdout.decode("utf-8", errors="replace")
        for line in text.splitlines():
            if "PATH" in line:
                fields = line.split()
                current_path = fields[-1] if fields else ""
                break

    if any(entry and Path(entry) == directory for entry in current_path.split(";")):
        print("Directory already present in PATH, skipping.")
        return

    dir_str = str(directory)
    new_path = f"{current_path};{dir_str}" if current_path else dir_str

    result = subprocess.run(["setx", "PATH", new_path])
    if result.returncode != 0:
        raise InstallError("Failed to set PATH environment variable")


def copy_dir_all(src: PathLike, dst: PathLike) -> None:
    """Copy the contents of ``src`` into ``dst`` recursively."""
    source, target = Path(src), Path(dst)
    target.mkdir(parents=True, exist_ok=True)
    for entry in source.iterdir():
        destination = target / entry.name
        if entry.is_dir() and not entry.is_symlink():
            copy_dir_all(entry, destination)
        else:
            shutil.copy(entry, destination)


def _wait_for_key(prompt: str) -> None:
    print(prompt)
    _ask("")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Install ffmpeg when given the install flag, otherwise make sure it is present."""
    args = sys.argv[1:] if argv is None else list(argv)
    failures = (InstallError, OSError, zipfile.BadZipFile)
    if args and args[0] == INSTALL_FLAG:
        try:
            install_ffmpeg()
        except failures as exc:
            print(f"Installation failed: {exc}", file=sys.stderr)
            _wait_for_key("\nPress any key to close this window...")
            return 1
        print("\nInstallation completed successfully.")
        _wait_for_key("Press any key to close this window...")
        return 0

    try:
        ensure_ffmpeg()
    except failures as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())