import io
import subprocess
import sys
import tempfile
import zipfile
from pathlib import Path
from unittest import mock

import pytest

from freebird_converter.installer import (
    DOWNLOAD_URL_ENV,
    INSTALL_FLAG,
    InstallError,
    add_to_user_path,
    copy_dir_all,
    ensure_ffmpeg,
    install_ffmpeg,
    main,
)


def _completed(args, code=0, stdout=b""):
    return subprocess.CompletedProcess(args, code, stdout=stdout, stderr=b"")


def _registry_run(query_code=1, query_stdout=b"", setx_code=0):
    calls = []

    def run(args, **kwargs):
        calls.append(list(args))
        if args[0] == "cmd":
            return _completed(args, query_code, query_stdout)
        return _completed(args, setx_code)

    return run, calls


def _make_zip(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, data in entries.items():
            archive.writestr(name, data)
    return buffer.getvalue()


class _FakeResponse(io.BytesIO):
    def __init__(self, data):
        super().__init__(data)
        self.headers = {"Content-Length": str(len(data))}


def test_copy_dir_all_copies_nested_tree(tmp_path):
    src = tmp_path / "src"
    (src / "bin").mkdir(parents=True)
    (src / "bin" / "ffmpeg.exe").write_bytes(b"exe")
    (src / "readme.txt").write_text("hello")
    dst = tmp_path / "dst"

    copy_dir_all(src, dst)

    assert (dst / "bin" / "ffmpeg.exe").read_bytes() == b"exe"
    assert (dst / "readme.txt").read_text() == "hello"
    assert sorted(p.name for p in dst.iterdir()) == ["bin", "readme.txt"]


def test_copy_dir_all_merges_into_existing_directory(tmp_path):
    src = tmp_path / "src"
    src.mkdir()
    (src / "new.txt").write_text("new")
    dst = tmp_path / "dst"
    dst.mkdir()
    (dst / "old.txt").write_text("old")

    copy_dir_all(src, dst)

    assert sorted(p.name for p in dst.iterdir()) == ["new.txt", "old.txt"]


def test_add_to_user_path_appends_directory():
    directory = Path("ffmpegbin")
    stdout = b"\r\nHKEY_CURRENT_USER\\Environment\r\n    PATH    REG_SZ    C:\\tools;C:\\bin\r\n\r\n"
    run, calls = _registry_run(query_code=0, query_stdout=stdout)
    with mock.patch("subprocess.run", side_effect=run):
        add_to_user_path(directory)
    assert calls[-1] == ["setx", "PATH", "C:\\tools;C:\\bin;" + str(directory)]


def test_add_to_user_path_skips_present_directory(capsys):
    directory = Path("ffmpegbin")
    stdout = f"    PATH    REG_SZ    C:\\tools;{directory}\r\n".encode()
    run, calls = _registry_run(query_code=0, query_stdout=stdout)
    with mock.patch("subprocess.run", side_effect=run):
        add_to_user_path(directory)
    assert len(calls) == 1
    assert "already present" in capsys.readouterr().out


def test_add_to_user_path_with_unreadable_registry_sets_only_directory():
    directory = Path("ffmpegbin")
    run, calls = _registry_run(query_code=1)
    with mock.patch("subprocess.run", side_effect=run):
        add_to_user_path(directory)
    assert calls[-1] == ["setx", "PATH", str(directory)]


def test_add_to_user_path_raises_when_setx_fails():
    run, _ = _registry_run(query_code=1, setx_code=1)
    with mock.patch("subprocess.run", side_effect=run):
        with pytest.raises(InstallError, match="Failed to set PATH"):
            add_to_user_path(Path("ffmpegbin"))


def test_ensure_ffmpeg_only_on_windows():
    with mock.patch.object(sys, "platform", "linux"):
        with pytest.raises(InstallError, match="only supported on Windows"):
            ensure_ffmpeg()


def test_ensure_ffmpeg_when_already_on_path(capsys):
    with mock.patch.object(sys, "platform", "win32"), mock.patch(
        "shutil.which", return_value="C:\\ffmpeg\\ffmpeg.exe"
    ), mock.patch("builtins.input") as fake_input:
        result = ensure_ffmpeg()
    assert result is None
    assert "already installed" in capsys.readouterr().out
    assert fake_input.call_count == 0


def test_ensure_ffmpeg_cancelled_by_user(capsys):
    with mock.patch.object(sys, "platform", "win32"), mock.patch(
        "shutil.which", return_value=None
    ), mock.patch("builtins.input", return_value="n"), mock.patch(
        "subprocess.Popen"
    ) as popen:
        result = ensure_ffmpeg()
    assert result is None
    assert "Installation cancelled." in capsys.readouterr().out
    assert popen.call_count == 0


def test_ensure_ffmpeg_without_local_app_data(monkeypatch):
    monkeypatch.delenv("LOCALAPPDATA", raising=False)
    with mock.patch.object(sys, "platform", "win32"), mock.patch(
        "shutil.which", return_value=None
    ), mock.patch("builtins.input", return_value="yes"):
        with pytest.raises(InstallError, match="LOCALAPPDATA"):
            ensure_ffmpeg()


def test_ensure_ffmpeg_registers_existing_install(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    bin_dir = tmp_path / "ffmpeg" / "bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "ffmpeg.exe").write_bytes(b"exe")
    run, calls = _registry_run()
    with mock.patch.object(sys, "platform", "win32"), mock.patch(
        "shutil.which", return_value=None
    ), mock.patch("builtins.input", return_value="Y"), mock.patch(
        "subprocess.run", side_effect=run
    ), mock.patch("subprocess.Popen") as popen:
        result = ensure_ffmpeg()
    assert result is None
    assert calls[-1] == ["setx", "PATH", str(bin_dir)]
    assert popen.call_count == 0


def test_ensure_ffmpeg_launches_install_window(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    with mock.patch.object(sys, "platform", "win32"), mock.patch(
        "shutil.which", return_value=None
    ), mock.patch("builtins.input", return_value="y"), mock.patch(
        "subprocess.Popen"
    ) as popen:
        result = ensure_ffmpeg()
    assert result is None
    command = popen.call_args[0][0]
    assert command[:3] == ["cmd", "/C", "start"]
    assert command[-1] == INSTALL_FLAG


def test_install_ffmpeg_downloads_and_installs(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "local"))
    monkeypatch.setenv(DOWNLOAD_URL_ENV, "https://ffmpeg.example.com/ffmpeg.zip")
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path / "tmp"))
    data = _make_zip(
        {
            "ffmpeg-release/bin/ffmpeg.exe": b"binary",
            "ffmpeg-release/doc/readme.txt": b"docs",
        }
    )
    run, calls = _registry_run()
    with mock.patch(
        "urllib.request.urlopen", return_value=_FakeResponse(data)
    ), mock.patch("subprocess.run", side_effect=run):
        result = install_ffmpeg()

    assert result is None
    install_dir = tmp_path / "local" / "ffmpeg"
    assert (install_dir / "bin" / "ffmpeg.exe").read_bytes() == b"binary"
    assert (install_dir / "doc" / "readme.txt").read_bytes() == b"docs"
    assert not (tmp_path / "tmp" / "ffmpeg_install").exists()
    assert calls[-1] == ["setx", "PATH", str(install_dir / "bin")]


def test_install_ffmpeg_picks_directory_holding_bin(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "local"))
    monkeypatch.setenv(DOWNLOAD_URL_ENV, "https://ffmpeg.example.com/ffmpeg.zip")
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path / "tmp"))
    data = _make_zip({"notes.txt": b"n", "ffmpeg-x/bin/ffmpeg.exe": b"exe"})
    run, _ = _registry_run()
    with mock.patch(
        "urllib.request.urlopen", return_value=_FakeResponse(data)
    ), mock.patch("subprocess.run", side_effect=run):
        result = install_ffmpeg()
    assert result is None
    assert (tmp_path / "local" / "ffmpeg" / "bin" / "ffmpeg.exe").read_bytes() == b"exe"


def test_install_ffmpeg_empty_archive(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path / "local"))
    monkeypatch.setenv(DOWNLOAD_URL_ENV, "https://ffmpeg.example.com/ffmpeg.zip")
    monkeypatch.setattr(tempfile, "tempdir", str(tmp_path / "tmp"))
    with mock.patch(
        "urllib.request.urlopen", return_value=_FakeResponse(_make_zip({}))
    ):
        with pytest.raises(InstallError, match="No files found after extraction"):
            install_ffmpeg()


def test_install_ffmpeg_requires_download_url(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    monkeypatch.delenv(DOWNLOAD_URL_ENV, raising=False)
    with pytest.raises(InstallError, match=DOWNLOAD_URL_ENV):
        install_ffmpeg()


def test_main_install_failure_returns_error(monkeypatch, capsys):
    monkeypatch.delenv("LOCALAPPDATA", raising=False)
    with mock.patch("builtins.input", return_value=""):
        assert main([INSTALL_FLAG]) == 1
    assert "Installation failed" in capsys.readouterr().err


def test_main_install_success(tmp_path, monkeypatch, capsys):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    bin_dir = tmp_path / "ffmpeg" / "bin"
    bin_dir.mkdir(parents=True)
    (bin_dir / "ffmpeg.exe").write_bytes(b"exe")
    run, _ = _registry_run()
    with mock.patch("subprocess.run", side_effect=run), mock.patch(
        "builtins.input", return_value=""
    ):
        assert main([INSTALL_FLAG]) == 0
    assert "Installation completed successfully." in capsys.readouterr().out


def test_main_reports_unsupported_platform():
    with mock.patch.object(sys, "platform", "linux"):
        assert main([]) == 1