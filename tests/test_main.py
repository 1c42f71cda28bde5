from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path

import pytest
from conftest import make_image

from znx import __version__
from znx.main import main


@pytest.fixture
def cli(monkeypatch, tmp_path):
    """Run main() against a store in tmp_path instead of a real device."""

    store = tmp_path / "mnt" / "STORE"
    sessions = []

    class FakeSession:
        def __init__(self, device, *, store_dir="STORE"):
            self.device = device
            self.released = False
            sessions.append(self)

        def __enter__(self):
            return store

        def __exit__(self, exc_type, exc, tb):
            self.released = True

    monkeypatch.setattr("znx.dispatch.require_block_device", lambda device: None)
    monkeypatch.setattr("znx.dispatch.MountSession", FakeSession)
    monkeypatch.delenv("ZNX_CONFIG", raising=False)
    monkeypatch.setattr("znx.config.DEFAULT_CONFIG_PATH", str(tmp_path / "missing.yaml"))
    log = str(tmp_path / "znx.log")

    def run(*argv: str) -> int:
        return main(["--log", log, *argv])

    run.store = store
    run.sessions = sessions
    return run


def test_version(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        main(["--version"])
    assert exc.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_unknown_command_exits_1(capsys) -> None:
    assert main(["frobnicate", "/dev/sdz"]) == 1
    assert capsys.readouterr().err.startswith("znx: error: ")


def test_missing_arguments_exit_1(capsys) -> None:
    assert main(["deploy", "/dev/sdz", "acme/os"]) == 1
    assert "znx: error:" in capsys.readouterr().err


def test_not_a_block_device(tmp_path, capsys) -> None:
    f = tmp_path / "disk.img"
    f.write_bytes(b"")
    assert main(["--log", str(tmp_path / "znx.log"), "list", str(f)]) == 1
    assert "not a block device" in capsys.readouterr().err


def test_invalid_image_name_rejected_before_mount(cli, capsys) -> None:
    assert cli("stats", "/dev/sdz", "acme/os-1") == 1
    assert "Invalid image name" in capsys.readouterr().err
    assert cli.sessions == []


def test_deploy_list_stats_remove(cli, tmp_path, capsys) -> None:
    src = tmp_path / "img.iso"
    data = make_image(src)

    assert cli("deploy", "/dev/sdz", "acme/os", str(src)) == 0
    assert "Successfully deployed 'acme/os'." in capsys.readouterr().out

    assert cli("list", "/dev/sdz") == 0
    assert capsys.readouterr().out.splitlines() == ["acme/os"]

    assert cli("stats", "/dev/sdz", "acme/os") == 0
    out = capsys.readouterr().out
    assert f"Image size: {len(data)} bytes" in out
    assert "Backup size" not in out

    assert cli("remove", "/dev/sdz", "acme/os") == 0
    capsys.readouterr()
    assert cli("list", "/dev/sdz") == 0
    assert capsys.readouterr().out == ""

    assert all(s.released for s in cli.sessions)
    assert len(cli.sessions) == 5


def test_failure_exits_1_and_releases_session(cli, tmp_path, capsys) -> None:
    src = tmp_path / "img.iso"
    make_image(src)
    assert cli("deploy", "/dev/sdz", "acme/os", str(src)) == 0
    capsys.readouterr()

    assert cli("update", "/dev/sdz", "acme/os") == 1
    assert capsys.readouterr().err.strip() == "znx: error: Image 'acme/os' carries no update information"

    assert cli("revert", "/dev/sdz", "acme/os") == 1
    assert "no backup" in capsys.readouterr().err

    assert cli("clean", "/dev/sdz", "acme/os") == 0
    assert cli("clean", "/dev/sdz", "acme/os") == 0
    assert cli("reset", "/dev/sdz", "acme/os") == 0

    assert all(s.released for s in cli.sessions)


def test_init_does_not_mount_store(cli, monkeypatch, capsys) -> None:
    calls = []
    monkeypatch.setattr("znx.commands.init_device.init_device", lambda device, **kw: calls.append((device, kw)))

    assert cli("init", "/dev/sdz", "--dry-run") == 0
    assert calls[0][0] == "/dev/sdz"
    assert calls[0][1]["dry_run"] is True
    assert cli.sessions == []
    assert "Successfully initialized /dev/sdz." in capsys.readouterr().out


def test_unreadable_config_exits_1(cli, monkeypatch, capsys) -> None:
    def load_config(path):
        raise RuntimeError("PyYAML is required to read the configuration file")

    monkeypatch.setattr("znx.main.load_config", load_config)

    assert cli("list", "/dev/sdz") == 1
    err = capsys.readouterr().err
    assert err.startswith("znx: error: ")
    assert "PyYAML is required" in err
    assert cli.sessions == []


def test_unwritable_log_exits_1(cli, monkeypatch, capsys) -> None:
    def configure_logging(**kwargs):
        raise PermissionError(13, "Permission denied", "/var/log/znx.log")

    monkeypatch.setattr("znx.main.configure_logging", configure_logging)

    assert cli("list", "/dev/sdz") == 1
    err = capsys.readouterr().err
    assert err.startswith("znx: error: Unable to set up logging")
    assert cli.sessions == []
