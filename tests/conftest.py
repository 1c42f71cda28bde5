from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import pytest

from znx.descriptor import DESCRIPTOR_LENGTH, DESCRIPTOR_OFFSET
from znx.lib.command import CmdResult, CommandError
from znx.session import MountSession

PATCHED_MODULES = (
    "znx.lib.block",
    "znx.lib.mount",
    "znx.lib.storage",
    "znx.lib.net",
    "znx.lib.zsync",
)

Handler = Callable[[List[str]], Union[str, CmdResult]]


class FakeRunner:
    """Stands in for run_cmd: records argv, answers per program name."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.handlers: Dict[str, Handler] = {}

    def on(self, program: str, handler: Handler) -> None:
        self.handlers[program] = handler

    def __call__(self, argv, *, check: bool = True, dry_run: bool = False, **_kwargs) -> CmdResult:
        argv = [str(a) for a in argv]
        self.calls.append(argv)
        if dry_run:
            return CmdResult(argv=argv, returncode=0, stdout="", stderr="")
        handler = self.handlers.get(argv[0])
        result = handler(argv) if handler else ""
        if isinstance(result, str):
            result = CmdResult(argv=argv, returncode=0, stdout=result, stderr="")
        if check and result.returncode != 0:
            raise CommandError(result)
        return result

    def programs(self) -> List[str]:
        return [c[0] for c in self.calls]

    def find(self, program: str) -> List[List[str]]:
        return [c for c in self.calls if c[0] == program]


@pytest.fixture
def fake_cmd(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    runner = FakeRunner()
    for mod in PATCHED_MODULES:
        monkeypatch.setattr(f"{mod}.run_cmd", runner)
    return runner


def fake_device(
    runner: FakeRunner,
    device: str,
    tags: Dict[str, Dict[str, str]],
    *,
    mounted: Optional[List[str]] = None,
) -> None:
    """Answer lsblk/blkid for DEVICE whose partitions carry TAGS."""

    def lsblk(argv: List[str]) -> str:
        if "NAME,TYPE" in argv:
            return "\n".join([f"{device} disk"] + [f"{p} part" for p in tags]) + "\n"
        return "\n".join(["" for _ in tags] + list(mounted or [])) + "\n"

    def blkid(argv: List[str]) -> CmdResult:
        tag, dev = argv[2], argv[-1]
        value = tags.get(dev, {}).get(tag)
        if value is None:
            return CmdResult(argv=argv, returncode=2, stdout="", stderr="")
        return CmdResult(argv=argv, returncode=0, stdout=value + "\n", stderr="")

    runner.on("lsblk", lsblk)
    runner.on("blkid", blkid)


def make_image(
    path: Path,
    *,
    locator: Optional[str] = None,
    fill: bytes = b"\xaa",
    size: int = DESCRIPTOR_OFFSET + DESCRIPTOR_LENGTH + 4096,
) -> bytes:
    """Write an image file; LOCATOR (if any) goes in the update descriptor region."""

    data = bytearray(fill * size)
    if locator is None:
        region = b"\x00" * DESCRIPTOR_LENGTH
    else:
        region = locator.encode("utf-8").ljust(DESCRIPTOR_LENGTH, b" ")
    data[DESCRIPTOR_OFFSET:DESCRIPTOR_OFFSET + DESCRIPTOR_LENGTH] = region
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(bytes(data))
    return bytes(data)


@pytest.fixture
def store(tmp_path: Path) -> Path:
    return tmp_path / "mnt" / "STORE"


@pytest.fixture
def loader_assets(tmp_path: Path) -> Path:
    a = tmp_path / "assets"
    (a / "themes" / "znx").mkdir(parents=True)
    (a / "themes" / "znx" / "theme.txt").write_text("title-text: \"\"\n", encoding="utf-8")
    (a / "bootx64.efi").write_bytes(b"MZ\x90\x00loader")
    (a / "grub.cfg").write_text("set timeout=5\n", encoding="utf-8")
    return a


@pytest.fixture(autouse=True)
def _no_leaked_session():
    yield
    MountSession._active = None
