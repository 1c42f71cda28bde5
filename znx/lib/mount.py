from __future__ import annotations

import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .command import CommandError, run_cmd

logger = logging.getLogger(__name__)

MOUNT_PREFIX = "znx-"


def make_mountpoint() -> Path:
    return Path(tempfile.mkdtemp(prefix=MOUNT_PREFIX))


def try_mount(dev: str, mountpoint: Path) -> bool:
    """Mount DEV at MOUNTPOINT; return False instead of raising on failure."""

    try:
        run_cmd(["mount", dev, str(mountpoint)])
    except CommandError as e:
        logger.warning("mount %s failed: %s", dev, e)
        return False
    return True


def release_mountpoint(mountpoint: Path, *, mounted: bool) -> None:
    """Unmount (if mounted) and remove a mountpoint created by make_mountpoint()."""

    if mounted:
        r = run_cmd(["umount", str(mountpoint)], check=False)
        if r.returncode != 0:
            # Lazy unmount so the directory can still be removed.
            run_cmd(["umount", "-l", str(mountpoint)], check=False)
    try:
        mountpoint.rmdir()
    except OSError as e:
        logger.warning("Could not remove mountpoint %s: %s", mountpoint, e)


@contextmanager
def mounted(dev: str, *, dry_run: bool = False) -> Iterator[Path]:
    """Mount DEV at a fresh temporary directory for the duration of the block.

    Raises CommandError if the mount fails.
    """

    mp = make_mountpoint()
    ok = False
    try:
        run_cmd(["mount", dev, str(mp)], dry_run=dry_run)
        ok = not dry_run
        logger.info("Mounted %s at %s", dev, mp)
        yield mp
    finally:
        release_mountpoint(mp, mounted=ok)
