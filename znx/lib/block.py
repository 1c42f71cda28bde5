from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from typing import List, Optional

from ..errors import DeviceBusy, NotBlockDevice
from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartitionLookup:
    """Result of a label lookup: found (path set) or not found (path None)."""

    label: str
    path: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.path is not None


def partition_path(disk: str, n: int) -> str:
    # nvme/mmcblk/loop devices use p suffix
    if disk.endswith(tuple("0123456789")):
        return f"{disk}p{n}"
    return f"{disk}{n}"


def is_block_device(path: str) -> bool:
    try:
        return stat.S_ISBLK(os.stat(path).st_mode)
    except OSError:
        return False


def require_block_device(device: str) -> None:
    if not is_block_device(device):
        raise NotBlockDevice(f"{device} is not a block device")


def list_partitions(device: str) -> List[str]:
    """Return the partition device paths of DEVICE, in table order."""

    r = run_cmd(["lsblk", "-lnpo", "NAME,TYPE", device])
    parts: List[str] = []
    for line in r.stdout.splitlines():
        fields = line.split()
        if len(fields) == 2 and fields[1] == "part":
            parts.append(fields[0])
    return parts


def get_tag(dev: str, tag: str) -> str:
    """Return a blkid tag (LABEL, PARTLABEL, TYPE, ...) or '' when unset."""

    r = run_cmd(["blkid", "-s", tag, "-o", "value", dev], check=False)
    return (r.stdout or "").strip()


def find_partition(device: str, label: str, *, tag: str = "LABEL") -> PartitionLookup:
    """Enumerate DEVICE's partitions and return the one declaring LABEL.

    Matching is exact on the queried tag; partition order is irrelevant.
    """

    for part in list_partitions(device):
        if get_tag(part, tag) == label:
            logger.info("Found %s=%s at %s", tag, label, part)
            return PartitionLookup(label=label, path=part)
    logger.info("No partition with %s=%s on %s", tag, label, device)
    return PartitionLookup(label=label)


def mountpoints(device: str) -> List[str]:
    """Mountpoints of DEVICE and any of its partitions."""

    r = run_cmd(["lsblk", "-lnpo", "MOUNTPOINT", device])
    return [ln.strip() for ln in r.stdout.splitlines() if ln.strip()]


def require_unmounted(device: str) -> None:
    mounted = mountpoints(device)
    if mounted:
        raise DeviceBusy(f"{device} is mounted at: {', '.join(mounted)}")
