from __future__ import annotations

import logging
from dataclasses import dataclass

from ..config import BOOT_LABEL, DATA_LABEL
from .command import run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartitionPlan:
    disk: str
    data_fs: str = "btrfs"
    boot_size_mib: int = 64


def wipe_signatures(disk: str, *, dry_run: bool = False) -> None:
    """Erase every filesystem/partition-table signature on DISK."""

    run_cmd(["wipefs", "--all", "--force", disk], dry_run=dry_run)
    run_cmd(["sgdisk", "--zap-all", disk], dry_run=dry_run)


def create_layout(plan: PartitionPlan, *, dry_run: bool = False) -> None:
    """Create the two-partition GPT layout.

    Layout:
    - 1: ESP (ef00), boot_size_mib, GPT name ZNX_BOOT
    - 2: Linux filesystem (8300), rest of the disk, GPT name ZNX_DATA

    The GPT names double as the role markers used to pick which partition
    gets which filesystem; partition numbers are not relied upon.
    """

    disk = plan.disk
    logger.info("Partitioning disk=%s boot=%sMiB data_fs=%s", disk, plan.boot_size_mib, plan.data_fs)

    run_cmd(["sgdisk", "--clear", disk], dry_run=dry_run)
    run_cmd(
        [
            "sgdisk",
            f"--new=1:0:+{plan.boot_size_mib}MiB",
            "--typecode=1:ef00",
            f"--change-name=1:{BOOT_LABEL}",
            disk,
        ],
        dry_run=dry_run,
    )
    run_cmd(
        [
            "sgdisk",
            "--new=2:0:0",
            "--typecode=2:8300",
            f"--change-name=2:{DATA_LABEL}",
            disk,
        ],
        dry_run=dry_run,
    )

    # Inform kernel
    run_cmd(["partprobe", disk], dry_run=dry_run)
    run_cmd(["udevadm", "settle"], check=False, dry_run=dry_run)


def format_boot(part: str, *, dry_run: bool = False) -> None:
    run_cmd(["mkfs.vfat", "-F", "32", "-n", BOOT_LABEL, part], dry_run=dry_run)


def format_data(part: str, fs: str, *, dry_run: bool = False) -> None:
    # Every mkfs spells "force" and "label" differently.
    if fs == "btrfs":
        argv = ["mkfs.btrfs", "-f", "-L", DATA_LABEL, part]
    elif fs in {"ext2", "ext3", "ext4"}:
        argv = [f"mkfs.{fs}", "-F", "-L", DATA_LABEL, part]
    elif fs == "xfs":
        argv = ["mkfs.xfs", "-f", "-L", DATA_LABEL, part]
    elif fs == "f2fs":
        argv = ["mkfs.f2fs", "-f", "-l", DATA_LABEL, part]
    else:
        argv = [f"mkfs.{fs}", "-L", DATA_LABEL, part]
    run_cmd(argv, dry_run=dry_run)
