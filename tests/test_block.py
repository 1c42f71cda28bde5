from __future__ import annotations

import pytest
from conftest import fake_device

from znx.errors import DeviceBusy, NotBlockDevice
from znx.lib.block import (
    find_partition,
    list_partitions,
    partition_path,
    require_block_device,
    require_unmounted,
)

TAGS = {
    "/dev/sdz1": {"LABEL": "ZNX_BOOT", "PARTLABEL": "ZNX_BOOT"},
    "/dev/sdz2": {"LABEL": "ZNX_DATA", "PARTLABEL": "ZNX_DATA"},
}


@pytest.mark.parametrize(
    "disk,n,expected",
    [("/dev/sdb", 1, "/dev/sdb1"), ("/dev/nvme0n1", 2, "/dev/nvme0n1p2"), ("/dev/mmcblk0", 1, "/dev/mmcblk0p1")],
)
def test_partition_path(disk: str, n: int, expected: str) -> None:
    assert partition_path(disk, n) == expected


def test_list_partitions_skips_disk(fake_cmd) -> None:
    fake_device(fake_cmd, "/dev/sdz", TAGS)
    assert list_partitions("/dev/sdz") == ["/dev/sdz1", "/dev/sdz2"]


def test_find_partition_by_label_not_by_order(fake_cmd) -> None:
    swapped = {"/dev/sdz1": {"LABEL": "ZNX_DATA"}, "/dev/sdz2": {"LABEL": "ZNX_BOOT"}}
    fake_device(fake_cmd, "/dev/sdz", swapped)

    lookup = find_partition("/dev/sdz", "ZNX_DATA")
    assert lookup.found
    assert lookup.path == "/dev/sdz1"


def test_find_partition_exact_match(fake_cmd) -> None:
    fake_device(fake_cmd, "/dev/sdz", {"/dev/sdz1": {"LABEL": "ZNX_DATA_OLD"}})
    lookup = find_partition("/dev/sdz", "ZNX_DATA")
    assert not lookup.found
    assert lookup.path is None


def test_find_partition_by_partlabel(fake_cmd) -> None:
    fake_device(fake_cmd, "/dev/sdz", {"/dev/sdz1": {"PARTLABEL": "ZNX_BOOT"}})
    assert not find_partition("/dev/sdz", "ZNX_BOOT").found
    assert find_partition("/dev/sdz", "ZNX_BOOT", tag="PARTLABEL").path == "/dev/sdz1"


def test_require_unmounted(fake_cmd) -> None:
    fake_device(fake_cmd, "/dev/sdz", TAGS)
    require_unmounted("/dev/sdz")

    fake_device(fake_cmd, "/dev/sdz", TAGS, mounted=["/media/usb"])
    with pytest.raises(DeviceBusy):
        require_unmounted("/dev/sdz")


def test_regular_file_is_not_a_block_device(tmp_path) -> None:
    f = tmp_path / "disk.img"
    f.write_bytes(b"")
    with pytest.raises(NotBlockDevice):
        require_block_device(str(f))
    with pytest.raises(NotBlockDevice):
        require_block_device(str(tmp_path / "missing"))
