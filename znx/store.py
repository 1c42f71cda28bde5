from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from .config import ACTIVE_IMAGE, BACKUP_IMAGE, USER_DATA_DIR
from .errors import InvalidImageName, NotDeployed

logger = logging.getLogger(__name__)

_SEGMENT_RE = re.compile(r"^[A-Za-z0-9._]+$")


def valid_segment(name: str) -> bool:
    # "." and ".." match the character class but would escape the store.
    return bool(_SEGMENT_RE.match(name)) and name not in {".", ".."}


@dataclass(frozen=True)
class ImageKey:
    vendor: str
    release: str

    def __post_init__(self) -> None:
        for seg in (self.vendor, self.release):
            if not valid_segment(seg):
                raise InvalidImageName(
                    f"Invalid image name '{self.vendor}/{self.release}': "
                    "vendor and release must match [A-Za-z0-9._]+"
                )

    def __str__(self) -> str:
        return f"{self.vendor}/{self.release}"

    @classmethod
    def parse(cls, name: str) -> "ImageKey":
        """Parse 'vendor/release'."""
        parts = name.split("/")
        if len(parts) != 2:
            raise InvalidImageName(f"Invalid image name '{name}': expected <vendor>/<release>")
        return cls(vendor=parts[0], release=parts[1])


@dataclass(frozen=True)
class ImagePaths:
    key: ImageKey
    store_root: Path

    @property
    def vendor_dir(self) -> Path:
        return self.store_root / self.key.vendor

    @property
    def root(self) -> Path:
        return self.vendor_dir / self.key.release

    @property
    def active(self) -> Path:
        return self.root / ACTIVE_IMAGE

    @property
    def backup(self) -> Path:
        return self.root / BACKUP_IMAGE

    @property
    def user_data(self) -> Path:
        return self.root / USER_DATA_DIR

    @property
    def is_deployed(self) -> bool:
        return self.active.is_file()

    @property
    def has_backup(self) -> bool:
        return self.backup.is_file()


def resolve(store_root: Union[str, Path], vendor: str, release: str) -> ImagePaths:
    return ImagePaths(key=ImageKey(vendor=vendor, release=release), store_root=Path(store_root))


def require_deployed(paths: ImagePaths) -> ImagePaths:
    if not paths.is_deployed:
        raise NotDeployed(f"Image '{paths.key}' is not deployed")
    return paths


def list_images(store_root: Union[str, Path]) -> List[ImageKey]:
    """Enumerate the (vendor, release) pairs present in the store.

    Vendors without releases and entries with invalid names are skipped.
    """

    root = Path(store_root)
    if not root.is_dir():
        return []

    keys: List[ImageKey] = []
    for vendor in sorted(root.iterdir(), key=lambda p: p.name):
        if not vendor.is_dir() or not valid_segment(vendor.name):
            continue
        for release in sorted(vendor.iterdir(), key=lambda p: p.name):
            if release.is_dir() and valid_segment(release.name):
                keys.append(ImageKey(vendor=vendor.name, release=release.name))
    return keys
