from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .assets import copy_file, copy_tree

logger = logging.getLogger(__name__)

LOADER_BINARY = "bootx64.efi"
GRUB_CONFIG = "grub.cfg"
GRUB_THEMES = "themes"

# Boot partition layout:
#   efi/boot/bootx64.efi
#   boot/grub/grub.cfg
#   boot/grub/themes/
EFI_DIR = "efi/boot"
GRUB_DIR = "boot/grub"


def missing_assets(assets_dir: str) -> List[str]:
    a = Path(assets_dir)
    missing: List[str] = []
    for name in (LOADER_BINARY, GRUB_CONFIG):
        if not (a / name).is_file():
            missing.append(str(a / name))
    if not (a / GRUB_THEMES).is_dir():
        missing.append(str(a / GRUB_THEMES))
    return missing


def install_loader_assets(*, assets_dir: str, boot_root: str, dry_run: bool = False) -> None:
    """Populate a mounted boot partition with the loader binary, GRUB config and themes."""

    a = Path(assets_dir)
    b = Path(boot_root)

    copy_file(str(a / LOADER_BINARY), str(b / EFI_DIR / LOADER_BINARY), dry_run=dry_run)
    copy_file(str(a / GRUB_CONFIG), str(b / GRUB_DIR / GRUB_CONFIG), dry_run=dry_run)
    copy_tree(str(a / GRUB_THEMES), str(b / GRUB_DIR / GRUB_THEMES), dry_run=dry_run)
    logger.info("Loader assets installed from %s into %s", a, b)
