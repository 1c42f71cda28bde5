from __future__ import annotations

import logging

from ..config import BOOT_LABEL, DATA_LABEL, ZnxConfig
from ..dispatch import CommandCtx
from ..errors import NotInitialized, OperationFailed
from ..lib.block import find_partition, require_unmounted
from ..lib.bootloader import install_loader_assets, missing_assets
from ..lib.command import CommandError
from ..lib.mount import mounted

logger = logging.getLogger(__name__)


def restore_esp(device: str, *, cfg: ZnxConfig, dry_run: bool = False) -> None:
    """Re-populate the boot partition's loader assets; images are untouched."""

    require_unmounted(device)

    missing = missing_assets(cfg.loader_assets)
    if missing:
        raise OperationFailed(f"Loader assets missing: {', '.join(missing)}")

    lookups = {label: find_partition(device, label) for label in (DATA_LABEL, BOOT_LABEL)}
    for label, lookup in lookups.items():
        if not lookup.found:
            raise NotInitialized(f"{device} has no {label} partition; run 'znx init' first")

    boot = lookups[BOOT_LABEL].path
    try:
        with mounted(boot, dry_run=dry_run) as boot_root:
            install_loader_assets(assets_dir=cfg.loader_assets, boot_root=str(boot_root), dry_run=dry_run)
    except CommandError as e:
        raise NotInitialized(f"Unable to mount boot partition {boot}: {e}") from e
    except OSError as e:
        raise OperationFailed(f"Unable to restore loader assets on {boot}: {e}") from e

    logger.info("Restored ESP on %s", device)


class RestoreEspCommand:
    command_id = "restore-esp"
    needs_store = False

    def run(self, ctx: CommandCtx) -> None:
        restore_esp(ctx.device, cfg=ctx.cfg, dry_run=ctx.dry_run)
        print(f"Successfully restored the ESP of {ctx.device}.")
