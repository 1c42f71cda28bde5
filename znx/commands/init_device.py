from __future__ import annotations

import logging

from ..config import BOOT_LABEL, DATA_LABEL, ZnxConfig
from ..dispatch import CommandCtx
from ..errors import OperationFailed
from ..lib.block import find_partition, partition_path, require_unmounted
from ..lib.bootloader import install_loader_assets, missing_assets
from ..lib.command import CommandError
from ..lib.mount import mounted
from ..lib.storage import PartitionPlan, create_layout, format_boot, format_data, wipe_signatures

logger = logging.getLogger(__name__)


def _locate(device: str, label: str, index: int, *, dry_run: bool) -> str:
    # Freshly created partitions carry no filesystem yet: match on GPT name.
    if dry_run:
        return partition_path(device, index)
    lookup = find_partition(device, label, tag="PARTLABEL")
    if not lookup.found:
        raise OperationFailed(f"Partition {label} not found on {device} after partitioning")
    return lookup.path


def init_device(device: str, *, cfg: ZnxConfig, dry_run: bool = False) -> None:
    """Wipe DEVICE and lay out the boot + data partitions.

    Destructive and not transactional: a failure after the wipe leaves the
    device half-initialized; re-running init is the recovery path.
    """

    require_unmounted(device)

    missing = missing_assets(cfg.loader_assets)
    if missing:
        raise OperationFailed(f"Loader assets missing: {', '.join(missing)}")

    plan = PartitionPlan(disk=device, data_fs=cfg.data_fs, boot_size_mib=cfg.boot_size_mib)
    try:
        wipe_signatures(device, dry_run=dry_run)
        create_layout(plan, dry_run=dry_run)

        boot = _locate(device, BOOT_LABEL, 1, dry_run=dry_run)
        format_boot(boot, dry_run=dry_run)
        with mounted(boot, dry_run=dry_run) as boot_root:
            install_loader_assets(assets_dir=cfg.loader_assets, boot_root=str(boot_root), dry_run=dry_run)

        data = _locate(device, DATA_LABEL, 2, dry_run=dry_run)
        format_data(data, plan.data_fs, dry_run=dry_run)
    except (CommandError, OSError) as e:
        raise OperationFailed(
            f"Initialization of {device} failed; the device is left partially initialized: {e}"
        ) from e

    logger.info("Initialized %s (boot=%s data_fs=%s)", device, plan.boot_size_mib, plan.data_fs)


class InitCommand:
    command_id = "init"
    needs_store = False

    def run(self, ctx: CommandCtx) -> None:
        init_device(ctx.device, cfg=ctx.cfg, dry_run=ctx.dry_run)
        print(f"Successfully initialized {ctx.device}.")
