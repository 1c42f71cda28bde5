from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional, Protocol

from .config import ZnxConfig
from .errors import ArgumentError
from .lib.block import require_block_device
from .session import MountSession, termination_signals
from .store import ImageKey, ImagePaths, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CommandCtx:
    cfg: ZnxConfig
    device: Optional[str] = None
    image: Optional[str] = None
    locator: Optional[str] = None
    dry_run: bool = False
    store_root: Optional[Path] = None

    @property
    def key(self) -> ImageKey:
        if not self.image:
            raise ArgumentError("No image specified")
        return ImageKey.parse(self.image)

    @property
    def paths(self) -> ImagePaths:
        if self.store_root is None:
            raise RuntimeError("Store is not mounted")
        key = self.key
        return resolve(self.store_root, key.vendor, key.release)


class Command(Protocol):
    """A single CLI command."""

    command_id: str
    needs_store: bool

    def run(self, ctx: CommandCtx) -> None:
        ...


def run_command(cmd: Command, ctx: CommandCtx) -> None:
    """Run CMD, mounting the store around it when the command needs one.

    The image name is validated before anything touches the device. The
    mount session is released once, whichever way cmd.run() exits.
    """

    if not ctx.device:
        raise ArgumentError(f"{cmd.command_id}: no device specified")
    if ctx.image is not None:
        ImageKey.parse(ctx.image)

    require_block_device(ctx.device)

    with termination_signals():
        if not cmd.needs_store:
            logger.info("Running %s on %s", cmd.command_id, ctx.device)
            cmd.run(ctx)
            return

        with MountSession(ctx.device, store_dir=ctx.cfg.store_dir) as store_root:
            logger.info("Running %s on %s (store=%s)", cmd.command_id, ctx.device, store_root)
            cmd.run(replace(ctx, store_root=store_root))
