from __future__ import annotations

import logging
import os

from ..dispatch import CommandCtx
from ..errors import NoBackup, OperationFailed
from ..session import signals_blocked
from ..store import ImagePaths

logger = logging.getLogger(__name__)


def revert_image(paths: ImagePaths) -> None:
    """Put the backup back in the active slot. Only one step of history exists."""

    if not paths.has_backup:
        raise NoBackup(f"Image '{paths.key}' has no backup to revert to")

    try:
        with signals_blocked():
            os.replace(paths.backup, paths.active)
    except OSError as e:
        raise OperationFailed(f"Failed to revert '{paths.key}': {e}") from e
    logger.info("Reverted %s to its backup", paths.key)


class RevertCommand:
    command_id = "revert"
    needs_store = True

    def run(self, ctx: CommandCtx) -> None:
        revert_image(ctx.paths)
        print(f"Successfully reverted '{ctx.key}'.")
