from __future__ import annotations

import logging
import shutil

from ..dispatch import CommandCtx
from ..errors import NotDeployed, OperationFailed
from ..store import ImagePaths

logger = logging.getLogger(__name__)


def remove_image(paths: ImagePaths) -> None:
    """Delete the image directory (active, backup, user data) and prune an empty vendor."""

    if not paths.root.is_dir():
        raise NotDeployed(f"Image '{paths.key}' is not deployed")

    try:
        shutil.rmtree(paths.root)
        if not any(paths.vendor_dir.iterdir()):
            paths.vendor_dir.rmdir()
    except OSError as e:
        raise OperationFailed(f"Failed to remove '{paths.key}': {e}") from e
    logger.info("Removed %s", paths.key)


class RemoveCommand:
    command_id = "remove"
    needs_store = True

    def run(self, ctx: CommandCtx) -> None:
        remove_image(ctx.paths)
        print(f"Successfully removed '{ctx.key}'.")
