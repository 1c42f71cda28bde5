from __future__ import annotations

import logging

from ..dispatch import CommandCtx
from ..errors import OperationFailed
from ..store import ImagePaths, require_deployed

logger = logging.getLogger(__name__)


def clean_image(paths: ImagePaths) -> bool:
    """Delete the backup image. Returns False when there was none."""

    require_deployed(paths)
    try:
        paths.backup.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise OperationFailed(f"Failed to remove the backup of '{paths.key}': {e}") from e
    logger.info("Removed backup of %s", paths.key)
    return True


class CleanCommand:
    command_id = "clean"
    needs_store = True

    def run(self, ctx: CommandCtx) -> None:
        clean_image(ctx.paths)
        print(f"Successfully cleaned '{ctx.key}'.")
