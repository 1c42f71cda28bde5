from __future__ import annotations

import logging
import shutil

from ..dispatch import CommandCtx
from ..errors import ResetFailed
from ..store import ImagePaths, require_deployed

logger = logging.getLogger(__name__)


def reset_image(paths: ImagePaths) -> None:
    """Delete everything under the image's user-data directory.

    Not atomic: an error midway leaves some user data deleted.
    """

    require_deployed(paths)
    try:
        paths.user_data.mkdir(exist_ok=True)
        for child in paths.user_data.iterdir():
            if child.is_dir() and not child.is_symlink():
                shutil.rmtree(child)
            else:
                child.unlink()
    except OSError as e:
        raise ResetFailed(f"Failed to reset '{paths.key}': {e}") from e
    logger.info("Reset user data of %s", paths.key)


class ResetCommand:
    command_id = "reset"
    needs_store = True

    def run(self, ctx: CommandCtx) -> None:
        reset_image(ctx.paths)
        print(f"Successfully reset '{ctx.key}'.")
