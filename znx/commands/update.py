from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Sequence

from ..config import ACTIVE_IMAGE, BACKUP_IMAGE
from ..descriptor import read_update_descriptor
from ..dispatch import CommandCtx
from ..errors import Cancelled, NoUpdateInfo, UpdateFailed
from ..lib.command import CommandError
from ..lib.zsync import delta_sync
from ..session import signals_blocked
from ..store import ImagePaths, require_deployed

logger = logging.getLogger(__name__)

NEW_IMAGE = f"{ACTIVE_IMAGE}.new"
PRIOR_BACKUP = f"{BACKUP_IMAGE}.old"


def _remove_partials(new: Path) -> None:
    # zsync writes <output>.part while transferring.
    for p in (new, new.with_name(new.name + ".part"), new.with_name(new.name + ".zs-old")):
        try:
            p.unlink()
        except FileNotFoundError:
            pass


def _rotate(paths: ImagePaths, new: Path) -> None:
    """active -> backup, new -> active; restores the previous pair on failure."""

    prior = paths.root / PRIOR_BACKUP
    with signals_blocked():
        moved_prior = moved_active = False
        try:
            if paths.has_backup:
                os.replace(paths.backup, prior)
                moved_prior = True
            os.replace(paths.active, paths.backup)
            moved_active = True
            os.replace(new, paths.active)
        except OSError as e:
            try:
                if moved_active:
                    os.replace(paths.backup, paths.active)
                    moved_active = False
                if moved_prior:
                    os.replace(prior, paths.backup)
            except OSError as undo_error:
                # Leave every file where it is; nothing may be overwritten now.
                logger.error("Undoing update of %s failed: %s", paths.key, undo_error)
                raise UpdateFailed(
                    f"Unable to install the updated image of '{paths.key}': {e}; "
                    f"restoring it also failed ({undo_error}). The previous image is "
                    f"{paths.backup if moved_active else paths.active}"
                    + (f", the previous backup is {prior}" if moved_prior else "")
                ) from e
            _remove_partials(new)
            raise UpdateFailed(f"Unable to install the updated image of '{paths.key}': {e}") from e
        if moved_prior:
            prior.unlink()


def update_image(paths: ImagePaths, *, zsync_command: Sequence[str]) -> str:
    """Delta-sync the active image against the locator it embeds.

    On success the old active image becomes the backup. On any failure the
    active and backup files are left exactly as they were.

    Returns the locator used.
    """

    require_deployed(paths)

    locator = read_update_descriptor(paths.active)
    if locator is None:
        raise NoUpdateInfo(f"Image '{paths.key}' carries no update information")

    new = paths.root / NEW_IMAGE
    _remove_partials(new)
    try:
        delta_sync(locator, seed=str(paths.active), output=str(new), cwd=str(paths.root), command=zsync_command)
    except CommandError as e:
        _remove_partials(new)
        raise UpdateFailed(f"Failed to update '{paths.key}': {e}") from e
    except (Cancelled, KeyboardInterrupt):
        _remove_partials(new)
        raise

    if not new.is_file():
        _remove_partials(new)
        raise UpdateFailed(f"Failed to update '{paths.key}': delta-sync produced no image")

    _rotate(paths, new)
    logger.info("Updated %s from %s", paths.key, locator)
    return locator


class UpdateCommand:
    command_id = "update"
    needs_store = True

    def run(self, ctx: CommandCtx) -> None:
        update_image(ctx.paths, zsync_command=ctx.cfg.zsync_command)
        print(f"Successfully updated '{ctx.key}'.")
