from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import List, Sequence

from ..dispatch import CommandCtx
from ..errors import AlreadyDeployed, ArgumentError, Cancelled, DeployFailed
from ..lib.command import CommandError
from ..lib.net import download, is_remote
from ..store import ImagePaths

logger = logging.getLogger(__name__)


def _created_by_deploy(paths: ImagePaths) -> List[Path]:
    """Outermost directories a deployment of PATHS will create, plus the image file."""

    for d in (paths.vendor_dir, paths.root):
        if not d.exists():
            return [d]
    created = [paths.active]
    if not paths.user_data.exists():
        created.append(paths.user_data)
    return created


def _discard(paths: ImagePaths, created: List[Path]) -> None:
    # Only what this deployment created; pre-existing siblings and data stay.
    logger.warning("Discarding partial deployment of %s (%s)", paths.key, ", ".join(map(str, created)))
    for target in created:
        try:
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            else:
                target.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error("Unable to remove %s: %s", target, e)


def deploy_image(paths: ImagePaths, source: str, *, download_command: Sequence[str]) -> None:
    """Create the image directory and fill the active slot from SOURCE.

    SOURCE is a local file (copied byte-for-byte) or an http(s)/ftp URL
    (fetched with the download tool). The fetch/copy is the cancellable
    phase: on Cancelled or KeyboardInterrupt the partial deployment is
    removed before the cancellation propagates.
    """

    if paths.is_deployed:
        raise AlreadyDeployed(f"Image '{paths.key}' is already deployed")

    remote = is_remote(source)
    if not remote and not Path(source).is_file():
        raise DeployFailed(f"Image file not found: {source}")

    created = _created_by_deploy(paths)
    try:
        paths.user_data.mkdir(parents=True, exist_ok=True)
        if remote:
            download(source, str(paths.active), command=download_command)
        else:
            logger.info("Copying %s -> %s", source, paths.active)
            shutil.copyfile(source, paths.active)
    except (Cancelled, KeyboardInterrupt):
        _discard(paths, created)
        raise
    except (CommandError, OSError) as e:
        _discard(paths, created)
        raise DeployFailed(f"Failed to deploy '{paths.key}': {e}") from e

    if not paths.is_deployed:
        _discard(paths, created)
        raise DeployFailed(f"Failed to deploy '{paths.key}': no image was written")

    logger.info("Deployed %s from %s", paths.key, source)


class DeployCommand:
    command_id = "deploy"
    needs_store = True

    def run(self, ctx: CommandCtx) -> None:
        if not ctx.locator:
            raise ArgumentError("deploy: no image path or URL specified")
        deploy_image(ctx.paths, ctx.locator, download_command=ctx.cfg.download_command)
        print(f"Successfully deployed '{ctx.key}'.")
