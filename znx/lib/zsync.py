from __future__ import annotations

import logging
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)


def delta_sync(url: str, *, seed: str, output: str, cwd: str, command: Sequence[str]) -> None:
    """Build OUTPUT from the remote .zsync control file at URL, reusing blocks of SEED.

    Raises CommandError when zsync fails; OUTPUT may then be absent or partial.
    """

    logger.info("Delta-sync %s (seed=%s) -> %s", url, seed, output)
    run_cmd([*command, "-i", seed, "-o", output, url], cwd=cwd, capture=False)
