from __future__ import annotations

import logging
from typing import Sequence
from urllib.parse import urlparse

from .command import run_cmd

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = {"http", "https", "ftp"}


def is_remote(locator: str) -> bool:
    return urlparse(locator).scheme.lower() in REMOTE_SCHEMES


def download(url: str, dest: str, *, command: Sequence[str]) -> None:
    """Fetch URL into DEST with the configured download tool.

    The tool is expected to accept `-o <dest> <url>`, as axel does.
    Retries are the tool's business.
    """

    logger.info("Downloading %s -> %s", url, dest)
    run_cmd([*command, "-o", dest, url], capture=False)
