"""In-band update descriptor.

Image builders embed the delta-sync source locator as text in a fixed
512-byte region of the image, starting at byte 33651. This module only reads
it; an empty or undecodable region means the image does not support update.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

DESCRIPTOR_OFFSET = 33651
DESCRIPTOR_LENGTH = 512


def read_update_descriptor(image: Union[str, Path]) -> Optional[str]:
    """Return the locator embedded in IMAGE, or None when there is none.

    Files too short to hold the region, non-UTF-8 content and padding-only
    regions all yield None.
    """

    try:
        with open(image, "rb") as f:
            f.seek(DESCRIPTOR_OFFSET)
            raw = f.read(DESCRIPTOR_LENGTH)
    except OSError as e:
        logger.warning("Unable to read update descriptor from %s: %s", image, e)
        return None

    if len(raw) < DESCRIPTOR_LENGTH:
        return None

    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError:
        return None

    locator = text.strip(" \t\r\n\x00")
    if not locator or not locator.isprintable():
        return None
    return locator
