from __future__ import annotations

import time
from dataclasses import dataclass
from typing import List, Optional

from ..dispatch import CommandCtx
from ..store import ImagePaths, require_deployed


@dataclass(frozen=True)
class ImageStats:
    size: int
    modified: float
    backup_size: Optional[int] = None

    def lines(self) -> List[str]:
        out = [
            f"Image size: {self.size} bytes",
            "Last modified: " + time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(self.modified)),
        ]
        if self.backup_size is not None:
            out.append(f"Backup size: {self.backup_size} bytes")
        return out


def image_stats(paths: ImagePaths) -> ImageStats:
    require_deployed(paths)
    st = paths.active.stat()
    backup_size = paths.backup.stat().st_size if paths.has_backup else None
    return ImageStats(size=st.st_size, modified=st.st_mtime, backup_size=backup_size)


class StatsCommand:
    command_id = "stats"
    needs_store = True

    def run(self, ctx: CommandCtx) -> None:
        for line in image_stats(ctx.paths).lines():
            print(line)
