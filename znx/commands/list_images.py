from __future__ import annotations

from ..dispatch import CommandCtx
from ..store import list_images


class ListCommand:
    command_id = "list"
    needs_store = True

    def run(self, ctx: CommandCtx) -> None:
        for key in list_images(ctx.store_root):
            print(key)
