from __future__ import annotations

import argparse
import logging
import sys
from typing import Dict, Optional

from . import __version__
from .commands import (
    CleanCommand,
    DeployCommand,
    InitCommand,
    ListCommand,
    RemoveCommand,
    ResetCommand,
    RestoreEspCommand,
    RevertCommand,
    StatsCommand,
    UpdateCommand,
)
from .config import load_config
from .dispatch import Command, CommandCtx, run_command
from .errors import ArgumentError, Cancelled, ZnxError
from .logging_utils import configure_logging

logger = logging.getLogger(__name__)


def build_commands() -> Dict[str, Command]:
    return {
        c.command_id: c
        for c in [
            InitCommand(),
            RestoreEspCommand(),
            DeployCommand(),
            UpdateCommand(),
            RevertCommand(),
            CleanCommand(),
            ResetCommand(),
            RemoveCommand(),
            StatsCommand(),
            ListCommand(),
        ]
    }


class _Parser(argparse.ArgumentParser):
    # Usage errors are reported like every other failure (exit 1).
    def error(self, message: str):
        raise ArgumentError(message)


def build_parser() -> argparse.ArgumentParser:
    p = _Parser(prog="znx", description="Manage a multi-boot device of independently versioned OS images.")
    p.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--config", default=None, help="Path to config (yaml); defaults to $ZNX_CONFIG or /etc/znx/config.yaml")
    p.add_argument("--log", default=None, help="Path to log file")
    p.add_argument("--verbose", action="store_true", help="Also log to the console")

    sub = p.add_subparsers(dest="command", required=True, metavar="<command>")

    def device_cmd(name: str, help_text: str) -> argparse.ArgumentParser:
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("device", help="Block device, e.g. /dev/sdb")
        return sp

    sp = device_cmd("init", "Wipe DEVICE and create the boot and data partitions")
    sp.add_argument("--dry-run", action="store_true", help="Log destructive commands without running them")

    sp = device_cmd("restore-esp", "Reinstall the boot loader assets")
    sp.add_argument("--dry-run", action="store_true", help="Log destructive commands without running them")

    sp = device_cmd("deploy", "Deploy an image from a local file or URL")
    sp.add_argument("image", help="<vendor>/<release>")
    sp.add_argument("locator", help="Local image path or http(s)/ftp URL")

    for name, help_text in [
        ("update", "Delta-update an image; the old image becomes the backup"),
        ("revert", "Restore the backup image"),
        ("clean", "Delete the backup image"),
        ("reset", "Delete the image's user data"),
        ("remove", "Delete an image entirely"),
        ("stats", "Show image size, modification time and backup size"),
    ]:
        sp = device_cmd(name, help_text)
        sp.add_argument("image", help="<vendor>/<release>")

    device_cmd("list", "List deployed images")

    return p


def _error(message: str) -> None:
    sys.stderr.write(f"znx: error: {message}\n")


def main(argv: Optional[list[str]] = None) -> int:
    p = build_parser()
    try:
        args = p.parse_args(argv)
        cfg = load_config(args.config)
    except ZnxError as e:
        _error(str(e))
        return 1
    except Exception as e:
        _error(str(e))
        return 1

    try:
        configure_logging(log_path=args.log or cfg.log_path, also_console=bool(args.verbose))
    except Exception as e:
        _error(f"Unable to set up logging: {e}")
        return 1

    ctx = CommandCtx(
        cfg=cfg,
        device=args.device,
        image=getattr(args, "image", None),
        locator=getattr(args, "locator", None),
        dry_run=bool(getattr(args, "dry_run", False)),
    )

    try:
        run_command(build_commands()[args.command], ctx)
        return 0
    except ZnxError as e:
        logger.error("%s failed (%s): %s", args.command, e.kind, e)
        _error(str(e))
    except (Cancelled, KeyboardInterrupt) as e:
        logger.warning("%s interrupted: %r", args.command, e)
        _error("Interrupted")
    except Exception as e:
        logger.exception("%s failed", args.command)
        _error(str(e))
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
