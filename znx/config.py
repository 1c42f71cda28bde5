from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import OperationFailed

DEFAULT_CONFIG_PATH = "/etc/znx/config.yaml"
CONFIG_ENV = "ZNX_CONFIG"

BOOT_LABEL = "ZNX_BOOT"
DATA_LABEL = "ZNX_DATA"

ACTIVE_IMAGE = "IMAGE.0"
BACKUP_IMAGE = "BACKUP.0"
USER_DATA_DIR = "DATA"


@dataclass(frozen=True)
class ZnxConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def store_dir(self) -> str:
        return str(self.raw.get("store_dir") or "STORE")

    @property
    def data_fs(self) -> str:
        return str(self.raw.get("data_fs") or "btrfs")

    @property
    def boot_size_mib(self) -> int:
        return int(self.raw.get("boot_size_mib") or 64)

    @property
    def loader_assets(self) -> str:
        return str(self.raw.get("loader_assets") or "/usr/share/znx")

    @property
    def download_command(self) -> List[str]:
        cmd = (self.raw.get("download") or {}).get("command")
        return [str(a) for a in cmd] if cmd else ["axel", "-a", "-n", "16"]

    @property
    def zsync_command(self) -> List[str]:
        cmd = (self.raw.get("zsync") or {}).get("command")
        return [str(a) for a in cmd] if cmd else ["zsync"]

    @property
    def log_path(self) -> str:
        return str(self.raw.get("log_path") or "/var/log/znx.log")


def load_config(path: Optional[str] = None) -> ZnxConfig:
    """Load configuration from PATH, $ZNX_CONFIG or the system default.

    Only an explicitly requested file must exist; without one the built-in
    defaults apply.
    """

    explicit = path or os.environ.get(CONFIG_ENV)
    p = Path(explicit or DEFAULT_CONFIG_PATH)
    if not p.exists():
        if explicit:
            raise OperationFailed(f"Config file not found: {p}")
        return ZnxConfig()

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise OperationFailed(f"Config file must be YAML: {p}")

    try:
        import yaml  # type: ignore
    except Exception as e:  # pragma: no cover
        raise RuntimeError("PyYAML is required to read the znx config") from e

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise OperationFailed(f"Invalid config {p}: {e}") from e
    if not isinstance(raw, dict):
        raise OperationFailed(f"Config {p} must contain a mapping/object")

    return ZnxConfig(raw=raw)
