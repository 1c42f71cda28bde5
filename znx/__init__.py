"""znx: multi-boot appliance manager.

Manages a removable device carrying several independently versioned,
bootable OS images:
- Label-based partition discovery (ZNX_BOOT / ZNX_DATA)
- A (vendor, release) addressed image store on the data partition
- Deploy, delta-update and single-generation rollback
- Guaranteed unmount on every exit path
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
