"""Mount Session: the process-wide, scoped mount of the device's data partition.

Usage:

    with termination_signals():
        with MountSession(device, store_dir=cfg.store_dir) as store_root:
            ...

Release (unmount + remove mountpoint) runs exactly once on every exit path:
normal return, ZnxError, or a termination signal turned into Cancelled.

There is no locking across processes: two znx invocations against the same
device, or concurrent update/deploy of one image, are unsupported and can
corrupt the store.
"""

from __future__ import annotations

import logging
import signal
from contextlib import contextmanager
from pathlib import Path
from typing import ClassVar, Iterator, Optional

from .config import DATA_LABEL
from .errors import Cancelled, NotInitialized
from .lib.block import find_partition
from .lib.mount import make_mountpoint, release_mountpoint, try_mount

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGHUP, signal.SIGQUIT)


def _raise_cancelled(signum, _frame) -> None:
    raise Cancelled(signum)


@contextmanager
def termination_signals() -> Iterator[None]:
    """Turn SIGTERM/SIGHUP/SIGQUIT into Cancelled for the duration of the block.

    SIGINT keeps Python's default and arrives as KeyboardInterrupt.
    """

    previous = {}
    for sig in TERMINATION_SIGNALS:
        previous[sig] = signal.signal(sig, _raise_cancelled)
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


@contextmanager
def signals_blocked() -> Iterator[None]:
    blocked = {signal.SIGINT, *TERMINATION_SIGNALS}
    old = signal.pthread_sigmask(signal.SIG_BLOCK, blocked)
    try:
        yield
    finally:
        signal.pthread_sigmask(signal.SIG_SETMASK, old)


class MountSession:
    """Owns the data-partition mount for one command."""

    _active: ClassVar[Optional["MountSession"]] = None

    def __init__(self, device: str, *, store_dir: str = "STORE", label: str = DATA_LABEL) -> None:
        self.device = device
        self.store_dir = store_dir
        self.label = label
        self.mountpoint: Optional[Path] = None
        self._released = False

    @property
    def store_root(self) -> Path:
        if self.mountpoint is None:
            raise RuntimeError("Mount session not acquired")
        return self.mountpoint / self.store_dir

    def acquire(self) -> Path:
        if MountSession._active is not None:
            raise RuntimeError("A mount session is already active in this process")

        lookup = find_partition(self.device, self.label)
        if not lookup.found:
            raise NotInitialized(f"{self.device} has no {self.label} partition; run 'znx init' first")

        # A signal arriving while mount(8) runs is delivered once the
        # mountpoint is recorded, so release() can always undo it.
        try:
            with signals_blocked():
                mp = make_mountpoint()
                if not try_mount(lookup.path, mp):
                    release_mountpoint(mp, mounted=False)
                    raise NotInitialized(f"Unable to mount {lookup.path}; is {self.device} initialized?")
                self.mountpoint = mp
                MountSession._active = self
        except BaseException:
            self.release()
            raise

        logger.info("Mounted %s (%s) at %s", lookup.path, self.label, mp)
        return self.store_root

    def release(self) -> None:
        if self._released or self.mountpoint is None:
            return
        with signals_blocked():
            self._released = True
            release_mountpoint(self.mountpoint, mounted=True)
            if MountSession._active is self:
                MountSession._active = None
        logger.info("Released mountpoint %s", self.mountpoint)

    def __enter__(self) -> Path:
        return self.acquire()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
