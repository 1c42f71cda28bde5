from __future__ import annotations


class ZnxError(Exception):
    """Base for every failure reported to the user.

    Any ZnxError aborts the whole invocation with exit code 1.
    """

    kind = "OperationFailed"


class ArgumentError(ZnxError):
    kind = "ArgumentError"


class NotBlockDevice(ZnxError):
    kind = "NotBlockDevice"


class DeviceBusy(ZnxError):
    kind = "DeviceBusy"


class NotInitialized(ZnxError):
    kind = "NotInitialized"


class InvalidImageName(ZnxError):
    kind = "InvalidImageName"


class NotDeployed(ZnxError):
    kind = "NotDeployed"


class AlreadyDeployed(ZnxError):
    kind = "AlreadyDeployed"


class DeployFailed(ZnxError):
    kind = "DeployFailed"


class NoUpdateInfo(ZnxError):
    kind = "NoUpdateInfo"


class UpdateFailed(ZnxError):
    kind = "UpdateFailed"


class NoBackup(ZnxError):
    kind = "NoBackup"


class ResetFailed(ZnxError):
    kind = "ResetFailed"


class OperationFailed(ZnxError):
    kind = "OperationFailed"


class Cancelled(Exception):
    """Raised from a termination-signal handler.

    Not a ZnxError: cancellation must travel past the operation's own
    error translation so compensating cleanup can run.
    """

    def __init__(self, signum: int | None = None) -> None:
        self.signum = signum
        super().__init__(f"Interrupted by signal {signum}" if signum is not None else "Interrupted")
