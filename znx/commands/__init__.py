from .clean import CleanCommand
from .deploy import DeployCommand
from .init_device import InitCommand
from .list_images import ListCommand
from .remove import RemoveCommand
from .reset import ResetCommand
from .restore_esp import RestoreEspCommand
from .revert import RevertCommand
from .stats import StatsCommand
from .update import UpdateCommand

__all__ = [
    "CleanCommand",
    "DeployCommand",
    "InitCommand",
    "ListCommand",
    "RemoveCommand",
    "ResetCommand",
    "RestoreEspCommand",
    "RevertCommand",
    "StatsCommand",
    "UpdateCommand",
]
