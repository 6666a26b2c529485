from .step_10_install_system_tools import InstallSystemToolsStep
from .step_20_setup_golang import SetupGolangStep
from .step_30_setup_cosmovisor import SetupCosmovisorStep
from .step_40_install_binary import InstallBinaryStep
from .step_50_initialize_node import InitializeNodeStep
from .step_60_restore_snapshot import RestoreSnapshotStep
from .step_70_configure_systemd import ConfigureSystemdStep

__all__ = [
    "InstallSystemToolsStep",
    "SetupGolangStep",
    "SetupCosmovisorStep",
    "InstallBinaryStep",
    "InitializeNodeStep",
    "RestoreSnapshotStep",
    "ConfigureSystemdStep",
]
