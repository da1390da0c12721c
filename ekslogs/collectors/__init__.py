"""
Capability adapters (one per external data source).

Adapters should:
- take a `CollectionContext` and return a `StepResult`
- only write under paths they claim on the output tree
- degrade to a Warning on missing tools or unsupported families instead of raising
"""

from ekslogs.collectors.base import CollectionContext
from ekslogs.collectors.docker import collect_containers_info, collect_docker_info, collect_docker_logs
from ekslogs.collectors.eks import collect_eks_logs_and_configfiles
from ekslogs.collectors.system_logs import collect_common_logs, collect_kernel_logs
from ekslogs.collectors.system_state import (
    check_disk_space,
    collect_iptables_info,
    collect_mounts_info,
    collect_pkglist,
    collect_selinux_info,
    collect_system_services,
)

__all__ = [
    "CollectionContext",
    "check_disk_space",
    "collect_common_logs",
    "collect_kernel_logs",
    "collect_mounts_info",
    "collect_selinux_info",
    "collect_iptables_info",
    "collect_pkglist",
    "collect_system_services",
    "collect_docker_info",
    "collect_eks_logs_and_configfiles",
    "collect_containers_info",
    "collect_docker_logs",
]
