from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

from ekslogs.collectors import (
    CollectionContext,
    check_disk_space,
    collect_common_logs,
    collect_containers_info,
    collect_docker_info,
    collect_docker_logs,
    collect_eks_logs_and_configfiles,
    collect_iptables_info,
    collect_kernel_logs,
    collect_mounts_info,
    collect_pkglist,
    collect_selinux_info,
    collect_system_services,
)
from ekslogs.core.models import StepResult


@dataclass(frozen=True)
class CollectionStep:
    name: str
    description: str
    action: Callable[[CollectionContext], StepResult]


# Order matters: packages before services, logs after mounts/selinux/iptables,
# docker inventory before the container and log steps.
BRIEF_STEPS: List[CollectionStep] = [
    CollectionStep("disk-space", "check disk space usage", check_disk_space),
    CollectionStep("common-logs", "collect common operating system logs", collect_common_logs),
    CollectionStep("kernel-logs", "collect kernel logs", collect_kernel_logs),
    CollectionStep("mounts", "get mount points and volume information", collect_mounts_info),
    CollectionStep("selinux", "check SELinux status", collect_selinux_info),
    CollectionStep("iptables", "get iptables list", collect_iptables_info),
    CollectionStep("pkglist", "detect installed packages", collect_pkglist),
    CollectionStep("services", "detect active system services list", collect_system_services),
    CollectionStep("docker-info", "gather Docker daemon information", collect_docker_info),
    CollectionStep("eks", "collect Amazon EKS container agent logs", collect_eks_logs_and_configfiles),
    CollectionStep(
        "containers", "inspect running Docker containers and gather container data", collect_containers_info
    ),
    CollectionStep("docker-logs", "collect Docker daemon logs", collect_docker_logs),
]


def brief_steps() -> List[CollectionStep]:
    return list(BRIEF_STEPS)
