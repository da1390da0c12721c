"""Cluster agent (kubelet / kube-proxy) configuration and logs."""

from __future__ import annotations

from typing import List

from ekslogs.collectors.base import CollectionContext, run_to_file
from ekslogs.core.models import OsFamily, StepResult

# source on the host -> name inside system/eks/, copied verbatim
EKS_CONFIG_FILES = (
    ("/var/lib/kubelet/kubeconfig", "kubeconfig"),
    ("/etc/systemd/system/kube-proxy.service", "kube-proxy.service"),
    ("/etc/systemd/system/kubelet.service", "kubelet.service"),
)

EKS_JOURNAL_UNITS = ("kubelet", "kubeproxy")


def collect_eks_logs_and_configfiles(ctx: CollectionContext) -> StepResult:
    step = "eks"
    if ctx.classification.family != OsFamily.AMAZON:
        return StepResult.warning("The current operating system is not supported.")

    warnings: List[str] = []
    if ctx.host.has_tool("journalctl"):
        since = ctx.journal_since()
        for unit in EKS_JOURNAL_UNITS:
            run_to_file(ctx, step, ["journalctl", "-u", unit, "--since", since], f"eks/{unit}", warnings, merge_stderr=False)

    for source, name in EKS_CONFIG_FILES:
        src = ctx.host.path(source)
        if not src.exists():
            warnings.append(f"{source} not found")
            continue
        ctx.tree.copy_in(step, src, f"eks/{name}")

    return StepResult.from_warnings(warnings)
