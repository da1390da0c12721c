"""Operating system log files: /var/log entries and the kernel ring buffer."""

from __future__ import annotations

from ekslogs.collectors.base import CollectionContext, run_to_file
from ekslogs.core.models import StepResult

COMMON_LOG_ENTRIES = (
    "syslog",
    "messages",
    "aws-routed-eni",
    "containers",
    "pods",
    "cloud-init.log",
    "cloud-init-output.log",
    "audit",
)


def collect_common_logs(ctx: CollectionContext) -> StepResult:
    step = "common-logs"
    copied = 0
    for entry in COMMON_LOG_ENTRIES:
        src = ctx.host.path(f"/var/log/{entry}")
        if not src.exists():
            continue
        ctx.tree.copy_in(step, src, f"var_log/{entry}")
        copied += 1
    if not copied:
        return StepResult.warning("no common operating system logs found under /var/log")
    return StepResult.ok()


def collect_kernel_logs(ctx: CollectionContext) -> StepResult:
    step = "kernel-logs"
    warnings = []
    boot_log = ctx.host.path("/var/log/dmesg")
    if boot_log.is_file():
        ctx.tree.copy_in(step, boot_log, "kernel/dmesg.boot")
    run_to_file(ctx, step, ["dmesg"], "kernel/dmesg.current", warnings)
    return StepResult.from_warnings(warnings)
