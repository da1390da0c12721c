"""
Point-in-time system state: disk usage, mounts, SELinux, firewall, packages and services.
"""

from __future__ import annotations

from typing import List, Tuple

from ekslogs.collectors.base import CollectionContext, run_to_file
from ekslogs.core.models import OsFamily, PackageType, StepResult


def parse_df_usage(output: str) -> List[Tuple[str, int]]:
    """
    Parse `df -kP` output into (filesystem, used percent) pairs.

    Lines without a numeric capacity column (pseudo filesystems report "-") are skipped.
    """
    rows: List[Tuple[str, int]] = []
    for line in (output or "").splitlines()[1:]:
        fields = line.split()
        if len(fields) < 6:
            continue
        capacity = fields[4].rstrip("%")
        if not capacity.isdigit():
            continue
        rows.append((fields[0], int(capacity)))
    return rows


def check_disk_space(ctx: CollectionContext) -> StepResult:
    """Warn about every filesystem strictly above the usage threshold. Never blocks collection."""
    res = ctx.host.runner.run(["df", "-kP"])
    if res.missing or res.timed_out:
        return StepResult.warning("unable to determine disk usage (df unavailable)")

    threshold = ctx.config.disk_usage_threshold_percent
    warnings = []
    for filesystem, percent in parse_df_usage(res.stdout):
        if percent > threshold:
            warnings.append(
                f"{filesystem} is {percent}% full, please ensure adequate disk space "
                "to collect and store the log files."
            )
    return StepResult.from_warnings(warnings)


def collect_mounts_info(ctx: CollectionContext) -> StepResult:
    step = "mounts"
    warnings: List[str] = []
    if run_to_file(ctx, step, ["mount"], "mounts.txt", warnings) is not None:
        ctx.tree.append_text(step, "mounts.txt", "\n")
    run_to_file(ctx, step, ["df", "-h"], "mounts.txt", warnings, append=True)

    if ctx.host.has_tool("lvs"):
        for tool in ("lvs", "pvs", "vgs"):
            run_to_file(ctx, step, [tool], f"{tool}.txt", warnings)
    return StepResult.from_warnings(warnings)


def collect_selinux_info(ctx: CollectionContext) -> StepResult:
    if ctx.classification.package_type != PackageType.RPM or not ctx.host.has_tool("getenforce"):
        return StepResult.warning("SELinux not installed")

    res = ctx.host.runner.run(["getenforce"])
    enforced = res.stdout.strip() if res.ok else ""
    if not enforced:
        return StepResult.warning("SELinux not installed")

    ctx.tree.write_text("selinux", "selinux.txt", f"SELinux mode:\n    {enforced}\n")
    return StepResult.ok(f"SELinux mode: {enforced}")


def collect_iptables_info(ctx: CollectionContext) -> StepResult:
    step = "iptables"
    if not ctx.host.has_tool("iptables"):
        return StepResult.warning("iptables not found, firewall rules not collected")
    warnings: List[str] = []
    run_to_file(ctx, step, ["iptables", "-nvL", "-t", "filter"], "iptables-filter.txt", warnings)
    run_to_file(ctx, step, ["iptables", "-nvL", "-t", "nat"], "iptables-nat.txt", warnings)
    return StepResult.from_warnings(warnings)


def collect_pkglist(ctx: CollectionContext) -> StepResult:
    step = "pkglist"
    pkgtype = ctx.classification.package_type
    if pkgtype == PackageType.RPM:
        argv = ["rpm", "-qa"]
    elif pkgtype == PackageType.DEB:
        argv = ["dpkg", "--list"]
    else:
        return StepResult.warning("Unknown package type.")

    warnings: List[str] = []
    run_to_file(ctx, step, argv, "pkglist.txt", warnings)
    return StepResult.from_warnings(warnings)


def _collect_upstart_jobs(ctx: CollectionContext, step: str, warnings: List[str]) -> None:
    """List upstart jobs, then dump each job's configuration, then the sysv service status."""
    listing = ctx.host.runner.run(["initctl", "list"])
    if listing.missing:
        warnings.append("initctl not found, upstart jobs not collected")
    else:
        ctx.tree.write_text(step, "services.txt", "")
        for line in listing.stdout.splitlines():
            fields = line.split()
            if not fields:
                continue
            run_to_file(ctx, step, ["initctl", "show-config", fields[0]], "services.txt", warnings, append=True)

    ctx.tree.append_text(step, "services.txt", "\n\n\n\n")
    run_to_file(ctx, step, ["service", "--status-all"], "services.txt", warnings, append=True)


def collect_system_services(ctx: CollectionContext) -> StepResult:
    step = "services"
    warnings: List[str] = []
    family = ctx.classification.family

    if family in (OsFamily.AMAZON, OsFamily.REDHAT, OsFamily.DEBIAN):
        run_to_file(ctx, step, ["systemctl", "list-units"], "services.txt", warnings)
    elif family == OsFamily.UBUNTU14:
        _collect_upstart_jobs(ctx, step, warnings)
    elif family == OsFamily.UNSUPPORTED:
        warnings.append("Unable to determine active services.")
    else:  # pragma: no cover - new families must be wired explicitly
        raise ValueError(f"unhandled OS family: {family}")

    # Process and socket snapshots are family independent.
    run_to_file(ctx, step, ["top", "-b", "-n", "1"], "top.txt", warnings)
    run_to_file(ctx, step, ["ps", "fauxwww"], "ps.txt", warnings)
    run_to_file(ctx, step, ["netstat", "-plant"], "netstat.txt", warnings)
    return StepResult.from_warnings(warnings)
