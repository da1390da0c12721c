"""
Docker daemon evidence: inventory, per-container inspect output and daemon logs.

The inventory step is the only adapter allowed to return Fatal: without a running daemon the
remaining container data cannot be collected.
"""

from __future__ import annotations

import os
from typing import List

from ekslogs.collectors.base import CollectionContext, run_to_file
from ekslogs.core.errors import DaemonNotRunningError
from ekslogs.core.host import Host
from ekslogs.core.models import OsFamily, StepResult

DAEMON_PROCESS = "dockerd"

INVENTORY_QUERIES = (
    (("docker", "info"), "docker/docker-info.txt"),
    (("docker", "ps", "--all", "--no-trunc"), "docker/docker-ps.txt"),
    (("docker", "images"), "docker/docker-images.txt"),
    (("docker", "version"), "docker/docker-version.txt"),
)


def is_daemon_running(host: Host, process: str = DAEMON_PROCESS) -> bool:
    """
    Scan the process table for `process`.

    The scanning process's own line is excluded so a command line that merely mentions the
    daemon name (e.g. a grep) is not mistaken for the daemon.
    """
    res = host.runner.run(["ps", "-ef"])
    if not res.ok:
        return False
    own_pid = str(os.getpid())
    for line in res.stdout.splitlines()[1:]:
        fields = line.split()
        if len(fields) < 8 or fields[1] == own_pid:
            continue
        cmd = " ".join(fields[7:])
        if "grep" in fields[7]:
            continue
        if process in cmd:
            return True
    return False


def collect_docker_info(ctx: CollectionContext) -> StepResult:
    step = "docker-info"
    if not is_daemon_running(ctx.host):
        return StepResult.fatal(str(DaemonNotRunningError()))

    warnings: List[str] = []
    for argv, rel_path in INVENTORY_QUERIES:
        run_to_file(
            ctx,
            step,
            argv,
            rel_path,
            warnings,
            timeout=ctx.config.docker_query_timeout_seconds,
        )
    return StepResult.from_warnings(warnings)


def collect_containers_info(ctx: CollectionContext) -> StepResult:
    step = "containers"
    listing = ctx.host.runner.run(["docker", "ps", "-q"])
    if listing.missing:
        return StepResult.warning("docker not found, running containers not inspected")
    if not listing.ok:
        return StepResult.warning(f"unable to list running containers (exit {listing.returncode})")

    warnings: List[str] = []
    for container_id in listing.stdout.split():
        run_to_file(ctx, step, ["docker", "inspect", container_id], f"docker/container-{container_id}.txt", warnings)
    return StepResult.from_warnings(warnings)


def _journal_to_file(ctx: CollectionContext, step: str, unit: str, rel_path: str, warnings: List[str]) -> None:
    run_to_file(
        ctx,
        step,
        ["journalctl", "-u", unit, "--since", ctx.journal_since()],
        rel_path,
        warnings,
        merge_stderr=False,
    )


def collect_docker_logs(ctx: CollectionContext) -> StepResult:
    step = "docker-logs"
    family = ctx.classification.family
    has_journal = ctx.host.has_tool("journalctl")
    warnings: List[str] = []

    if family == OsFamily.AMAZON:
        if has_journal:
            _journal_to_file(ctx, step, "docker", "docker_log/docker", warnings)
        else:
            raw_log = ctx.host.path("/var/log/docker")
            if raw_log.is_file():
                ctx.tree.copy_in(step, raw_log, "docker_log/docker")
            else:
                warnings.append("journalctl not found and /var/log/docker does not exist")
    elif family in (OsFamily.REDHAT, OsFamily.DEBIAN):
        if has_journal:
            _journal_to_file(ctx, step, "docker", "docker_log/docker", warnings)
        else:
            warnings.append("journalctl not found, Docker daemon logs not collected")
    elif family == OsFamily.UBUNTU14:
        upstart_dir = ctx.host.path("/var/log/upstart")
        rotated = sorted(upstart_dir.glob("docker*")) if upstart_dir.is_dir() else []
        copied = 0
        for src in rotated:
            if src.is_file():
                ctx.tree.copy_in(step, src, f"docker_log/{src.name}")
                copied += 1
        if not copied:
            warnings.append("no Docker upstart logs found under /var/log/upstart")
    elif family == OsFamily.UNSUPPORTED:
        warnings.append("The current operating system is not supported.")
    else:  # pragma: no cover
        raise ValueError(f"unhandled OS family: {family}")

    return StepResult.from_warnings(warnings)
