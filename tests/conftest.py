"""
Pytest config.

Collectors shell out through a `CommandRunner` and read host files through `Host.path()`, so every
test runs against a `FakeCommandRunner` and a fake filesystem rooted under `tmp_path`.
"""

from __future__ import annotations

import sys
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import pytest


def _ensure_repo_root_on_syspath() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str not in sys.path:
        sys.path.insert(0, repo_root_str)


_ensure_repo_root_on_syspath()

from ekslogs.core.config import CollectorConfig  # noqa: E402
from ekslogs.providers.command_runner import CommandResult  # noqa: E402

DEFAULT_TOOLS = (
    "df",
    "dmesg",
    "docker",
    "dpkg",
    "getenforce",
    "initctl",
    "iptables",
    "journalctl",
    "lvs",
    "mount",
    "netstat",
    "ps",
    "pvs",
    "rpm",
    "service",
    "systemctl",
    "top",
    "vgs",
)

PS_EF_WITH_DOCKERD = (
    "UID        PID  PPID  C STIME TTY          TIME CMD\n"
    "root         1     0  0 10:00 ?        00:00:02 /usr/lib/systemd/systemd --switched-root\n"
    "root       812     1  1 10:00 ?        00:01:10 /usr/bin/dockerd -H fd:// --containerd=/run/containerd.sock\n"
    "root      4242  4100  0 10:05 pts/0    00:00:00 grep dockerd\n"
)

DF_KP_HEALTHY = (
    "Filesystem     1024-blocks    Used Available Capacity Mounted on\n"
    "/dev/nvme0n1p1    20959212 4192000  16767212      20% /\n"
    "tmpfs              1988060       0   1988060       0% /dev/shm\n"
)

DEFAULT_OUTPUTS = {
    "ps -ef": PS_EF_WITH_DOCKERD,
    "df -kP": DF_KP_HEALTHY,
    "docker ps -q": "3f4e5d6c7b8a\n9a8b7c6d5e4f\n",
    "getenforce": "Enforcing\n",
    "initctl list": "docker start/running, process 812\ncron start/running, process 700\n",
}


class FakeCommandRunner:
    """
    Records every command; returns canned output.

    Commands without a canned output echo themselves back, which keeps output files non-empty.
    """

    def __init__(
        self,
        tools: Optional[Iterable[str]] = None,
        outputs: Optional[Dict[str, str]] = None,
        timeouts: Iterable[str] = (),
        returncodes: Optional[Dict[str, int]] = None,
    ) -> None:
        self.tools = set(DEFAULT_TOOLS if tools is None else tools)
        self.outputs = dict(DEFAULT_OUTPUTS)
        self.outputs.update(outputs or {})
        self.timeouts = set(timeouts)
        self.returncodes = dict(returncodes or {})
        self.calls: List[str] = []
        self.timeouts_seen: Dict[str, Optional[float]] = {}

    def which(self, name: str) -> Optional[str]:
        return f"/usr/bin/{name}" if name in self.tools else None

    def run(self, argv: Sequence[str], *, timeout: Optional[float] = None, merge_stderr: bool = False) -> CommandResult:
        args = tuple(argv)
        cmd = " ".join(args)
        self.calls.append(cmd)
        self.timeouts_seen[cmd] = timeout
        if args[0] not in self.tools:
            return CommandResult(argv=args, returncode=127, stderr=f"{args[0]}: command not found", missing=True)
        if cmd in self.timeouts:
            return CommandResult(argv=args, returncode=124, timed_out=True)
        return CommandResult(
            argv=args,
            returncode=self.returncodes.get(cmd, 0),
            stdout=self.outputs.get(cmd, f"{cmd}\n"),
        )

    def count(self, cmd: str) -> int:
        return self.calls.count(cmd)

    def started_with(self, prefix: str) -> List[str]:
        return [c for c in self.calls if c.startswith(prefix)]


RELEASES = {
    "amazon": ("system-release", "Amazon Linux release 2 (Karoo)\n"),
    "redhat": ("system-release", "Red Hat Enterprise Linux Server release 7.9 (Maipo)\n"),
    "debian": ("debian_version", "8.11\n"),
    "ubuntu14": ("lsb-release", 'DISTRIB_ID=Ubuntu\nDISTRIB_DESCRIPTION="Ubuntu 14.04.6 LTS"\n'),
}


def write_host_file(root: Path, absolute: str, body: str = "data\n") -> Path:
    path = root / absolute.lstrip("/")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(body, encoding="utf-8")
    return path


@pytest.fixture
def make_runner():
    def _make(**kwargs) -> FakeCommandRunner:
        return FakeCommandRunner(**kwargs)

    return _make


@pytest.fixture
def make_host(tmp_path: Path):
    """Build a `Host` rooted at tmp_path/host with an optional release marker and extra files."""
    from ekslogs.core.host import Host

    def _make(
        release: Optional[str] = "amazon",
        *,
        files: Optional[Dict[str, str]] = None,
        runner: Optional[FakeCommandRunner] = None,
        euid: int = 0,
        machine: str = "x86_64",
        **runner_kwargs,
    ) -> Host:
        root = tmp_path / "host"
        root.mkdir(exist_ok=True)
        if release is not None:
            marker, content = RELEASES[release]
            write_host_file(root, f"/etc/{marker}", content)
        for path, body in (files or {}).items():
            write_host_file(root, path, body)
        return Host(root=root, runner=runner or FakeCommandRunner(**runner_kwargs), euid=euid, machine=machine)

    return _make


@pytest.fixture
def collector_config(tmp_path: Path) -> CollectorConfig:
    out = tmp_path / "out"
    out.mkdir()
    return CollectorConfig(
        output_dir=str(out),
        bundle_name="ekslogsbundle",
        metadata_url="http://169.254.169.254/latest/meta-data/instance-id",
        metadata_timeout_seconds=3.0,
        docker_query_timeout_seconds=75.0,
        disk_usage_threshold_percent=70,
        journal_window_days=3,
        host_root=str(tmp_path / "host"),
        log_level="INFO",
    )


@pytest.fixture
def make_ctx(make_host, collector_config: CollectorConfig):
    """Build a `CollectionContext` for a single adapter call."""
    from ekslogs.collectors.base import CollectionContext
    from ekslogs.core.models import Architecture, OsClassification, OsFamily, PackageType
    from ekslogs.storage.bundle_store import OutputTree

    pkgtypes = {
        "amazon": "rpm",
        "redhat": "rpm",
        "debian": "deb",
        "ubuntu14": "deb",
        "unsupported": "unsupported",
    }

    def _make(family: str = "amazon", *, host=None, package_type: Optional[str] = None, config=None, **host_kwargs):
        if host is None:
            host = make_host(family if family in RELEASES else None, **host_kwargs)
        classification = OsClassification(
            family=OsFamily(family),
            package_type=PackageType(package_type or pkgtypes[family]),
            architecture=Architecture.X86_64,
        )
        cfg = config or collector_config
        tree = OutputTree(cfg.bundle_dir)
        return CollectionContext(classification=classification, tree=tree, host=host, config=cfg)

    return _make


@pytest.fixture
def config_with(collector_config: CollectorConfig):
    def _with(**changes) -> CollectorConfig:
        return replace(collector_config, **changes)

    return _with
