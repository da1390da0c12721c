"""The host as the collector sees it: a filesystem root, a command runner and the caller's privileges."""

from __future__ import annotations

import os
import platform
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from ekslogs.providers.command_runner import CommandRunner, get_command_runner


@dataclass
class Host:
    root: Path = Path("/")
    runner: CommandRunner = field(default_factory=get_command_runner)
    # Overrides for tests; None means "ask the running system".
    euid: Optional[int] = None
    machine: Optional[str] = None

    def __post_init__(self) -> None:
        self.root = Path(self.root)

    def path(self, absolute: str) -> Path:
        """Map an absolute host path (e.g. /var/log/dmesg) under this host's root."""
        return self.root / absolute.lstrip("/")

    def has_tool(self, name: str) -> bool:
        return self.runner.which(name) is not None

    def is_root(self) -> bool:
        euid = self.euid if self.euid is not None else os.geteuid()
        return euid == 0

    def uname_machine(self) -> str:
        if self.machine is not None:
            return self.machine
        return platform.machine()
