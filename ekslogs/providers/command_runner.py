"""
Thin adapter over the external tools the collector shells out to.

Adapters never call `subprocess` directly: they go through a `CommandRunner` so tests can swap in a
fake. A missing binary or a timeout is reported in the result, never raised.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence, runtime_checkable

logger = logging.getLogger(__name__)

# Tools like iptables/lvs/service live in sbin, which is not always on a non-login PATH.
_EXTRA_PATH = ("/sbin", "/usr/sbin", "/usr/local/sbin", "/bin", "/usr/bin")


@dataclass(frozen=True)
class CommandResult:
    argv: tuple
    returncode: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False
    missing: bool = False

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and not self.timed_out and not self.missing

    @property
    def command(self) -> str:
        return " ".join(self.argv)


@runtime_checkable
class CommandRunner(Protocol):
    def which(self, name: str) -> Optional[str]: ...

    def run(
        self,
        argv: Sequence[str],
        *,
        timeout: Optional[float] = None,
        merge_stderr: bool = False,
    ) -> CommandResult: ...


def _search_path() -> str:
    parts = [p for p in (os.getenv("PATH") or "").split(os.pathsep) if p]
    for extra in _EXTRA_PATH:
        if extra not in parts:
            parts.append(extra)
    return os.pathsep.join(parts)


class SubprocessRunner:
    """Run commands on the local host with a C locale, capturing text output."""

    def __init__(self) -> None:
        self._env = dict(os.environ)
        self._env["LANG"] = "C"
        self._env["LC_ALL"] = "C"
        self._env["PATH"] = _search_path()

    def which(self, name: str) -> Optional[str]:
        return shutil.which(name, path=self._env["PATH"])

    def run(
        self,
        argv: Sequence[str],
        *,
        timeout: Optional[float] = None,
        merge_stderr: bool = False,
    ) -> CommandResult:
        args = tuple(argv)
        binary = self.which(args[0])
        if binary is None:
            logger.debug("command not found: %s", args[0])
            return CommandResult(argv=args, returncode=127, stderr=f"{args[0]}: command not found", missing=True)

        try:
            proc = subprocess.run(
                [binary, *args[1:]],
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT if merge_stderr else subprocess.PIPE,
                stdin=subprocess.DEVNULL,
                env=self._env,
                timeout=timeout,
                text=True,
                errors="replace",
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            logger.debug("command timed out after %ss: %s", timeout, " ".join(args))
            partial = e.stdout if isinstance(e.stdout, str) else ""
            return CommandResult(argv=args, returncode=124, stdout=partial or "", timed_out=True)
        except OSError as e:
            return CommandResult(argv=args, returncode=126, stderr=str(e), missing=True)

        return CommandResult(
            argv=args,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr="" if merge_stderr else (proc.stderr or ""),
        )


def get_command_runner() -> CommandRunner:
    """Seam for swapping the runner (tests, remote execution)."""
    return SubprocessRunner()
