"""
Docker daemon debug toggle.

Mutates /etc/sysconfig/docker and restarts the daemon, so it is only ever run after collection
(or on its own in debug-only mode). Re-running it is a no-op once the flag is present.
"""

from __future__ import annotations

import logging
import re

from ekslogs.core.host import Host
from ekslogs.core.models import OsClassification, OsFamily, StepResult

logger = logging.getLogger(__name__)

DOCKER_OPTIONS_FILE = "/etc/sysconfig/docker"
DEBUG_OPTIONS_LINE = 'OPTIONS="-D $OPTIONS"'

_DEBUG_ENABLED_RE = re.compile(r'^\s*OPTIONS="-D', re.MULTILINE)


def is_debug_enabled(options: str) -> bool:
    return bool(_DEBUG_ENABLED_RE.search(options or ""))


def enable_docker_debug(classification: OsClassification, host: Host) -> StepResult:
    if classification.family != OsFamily.AMAZON:
        return StepResult.warning("The current operating system is not supported.")

    options_file = host.path(DOCKER_OPTIONS_FILE)
    if not options_file.is_file():
        return StepResult.warning(f"{DOCKER_OPTIONS_FILE} not found, debug mode not enabled")

    current = options_file.read_text(encoding="utf-8", errors="replace")
    if is_debug_enabled(current):
        return StepResult.ok("Debug mode is already enabled.")

    prefix = "" if not current or current.endswith("\n") else "\n"
    with options_file.open("a", encoding="utf-8") as f:
        f.write(f"{prefix}{DEBUG_OPTIONS_LINE}\n")

    logger.info("Trying to restart Docker daemon to enable debug mode...")
    res = host.runner.run(["service", "docker", "restart"], merge_stderr=True)
    if not res.ok:
        detail = "service command not found" if res.missing else (res.stdout.strip() or f"exit {res.returncode}")
        return StepResult.warning(f"debug flag added but Docker restart failed: {detail}")
    return StepResult.ok("Debug mode enabled.")
