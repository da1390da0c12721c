from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol, Sequence

from dateutil.relativedelta import relativedelta

from ekslogs.core.config import CollectorConfig
from ekslogs.core.host import Host
from ekslogs.core.models import OsClassification, StepResult
from ekslogs.providers.command_runner import CommandResult
from ekslogs.storage.bundle_store import OutputTree


@dataclass
class CollectionContext:
    """Everything an adapter may look at. The classification is the only cross-step input."""

    classification: OsClassification
    tree: OutputTree
    host: Host
    config: CollectorConfig
    now: Optional[datetime] = None

    def journal_since(self) -> str:
        """`--since` value for journal queries, N days back from now."""
        now = self.now or datetime.now()
        return (now - relativedelta(days=self.config.journal_window_days)).strftime("%Y-%m-%d %H:%M")


class Adapter(Protocol):
    """
    Collection step contract.

    Adapters are:
    - idempotent (safe to skip or rerun)
    - lazy about directories (nothing is created unless something is written)
    - Warning-only on missing tools or unsupported families; never Fatal (one exception:
      the runtime inventory needs a running daemon)
    """

    def __call__(self, ctx: CollectionContext) -> StepResult: ...


def run_to_file(
    ctx: CollectionContext,
    step: str,
    argv: Sequence[str],
    rel_path: str,
    warnings: List[str],
    *,
    timeout: Optional[float] = None,
    merge_stderr: bool = True,
    append: bool = False,
) -> Optional[CommandResult]:
    """
    Run a command and store its output under the bundle.

    Missing tools and timeouts are appended to `warnings` and leave nothing on disk. A non-zero
    exit still writes the output (it is usually the most useful diagnostic).
    """
    res = ctx.host.runner.run(argv, timeout=timeout, merge_stderr=merge_stderr)
    if res.missing:
        warnings.append(f"{argv[0]} not found, skipped '{res.command}'")
        return None
    if res.timed_out:
        warnings.append(f"Timed out, ignoring \"{res.command}\" output")
        return None
    body = res.stdout if merge_stderr else res.stdout + res.stderr
    if append:
        ctx.tree.append_text(step, rel_path, body)
    else:
        ctx.tree.write_text(step, rel_path, body)
    return res
