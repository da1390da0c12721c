"""Plain-text rendering of a `RunReport` (deterministic, no timestamps)."""

from __future__ import annotations

from typing import List

from ekslogs.core.models import RunReport

_STATUS_LABEL = {"ok": "ok", "warning": "WARN", "fatal": "FAIL"}


def render_report(report: RunReport) -> str:
    lines: List[str] = []
    lines.append(f"Mode: {report.mode}")
    if report.classification is not None:
        c = report.classification
        lines.append(f"OS: {c.family.value} (package type: {c.package_type.value}, arch: {c.architecture.value})")
    if report.host_id:
        lines.append(f"Instance: {report.host_id}")
    lines.append("")

    width = max((len(r.step) for r in report.records), default=0)
    for rec in report.records:
        label = _STATUS_LABEL.get(rec.status, rec.status)
        reason = "; ".join(rec.reasons)
        line = f"  [{label:>4}] {rec.step.ljust(width)}"
        if reason:
            line += f"  {reason}"
        lines.append(line.rstrip())

    lines.append("")
    warnings = report.warnings()
    if report.exit_code:
        where = f" during '{report.aborted_step}'" if report.aborted_step else ""
        lines.append(f"Collection failed{where}: {report.fatal_reason}")
        if report.bundle_dir and report.aborted_step:
            lines.append(f"Partial logs were left in {report.bundle_dir} (no archive created).")
    elif report.archive_path:
        lines.append(f"Done with {len(warnings)} warning(s), archived logs to: {report.archive_path}")
    elif report.bundle_dir:
        lines.append(f"Done with {len(warnings)} warning(s), logs left in {report.bundle_dir} (no archive created).")
    else:
        lines.append(f"Done with {len(warnings)} warning(s).")
    return "\n".join(lines)

