"""Collection orchestrator.

`RunReport` is the single source of truth for a run: every step, including the privilege check,
OS classification, identity lookup, debug toggle and archive, leaves exactly one record in it.

Abort semantics: a Fatal result stops the run where it happens. Steps already executed keep
their output on disk, but no archive is produced and the debug toggle is not applied.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from ekslogs.actions.docker_debug import enable_docker_debug
from ekslogs.collectors.base import CollectionContext
from ekslogs.core.config import CollectorConfig, load_collector_config
from ekslogs.core.errors import CollectionAborted, FatalError, NotRootError
from ekslogs.core.host import Host
from ekslogs.core.models import OsClassification, RunMode, RunReport, StepResult
from ekslogs.core.os_probe import classify
from ekslogs.pipeline.steps import CollectionStep, brief_steps
from ekslogs.providers.metadata_provider import resolve_host_id
from ekslogs.storage.bundle_store import OutputTree, cleanup_bundle, pack_bundle

logger = logging.getLogger(__name__)

RUN_MODES = ("brief", "debug", "debug-only")

HostIdResolver = Callable[..., Tuple[Optional[str], Optional[str]]]


def _log_result(description: str, result: StepResult) -> None:
    if result.status == "ok":
        logger.info("Trying to %s... ok", description)
    elif result.status == "warning":
        for reason in result.reasons:
            logger.warning("Trying to %s... Warning: %s", description, reason)
    else:
        logger.error("Trying to %s... failed: %s", description, result.reason)


def run_brief(ctx: CollectionContext, report: RunReport, steps: Optional[List[CollectionStep]] = None) -> None:
    """
    Run the brief pipeline in order, recording every result.

    Raises:
        CollectionAborted: a step returned Fatal; later steps are not attempted.
    """
    for step in steps if steps is not None else brief_steps():
        started = datetime.now(timezone.utc)
        try:
            result = step.action(ctx)
        except OSError as e:
            # A copy or write that fails part way leaves a partial but useful bundle.
            result = StepResult.warning(f"{e.__class__.__name__}: {e}")
        report.record(step.name, result, started_at=started)
        _log_result(step.description, result)
        if result.is_fatal:
            raise CollectionAborted(step.name, result.reason)


def _check_privileges(host: Host, report: RunReport) -> None:
    if not host.is_root():
        err = NotRootError()
        report.record("check-root", StepResult.fatal(str(err)))
        raise err
    report.record("check-root", StepResult.ok())


def _classify(host: Host, report: RunReport) -> OsClassification:
    try:
        classification = classify(host)
    except FatalError as e:
        report.record("classify-os", StepResult.fatal(str(e)))
        raise
    report.classification = classification
    report.record(
        "classify-os",
        StepResult.ok(
            f"{classification.family.value} ({classification.package_type.value}, "
            f"{classification.architecture.value})"
        ),
    )
    return classification


def _resolve_identity(config: CollectorConfig, report: RunReport, resolver: HostIdResolver) -> OutputTree:
    """Look up the instance id and lay out the output tree under it (unscoped when unknown)."""
    host_id, reason = resolver(config.metadata_url, timeout=config.metadata_timeout_seconds)
    report.host_id = host_id
    tree = OutputTree(config.bundle_dir, host_id=host_id)
    report.bundle_dir = str(tree.root)

    if not host_id:
        result = StepResult.warning(reason or "unable to resolve instance metadata")
    else:
        try:
            tree.write_text("resolve-instance-id", "instance-id.txt", f"{host_id}\n")
            result = StepResult.ok(host_id)
        except OSError as e:
            result = StepResult.warning(f"unable to write instance-id.txt: {e.__class__.__name__}: {e}")
    report.record("resolve-instance-id", result)
    _log_result("resolve instance-id", result)
    return tree


def _apply_debug_toggle(classification: OsClassification, host: Host, report: RunReport) -> None:
    try:
        result = enable_docker_debug(classification, host)
    except OSError as e:
        result = StepResult.warning(f"unable to update Docker options: {e.__class__.__name__}: {e}")
    report.record("docker-debug", result)
    _log_result("enable debug mode for the Docker daemon", result)


def _archive(config: CollectorConfig, report: RunReport) -> None:
    try:
        archive = pack_bundle(config.bundle_dir, config.archive_path)
    except OSError as e:
        result = StepResult.warning(
            f"unable to create {config.archive_path} ({e.__class__.__name__}: {e}); "
            f"logs can still be viewed in {config.bundle_dir}"
        )
    else:
        report.archive_path = archive
        result = StepResult.ok(archive)
    report.record("archive", result)
    _log_result("archive gathered log information", result)


def run_collection(
    mode: RunMode = "brief",
    *,
    config: Optional[CollectorConfig] = None,
    host: Optional[Host] = None,
    resolver: HostIdResolver = resolve_host_id,
    now: Optional[datetime] = None,
) -> RunReport:
    """
    Run one collection in `mode` and return its report.

    Fatal conditions do not raise: they set `exit_code=1`, `fatal_reason` and (for a pipeline
    step) `aborted_step` on the returned report.
    """
    if mode not in RUN_MODES:
        raise ValueError(f"unknown mode: {mode!r}")
    config = config or load_collector_config()
    host = host or Host(root=Path(config.host_root))
    report = RunReport(mode=mode)

    try:
        _check_privileges(host, report)
        classification = _classify(host, report)

        if mode == "debug-only":
            _apply_debug_toggle(classification, host, report)
            return report

        cleanup_bundle(config.bundle_dir, config.archive_path)
        tree = _resolve_identity(config, report, resolver)

        ctx = CollectionContext(classification=classification, tree=tree, host=host, config=config, now=now)
        run_brief(ctx, report)

        if mode == "debug":
            _apply_debug_toggle(classification, host, report)

        _archive(config, report)
    except CollectionAborted as e:
        report.exit_code = 1
        report.aborted_step = e.step
        report.fatal_reason = e.reason
    except FatalError as e:
        report.exit_code = 1
        report.fatal_reason = str(e)

    return report
