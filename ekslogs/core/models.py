"""Canonical domain models for a collection run.

`OsClassification` is computed once per run and handed explicitly to every adapter.
`StepResult` is what an adapter returns; `StepRecord` is what the orchestrator keeps.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class BaseModelStrict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class BaseModelFrozen(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class OsFamily(str, Enum):
    AMAZON = "amazon"
    REDHAT = "redhat"
    DEBIAN = "debian"
    UBUNTU14 = "ubuntu14"
    UNSUPPORTED = "unsupported"


class PackageType(str, Enum):
    RPM = "rpm"
    DEB = "deb"
    UNSUPPORTED = "unsupported"


class Architecture(str, Enum):
    X86_64 = "x86_64"
    # Everything that is not amd64/x86_64 lands here, ARM included.
    I386 = "i386"


class OsClassification(BaseModelFrozen):
    family: OsFamily
    package_type: PackageType
    architecture: Architecture
    marker_file: Optional[str] = None


StepStatus = Literal["ok", "warning", "fatal"]


class StepResult(BaseModelFrozen):
    status: StepStatus = "ok"
    reasons: List[str] = Field(default_factory=list)

    @classmethod
    def ok(cls, reason: Optional[str] = None) -> "StepResult":
        return cls(status="ok", reasons=[reason] if reason else [])

    @classmethod
    def warning(cls, reason: str) -> "StepResult":
        return cls(status="warning", reasons=[reason])

    @classmethod
    def fatal(cls, reason: str) -> "StepResult":
        return cls(status="fatal", reasons=[reason])

    @classmethod
    def from_warnings(cls, warnings: List[str]) -> "StepResult":
        """Ok when nothing went wrong, otherwise a single Warning carrying every reason."""
        if not warnings:
            return cls.ok()
        return cls(status="warning", reasons=list(warnings))

    @property
    def is_fatal(self) -> bool:
        return self.status == "fatal"

    @property
    def reason(self) -> str:
        return "; ".join(self.reasons)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class StepRecord(BaseModelStrict):
    step: str
    status: StepStatus
    reasons: List[str] = Field(default_factory=list)
    started_at: datetime = Field(default_factory=_utcnow)
    finished_at: Optional[datetime] = None

    @classmethod
    def from_result(cls, step: str, result: StepResult, *, started_at: Optional[datetime] = None) -> "StepRecord":
        return cls(
            step=step,
            status=result.status,
            reasons=list(result.reasons),
            started_at=started_at or _utcnow(),
            finished_at=_utcnow(),
        )


RunMode = Literal["brief", "debug", "debug-only"]


class RunReport(BaseModelStrict):
    mode: RunMode
    exit_code: int = 0
    host_id: Optional[str] = None
    classification: Optional[OsClassification] = None
    records: List[StepRecord] = Field(default_factory=list)
    bundle_dir: Optional[str] = None
    archive_path: Optional[str] = None
    aborted_step: Optional[str] = None
    fatal_reason: Optional[str] = None

    def record(self, step: str, result: StepResult, *, started_at: Optional[datetime] = None) -> StepRecord:
        rec = StepRecord.from_result(step, result, started_at=started_at)
        self.records.append(rec)
        return rec

    def warnings(self) -> List[StepRecord]:
        return [r for r in self.records if r.status == "warning"]

    def status_of(self, step: str) -> Optional[StepStatus]:
        for r in self.records:
            if r.step == step:
                return r.status
        return None
