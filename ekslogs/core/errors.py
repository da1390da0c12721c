from __future__ import annotations

from typing import Optional


class CollectorError(Exception):
    """Base class for collector errors."""


class PathConflictError(CollectorError):
    """Raised when a step tries to write a path another step already owns."""

    def __init__(self, path: str, owner: str, step: str) -> None:
        super().__init__(f"{path} is already owned by step '{owner}' (requested by '{step}')")
        self.path = path
        self.owner = owner
        self.step = step


class FatalError(CollectorError):
    """A precondition failed and the rest of the run is meaningless."""


class NotRootError(FatalError):
    def __init__(self) -> None:
        super().__init__("This script must be run as root!")


class UnsupportedOSError(FatalError):
    def __init__(self, detail: Optional[str] = None) -> None:
        msg = "Unsupported OS detected."
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(msg)


class DaemonNotRunningError(FatalError):
    def __init__(self, daemon: str = "Docker") -> None:
        super().__init__(f"The {daemon} daemon is not running.")


class CollectionAborted(FatalError):
    """Raised by the orchestrator when a step returns a Fatal result."""

    def __init__(self, step: str, reason: str) -> None:
        super().__init__(reason)
        self.step = step
        self.reason = reason
