"""Bundle directory layout, path ownership and archiving."""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from ekslogs.core.errors import PathConflictError

logger = logging.getLogger(__name__)


@dataclass
class OutputTree:
    """
    `<bundle_dir>[/<host_id>]/system/...`, populated step by step.

    Every file (or copied directory) is claimed by exactly one step. A second step claiming the
    same path is a bug and raises `PathConflictError`. Parent directories are created on claim, so
    a step that writes nothing leaves no directory behind.
    """

    bundle_dir: str
    host_id: Optional[str] = None
    claims: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.bundle_dir = os.path.abspath(self.bundle_dir)

    @property
    def root(self) -> Path:
        base = Path(self.bundle_dir)
        return base / self.host_id if self.host_id else base

    @property
    def system(self) -> Path:
        return self.root / "system"

    def claim(self, step: str, rel_path: str) -> Path:
        """Reserve `system/<rel_path>` for `step` and return its absolute path."""
        key = rel_path.strip("/")
        owner = self.claims.get(key)
        if owner is not None and owner != step:
            raise PathConflictError(key, owner, step)
        self.claims[key] = step
        path = self.system / key
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def write_text(self, step: str, rel_path: str, body: str) -> Path:
        path = self.claim(step, rel_path)
        path.write_text(body, encoding="utf-8")
        return path

    def append_text(self, step: str, rel_path: str, body: str) -> Path:
        path = self.claim(step, rel_path)
        with path.open("a", encoding="utf-8") as f:
            f.write(body)
        return path

    def copy_in(self, step: str, source: Path, rel_path: str) -> Path:
        """Copy a file, or a directory tree with symlinks preserved, into the bundle."""
        dest = self.claim(step, rel_path)
        if source.is_dir():
            shutil.copytree(source, dest, symlinks=True, dirs_exist_ok=True)
        else:
            shutil.copy2(source, dest, follow_symlinks=True)
        return dest

    def owned_by(self, step: str) -> list:
        return sorted(k for k, v in self.claims.items() if v == step)


def cleanup_bundle(bundle_dir: str, archive_path: str) -> None:
    """Remove the bundle directory and archive left by a previous run."""
    if os.path.isdir(bundle_dir):
        shutil.rmtree(bundle_dir)
    elif os.path.exists(bundle_dir):
        os.remove(bundle_dir)
    if os.path.exists(archive_path):
        os.remove(archive_path)


def pack_bundle(bundle_dir: str, archive_path: str) -> str:
    """
    Gzip the bundle directory into `archive_path`.

    Entries are stored relative to the bundle's parent directory, e.g. `ekslogsbundle/system/...`.
    """
    bundle = os.path.abspath(bundle_dir)
    Path(archive_path).parent.mkdir(parents=True, exist_ok=True)
    try:
        with tarfile.open(archive_path, "w:gz") as tar:
            tar.add(bundle, arcname=os.path.basename(bundle))
    except OSError:
        # never leave a truncated archive behind
        if os.path.isfile(archive_path):
            os.remove(archive_path)
        raise
    logger.debug("archived %s -> %s", bundle, archive_path)
    return archive_path
