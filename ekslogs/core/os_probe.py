"""
OS family / package type detection.

Release marker files are checked in a fixed order and the first one that exists decides the
classification; content of later markers is never consulted.
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from ekslogs.core.errors import UnsupportedOSError
from ekslogs.core.host import Host
from ekslogs.core.models import Architecture, OsClassification, OsFamily, PackageType

logger = logging.getLogger(__name__)

MARKER_FILES = ("system-release", "redhat-release", "lsb-release", "debian_version")

# marker -> [(substring, family, package type)], first substring hit wins
_MARKER_RULES = {
    "system-release": [
        ("Amazon", OsFamily.AMAZON, PackageType.RPM),
        ("Red Hat", OsFamily.REDHAT, PackageType.RPM),
    ],
    "redhat-release": [
        ("Red Hat", OsFamily.REDHAT, PackageType.RPM),
    ],
    "lsb-release": [
        ("Ubuntu 14.04", OsFamily.UBUNTU14, PackageType.DEB),
    ],
    "debian_version": [
        ("8", OsFamily.DEBIAN, PackageType.DEB),
    ],
}


def normalize_architecture(raw: str) -> Architecture:
    """amd64/x86_64 -> x86_64; anything else (ARM included) -> i386."""
    value = (raw or "").strip()
    if value in ("amd64", "x86_64"):
        return Architecture.X86_64
    return Architecture.I386


def find_marker_file(host: Host) -> Optional[str]:
    for name in MARKER_FILES:
        if host.path(f"/etc/{name}").is_file():
            return name
    return None


def classify_marker(marker: str, content: str) -> Tuple[OsFamily, PackageType]:
    for needle, family, pkgtype in _MARKER_RULES.get(marker, []):
        if needle in content:
            return family, pkgtype
    raise UnsupportedOSError(f"/etc/{marker} does not describe a supported release")


def classify(host: Host) -> OsClassification:
    """
    Classify the host's OS family, package type and architecture.

    Raises:
        UnsupportedOSError: no marker file exists, or the winning marker matches no known release.
    """
    marker = find_marker_file(host)
    if marker is None:
        raise UnsupportedOSError("no release marker file found")

    content = host.path(f"/etc/{marker}").read_text(encoding="utf-8", errors="replace")
    family, pkgtype = classify_marker(marker, content)
    arch = normalize_architecture(host.uname_machine())

    logger.debug("classified host via /etc/%s: family=%s pkgtype=%s arch=%s", marker, family.value, pkgtype.value, arch.value)
    return OsClassification(family=family, package_type=pkgtype, architecture=arch, marker_file=marker)
