"""
Instance identity lookup against the local metadata service.

Best-effort only: the id namespaces the bundle directory when available, and the run carries on
un-namespaced when it is not.
"""

from __future__ import annotations

from typing import Optional, Tuple

import requests

from ekslogs.core.config import DEFAULT_METADATA_URL


def resolve_host_id(url: str = DEFAULT_METADATA_URL, *, timeout: float = 3.0) -> Tuple[Optional[str], Optional[str]]:
    """
    Single bounded GET for the instance id.

    Returns:
        (instance_id, None) on success, (None, reason) otherwise.
    """
    try:
        resp = requests.get(url, timeout=timeout)
    except requests.exceptions.Timeout:
        return None, f"instance metadata request timed out after {timeout:g}s"
    except requests.exceptions.RequestException as e:
        return None, f"unable to reach instance metadata: {e.__class__.__name__}"

    if resp.status_code != 200:
        return None, f"instance metadata returned HTTP {resp.status_code}"

    instance_id = (resp.text or "").strip()
    if not instance_id:
        return None, "unable to resolve instance metadata"
    # A bare id is used as a directory name; anything path-like is rejected.
    if "/" in instance_id or instance_id in (".", ".."):
        return None, f"unexpected instance id {instance_id!r}"
    return instance_id, None
