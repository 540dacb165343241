from __future__ import annotations

import logging
import re
import shlex
from pathlib import Path
from typing import Dict, Optional

logger = logging.getLogger(__name__)

_MAJOR_RE = re.compile(r"^(\d+)")


def read_os_release(target_root: str | Path) -> Dict[str, str]:
    """Parse <root>/etc/os-release (or usr/lib/os-release). Missing file -> {}."""

    root = Path(target_root)
    for rel in ("etc/os-release", "usr/lib/os-release"):
        p = root / rel
        try:
            text = p.read_text(encoding="utf-8")
        except OSError:
            continue
        data: Dict[str, str] = {}
        for line in text.splitlines():
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, value = line.partition("=")
            try:
                parts = shlex.split(value)
            except ValueError:
                parts = [value]
            data[key.strip()] = parts[0] if parts else ""
        return data
    return {}


def read_version_id(target_root: str | Path) -> str:
    return read_os_release(target_root).get("VERSION_ID", "")


def parse_major_version(version_id: str | None) -> Optional[int]:
    """Return the leading integer of VERSION_ID, or None if it has none."""

    m = _MAJOR_RE.match((version_id or "").strip())
    if not m:
        return None
    return int(m.group(1))


def is_at_least(major: Optional[int], minimum: int) -> bool:
    # An unknown release is assumed to be a current one.
    if major is None:
        return True
    return major >= minimum


def extra_base_packages(major: Optional[int]) -> list[str]:
    """Packages providing add-apt-repository for the detected release.

    Debian releases before 9 still ship the Python 2 flavour separately.
    """

    packages = ["software-properties-common"]
    if not is_at_least(major, 9):
        packages.append("python-software-properties")
    return packages


def needs_container_workarounds(major: Optional[int]) -> bool:
    """systemd sandboxing and udev from Debian 8 on break inside lx zones."""

    return is_at_least(major, 8)
