from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence

from .files import write_file

logger = logging.getLogger(__name__)

# Units whose sandboxing directives fail under the lx brand.
SANDBOXED_UNITS = (
    "systemd-hostnamed",
    "systemd-localed",
    "systemd-timedated",
)

SANDBOX_DIRECTIVES = (
    "PrivateTmp",
    "PrivateDevices",
    "PrivateNetwork",
    "ProtectSystem",
    "ProtectHome",
    "ProtectKernelTunables",
    "ProtectControlGroups",
    "MemoryDenyWriteExecute",
    "NoNewPrivileges",
)


def render_override(directives: Sequence[str] = SANDBOX_DIRECTIVES) -> str:
    lines = ["[Service]"]
    lines += [f"{d}=no" for d in directives]
    return "\n".join(lines) + "\n"


def write_unit_overrides(
    target_root: str | Path,
    units: Sequence[str] = SANDBOXED_UNITS,
    *,
    directives: Sequence[str] = SANDBOX_DIRECTIVES,
    dry_run: bool = False,
) -> List[Path]:
    contents = render_override(directives)
    written = []
    for unit in units:
        p = write_file(
            target_root,
            f"/etc/systemd/system/{unit}.service.d/override.conf",
            contents,
            dry_run=dry_run,
        )
        written.append(p)
    logger.info("Disabled sandboxing for %s", ", ".join(units))
    return written
