from __future__ import annotations

import logging
from pathlib import Path

from ..errors import CommandError
from .command import run_cmd

logger = logging.getLogger(__name__)


def create_archive(
    *,
    source_dir: str,
    archive_path: str | Path,
    exclude_file: str | Path | None = None,
    dry_run: bool = False,
) -> Path:
    """Write source_dir as a gzip tarball rooted at '.'.

    A failed tar run never leaves a partial archive behind.
    """

    out = Path(archive_path)
    argv = ["tar", "-czf", str(out)]
    if exclude_file is not None:
        if not dry_run and not Path(exclude_file).exists():
            raise FileNotFoundError(str(exclude_file))
        argv.append(f"--exclude-from={exclude_file}")
    argv += ["-C", source_dir, "."]

    if not dry_run:
        out.parent.mkdir(parents=True, exist_ok=True)
    try:
        run_cmd(argv, dry_run=dry_run)
    except CommandError:
        if out.exists():
            logger.warning("Removing incomplete archive %s", str(out))
            out.unlink()
        raise

    logger.info("Archive written: %s", str(out))
    return out
