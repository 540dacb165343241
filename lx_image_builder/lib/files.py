from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)


def target_path(root: str | Path, rel: str) -> Path:
    return Path(root) / rel.lstrip("/")


def write_file(root: str | Path, rel: str, contents: str, *, dry_run: bool = False) -> Path:
    p = target_path(root, rel)
    if dry_run:
        logger.info("Would write %s", str(p))
        return p
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    logger.debug("Wrote %s", str(p))
    return p


def append_line_once(root: str | Path, rel: str, line: str, *, dry_run: bool = False) -> bool:
    """Append line to a file unless an identical line is already present.

    Returns True if the file was changed.
    """

    p = target_path(root, rel)
    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    if line in existing.splitlines():
        return False
    if dry_run:
        logger.info("Would append %r to %s", line, str(p))
        return True
    if existing and not existing.endswith("\n"):
        existing += "\n"
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(existing + line + "\n", encoding="utf-8")
    return True


def edit_file(
    root: str | Path,
    rel: str,
    transform: Callable[[str], str],
    *,
    dry_run: bool = False,
) -> bool:
    """Rewrite a file in place through transform. Returns True if it changed."""

    p = target_path(root, rel)
    if not p.exists():
        raise FileNotFoundError(str(p))
    before = p.read_text(encoding="utf-8")
    after = transform(before)
    if after == before:
        return False
    if dry_run:
        logger.info("Would edit %s", str(p))
        return True
    p.write_text(after, encoding="utf-8")
    return True


def replace_file(root: str | Path, src_rel: str, dst_rel: str, *, dry_run: bool = False) -> None:
    """Replace dst (file or symlink) inside root with a copy of src."""

    src = target_path(root, src_rel)
    dst = target_path(root, dst_rel)
    if dry_run:
        logger.info("Would copy %s -> %s", str(src), str(dst))
        return
    if not src.exists():
        raise FileNotFoundError(str(src))
    if dst.is_symlink() or dst.exists():
        dst.unlink()
    dst.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(src, dst)
