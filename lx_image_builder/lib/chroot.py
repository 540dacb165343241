from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path
from typing import Iterator, List, Mapping, Sequence

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)

MOUNTS_FILE = "/proc/mounts"

# Unmount order matters: dev/pts is bound inside the tree proc lives in.
PSEUDO_MOUNTS = ("dev/pts", "proc")


def chroot_cmd(
    target_root: str | Path,
    argv: Sequence[str],
    *,
    env: Mapping[str, str] | None = None,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command inside target root."""

    return run_cmd(["chroot", str(target_root), *argv], env=env, dry_run=dry_run)


def _unescape_mount_field(field: str) -> str:
    # /proc/mounts octal-escapes whitespace and backslashes.
    for esc, ch in (("\\040", " "), ("\\011", "\t"), ("\\012", "\n"), ("\\134", "\\")):
        field = field.replace(esc, ch)
    return field


def find_chroot_mounts(target_root: str | Path, *, mounts_file: str = MOUNTS_FILE) -> List[str]:
    """Return mount points from the host mount table that live under target_root.

    The kernel records resolved paths, so target_root is resolved the same way.
    """

    root = os.path.realpath(str(target_root)).rstrip("/")
    p = Path(mounts_file)
    if not p.exists():
        return []

    found: List[str] = []
    for line in p.read_text(encoding="utf-8").splitlines():
        fields = line.split()
        if len(fields) < 2:
            continue
        mnt = _unescape_mount_field(fields[1])
        if mnt == root or mnt.startswith(root + "/"):
            found.append(mnt)
    return found


def umount_stale_pseudo_mounts(
    target_root: str | Path,
    *,
    mounts_file: str = MOUNTS_FILE,
    dry_run: bool = False,
) -> List[str]:
    """Unmount dev/pts and proc left behind in target_root by a previous run."""

    root = os.path.realpath(str(target_root)).rstrip("/")
    mounted = set(find_chroot_mounts(root, mounts_file=mounts_file))
    released: List[str] = []
    for rel in PSEUDO_MOUNTS:
        mnt = f"{root}/{rel}"
        if mnt in mounted:
            logger.info("Releasing stale mount %s", mnt)
            run_cmd(["umount", mnt], dry_run=dry_run)
            released.append(mnt)
    return released


def reset_install_dir(
    target_root: str | Path,
    *,
    mounts_file: str = MOUNTS_FILE,
    dry_run: bool = False,
) -> None:
    """Bring target_root to an empty directory, releasing leftover mounts first."""

    root = Path(target_root)
    if root.exists():
        umount_stale_pseudo_mounts(root, mounts_file=mounts_file, dry_run=dry_run)
        run_cmd(["rm", "-rf", str(root)], dry_run=dry_run)

    if dry_run:
        logger.info("Would create %s", str(root))
        return
    root.mkdir(parents=True, exist_ok=True)


@contextlib.contextmanager
def mounted_pseudo_fs(target_root: str | Path, *, dry_run: bool = False) -> Iterator[Path]:
    """Mount proc and /dev/pts into target_root for the duration of the block.

    Both mounts are released on every exit path, including errors raised by
    the block or by the second mount.
    """

    root = Path(target_root)
    chroot_cmd(root, ["mount", "-t", "proc", "proc", "/proc"], dry_run=dry_run)
    try:
        pts = root / "dev/pts"
        if not dry_run:
            pts.mkdir(parents=True, exist_ok=True)
        run_cmd(["mount", "--bind", "/dev/pts", str(pts)], dry_run=dry_run)
        try:
            yield root
        finally:
            run_cmd(["umount", str(pts)], dry_run=dry_run)
    finally:
        run_cmd(["umount", str(root / "proc")], dry_run=dry_run)
