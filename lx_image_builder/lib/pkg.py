from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from .chroot import chroot_cmd
from .command import run_cmd
from .files import write_file

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}

SECURITY_MIRROR = "http://security.debian.org/"


def debootstrap_rootfs(
    *,
    target_root: str,
    suite: str,
    mirror: str,
    components: Sequence[str] = ("main",),
    include: Sequence[str] = (),
    dry_run: bool = False,
) -> None:
    argv = ["debootstrap", f"--components={','.join(components)}"]
    if include:
        argv.append(f"--include={','.join(include)}")
    argv += [suite, target_root, mirror]
    run_cmd(argv, dry_run=dry_run)


def apt_update(target_root: str, *, dry_run: bool = False) -> None:
    chroot_cmd(target_root, ["apt-get", "update"], env=APT_ENV, dry_run=dry_run)


def apt_upgrade(target_root: str, *, dry_run: bool = False) -> None:
    chroot_cmd(target_root, ["apt-get", "-y", "upgrade"], env=APT_ENV, dry_run=dry_run)


def apt_install(target_root: str, packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    chroot_cmd(target_root, ["apt-get", "install", "-y", *packages], env=APT_ENV, dry_run=dry_run)


def apt_autoremove(target_root: str, *, dry_run: bool = False) -> None:
    chroot_cmd(target_root, ["apt-get", "-y", "autoremove"], env=APT_ENV, dry_run=dry_run)


def apt_clean(target_root: str, *, dry_run: bool = False) -> None:
    chroot_cmd(target_root, ["apt-get", "clean"], env=APT_ENV, dry_run=dry_run)


def dpkg_install_root(target_root: str, package_path: str, *, dry_run: bool = False) -> None:
    """Install a local .deb into target_root using dpkg's --root mode."""

    run_cmd(["dpkg", f"--root={target_root}", "-i", package_path], dry_run=dry_run)


def render_sources_list(*, mirror: str, release: str) -> str:
    lines = [
        f"deb {mirror} {release} main",
        f"deb-src {mirror} {release} main",
        f"deb {mirror} {release}-updates main",
        f"deb-src {mirror} {release}-updates main",
        f"deb {SECURITY_MIRROR} {release}/updates main",
        f"deb-src {SECURITY_MIRROR} {release}/updates main",
    ]
    return "\n".join(lines) + "\n"


def write_sources_list(target_root: str, *, mirror: str, release: str, dry_run: bool = False) -> None:
    write_file(
        target_root,
        "/etc/apt/sources.list",
        render_sources_list(mirror=mirror, release=release),
        dry_run=dry_run,
    )
    logger.info("Configured apt sources for %s (%s)", release, mirror)


def write_apt_pin(target_root: str, package: str, *, priority: int = -1, dry_run: bool = False) -> Path:
    """Pin a package so apt will never install it (priority < 0)."""

    contents = f"Package: {package}\nPin: release *\nPin-Priority: {priority}\n"
    return write_file(target_root, f"/etc/apt/preferences.d/{package}", contents, dry_run=dry_run)
