from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .build_config import BuildConfig, ImageConfig
from .errors import ConfigError
from .lib import sshd
from .lib.archive import create_archive
from .lib.branding import render_motd, render_product
from .lib.checksum import verify_sha256
from .lib.chroot import chroot_cmd, reset_install_dir
from .lib.fetch import curl_download
from .lib.files import append_line_once, edit_file, replace_file, target_path, write_file
from .lib.guesttools import check_guest_tools, install_guest_tools, sync_guest_tools
from .lib.osinfo import extra_base_packages, needs_container_workarounds, parse_major_version, read_version_id
from .lib.pkg import (
    apt_autoremove,
    apt_clean,
    apt_install,
    apt_update,
    apt_upgrade,
    debootstrap_rootfs,
    dpkg_install_root,
    write_apt_pin,
    write_sources_list,
)
from .lib.systemd import write_unit_overrides

logger = logging.getLogger(__name__)

LOCALE = "en_US.UTF-8"


@dataclass(frozen=True)
class BuildCtx:
    image: ImageConfig
    cfg: BuildConfig = field(default_factory=BuildConfig)
    dry_run: bool = False
    repo_root: str = "."

    @property
    def rootfs(self) -> str:
        return self.image.install_dir

    @property
    def archive_path(self) -> Path:
        return Path(self.cfg.output_dir) / self.image.archive_name

    @property
    def download_dir(self) -> Path:
        return Path(self.repo_root) / self.cfg.download_dir

    def os_major(self) -> Optional[int]:
        version_id = read_version_id(self.rootfs)
        major = parse_major_version(version_id)
        logger.info("Detected VERSION_ID=%r (major=%s)", version_id, major)
        return major


def check_prerequisites(*, ctx: BuildCtx) -> None:
    """Check repo-side inputs before anything touches the install dir."""

    exclude = Path(ctx.repo_root) / ctx.cfg.exclude_file
    if not exclude.is_file():
        raise ConfigError(f"Archive exclude file not found: {exclude}")
    check_guest_tools(
        path=ctx.cfg.guest_tools_path,
        installer=ctx.cfg.guest_tools_installer,
        repo_root=ctx.repo_root,
    )


def step_00_prepare_install_dir(*, ctx: BuildCtx) -> None:
    reset_install_dir(ctx.rootfs, dry_run=ctx.dry_run)


def step_01_bootstrap(*, ctx: BuildCtx) -> None:
    debootstrap_rootfs(
        target_root=ctx.rootfs,
        suite=ctx.image.release,
        mirror=ctx.image.mirror,
        components=ctx.cfg.debootstrap_components,
        include=ctx.cfg.debootstrap_include,
        dry_run=ctx.dry_run,
    )


def step_02_configure_locale_time(*, ctx: BuildCtx) -> None:
    rootfs = ctx.rootfs
    replace_file(rootfs, "/usr/share/zoneinfo/UTC", "/etc/localtime", dry_run=ctx.dry_run)

    append_line_once(rootfs, "/etc/locale.gen", f"{LOCALE} UTF-8", dry_run=ctx.dry_run)
    write_file(rootfs, "/etc/default/locale", f'LANG="{LOCALE}"\n', dry_run=ctx.dry_run)
    chroot_cmd(rootfs, ["locale-gen"], dry_run=ctx.dry_run)


def step_03_configure_apt_sources(*, ctx: BuildCtx) -> None:
    write_sources_list(ctx.rootfs, mirror=ctx.image.mirror, release=ctx.image.release, dry_run=ctx.dry_run)


def step_04_upgrade_packages(*, ctx: BuildCtx) -> None:
    apt_update(ctx.rootfs, dry_run=ctx.dry_run)
    apt_upgrade(ctx.rootfs, dry_run=ctx.dry_run)


def step_05_install_extra_packages(*, ctx: BuildCtx) -> None:
    apt_install(ctx.rootfs, extra_base_packages(ctx.os_major()), dry_run=ctx.dry_run)


def step_06_container_workarounds(*, ctx: BuildCtx) -> None:
    if not needs_container_workarounds(ctx.os_major()):
        logger.info("Release predates udev/systemd sandboxing issues; no workarounds needed")
        return

    # udev cannot run against the host's cgroup layout
    write_apt_pin(ctx.rootfs, "udev", dry_run=ctx.dry_run)
    write_unit_overrides(ctx.rootfs, dry_run=ctx.dry_run)


def step_07_cleanup_packages(*, ctx: BuildCtx) -> None:
    apt_autoremove(ctx.rootfs, dry_run=ctx.dry_run)
    apt_clean(ctx.rootfs, dry_run=ctx.dry_run)


def step_08_configure_sshd(*, ctx: BuildCtx) -> None:
    if ctx.dry_run and not target_path(ctx.rootfs, sshd.SSHD_CONFIG).exists():
        logger.info("Would normalize %s", sshd.SSHD_CONFIG)
        return
    edit_file(ctx.rootfs, sshd.SSHD_CONFIG, sshd.disable_password_auth, dry_run=ctx.dry_run)
    edit_file(ctx.rootfs, sshd.SSHD_CONFIG, sshd.disable_privsep_sandbox, dry_run=ctx.dry_run)


def step_09_write_branding(*, ctx: BuildCtx) -> None:
    write_file(ctx.rootfs, "/etc/motd", render_motd(ctx.image), dry_run=ctx.dry_run)
    write_file(ctx.rootfs, "/etc/product", render_product(ctx.image), dry_run=ctx.dry_run)


def step_10_install_guest_tools(*, ctx: BuildCtx) -> None:
    tools_dir = sync_guest_tools(
        path=ctx.cfg.guest_tools_path,
        repo=ctx.cfg.guest_tools_repo,
        revision=ctx.cfg.guest_tools_revision,
        repo_root=ctx.repo_root,
        dry_run=ctx.dry_run,
    )
    install_guest_tools(
        tools_dir,
        ctx.rootfs,
        installer=ctx.cfg.guest_tools_installer,
        dry_run=ctx.dry_run,
    )


def step_11_install_signed_package(*, ctx: BuildCtx) -> None:
    package = curl_download(ctx.cfg.signed_package_url, ctx.download_dir, dry_run=ctx.dry_run)
    listing = curl_download(ctx.cfg.signed_checksum_url, ctx.download_dir, dry_run=ctx.dry_run)

    if ctx.dry_run:
        logger.info("Would verify %s against %s", package.name, listing.name)
    else:
        verify_sha256(package, listing)

    dpkg_install_root(ctx.rootfs, str(package), dry_run=ctx.dry_run)


def step_12_create_archive(*, ctx: BuildCtx) -> None:
    create_archive(
        source_dir=ctx.rootfs,
        archive_path=ctx.archive_path,
        exclude_file=Path(ctx.repo_root) / ctx.cfg.exclude_file,
        dry_run=ctx.dry_run,
    )


PREPARE_STEPS = [
    step_00_prepare_install_dir,
    step_01_bootstrap,
]

# Run with proc and /dev/pts mounted inside the chroot.
CHROOT_STEPS = [
    step_02_configure_locale_time,
    step_03_configure_apt_sources,
    step_04_upgrade_packages,
    step_05_install_extra_packages,
    step_06_container_workarounds,
    step_07_cleanup_packages,
    step_08_configure_sshd,
    step_09_write_branding,
    step_10_install_guest_tools,
    step_11_install_signed_package,
]

FINAL_STEPS = [
    step_12_create_archive,
]
