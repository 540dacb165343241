from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import ConfigError

DEFAULT_DOCS_URL = "https://docs.joyent.com/images/container-native-linux"

DEFAULT_INCLUDE_PACKAGES = [
    "apt-transport-https",
    "ca-certificates",
    "curl",
    "dbus",
    "gnupg",
    "iproute2",
    "iputils-ping",
    "less",
    "locales",
    "lsb-release",
    "man-db",
    "net-tools",
    "openssh-server",
    "rsync",
    "sudo",
    "vim-tiny",
]

DEFAULT_GUEST_TOOLS_REPO = "https://github.com/joyent/sdc-vmtools-lx-brand.git"
DEFAULT_SIGNED_PACKAGE_URL = "https://download.joyent.com/pub/lx-brand/debian/lx-brand-tools_all.deb"
DEFAULT_SIGNED_CHECKSUM_URL = "https://download.joyent.com/pub/lx-brand/debian/SHA256SUMS"


def today_stamp(today: Optional[datetime.date] = None) -> str:
    return (today or datetime.date.today()).strftime("%Y%m%d")


@dataclass(frozen=True)
class ImageConfig:
    """Per-invocation image parameters, fixed once the CLI has been parsed."""

    release: str
    install_dir: str
    mirror: str
    image_name: str
    display_name: str
    description: str
    docs_url: str = DEFAULT_DOCS_URL
    build_date: str = field(default_factory=today_stamp)

    @property
    def archive_name(self) -> str:
        return f"{self.image_name}-{self.build_date}.tar.gz"


# Allowed keys per section and the YAML type each value must have.
_SCHEMA: Dict[str, Dict[str, type]] = {
    "debootstrap": {"components": list, "include": list},
    "guest_tools": {"path": str, "repo": str, "revision": str, "installer": str},
    "signed_package": {"url": str, "checksum_url": str},
    "archive": {"exclude_file": str, "output_dir": str},
    "paths": {"download_dir": str},
}


def validate_config(raw: Dict[str, Any]) -> None:
    """Raise ConfigError unless raw matches the build config layout."""

    if not isinstance(raw, dict):
        raise ConfigError("build config must contain a mapping/object")

    for name, section in raw.items():
        keys = _SCHEMA.get(name)
        if keys is None:
            raise ConfigError(f"Unknown build config section: {name}")
        if section is None:
            continue
        if not isinstance(section, dict):
            raise ConfigError(f"Build config section '{name}' must be a mapping, got {type(section).__name__}")

        for key, value in section.items():
            kind = keys.get(key)
            if kind is None:
                raise ConfigError(f"Unknown build config key: {name}.{key}")
            if value is None:
                continue
            if kind is list:
                if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"{name}.{key} must be a list of strings")
            # YAML reads an all-digit revision as an int.
            elif isinstance(value, bool) or not isinstance(value, (str, int)):
                raise ConfigError(f"{name}.{key} must be a string")


@dataclass(frozen=True)
class BuildConfig:
    raw: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        validate_config(self.raw)

    def _section(self, name: str) -> Dict[str, Any]:
        return self.raw.get(name) or {}

    @property
    def debootstrap_components(self) -> List[str]:
        return list(self._section("debootstrap").get("components") or ["main"])

    @property
    def debootstrap_include(self) -> List[str]:
        return list(self._section("debootstrap").get("include") or DEFAULT_INCLUDE_PACKAGES)

    @property
    def guest_tools_path(self) -> str:
        return str(self._section("guest_tools").get("path") or "guesttools")

    @property
    def guest_tools_repo(self) -> str:
        return str(self._section("guest_tools").get("repo") or DEFAULT_GUEST_TOOLS_REPO)

    @property
    def guest_tools_revision(self) -> str:
        return str(self._section("guest_tools").get("revision") or "master")

    @property
    def guest_tools_installer(self) -> str:
        return str(self._section("guest_tools").get("installer") or "install.sh")

    @property
    def signed_package_url(self) -> str:
        return str(self._section("signed_package").get("url") or DEFAULT_SIGNED_PACKAGE_URL)

    @property
    def signed_checksum_url(self) -> str:
        return str(self._section("signed_package").get("checksum_url") or DEFAULT_SIGNED_CHECKSUM_URL)

    @property
    def exclude_file(self) -> str:
        return str(self._section("archive").get("exclude_file") or "exclude.txt")

    @property
    def output_dir(self) -> str:
        return str(self._section("archive").get("output_dir") or ".")

    @property
    def download_dir(self) -> str:
        return str(self._section("paths").get("download_dir") or "build/downloads")


def load_build_config(path: Optional[str]) -> BuildConfig:
    """Load the optional YAML build config. None means built-in defaults."""

    if path is None:
        return BuildConfig()

    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Build config not found: {path}")

    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("build config must be YAML")

    import yaml

    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse build config {path}: {e}") from e

    return BuildConfig(raw=raw)
