"""Shared test fixtures."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import pytest

from lx_image_builder.build_config import BuildConfig, ImageConfig
from lx_image_builder.build_steps import BuildCtx
from lx_image_builder.lib import command

Handler = Callable[[List[str]], Optional[subprocess.CompletedProcess]]


class FakeRunner:
    """Stands in for subprocess.run and records every argv it is given."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.envs: List[dict] = []
        self.cwds: List[Optional[str]] = []
        self._handlers: List[tuple[Sequence[str], Handler]] = []

    def on(self, prefix: Sequence[str], handler: Handler) -> None:
        # Most recently registered handler is consulted first.
        self._handlers.insert(0, (list(prefix), handler))

    def fail_on(self, prefix: Sequence[str], returncode: int = 1, stderr: str = "boom") -> None:
        self.on(prefix, lambda argv: subprocess.CompletedProcess(argv, returncode, stdout="", stderr=stderr))

    def __call__(self, argv, **kwargs) -> subprocess.CompletedProcess:
        argv = list(argv)
        self.calls.append(argv)
        self.envs.append(dict(kwargs.get("env") or {}))
        self.cwds.append(kwargs.get("cwd"))
        for prefix, handler in self._handlers:
            if argv[: len(prefix)] == prefix:
                result = handler(argv)
                if result is not None:
                    return result
        return subprocess.CompletedProcess(argv, 0, stdout="", stderr="")

    def find(self, *prefix: str) -> List[List[str]]:
        return [c for c in self.calls if c[: len(prefix)] == list(prefix)]

    def index(self, *prefix: str) -> int:
        for i, c in enumerate(self.calls):
            if c[: len(prefix)] == list(prefix):
                return i
        raise ValueError(f"no call starting with {prefix}")


@pytest.fixture
def runner(monkeypatch: pytest.MonkeyPatch) -> FakeRunner:
    fake = FakeRunner()
    monkeypatch.setattr(command.subprocess, "run", fake)
    return fake


@pytest.fixture
def rootfs(tmp_path: Path) -> Path:
    """A minimal tree resembling what debootstrap leaves behind."""

    root = tmp_path / "chroot"
    populate_rootfs(root)
    return root


def populate_rootfs(root: Path, version_id: str = "12") -> None:
    (root / "etc/ssh").mkdir(parents=True, exist_ok=True)
    (root / "usr/share/zoneinfo").mkdir(parents=True, exist_ok=True)
    (root / "usr/share/zoneinfo/UTC").write_bytes(b"TZif2 UTC")
    (root / "etc/localtime").write_bytes(b"TZif2 America/New_York")
    (root / "etc/locale.gen").write_text("# en_US.UTF-8 UTF-8\n", encoding="utf-8")
    (root / "etc/os-release").write_text(
        'PRETTY_NAME="Debian GNU/Linux"\nNAME="Debian GNU/Linux"\n'
        + (f'VERSION_ID="{version_id}"\n' if version_id else "")
        + "ID=debian\n",
        encoding="utf-8",
    )
    (root / "etc/ssh/sshd_config").write_text(
        "Port 22\n"
        "UsePrivilegeSeparation sandbox\n"
        "#PasswordAuthentication yes\n"
        "ChallengeResponseAuthentication no\n",
        encoding="utf-8",
    )


def make_image(install_dir: Path, **overrides) -> ImageConfig:
    values = dict(
        release="bookworm",
        install_dir=str(install_dir),
        mirror="http://deb.debian.org/debian",
        image_name="debian-12",
        display_name="Debian 12",
        description="Debian 12 64-bit lx-brand image.",
        build_date="20240102",
    )
    values.update(overrides)
    return ImageConfig(**values)


@pytest.fixture
def ctx(rootfs: Path, tmp_path: Path) -> BuildCtx:
    repo_root = tmp_path / "repo"
    repo_root.mkdir()
    cfg = BuildConfig(raw={"archive": {"output_dir": str(tmp_path / "out")}})
    return BuildCtx(image=make_image(rootfs), cfg=cfg, repo_root=str(repo_root))


@pytest.fixture
def populate() -> Callable[..., None]:
    return populate_rootfs


@pytest.fixture
def image_factory() -> Callable[..., ImageConfig]:
    return make_image
