from __future__ import annotations

import logging
from pathlib import Path

from ..errors import ConfigError
from .command import run_cmd

logger = logging.getLogger(__name__)


def _in_git_superproject(repo_root: Path) -> bool:
    return (repo_root / ".gitmodules").exists() and (repo_root / ".git").exists()


def check_guest_tools(*, path: str, installer: str, repo_root: str | Path = ".") -> None:
    """Fail early when a plain guest tools directory (no git sync) lacks its installer."""

    root = Path(repo_root)
    dest = root / path
    if _in_git_superproject(root) or (dest / ".git").exists():
        return
    if dest.is_dir() and any(dest.iterdir()) and not (dest / installer).is_file():
        raise ConfigError(f"Guest tools installer not found: {dest / installer}")


def sync_guest_tools(
    *,
    path: str,
    repo: str,
    revision: str,
    repo_root: str | Path = ".",
    dry_run: bool = False,
) -> Path:
    """Make <repo_root>/<path> hold the pinned guest tools tree.

    Inside a git checkout that declares the submodule, the superproject's
    pinned commit wins. Otherwise the tree is cloned (or fetched) from repo
    and checked out at revision.
    """

    root = Path(repo_root)
    dest = root / path

    if _in_git_superproject(root):
        run_cmd(["git", "submodule", "update", "--init", "--", path], cwd=str(root), dry_run=dry_run)
        return dest

    if (dest / ".git").exists():
        run_cmd(["git", "-C", str(dest), "fetch", "--quiet", "origin"], dry_run=dry_run)
    else:
        run_cmd(["git", "clone", "--quiet", repo, str(dest)], dry_run=dry_run)
    run_cmd(["git", "-C", str(dest), "checkout", "--quiet", revision], dry_run=dry_run)
    return dest


def install_guest_tools(
    tools_dir: str | Path,
    target_root: str,
    *,
    installer: str = "install.sh",
    dry_run: bool = False,
) -> None:
    script = Path(tools_dir) / installer
    if not dry_run and not script.exists():
        raise FileNotFoundError(str(script))
    # install.sh expects to run from its own checkout.
    run_cmd([str(script.resolve()), "-i", target_root], cwd=str(tools_dir), dry_run=dry_run)
    logger.info("Guest tools installed into %s", target_root)
