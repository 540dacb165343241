from __future__ import annotations

import logging
import posixpath
from pathlib import Path
from urllib.parse import urlsplit

from .command import run_cmd

logger = logging.getLogger(__name__)


def url_basename(url: str) -> str:
    name = posixpath.basename(urlsplit(url).path)
    if not name:
        raise ValueError(f"Cannot derive a file name from {url}")
    return name


def curl_download(url: str, output_dir: str | Path, *, dry_run: bool = False) -> Path:
    """Download url into output_dir, keeping the remote file name."""

    out_dir = Path(output_dir)
    if not dry_run:
        out_dir.mkdir(parents=True, exist_ok=True)
    dest = out_dir / url_basename(url)
    run_cmd(
        [
            "curl",
            "--location",
            "--fail",
            "--silent",
            "--show-error",
            "--proto", "=https",
            "--output", str(dest),
            url,
        ],
        dry_run=dry_run,
    )
    return dest
