"""SHA-256 verification against a published checksum listing.

The listing uses the coreutils layout, one entry per line::

    <hex digest>  <file name>
    <hex digest> *<file name>
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path
from typing import Dict, Optional

from ..errors import IntegrityError

logger = logging.getLogger(__name__)


def parse_checksum_listing(text: str) -> Dict[str, str]:
    entries: Dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(None, 1)
        if len(parts) != 2:
            continue
        digest, name = parts
        if name.startswith("*"):
            name = name[1:]
        entries[name.strip()] = digest.lower()
    return entries


def expected_digest(listing: str, filename: str) -> Optional[str]:
    return parse_checksum_listing(listing).get(filename)


def sha256_file(path: str | Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1024 * 1024), b""):
            h.update(chunk)
    return h.hexdigest()


def verify_sha256(package: str | Path, listing_path: str | Path) -> str:
    """Check package against its entry in listing_path.

    Raises IntegrityError when the listing has no line for the package or the
    digest differs. Returns the verified digest.
    """

    pkg = Path(package)
    listing = Path(listing_path).read_text(encoding="utf-8")
    expected = expected_digest(listing, pkg.name)
    if expected is None:
        raise IntegrityError(f"No checksum entry for {pkg.name} in {listing_path}")

    actual = sha256_file(pkg)
    if actual != expected:
        raise IntegrityError(
            f"Checksum mismatch for {pkg.name}: expected {expected}, got {actual}"
        )

    logger.info("Verified %s (sha256 %s)", pkg.name, actual)
    return actual
