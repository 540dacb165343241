from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from .build import run_build
from .build_config import DEFAULT_DOCS_URL, ImageConfig, load_build_config, today_stamp
from .build_steps import BuildCtx
from .errors import BuildError
from .logging_utils import DEFAULT_LOG_PATH, configure_logging

logger = logging.getLogger(__name__)

DEFAULT_BUILD_CONFIG = "build_config.yaml"

DESCRIPTION = "Install and configure a Debian chroot and package it as an lx-brand image."

EPILOG = """\
Example:
  lx-image-build -r bookworm -d /data/chroot -m http://deb.debian.org/debian \\
      -i debian-12 -p "Debian 12" -D "Debian 12 64-bit lx-brand image."
"""


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="lx-image-build",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-r", "--release", required=True, help="Debian release codename (e.g. bookworm)")
    p.add_argument("-d", "--install-dir", required=True, help="Existing directory to install the chroot into")
    p.add_argument("-m", "--mirror", required=True, help="Debian mirror URL")
    p.add_argument("-i", "--image-name", required=True, help="Image name, used for the archive file name")
    p.add_argument("-p", "--display-name", required=True, help="Human readable name for /etc/motd and /etc/product")
    p.add_argument("-D", "--description", required=True, help="Image description for /etc/product")
    p.add_argument("-u", "--docs-url", default=DEFAULT_DOCS_URL, help=f"Documentation URL (default: {DEFAULT_DOCS_URL})")
    p.add_argument("-c", "--config", default=None, help=f"YAML build config (default: ./{DEFAULT_BUILD_CONFIG} if present)")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to build log")
    p.add_argument("--dry-run", action="store_true", help="Log commands and file writes without performing them")
    p.add_argument("-v", "--verbose", action="store_true", help="Also show command output on the console")
    return p


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = build_parser()
    args_list = sys.argv[1:] if argv is None else list(argv)
    if not args_list:
        p.print_usage(sys.stderr)
        p.exit(1, f"{p.prog}: error: no arguments given\n")

    args = p.parse_args(args_list)
    if not os.path.isdir(args.install_dir):
        p.error(f"install directory does not exist: {args.install_dir}")
    if args.config is not None and not os.path.isfile(args.config):
        p.error(f"build config does not exist: {args.config}")
    return args


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    config_path = args.config
    if config_path is None and os.path.isfile(DEFAULT_BUILD_CONFIG):
        config_path = DEFAULT_BUILD_CONFIG

    image = ImageConfig(
        release=args.release,
        install_dir=os.path.realpath(args.install_dir),
        mirror=args.mirror,
        image_name=args.image_name,
        display_name=args.display_name,
        description=args.description,
        docs_url=args.docs_url,
        build_date=today_stamp(),
    )

    try:
        ctx = BuildCtx(
            image=image,
            cfg=load_build_config(config_path),
            dry_run=bool(args.dry_run),
            repo_root=os.getcwd(),
        )
        run_build(ctx)
    except (BuildError, OSError) as e:
        logger.error("Build of %s failed: %s", image.image_name, e)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
