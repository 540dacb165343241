from __future__ import annotations

import logging
from pathlib import Path

from .build_steps import CHROOT_STEPS, FINAL_STEPS, PREPARE_STEPS, BuildCtx, check_prerequisites
from .lib.chroot import mounted_pseudo_fs

logger = logging.getLogger(__name__)


def _run_step(fn, ctx: BuildCtx) -> None:
    logger.info("Running step %s", fn.__name__)
    fn(ctx=ctx)


def run_build(ctx: BuildCtx) -> Path:
    """Build the image described by ctx and return the archive path.

    Steps run strictly in order; the first failure aborts the build and no
    archive is written.
    """

    logger.info(
        "=== Building %s (%s, %s) into %s ===",
        ctx.image.image_name,
        ctx.image.release,
        ctx.image.build_date,
        ctx.rootfs,
    )

    try:
        check_prerequisites(ctx=ctx)
        for fn in PREPARE_STEPS:
            _run_step(fn, ctx)

        with mounted_pseudo_fs(ctx.rootfs, dry_run=ctx.dry_run):
            for fn in CHROOT_STEPS:
                _run_step(fn, ctx)

        for fn in FINAL_STEPS:
            _run_step(fn, ctx)
    except Exception:
        logger.exception("Image build failed")
        raise

    logger.info("=== Build complete: %s ===", ctx.archive_path)
    return ctx.archive_path
