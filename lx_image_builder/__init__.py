"""Debian lx-brand image builder.

Bootstraps a minimal Debian chroot, adapts it to run as a container
instance and packages it as <image>-<YYYYMMDD>.tar.gz.

Core design goals:
- Strictly sequential, fail-fast build steps
- Pseudo-filesystem mounts always released
- Third-party packages verified before install
- Centralized logging of every command
"""

__all__ = []
