from __future__ import annotations

import re

SSHD_CONFIG = "/etc/ssh/sshd_config"

_PASSWORD_AUTH_RE = re.compile(r"^#?[ \t]*PasswordAuthentication\b.*$", re.MULTILINE)
_PRIVSEP_SANDBOX_RE = re.compile(r"^UsePrivilegeSeparation[ \t]+sandbox[ \t]*$", re.MULTILINE)


def disable_password_auth(text: str) -> str:
    """Force every PasswordAuthentication line, commented or not, to 'no'."""

    return _PASSWORD_AUTH_RE.sub("PasswordAuthentication no", text)


def disable_privsep_sandbox(text: str) -> str:
    # seccomp sandboxing of the pre-auth child is not available in lx zones
    return _PRIVSEP_SANDBOX_RE.sub("UsePrivilegeSeparation yes", text)
