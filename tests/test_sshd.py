import pytest

from lx_image_builder.lib.sshd import disable_password_auth, disable_privsep_sandbox


@pytest.mark.parametrize(
    "line",
    [
        "#PasswordAuthentication no",
        "#PasswordAuthentication yes",
        "PasswordAuthentication yes",
        "PasswordAuthentication no",
        "# PasswordAuthentication yes",
        "PasswordAuthentication yes # set by cloud-init",
        "#PasswordAuthentication\tyes  ",
    ],
)
def test_password_auth_converges_to_disabled(line: str) -> None:
    text = f"Port 22\n{line}\nUsePAM yes\n"
    assert disable_password_auth(text) == "Port 22\nPasswordAuthentication no\nUsePAM yes\n"


def test_password_auth_leaves_other_settings_alone() -> None:
    text = "PermitEmptyPasswords no\nKbdInteractiveAuthentication no\n"
    assert disable_password_auth(text) == text


def test_password_auth_is_idempotent() -> None:
    once = disable_password_auth("PasswordAuthentication yes\n")
    assert disable_password_auth(once) == once


def test_privsep_sandbox_becomes_yes() -> None:
    text = "UsePrivilegeSeparation sandbox\n"
    assert disable_privsep_sandbox(text) == "UsePrivilegeSeparation yes\n"


def test_privsep_other_values_untouched() -> None:
    text = "UsePrivilegeSeparation no\n#UsePrivilegeSeparation sandbox\n"
    assert disable_privsep_sandbox(text) == text


def test_password_auth_ignores_longer_keywords() -> None:
    text = "PasswordAuthenticationMethods any\n"
    assert disable_password_auth(text) == text
