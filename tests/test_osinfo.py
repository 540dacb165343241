from pathlib import Path

import pytest

from lx_image_builder.lib.osinfo import (
    extra_base_packages,
    needs_container_workarounds,
    parse_major_version,
    read_version_id,
)


@pytest.mark.parametrize(
    "version_id,expected",
    [
        ("7", 7),
        ("9", 9),
        ("12", 12),
        ("10.13", 10),
        (" 8 ", 8),
        ("", None),
        (None, None),
        ("bookworm/sid", None),
    ],
)
def test_parse_major_version(version_id, expected) -> None:
    assert parse_major_version(version_id) == expected


def test_read_version_id_from_chroot(rootfs: Path) -> None:
    assert read_version_id(rootfs) == "12"


def test_read_version_id_missing_file(tmp_path: Path) -> None:
    assert read_version_id(tmp_path) == ""


def test_read_version_id_falls_back_to_usr_lib(tmp_path: Path) -> None:
    (tmp_path / "usr/lib").mkdir(parents=True)
    (tmp_path / "usr/lib/os-release").write_text("ID=debian\nVERSION_ID=11\n", encoding="utf-8")
    assert read_version_id(tmp_path) == "11"


def test_release_7_gets_python2_compat_package() -> None:
    assert extra_base_packages(parse_major_version("7")) == [
        "software-properties-common",
        "python-software-properties",
    ]


@pytest.mark.parametrize("version_id", ["9", "12", "", "testing"])
def test_newer_or_unknown_release_skips_python2_compat_package(version_id) -> None:
    assert extra_base_packages(parse_major_version(version_id)) == ["software-properties-common"]


@pytest.mark.parametrize("version_id,expected", [("7", False), ("8", True), ("9", True), ("", True)])
def test_container_workarounds_threshold(version_id, expected) -> None:
    assert needs_container_workarounds(parse_major_version(version_id)) is expected
