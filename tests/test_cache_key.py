"""캐시 키 생성, 브라우저 파싱, 설치 검증, 버전/플랫폼 조회 테스트."""

import logging
from importlib.metadata import PackageNotFoundError

import pytest

from browser_provisioner.config import FALLBACK_PLAYWRIGHT_VERSION
from browser_provisioner.provisioner import provisioner as prov
from browser_provisioner.provisioner.provisioner import (
    build_cache_key,
    check_browsers_installed,
    get_platform,
    get_playwright_version,
    parse_browsers,
)


def key_for(browsers_input: str) -> str:
    return build_cache_key(
        parse_browsers(browsers_input),
        platform_name="linux",
        arch="x64",
        playwright_version="1.54.0",
    ).key


# ── 파싱 ──

def test_parse_trims_and_drops_empty_items():
    assert parse_browsers(" chromium , ,firefox,, webkit ") == ["chromium", "firefox", "webkit"]


def test_parse_keeps_duplicates_and_order():
    assert parse_browsers("webkit,chromium,webkit") == ["webkit", "chromium", "webkit"]


# ── 키 ──

def test_key_format():
    assert key_for("chromium,firefox,webkit") == (
        "playwright-browsers-linux-x64-1.54.0-chromium-firefox-webkit"
    )


def test_key_is_deterministic():
    assert key_for("webkit,chromium") == key_for("webkit,chromium")


def test_key_ignores_input_order():
    assert key_for("firefox,chromium") == key_for("chromium, firefox")


def test_key_does_not_mutate_browser_order():
    browsers = ["webkit", "chromium"]
    build_cache_key(browsers, platform_name="linux", arch="x64", playwright_version="1.0.0")
    assert browsers == ["webkit", "chromium"]


def test_restore_keys_decrease_in_specificity():
    cache_key = build_cache_key(
        ["chromium"], namespace="ns", platform_name="darwin", arch="arm64", playwright_version="1.0.0"
    )
    assert cache_key.restore_keys == ["ns-darwin-arm64-", "ns-darwin-"]


def test_key_changes_with_version():
    a = build_cache_key(["chromium"], platform_name="linux", arch="x64", playwright_version="1.53.0")
    b = build_cache_key(["chromium"], platform_name="linux", arch="x64", playwright_version="1.54.0")
    assert a.key != b.key
    assert a.restore_keys == b.restore_keys


# ── 설치 검증 ──

def test_missing_install_dir_is_not_installed(tmp_path):
    assert not check_browsers_installed(tmp_path / "nope", ["chromium"])


def test_each_requested_engine_needs_an_entry(tmp_path):
    (tmp_path / "chromium-1181").mkdir()
    (tmp_path / "chromium_headless_shell-1181").mkdir()
    (tmp_path / "ffmpeg-1011").mkdir()

    assert check_browsers_installed(tmp_path, ["chromium"])
    assert not check_browsers_installed(tmp_path, ["chromium", "firefox"])


def test_unrequested_engines_are_not_checked(tmp_path):
    (tmp_path / "webkit-2191").mkdir()
    assert check_browsers_installed(tmp_path, ["webkit"])


# ── 버전 / 플랫폼 ──

def test_version_falls_back_with_warning(monkeypatch, caplog):
    def missing(name):
        raise PackageNotFoundError(name)

    monkeypatch.setattr(prov, "version", missing)
    with caplog.at_level(logging.WARNING, logger=prov.__name__):
        assert get_playwright_version() == FALLBACK_PLAYWRIGHT_VERSION

    assert FALLBACK_PLAYWRIGHT_VERSION in caplog.text


def test_version_from_metadata(monkeypatch):
    monkeypatch.setattr(prov, "version", lambda name: "9.9.9")
    assert get_playwright_version() == "9.9.9"


@pytest.mark.parametrize(
    "machine, expected",
    [("x86_64", "x64"), ("AMD64", "x64"), ("aarch64", "arm64"), ("arm64", "arm64"), ("riscv64", "riscv64")],
)
def test_arch_is_normalised(monkeypatch, machine, expected):
    monkeypatch.setattr(prov.platform, "machine", lambda: machine)
    _, arch = get_platform()
    assert arch == expected
