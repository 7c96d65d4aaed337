"""브라우저 설치 디렉토리 관리 — Playwright 캐시 경로의 단일 진입점.

우선순위:
  1. set_install_dir() API로 명시 지정
  2. 환경변수 PLAYWRIGHT_BROWSERS_PATH ("0"이면 playwright 패키지 내부 .local-browsers)
  3. OS 기본 경로 (Windows: AppData/Local, 그 외: ~/.cache)
"""

from __future__ import annotations

import os
import sys
from importlib.util import find_spec
from pathlib import Path

_custom_install_dir: Path | None = None


def set_install_dir(path: Path | str | None) -> None:
    """커스텀 설치 디렉토리를 지정한다. None이면 지정을 해제한다."""
    global _custom_install_dir
    _custom_install_dir = Path(path) if path is not None else None


def get_install_dir() -> Path:
    """Playwright 브라우저가 설치되는 디렉토리 경로를 반환한다."""
    if _custom_install_dir is not None:
        return _custom_install_dir
    env = os.getenv("PLAYWRIGHT_BROWSERS_PATH")
    if env == "0":
        return _package_local_dir()
    if env:
        return Path(env)
    return _default_install_dir(sys.platform)


def _package_local_dir() -> Path:
    """PLAYWRIGHT_BROWSERS_PATH=0 일 때 드라이버가 사용하는 패키지 내부 경로."""
    spec = find_spec("playwright")
    if spec is None or not spec.submodule_search_locations:
        raise ValueError("PLAYWRIGHT_BROWSERS_PATH=0 이지만 playwright 패키지를 찾을 수 없음")
    package_dir = Path(list(spec.submodule_search_locations)[0])
    return package_dir / "driver" / "package" / ".local-browsers"


def _default_install_dir(platform: str) -> Path:
    """OS별 기본 설치 디렉토리를 결정한다."""
    if platform == "win32":
        return Path.home() / "AppData" / "Local" / "ms-playwright"
    return Path.home() / ".cache" / "ms-playwright"
