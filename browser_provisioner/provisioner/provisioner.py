"""Playwright 브라우저 프로비저너 — ABC 인터페이스 + 구현체.

흐름: 파싱 → 캐시 키 계산 → 캐시 복원 → 설치 검증
      → (히트+검증) 시스템 의존성만 설치
      → (미스/검증 실패) 전체 설치 → 캐시 저장
"""

from __future__ import annotations

import logging
import platform
import sys
from abc import ABC, abstractmethod
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional

from .._logging import success
from .._resources import get_install_dir
from ..cache.client import RemoteCache
from ..config import CACHE_NAMESPACE, FALLBACK_PLAYWRIGHT_VERSION
from ..errors import CacheEntryExistsError, InstallError, InvalidInputError
from ..runner import CommandRunner
from .models import (
    KNOWN_ENGINES,
    CacheKey,
    CacheResult,
    ProvisionerSettings,
    ProvisionResult,
    StepOutcome,
)

logger = logging.getLogger(__name__)

_ARCH_ALIASES = {
    "x86_64": "x64",
    "amd64": "x64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "ia32",
    "i686": "ia32",
    "x86": "ia32",
}


# ── 버전 / 플랫폼 ─────────────────────────────────────────────────────

def get_playwright_version() -> str:
    """설치된 playwright 배포판 버전. 조회 실패 시 고정 폴백 버전."""
    try:
        return version("playwright")
    except PackageNotFoundError:
        logger.warning(
            f"playwright 버전 조회 실패 — 폴백 버전 {FALLBACK_PLAYWRIGHT_VERSION} 사용 "
            "(pyproject.toml 고정 버전과 일치하는지 확인하세요)"
        )
        return FALLBACK_PLAYWRIGHT_VERSION


def get_platform() -> tuple[str, str]:
    """(platform, arch) — 예: ("linux", "x64"), ("darwin", "arm64")."""
    machine = platform.machine()
    arch = _ARCH_ALIASES.get(machine.lower(), machine.lower())
    return sys.platform, arch


# ── 파싱 / 키 / 검증 ──────────────────────────────────────────────────

def parse_browsers(browsers_input: str) -> list[str]:
    """쉼표 구분 문자열 → 브라우저 목록 (공백 제거, 빈 항목 제외)."""
    browsers = [b.strip() for b in browsers_input.split(",")]
    return [b for b in browsers if b]


def build_cache_key(
    browsers: list[str],
    namespace: str = CACHE_NAMESPACE,
    platform_name: Optional[str] = None,
    arch: Optional[str] = None,
    playwright_version: Optional[str] = None,
) -> CacheKey:
    """캐시 키 생성. 지정하지 않은 요소는 현재 환경에서 조회한다."""
    if platform_name is None or arch is None:
        detected_platform, detected_arch = get_platform()
        platform_name = platform_name or detected_platform
        arch = arch or detected_arch
    return CacheKey(
        namespace=namespace,
        platform=platform_name,
        arch=arch,
        version=playwright_version or get_playwright_version(),
        browsers=browsers,
    )


def check_browsers_installed(install_dir: Path, browsers: list[str]) -> bool:
    """요청된 엔진마다 설치 디렉토리에 이름이 일치하는 항목이 있는지 확인."""
    try:
        entries = [entry.name for entry in install_dir.iterdir()]
    except OSError:
        return False

    return all(any(engine in entry for entry in entries) for engine in browsers)


# ── 프로비저너 ────────────────────────────────────────────────────────

class BrowserProvisioner(ABC):
    """브라우저 프로비저너 추상 인터페이스."""

    @abstractmethod
    def ensure_installed(self, browsers_input: str) -> ProvisionResult:
        """요청된 브라우저가 로컬에 설치되어 있음을 보장한다."""


class DefaultBrowserProvisioner(BrowserProvisioner):
    """원격 캐시 + playwright CLI를 조합하는 기본 구현체."""

    def __init__(
        self,
        runner: CommandRunner,
        cache: Optional[RemoteCache] = None,
        settings: Optional[ProvisionerSettings] = None,
    ):
        self._runner = runner
        self._cache = cache
        self._settings = settings or ProvisionerSettings()

    @property
    def install_dir(self) -> Path:
        return self._settings.install_dir or get_install_dir()

    @property
    def playwright_env(self) -> dict[str, str]:
        """playwright CLI가 검증/캐시 대상과 같은 디렉토리에 설치하도록 고정한다."""
        return {"PLAYWRIGHT_BROWSERS_PATH": str(self.install_dir)}

    @property
    def caching_active(self) -> bool:
        return self._settings.cache_enabled and self._cache is not None

    def ensure_installed(self, browsers_input: str) -> ProvisionResult:
        browsers = parse_browsers(browsers_input)
        if not browsers:
            raise InvalidInputError("No browsers specified")

        unknown = [b for b in browsers if b not in KNOWN_ENGINES]
        if unknown:
            logger.warning(f"알 수 없는 브라우저 (playwright에 그대로 전달): {', '.join(unknown)}")

        logger.info(f"브라우저 준비 시작: {', '.join(browsers)}")
        cache_key = build_cache_key(browsers, namespace=self._settings.namespace)

        # 캐시 복원 시도
        cache_result = self._restore(cache_key)
        result = ProvisionResult(
            browsers=browsers,
            cacheKey=cache_key.key,
            cacheHit=cache_result.cache_hit,
            verified=cache_result.browsers_installed,
        )

        if cache_result.cache_hit and cache_result.browsers_installed:
            # 캐시된 브라우저 사용 — OS 의존성만 설치
            result.dependencies = self._install_dependencies()
            success(logger, "캐시된 브라우저 사용, 스크린샷 캡처 준비 완료")
            return result

        self._install_browsers(browsers)
        result.full_install = True
        result.cache_save = self._save(cache_key)

        success(logger, "브라우저 설치 완료, 스크린샷 캡처 준비 완료")
        return result

    def _restore(self, cache_key: CacheKey) -> CacheResult:
        """캐시 복원 + 설치 검증. 어떤 실패든 미스로 취급한다."""
        if not self.caching_active:
            logger.debug("CI 환경이 아니거나 캐시 미설정 — 캐시 복원 생략")
            return CacheResult()

        logger.info(f"캐시 조회: {cache_key.key}")
        try:
            matched = self._cache.restore([self.install_dir], cache_key.key, cache_key.restore_keys)
        except Exception as e:
            logger.warning(f"캐시 복원 실패: {e}")
            return CacheResult()

        if not matched:
            logger.info("캐시 미스, 브라우저를 설치합니다")
            return CacheResult()

        success(logger, f"캐시 히트: {matched}")
        if check_browsers_installed(self.install_dir, cache_key.browsers):
            return CacheResult(cacheHit=True, browsersInstalled=True)

        logger.warning("캐시 히트였지만 브라우저가 완전하지 않음, 재설치합니다")
        return CacheResult(cacheHit=True, browsersInstalled=False)

    def _install_browsers(self, browsers: list[str]) -> None:
        """playwright install --with-deps. 실패는 복구 불가."""
        logger.info(f"Playwright 브라우저 설치: {', '.join(browsers)}")
        try:
            self._runner.playwright("install", "--with-deps", *browsers, env=self.playwright_env)
        except Exception as e:
            raise InstallError(f"Failed to install Playwright browsers: {e}") from e
        success(logger, f"브라우저 설치 성공: {', '.join(browsers)}")

    def _install_dependencies(self) -> StepOutcome:
        """playwright install-deps. 실패해도 브라우저는 동작할 수 있으므로 계속 진행."""
        logger.info("Playwright 시스템 의존성 설치 중...")
        try:
            self._runner.playwright("install-deps", env=self.playwright_env)
        except Exception as e:
            logger.warning(f"시스템 의존성 설치 실패: {e}")
            return StepOutcome.failure(str(e))
        success(logger, "시스템 의존성 설치 완료")
        return StepOutcome.success()

    def _save(self, cache_key: CacheKey) -> StepOutcome:
        """설치 디렉토리를 캐시에 저장. 실패는 기록만 한다."""
        if not self.caching_active:
            return StepOutcome.skip("캐시 비활성")

        logger.info(f"캐시 저장: {cache_key.key}")
        try:
            self._cache.save([self.install_dir], cache_key.key)
        except CacheEntryExistsError as e:
            logger.info(f"캐시 저장 생략: {e}")
            return StepOutcome.skip(str(e))
        except Exception as e:
            logger.warning(f"캐시 저장 실패: {e}")
            return StepOutcome.failure(str(e))

        success(logger, "다음 실행을 위해 브라우저 캐시 저장 완료")
        return StepOutcome.success()
