"""브라우저 프로비저닝 CLI.

사용법:
  # CI (GitHub Actions)에서 — 캐시 복원/저장 포함
  browser-provisioner --browsers chromium,firefox,webkit

  # 로컬에서 캐시 없이 설치
  browser-provisioner --browsers chromium --no-cache

  # 설치 디렉토리 지정
  browser-provisioner --browsers chromium --install-dir ./pw-browsers -v
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from ._logging import configure
from ._resources import get_install_dir, set_install_dir
from .cache.client import HttpRemoteCache, RemoteCache
from .cache.results import ResultsRemoteCache
from .config import (
    ACTIONS_CACHE_URL,
    ACTIONS_RESULTS_URL,
    ACTIONS_RUNTIME_TOKEN,
    GITHUB_ACTIONS,
    HTTP_TIMEOUT_SEC,
    UPLOAD_CHUNK_SIZE,
)
from .errors import ProvisionError
from .provisioner.models import ProvisionerSettings
from .provisioner.provisioner import DefaultBrowserProvisioner
from .runner import SubprocessRunner

logger = logging.getLogger(__name__)


def build_cache() -> Optional[RemoteCache]:
    """러너 환경변수로 캐시 백엔드를 고른다. v2(ACTIONS_RESULTS_URL) 우선, v1은 레거시."""
    if not ACTIONS_RUNTIME_TOKEN or not (ACTIONS_RESULTS_URL or ACTIONS_CACHE_URL):
        logger.warning(
            "ACTIONS_RUNTIME_TOKEN / ACTIONS_RESULTS_URL이 없어 캐시 없이 진행합니다. "
            "러너는 이 값을 run: 스텝에 내보내지 않으므로 워크플로에서 직접 노출해야 합니다 "
            "(예: crazy-max/ghaction-github-runtime)"
        )
        return None
    if ACTIONS_RESULTS_URL:
        return ResultsRemoteCache(
            results_url=ACTIONS_RESULTS_URL,
            token=ACTIONS_RUNTIME_TOKEN,
            timeout=HTTP_TIMEOUT_SEC,
            chunk_size=UPLOAD_CHUNK_SIZE,
        )
    logger.info("ACTIONS_RESULTS_URL 없음 — 레거시 v1 캐시 서비스(ACTIONS_CACHE_URL) 사용")
    return HttpRemoteCache(
        base_url=ACTIONS_CACHE_URL,
        token=ACTIONS_RUNTIME_TOKEN,
        timeout=HTTP_TIMEOUT_SEC,
        chunk_size=UPLOAD_CHUNK_SIZE,
    )


def main(argv=None):
    parser = argparse.ArgumentParser(description="Playwright 브라우저 프로비저닝 CLI")
    parser.add_argument(
        "--browsers", default="chromium",
        help="브라우저 (쉼표 구분). 예: chromium,firefox,webkit",
    )
    parser.add_argument("--no-cache", action="store_true", help="원격 캐시 사용 안 함")
    parser.add_argument("--install-dir", default=None, help="브라우저 설치 디렉토리")
    parser.add_argument("-v", "--verbose", action="store_true", help="상세 로그")

    args = parser.parse_args(argv)
    configure(args.verbose)

    if args.install_dir:
        set_install_dir(Path(args.install_dir))

    # ── 캐시 설정 ──
    cache_enabled = GITHUB_ACTIONS and not args.no_cache
    cache = build_cache() if cache_enabled else None
    cache_enabled = cache is not None

    settings = ProvisionerSettings(cacheEnabled=cache_enabled, installDir=get_install_dir())
    provisioner = DefaultBrowserProvisioner(
        runner=SubprocessRunner(),
        cache=cache,
        settings=settings,
    )

    print(f"브라우저: {args.browsers}")
    print(f"설치 디렉토리: {settings.install_dir}")
    print(f"캐시: {'사용' if cache_enabled else '미사용'}")
    print()

    try:
        result = provisioner.ensure_installed(args.browsers)
    except ProvisionError as e:
        logger.error(str(e))
        sys.exit(1)
    finally:
        if cache is not None:
            cache.close()

    print()
    print(f"캐시 키: {result.cache_key}")
    if result.used_cache:
        print("캐시된 브라우저 사용")
    else:
        print(f"전체 설치 수행 (캐시 히트: {result.cache_hit}, 검증: {result.verified})")
    if result.is_degraded:
        print("경고:")
        for step in (result.dependencies, result.cache_save):
            if step is not None and not step.ok:
                print(f"  - {step.reason}")


if __name__ == "__main__":
    main()
