from dotenv import load_dotenv
import os

load_dotenv()

# CI 감지 — GitHub Actions 러너에서만 원격 캐시를 사용한다
GITHUB_ACTIONS: bool = bool(os.getenv("GITHUB_ACTIONS"))

# 캐시 서비스 (러너가 JavaScript 액션에만 주입 — run: 스텝에는 직접 내보내야 함)
# v2: ACTIONS_RESULTS_URL (github.com), v1: ACTIONS_CACHE_URL (GHES 등 레거시)
ACTIONS_RESULTS_URL: str = os.getenv("ACTIONS_RESULTS_URL", "")
ACTIONS_CACHE_URL: str = os.getenv("ACTIONS_CACHE_URL", "")
ACTIONS_RUNTIME_TOKEN: str = os.getenv("ACTIONS_RUNTIME_TOKEN", "")

CACHE_NAMESPACE: str = "playwright-browsers"

# pyproject.toml의 playwright 고정 버전과 반드시 일치해야 한다
FALLBACK_PLAYWRIGHT_VERSION: str = "1.54.0"

# HTTP 설정
HTTP_TIMEOUT_SEC: float = 60.0
UPLOAD_CHUNK_SIZE: int = 32 * 1024 * 1024
