"""프로비저너 설정 및 데이터 모델."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

from ..config import CACHE_NAMESPACE

KNOWN_ENGINES = ("chromium", "firefox", "webkit")


class ProvisionerSettings(BaseModel):
    """프로비저너 설정 — 환경변수는 CLI에서 읽어 여기로 전달한다."""
    cache_enabled: bool = Field(False, alias="cacheEnabled")
    namespace: str = CACHE_NAMESPACE
    install_dir: Optional[Path] = Field(None, alias="installDir")

    model_config = {"populate_by_name": True}


class CacheKey(BaseModel):
    """캐시 키 구성 요소.

    key:          <namespace>-<platform>-<arch>-<version>-<browsers 정렬 후 '-' 결합>
    restore_keys: [<namespace>-<platform>-<arch>-, <namespace>-<platform>-]
    """
    namespace: str
    platform: str
    arch: str
    version: str
    browsers: list[str]

    @property
    def key(self) -> str:
        browsers_key = "-".join(sorted(self.browsers))
        return f"{self.namespace}-{self.platform}-{self.arch}-{self.version}-{browsers_key}"

    @property
    def restore_keys(self) -> list[str]:
        return [
            f"{self.namespace}-{self.platform}-{self.arch}-",
            f"{self.namespace}-{self.platform}-",
        ]


class CacheResult(BaseModel):
    """캐시 복원 결과 (호출 1회 동안만 사용)."""
    cache_hit: bool = Field(False, alias="cacheHit")
    browsers_installed: bool = Field(False, alias="browsersInstalled")

    model_config = {"populate_by_name": True}


class StepOutcome(BaseModel):
    """best-effort 단계(의존성 설치, 캐시 저장)의 결과."""
    ok: bool
    reason: Optional[str] = None
    skipped: bool = False

    @classmethod
    def success(cls) -> "StepOutcome":
        return cls(ok=True)

    @classmethod
    def failure(cls, reason: str) -> "StepOutcome":
        return cls(ok=False, reason=reason)

    @classmethod
    def skip(cls, reason: str) -> "StepOutcome":
        return cls(ok=True, reason=reason, skipped=True)


class ProvisionResult(BaseModel):
    """ensure_installed() 실행 결과."""
    browsers: list[str]
    cache_key: str = Field(alias="cacheKey")
    cache_hit: bool = Field(False, alias="cacheHit")
    verified: bool = False
    full_install: bool = Field(False, alias="fullInstall")
    dependencies: Optional[StepOutcome] = None
    cache_save: Optional[StepOutcome] = Field(None, alias="cacheSave")

    model_config = {"populate_by_name": True}

    @property
    def used_cache(self) -> bool:
        return self.cache_hit and self.verified

    @property
    def is_degraded(self) -> bool:
        steps = [s for s in (self.dependencies, self.cache_save) if s is not None]
        return any(not s.ok for s in steps)
