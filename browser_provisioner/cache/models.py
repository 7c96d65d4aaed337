"""캐시 서비스 요청/응답 데이터 모델."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


# --- 조회 ---

class ArtifactCacheEntry(BaseModel):
    """GET /cache 응답 — 매칭된 캐시 엔트리."""
    cache_key: Optional[str] = Field(None, alias="cacheKey")
    scope: Optional[str] = None
    archive_location: Optional[str] = Field(None, alias="archiveLocation")

    model_config = {"populate_by_name": True}

    @property
    def is_usable(self) -> bool:
        return bool(self.cache_key and self.archive_location)


# --- 저장 ---

class ReserveCacheRequest(BaseModel):
    """POST /caches 요청 바디."""
    key: str
    version: str
    cache_size: Optional[int] = Field(None, alias="cacheSize")

    model_config = {"populate_by_name": True}


class ReserveCacheResponse(BaseModel):
    cache_id: int = Field(alias="cacheId")

    model_config = {"populate_by_name": True}


class CommitCacheRequest(BaseModel):
    """POST /caches/{cacheId} 요청 바디."""
    size: int


# --- 캐시 서비스 v2 (Twirp, github.actions.results.api.v1.CacheService) ---
# int64 필드는 protojson 규약상 문자열로 올 수 있으므로 int로 관대하게 파싱한다

class GetCacheEntryDownloadURLRequest(BaseModel):
    key: str
    restore_keys: list[str] = Field(default_factory=list, alias="restoreKeys")
    version: str

    model_config = {"populate_by_name": True}


class GetCacheEntryDownloadURLResponse(BaseModel):
    ok: bool = False
    signed_download_url: str = Field("", alias="signedDownloadUrl")
    matched_key: str = Field("", alias="matchedKey")

    model_config = {"populate_by_name": True}


class CreateCacheEntryRequest(BaseModel):
    key: str
    version: str


class CreateCacheEntryResponse(BaseModel):
    ok: bool = False
    signed_upload_url: str = Field("", alias="signedUploadUrl")
    message: str = ""

    model_config = {"populate_by_name": True}


class FinalizeCacheEntryUploadRequest(BaseModel):
    key: str
    version: str
    size_bytes: int = Field(alias="sizeBytes")

    model_config = {"populate_by_name": True}


class FinalizeCacheEntryUploadResponse(BaseModel):
    ok: bool = False
    entry_id: int = Field(0, alias="entryId")

    model_config = {"populate_by_name": True}
