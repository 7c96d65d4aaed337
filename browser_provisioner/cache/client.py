"""원격 캐시 클라이언트 — ABC 인터페이스 + 레거시(v1) HTTP 구현체.

v1 `_apis/artifactcache` 서비스는 github.com에서 2025년 4월 종료되었다.
GHES 등 v1을 계속 제공하는 환경에서만 HttpRemoteCache를 쓰고,
github.com에서는 results.ResultsRemoteCache (v2)를 쓴다.
"""

from __future__ import annotations

import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Optional

import httpx

from ..errors import CacheEntryExistsError, CacheServiceError
from .archive import cache_version, create_archive, extract_archive
from .models import (
    ArtifactCacheEntry,
    CommitCacheRequest,
    ReserveCacheRequest,
    ReserveCacheResponse,
)

logger = logging.getLogger(__name__)

API_VERSION = "6.0-preview.1"


class RemoteCache(ABC):
    """원격 캐시 추상 인터페이스 (key → 디렉토리 묶음)."""

    @abstractmethod
    def restore(self, paths: list[Path], key: str, restore_keys: list[str]) -> Optional[str]:
        """paths에 캐시를 복원한다. 매칭된 키를 반환하고, 없으면 None."""

    @abstractmethod
    def save(self, paths: list[Path], key: str) -> None:
        """paths 전체를 key로 저장한다."""

    def close(self) -> None:
        """연결 등 자원 해제. 기본 구현은 아무것도 하지 않는다."""


class HttpRemoteCache(RemoteCache):
    """httpx 기반 Actions 아티팩트 캐시 구현체.

    조회: GET /cache?keys=...&version=...  (200 매칭 / 204 미스)
    저장: POST /caches (예약) → PATCH /caches/{id} (청크 업로드) → POST /caches/{id} (커밋)
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 60.0,
        chunk_size: int = 32 * 1024 * 1024,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/") + "/_apis/artifactcache"
        self._chunk_size = chunk_size
        self._timeout = timeout
        self._transport = transport
        self._client = httpx.Client(
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": f"application/json;api-version={API_VERSION}",
            },
            timeout=timeout,
            transport=transport,
        )

    def _url(self, path: str) -> str:
        return f"{self._base_url}{path}"

    def _check_response(self, resp: httpx.Response) -> httpx.Response:
        if resp.status_code in (401, 403):
            raise CacheServiceError(
                "캐시 서비스 인증 실패. ACTIONS_RUNTIME_TOKEN을 확인하세요.",
                status_code=resp.status_code,
            )
        if resp.is_error:
            raise CacheServiceError(
                f"캐시 서비스 오류 {resp.status_code}: {resp.text[:200]}",
                status_code=resp.status_code,
            )
        return resp

    # --- 조회 ---

    def get_entry(self, keys: list[str], version: str) -> Optional[ArtifactCacheEntry]:
        """키 목록(정확한 키 → 폴백 prefix 순)으로 엔트리를 조회한다."""
        params = {"keys": ",".join(keys), "version": version}
        resp = self._client.get(self._url("/cache"), params=params)
        if resp.status_code == 204:
            return None
        self._check_response(resp)
        entry = ArtifactCacheEntry.model_validate(resp.json())
        if not entry.is_usable:
            return None
        return entry

    def restore(self, paths: list[Path], key: str, restore_keys: list[str]) -> Optional[str]:
        version = cache_version(paths)
        entry = self.get_entry([key, *restore_keys], version)
        if entry is None:
            return None

        logger.debug(f"캐시 엔트리 발견: {entry.cache_key} (scope={entry.scope})")
        with tempfile.TemporaryDirectory(prefix="browser-cache-") as tmp:
            archive_path = Path(tmp) / "cache.tgz"
            self.download_archive(entry.archive_location, archive_path)
            extract_archive(archive_path, paths)
        return entry.cache_key

    # --- 저장 ---

    def reserve(self, key: str, version: str, size: int) -> int:
        """캐시 슬롯을 예약하고 cacheId를 반환한다."""
        body = ReserveCacheRequest(key=key, version=version, cacheSize=size)
        resp = self._client.post(
            self._url("/caches"), json=body.model_dump(by_alias=True, exclude_none=True)
        )
        if resp.status_code == 409:
            raise CacheEntryExistsError(
                f"이미 존재하는 캐시 키: {key}", status_code=resp.status_code
            )
        self._check_response(resp)
        return ReserveCacheResponse.model_validate(resp.json()).cache_id

    def upload(self, cache_id: int, archive_path: Path) -> int:
        """아카이브를 청크 단위로 업로드하고 총 바이트 수를 반환한다."""
        offset = 0
        for chunk in _iter_chunks(archive_path, self._chunk_size):
            end = offset + len(chunk) - 1
            resp = self._client.patch(
                self._url(f"/caches/{cache_id}"),
                content=chunk,
                headers={
                    "Content-Type": "application/octet-stream",
                    "Content-Range": f"bytes {offset}-{end}/*",
                },
            )
            self._check_response(resp)
            offset = end + 1
        return offset

    def commit(self, cache_id: int, size: int) -> None:
        body = CommitCacheRequest(size=size)
        resp = self._client.post(self._url(f"/caches/{cache_id}"), json=body.model_dump())
        self._check_response(resp)

    def save(self, paths: list[Path], key: str) -> None:
        version = cache_version(paths)
        with tempfile.TemporaryDirectory(prefix="browser-cache-") as tmp:
            archive_path = create_archive(paths, Path(tmp) / "cache.tgz")
            size = archive_path.stat().st_size
            logger.debug(f"캐시 아카이브 생성: {size} bytes")

            cache_id = self.reserve(key, version, size)
            uploaded = self.upload(cache_id, archive_path)
            self.commit(cache_id, uploaded)

    # --- 파일 다운로드 ---

    def download_archive(self, archive_url: str, output_path: Path) -> Path:
        """archiveLocation에서 아카이브를 다운로드한다."""
        return download_signed(archive_url, output_path, self._timeout, self._transport)

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _iter_chunks(path: Path, chunk_size: int) -> Iterator[bytes]:
    with open(path, "rb") as f:
        while True:
            chunk = f.read(chunk_size)
            if not chunk:
                return
            yield chunk


def download_signed(
    url: str,
    output_path: Path,
    timeout: float = 60.0,
    transport: Optional[httpx.BaseTransport] = None,
) -> Path:
    """서명된 URL에서 아카이브를 스트리밍 다운로드한다."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    # 서명된 외부 URL이므로 캐시 서비스 인증 헤더 없는 별도 클라이언트 사용
    with httpx.Client(
        timeout=timeout, transport=transport, follow_redirects=True
    ) as client, client.stream("GET", url) as resp:
        if resp.is_error:
            raise CacheServiceError(
                f"캐시 아카이브 다운로드 실패: {resp.status_code}",
                status_code=resp.status_code,
            )
        with open(output_path, "wb") as f:
            for chunk in resp.iter_bytes(chunk_size=8192):
                f.write(chunk)
    return output_path
