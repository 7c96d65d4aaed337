"""캐시 서비스 v2 클라이언트 — Twirp(JSON) + 서명된 Azure Blob URL.

조회: GetCacheEntryDownloadURL → signedDownloadUrl에서 아카이브 다운로드
저장: CreateCacheEntry → signedUploadUrl에 블록 업로드 + 블록 목록 커밋
      → FinalizeCacheEntryUpload

ACTIONS_RESULTS_URL / ACTIONS_RUNTIME_TOKEN은 러너가 JavaScript 액션에만 넘기고
`run:` 스텝에는 노출하지 않는다. 워크플로에서 직접 내보내야 한다
(예: crazy-max/ghaction-github-runtime).
"""

from __future__ import annotations

import base64
import logging
import tempfile
from pathlib import Path
from typing import Optional

import httpx

from ..errors import CacheEntryExistsError, CacheServiceError
from .archive import cache_version, create_archive, extract_archive
from .client import RemoteCache, _iter_chunks, download_signed
from .models import (
    CreateCacheEntryRequest,
    CreateCacheEntryResponse,
    FinalizeCacheEntryUploadRequest,
    FinalizeCacheEntryUploadResponse,
    GetCacheEntryDownloadURLRequest,
    GetCacheEntryDownloadURLResponse,
)

logger = logging.getLogger(__name__)

SERVICE_PATH = "/twirp/github.actions.results.api.v1.CacheService"


class ResultsRemoteCache(RemoteCache):
    """httpx 기반 캐시 서비스 v2 구현체 (github.com)."""

    def __init__(
        self,
        results_url: str,
        token: str,
        timeout: float = 60.0,
        chunk_size: int = 32 * 1024 * 1024,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._base_url = results_url.rstrip("/") + SERVICE_PATH
        self._chunk_size = chunk_size
        self._timeout = timeout
        self._transport = transport
        self._client = httpx.Client(
            headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def _call(self, method: str, body: dict) -> httpx.Response:
        """Twirp RPC 호출. 오류 응답은 {code, msg} JSON."""
        resp = self._client.post(f"{self._base_url}/{method}", json=body)
        if resp.status_code in (401, 403):
            raise CacheServiceError(
                "캐시 서비스 인증 실패. ACTIONS_RUNTIME_TOKEN을 확인하세요.",
                status_code=resp.status_code,
            )
        return resp

    def _raise_for_twirp(self, method: str, resp: httpx.Response) -> None:
        if not resp.is_error:
            return
        try:
            msg = resp.json().get("msg", resp.text)
        except ValueError:
            msg = resp.text
        raise CacheServiceError(
            f"{method} 실패 {resp.status_code}: {msg[:200]}", status_code=resp.status_code
        )

    # --- 조회 ---

    def get_download_url(
        self, key: str, restore_keys: list[str], version: str
    ) -> Optional[GetCacheEntryDownloadURLResponse]:
        """정확한 키 → restore_keys prefix 순으로 엔트리를 찾는다. 없으면 None."""
        body = GetCacheEntryDownloadURLRequest(key=key, restoreKeys=restore_keys, version=version)
        resp = self._call("GetCacheEntryDownloadURL", body.model_dump(by_alias=True))
        if resp.status_code == 404:
            return None
        self._raise_for_twirp("GetCacheEntryDownloadURL", resp)
        data = GetCacheEntryDownloadURLResponse.model_validate(resp.json())
        if not data.ok or not data.signed_download_url:
            return None
        return data

    def restore(self, paths: list[Path], key: str, restore_keys: list[str]) -> Optional[str]:
        version = cache_version(paths)
        entry = self.get_download_url(key, restore_keys, version)
        if entry is None:
            return None

        matched = entry.matched_key or key
        logger.debug(f"캐시 엔트리 발견: {matched}")
        with tempfile.TemporaryDirectory(prefix="browser-cache-") as tmp:
            archive_path = Path(tmp) / "cache.tgz"
            download_signed(entry.signed_download_url, archive_path, self._timeout, self._transport)
            extract_archive(archive_path, paths)
        return matched

    # --- 저장 ---

    def create_entry(self, key: str, version: str) -> str:
        """캐시 엔트리를 예약하고 서명된 업로드 URL을 반환한다."""
        body = CreateCacheEntryRequest(key=key, version=version)
        resp = self._call("CreateCacheEntry", body.model_dump())
        if resp.status_code == 409:
            raise CacheEntryExistsError(f"이미 존재하는 캐시 키: {key}", status_code=409)
        self._raise_for_twirp("CreateCacheEntry", resp)
        data = CreateCacheEntryResponse.model_validate(resp.json())
        if not data.ok or not data.signed_upload_url:
            # 다른 잡이 같은 키를 생성 중이거나 이미 저장됨
            raise CacheEntryExistsError(
                f"캐시 키 예약 불가: {key} {data.message}".rstrip()
            )
        return data.signed_upload_url

    def upload_blob(self, upload_url: str, archive_path: Path) -> int:
        """Azure Put Block × N + Put Block List. 총 바이트 수를 반환한다."""
        block_ids: list[str] = []
        total = 0
        with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
            for i, chunk in enumerate(_iter_chunks(archive_path, self._chunk_size)):
                # 블록 ID는 모두 같은 길이여야 한다
                block_id = base64.b64encode(f"{i:06d}".encode()).decode()
                resp = client.put(
                    upload_url,
                    params={"comp": "block", "blockid": block_id},
                    content=chunk,
                )
                _raise_for_blob(resp)
                block_ids.append(block_id)
                total += len(chunk)

            block_list = "".join(f"<Latest>{b}</Latest>" for b in block_ids)
            resp = client.put(
                upload_url,
                params={"comp": "blocklist"},
                content=(
                    '<?xml version="1.0" encoding="utf-8"?>'
                    f"<BlockList>{block_list}</BlockList>"
                ).encode("utf-8"),
                headers={"Content-Type": "application/xml"},
            )
            _raise_for_blob(resp)
        return total

    def finalize(self, key: str, version: str, size: int) -> int:
        body = FinalizeCacheEntryUploadRequest(key=key, version=version, sizeBytes=size)
        resp = self._call("FinalizeCacheEntryUpload", body.model_dump(by_alias=True))
        self._raise_for_twirp("FinalizeCacheEntryUpload", resp)
        data = FinalizeCacheEntryUploadResponse.model_validate(resp.json())
        if not data.ok:
            raise CacheServiceError(f"캐시 업로드 확정 실패: {key}")
        return data.entry_id

    def save(self, paths: list[Path], key: str) -> None:
        version = cache_version(paths)
        with tempfile.TemporaryDirectory(prefix="browser-cache-") as tmp:
            archive_path = create_archive(paths, Path(tmp) / "cache.tgz")
            logger.debug(f"캐시 아카이브 생성: {archive_path.stat().st_size} bytes")

            upload_url = self.create_entry(key, version)
            size = self.upload_blob(upload_url, archive_path)
            entry_id = self.finalize(key, version, size)
            logger.debug(f"캐시 엔트리 확정: id={entry_id}")

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _raise_for_blob(resp: httpx.Response) -> None:
    if resp.is_error:
        raise CacheServiceError(
            f"캐시 아카이브 업로드 실패: {resp.status_code}", status_code=resp.status_code
        )
