"""캐시 아카이브 — 디렉토리 목록 ↔ tar.gz.

각 경로는 아카이브 안에서 인덱스 이름("0", "1", ...) 아래에 저장되고,
복원 시 같은 순서의 경로로 풀린다. 경로 목록이 같아야 복원이 의미가 있으므로
cache_version()으로 경로 + 압축 방식을 키 버전에 포함한다.
"""

from __future__ import annotations

import hashlib
import shutil
import tarfile
import tempfile
from pathlib import Path

COMPRESSION = "gzip"


def cache_version(paths: list[Path]) -> str:
    """경로 목록 + 압축 방식 → sha256 버전 문자열."""
    components = [str(p) for p in paths] + [COMPRESSION]
    return hashlib.sha256("|".join(components).encode("utf-8")).hexdigest()


def create_archive(paths: list[Path], archive_path: Path) -> Path:
    """경로 목록을 tar.gz 하나로 묶는다. 존재하지 않는 경로는 건너뛴다."""
    archive_path.parent.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive_path, "w:gz") as tar:
        for i, path in enumerate(paths):
            if path.exists():
                tar.add(str(path), arcname=str(i))
    return archive_path


def extract_archive(archive_path: Path, paths: list[Path]) -> None:
    """tar.gz를 풀어 인덱스별로 원래 경로에 배치한다."""
    with tempfile.TemporaryDirectory(prefix="browser-cache-") as tmp:
        staging = Path(tmp)
        with tarfile.open(archive_path, "r:gz") as tar:
            tar.extractall(staging, filter="data")

        for i, path in enumerate(paths):
            src = staging / str(i)
            if not src.exists():
                continue
            if src.is_dir():
                path.mkdir(parents=True, exist_ok=True)
                shutil.copytree(src, path, symlinks=True, dirs_exist_ok=True)
            else:
                path.parent.mkdir(parents=True, exist_ok=True)
                shutil.copy2(src, path)
