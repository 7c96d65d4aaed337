"""브라우저 프로비저닝 오류 타입.

호출자에게 전파되는 것은 InvalidInputError와 InstallError뿐이다.
나머지는 프로비저너 내부에서 경고로 기록된 뒤 흡수된다.
"""

from __future__ import annotations


class ProvisionError(Exception):
    """프로비저닝 오류 기반 클래스."""


class InvalidInputError(ProvisionError, ValueError):
    """브라우저 목록 파싱 결과가 비어 있음."""


class InstallError(ProvisionError, RuntimeError):
    """playwright install 실패 — 복구 불가."""


class CommandError(Exception):
    """외부 명령이 0이 아닌 코드로 종료되었거나 실행할 수 없음."""

    def __init__(self, message: str, returncode: int | None = None):
        super().__init__(message)
        self.returncode = returncode


class CacheServiceError(Exception):
    """원격 캐시 서비스 호출 실패."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CacheEntryExistsError(CacheServiceError):
    """같은 키의 캐시 엔트리가 이미 예약/저장되어 있음."""
