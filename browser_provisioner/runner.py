"""외부 명령 실행기 — ABC 인터페이스 + subprocess 구현체.

Playwright CLI는 현재 인터프리터의 모듈로 실행한다:
  python -m playwright install --with-deps chromium
"""

from __future__ import annotations

import logging
import os
import subprocess
import sys
from abc import ABC, abstractmethod
from typing import Optional

from .errors import CommandError

logger = logging.getLogger(__name__)


class CommandRunner(ABC):
    """외부 명령 실행 추상 인터페이스."""

    @abstractmethod
    def run(self, command: str, args: list[str], env: Optional[dict[str, str]] = None) -> int:
        """명령을 실행하고 종료 코드를 반환한다. 실패 시 CommandError.

        env는 현재 프로세스 환경변수 위에 덮어쓸 값만 담는다.
        """

    # --- 편의 메서드 (구현체 공통) ---

    def playwright(self, *args: str, env: Optional[dict[str, str]] = None) -> int:
        """playwright CLI 서브커맨드 실행."""
        return self.run(sys.executable, ["-m", "playwright", *args], env=env)


class SubprocessRunner(CommandRunner):
    """subprocess.run 기반 구현체. 출력은 그대로 부모 프로세스로 흘린다."""

    def __init__(self, timeout: Optional[float] = None):
        self._timeout = timeout

    def run(self, command: str, args: list[str], env: Optional[dict[str, str]] = None) -> int:
        cmd = [command, *args]
        logger.debug(f"Running: {' '.join(cmd)} (env: {env or {}})")
        full_env = {**os.environ, **env} if env else None
        try:
            result = subprocess.run(cmd, check=True, timeout=self._timeout, env=full_env)
        except FileNotFoundError as e:
            raise CommandError(f"명령을 찾을 수 없음: {command}") from e
        except subprocess.TimeoutExpired as e:
            raise CommandError(f"명령 시간 초과 ({self._timeout}초): {' '.join(cmd)}") from e
        except subprocess.CalledProcessError as e:
            raise CommandError(
                f"'{' '.join(cmd)}' 종료 코드 {e.returncode}", returncode=e.returncode
            ) from e
        except OSError as e:
            raise CommandError(f"명령 실행 실패: {' '.join(cmd)}: {e}") from e
        return result.returncode
