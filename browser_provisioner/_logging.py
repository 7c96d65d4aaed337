"""로깅 헬퍼 — SUCCESS 레벨 정의 및 CLI 로깅 설정."""

import logging

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")


def success(logger: logging.Logger, msg: str, *args) -> None:
    """SUCCESS 레벨로 기록한다 (INFO와 WARNING 사이)."""
    logger.log(SUCCESS, msg, *args)


def configure(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
