"""
로깅 유틸리티 - 싱글톤 로거 관리
"""
import logging
import os
import sys
from typing import Optional


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def default_level() -> int:
    """LOG_LEVEL 환경변수에서 기본 로그 레벨을 읽습니다 (없으면 INFO)."""
    name = os.getenv("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


class LoggerSingleton:
    """
    이름별로 한 번만 구성되는 로거 팩토리

    모듈마다 `LoggerSingleton.get_logger(logger_name="translation")` 처럼
    이름을 지정해 가져다 씁니다.
    """
    _loggers = {}
    _default_level: Optional[int] = None

    @classmethod
    def get_logger(cls, logger_name: str = "app", level: Optional[int] = None) -> logging.Logger:
        """
        지정된 이름의 로거를 반환합니다. 이미 생성된 경우 기존 로거를 반환합니다.

        Args:
            logger_name: 로거 이름
            level: 로그 레벨 (None이면 LOG_LEVEL 환경변수)

        Returns:
            logging.Logger: 설정된 로거 인스턴스
        """
        if logger_name in cls._loggers:
            return cls._loggers[logger_name]

        if level is None:
            level = cls._default_level if cls._default_level is not None else default_level()

        logger = logging.getLogger(logger_name)
        logger.setLevel(level)

        # 핸들러가 없는 경우에만 추가 (중복 방지)
        if not logger.handlers:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(
                logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
            )
            logger.addHandler(console_handler)

        cls._loggers[logger_name] = logger
        return logger

    @classmethod
    def set_level(cls, level) -> None:
        """이미 만들어진 로거와 이후 생성될 로거의 레벨을 함께 변경 (예: .env의 LOG_LEVEL 적용)"""
        if isinstance(level, str):
            resolved = logging.getLevelName(level.upper())
            level = resolved if isinstance(resolved, int) else logging.INFO
        cls._default_level = level
        for logger in cls._loggers.values():
            logger.setLevel(level)
            for handler in logger.handlers:
                handler.setLevel(level)
