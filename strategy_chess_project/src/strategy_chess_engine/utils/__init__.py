"""
工具模块

包含日志、异常处理和其他通用工具。
"""

from .logger import setup_logger, setup_logger_from_config, get_logger, LoggerMixin
from .exceptions import (
    StrategyChessError, ConfigurationError, BoardFormatError,
    GameStateError, SessionNotFoundError, RelayError
)

__all__ = [
    'setup_logger', 'setup_logger_from_config', 'get_logger', 'LoggerMixin',
    'StrategyChessError', 'ConfigurationError', 'BoardFormatError',
    'GameStateError', 'SessionNotFoundError', 'RelayError'
]
