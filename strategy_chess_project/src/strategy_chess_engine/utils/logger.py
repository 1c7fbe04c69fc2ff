"""
日志系统

所有日志记录器挂在 strategy_chess 之下；规则引擎记录行动，
会话与中继层按对局ID记录事件。
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..config.game_config import SystemConfig
    from ..rules_engine.move import Action


ROOT_LOGGER_NAME = 'strategy_chess'


def setup_logger(
    name: str = ROOT_LOGGER_NAME,
    level: str = 'INFO',
    log_file: Optional[str] = None,
    log_dir: str = 'logs/strategy_chess_engine',
    max_size: int = 10,  # MB
    backup_count: int = 5,
    console_output: bool = True
) -> logging.Logger:
    """
    设置日志记录器

    Args:
        name: 日志记录器名称
        level: 日志级别
        log_file: 日志文件名
        log_dir: 日志目录
        max_size: 日志文件最大大小(MB)
        backup_count: 备份文件数量
        console_output: 是否输出到控制台

    Returns:
        logging.Logger: 配置好的日志记录器
    """
    logger = logging.getLogger(name)

    # 如果已经配置过，直接返回
    if logger.handlers:
        return logger

    log_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(log_level)

    formatter = logging.Formatter(
        fmt='%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # 控制台处理器
    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        logger.addHandler(console_handler)

    # 文件处理器
    if log_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_path / log_file,
            maxBytes=max_size * 1024 * 1024,  # 转换为字节
            backupCount=backup_count,
            encoding='utf-8'
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def setup_logger_from_config(system_config: 'SystemConfig', debug: bool = False,
                             name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    按系统配置设置根日志记录器

    Args:
        system_config: 系统配置，log_file 为空时只输出到控制台
        debug: 为True时忽略配置的级别，强制使用DEBUG
        name: 日志记录器名称

    Returns:
        logging.Logger: 配置好的根日志记录器
    """
    return setup_logger(
        name=name,
        level='DEBUG' if debug else system_config.log_level,
        log_file=system_config.log_file or None,
        log_dir=system_config.log_dir,
        max_size=system_config.log_max_size,
        backup_count=system_config.log_backup_count,
        console_output=system_config.console_output
    )


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """
    获取日志记录器

    Args:
        name: 日志记录器名称

    Returns:
        logging.Logger: 日志记录器
    """
    return logging.getLogger(name)


class LoggerMixin:
    """
    日志记录器混入类

    记录器名称为 strategy_chess.<类名>。除通用的分级方法外，
    提供行动记录和按对局ID记录事件的方法。
    """

    @property
    def logger(self) -> logging.Logger:
        """获取日志记录器"""
        class_name = self.__class__.__name__
        return get_logger(f'{ROOT_LOGGER_NAME}.{class_name}')

    def log_info(self, message: str, *args, **kwargs):
        """记录信息日志"""
        self.logger.info(message, *args, **kwargs)

    def log_warning(self, message: str, *args, **kwargs):
        """记录警告日志"""
        self.logger.warning(message, *args, **kwargs)

    def log_debug(self, message: str, *args, **kwargs):
        """记录调试日志"""
        self.logger.debug(message, *args, **kwargs)

    def log_action(self, action: 'Action'):
        """
        记录一次已执行的行动

        普通行动记为DEBUG，吃王记为INFO。
        """
        level = logging.INFO if action.is_king_capture else logging.DEBUG
        message = f"执行行动: {action.to_coordinate_notation()} ({action.action_type.value})"
        if action.is_capture:
            message += f", 吃掉 {action.captured_kind.value}"
        self.logger.log(level, message)

    def log_game_event(self, game_id: str, message: str, level: int = logging.INFO):
        """
        记录带对局ID前缀的事件

        Args:
            game_id: 会话ID或中继对局ID
            message: 事件描述
            level: 日志级别
        """
        self.logger.log(level, f"[{game_id}] {message}")
