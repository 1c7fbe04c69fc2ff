"""
配置数据结构

定义各种配置类和默认参数。
"""

from dataclasses import dataclass, field
from typing import List


@dataclass
class SystemConfig:
    """系统配置"""
    # 日志配置
    log_level: str = 'INFO'             # 日志级别
    log_file: str = 'strategy_chess.log'  # 日志文件，为空则只输出到控制台
    log_dir: str = 'logs'               # 日志目录
    log_max_size: int = 10              # 日志文件最大大小(MB)
    log_backup_count: int = 5           # 日志备份数量
    console_output: bool = True         # 是否输出到控制台


@dataclass
class ServerConfig:
    """API服务器与中继配置"""
    host: str = 'localhost'             # 监听主机
    port: int = 8000                    # 监听端口
    cors_origins: List[str] = field(default_factory=lambda: ['*'])
    trusted_hosts: List[str] = field(default_factory=lambda: ['*'])

    # 安全配置
    api_keys: List[str] = field(default_factory=list)  # 为空则不启用认证
    rate_limit_requests: int = 100      # 时间窗口内允许的请求数
    rate_limit_window: int = 60         # 限流时间窗口(秒)

    # 中继配置
    relay_path: str = '/ws'             # WebSocket中继路径


@dataclass
class GameConfig:
    """游戏配置"""
    max_sessions: int = 100             # 同时存在的本地会话上限
    game_id_length: int = 7             # 中继对局ID长度
    validate_custom_boards: bool = True  # 创建会话时是否校验自定义棋盘


# 默认配置实例
DEFAULT_SYSTEM_CONFIG = SystemConfig()
DEFAULT_SERVER_CONFIG = ServerConfig()
DEFAULT_GAME_CONFIG = GameConfig()
