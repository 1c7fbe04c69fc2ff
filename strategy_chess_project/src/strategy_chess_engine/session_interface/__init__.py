"""
会话接口模块

包含游戏会话管理、联机中继和API服务器。
"""

from .game_interface import GameInterface, GameSession, GameResult, ClickOutcome
from .relay import RelayHub, RelayGame
from .api_server import APIServer, create_api_server

__all__ = [
    # 游戏接口
    'GameInterface',
    'GameSession',

    # 联机中继
    'RelayHub',
    'RelayGame',

    # API服务器
    'APIServer',
    'create_api_server',

    # 枚举类型
    'GameResult',
    'ClickOutcome'
]
