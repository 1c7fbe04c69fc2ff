"""
配置管理模块

包含系统配置、服务器配置和游戏配置。
"""

from .config_manager import ConfigManager
from .game_config import SystemConfig, ServerConfig, GameConfig

__all__ = ['ConfigManager', 'SystemConfig', 'ServerConfig', 'GameConfig']
