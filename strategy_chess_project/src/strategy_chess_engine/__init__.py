"""
策略象棋引擎

8x8变体象棋的规则引擎与回合控制器，九种棋子中勇士和法师带有内部状态。
包括规则引擎、会话管理、联机中继和API服务器。
"""

__version__ = "1.0.0"
__author__ = "Strategy Chess Team"

# 导入核心组件
from .rules_engine import ChessBoard, Action, RuleEngine, TurnController
from .config import ConfigManager, SystemConfig, ServerConfig, GameConfig
from .utils import setup_logger, get_logger, StrategyChessError

__all__ = [
    "__version__", "__author__",
    "ChessBoard", "Action", "RuleEngine", "TurnController",
    "ConfigManager", "SystemConfig", "ServerConfig", "GameConfig",
    "setup_logger", "get_logger", "StrategyChessError"
]
