"""
策略象棋系统 (Strategy Chess)

8x8变体象棋：规则引擎、回合控制、对局会话和联机中继。
"""

__version__ = "0.1.0"
__author__ = "Strategy Chess Team"
__description__ = "策略象棋系统 - 变体象棋规则引擎、会话管理与联机中继"

# 导入主要模块
from strategy_chess_project.src import strategy_chess_engine

__all__ = [
    "strategy_chess_engine",
    "__version__",
    "__author__",
    "__description__",
]
