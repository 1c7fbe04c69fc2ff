"""
Strategy Chess 源代码模块

包含一个子系统：
- strategy_chess_engine: 策略象棋规则引擎、会话与联机中继
"""

from . import strategy_chess_engine

__all__ = [
    "strategy_chess_engine",
]
