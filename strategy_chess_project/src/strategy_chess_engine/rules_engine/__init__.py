"""
策略象棋规则引擎模块

包含棋盘表示、可达性计算、回合控制、规则验证等核心功能。
"""

from .pieces import (
    PieceKind, Color, WarriorStance, Piece, Warrior, Mage,
    create_piece, piece_from_dict
)
from .chess_board import ChessBoard, Position, BOARD_SIZE
from .aura import bard_bonus
from .reachability import PIECE_RULES, legal_moves, legal_attacks, quadrant_of, clockwise_successor
from .move import Action, ActionType
from .turn_controller import TurnController, TurnOutcome
from .board_validator import BoardValidator
from .rule_engine import RuleEngine

__all__ = [
    'PieceKind', 'Color', 'WarriorStance', 'Piece', 'Warrior', 'Mage',
    'create_piece', 'piece_from_dict',
    'ChessBoard', 'Position', 'BOARD_SIZE',
    'bard_bonus',
    'PIECE_RULES', 'legal_moves', 'legal_attacks', 'quadrant_of', 'clockwise_successor',
    'Action', 'ActionType',
    'TurnController', 'TurnOutcome',
    'BoardValidator', 'RuleEngine'
]
