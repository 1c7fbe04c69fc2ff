"""
策略象棋规则引擎

在可达性函数之上提供整盘的行动生成、合法性判断和局面状态查询。
"""

from typing import Any, Dict, List, Optional

from .chess_board import ChessBoard, Position
from .move import Action, ActionType
from .pieces import Color
from .reachability import legal_attacks, legal_moves


class RuleEngine:
    """
    策略象棋规则引擎

    负责生成合法行动、验证行动合法性、检测终局状态等。
    """

    def get_legal_moves(self, board: ChessBoard, pos: Position) -> List[Position]:
        """获取指定棋子的合法移动目标"""
        return legal_moves(board, pos)

    def get_legal_attacks(self, board: ChessBoard, pos: Position) -> List[Position]:
        """获取指定棋子的合法攻击目标"""
        return legal_attacks(board, pos)

    def generate_piece_actions(self, board: ChessBoard, pos: Position) -> List[Action]:
        """
        生成指定位置棋子的所有行动

        Args:
            board: 当前棋盘状态
            pos: 棋子位置

        Returns:
            List[Action]: 先吃子后移动的行动列表
        """
        piece = board.get_piece_at(pos)
        if piece is None:
            return []

        actions = []
        attacks = legal_attacks(board, pos)
        for target in attacks:
            actions.append(Action(pos, target, ActionType.CAPTURE, piece.kind,
                                  board.get_piece_at(target).kind))
        for target in legal_moves(board, pos):
            if target in attacks:
                continue
            captured = board.get_piece_at(target)
            if captured is not None:
                # 王走到敌方棋子上
                actions.append(Action(pos, target, ActionType.CAPTURE, piece.kind, captured.kind))
            else:
                actions.append(Action(pos, target, ActionType.MOVE, piece.kind))
        return actions

    def generate_legal_actions(self, board: ChessBoard, color: Color) -> List[Action]:
        """
        生成指定阵营的所有合法行动

        Args:
            board: 当前棋盘状态
            color: 阵营

        Returns:
            List[Action]: 合法行动列表
        """
        actions = []
        for pos, _ in board.iter_pieces(color):
            actions.extend(self.generate_piece_actions(board, pos))
        return actions

    def is_legal_action(self, board: ChessBoard, from_pos: Position, to_pos: Position,
                        color: Optional[Color] = None) -> bool:
        """
        验证行动是否合法

        Args:
            board: 当前棋盘状态
            from_pos: 起点
            to_pos: 目标格
            color: 行动方，None表示不检查阵营

        Returns:
            bool: 是否合法
        """
        piece = board.get_piece_at(from_pos)
        if piece is None:
            return False
        if color is not None and piece.color is not color:
            return False
        return to_pos in legal_attacks(board, from_pos) or to_pos in legal_moves(board, from_pos)

    def get_winner(self, board: ChessBoard) -> Optional[Color]:
        """
        根据棋盘判断胜方

        只剩一方的王时该方获胜；双方的王都在时返回None。
        """
        white_king = board.find_king(Color.WHITE)
        black_king = board.find_king(Color.BLACK)
        if white_king is not None and black_king is None:
            return Color.WHITE
        if black_king is not None and white_king is None:
            return Color.BLACK
        return None

    def get_game_status(self, board: ChessBoard, color: Color) -> Dict[str, Any]:
        """
        获取局面状态

        Args:
            board: 当前棋盘状态
            color: 行动方

        Returns:
            Dict[str, Any]: 局面状态信息
        """
        actions = self.generate_legal_actions(board, color)
        winner = self.get_winner(board)
        return {
            'active_color': color.value,
            'winner': winner.value if winner else None,
            'legal_action_count': len(actions),
            'capture_count': sum(1 for action in actions if action.is_capture),
            'piece_counts': {
                c.value: sum(board.count_pieces(c).values()) for c in Color
            },
        }
