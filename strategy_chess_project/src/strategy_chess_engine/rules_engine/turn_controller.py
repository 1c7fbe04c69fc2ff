"""
回合控制器

负责把选中的行动应用到棋盘上：
1. 判定目标格属于攻击集合还是移动集合
2. 移动棋子（吃子时直接移除目标棋子）
3. 更新行动棋子的内部状态（勇士架势、法师冷却）
4. 全盘冷却衰减
5. 胜负判定与行动方切换
"""

from dataclasses import dataclass
from typing import List, Optional

from .chess_board import ChessBoard, Position
from .move import Action, ActionType
from .pieces import Color, Mage, Piece, PieceKind, Warrior
from .reachability import legal_attacks, legal_moves
from ..utils.logger import LoggerMixin


@dataclass
class TurnOutcome:
    """一次行动的结果"""
    board: ChessBoard              # 行动后的新棋盘
    action: Action                 # 实际执行的行动
    next_color: Color              # 下一个行动方（终局时保持不变）
    winner: Optional[Color] = None  # 吃掉王时的胜方

    @property
    def is_terminal(self) -> bool:
        return self.winner is not None


class TurnController(LoggerMixin):
    """
    回合控制器

    所有方法都是纯函数式的：输入棋盘快照，返回新的棋盘，不修改已发布的快照。
    非法输入返回None，不抛出异常。
    """

    def resolve_action(self, board: ChessBoard, from_pos: Position, to_pos: Position,
                       moves: Optional[List[Position]] = None,
                       attacks: Optional[List[Position]] = None) -> Optional[Action]:
        """
        把目标格解析为一次行动

        优先匹配攻击集合，其次移动集合。王通过移动集合走到敌方棋子上同样记为吃子。

        Args:
            board: 棋盘
            from_pos: 起点
            to_pos: 目标格
            moves: 已缓存的移动集合，None时重新计算
            attacks: 已缓存的攻击集合，None时重新计算

        Returns:
            Optional[Action]: 行动，目标格不在任何集合中时返回None
        """
        piece = board.get_piece_at(from_pos)
        if piece is None:
            return None

        if attacks is None:
            attacks = legal_attacks(board, from_pos)
        target = board.get_piece_at(to_pos)
        if to_pos in attacks and target is not None:
            return Action(from_pos, to_pos, ActionType.CAPTURE, piece.kind, target.kind)

        if moves is None:
            moves = legal_moves(board, from_pos)
        if to_pos in moves:
            if target is not None:
                return Action(from_pos, to_pos, ActionType.CAPTURE, piece.kind, target.kind)
            return Action(from_pos, to_pos, ActionType.MOVE, piece.kind)

        return None

    def apply_action(self, board: ChessBoard, action: Action) -> Optional[TurnOutcome]:
        """
        应用行动

        Args:
            board: 行动前的棋盘
            action: 已解析的行动

        Returns:
            Optional[TurnOutcome]: 行动结果，起点为空时返回None
        """
        piece = board.get_piece_at(action.from_pos)
        if piece is None:
            return None

        acted = self._advance_piece_state(piece, action)
        new_board = board.with_piece_moved(action.from_pos, action.to_pos)
        new_board.set_piece_at(action.to_pos, acted)

        # 刚施法的法师同样参与本回合的衰减
        new_board = self.decay_cooldowns(new_board)

        winner = piece.color if action.is_king_capture else None
        next_color = piece.color if winner is not None else piece.color.opponent

        self.log_action(action)
        if winner is not None:
            self.log_info(f"王被吃掉，{winner.value} 获胜")

        return TurnOutcome(board=new_board, action=action, next_color=next_color, winner=winner)

    def play(self, board: ChessBoard, from_pos: Position, to_pos: Position,
             active_color: Color,
             moves: Optional[List[Position]] = None,
             attacks: Optional[List[Position]] = None) -> Optional[TurnOutcome]:
        """
        解析并应用一次行动

        起点不是行动方棋子，或目标格不可达时返回None。
        """
        piece = board.get_piece_at(from_pos)
        if piece is None or piece.color is not active_color:
            return None
        action = self.resolve_action(board, from_pos, to_pos, moves, attacks)
        if action is None:
            return None
        return self.apply_action(board, action)

    @staticmethod
    def _advance_piece_state(piece: Piece, action: Action) -> Piece:
        """行动后的棋子状态：勇士架势递增，法师吃子后进入冷却"""
        if isinstance(piece, Warrior):
            return piece.advanced()
        if isinstance(piece, Mage) and action.is_capture:
            return piece.fired()
        return piece

    @staticmethod
    def decay_cooldowns(board: ChessBoard) -> ChessBoard:
        """
        全盘冷却衰减：双方所有冷却中的法师冷却值减1

        Args:
            board: 棋盘

        Returns:
            ChessBoard: 新棋盘
        """
        new_board = board.copy()
        for pos, piece in board.iter_pieces():
            if piece.kind is PieceKind.MAGE and not piece.is_ready:
                new_board.set_piece_at(pos, piece.decayed())
        return new_board
