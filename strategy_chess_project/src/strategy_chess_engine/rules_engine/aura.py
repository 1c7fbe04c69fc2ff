"""
光环计算

吟游诗人为周围3x3范围内的友方棋子提供+1移动半径。
"""

from .chess_board import ChessBoard, Position
from .pieces import Color, PieceKind


def bard_bonus(board: ChessBoard, pos: Position, color: Color) -> int:
    """
    计算指定位置获得的诗人光环加成

    以 pos 为中心的3x3范围（包括 pos 本身）内有友方诗人时返回1，否则返回0。
    该加成只作用于移动半径，不影响任何攻击范围。

    Args:
        board: 棋盘
        pos: 位置坐标
        color: 受益方阵营

    Returns:
        int: 0 或 1
    """
    row, col = pos
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            piece = board.get_piece_at((row + dr, col + dc))
            if piece is not None and piece.kind is PieceKind.BARD and piece.color is color:
                return 1
    return 0
