"""
可达性计算

每种棋子对应一对纯函数 (移动规则, 攻击规则)，通过 PIECE_RULES 统一分发。

通用约定：
- 移动目标必须为空格（王例外，可以直接走到敌方棋子上）
- 攻击目标必须是敌方棋子
- 结果从不包含起点
- 范围规则使用切比雪夫距离，中间的棋子不会阻挡
"""

from typing import Callable, Dict, List, NamedTuple

from .aura import bard_bonus
from .chess_board import BOARD_SIZE, ChessBoard, Position
from .pieces import Mage, Piece, PieceKind, Warrior, WarriorStance


Rule = Callable[[ChessBoard, Position, Piece], List[Position]]

# 枪兵的固定刺击距离与基础移动距离
SPEAR_REACH = 3
# 弓手射程（欧氏距离）
ARCHER_RANGE = 4
_HALF = BOARD_SIZE // 2


def _area(pos: Position, radius: int) -> List[Position]:
    """切比雪夫半径内的所有棋盘格（不含起点）"""
    row, col = pos
    squares = []
    for r in range(max(0, row - radius), min(BOARD_SIZE, row + radius + 1)):
        for c in range(max(0, col - radius), min(BOARD_SIZE, col + radius + 1)):
            if (r, c) != pos:
                squares.append((r, c))
    return squares


def _empty_in_area(board: ChessBoard, pos: Position, radius: int) -> List[Position]:
    return [sq for sq in _area(pos, radius) if board.is_empty(sq)]


def _enemies_in_area(board: ChessBoard, pos: Position, radius: int, piece: Piece) -> List[Position]:
    return [sq for sq in _area(pos, radius) if board.is_enemy_piece(sq, piece.color)]


def _no_squares(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    return []


# ==================== 象限 ====================

def quadrant_of(pos: Position) -> int:
    """
    计算位置所在象限

    1: 上右  2: 上左  3: 下左  4: 下右
    """
    row, col = pos
    if row < _HALF:
        return 1 if col >= _HALF else 2
    return 3 if col < _HALF else 4


def clockwise_successor(quadrant: int) -> int:
    """顺时针相邻象限"""
    return quadrant % 4 + 1


def quadrant_squares(quadrant: int) -> List[Position]:
    """象限内的全部格子"""
    rows = range(0, _HALF) if quadrant in (1, 2) else range(_HALF, BOARD_SIZE)
    cols = range(_HALF, BOARD_SIZE) if quadrant in (1, 4) else range(0, _HALF)
    return [(r, c) for r in rows for c in cols]


# ==================== 各棋子规则 ====================

def king_moves(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    # 王的移动集合同时接受空格和敌方棋子
    return [sq for sq in _area(pos, 1)
            if board.is_empty(sq) or board.is_enemy_piece(sq, piece.color)]


def king_attacks(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    return _enemies_in_area(board, pos, 1, piece)


def _defender_front(pos: Position, piece: Piece) -> List[Position]:
    row, col = pos
    front = row + piece.color.forward
    return [(front, c) for c in (col - 1, col, col + 1)
            if ChessBoard.is_on_board((front, c))]


def defender_moves(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    return [sq for sq in _defender_front(pos, piece) if board.is_empty(sq)]


def defender_attacks(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    return [sq for sq in _defender_front(pos, piece) if board.is_enemy_piece(sq, piece.color)]


def warrior_moves(board: ChessBoard, pos: Position, piece: Warrior) -> List[Position]:
    if piece.stance is not WarriorStance.MOBILE:
        return []
    return _empty_in_area(board, pos, 1 + bard_bonus(board, pos, piece.color))


def warrior_attacks(board: ChessBoard, pos: Position, piece: Warrior) -> List[Position]:
    if piece.stance is WarriorStance.MOBILE:
        return []
    radius = 1 if piece.stance is WarriorStance.WEAK_STRIKE else 2
    return _enemies_in_area(board, pos, radius, piece)


def paladin_moves(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    return _empty_in_area(board, pos, 2 + bard_bonus(board, pos, piece.color))


def paladin_attacks(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    return _enemies_in_area(board, pos, 2, piece)


def mage_moves(board: ChessBoard, pos: Position, piece: Mage) -> List[Position]:
    if piece.is_ready:
        return []
    return _empty_in_area(board, pos, 1 + bard_bonus(board, pos, piece.color))


def mage_attacks(board: ChessBoard, pos: Position, piece: Mage) -> List[Position]:
    """冷却完毕时攻击同行同列的所有敌方棋子，不受阻挡"""
    if not piece.is_ready:
        return []
    row, col = pos
    lines = [(row, c) for c in range(BOARD_SIZE) if c != col]
    lines += [(r, col) for r in range(BOARD_SIZE) if r != row]
    return [sq for sq in lines if board.is_enemy_piece(sq, piece.color)]


def spearman_moves(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    """沿前进方向直线移动，遇到第一个棋子即停止（不含该格）"""
    row, col = pos
    forward = piece.color.forward
    squares = []
    for step in range(1, SPEAR_REACH + bard_bonus(board, pos, piece.color) + 1):
        sq = (row + forward * step, col)
        if not board.is_empty(sq):
            break
        squares.append(sq)
    return squares


def spearman_attacks(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    row, col = pos
    target = (row + piece.color.forward * SPEAR_REACH, col)
    return [target] if board.is_enemy_piece(target, piece.color) else []


def archer_attacks(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    """前方半平面内欧氏距离不超过4的敌方棋子"""
    row, col = pos
    forward = piece.color.forward
    targets = []
    for (r, c), _ in board.iter_pieces(piece.color.opponent):
        ahead = (r - row) * forward
        if ahead > 0 and ahead ** 2 + (c - col) ** 2 <= ARCHER_RANGE ** 2:
            targets.append((r, c))
    return targets


def bard_moves(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    # 诗人自身位于光环范围内，移动半径恒为2
    return _empty_in_area(board, pos, 1 + bard_bonus(board, pos, piece.color))


def assassin_moves(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    target_quadrant = clockwise_successor(quadrant_of(pos))
    return [sq for sq in quadrant_squares(target_quadrant) if board.is_empty(sq)]


def assassin_attacks(board: ChessBoard, pos: Position, piece: Piece) -> List[Position]:
    target_quadrant = clockwise_successor(quadrant_of(pos))
    return [sq for sq in quadrant_squares(target_quadrant)
            if board.is_enemy_piece(sq, piece.color)]


# ==================== 分发表 ====================

class PieceRule(NamedTuple):
    """一种棋子的能力对"""
    move_rule: Rule
    attack_rule: Rule


PIECE_RULES: Dict[PieceKind, PieceRule] = {
    PieceKind.KING: PieceRule(king_moves, king_attacks),
    PieceKind.WARRIOR: PieceRule(warrior_moves, warrior_attacks),
    PieceKind.DEFENDER: PieceRule(defender_moves, defender_attacks),
    PieceKind.PALADIN: PieceRule(paladin_moves, paladin_attacks),
    PieceKind.MAGE: PieceRule(mage_moves, mage_attacks),
    PieceKind.SPEARMAN: PieceRule(spearman_moves, spearman_attacks),
    PieceKind.ARCHER: PieceRule(_no_squares, archer_attacks),
    PieceKind.BARD: PieceRule(bard_moves, _no_squares),
    PieceKind.ASSASSIN: PieceRule(assassin_moves, assassin_attacks),
}


def legal_moves(board: ChessBoard, pos: Position) -> List[Position]:
    """
    计算指定格子上棋子的合法移动目标

    Args:
        board: 棋盘快照
        pos: 起点

    Returns:
        List[Position]: 排序后的目标列表，空格或越界起点返回空列表
    """
    piece = board.get_piece_at(pos)
    if piece is None:
        return []
    return sorted(PIECE_RULES[piece.kind].move_rule(board, pos, piece))


def legal_attacks(board: ChessBoard, pos: Position) -> List[Position]:
    """
    计算指定格子上棋子的合法攻击目标

    Args:
        board: 棋盘快照
        pos: 起点

    Returns:
        List[Position]: 排序后的敌方棋子位置列表
    """
    piece = board.get_piece_at(pos)
    if piece is None:
        return []
    return sorted(PIECE_RULES[piece.kind].attack_rule(board, pos, piece))
