"""
策略象棋棋盘数据结构

定义8x8棋盘的表示、基本操作和格式转换功能。
"""

import json
from typing import Any, Dict, Iterator, List, Optional, Tuple

import numpy as np

from .pieces import (
    Color, Piece, PieceKind, MAGE_STRIKE_COOLDOWN,
    create_piece, piece_from_dict
)
from ..utils.exceptions import BoardFormatError


Position = Tuple[int, int]

BOARD_SIZE = 8

# 开局布阵（行0为黑方底线，行7为白方底线）
_BACK_RANK_BLACK = [
    PieceKind.ASSASSIN, PieceKind.ARCHER, PieceKind.KING, PieceKind.MAGE,
    PieceKind.SPEARMAN, PieceKind.PALADIN, PieceKind.BARD, PieceKind.WARRIOR,
]
_BACK_RANK_WHITE = [
    PieceKind.WARRIOR, PieceKind.BARD, PieceKind.PALADIN, PieceKind.SPEARMAN,
    PieceKind.MAGE, PieceKind.KING, PieceKind.ARCHER, PieceKind.ASSASSIN,
]
# 守卫位于第二排两侧，中间留出4格空档
_DEFENDER_COLUMNS = (0, 1, 6, 7)


class ChessBoard:
    """
    策略象棋棋盘类

    8x8的可选棋子网格。已经发布给会话的棋盘不会被原地修改，
    规则引擎通过 with_piece_moved / with_piece_at 生成新的棋盘。
    """

    def __init__(self, grid: Optional[np.ndarray] = None):
        """
        初始化棋盘

        Args:
            grid: 8x8的object数组，为None时创建空棋盘
        """
        if grid is None:
            self.board = np.full((BOARD_SIZE, BOARD_SIZE), None, dtype=object)
        else:
            if grid.shape != (BOARD_SIZE, BOARD_SIZE):
                raise BoardFormatError(f"棋盘尺寸 {grid.shape}", "应为(8, 8)")
            self.board = grid.copy()

    @classmethod
    def empty(cls) -> 'ChessBoard':
        """创建空棋盘"""
        return cls()

    @classmethod
    def initial(cls) -> 'ChessBoard':
        """
        创建开局局面

        双方镜像布阵：王和辅助棋子在底线，法师开局冷却为2。
        """
        board = cls()
        for col, kind in enumerate(_BACK_RANK_BLACK):
            board.set_piece_at((0, col), cls._opening_piece(kind, Color.BLACK))
        for col, kind in enumerate(_BACK_RANK_WHITE):
            board.set_piece_at((7, col), cls._opening_piece(kind, Color.WHITE))
        for col in _DEFENDER_COLUMNS:
            board.set_piece_at((1, col), create_piece(PieceKind.DEFENDER, Color.BLACK))
            board.set_piece_at((6, col), create_piece(PieceKind.DEFENDER, Color.WHITE))
        return board

    @staticmethod
    def _opening_piece(kind: PieceKind, color: Color) -> Piece:
        if kind is PieceKind.MAGE:
            return create_piece(kind, color, MAGE_STRIKE_COOLDOWN)
        return create_piece(kind, color)

    @classmethod
    def from_pieces(cls, placements: Dict[Position, Piece]) -> 'ChessBoard':
        """
        从 {位置: 棋子} 创建棋盘

        Args:
            placements: 棋子摆放

        Returns:
            ChessBoard: 棋盘对象
        """
        board = cls()
        for pos, piece in placements.items():
            board.set_piece_at(pos, piece)
        return board

    # ==================== 基本查询 ====================

    @staticmethod
    def is_on_board(pos: Position) -> bool:
        """检查坐标是否在棋盘内"""
        row, col = pos
        return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE

    def get_piece_at(self, pos: Position) -> Optional[Piece]:
        """
        获取指定位置的棋子

        Args:
            pos: 位置坐标 (行, 列)

        Returns:
            Optional[Piece]: 棋子，空位或越界返回None
        """
        if not self.is_on_board(pos):
            return None
        return self.board[pos[0], pos[1]]

    at = get_piece_at

    def is_empty(self, pos: Position) -> bool:
        """检查指定位置是否为空（越界位置视为非空）"""
        return self.is_on_board(pos) and self.board[pos[0], pos[1]] is None

    def is_enemy_piece(self, pos: Position, color: Color) -> bool:
        """检查指定位置是否为敌方棋子"""
        piece = self.get_piece_at(pos)
        return piece is not None and piece.color is not color

    def is_own_piece(self, pos: Position, color: Color) -> bool:
        """检查指定位置是否为己方棋子"""
        piece = self.get_piece_at(pos)
        return piece is not None and piece.color is color

    def iter_pieces(self, color: Optional[Color] = None) -> Iterator[Tuple[Position, Piece]]:
        """
        按行优先顺序遍历棋子

        Args:
            color: 指定阵营，None表示所有棋子
        """
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                piece = self.board[row, col]
                if piece is not None and (color is None or piece.color is color):
                    yield (row, col), piece

    def find_king(self, color: Color) -> Optional[Position]:
        """找到指定阵营的王，被吃掉后返回None"""
        for pos, piece in self.iter_pieces(color):
            if piece.kind is PieceKind.KING:
                return pos
        return None

    def count_pieces(self, color: Optional[Color] = None) -> Dict[PieceKind, int]:
        """
        统计棋子数量

        Returns:
            Dict[PieceKind, int]: {棋子种类: 数量}
        """
        counts: Dict[PieceKind, int] = {}
        for _, piece in self.iter_pieces(color):
            counts[piece.kind] = counts.get(piece.kind, 0) + 1
        return counts

    # ==================== 生成新棋盘 ====================

    def set_piece_at(self, pos: Position, piece: Optional[Piece]) -> None:
        """
        原地放置棋子，只用于构建尚未发布的局面

        Raises:
            ValueError: 坐标越界
        """
        if not self.is_on_board(pos):
            raise ValueError(f"无效的位置坐标: {pos}")
        self.board[pos[0], pos[1]] = piece

    def with_piece_at(self, pos: Position, piece: Optional[Piece]) -> 'ChessBoard':
        """返回替换了一个格子的新棋盘"""
        new_board = self.copy()
        new_board.set_piece_at(pos, piece)
        return new_board

    def with_piece_moved(self, from_pos: Position, to_pos: Position) -> 'ChessBoard':
        """
        返回棋子从 from_pos 移到 to_pos 后的新棋盘

        普通移动和吃子都使用该操作，目标格原有的棋子被直接移除。
        """
        new_board = self.copy()
        new_board.set_piece_at(to_pos, self.get_piece_at(from_pos))
        new_board.set_piece_at(from_pos, None)
        return new_board

    def copy(self) -> 'ChessBoard':
        """复制棋盘（棋子本身不可变，浅拷贝即可）"""
        return ChessBoard(self.board)

    # ==================== 格式转换 ====================

    def to_matrix(self) -> np.ndarray:
        """
        转换为数值矩阵

        Returns:
            np.ndarray: 8x8 int8矩阵，白方为正的种类编码，黑方为负
        """
        matrix = np.zeros((BOARD_SIZE, BOARD_SIZE), dtype=np.int8)
        for (row, col), piece in self.iter_pieces():
            sign = 1 if piece.color is Color.WHITE else -1
            matrix[row, col] = sign * piece.kind.code
        return matrix

    def to_dict(self) -> List[List[Optional[Dict[str, Any]]]]:
        """
        转换为传输格式

        Returns:
            8行8列的列表，每格为None或 {"type", "color", "state"?}
        """
        return [
            [piece.to_dict() if piece is not None else None for piece in row]
            for row in self.board
        ]

    @classmethod
    def from_dict(cls, data: Any) -> 'ChessBoard':
        """
        从传输格式创建棋盘

        Raises:
            BoardFormatError: 数据结构或棋子描述无效
        """
        if not isinstance(data, list) or len(data) != BOARD_SIZE:
            raise BoardFormatError("棋盘应为8行的列表")

        board = cls()
        for row, cells in enumerate(data):
            if not isinstance(cells, list) or len(cells) != BOARD_SIZE:
                raise BoardFormatError(f"第{row}行", "应包含8个格子")
            for col, cell in enumerate(cells):
                if cell is None:
                    continue
                if not isinstance(cell, dict):
                    raise BoardFormatError(f"格子({row}, {col})", "应为对象或null")
                try:
                    board.set_piece_at((row, col), piece_from_dict(cell))
                except (KeyError, ValueError) as e:
                    raise BoardFormatError(f"格子({row}, {col})", str(e)) from e
        return board

    def to_json(self) -> str:
        """转换为JSON字符串"""
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, json_str: str) -> 'ChessBoard':
        """从JSON字符串创建棋盘"""
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise BoardFormatError("JSON解析失败", str(e)) from e
        return cls.from_dict(data)

    def to_visual_string(self) -> str:
        """
        转换为可视化字符串

        白方大写、黑方小写，勇士和法师后附状态值。
        """
        lines = ["    a  b  c  d  e  f  g  h"]
        for row in range(BOARD_SIZE):
            cells = []
            for col in range(BOARD_SIZE):
                piece = self.board[row, col]
                if piece is None:
                    cells.append(" . ")
                elif piece.state is not None:
                    cells.append(f"{piece.letter}{piece.state} ")
                else:
                    cells.append(f" {piece.letter} ")
            lines.append(f"{BOARD_SIZE - row}  " + "".join(cells))
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_visual_string()

    def __eq__(self, other) -> bool:
        if not isinstance(other, ChessBoard):
            return False
        return self.board.tolist() == other.board.tolist()

    def __hash__(self) -> int:
        return hash(tuple(tuple(row) for row in self.board.tolist()))
