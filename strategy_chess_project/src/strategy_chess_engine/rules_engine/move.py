"""
行动数据结构

定义一次完成的行动（移动或吃子）的表示和坐标记法转换。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple
import re

from .pieces import PieceKind


BOARD_FILES = "abcdefgh"


class ActionType(Enum):
    """行动类型"""
    MOVE = "move"          # 移动到空格
    CAPTURE = "capture"    # 吃子


@dataclass
class Action:
    """
    行动类

    记录起点、终点、行动类型以及行动棋子和被吃棋子的种类。
    """
    from_pos: Tuple[int, int]  # 起始位置 (行, 列)
    to_pos: Tuple[int, int]    # 目标位置 (行, 列)
    action_type: ActionType
    piece_kind: PieceKind      # 行动的棋子种类
    captured_kind: Optional[PieceKind] = None  # 被吃掉的棋子种类

    def __post_init__(self):
        """初始化后验证数据有效性"""
        self.from_pos = tuple(self.from_pos)
        self.to_pos = tuple(self.to_pos)
        self._validate_positions()
        if self.action_type is ActionType.CAPTURE and self.captured_kind is None:
            raise ValueError("吃子行动必须给出被吃棋子种类")

    def _validate_positions(self):
        """验证位置坐标的有效性"""
        for pos in [self.from_pos, self.to_pos]:
            row, col = pos
            if not (0 <= row <= 7 and 0 <= col <= 7):
                raise ValueError(f"无效的位置坐标: {pos}")

    @property
    def is_capture(self) -> bool:
        return self.action_type is ActionType.CAPTURE

    @property
    def is_king_capture(self) -> bool:
        return self.captured_kind is PieceKind.KING

    @staticmethod
    def square_name(pos: Tuple[int, int]) -> str:
        """
        格子名称

        列 a-h 对应第0-7列，行号为 8 - row，如 (6, 3) -> "d2"
        """
        return f"{BOARD_FILES[pos[1]]}{8 - pos[0]}"

    def to_coordinate_notation(self) -> str:
        """
        转换为坐标记法

        Returns:
            str: 坐标记法字符串，如 "d2d5"
        """
        return f"{self.square_name(self.from_pos)}{self.square_name(self.to_pos)}"

    @staticmethod
    def parse_coordinate_notation(notation: str) -> Tuple[Tuple[int, int], Tuple[int, int]]:
        """
        解析坐标记法

        Args:
            notation: 如 "d2d5"

        Returns:
            (起点, 终点)

        Raises:
            ValueError: 记法格式错误
        """
        match = re.fullmatch(r'([a-h])([1-8])([a-h])([1-8])', notation.strip().lower())
        if not match:
            raise ValueError(f"无效的坐标记法: {notation}")

        from_col = BOARD_FILES.index(match.group(1))
        from_row = 8 - int(match.group(2))
        to_col = BOARD_FILES.index(match.group(3))
        to_row = 8 - int(match.group(4))
        return (from_row, from_col), (to_row, to_col)

    def __str__(self) -> str:
        return self.to_coordinate_notation()

    def to_dict(self) -> dict:
        """转换为字典"""
        return {
            'from_pos': list(self.from_pos),
            'to_pos': list(self.to_pos),
            'action_type': self.action_type.value,
            'piece_kind': self.piece_kind.value,
            'captured_kind': self.captured_kind.value if self.captured_kind else None,
            'notation': self.to_coordinate_notation(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Action':
        """从字典创建Action对象"""
        captured = data.get('captured_kind')
        return cls(
            from_pos=tuple(data['from_pos']),
            to_pos=tuple(data['to_pos']),
            action_type=ActionType(data['action_type']),
            piece_kind=PieceKind(data['piece_kind']),
            captured_kind=PieceKind(captured) if captured else None
        )
