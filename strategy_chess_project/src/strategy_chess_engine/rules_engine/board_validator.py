"""
棋局合法性验证器

提供自定义棋盘的原始数据、结构和棋子数量验证功能。
"""

from typing import Any, Dict, List, Tuple

from .chess_board import BOARD_SIZE, ChessBoard
from .pieces import Color, Piece, PieceKind, PIECE_NAMES, piece_from_dict


# 传输格式中允许携带 state 的棋子
STATEFUL_KINDS = (PieceKind.WARRIOR.value, PieceKind.MAGE.value)


class BoardValidator:
    """
    棋局合法性验证器

    校验调用方提供的棋盘能否作为对局起点。
    """

    def __init__(self):
        """初始化验证器"""
        # 棋子数量限制，只约束王
        self.piece_limits = {
            PieceKind.KING: (1, 1),
        }

    def validate_board_structure(self, board: ChessBoard) -> Tuple[bool, List[str]]:
        """
        验证棋盘基本结构

        Args:
            board: 要验证的棋盘

        Returns:
            Tuple[bool, List[str]]: (是否合法, 错误信息列表)
        """
        errors = []

        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                cell = board.board[row, col]
                if cell is not None and not isinstance(cell, Piece):
                    errors.append(f"格子({row}, {col})内容无效: {cell!r}")

        return len(errors) == 0, errors

    def validate_piece_counts(self, board: ChessBoard) -> Tuple[bool, List[str]]:
        """
        验证棋子数量：双方各有且仅有一个王

        Args:
            board: 要验证的棋盘

        Returns:
            Tuple[bool, List[str]]: (是否合法, 错误信息列表)
        """
        errors = []

        for color in Color:
            counts = board.count_pieces(color)
            for kind, (min_count, max_count) in self.piece_limits.items():
                count = counts.get(kind, 0)
                if not min_count <= count <= max_count:
                    errors.append(f"{color.value} {PIECE_NAMES[kind]}数量错误: "
                                  f"{count}, 应为{min_count}-{max_count}")

        return len(errors) == 0, errors

    def validate_board_data(self, data: Any) -> Tuple[bool, List[str]]:
        """
        验证传输格式的棋盘数据

        与 ChessBoard.from_dict 不同，这里会收集所有格子的错误，
        并拒绝无状态棋子携带的 state 字段（构造时会被静默忽略）。

        Args:
            data: 8行8列的列表，每格为None或 {"type", "color", "state"?}

        Returns:
            Tuple[bool, List[str]]: (是否合法, 错误信息列表)
        """
        if not isinstance(data, list) or len(data) != BOARD_SIZE:
            return False, ["棋盘应为8行的列表"]

        errors = []
        for row, cells in enumerate(data):
            if not isinstance(cells, list) or len(cells) != BOARD_SIZE:
                errors.append(f"第{row}行应包含8个格子")
                continue
            for col, cell in enumerate(cells):
                if cell is None:
                    continue
                if not isinstance(cell, dict):
                    errors.append(f"格子({row}, {col})应为对象或null: {cell!r}")
                    continue
                if cell.get('state') is not None and cell.get('type') not in STATEFUL_KINDS:
                    errors.append(f"格子({row}, {col}) {cell.get('type')} 不应携带状态")
                    continue
                try:
                    piece_from_dict(cell)
                except KeyError as e:
                    errors.append(f"格子({row}, {col})缺少字段: {e}")
                except ValueError as e:
                    errors.append(f"格子({row}, {col})无效: {e}")

        return len(errors) == 0, errors

    def full_validation(self, board: ChessBoard) -> Tuple[bool, List[str]]:
        """
        完整的棋局验证

        Args:
            board: 要验证的棋盘

        Returns:
            Tuple[bool, List[str]]: (是否合法, 所有错误信息列表)
        """
        is_valid, all_errors = self.validate_board_structure(board)
        if not is_valid:
            return False, all_errors

        _, errors = self.validate_piece_counts(board)
        all_errors.extend(errors)

        return len(all_errors) == 0, all_errors

    def get_validation_report(self, board: ChessBoard) -> Dict[str, Any]:
        """
        获取详细的验证报告

        Args:
            board: 要验证的棋盘

        Returns:
            Dict[str, Any]: 验证报告
        """
        report = {
            'overall_valid': True,
            'total_errors': 0,
            'validations': {}
        }

        validation_tests = {
            'structure': self.validate_board_structure,
            'piece_counts': self.validate_piece_counts,
        }

        for test_name, test_func in validation_tests.items():
            is_valid, errors = test_func(board)
            report['validations'][test_name] = {
                'valid': is_valid,
                'errors': errors,
                'error_count': len(errors)
            }

            if not is_valid:
                report['overall_valid'] = False
                report['total_errors'] += len(errors)

        return report
