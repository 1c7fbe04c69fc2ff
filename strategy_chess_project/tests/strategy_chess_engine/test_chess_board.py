"""
测试ChessBoard类的功能

测试开局布阵、棋盘查询、不可变更新和格式转换功能。
"""

import json

import pytest
import numpy as np

from strategy_chess_project.src.strategy_chess_engine.rules_engine import (
    ChessBoard, PieceKind, Color, Mage, create_piece
)
from strategy_chess_project.src.strategy_chess_engine.utils.exceptions import BoardFormatError


class TestInitialBoard:
    """开局局面测试"""

    def setup_method(self):
        self.board = ChessBoard.initial()

    def test_kings(self):
        assert self.board.find_king(Color.BLACK) == (0, 2)
        assert self.board.find_king(Color.WHITE) == (7, 5)

    def test_back_ranks(self):
        black = [self.board.get_piece_at((0, c)).kind.value for c in range(8)]
        white = [self.board.get_piece_at((7, c)).kind.value for c in range(8)]
        assert black == ['assassin', 'archer', 'king', 'mage',
                         'spearman', 'paladin', 'bard', 'warrior']
        assert white == ['warrior', 'bard', 'paladin', 'spearman',
                         'mage', 'king', 'archer', 'assassin']

    def test_defenders_flank_gap(self):
        for col in (0, 1, 6, 7):
            assert self.board.get_piece_at((1, col)).kind is PieceKind.DEFENDER
            assert self.board.get_piece_at((6, col)).kind is PieceKind.DEFENDER
        for col in (2, 3, 4, 5):
            assert self.board.is_empty((1, col))
            assert self.board.is_empty((6, col))

    def test_middle_rows_empty(self):
        for row in range(2, 6):
            for col in range(8):
                assert self.board.is_empty((row, col))

    def test_mages_start_on_cooldown(self):
        assert self.board.get_piece_at((0, 3)) == Mage(PieceKind.MAGE, Color.BLACK, 2)
        assert self.board.get_piece_at((7, 4)) == Mage(PieceKind.MAGE, Color.WHITE, 2)

    def test_piece_counts(self):
        for color in Color:
            counts = self.board.count_pieces(color)
            assert sum(counts.values()) == 12
            assert counts[PieceKind.DEFENDER] == 4
            assert counts[PieceKind.KING] == 1


class TestBoardQueries:
    """棋盘查询测试"""

    def test_is_on_board(self):
        assert ChessBoard.is_on_board((0, 0))
        assert ChessBoard.is_on_board((7, 7))
        assert not ChessBoard.is_on_board((8, 0))
        assert not ChessBoard.is_on_board((0, -1))

    def test_off_board_lookup_returns_none(self):
        board = ChessBoard.initial()
        assert board.get_piece_at((-1, 3)) is None
        assert board.at((3, 8)) is None
        assert not board.is_empty((9, 9))

    def test_enemy_and_own(self):
        board = ChessBoard.initial()
        assert board.is_enemy_piece((0, 0), Color.WHITE)
        assert board.is_own_piece((7, 0), Color.WHITE)
        assert not board.is_enemy_piece((4, 4), Color.WHITE)

    def test_set_piece_off_board(self):
        with pytest.raises(ValueError):
            ChessBoard.empty().set_piece_at((8, 8), create_piece(PieceKind.KING, Color.WHITE))


class TestBoardUpdates:
    """不可变更新测试"""

    def test_with_piece_moved_leaves_original(self):
        board = ChessBoard.initial()
        moved = board.with_piece_moved((7, 3), (4, 3))

        assert moved.get_piece_at((4, 3)).kind is PieceKind.SPEARMAN
        assert moved.is_empty((7, 3))
        assert board.get_piece_at((7, 3)).kind is PieceKind.SPEARMAN
        assert board.is_empty((4, 3))

    def test_with_piece_moved_discards_target(self):
        board = ChessBoard.from_pieces({
            (3, 3): create_piece(PieceKind.PALADIN, Color.WHITE),
            (2, 2): create_piece(PieceKind.BARD, Color.BLACK),
        })
        moved = board.with_piece_moved((3, 3), (2, 2))
        assert moved.get_piece_at((2, 2)).kind is PieceKind.PALADIN
        assert moved.count_pieces(Color.BLACK) == {}

    def test_with_piece_at(self):
        board = ChessBoard.empty()
        king = create_piece(PieceKind.KING, Color.BLACK)
        placed = board.with_piece_at((0, 0), king)
        assert placed.get_piece_at((0, 0)) == king
        assert board.is_empty((0, 0))

    def test_equality_and_hash(self):
        assert ChessBoard.initial() == ChessBoard.initial()
        assert hash(ChessBoard.initial()) == hash(ChessBoard.initial())
        assert ChessBoard.initial() != ChessBoard.empty()


class TestBoardConversion:
    """格式转换测试"""

    def test_matrix_conversion(self):
        matrix = ChessBoard.initial().to_matrix()
        assert isinstance(matrix, np.ndarray)
        assert matrix.shape == (8, 8)
        assert matrix.dtype == np.int8
        assert matrix[7, 5] == PieceKind.KING.code
        assert matrix[0, 2] == -PieceKind.KING.code
        assert np.count_nonzero(matrix) == 24

    def test_dict_round_trip(self):
        board = ChessBoard.initial()
        data = board.to_dict()
        assert data[0][3] == {'type': 'mage', 'color': 'black', 'state': 2}
        assert data[4][4] is None
        assert ChessBoard.from_dict(data) == board

    def test_json_is_plain_wire_format(self):
        board = ChessBoard.initial()
        data = json.loads(board.to_json())
        assert len(data) == 8
        assert all(len(row) == 8 for row in data)
        assert ChessBoard.from_json(board.to_json()) == board

    @pytest.mark.parametrize("data", [
        None,
        [[None] * 8] * 7,
        [[None] * 8] * 7 + [[None] * 7],
        [[None] * 8] * 7 + [[None] * 7 + ["king"]],
        [[None] * 8] * 7 + [[None] * 7 + [{'type': 'dragon', 'color': 'white'}]],
        [[None] * 8] * 7 + [[None] * 7 + [{'type': 'king'}]],
    ])
    def test_from_dict_rejects_malformed(self, data):
        with pytest.raises(BoardFormatError):
            ChessBoard.from_dict(data)

    def test_from_json_rejects_invalid_json(self):
        with pytest.raises(BoardFormatError):
            ChessBoard.from_json("{not json")

    def test_visual_string(self):
        text = ChessBoard.initial().to_visual_string()
        lines = text.splitlines()
        assert lines[0].split() == list("abcdefgh")
        assert len(lines) == 9
        assert 'K' in lines[8]
        assert 'k' in lines[1]
        assert 'M2' in lines[8]
