"""
测试回合控制器

测试行动解析、棋子状态迁移、冷却衰减和胜负判定。
"""

import pytest

from strategy_chess_project.src.strategy_chess_engine.rules_engine import (
    ChessBoard, PieceKind, Color, Mage, Warrior, WarriorStance,
    Action, ActionType, TurnController, create_piece, legal_attacks, legal_moves
)


W, B = Color.WHITE, Color.BLACK


def piece(kind: PieceKind, color: Color, state=None):
    return create_piece(kind, color, state)


def board_with_kings(placements):
    """在角落放上双方的王，再放入其他棋子"""
    pieces = {(7, 7): piece(PieceKind.KING, W), (0, 7): piece(PieceKind.KING, B)}
    pieces.update(placements)
    return ChessBoard.from_pieces(pieces)


class TestResolveAction:
    """行动解析测试"""

    def setup_method(self):
        self.controller = TurnController()

    def test_quiet_move(self):
        board = board_with_kings({(6, 3): piece(PieceKind.SPEARMAN, W)})
        action = self.controller.resolve_action(board, (6, 3), (3, 3))
        assert action == Action((6, 3), (3, 3), ActionType.MOVE, PieceKind.SPEARMAN)

    def test_attack_preferred(self):
        board = board_with_kings({
            (4, 4): piece(PieceKind.PALADIN, W),
            (3, 3): piece(PieceKind.DEFENDER, B),
        })
        action = self.controller.resolve_action(board, (4, 4), (3, 3))
        assert action.action_type is ActionType.CAPTURE
        assert action.captured_kind is PieceKind.DEFENDER

    def test_king_move_onto_enemy_is_capture(self):
        board = board_with_kings({
            (4, 4): piece(PieceKind.KING, W),
            (3, 4): piece(PieceKind.ARCHER, B),
        })
        action = self.controller.resolve_action(board, (4, 4), (3, 4), attacks=[])
        assert action.is_capture
        assert action.captured_kind is PieceKind.ARCHER

    def test_unreachable_target(self):
        board = board_with_kings({(6, 3): piece(PieceKind.SPEARMAN, W)})
        assert self.controller.resolve_action(board, (6, 3), (6, 4)) is None
        assert self.controller.resolve_action(board, (5, 5), (4, 4)) is None

    def test_uses_cached_sets(self):
        board = board_with_kings({(6, 3): piece(PieceKind.SPEARMAN, W)})
        assert self.controller.resolve_action(board, (6, 3), (3, 3), moves=[], attacks=[]) is None


class TestApplyAction:
    """行动应用测试"""

    def setup_method(self):
        self.controller = TurnController()

    def test_spearman_scenario(self):
        """白方枪兵 (6,3) 一步走到 (3,3)，轮到黑方"""
        board = board_with_kings({(6, 3): piece(PieceKind.SPEARMAN, W)})
        outcome = self.controller.play(board, (6, 3), (3, 3), W)

        assert outcome is not None
        assert outcome.board.get_piece_at((3, 3)).kind is PieceKind.SPEARMAN
        assert outcome.board.is_empty((6, 3))
        assert outcome.next_color is B
        assert outcome.winner is None
        assert outcome.action.to_coordinate_notation() == "d2d5"

    def test_original_board_untouched(self):
        board = board_with_kings({(6, 3): piece(PieceKind.SPEARMAN, W)})
        snapshot = board.to_dict()
        self.controller.play(board, (6, 3), (3, 3), W)
        assert board.to_dict() == snapshot

    def test_wrong_color_is_rejected(self):
        board = board_with_kings({(6, 3): piece(PieceKind.SPEARMAN, W)})
        assert self.controller.play(board, (6, 3), (3, 3), B) is None
        assert self.controller.play(board, (4, 4), (3, 3), W) is None

    def test_capture_removes_target(self):
        board = board_with_kings({
            (4, 4): piece(PieceKind.PALADIN, W),
            (2, 2): piece(PieceKind.DEFENDER, B),
        })
        outcome = self.controller.play(board, (4, 4), (2, 2), W)
        assert outcome.action.is_capture
        assert outcome.board.get_piece_at((2, 2)).kind is PieceKind.PALADIN
        assert outcome.board.count_pieces(B) == {PieceKind.KING: 1}

    def test_warrior_stance_cycles_on_every_action(self):
        """移动和攻击都会推进勇士架势"""
        board = board_with_kings({
            (4, 4): piece(PieceKind.WARRIOR, W, 0),
            (3, 6): piece(PieceKind.DEFENDER, B),
            (1, 6): piece(PieceKind.PALADIN, B),
        })

        outcome = self.controller.play(board, (4, 4), (4, 5), W)
        assert outcome.action.action_type is ActionType.MOVE
        assert outcome.board.get_piece_at((4, 5)).stance is WarriorStance.WEAK_STRIKE

        outcome = self.controller.play(outcome.board, (4, 5), (3, 6), W)
        assert outcome.action.is_capture
        assert outcome.board.get_piece_at((3, 6)).stance is WarriorStance.STRONG_STRIKE

        outcome = self.controller.play(outcome.board, (3, 6), (1, 6), W)
        assert outcome.action.is_capture
        assert outcome.board.get_piece_at((1, 6)).stance is WarriorStance.MOBILE

        outcome = self.controller.play(outcome.board, (1, 6), (2, 6), W)
        assert outcome.board.get_piece_at((2, 6)).stance is WarriorStance.WEAK_STRIKE

    def test_mobile_warrior_cannot_strike(self):
        board = board_with_kings({
            (4, 4): piece(PieceKind.WARRIOR, W, 0),
            (3, 4): piece(PieceKind.DEFENDER, B),
        })
        assert self.controller.play(board, (4, 4), (3, 4), W) is None

    def test_quiet_mage_move_only_decays(self):
        board = board_with_kings({(4, 4): piece(PieceKind.MAGE, W, 2)})
        outcome = self.controller.play(board, (4, 4), (4, 5), W)
        assert outcome.board.get_piece_at((4, 5)).cooldown == 1

    def test_mage_strike_decays_in_same_turn(self):
        """施法后冷却置为2，随即参与本回合的全盘衰减"""
        board = board_with_kings({
            (4, 4): piece(PieceKind.MAGE, W, 0),
            (4, 0): piece(PieceKind.ARCHER, B),
        })
        outcome = self.controller.play(board, (4, 4), (4, 0), W)
        assert outcome.action.is_capture
        assert outcome.board.get_piece_at((4, 0)) == Mage(PieceKind.MAGE, W, 1)
        assert outcome.next_color is B

    def test_mage_strikes_again_on_next_own_turn(self):
        """对方走完一个半回合后，法师冷却归零并可以再次攻击"""
        board = board_with_kings({
            (4, 4): piece(PieceKind.MAGE, W, 0),
            (4, 0): piece(PieceKind.ARCHER, B),
            (2, 0): piece(PieceKind.ARCHER, B),
        })
        board = self.controller.play(board, (4, 4), (4, 0), W).board
        assert legal_attacks(board, (4, 0)) == []
        assert legal_moves(board, (4, 0)) != []

        board = self.controller.play(board, (0, 7), (0, 6), B).board
        assert board.get_piece_at((4, 0)).cooldown == 0
        assert legal_attacks(board, (4, 0)) == [(2, 0)]

        outcome = self.controller.play(board, (4, 0), (2, 0), W)
        assert outcome.action.captured_kind is PieceKind.ARCHER
        assert outcome.board.get_piece_at((2, 0)).cooldown == 1

    def test_king_capture_ends_game_without_flip(self):
        board = board_with_kings({(2, 7): piece(PieceKind.PALADIN, W)})
        outcome = self.controller.play(board, (2, 7), (0, 7), W)

        assert outcome.is_terminal
        assert outcome.winner is W
        assert outcome.next_color is W
        assert outcome.board.find_king(B) is None

    def test_king_capture_still_updates_state(self):
        board = board_with_kings({
            (1, 6): piece(PieceKind.WARRIOR, W, 1),
            (3, 3): piece(PieceKind.MAGE, B, 2),
        })
        outcome = self.controller.play(board, (1, 6), (0, 7), W)
        assert outcome.winner is W
        assert outcome.board.get_piece_at((0, 7)).stance is WarriorStance.STRONG_STRIKE
        assert outcome.board.get_piece_at((3, 3)).cooldown == 1


class TestDecayCooldowns:
    """冷却衰减测试"""

    def test_both_colors_decay(self):
        board = ChessBoard.from_pieces({
            (0, 0): piece(PieceKind.MAGE, W, 2),
            (7, 7): piece(PieceKind.MAGE, B, 1),
            (3, 3): piece(PieceKind.MAGE, B, 0),
            (4, 4): piece(PieceKind.WARRIOR, W, 2),
        })
        decayed = TurnController.decay_cooldowns(board)
        assert decayed.get_piece_at((0, 0)).cooldown == 1
        assert decayed.get_piece_at((7, 7)).cooldown == 0
        assert decayed.get_piece_at((3, 3)).cooldown == 0
        assert decayed.get_piece_at((4, 4)) == Warrior(PieceKind.WARRIOR, W, 2)
        assert board.get_piece_at((0, 0)).cooldown == 2

    def test_decay_is_uniform(self):
        """同一次衰减中所有冷却为2的法师都降为1"""
        board = ChessBoard.from_pieces({
            (0, 0): piece(PieceKind.MAGE, W, 2),
            (7, 7): piece(PieceKind.MAGE, B, 2),
        })
        decayed = TurnController.decay_cooldowns(board)
        assert decayed.get_piece_at((0, 0)).cooldown == 1
        assert decayed.get_piece_at((7, 7)).cooldown == 1


class TestAction:
    """行动记录测试"""

    def test_notation(self):
        action = Action((7, 3), (4, 3), ActionType.MOVE, PieceKind.SPEARMAN)
        assert action.to_coordinate_notation() == "d1d4"
        assert Action.parse_coordinate_notation("d1d4") == ((7, 3), (4, 3))
        assert Action.parse_coordinate_notation(" A8H1 ") == ((0, 0), (7, 7))

    @pytest.mark.parametrize("notation", ["", "d1", "i1a1", "a0a1", "a9a1", "d1d4x"])
    def test_invalid_notation(self, notation):
        with pytest.raises(ValueError):
            Action.parse_coordinate_notation(notation)

    def test_invalid_positions(self):
        with pytest.raises(ValueError):
            Action((8, 0), (0, 0), ActionType.MOVE, PieceKind.KING)

    def test_capture_requires_captured_kind(self):
        with pytest.raises(ValueError):
            Action((1, 1), (0, 0), ActionType.CAPTURE, PieceKind.KING)

    def test_dict_conversion(self):
        action = Action((4, 4), (0, 4), ActionType.CAPTURE, PieceKind.MAGE, PieceKind.KING)
        data = action.to_dict()
        assert data['notation'] == "e4e8"
        assert data['captured_kind'] == 'king'
        assert Action.from_dict(data) == action
        assert action.is_king_capture
