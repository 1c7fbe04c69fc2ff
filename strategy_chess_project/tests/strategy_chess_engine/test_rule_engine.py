"""
测试RuleEngine类的功能

测试行动生成、合法性验证、终局检测等功能。
"""

from strategy_chess_project.src.strategy_chess_engine.rules_engine import (
    ChessBoard, PieceKind, Color, ActionType, RuleEngine, create_piece
)


class TestRuleEngine:
    """RuleEngine类的测试"""

    def setup_method(self):
        """每个测试方法前的设置"""
        self.rule_engine = RuleEngine()
        self.board = ChessBoard.initial()

    def test_initial_spearman_moves(self):
        """开局枪兵可以前进1-3格"""
        assert self.rule_engine.get_legal_moves(self.board, (7, 3)) == [(4, 3), (5, 3), (6, 3)]
        assert self.rule_engine.get_legal_attacks(self.board, (7, 3)) == []

    def test_initial_king_moves(self):
        assert self.rule_engine.get_legal_moves(self.board, (7, 5)) == [(6, 4), (6, 5)]

    def test_initial_action_notation(self):
        """开局白方行动中包含典型走法"""
        actions = self.rule_engine.generate_legal_actions(self.board, Color.WHITE)
        notations = [action.to_coordinate_notation() for action in actions]

        assert 'd1d4' in notations  # 枪兵前进三格
        assert 'f1e2' in notations  # 王斜走
        assert 'h1e8' in notations  # 刺客吃对方枪兵
        assert all(action.piece_kind is not PieceKind.ARCHER for action in actions)

    def test_actions_only_for_requested_color(self):
        actions = self.rule_engine.generate_legal_actions(self.board, Color.BLACK)
        assert actions
        for action in actions:
            assert self.board.get_piece_at(action.from_pos).color is Color.BLACK

    def test_piece_actions_captures_first(self):
        """刺客：6个吃子在前，10个移动在后"""
        actions = self.rule_engine.generate_piece_actions(self.board, (7, 7))
        types = [action.action_type for action in actions]
        assert types == [ActionType.CAPTURE] * 6 + [ActionType.MOVE] * 10
        assert actions[0].to_pos == (0, 4)
        assert actions[0].captured_kind is PieceKind.SPEARMAN

    def test_piece_actions_empty_square(self):
        assert self.rule_engine.generate_piece_actions(self.board, (4, 4)) == []

    def test_king_enemy_square_listed_once(self):
        """王旁边的敌方棋子只生成一次吃子行动"""
        board = ChessBoard.from_pieces({
            (4, 4): create_piece(PieceKind.KING, Color.WHITE),
            (3, 4): create_piece(PieceKind.ARCHER, Color.BLACK),
            (0, 0): create_piece(PieceKind.KING, Color.BLACK),
        })
        actions = self.rule_engine.generate_piece_actions(board, (4, 4))
        captures = [action for action in actions if action.is_capture]

        assert len(actions) == 8
        assert len(captures) == 1
        assert captures[0].to_pos == (3, 4)
        assert captures[0].captured_kind is PieceKind.ARCHER

    def test_action_legality_validation(self):
        """测试行动合法性验证"""
        # 合法行动
        assert self.rule_engine.is_legal_action(self.board, (7, 3), (4, 3))
        assert self.rule_engine.is_legal_action(self.board, (7, 3), (4, 3), Color.WHITE)
        assert self.rule_engine.is_legal_action(self.board, (7, 7), (0, 4), Color.WHITE)

        # 非法行动：阵营不符
        assert not self.rule_engine.is_legal_action(self.board, (7, 3), (4, 3), Color.BLACK)
        # 非法行动：空格
        assert not self.rule_engine.is_legal_action(self.board, (4, 4), (3, 3))
        # 非法行动：超出距离
        assert not self.rule_engine.is_legal_action(self.board, (7, 3), (3, 3))
        # 非法行动：己方棋子
        assert not self.rule_engine.is_legal_action(self.board, (7, 5), (7, 4))

    def test_winner_detection(self):
        """测试胜负判断"""
        assert self.rule_engine.get_winner(self.board) is None

        only_white = ChessBoard.from_pieces({
            (7, 5): create_piece(PieceKind.KING, Color.WHITE),
            (0, 0): create_piece(PieceKind.BARD, Color.BLACK),
        })
        assert self.rule_engine.get_winner(only_white) is Color.WHITE

        only_black = ChessBoard.from_pieces({
            (0, 2): create_piece(PieceKind.KING, Color.BLACK),
        })
        assert self.rule_engine.get_winner(only_black) is Color.BLACK

    def test_game_status(self):
        """测试局面状态获取"""
        status = self.rule_engine.get_game_status(self.board, Color.WHITE)

        assert status['active_color'] == 'white'
        assert status['winner'] is None
        assert status['capture_count'] == 6
        assert status['legal_action_count'] > status['capture_count']
        assert status['piece_counts'] == {'white': 12, 'black': 12}

    def test_status_is_symmetric_at_start(self):
        white = self.rule_engine.get_game_status(self.board, Color.WHITE)
        black = self.rule_engine.get_game_status(self.board, Color.BLACK)
        assert white['legal_action_count'] == black['legal_action_count']
        assert white['capture_count'] == black['capture_count']
