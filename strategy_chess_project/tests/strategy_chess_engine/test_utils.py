"""
工具模块测试

测试日志配置和异常层次。
"""

import logging

from strategy_chess_project.src.strategy_chess_engine.config import SystemConfig
from strategy_chess_project.src.strategy_chess_engine.rules_engine import Action, ActionType, PieceKind
from strategy_chess_project.src.strategy_chess_engine.utils import (
    setup_logger, setup_logger_from_config, get_logger, LoggerMixin,
    StrategyChessError, ConfigurationError, BoardFormatError,
    GameStateError, SessionNotFoundError, RelayError
)


class TestLogger:
    """日志系统测试"""

    def test_setup_logger_with_file(self, tmp_path):
        logger = setup_logger(name='strategy_chess.test_file', level='DEBUG',
                              log_file='test.log', log_dir=str(tmp_path),
                              console_output=False)
        logger.debug("写入日志文件")
        for handler in logger.handlers:
            handler.flush()

        assert logger.level == logging.DEBUG
        assert (tmp_path / 'test.log').exists()
        assert "写入日志文件" in (tmp_path / 'test.log').read_text(encoding='utf-8')

    def test_setup_logger_is_idempotent(self):
        first = setup_logger(name='strategy_chess.test_idempotent')
        handler_count = len(first.handlers)
        second = setup_logger(name='strategy_chess.test_idempotent')
        assert first is second
        assert len(second.handlers) == handler_count

    def test_unknown_level_defaults_to_info(self):
        logger = setup_logger(name='strategy_chess.test_level', level='LOUD', console_output=False)
        assert logger.level == logging.INFO

    def test_logger_mixin_uses_class_name(self):
        class Sample(LoggerMixin):
            pass

        assert Sample().logger is get_logger('strategy_chess.Sample')

    def test_setup_from_system_config(self, tmp_path):
        config = SystemConfig(log_level='WARNING', log_file='', log_dir=str(tmp_path),
                              console_output=False)
        logger = setup_logger_from_config(config, name='strategy_chess.test_config')
        assert logger.level == logging.WARNING
        assert logger.handlers == []
        assert list(tmp_path.iterdir()) == []

    def test_setup_from_system_config_debug_override(self, tmp_path):
        config = SystemConfig(log_level='ERROR', log_file='chess.log', log_dir=str(tmp_path),
                              console_output=False)
        logger = setup_logger_from_config(config, debug=True, name='strategy_chess.test_debug')
        assert logger.level == logging.DEBUG
        assert (tmp_path / 'chess.log').exists()


class TestLoggerMixin:
    """日志混入类的行动与对局事件记录测试"""

    class Recorder(LoggerMixin):
        pass

    def setup_method(self):
        self.recorder = self.Recorder()

    def test_quiet_action_is_debug(self, caplog):
        action = Action((6, 3), (3, 3), ActionType.MOVE, PieceKind.SPEARMAN)
        with caplog.at_level(logging.DEBUG, logger='strategy_chess.Recorder'):
            self.recorder.log_action(action)

        assert len(caplog.records) == 1
        assert caplog.records[0].levelno == logging.DEBUG
        assert caplog.records[0].getMessage() == "执行行动: d2d5 (move)"

    def test_king_capture_is_info(self, caplog):
        action = Action((1, 1), (0, 0), ActionType.CAPTURE, PieceKind.PALADIN, PieceKind.KING)
        with caplog.at_level(logging.INFO, logger='strategy_chess.Recorder'):
            self.recorder.log_action(action)

        assert caplog.records[0].levelno == logging.INFO
        assert caplog.records[0].getMessage() == "执行行动: b7a8 (capture), 吃掉 king"

    def test_game_event_prefix(self, caplog):
        with caplog.at_level(logging.DEBUG, logger='strategy_chess.Recorder'):
            self.recorder.log_game_event("abc1234", "中继对局创建")
            self.recorder.log_game_event("abc1234", "忽略行动", logging.DEBUG)

        assert [r.getMessage() for r in caplog.records] == ["[abc1234] 中继对局创建", "[abc1234] 忽略行动"]
        assert [r.levelno for r in caplog.records] == [logging.INFO, logging.DEBUG]


class TestExceptions:
    """异常层次测试"""

    def test_hierarchy(self):
        for exc in (ConfigurationError('x'), BoardFormatError('x'), GameStateError('x'),
                    SessionNotFoundError('x'), RelayError('x')):
            assert isinstance(exc, StrategyChessError)

    def test_error_codes(self):
        assert ConfigurationError('game').error_code == "CONFIG_ERROR"
        assert BoardFormatError('board').error_code == "BOARD_FORMAT_ERROR"
        assert GameStateError('state').error_code == "GAME_STATE_ERROR"
        assert SessionNotFoundError('abc').error_code == "SESSION_NOT_FOUND"
        assert RelayError('handle').error_code == "RELAY_ERROR"
        assert StrategyChessError('plain').error_code == "StrategyChessError"

    def test_message_includes_reason(self):
        error = BoardFormatError("自定义棋盘", "缺少王")
        assert error.message == "棋盘数据错误: 自定义棋盘 - 缺少王"
        assert str(error) == "[BOARD_FORMAT_ERROR] 棋盘数据错误: 自定义棋盘 - 缺少王"
        assert SessionNotFoundError('abc').session_id == 'abc'
