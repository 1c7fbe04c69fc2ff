"""
游戏接口和会话管理

提供对弈会话管理功能，包括选择状态机、行动应用、
远程状态同步和会话生命周期管理。
"""

import uuid
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any, Callable
from dataclasses import dataclass, field
from enum import Enum

from ..config.game_config import GameConfig, DEFAULT_GAME_CONFIG
from ..rules_engine import (
    ChessBoard, Color, Position, Action, TurnController, TurnOutcome,
    BoardValidator, RuleEngine, legal_moves, legal_attacks
)
from ..utils.exceptions import BoardFormatError, GameStateError, SessionNotFoundError
from ..utils.logger import LoggerMixin


class GameResult(Enum):
    """游戏结果枚举"""
    ONGOING = "ongoing"         # 进行中
    WHITE_WIN = "white_win"     # 白方胜
    BLACK_WIN = "black_win"     # 黑方胜

    @classmethod
    def for_winner(cls, color: Color) -> 'GameResult':
        return cls.WHITE_WIN if color is Color.WHITE else cls.BLACK_WIN

    @property
    def winner(self) -> Optional[Color]:
        if self is GameResult.WHITE_WIN:
            return Color.WHITE
        if self is GameResult.BLACK_WIN:
            return Color.BLACK
        return None


class ClickOutcome(Enum):
    """一次点击的处理结果"""
    SELECTED = "selected"       # 选中己方棋子
    MOVED = "moved"             # 完成移动
    CAPTURED = "captured"       # 完成吃子
    CLEARED = "cleared"         # 目标不可达，取消选择
    IGNORED = "ignored"         # 点击被忽略


Listener = Callable[['GameSession', TurnOutcome], None]

logger = logging.getLogger(__name__)


@dataclass
class GameSession:
    """
    游戏会话

    状态机：空闲 → 已选择 → 空闲。
    选择只缓存移动集合和攻击集合，行动方只会在完成行动后改变。
    """
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    board: ChessBoard = field(default_factory=ChessBoard.initial)
    active_color: Color = Color.WHITE

    # 选择状态
    selected: Optional[Position] = None
    cached_moves: List[Position] = field(default_factory=list)
    cached_attacks: List[Position] = field(default_factory=list)

    result: GameResult = GameResult.ONGOING
    local_color: Optional[Color] = None   # 联机时本地玩家的阵营

    # 统计信息
    last_action: Optional[Action] = None
    action_count: int = 0
    created_at: datetime = field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None

    listeners: List[Listener] = field(default_factory=list, repr=False, compare=False)
    controller: TurnController = field(default_factory=TurnController, repr=False, compare=False)

    @property
    def is_finished(self) -> bool:
        return self.result is not GameResult.ONGOING

    @property
    def winner(self) -> Optional[Color]:
        return self.result.winner

    def _accepts_input(self) -> bool:
        if self.is_finished:
            return False
        return self.local_color is None or self.local_color is self.active_color

    def select(self, pos: Position) -> bool:
        """
        选择行动方的棋子

        Args:
            pos: 位置坐标

        Returns:
            bool: 是否选择成功，空格或对方棋子返回False且不改变状态
        """
        if not self._accepts_input():
            return False
        piece = self.board.get_piece_at(pos)
        if piece is None or piece.color is not self.active_color:
            return False

        self.selected = pos
        self.cached_moves = legal_moves(self.board, pos)
        self.cached_attacks = legal_attacks(self.board, pos)
        return True

    def clear_selection(self):
        """清除选择和高亮缓存"""
        self.selected = None
        self.cached_moves = []
        self.cached_attacks = []

    def click(self, pos: Position) -> ClickOutcome:
        """
        处理一次点击

        空闲时尝试选择；已选择时目标在攻击集合中则吃子，在移动集合中则移动，
        否则取消选择。无论结果如何，已选择状态都会被清除。

        Args:
            pos: 点击的位置

        Returns:
            ClickOutcome: 处理结果
        """
        if not self._accepts_input():
            return ClickOutcome.IGNORED

        if self.selected is None:
            return ClickOutcome.SELECTED if self.select(pos) else ClickOutcome.IGNORED

        origin = self.selected
        moves, attacks = self.cached_moves, self.cached_attacks
        self.clear_selection()

        outcome = self.controller.play(self.board, origin, pos, self.active_color,
                                       moves=moves, attacks=attacks)
        if outcome is None:
            return ClickOutcome.CLEARED

        self._commit(outcome)
        return ClickOutcome.CAPTURED if outcome.action.is_capture else ClickOutcome.MOVED

    def _commit(self, outcome: TurnOutcome):
        """提交行动结果并通知监听者"""
        self.board = outcome.board
        self.last_action = outcome.action
        self.action_count += 1
        self.active_color = outcome.next_color

        if outcome.is_terminal:
            self.result = GameResult.for_winner(outcome.winner)
            self.finished_at = datetime.now()
            logger.info(f"会话 {self.session_id} 结束: {self.result.value}")

        for listener in list(self.listeners):
            try:
                listener(self, outcome)
            except Exception as e:
                logger.error(f"会话监听者处理失败: {e}")

    def add_listener(self, listener: Listener):
        """注册行动完成后的回调（用于向中继转发局面）"""
        self.listeners.append(listener)

    def legal_moves_for(self, pos: Position) -> List[Position]:
        """当前棋盘上指定棋子的移动目标"""
        return legal_moves(self.board, pos)

    def legal_attacks_for(self, pos: Position) -> List[Position]:
        """当前棋盘上指定棋子的攻击目标"""
        return legal_attacks(self.board, pos)

    def reset(self):
        """恢复开局局面，白方先行"""
        self.board = ChessBoard.initial()
        self.active_color = Color.WHITE
        self.clear_selection()
        self.result = GameResult.ONGOING
        self.last_action = None
        self.action_count = 0
        self.finished_at = None

    def apply_remote_state(self, board: ChessBoard, active_color: Color) -> bool:
        """
        应用中继转发的局面

        整体替换本地棋盘，不做合并和合法性校验。终局后忽略。

        Returns:
            bool: 是否已应用
        """
        if self.is_finished:
            return False
        self.board = board
        self.active_color = active_color
        self.clear_selection()
        return True

    def apply_remote_result(self, winner: Color):
        """应用中继转发的终局结果"""
        if self.is_finished:
            return
        self.result = GameResult.for_winner(winner)
        self.finished_at = datetime.now()
        self.clear_selection()

    def to_dict(self) -> Dict[str, Any]:
        """转换为字典"""
        return {
            'session_id': self.session_id,
            'board': self.board.to_dict(),
            'active_color': self.active_color.value,
            'selected': list(self.selected) if self.selected else None,
            'moves': [list(pos) for pos in self.cached_moves],
            'attacks': [list(pos) for pos in self.cached_attacks],
            'result': self.result.value,
            'winner': self.winner.value if self.winner else None,
            'local_color': self.local_color.value if self.local_color else None,
            'last_action': self.last_action.to_dict() if self.last_action else None,
            'action_count': self.action_count,
            'created_at': self.created_at.isoformat(),
            'finished_at': self.finished_at.isoformat() if self.finished_at else None
        }


class GameInterface(LoggerMixin):
    """游戏接口和会话管理器"""

    def __init__(self, game_config: Optional[GameConfig] = None):
        """
        初始化游戏接口

        Args:
            game_config: 游戏配置
        """
        self.config = game_config or DEFAULT_GAME_CONFIG

        # 会话之间不共享可变状态
        self.sessions: Dict[str, GameSession] = {}

        self.validator = BoardValidator()
        self.rule_engine = RuleEngine()

        self.log_info(f"游戏接口初始化完成，会话上限: {self.config.max_sessions}")

    def create_session(self, board: Optional[ChessBoard] = None,
                       local_color: Optional[Color] = None,
                       session_id: Optional[str] = None) -> str:
        """
        创建新的游戏会话

        Args:
            board: 自定义起始棋盘，None表示标准开局
            local_color: 联机时本地玩家的阵营
            session_id: 指定会话ID（如中继对局ID）

        Returns:
            会话ID

        Raises:
            GameStateError: 会话数量达到上限或ID已存在
            BoardFormatError: 自定义棋盘未通过校验
        """
        if len(self.sessions) >= self.config.max_sessions:
            raise GameStateError(f"会话数量 {len(self.sessions)}", "已达到上限")
        if session_id is not None and session_id in self.sessions:
            raise GameStateError(f"会话 {session_id}", "ID已存在")

        if board is not None and self.config.validate_custom_boards:
            is_valid, errors = self.validator.full_validation(board)
            if not is_valid:
                raise BoardFormatError("自定义棋盘", "; ".join(errors))

        session = GameSession(board=board if board is not None else ChessBoard.initial(),
                              local_color=local_color)
        if session_id is not None:
            session.session_id = session_id
        self.sessions[session.session_id] = session

        self.log_game_event(session.session_id, "创建新会话")
        return session.session_id

    def parse_board(self, data: Any) -> ChessBoard:
        """
        解析调用方提交的传输格式棋盘

        Raises:
            BoardFormatError: 数据无法解析或未通过原始数据校验
        """
        if self.config.validate_custom_boards:
            is_valid, errors = self.validator.validate_board_data(data)
            if not is_valid:
                raise BoardFormatError("自定义棋盘", "; ".join(errors))
        return ChessBoard.from_dict(data)

    def get_session(self, session_id: str) -> GameSession:
        """
        获取会话对象

        Raises:
            SessionNotFoundError: 会话不存在
        """
        if session_id not in self.sessions:
            raise SessionNotFoundError(session_id)
        return self.sessions[session_id]

    def list_sessions(self) -> List[Dict[str, Any]]:
        """
        列出所有会话

        Returns:
            会话信息列表
        """
        return [
            {
                'session_id': session_id,
                'active_color': session.active_color.value,
                'result': session.result.value,
                'action_count': session.action_count,
                'created_at': session.created_at.isoformat(),
                'finished_at': session.finished_at.isoformat() if session.finished_at else None
            }
            for session_id, session in self.sessions.items()
        ]

    def delete_session(self, session_id: str) -> bool:
        """
        删除会话

        Returns:
            是否成功删除
        """
        if self.sessions.pop(session_id, None) is None:
            return False
        self.log_game_event(session_id, "会话已删除")
        return True

    def reset_session(self, session_id: str) -> GameSession:
        """重置会话为开局局面"""
        session = self.get_session(session_id)
        session.reset()
        self.log_game_event(session_id, "会话已重置")
        return session

    def select_square(self, session_id: str, pos: Position) -> bool:
        """
        在空闲状态下选择棋子

        已有选择时先清除，再尝试选择新的格子。
        """
        session = self.get_session(session_id)
        session.clear_selection()
        return session.select(pos)

    def click_square(self, session_id: str, pos: Position) -> ClickOutcome:
        """转发一次点击到会话状态机"""
        return self.get_session(session_id).click(pos)

    def perform_action(self, session_id: str, from_pos: Position,
                       to_pos: Position) -> Optional[Action]:
        """
        执行一次完整的行动（选择 + 目标点击）

        Returns:
            Optional[Action]: 已执行的行动，非法时返回None且棋盘不变
        """
        session = self.get_session(session_id)
        session.clear_selection()
        if not session.select(from_pos):
            return None
        if session.click(to_pos) in (ClickOutcome.MOVED, ClickOutcome.CAPTURED):
            return session.last_action
        return None

    def get_reachability(self, session_id: str, pos: Position) -> Dict[str, Any]:
        """
        查询指定格子的可达性

        Returns:
            {'position', 'piece', 'moves', 'attacks'}
        """
        session = self.get_session(session_id)
        piece = session.board.get_piece_at(pos)
        return {
            'position': list(pos),
            'piece': piece.to_dict() if piece else None,
            'moves': [list(p) for p in session.legal_moves_for(pos)],
            'attacks': [list(p) for p in session.legal_attacks_for(pos)]
        }

    def get_game_status(self, session_id: str) -> Dict[str, Any]:
        """
        获取游戏状态

        Returns:
            会话字典，附带行动方的可行动作数量
        """
        session = self.get_session(session_id)
        status = session.to_dict()
        engine_status = self.rule_engine.get_game_status(session.board, session.active_color)
        status['legal_action_count'] = engine_status['legal_action_count']
        status['piece_counts'] = engine_status['piece_counts']
        return status

    def get_statistics(self) -> Dict[str, Any]:
        """
        获取所有会话的统计信息
        """
        total_sessions = len(self.sessions)
        finished_sessions = sum(1 for s in self.sessions.values() if s.is_finished)
        total_actions = sum(s.action_count for s in self.sessions.values())

        return {
            'total_sessions': total_sessions,
            'finished_sessions': finished_sessions,
            'active_sessions': total_sessions - finished_sessions,
            'total_actions': total_actions,
            'white_wins': sum(1 for s in self.sessions.values()
                              if s.result is GameResult.WHITE_WIN),
            'black_wins': sum(1 for s in self.sessions.values()
                              if s.result is GameResult.BLACK_WIN)
        }

    def handle_relay_event(self, session_id: str, event: Dict[str, Any]) -> bool:
        """
        处理中继转发到本地会话的事件

        opponentMove: 整体替换棋盘和行动方
        gameOver: 记录终局结果
        playerDisconnected: 丢弃本地会话

        Returns:
            bool: 事件是否改变了本地状态

        Raises:
            BoardFormatError: 转发的棋盘无法解析
        """
        event_type = event.get('type')

        if event_type == 'playerDisconnected':
            self.log_game_event(session_id, "对手断开连接，丢弃会话")
            return self.delete_session(session_id)

        session = self.get_session(session_id)

        if event_type == 'opponentMove':
            board = ChessBoard.from_dict(event.get('board'))
            try:
                active = Color(event.get('currentPlayer'))
            except ValueError as e:
                raise BoardFormatError("行动方", str(e)) from e
            return session.apply_remote_state(board, active)

        if event_type == 'gameOver':
            try:
                winner = Color(event.get('winner'))
            except ValueError as e:
                raise BoardFormatError("胜方", str(e)) from e
            finished_before = session.is_finished
            session.apply_remote_result(winner)
            return not finished_before

        self.log_game_event(session_id, f"未知的中继事件: {event_type}", logging.WARNING)
        return False
