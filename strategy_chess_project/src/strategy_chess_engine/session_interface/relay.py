"""
联机中继

在两个参与者之间转发完整的棋盘快照和行动方，不做任何合法性校验。
消息格式沿用客户端使用的事件名：

入站: createGame / joinGame {gameId} / move {gameId, board, currentPlayer} / gameOver {gameId, winner}
出站: gameCreated / gameStart / gameJoined / opponentMove / gameOver / playerDisconnected / error
"""

import asyncio
import json
import logging
import secrets
import string
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple

from ..utils.exceptions import RelayError
from ..utils.logger import LoggerMixin


GAME_NOT_FOUND_MESSAGE = "Game not found or full"

_GAME_ID_ALPHABET = string.ascii_lowercase + string.digits


class RelayConnection(Protocol):
    """中继连接，FastAPI 的 WebSocket 满足该接口"""

    async def send_text(self, data: str) -> None:
        ...


@dataclass
class RelayGame:
    """中继中的一局对局"""
    game_id: str
    white_player: str
    black_player: Optional[str] = None
    board: Optional[List[List[Any]]] = None   # 最近一次转发的棋盘快照
    current_player: str = 'white'
    winner: Optional[str] = None
    players: List[str] = field(default_factory=list)

    def __post_init__(self):
        if not self.players:
            self.players = [self.white_player]

    @property
    def is_full(self) -> bool:
        return len(self.players) >= 2

    def others(self, conn_id: str) -> List[str]:
        return [player for player in self.players if player != conn_id]


Outbox = List[Tuple[str, Dict[str, Any]]]


class RelayHub(LoggerMixin):
    """
    中继中心

    对局表只保存在进程内存中，由一把 asyncio.Lock 保护。
    消息在释放锁之后发送，发送失败的连接直接断开，不重试。
    """

    def __init__(self, game_id_length: int = 7):
        self.game_id_length = game_id_length
        self.clients: Dict[str, RelayConnection] = {}
        self.games: Dict[str, RelayGame] = {}
        self.lock = asyncio.Lock()

    def _new_game_id(self) -> str:
        while True:
            game_id = ''.join(secrets.choice(_GAME_ID_ALPHABET)
                              for _ in range(self.game_id_length))
            if game_id not in self.games:
                return game_id

    async def register(self, conn_id: str, conn: RelayConnection):
        """登记新连接"""
        async with self.lock:
            self.clients[conn_id] = conn
        self.log_debug(f"中继连接建立: {conn_id}")

    async def create_game(self, conn_id: str) -> str:
        """
        创建对局，创建者执白

        Returns:
            str: 对局ID
        """
        async with self.lock:
            game_id = self._new_game_id()
            self.games[game_id] = RelayGame(game_id=game_id, white_player=conn_id)

        self.log_game_event(game_id, "中继对局创建")
        await self._deliver([(conn_id, {'type': 'gameCreated', 'gameId': game_id, 'color': 'white'})])
        return game_id

    async def join_game(self, conn_id: str, game_id: Optional[str]) -> bool:
        """
        加入对局，加入者执黑

        对局不存在或已满时只向加入者发送错误消息。

        Returns:
            bool: 是否加入成功
        """
        async with self.lock:
            game = self.games.get(game_id) if game_id else None
            if game is None or game.is_full or conn_id in game.players:
                outbox: Outbox = [(conn_id, {'type': 'error', 'message': GAME_NOT_FOUND_MESSAGE})]
                joined = False
            else:
                game.players.append(conn_id)
                game.black_player = conn_id
                start = {'type': 'gameStart',
                         'whitePlayer': game.white_player,
                         'blackPlayer': game.black_player}
                outbox = [(player, start) for player in game.players]
                outbox.append((conn_id, {'type': 'gameJoined', 'gameId': game_id, 'color': 'black'}))
                joined = True

        if joined:
            self.log_game_event(game_id, f"玩家加入: {conn_id}")
        else:
            self.log_game_event(game_id, f"加入失败: {conn_id}", logging.WARNING)
        await self._deliver(outbox)
        return joined

    async def submit_action(self, conn_id: str, game_id: Optional[str],
                            board: Any, current_player: Any) -> bool:
        """
        转发行动后的棋盘快照和下一个行动方给对手

        不校验棋盘内容；对局已结束或发送者不在对局中时忽略。

        Returns:
            bool: 是否已转发
        """
        async with self.lock:
            game = self.games.get(game_id) if game_id else None
            if game is None or conn_id not in game.players or game.winner is not None:
                outbox: Outbox = []
            else:
                game.board = board
                game.current_player = current_player
                move = {'type': 'opponentMove', 'board': board, 'currentPlayer': current_player}
                outbox = [(player, move) for player in game.others(conn_id)]

        if not outbox:
            self.log_game_event(game_id, f"忽略行动: {conn_id}", logging.DEBUG)
            return False
        await self._deliver(outbox)
        return True

    async def announce_result(self, game_id: Optional[str], winner: Any) -> bool:
        """
        向对局双方广播终局结果

        Returns:
            bool: 对局是否存在
        """
        async with self.lock:
            game = self.games.get(game_id) if game_id else None
            if game is None:
                outbox: Outbox = []
            else:
                game.winner = winner
                outbox = [(player, {'type': 'gameOver', 'winner': winner})
                          for player in game.players]

        if game is None:
            return False
        self.log_game_event(game_id, f"对局结束，胜方: {winner}")
        await self._deliver(outbox)
        return True

    async def disconnect(self, conn_id: str):
        """
        断开连接

        通知该连接所在对局的其余参与者，并丢弃这些对局。
        """
        async with self.lock:
            self.clients.pop(conn_id, None)
            outbox: Outbox = []
            for game_id, game in list(self.games.items()):
                if conn_id in game.players:
                    outbox.extend((player, {'type': 'playerDisconnected'})
                                  for player in game.others(conn_id))
                    del self.games[game_id]
                    self.log_game_event(game_id, f"玩家 {conn_id} 离开，对局已丢弃")

        await self._deliver(outbox)

    async def handle(self, conn_id: str, msg: Dict[str, Any]):
        """
        分发一条入站消息

        Args:
            conn_id: 连接ID
            msg: 已解析的JSON消息

        Raises:
            RelayError: 未知的消息类型
        """
        msg_type = msg.get('type')

        if msg_type == 'createGame':
            await self.create_game(conn_id)
        elif msg_type == 'joinGame':
            await self.join_game(conn_id, msg.get('gameId'))
        elif msg_type == 'move':
            await self.submit_action(conn_id, msg.get('gameId'),
                                     msg.get('board'), msg.get('currentPlayer'))
        elif msg_type == 'gameOver':
            await self.announce_result(msg.get('gameId'), msg.get('winner'))
        else:
            self.log_warning(f"未知的中继消息类型: {msg_type}")
            raise RelayError("handle", f"未知的消息类型: {msg_type}")

    async def _send(self, conn_id: str, message: Dict[str, Any]) -> bool:
        conn = self.clients.get(conn_id)
        if conn is None:
            return False
        try:
            await conn.send_text(json.dumps(message))
            return True
        except Exception as e:
            self.log_warning(f"中继发送失败，断开连接 {conn_id}: {e}")
            return False

    async def _deliver(self, outbox: Outbox):
        """依次发送消息，发送失败的连接按断开处理"""
        dead: List[str] = []
        for conn_id, message in outbox:
            if conn_id in dead:
                continue
            if not await self._send(conn_id, message) and conn_id in self.clients:
                dead.append(conn_id)
        for conn_id in dead:
            await self.disconnect(conn_id)

    def snapshot(self) -> Dict[str, Any]:
        """中继状态摘要"""
        return {
            'connections': len(self.clients),
            'games': [
                {
                    'game_id': game.game_id,
                    'players': len(game.players),
                    'current_player': game.current_player,
                    'winner': game.winner,
                    'board': game.board
                }
                for game in self.games.values()
            ]
        }
