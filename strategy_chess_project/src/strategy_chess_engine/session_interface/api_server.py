"""
策略象棋 API服务器

提供RESTful会话接口和WebSocket联机中继，支持身份验证、限流等功能。
"""

import json
import time
import uuid
import logging
from datetime import datetime
from typing import Optional, List, Dict, Any
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Depends, Query, Request, WebSocket, WebSocketDisconnect, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import uvicorn

from .game_interface import GameInterface
from .relay import RelayHub
from ..config.game_config import GameConfig, ServerConfig
from ..rules_engine import Action, Color
from ..utils.exceptions import StrategyChessError, SessionNotFoundError, GameStateError, RelayError


API_VERSION = "1.0.0"


# ==================== 数据模型 ====================

class APIResponse(BaseModel):
    """API响应基础模型"""
    success: bool = True
    message: str = ""
    data: Optional[Any] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class ErrorResponse(BaseModel):
    """错误响应模型"""
    success: bool = False
    error_code: str
    error_message: str
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime = Field(default_factory=datetime.now)


class CreateSessionRequest(BaseModel):
    """创建会话请求模型"""
    board: Optional[List[List[Optional[Dict[str, Any]]]]] = None  # 自定义起始棋盘（传输格式）
    local_color: Optional[Color] = None


class SquareRequest(BaseModel):
    """单个格子请求模型"""
    row: int = Field(ge=0, le=7)
    col: int = Field(ge=0, le=7)

    @property
    def position(self):
        return (self.row, self.col)


class ActionRequest(BaseModel):
    """执行行动请求模型，可使用坐标记法或起止坐标"""
    notation: Optional[str] = None               # 如 "d2d5"
    from_pos: Optional[List[int]] = Field(default=None, min_length=2, max_length=2)
    to_pos: Optional[List[int]] = Field(default=None, min_length=2, max_length=2)


# ==================== 中间件和依赖 ====================

class RateLimiter:
    """简单的内存限流器"""

    def __init__(self, max_requests: int = 100, window_seconds: int = 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.requests: Dict[str, List[float]] = {}
        self.last_cleanup = time.time()

    def is_allowed(self, client_id: str) -> bool:
        """检查是否允许请求"""
        now = time.time()
        if now - self.last_cleanup >= self.window_seconds:
            self.cleanup(now)

        # 清理过期记录
        recent = [req_time for req_time in self.requests.get(client_id, [])
                  if now - req_time < self.window_seconds]

        allowed = len(recent) < self.max_requests
        if allowed:
            recent.append(now)

        # 不保留空记录
        if recent:
            self.requests[client_id] = recent
        else:
            self.requests.pop(client_id, None)
        return allowed

    def cleanup(self, now: Optional[float] = None):
        """删除时间窗口内没有请求的客户端"""
        now = time.time() if now is None else now
        for client_id in list(self.requests):
            recent = [req_time for req_time in self.requests[client_id]
                      if now - req_time < self.window_seconds]
            if recent:
                self.requests[client_id] = recent
            else:
                del self.requests[client_id]
        self.last_cleanup = now


class APIKeyAuth:
    """API密钥认证"""

    def __init__(self, api_keys: Optional[List[str]] = None):
        self.api_keys = set(api_keys or [])

    async def __call__(self, credentials: Optional[HTTPAuthorizationCredentials] = Depends(HTTPBearer(auto_error=False))):
        """验证API密钥"""
        # 如果没有配置API密钥，则跳过验证
        if not self.api_keys:
            return None

        if not credentials:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="需要API密钥认证",
                headers={"WWW-Authenticate": "Bearer"},
            )

        if credentials.credentials not in self.api_keys:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="无效的API密钥",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return credentials.credentials


def _error_content(error_code: str, error_message: str) -> Dict[str, Any]:
    return ErrorResponse(error_code=error_code, error_message=error_message).model_dump(mode='json')


# ==================== API服务器类 ====================

class APIServer:
    """策略象棋 API服务器"""

    def __init__(self,
                 game_config: Optional[GameConfig] = None,
                 api_keys: Optional[List[str]] = None,
                 rate_limit_requests: int = 100,
                 rate_limit_window: int = 60,
                 cors_origins: Optional[List[str]] = None,
                 trusted_hosts: Optional[List[str]] = None,
                 relay_path: str = "/ws"):
        """
        初始化API服务器

        Args:
            game_config: 游戏配置
            api_keys: API密钥列表，如果为空则不启用认证
            rate_limit_requests: 限流请求数
            rate_limit_window: 限流时间窗口（秒）
            cors_origins: CORS允许的源
            trusted_hosts: 信任的主机列表
            relay_path: WebSocket中继路径
        """
        self.logger = logging.getLogger(__name__)

        self.game_config = game_config or GameConfig()
        self.game_interface = GameInterface(self.game_config)
        self.relay_hub = RelayHub(game_id_length=self.game_config.game_id_length)

        # 认证和限流
        self.api_auth = APIKeyAuth(api_keys)
        self.rate_limiter = RateLimiter(rate_limit_requests, rate_limit_window)

        self.cors_origins = cors_origins or ["*"]
        self.trusted_hosts = trusted_hosts or ["*"]
        self.relay_path = relay_path

        self.app = self._create_app()

        self.logger.info("API服务器初始化完成")

    def _create_app(self) -> FastAPI:
        """创建FastAPI应用"""

        @asynccontextmanager
        async def lifespan(app: FastAPI):
            """应用生命周期管理"""
            self.logger.info("API服务器启动")
            yield
            self.logger.info("API服务器关闭")

        app = FastAPI(
            title="策略象棋 API",
            description="策略象棋规则引擎的会话接口与联机中继",
            version=API_VERSION,
            docs_url="/docs",
            redoc_url="/redoc",
            openapi_url="/openapi.json",
            lifespan=lifespan
        )

        self._add_middlewares(app)
        self._add_routes(app)
        self._add_relay_route(app)
        self._add_exception_handlers(app)

        return app

    def _add_middlewares(self, app: FastAPI):
        """添加中间件"""

        app.add_middleware(
            CORSMiddleware,
            allow_origins=self.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        if self.trusted_hosts != ["*"]:
            app.add_middleware(
                TrustedHostMiddleware,
                allowed_hosts=self.trusted_hosts
            )

        app.add_middleware(GZipMiddleware, minimum_size=1000)

        # 请求处理时间中间件
        @app.middleware("http")
        async def add_process_time_header(request: Request, call_next):
            start_time = time.perf_counter()
            response = await call_next(request)
            process_time = time.perf_counter() - start_time
            response.headers["X-Process-Time"] = str(process_time)
            return response

        # 限流中间件
        @app.middleware("http")
        async def rate_limit_middleware(request: Request, call_next):
            client_ip = request.client.host if request.client else "unknown"

            if not self.rate_limiter.is_allowed(client_ip):
                return JSONResponse(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    content=_error_content("RATE_LIMIT_EXCEEDED", "请求频率过高，请稍后再试")
                )

            return await call_next(request)

    def _add_routes(self, app: FastAPI):
        """添加API路由"""

        # ==================== 健康检查 ====================

        @app.get("/health", response_model=APIResponse, tags=["健康检查"])
        async def health_check():
            """健康检查接口"""
            return APIResponse(
                message="服务正常运行",
                data={
                    "status": "healthy",
                    "timestamp": datetime.now(),
                    "version": API_VERSION
                }
            )

        # ==================== 会话管理 ====================

        @app.post("/sessions", response_model=APIResponse, tags=["会话管理"])
        async def create_session(
            request: CreateSessionRequest,
            api_key: Optional[str] = Depends(self.api_auth)
        ):
            """创建新的游戏会话，默认使用标准开局"""
            board = (self.game_interface.parse_board(request.board)
                     if request.board is not None else None)
            session_id = self.game_interface.create_session(board=board,
                                                            local_color=request.local_color)
            return APIResponse(
                message="会话创建成功",
                data=self.game_interface.get_game_status(session_id)
            )

        @app.get("/sessions", response_model=APIResponse, tags=["会话管理"])
        async def list_sessions(api_key: Optional[str] = Depends(self.api_auth)):
            """获取所有会话列表"""
            sessions = self.game_interface.list_sessions()
            return APIResponse(
                message="获取会话列表成功",
                data={"sessions": sessions, "count": len(sessions)}
            )

        @app.get("/sessions/{session_id}", response_model=APIResponse, tags=["会话管理"])
        async def get_session_status(
            session_id: str,
            api_key: Optional[str] = Depends(self.api_auth)
        ):
            """获取会话状态"""
            return APIResponse(
                message="获取会话状态成功",
                data=self.game_interface.get_game_status(session_id)
            )

        @app.delete("/sessions/{session_id}", response_model=APIResponse, tags=["会话管理"])
        async def delete_session(
            session_id: str,
            api_key: Optional[str] = Depends(self.api_auth)
        ):
            """删除会话"""
            if not self.game_interface.delete_session(session_id):
                raise SessionNotFoundError(session_id)
            return APIResponse(message="会话删除成功")

        @app.post("/sessions/{session_id}/reset", response_model=APIResponse, tags=["会话管理"])
        async def reset_session(
            session_id: str,
            api_key: Optional[str] = Depends(self.api_auth)
        ):
            """重置会话为开局局面"""
            self.game_interface.reset_session(session_id)
            return APIResponse(
                message="会话已重置",
                data=self.game_interface.get_game_status(session_id)
            )

        # ==================== 游戏控制 ====================

        @app.post("/sessions/{session_id}/select", response_model=APIResponse, tags=["游戏控制"])
        async def select_square(
            session_id: str,
            request: SquareRequest,
            api_key: Optional[str] = Depends(self.api_auth)
        ):
            """选择行动方的棋子，返回高亮的移动和攻击集合"""
            selected = self.game_interface.select_square(session_id, request.position)
            return APIResponse(
                success=selected,
                message="选择成功" if selected else "无法选择该格子",
                data=self.game_interface.get_game_status(session_id)
            )

        @app.post("/sessions/{session_id}/click", response_model=APIResponse, tags=["游戏控制"])
        async def click_square(
            session_id: str,
            request: SquareRequest,
            api_key: Optional[str] = Depends(self.api_auth)
        ):
            """转发一次棋盘点击"""
            outcome = self.game_interface.click_square(session_id, request.position)
            data = self.game_interface.get_game_status(session_id)
            data["outcome"] = outcome.value
            return APIResponse(message=f"点击结果: {outcome.value}", data=data)

        @app.post("/sessions/{session_id}/actions", response_model=APIResponse, tags=["游戏控制"])
        async def perform_action(
            session_id: str,
            request: ActionRequest,
            api_key: Optional[str] = Depends(self.api_auth)
        ):
            """执行一次行动（坐标记法或起止坐标）"""
            if request.notation:
                try:
                    from_pos, to_pos = Action.parse_coordinate_notation(request.notation)
                except ValueError as e:
                    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
            elif request.from_pos is not None and request.to_pos is not None:
                from_pos, to_pos = tuple(request.from_pos), tuple(request.to_pos)
            else:
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail="需要提供 notation 或 from_pos/to_pos"
                )

            action = self.game_interface.perform_action(session_id, from_pos, to_pos)
            if action is None:
                raise GameStateError(f"行动 {from_pos} -> {to_pos}", "不是合法行动")

            data = self.game_interface.get_game_status(session_id)
            data["action"] = action.to_dict()
            return APIResponse(message=f"行动成功: {action}", data=data)

        @app.get("/sessions/{session_id}/reachability", response_model=APIResponse, tags=["游戏控制"])
        async def get_reachability(
            session_id: str,
            row: int = Query(ge=0, le=7),
            col: int = Query(ge=0, le=7),
            api_key: Optional[str] = Depends(self.api_auth)
        ):
            """查询指定格子的移动和攻击集合"""
            return APIResponse(
                message="获取可达性成功",
                data=self.game_interface.get_reachability(session_id, (row, col))
            )

        # ==================== 统计信息 ====================

        @app.get("/statistics", response_model=APIResponse, tags=["统计信息"])
        async def get_statistics(api_key: Optional[str] = Depends(self.api_auth)):
            """获取全局统计信息"""
            stats = self.game_interface.get_statistics()
            stats["relay"] = self.relay_hub.snapshot()
            return APIResponse(message="获取统计信息成功", data=stats)

    def _add_relay_route(self, app: FastAPI):
        """添加WebSocket中继路由"""

        @app.websocket(self.relay_path)
        async def relay_endpoint(websocket: WebSocket):
            await websocket.accept()
            conn_id = uuid.uuid4().hex
            await self.relay_hub.register(conn_id, websocket)
            try:
                while True:
                    text = await websocket.receive_text()
                    try:
                        msg = json.loads(text)
                    except json.JSONDecodeError:
                        msg = None
                    if not isinstance(msg, dict):
                        await websocket.send_text(json.dumps({"type": "error", "message": "Invalid message"}))
                        continue
                    try:
                        await self.relay_hub.handle(conn_id, msg)
                    except RelayError as e:
                        await websocket.send_text(json.dumps({"type": "error", "message": e.message}))
            except WebSocketDisconnect:
                self.logger.debug(f"中继连接关闭: {conn_id}")
            finally:
                await self.relay_hub.disconnect(conn_id)

    def _add_exception_handlers(self, app: FastAPI):
        """添加异常处理器"""

        @app.exception_handler(SessionNotFoundError)
        async def session_not_found_handler(request: Request, exc: SessionNotFoundError):
            return JSONResponse(
                status_code=status.HTTP_404_NOT_FOUND,
                content=_error_content(exc.error_code, exc.message)
            )

        @app.exception_handler(StrategyChessError)
        async def strategy_chess_error_handler(request: Request, exc: StrategyChessError):
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content=_error_content(exc.error_code, exc.message)
            )

        @app.exception_handler(Exception)
        async def unexpected_error_handler(request: Request, exc: Exception):
            self.logger.error(f"请求处理失败: {request.url.path}, 错误: {exc}")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content=_error_content("INTERNAL_ERROR", "服务器内部错误")
            )

    def run(self, host: str = "0.0.0.0", port: int = 8000, **kwargs):
        """运行API服务器"""
        uvicorn.run(self.app, host=host, port=port, **kwargs)


# ==================== 工厂函数 ====================

def create_api_server(server_config: Optional[ServerConfig] = None,
                      game_config: Optional[GameConfig] = None,
                      **kwargs) -> APIServer:
    """
    创建API服务器实例

    Args:
        server_config: 服务器配置，关键字参数优先于配置中的值
        game_config: 游戏配置
    """
    server_config = server_config or ServerConfig()
    options = {
        'api_keys': server_config.api_keys,
        'rate_limit_requests': server_config.rate_limit_requests,
        'rate_limit_window': server_config.rate_limit_window,
        'cors_origins': server_config.cors_origins,
        'trusted_hosts': server_config.trusted_hosts,
        'relay_path': server_config.relay_path,
    }
    options.update(kwargs)
    return APIServer(game_config=game_config, **options)
