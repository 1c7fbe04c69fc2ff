"""
异常定义

定义策略象棋引擎的各种异常类型。

规则计算（走法、攻击范围、回合推进）本身从不抛出异常，
这里的异常只出现在配置、棋盘数据解析、会话管理和网络中继这些外围环节。
"""


class StrategyChessError(Exception):
    """
    策略象棋基础异常

    所有策略象棋相关异常的基类。
    """

    def __init__(self, message: str, error_code: str = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__

    def __str__(self):
        return f"[{self.error_code}] {self.message}"


class ConfigurationError(StrategyChessError):
    """
    配置错误异常

    当配置参数无效时抛出。
    """

    def __init__(self, config_name: str, reason: str = ""):
        message = f"配置错误 - {config_name}"
        if reason:
            message += f": {reason}"
        super().__init__(message, "CONFIG_ERROR")
        self.config_name = config_name
        self.reason = reason


class BoardFormatError(StrategyChessError):
    """
    棋盘数据格式异常

    当棋盘快照（JSON/字典）无法解析为合法的8x8棋盘时抛出。
    """

    def __init__(self, description: str, reason: str = ""):
        message = f"棋盘数据错误: {description}"
        if reason:
            message += f" - {reason}"
        super().__init__(message, "BOARD_FORMAT_ERROR")
        self.description = description
        self.reason = reason


class GameStateError(StrategyChessError):
    """
    游戏状态异常

    当游戏状态无效或不一致时抛出。
    """

    def __init__(self, state_description: str, reason: str = ""):
        message = f"游戏状态错误: {state_description}"
        if reason:
            message += f" - {reason}"
        super().__init__(message, "GAME_STATE_ERROR")
        self.state_description = state_description
        self.reason = reason


class SessionNotFoundError(StrategyChessError):
    """会话未找到异常"""

    def __init__(self, session_id: str):
        super().__init__(f"会话不存在: {session_id}", "SESSION_NOT_FOUND")
        self.session_id = session_id


class RelayError(StrategyChessError):
    """
    中继相关异常

    当中继消息无法处理时抛出（例如未知的消息类型）。
    """

    def __init__(self, operation: str, reason: str = ""):
        message = f"中继错误 - {operation}"
        if reason:
            message += f": {reason}"
        super().__init__(message, "RELAY_ERROR")
        self.operation = operation
        self.reason = reason
