"""RCON 异常类型"""

from __future__ import annotations


class RconError(Exception):
    pass


class RconConnectionError(RconError, ConnectionError):
    """无法建立连接，或交互过程中传输层失败（超时、重置、对端关闭）"""


class StreamError(RconConnectionError):
    pass


class RconProtocolError(RconError):
    """收到的数据无法解析为合法的 RCON 包；连接的分帧已不可信，应重连"""


class ShortReadError(RconProtocolError, RconConnectionError):
    """对端在一个完整的包到达之前关闭了连接"""


class MalformedPacketError(RconProtocolError):
    pass


class PacketTooLargeError(RconError, ValueError):
    """待发送的包超过上限；此时尚未写出任何字节，会话仍可继续使用"""

    def __init__(self, size: int, limit: int):
        super().__init__(f"RCON packet too large: size={size} >= {limit}")
        self.size = size
        self.limit = limit


class RconAuthError(RconError):
    pass


class RconSessionError(RconError):
    """会话已失败或已关闭，必须重新连接"""
