"""Source / Minecraft RCON 客户端核心：包编解码与会话"""

from .errors import (
    MalformedPacketError,
    PacketTooLargeError,
    RconAuthError,
    RconConnectionError,
    RconError,
    RconProtocolError,
    RconSessionError,
    ShortReadError,
    StreamError,
)
from .packet import (
    BAD_LOGIN_REQUEST_ID,
    MAX_PACKET_SIZE,
    Packet,
    PacketHeader,
    PacketType,
    decode_packet,
    encode_packet,
    read_packet,
)
from .session import RconSession, SessionState, rcon_session

__all__ = [
    "BAD_LOGIN_REQUEST_ID",
    "MAX_PACKET_SIZE",
    "MalformedPacketError",
    "Packet",
    "PacketHeader",
    "PacketTooLargeError",
    "PacketType",
    "RconAuthError",
    "RconConnectionError",
    "RconError",
    "RconProtocolError",
    "RconSession",
    "RconSessionError",
    "SessionState",
    "ShortReadError",
    "StreamError",
    "decode_packet",
    "encode_packet",
    "rcon_session",
]
