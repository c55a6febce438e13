"""RCON 包编解码（纯函数 + 一个基于 asyncio.StreamReader 的读包函数）

线上格式（全部为 little-endian int32）：
    size | request_id | packet_type | payload | 00 00
size 为 size 字段之后的剩余字节数，即 4 + 4 + len(payload) + 2。
"""

from __future__ import annotations

import asyncio
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .errors import MalformedPacketError, PacketTooLargeError, ShortReadError, StreamError


class PacketType(IntEnum):
    RESPONSE_VALUE = 0
    COMMAND = 2
    AUTH_RESPONSE = 2  # 与 COMMAND 同数值但语义不同
    AUTH = 3


BAD_LOGIN_REQUEST_ID = -1

HEADER_SIZE = 12
PADDING = b"\x00\x00"
MIN_PACKET_SIZE = 4 + 4 + len(PADDING)

# 不少服务端（Notchian 等）不接受更大的请求包
MAX_PACKET_SIZE = 1460
# 仅用于防御异常/恶意 size
MAX_RESPONSE_SIZE = 1024 * 1024

_HEADER = struct.Struct("<iii")


@dataclass(frozen=True)
class PacketHeader:
    size: int
    request_id: int
    packet_type: int

    @property
    def bad_login(self) -> bool:
        return self.request_id == BAD_LOGIN_REQUEST_ID


@dataclass(frozen=True)
class Packet:
    header: PacketHeader
    payload: bytes

    @property
    def request_id(self) -> int:
        return self.header.request_id

    @property
    def packet_type(self) -> int:
        return self.header.packet_type

    def text(self) -> str:
        return self.payload.decode("utf-8", errors="replace")


def encode_packet(packet_type: int, payload: bytes, request_id: int = 0) -> bytes:
    size = 4 + 4 + len(payload) + len(PADDING)
    if size >= MAX_PACKET_SIZE:
        raise PacketTooLargeError(size, MAX_PACKET_SIZE)
    return _HEADER.pack(size, request_id, int(packet_type)) + payload + PADDING


def decode_header(data: bytes) -> PacketHeader:
    if len(data) < HEADER_SIZE:
        raise ShortReadError(f"RCON header truncated: got {len(data)} of {HEADER_SIZE} bytes")

    size, request_id, packet_type = _HEADER.unpack_from(data)
    if size < MIN_PACKET_SIZE:
        raise MalformedPacketError(f"Invalid RCON packet length: {size}")
    if size > MAX_RESPONSE_SIZE:
        raise MalformedPacketError(f"RCON packet too large: {size} > {MAX_RESPONSE_SIZE}")
    return PacketHeader(size=size, request_id=request_id, packet_type=packet_type)


def decode_body(header: PacketHeader, body: bytes) -> Packet:
    """body 为 header 之后的 size - 8 个字节（payload + 两字节结尾）"""
    expected = header.size - 8
    if len(body) < expected:
        raise ShortReadError(f"RCON body truncated: got {len(body)} of {expected} bytes")

    body = body[:expected]
    if body[-2:] != PADDING:
        raise MalformedPacketError("Invalid RCON payload terminator")
    return Packet(header=header, payload=body[:-2])


def decode_packet(data: bytes) -> Packet:
    header = decode_header(data)
    return decode_body(header, data[HEADER_SIZE:])


async def _read_exactly(reader: asyncio.StreamReader, n: int, timeout: Optional[float]) -> bytes:
    try:
        return await asyncio.wait_for(reader.readexactly(n), timeout=timeout)
    except asyncio.IncompleteReadError as e:
        raise ShortReadError(
            f"RCON connection closed unexpectedly: got {len(e.partial)} of {n} bytes"
        ) from e
    except asyncio.TimeoutError as e:
        raise StreamError("RCON read timeout") from e
    except OSError as e:
        raise StreamError(f"RCON read failed: {e}") from e


async def read_packet(reader: asyncio.StreamReader, timeout: Optional[float] = None) -> Packet:
    """从流中读取恰好一个包；timeout 作用于每一次底层读取"""
    header = decode_header(await _read_exactly(reader, HEADER_SIZE, timeout))
    body = await _read_exactly(reader, header.size - 8, timeout)
    return decode_body(header, body)
