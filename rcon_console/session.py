"""异步 RCON 会话（纯 asyncio，无第三方 rcon 库）

一个 RconSession 独占一条 TCP 连接：
- connect(): 建立 TCP（不立即认证）
- authenticate(): 发送 AUTH 包并校验结果
- send_command(): 认证（必要时）后发送命令，返回单个响应包的文本
- close(): 释放连接，只执行一次

同一会话上的交互通过锁串行化；任何传输/解码/认证失败都会让会话进入
FAILED 终态，调用方需要重新 connect。会话内部不做自动重连或重试。
"""

from __future__ import annotations

import asyncio
import enum
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from .errors import (
    RconAuthError,
    RconConnectionError,
    RconSessionError,
    StreamError,
)
from .packet import Packet, PacketType, encode_packet, read_packet

logger = logging.getLogger(__name__)

DEFAULT_CONNECT_TIMEOUT = 10.0
DEFAULT_TIMEOUT = 5.0

_MAX_REQUEST_ID = 2_000_000_000


class SessionState(enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    AUTHENTICATED = "authenticated"
    FAILED = "failed"
    CLOSED = "closed"


class RconSession:
    def __init__(
        self,
        host: str,
        port: int,
        password: str,
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        timeout: float = DEFAULT_TIMEOUT,
        always_authenticate: bool = False,
    ):
        self.host = host
        self.port = port
        self._password = password
        self.connect_timeout = connect_timeout
        self.timeout = timeout
        self.always_authenticate = always_authenticate

        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._state = SessionState.DISCONNECTED
        self._req_id = 0
        self._lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"<RconSession {self.host}:{self.port} state={self._state.value}>"

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def authenticated(self) -> bool:
        return self._state is SessionState.AUTHENTICATED

    @property
    def usable(self) -> bool:
        return self._state in (SessionState.CONNECTED, SessionState.AUTHENTICATED)

    @classmethod
    async def connect(
        cls,
        host: str,
        port: int,
        password: str,
        *,
        connect_timeout: float = DEFAULT_CONNECT_TIMEOUT,
        timeout: float = DEFAULT_TIMEOUT,
        always_authenticate: bool = False,
    ) -> RconSession:
        session = cls(
            host,
            port,
            password,
            connect_timeout=connect_timeout,
            timeout=timeout,
            always_authenticate=always_authenticate,
        )
        await session.open()
        return session

    async def open(self) -> None:
        if self._state is not SessionState.DISCONNECTED:
            raise RconSessionError(f"RCON session already {self._state.value}")
        try:
            self._reader, self._writer = await asyncio.wait_for(
                asyncio.open_connection(self.host, self.port),
                timeout=self.connect_timeout,
            )
        except asyncio.TimeoutError as e:
            self._state = SessionState.FAILED
            raise RconConnectionError(
                f"RCON connect to {self.host}:{self.port} timed out after {self.connect_timeout}s"
            ) from e
        except OSError as e:
            self._state = SessionState.FAILED
            raise RconConnectionError(f"RCON connect to {self.host}:{self.port} failed: {e}") from e

        self._state = SessionState.CONNECTED
        logger.debug("RCON connected to %s:%s", self.host, self.port)

    async def close(self) -> None:
        writer = self._writer
        self._reader = None
        self._writer = None
        self._state = SessionState.CLOSED
        if writer is None:
            return
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            # 对端已断开时关闭也可能报错，连接照样算已释放
            logger.debug("RCON close on %s:%s: %s", self.host, self.port, e)
        logger.debug("RCON connection to %s:%s closed", self.host, self.port)

    async def __aenter__(self) -> RconSession:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def _next_id(self) -> int:
        # 仅用于日志追踪；响应不按 id 匹配，顺序由锁保证
        self._req_id += 1
        if self._req_id > _MAX_REQUEST_ID:
            self._req_id = 1
        return self._req_id

    def _ensure_usable(self) -> None:
        if not self.usable or self._writer is None or self._reader is None:
            raise RconSessionError(
                f"RCON session is {self._state.value}; reconnect before sending"
            )

    def _fail(self) -> None:
        if self._state is not SessionState.CLOSED:
            self._state = SessionState.FAILED

    async def _exchange(self, ptype: PacketType, payload: bytes) -> Packet:
        self._ensure_usable()
        req_id = self._next_id()
        # 超限时在写出任何字节之前抛出，会话状态不变
        data = encode_packet(ptype, payload, request_id=req_id)

        # 写出后被中断（包括调用方取消）时，迟到的响应仍留在流里，分帧已不可信
        completed = False
        try:
            try:
                self._writer.write(data)
                await asyncio.wait_for(self._writer.drain(), timeout=self.timeout)
            except asyncio.TimeoutError as e:
                raise StreamError("RCON write timeout") from e
            except OSError as e:
                raise StreamError(f"RCON write failed: {e}") from e

            logger.debug("RCON sent id=%d type=%d (%d bytes)", req_id, int(ptype), len(data))
            packet = await self._receive()
            completed = True
            return packet
        finally:
            if not completed:
                self._fail()

    async def _receive(self) -> Packet:
        packet = await read_packet(self._reader, timeout=self.timeout)
        logger.debug(
            "RCON received id=%d type=%d (%d bytes)",
            packet.request_id,
            packet.packet_type,
            len(packet.payload),
        )
        return packet

    async def _authenticate(self) -> None:
        packet = await self._exchange(PacketType.AUTH, self._password.encode("utf-8"))

        # 只看 request_id：-1 即失败，不区分 packet_type
        if packet.header.bad_login:
            self._fail()
            logger.warning("RCON auth rejected by %s:%s", self.host, self.port)
            raise RconAuthError("RCON auth failed (bad password?)")

        self._state = SessionState.AUTHENTICATED
        logger.debug("RCON authenticated on %s:%s", self.host, self.port)

    async def authenticate(self) -> None:
        async with self._lock:
            await self._authenticate()

    async def send_command(self, command: str) -> str:
        async with self._lock:
            self._ensure_usable()
            if self.always_authenticate or not self.authenticated:
                await self._authenticate()

            packet = await self._exchange(PacketType.COMMAND, command.encode("utf-8"))
            if packet.header.bad_login:
                self._fail()
                logger.warning("RCON command rejected by %s:%s: not authenticated", self.host, self.port)
                raise RconAuthError("RCON command rejected: session is not authenticated")

            return packet.text()


@asynccontextmanager
async def rcon_session(
    host: str,
    port: int,
    password: str,
    **kwargs,
) -> AsyncIterator[RconSession]:
    """连接并在退出时（无论成功、认证失败还是 I/O 错误）关闭会话"""
    session = await RconSession.connect(host, port, password, **kwargs)
    try:
        yield session
    finally:
        await session.close()
