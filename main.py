import asyncio
from pathlib import Path
from typing import Optional

from astrbot.api import logger
from astrbot.api.event import AstrMessageEvent, filter
from astrbot.api.star import Context, Star, StarTools, register

from .rcon_console.config import RconConsoleConfig, load_config, write_default_config
from .rcon_console.errors import PacketTooLargeError, RconAuthError, RconError
from .rcon_console.message_formatter import COMMAND_NAME, MessageFormatter
from .rcon_console.packet import MAX_PACKET_SIZE
from .rcon_console.session import RconSession
from .rcon_console.utils import parse_command_args, truncate_text


@register("rconconsole", "RCON控制台", "使用RCON向游戏服务器发送命令", "1.1.0")
class RconConsolePlugin(Star):
    def __init__(self, context: Context):
        super().__init__(context)

        self.cfg: Optional[RconConsoleConfig] = None
        self._ready = False
        self._rcon_lock = asyncio.Lock()

        # 使用插件专属数据目录（符合 AstrBot 规范）
        data_dir: Path = StarTools.get_data_dir(self.plugin_name)
        data_dir.mkdir(parents=True, exist_ok=True)
        self._config_path = data_dir / "config.yml"

        # 连接复用：出错后丢弃，下一条命令重新连接
        self._session: Optional[RconSession] = None

    async def initialize(self):
        try:
            if not self._config_path.exists():
                write_default_config(self._config_path)
                logger.warning(
                    "[rconconsole] 未找到 config.yml，已在插件数据目录生成默认配置：%s。"
                    "请修改 admins 与 rcon.password（不要留 CHANGE_ME），然后重启插件。",
                    str(self._config_path),
                )
                return

            cfg = load_config(self._config_path)

            if not cfg.admins:
                logger.error("[rconconsole] 配置错误：admins 必须是非空列表")
                return

            if not cfg.is_rcon_ready:
                logger.error(
                    "[rconconsole] 配置错误：rcon.host/port/password 必填且 password 不能为 CHANGE_ME"
                )
                return

            self.cfg = cfg
            self._ready = True
            logger.info(
                "[rconconsole] 配置加载完成，插件已就绪。target=%s:%s config=%s",
                cfg.rcon_host,
                cfg.rcon_port,
                str(self._config_path),
            )

        except Exception as e:
            logger.error("[rconconsole] 初始化失败：%s", e, exc_info=True)
            self._ready = False

    async def _get_session(self) -> RconSession:
        if self._session is None or not self._session.usable:
            self._session = await RconSession.connect(
                self.cfg.rcon_host,
                self.cfg.rcon_port,
                self.cfg.rcon_password,
                connect_timeout=self.cfg.connect_timeout,
                timeout=self.cfg.timeout,
                always_authenticate=self.cfg.always_authenticate,
            )
        return self._session

    async def _drop_session(self) -> None:
        session, self._session = self._session, None
        if session is not None:
            await session.close()

    @filter.command(COMMAND_NAME)
    async def rcon_command(self, event: AstrMessageEvent):
        if not self._ready or self.cfg is None:
            yield event.plain_result(MessageFormatter.format_not_ready())
            return

        if not self.cfg.enabled:
            yield event.plain_result(MessageFormatter.format_not_enabled())
            return

        if not self.cfg.is_admin(event.get_sender_id()):
            yield event.plain_result(MessageFormatter.format_no_permission())
            return

        command = parse_command_args(event.message_str, COMMAND_NAME)
        if not command:
            yield event.plain_result(MessageFormatter.format_usage())
            return

        async with self._rcon_lock:
            try:
                session = await self._get_session()
                result = await session.send_command(command)
                result = truncate_text(result, self.cfg.max_output)
                yield event.plain_result(MessageFormatter.format_exec_result(command, result))

            except PacketTooLargeError:
                # 未写出任何字节，连接仍可复用
                yield event.plain_result(MessageFormatter.format_too_long(MAX_PACKET_SIZE))

            except RconAuthError:
                # 认证失败时，强制重建连接（避免半死状态）
                await self._drop_session()
                logger.warning("[rconconsole] RCON 认证失败：%s:%s", self.cfg.rcon_host, self.cfg.rcon_port)
                yield event.plain_result(MessageFormatter.format_auth_failed())

            except RconError as e:
                logger.error("[rconconsole] RCON 执行失败：%s", e, exc_info=True)
                # 发生网络/协议异常时，关掉旧连接，下一次自动重连
                await self._drop_session()
                yield event.plain_result(MessageFormatter.format_exec_failed())

    async def terminate(self):
        await self._drop_session()
        logger.info("[rconconsole] 插件已卸载/停用")
