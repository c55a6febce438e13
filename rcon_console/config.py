"""配置管理模块"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .session import DEFAULT_CONNECT_TIMEOUT, DEFAULT_TIMEOUT

PLACEHOLDER_PASSWORD = "CHANGE_ME"


@dataclass
class RconConsoleConfig:
    """RCON 控制台插件配置"""

    enabled: bool = True

    # 权限
    admins: list[str] = field(default_factory=list)

    # RCON
    rcon_host: str = "127.0.0.1"
    rcon_port: int = 25575
    rcon_password: str = ""
    timeout: float = DEFAULT_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    always_authenticate: bool = False

    # 输出控制
    max_output: int = 1500

    def __post_init__(self):
        self.admins = self._parse_admins(self.admins)
        self.rcon_host = str(self.rcon_host or "").strip()
        self.rcon_port = int(self.rcon_port or 0)
        self.rcon_password = str(self.rcon_password or "")
        self.timeout = float(self.timeout)
        self.connect_timeout = float(self.connect_timeout)
        self.max_output = int(self.max_output)

    @staticmethod
    def _parse_admins(value) -> list[str]:
        """管理员 ID 列表：YAML 列表、单个 ID，或按换行/逗号分隔的字符串（# 开头为注释），去重保序"""
        if value is None:
            return []
        if isinstance(value, (int, str)):
            items = [
                item
                for line in str(value).splitlines()
                if not line.strip().startswith("#")
                for item in line.split(",")
            ]
        else:
            items = list(value)

        admins: list[str] = []
        for item in items:
            uid = str(item).strip()
            if uid and uid not in admins:
                admins.append(uid)
        return admins

    @classmethod
    def from_dict(cls, config: dict) -> RconConsoleConfig:
        """从字典创建配置对象（只取声明过的字段；rcon 小节展开为 rcon_* 字段）"""
        flat = dict(config or {})
        rcon = flat.pop("rcon", None) or {}
        for key in ("host", "port", "password"):
            if key in rcon:
                flat[f"rcon_{key}"] = rcon[key]
        for key in ("timeout", "connect_timeout", "always_authenticate"):
            if key in rcon:
                flat[key] = rcon[key]
        return cls(**{k: v for k, v in flat.items() if k in cls.__annotations__})

    def to_dict(self) -> dict:
        return {
            "enabled": self.enabled,
            "admins": list(self.admins),
            "rcon": {
                "host": self.rcon_host,
                "port": self.rcon_port,
                "password": self.rcon_password,
                "timeout": self.timeout,
                "connect_timeout": self.connect_timeout,
                "always_authenticate": self.always_authenticate,
            },
            "max_output": self.max_output,
        }

    @property
    def is_rcon_ready(self) -> bool:
        password = self.rcon_password.strip()
        return bool(
            self.rcon_host and self.rcon_port and password and password != PLACEHOLDER_PASSWORD
        )

    def is_admin(self, user_id) -> bool:
        if user_id is None:
            return False
        return str(user_id) in set(self.admins)


def default_config() -> RconConsoleConfig:
    return RconConsoleConfig(admins=["111", "222", "333"], rcon_password=PLACEHOLDER_PASSWORD)


def write_default_config(path: Path) -> None:
    path.write_text(
        yaml.safe_dump(default_config().to_dict(), allow_unicode=True, sort_keys=False),
        encoding="utf-8",
    )


def load_config(path: Path) -> RconConsoleConfig:
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: 顶层必须是映射")
    return RconConsoleConfig.from_dict(data)
