"""辅助工具模块"""

from __future__ import annotations


def parse_command_args(event_message_str: str, command: str) -> str | None:
    """
    解析指令参数，兼容以下输入：
    1) "/rcon say hello"
    2) "rcon say hello"
    3) "say hello"（框架已剥离命令名）

    返回：只包含参数部分，例如 "say hello"
    """
    s = " ".join((event_message_str or "").split())
    if not s:
        return None

    # 兼容全角斜杠
    if s.startswith("／"):
        s = "/" + s[1:]

    cmd = command.strip().lstrip("/").lower()
    s_lower = s.lower()

    # 情况1：以 "/command" 开头
    prefix1 = f"/{cmd}"
    if s_lower == prefix1 or s_lower.startswith(prefix1 + " "):
        args = s[len(prefix1):].strip()
        return args if args else None

    # 情况2：以 "command" 开头（无斜杠），必须是完整单词
    if s_lower == cmd:
        return None
    if s_lower.startswith(cmd + " "):
        args = s[len(cmd):].strip()
        return args if args else None

    # 情况3：框架已剥离命令名，整串就是参数
    return s


def truncate_text(text: str, max_len: int) -> str:
    """超长时截断到 max_len 以内，尽量停在整行处，并注明原始长度"""
    if text is None:
        return ""
    if len(text) <= max_len:
        return text
    head = text[:max_len]
    cut = head.rfind("\n")
    if cut > max_len // 2:
        head = head[:cut]
    lines = text.count("\n") + 1
    return head.rstrip("\n") + f"\n...（已截断，原长度 {len(text)} 字符，{lines} 行）"
