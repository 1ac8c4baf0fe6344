"""
验证工具
"""
import re
from typing import List, Tuple

MAX_HOSTNAME_LENGTH = 255
MIN_PORT = 1024
MAX_PORT = 65535

# 节点列表两端可能带有的装饰字符
_DECORATION_PATTERN = re.compile(r"[\[\]'\"]")


def validate_hostname(hostname: str) -> bool:
    """
    验证主机名

    Args:
        hostname: 要验证的主机名

    Returns:
        有效则返回True

    Raises:
        ValueError: 如果主机名为空或过长
    """
    if not hostname or not hostname.strip():
        raise ValueError("Hostname cannot be empty")

    if len(hostname) > MAX_HOSTNAME_LENGTH:
        raise ValueError(f"Hostname too long: {hostname[:32]}...")

    return True


def validate_port(port) -> int:
    """
    验证端口号

    Args:
        port: 端口号（整数或字符串）

    Returns:
        整数端口号

    Raises:
        ValueError: 如果端口不是整数或不在 [1024, 65535] 内
    """
    try:
        value = int(str(port).strip())
    except (TypeError, ValueError):
        raise ValueError(f"Invalid port number: {port!r}") from None

    if value < MIN_PORT or value > MAX_PORT:
        raise ValueError(f"Port must be between {MIN_PORT} and {MAX_PORT}, got: {value}")

    return value


def split_node_list(spec: str) -> List[str]:
    """
    拆分节点列表字符串

    去掉方括号和引号后按逗号拆分，空项会被丢弃

    Args:
        spec: 例如 "[node1,node2:3001]"

    Returns:
        节点条目列表
    """
    cleaned = _DECORATION_PATTERN.sub("", spec).strip()
    return [token.strip() for token in cleaned.split(",") if token.strip()]


def parse_node_entry(entry: str, default_port: int) -> Tuple[str, int]:
    """
    解析单个 host 或 host:port 条目

    Args:
        entry: 节点条目
        default_port: 未指定端口时使用的端口

    Returns:
        (host, port)

    Raises:
        ValueError: 主机名或端口无效
    """
    host, port = entry, default_port
    # 只有一个冒号时才视为 host:port，其余情况（如 IPv6 字面量）整体作为主机名
    if entry.count(":") == 1:
        host, raw_port = entry.split(":", 1)
        host = host.strip()
        port = validate_port(raw_port)

    validate_hostname(host)
    return host, port
