"""
Result Transfer - 结果文件回传

把 Worker 上生成的文件复制回协调节点，失败只记录日志
"""

import shlex
import subprocess
from typing import Optional

from loguru import logger

from core.exceptions import TransferException

LOCAL_HOSTNAMES = frozenset({"localhost", "127.0.0.1", "::1", "0.0.0.0"})


def is_localhost(hostname: Optional[str]) -> bool:
    if hostname is None:
        return False
    return hostname.strip().lower() in LOCAL_HOSTNAMES


def is_same_host(source_host: Optional[str], dest_host: Optional[str]) -> bool:
    """源和目标是否为同一逻辑主机（同名，或都是本机）"""
    if source_host is None or dest_host is None:
        return False
    if is_localhost(source_host) and is_localhost(dest_host):
        return True
    source = source_host.strip().lower()
    return bool(source) and source == dest_host.strip().lower()


class ResultTransfer:
    """
    基于外部复制命令（默认 scp）的结果回传

    源和目标是同一主机时直接跳过
    """

    def __init__(self, command: str = "scp", timeout: Optional[float] = 300) -> None:
        self.command = command
        self.timeout = timeout

    def transfer(self, source_host: str, dest_host: str, filename: str) -> bool:
        """
        从 source_host 的家目录复制 filename 到当前目录

        Returns:
            实际执行了复制返回 True，同一主机跳过返回 False

        Raises:
            TransferException: 复制失败
        """
        if filename is None or not filename.strip():
            raise TransferException(str(filename), "invalid filename")

        if is_same_host(source_host, dest_host):
            logger.info(f"✅ File already on {dest_host.strip()}: {filename}")
            return False

        argv = shlex.split(self.command) + [f"{source_host}:~/{filename}", "."]
        logger.debug(f"Transferring {filename}: {' '.join(argv)}")

        try:
            result = subprocess.run(argv, capture_output=True, text=True, timeout=self.timeout)
        except (OSError, subprocess.TimeoutExpired) as e:
            raise TransferException(filename, str(e)) from e

        if result.returncode != 0:
            raise TransferException(
                filename, result.stderr.strip() or f"exit code {result.returncode}"
            )

        logger.info(f"✅ File transferred: {filename}")
        return True
