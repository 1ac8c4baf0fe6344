"""
Process Utilities - 进程管理工具
"""

import os
import signal
import subprocess
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

SHELL = "/bin/bash"


@dataclass
class ShellResult:
    """一条 shell 命令的执行结果"""

    command: str
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def stderr_lines(self):
        return [line for line in self.stderr.splitlines() if line.strip()]


def run_shell(
    command: str,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
    on_start: Optional[Callable[[subprocess.Popen], None]] = None,
) -> ShellResult:
    """
    在 bash 中执行命令并等待结束

    命令在独立的进程组中运行，超时或取消时可以整组终止

    Args:
        command: 命令字符串（支持管道和重定向）
        cwd: 工作目录
        timeout: 超时时间（秒），None 表示不限
        on_start: 进程启动后的回调，用于登记进程以便取消

    Returns:
        ShellResult
    """
    process = subprocess.Popen(
        [SHELL, "-c", command],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        cwd=cwd,
        start_new_session=True,
    )
    logger.debug(f"Started PID {process.pid}: {command}")

    if on_start is not None:
        on_start(process)

    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.warning(f"Command timed out after {timeout}s, terminating PID {process.pid}")
        kill_process_group(process, grace_period=5)
        stdout, stderr = process.communicate()
        return ShellResult(command, -1, stdout, stderr, timed_out=True)

    return ShellResult(command, process.returncode, stdout, stderr)


def kill_process_group(process: subprocess.Popen, grace_period: float = 5) -> bool:
    """
    终止进程组

    先尝试 SIGTERM 优雅终止，宽限期后仍未退出则使用 SIGKILL 强制终止

    Args:
        process: 进程对象（以 start_new_session 启动，进程组号即 pid）
        grace_period: 宽限期（秒）

    Returns:
        成功返回 True，否则返回 False
    """
    if process.poll() is not None:
        return True

    try:
        logger.info(f"Sending SIGTERM to process group {process.pid}")
        os.killpg(process.pid, signal.SIGTERM)

        try:
            process.wait(timeout=grace_period)
        except subprocess.TimeoutExpired:
            logger.warning(f"Process group {process.pid} ignored SIGTERM, sending SIGKILL")
            os.killpg(process.pid, signal.SIGKILL)

        return True
    except ProcessLookupError:
        # 进程已经不存在
        return True
    except OSError as e:
        logger.error(f"Failed to kill process group {process.pid}: {e}")
        return False
