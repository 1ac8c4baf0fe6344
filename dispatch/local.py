"""
Local Runner - 在协调进程本地执行命令
"""

import subprocess
import threading
from typing import Dict, Optional

from loguru import logger

from shared.process_utils import ShellResult, kill_process_group, run_shell


class LocalRunner:
    """
    本地命令执行器

    记录正在运行的进程，取消时整组终止
    """

    def __init__(self, timeout: Optional[float] = None, cwd: Optional[str] = None) -> None:
        """
        Args:
            timeout: 单条命令超时（秒），None 表示不限
            cwd: 工作目录
        """
        self.timeout = timeout
        self.cwd = cwd
        self._processes: Dict[int, subprocess.Popen] = {}
        self._lock = threading.Lock()

    def run(self, command: str) -> ShellResult:
        process_ref: Dict[str, subprocess.Popen] = {}

        def track(process: subprocess.Popen) -> None:
            process_ref["process"] = process
            with self._lock:
                self._processes[process.pid] = process

        try:
            return run_shell(command, cwd=self.cwd, timeout=self.timeout, on_start=track)
        finally:
            process = process_ref.get("process")
            if process is not None:
                with self._lock:
                    self._processes.pop(process.pid, None)

    @property
    def active_count(self) -> int:
        with self._lock:
            return len(self._processes)

    def cancel_all(self, grace_period: float = 2) -> None:
        """终止所有正在运行的本地命令"""
        with self._lock:
            processes = list(self._processes.values())

        for process in processes:
            logger.warning(f"Cancelling local command (PID {process.pid})")
            kill_process_group(process, grace_period=grace_period)
