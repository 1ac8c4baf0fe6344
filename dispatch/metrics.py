"""
分发指标收集
"""

import threading
from collections import Counter
from typing import Callable, Dict, List

from loguru import logger


class DispatchMetrics:
    """
    指标收集器

    记录节点获取重试、命令执行和结果回传次数，
    使用简单的回调机制通知外部（例如测试中统计重试）
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counters: Counter = Counter()
        self._retries_by_task: Counter = Counter()

        # 回调函数列表
        self._on_retry_callbacks: List[Callable[[str, int], None]] = []

    def on_retry(self, callback: Callable[[str, int], None]) -> None:
        """
        注册重试回调

        Args:
            callback: 回调函数，接收 (task_name, retry_number) 参数
        """
        self._on_retry_callbacks.append(callback)

    def record_retry(self, task_name: str, retry_number: int) -> None:
        with self._lock:
            self._counters["retries"] += 1
            self._retries_by_task[task_name] += 1

        for callback in self._on_retry_callbacks:
            try:
                callback(task_name, retry_number)
            except Exception as e:
                logger.error(f"Retry callback failed: {e}")

    def record(self, event: str, amount: int = 1) -> None:
        """
        记录一次事件

        常用事件: dispatched, finished, failed, exhausted, remote_commands,
        local_commands, transfers, transfer_failures
        """
        with self._lock:
            self._counters[event] += amount

    def retries_for(self, task_name: str) -> int:
        with self._lock:
            return self._retries_by_task[task_name]

    def get(self, event: str) -> int:
        with self._lock:
            return self._counters[event]

    def get_statistics(self) -> Dict[str, int]:
        """
        获取统计信息

        Returns:
            统计信息字典
        """
        with self._lock:
            return dict(self._counters)

    def reset_statistics(self) -> None:
        """重置统计信息"""
        with self._lock:
            self._counters.clear()
            self._retries_by_task.clear()
