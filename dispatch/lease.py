"""
Node Lease - 节点租用

带随机退避的节点获取，并保证节点在任何退出路径上都被释放
"""

import random
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

from loguru import logger

from cluster import ComputeNode, NodePool
from core.config import ExecutionConfig
from core.exceptions import AcquisitionExhaustedException, DispatchCancelledException
from .metrics import DispatchMetrics


class NodeLease:
    """
    节点租用包装器

    职责：
    - 节点全部占用时按 基础等待 + 随机抖动 重试
    - 超过重试上限抛出 AcquisitionExhaustedException
    - 提供上下文管理器接口，退出时一定释放节点
    """

    def __init__(
        self,
        pool: NodePool,
        config: ExecutionConfig,
        metrics: Optional[DispatchMetrics] = None,
        rng: Optional[random.Random] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.pool = pool
        self.config = config
        self.metrics = metrics or DispatchMetrics()
        self._rng = rng or random.Random()
        self._cancel_event = cancel_event or threading.Event()

    @contextmanager
    def acquire(self, task_name: str) -> Iterator[ComputeNode]:
        """
        获取节点（上下文管理器）

        使用示例：
            with lease.acquire(task.name) as node:
                # 在 node 上执行命令
                ...
            # 自动释放节点

        Raises:
            AcquisitionExhaustedException: 重试上限内没有空闲节点
            DispatchCancelledException: 等待期间运行被取消
        """
        node = self._acquire_with_retry(task_name)
        try:
            yield node
        finally:
            # 确保释放节点
            self.pool.release(node)

    def _acquire_with_retry(self, task_name: str) -> ComputeNode:
        retries = 0
        while True:
            node = self.pool.acquire_available()
            if node is not None:
                return node

            retries += 1
            if retries % self.config.BUSY_LOG_EVERY == 0:
                logger.info(f"⏳ [{task_name}] All nodes busy, waiting... (retry {retries})")

            if retries >= self.config.MAX_ACQUIRE_RETRIES:
                self.metrics.record("exhausted")
                raise AcquisitionExhaustedException(task_name, retries)

            self.metrics.record_retry(task_name, retries)

            if self._cancel_event.wait(self._backoff()):
                raise DispatchCancelledException(task_name)

    def _backoff(self) -> float:
        return self.config.RETRY_BASE_DELAY + self._rng.uniform(0, self.config.RETRY_JITTER)
