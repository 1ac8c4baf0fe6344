"""
Dispatch Context - 分发上下文

记录单个任务分发过程中的状态，用于日志和排错
"""

import time
from dataclasses import dataclass, field
from typing import List, Optional

from core.enums import ExecutionMode
from .stages import DispatchStage


@dataclass
class DispatchContext:
    """
    任务分发上下文

    包括：
    - 任务信息和执行方式
    - 当前阶段和使用的节点
    - 已执行的命令数和错误信息
    """

    task_name: str
    mode: ExecutionMode
    stage: DispatchStage = DispatchStage.INITIALIZED
    node_address: Optional[str] = None
    commands_run: int = 0
    exit_code: Optional[int] = None
    error: Optional[Exception] = None
    transferred: List[str] = field(default_factory=list)
    start_time: float = field(default_factory=time.monotonic)

    def elapsed_time(self) -> float:
        """
        获取已执行时间（秒）

        Returns:
            已执行的秒数
        """
        return time.monotonic() - self.start_time

    def has_error(self) -> bool:
        return self.error is not None
