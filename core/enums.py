"""
调度系统的枚举类型定义
"""

from enum import Enum


class TaskStatus(str, Enum):
    """任务状态枚举"""

    NOT_STARTED = "NOT_STARTED"  # 等待依赖完成
    IN_PROGRESS = "IN_PROGRESS"  # 已分发，正在执行
    FINISHED = "FINISHED"  # 已完成
    FAILED = "FAILED"  # 失败

    @property
    def is_terminal(self) -> bool:
        return self in (TaskStatus.FINISHED, TaskStatus.FAILED)


class NodeStatus(str, Enum):
    """计算节点状态枚举"""

    FREE = "FREE"  # 空闲
    OCCUPIED = "OCCUPIED"  # 占用


class ExecutionMode(str, Enum):
    """任务执行位置"""

    REMOTE = "REMOTE"  # 分发到远程节点
    LOCAL_AGGREGATE = "LOCAL_AGGREGATE"  # 在协调进程本地汇总


class ReportStatus(str, Enum):
    """最终报告中的任务状态"""

    FINISHED = "FINISHED"  # 成功完成
    FAILED = "FAILED"  # 执行失败
    BLOCKED = "BLOCKED"  # 依赖失败，永远无法就绪
    INCOMPLETE = "INCOMPLETE"  # 超时或中断时尚未结束
