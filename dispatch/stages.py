"""
Dispatch Stages - 分发阶段

定义单个任务分发过程中的各个阶段
"""

from enum import Enum


class DispatchStage(Enum):
    """分发阶段枚举"""

    INITIALIZED = "initialized"  # 初始化
    NODE_ACQUIRED = "node_acquired"  # 已获取节点
    RUNNING = "running"  # 正在执行命令
    NODE_RELEASED = "node_released"  # 已释放节点
    TRANSFERRED = "transferred"  # 结果已回传
    COMPLETED = "completed"  # 全部命令执行成功
    FAILED = "failed"  # 执行失败
