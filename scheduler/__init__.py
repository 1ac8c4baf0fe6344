"""
Scheduler - 调度层

- task_scheduler.py: 轮询依赖图并提交就绪任务
- report.py: 最终运行报告
- signal_handler.py: SIGINT/SIGTERM 优雅停止
- main.py: 协调进程命令行入口
"""
from .report import RunReport, TaskOutcome
from .signal_handler import ShutdownSignalHandler
from .task_scheduler import TaskScheduler

__all__ = [
    "RunReport",
    "TaskOutcome",
    "ShutdownSignalHandler",
    "TaskScheduler",
]
