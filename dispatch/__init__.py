"""
Dispatch - 任务分发

- dispatcher.py: 单个任务的执行入口
- lease.py: 带退避重试的节点租用
- remote.py: 远程执行客户端
- local.py: 本地执行器
- transfer.py: 结果文件回传
"""
from .context import DispatchContext
from .dispatcher import TaskDispatcher
from .lease import NodeLease
from .local import LocalRunner
from .metrics import DispatchMetrics
from .remote import DEFAULT_SERVICE_NAME, HttpRemoteExecutor, RemoteExecutor, build_worker_url
from .stages import DispatchStage
from .transfer import LOCAL_HOSTNAMES, ResultTransfer, is_localhost, is_same_host

__all__ = [
    "DispatchContext",
    "DispatchMetrics",
    "DispatchStage",
    "TaskDispatcher",
    "NodeLease",
    "LocalRunner",
    "RemoteExecutor",
    "HttpRemoteExecutor",
    "DEFAULT_SERVICE_NAME",
    "build_worker_url",
    "ResultTransfer",
    "LOCAL_HOSTNAMES",
    "is_localhost",
    "is_same_host",
]
