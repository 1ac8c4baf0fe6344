"""
Shared - 协调进程与 Worker 服务共用的工具
"""

from .file_splitter import cleanup_files, split_by_size, split_equitably
from .process_utils import ShellResult, kill_process_group, run_shell

__all__ = [
    "cleanup_files",
    "split_by_size",
    "split_equitably",
    "ShellResult",
    "kill_process_group",
    "run_shell",
]
