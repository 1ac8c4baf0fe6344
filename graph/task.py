"""
Task - 任务模型

任务状态机：
    NOT_STARTED -> IN_PROGRESS -> FINISHED | FAILED
    NOT_STARTED -> FINISHED      （仅限没有命令的产物任务，在建图时设置）
FINISHED 和 FAILED 为终态
"""

import os
import threading
from typing import TYPE_CHECKING, Dict, FrozenSet, List, Optional, Tuple

from core.enums import ExecutionMode, TaskStatus
from core.exceptions import TaskStateException
from core.utils import AtomicCell

if TYPE_CHECKING:
    from cluster import NodePool


_ALLOWED_TRANSITIONS: Dict[TaskStatus, FrozenSet[TaskStatus]] = {
    TaskStatus.NOT_STARTED: frozenset({TaskStatus.IN_PROGRESS, TaskStatus.FINISHED}),
    TaskStatus.IN_PROGRESS: frozenset({TaskStatus.FINISHED, TaskStatus.FAILED}),
    TaskStatus.FINISHED: frozenset(),
    TaskStatus.FAILED: frozenset(),
}


class Task:
    """
    一个命名的工作单元：有序命令列表 + 生命周期状态

    以名称作为身份（相等性和哈希），同名任务在一张图中只有一个对象，
    状态修改在所有引用处可见。
    """

    def __init__(
        self,
        name: str,
        commands: Optional[List[str]] = None,
        mode: ExecutionMode = ExecutionMode.REMOTE,
        pool: Optional["NodePool"] = None,
    ) -> None:
        if name is None or not name.strip():
            raise ValueError("Task name cannot be empty")

        self.name = name
        self.mode = mode
        self.pool = pool
        self._commands: List[str] = []
        self._status: AtomicCell[TaskStatus] = AtomicCell(TaskStatus.NOT_STARTED)
        self._history: List[TaskStatus] = [TaskStatus.NOT_STARTED]
        self._history_lock = threading.Lock()

        for command in commands or []:
            self.add_command(command)

    # ========== 命令 ==========

    @property
    def commands(self) -> Tuple[str, ...]:
        return tuple(self._commands)

    def add_command(self, command: str) -> None:
        """
        追加一条命令

        Raises:
            ValueError: 命令为空
        """
        if command is None or not command.strip():
            raise ValueError("Command cannot be empty")
        self._commands.append(command)

    @property
    def is_artifact(self) -> bool:
        """没有命令的任务代表已存在的文件（例如源文件）"""
        return not self._commands

    @property
    def produces_file(self) -> bool:
        """目标名看起来像文件名时，成功后需要回传结果"""
        return "." in os.path.basename(self.name)

    # ========== 状态 ==========

    @property
    def status(self) -> TaskStatus:
        return self._status.get()

    @property
    def history(self) -> Tuple[TaskStatus, ...]:
        """按发生顺序记录的全部状态"""
        with self._history_lock:
            return tuple(self._history)

    @property
    def is_terminal(self) -> bool:
        return self._status.get().is_terminal

    def transition_to(self, target: TaskStatus) -> None:
        """
        按状态机转换状态

        Raises:
            TaskStateException: 非法转换
        """
        def apply(current: TaskStatus) -> TaskStatus:
            if target not in _ALLOWED_TRANSITIONS[current] or (
                current == TaskStatus.NOT_STARTED
                and target == TaskStatus.FINISHED
                and not self.is_artifact
            ):
                raise TaskStateException(self.name, current.value, target.value)
            self._record(target)
            return target

        self._status.update(apply)

    def try_start(self) -> bool:
        """
        NOT_STARTED -> IN_PROGRESS

        Returns:
            成功返回 True；任务已被启动或已结束时返回 False
        """
        started = False

        def apply(current: TaskStatus) -> Optional[TaskStatus]:
            nonlocal started
            if current != TaskStatus.NOT_STARTED:
                return None
            started = True
            self._record(TaskStatus.IN_PROGRESS)
            return TaskStatus.IN_PROGRESS

        self._status.update(apply)
        return started

    def mark_finished(self) -> None:
        self.transition_to(TaskStatus.FINISHED)

    def mark_failed(self) -> None:
        self.transition_to(TaskStatus.FAILED)

    def _record(self, status: TaskStatus) -> None:
        with self._history_lock:
            self._history.append(status)

    # ========== 身份 ==========

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return (
            f"Task(name={self.name!r}, status={self.status.value}, "
            f"mode={self.mode.value}, commands={len(self._commands)})"
        )
