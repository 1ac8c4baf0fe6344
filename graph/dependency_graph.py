"""
Dependency Graph - 依赖图

任务 -> 前置任务列表的映射。图持有全部 Task 对象，依赖列表只保存对这些对象的引用。
"""

from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from loguru import logger

from core.enums import ExecutionMode
from .task import Task

if TYPE_CHECKING:
    from cluster import NodePool


class DependencyGraph:
    """
    依赖图

    建图完成后结构只读，执行期间只有任务状态会变化
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, Task] = {}
        self._dependencies: Dict[str, List[Task]] = {}

    def intern(self, name: str) -> Task:
        """
        按名称获取任务，不存在时创建并登记

        Args:
            name: 任务名称

        Returns:
            该名称对应的唯一 Task 对象
        """
        task = self._tasks.get(name)
        if task is None:
            task = Task(name)
            self._tasks[name] = task
            self._dependencies[name] = []
        return task

    def add_task(self, task: Task, dependencies: Optional[Sequence[Task]] = None) -> None:
        """
        登记任务及其依赖

        依赖中出现但尚未登记的任务会一并登记（依赖为空）

        Raises:
            ValueError: 同名任务已登记为另一个对象
        """
        self._register(task)
        deps = self._dependencies[task.name]
        for dep in dependencies or []:
            self._register(dep)
            if dep not in deps:
                deps.append(self._tasks[dep.name])

    def _register(self, task: Task) -> None:
        existing = self._tasks.get(task.name)
        if existing is None:
            self._tasks[task.name] = task
            self._dependencies[task.name] = []
        elif existing is not task:
            raise ValueError(f"Task {task.name} is already registered as a different object")

    def get(self, name: str) -> Optional[Task]:
        return self._tasks.get(name)

    def dependencies(self, task: Union[Task, str]) -> Tuple[Task, ...]:
        name = task if isinstance(task, str) else task.name
        return tuple(self._dependencies.get(name, ()))

    @property
    def tasks(self) -> List[Task]:
        return list(self._tasks.values())

    def items(self) -> Iterator[Tuple[Task, Tuple[Task, ...]]]:
        for name, task in self._tasks.items():
            yield task, tuple(self._dependencies[name])

    def bind_pool(self, pool: "NodePool") -> None:
        """给所有任务设置节点池引用"""
        for task in self._tasks.values():
            task.pool = pool

    def __len__(self) -> int:
        return len(self._tasks)

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Task):
            return self._tasks.get(item.name) is item
        return item in self._tasks

    def log_graph(self) -> None:
        """输出依赖图"""
        logger.info("📋 Dependency graph:")
        for task, deps in self.items():
            if deps:
                dep_names = ", ".join(dep.name for dep in deps)
                logger.info(f"   {task.name} depends on: {dep_names}")
            else:
                logger.info(f"   {task.name} depends on: nothing (can start immediately)")

            location = "local" if task.mode == ExecutionMode.LOCAL_AGGREGATE else "remote"
            logger.info(
                f"     commands: {len(task.commands)}, "
                f"status: {task.status.value}, execution: {location}"
            )
