"""
Task Scheduler - 任务调度器

轮询依赖图，把依赖全部完成的任务提交到线程池执行
"""

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import List, Optional, Sequence

from loguru import logger

from core.config import ExecutionConfig
from core.enums import TaskStatus
from core.exceptions import SchedulingException, SchedulingTimeoutException
from dispatch import TaskDispatcher
from graph.dependency_graph import DependencyGraph
from graph.task import Task
from .report import RunReport

CANCEL_GRACE_PERIOD = 5.0


class TaskScheduler:
    """
    任务调度器

    职责：
    - 持有一次运行的完整依赖图
    - 周期性扫描就绪任务（NOT_STARTED 且依赖全部 FINISHED）并提交执行
    - 所有任务结束、无任务可运行、超时或收到停止请求时退出循环

    就绪判断只依赖轮询到的任务状态，Future 只用于最后的限时等待和取消
    """

    def __init__(
        self,
        dispatcher: Optional[TaskDispatcher] = None,
        config: Optional[ExecutionConfig] = None,
    ) -> None:
        """
        Args:
            dispatcher: 任务分发器（可选，用于依赖注入）
            config: 执行配置（可选，默认使用分发器的配置）
        """
        if config is None:
            config = dispatcher.config if dispatcher is not None else ExecutionConfig.from_settings()
        self.config = config
        self.dispatcher = dispatcher or TaskDispatcher(config=config)
        self.graph = DependencyGraph()
        self._stop_event = threading.Event()

    # ========== 加载 ==========

    def add_task(self, task: Task, dependencies: Optional[Sequence[Task]] = None) -> None:
        """
        登记任务及其依赖

        没有命令的任务（已存在的文件）立即标记为 FINISHED
        """
        self.graph.add_task(task, dependencies)
        for item in [task, *(dependencies or [])]:
            self._finish_if_artifact(item)

    def load_graph(self, graph: DependencyGraph) -> None:
        """加载已构建好的依赖图"""
        self.graph = graph
        for task in graph:
            self._finish_if_artifact(task)

    @property
    def task_count(self) -> int:
        return len(self.graph)

    def stop(self) -> None:
        """请求停止调度循环"""
        self._stop_event.set()

    # ========== 运行 ==========

    def run(self) -> RunReport:
        """
        执行依赖图直到全部任务结束

        Returns:
            RunReport（被中断时 incomplete_reason 为 "interrupted"）

        Raises:
            SchedulingException: 没有加载任何任务
            SchedulingTimeoutException: 超过整体运行时限
        """
        if len(self.graph) == 0:
            raise SchedulingException("No tasks loaded, nothing to schedule")

        logger.info(
            f"🚀 Starting run: {len(self.graph)} tasks "
            f"(poll: {self.config.POLL_INTERVAL}s, timeout: {self.config.RUN_TIMEOUT}s)"
        )

        start = time.monotonic()
        deadline = start + self.config.RUN_TIMEOUT
        futures: List[Future] = []
        incomplete_reason: Optional[str] = None

        # 未配置时每个任务一个线程
        executor = ThreadPoolExecutor(
            max_workers=self.config.MAX_WORKERS or max(1, len(self.graph)),
            thread_name_prefix="task",
        )
        try:
            incomplete_reason = self._poll_loop(executor, futures, deadline)

            if incomplete_reason is None:
                _, not_done = wait(futures, timeout=max(0.0, deadline - time.monotonic()))
                if not_done:
                    incomplete_reason = "timeout"

            if incomplete_reason is not None:
                logger.warning(f"⚠️  Run {incomplete_reason}, cancelling outstanding executions")
                self.dispatcher.cancel()
                wait(futures, timeout=CANCEL_GRACE_PERIOD)

        finally:
            executor.shutdown(wait=incomplete_reason is None, cancel_futures=True)

        for future in futures:
            if future.done() and not future.cancelled() and future.exception() is not None:
                logger.error(f"Dispatch raised unexpectedly: {future.exception()}")

        report = RunReport.from_graph(
            self.graph,
            elapsed=time.monotonic() - start,
            incomplete_reason=incomplete_reason,
        )
        report.log()

        if incomplete_reason == "timeout":
            raise SchedulingTimeoutException(self.config.RUN_TIMEOUT, report)
        return report

    def _poll_loop(self, executor: ThreadPoolExecutor, futures: List[Future], deadline: float) -> Optional[str]:
        """
        调度主循环

        Returns:
            正常结束返回 None，否则返回 "timeout" 或 "interrupted"
        """
        last_finished = -1

        while True:
            # 扫描前没有任何任务在执行时，本轮扫描结果是确定的
            in_flight = any(task.status == TaskStatus.IN_PROGRESS for task in self.graph)
            launched = self._launch_ready(executor, futures)

            finished = sum(1 for task in self.graph if task.status == TaskStatus.FINISHED)
            if finished != last_finished:
                logger.debug(f"Progress: {finished}/{len(self.graph)} finished")
                last_finished = finished

            if all(task.is_terminal for task in self.graph):
                logger.info("All tasks reached a terminal state")
                return None

            if not in_flight and launched == 0:
                stuck = [t.name for t in self.graph if t.status == TaskStatus.NOT_STARTED]
                logger.warning(
                    f"⚠️  No runnable tasks remain, {len(stuck)} task(s) can never start: "
                    f"{', '.join(stuck)}"
                )
                return None

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return "timeout"

            if self._stop_event.wait(min(self.config.POLL_INTERVAL, remaining)):
                return "interrupted"

    def _launch_ready(self, executor: ThreadPoolExecutor, futures: List[Future]) -> int:
        launched = 0
        for task, deps in self.graph.items():
            if task.status != TaskStatus.NOT_STARTED:
                continue
            if not all(dep.status == TaskStatus.FINISHED for dep in deps):
                continue
            if not task.try_start():
                continue

            logger.info(f"▶️  {task.name} is ready, dispatching")
            futures.append(executor.submit(self.dispatcher.dispatch, task))
            launched += 1
        return launched

    @staticmethod
    def _finish_if_artifact(task: Task) -> None:
        if task.is_artifact and task.status == TaskStatus.NOT_STARTED:
            task.mark_finished()
