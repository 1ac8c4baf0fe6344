"""
Run Report - 运行结果报告

列出每个任务的最终状态，区分执行失败和因依赖失败而无法就绪的任务
"""

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from loguru import logger

from core.enums import ExecutionMode, ReportStatus, TaskStatus
from core.utils import format_elapsed
from graph.dependency_graph import DependencyGraph
from graph.task import Task

_SYMBOLS = {
    ReportStatus.FINISHED: "✅",
    ReportStatus.FAILED: "❌",
    ReportStatus.BLOCKED: "⛔",
    ReportStatus.INCOMPLETE: "⏸️ ",
}


@dataclass(frozen=True)
class TaskOutcome:
    """单个任务的最终结果"""

    name: str
    status: ReportStatus
    mode: ExecutionMode
    commands: int
    blocked_by: Tuple[str, ...] = ()


@dataclass
class RunReport:
    """一次运行的最终报告"""

    outcomes: List[TaskOutcome] = field(default_factory=list)
    elapsed: float = 0.0
    incomplete_reason: Optional[str] = None

    @classmethod
    def from_graph(
        cls,
        graph: DependencyGraph,
        elapsed: float = 0.0,
        incomplete_reason: Optional[str] = None,
    ) -> "RunReport":
        """
        根据任务图的当前状态生成报告

        NOT_STARTED 的任务如果有失败（或被阻塞）的依赖，记为 BLOCKED；
        循环正常结束时剩余的 NOT_STARTED 任务（例如循环依赖）同样记为 BLOCKED；
        超时或中断时其余未结束的任务记为 INCOMPLETE

        Args:
            graph: 依赖图
            elapsed: 运行耗时（秒）
            incomplete_reason: 运行提前结束的原因（timeout / interrupted）

        Returns:
            RunReport 实例
        """
        resolved: Dict[str, ReportStatus] = {}
        visiting = set()

        def resolve(task: Task) -> ReportStatus:
            if task.name in resolved:
                return resolved[task.name]

            status = task.status
            if status == TaskStatus.FINISHED:
                result = ReportStatus.FINISHED
            elif status == TaskStatus.FAILED:
                result = ReportStatus.FAILED
            elif task.name in visiting:
                return ReportStatus.INCOMPLETE
            elif status == TaskStatus.IN_PROGRESS:
                result = ReportStatus.INCOMPLETE
            else:
                visiting.add(task.name)
                dep_states = [resolve(dep) for dep in graph.dependencies(task)]
                visiting.discard(task.name)
                poisoned = any(s in (ReportStatus.FAILED, ReportStatus.BLOCKED) for s in dep_states)
                if poisoned or incomplete_reason is None:
                    result = ReportStatus.BLOCKED
                else:
                    result = ReportStatus.INCOMPLETE

            resolved[task.name] = result
            return result

        outcomes = []
        for task, deps in graph.items():
            status = resolve(task)
            blocked_by: Tuple[str, ...] = ()
            if status == ReportStatus.BLOCKED:
                blocked_by = tuple(
                    dep.name
                    for dep in deps
                    if resolved.get(dep.name) in (ReportStatus.FAILED, ReportStatus.BLOCKED)
                )
            outcomes.append(
                TaskOutcome(
                    name=task.name,
                    status=status,
                    mode=task.mode,
                    commands=len(task.commands),
                    blocked_by=blocked_by,
                )
            )

        return cls(outcomes=outcomes, elapsed=elapsed, incomplete_reason=incomplete_reason)

    # ========== 查询 ==========

    @property
    def succeeded(self) -> bool:
        return self.incomplete_reason is None and all(
            outcome.status == ReportStatus.FINISHED for outcome in self.outcomes
        )

    def counts(self) -> Dict[ReportStatus, int]:
        counter = Counter(outcome.status for outcome in self.outcomes)
        return {status: counter.get(status, 0) for status in ReportStatus}

    def get(self, name: str) -> Optional[TaskOutcome]:
        for outcome in self.outcomes:
            if outcome.name == name:
                return outcome
        return None

    def __len__(self) -> int:
        return len(self.outcomes)

    # ========== 输出 ==========

    def log(self) -> None:
        """输出最终报告"""
        counts = self.counts()
        total = len(self.outcomes)

        logger.info("=" * 70)
        logger.info(
            f"📊 Run report: {counts[ReportStatus.FINISHED]}/{total} FINISHED "
            f"(elapsed: {format_elapsed(self.elapsed)})"
        )
        if self.incomplete_reason:
            logger.warning(f"⚠️  Run incomplete: {self.incomplete_reason}")
        logger.info("-" * 70)

        for outcome in self.outcomes:
            line = f"{_SYMBOLS[outcome.status]} {outcome.name}: {outcome.status.value}"
            if outcome.blocked_by:
                line += f" (blocked by: {', '.join(outcome.blocked_by)})"

            if outcome.status == ReportStatus.FINISHED:
                logger.info(line)
            else:
                logger.warning(line)

        logger.info("-" * 70)
        summary = ", ".join(f"{status.value}={count}" for status, count in counts.items() if count)
        logger.info(f"Summary: {summary or 'no tasks'}")
        logger.info("=" * 70)
