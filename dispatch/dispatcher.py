"""
Task Dispatcher - 任务分发器

负责执行单个任务的全部命令，并把结果写回任务状态
"""

import random
import shlex
import threading
from typing import Optional

from loguru import logger

from cluster import ComputeNode, NodePool
from core.config import ExecutionConfig, get_settings
from core.enums import ExecutionMode, TaskStatus
from core.exceptions import (
    DispatchCancelledException,
    DispatchException,
    LocalExecutionException,
    RemoteExecutionException,
    TaskStateException,
    TransferException,
)
from core.utils import format_elapsed
from graph.task import Task
from .context import DispatchContext
from .lease import NodeLease
from .local import LocalRunner
from .metrics import DispatchMetrics
from .remote import HttpRemoteExecutor, RemoteExecutor
from .stages import DispatchStage
from .transfer import ResultTransfer, is_same_host


class TaskDispatcher:
    """
    任务分发器

    架构说明：
    - 汇总任务在本地执行，其余任务在租用的节点上远程执行
    - 使用 NodeLease 确保节点在任何退出路径上都被释放
    - 使用 DispatchContext / DispatchStage 记录执行过程
    - 任一命令失败即停止该任务剩余命令
    - 所有失败都只体现在任务状态上，dispatch() 不向外抛出异常
    """

    def __init__(
        self,
        pool: Optional[NodePool] = None,
        remote_executor: Optional[RemoteExecutor] = None,
        local_runner: Optional[LocalRunner] = None,
        transfer: Optional[ResultTransfer] = None,
        config: Optional[ExecutionConfig] = None,
        metrics: Optional[DispatchMetrics] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """
        初始化分发器

        Args:
            pool: 节点池（可选，未提供时使用任务绑定的节点池）
            remote_executor: 远程执行客户端（可选，用于依赖注入）
            local_runner: 本地执行器（可选，用于依赖注入）
            transfer: 结果回传（可选，用于依赖注入）
            config: 执行配置（可选，默认从 Settings 构造）
            metrics: 指标收集器（可选）
            rng: 随机数生成器，用于重试抖动（可选）
        """
        self.config = config or ExecutionConfig.from_settings()
        self.pool = pool
        self.remote_executor = remote_executor or HttpRemoteExecutor()
        self.local_runner = local_runner or LocalRunner()
        self.transfer = transfer or ResultTransfer(get_settings().TRANSFER_COMMAND)
        self.metrics = metrics or DispatchMetrics()
        self._rng = rng or random.Random()
        self._cancel_event = threading.Event()

    # ========== 公共接口 ==========

    def dispatch(self, task: Task) -> TaskStatus:
        """
        执行任务的全部命令

        Args:
            task: 待执行任务（NOT_STARTED 或已由调度器置为 IN_PROGRESS）

        Returns:
            任务的最终状态
        """
        if task.is_artifact:
            self._finish_artifact(task)
            return task.status

        if task.status == TaskStatus.NOT_STARTED and not task.try_start():
            logger.debug(f"[{task.name}] Already started elsewhere, skipping")
            return task.status

        if task.status != TaskStatus.IN_PROGRESS:
            logger.warning(f"⚠️  [{task.name}] Cannot dispatch task in state {task.status.value}")
            return task.status

        context = DispatchContext(task_name=task.name, mode=task.mode)
        self.metrics.record("dispatched")
        logger.info(
            f"🚀 [{task.name}] Dispatching {len(task.commands)} command(s) ({task.mode.value})"
        )

        try:
            for command in task.commands:
                if self._cancel_event.is_set():
                    raise DispatchCancelledException(task.name)

                if task.mode == ExecutionMode.LOCAL_AGGREGATE:
                    self._run_local(command, context)
                else:
                    self._run_remote(task, command, context)
                context.commands_run += 1

        except DispatchException as e:
            logger.error(f"❌ [{task.name}] {e}")
            context.error = e

        except Exception as e:
            logger.opt(exception=e).error(f"❌ [{task.name}] Unexpected dispatch error: {e}")
            context.error = e

        # 根据执行上下文更新最终状态
        if context.has_error():
            self._fail(task, context)
        else:
            self._complete(task, context)

        return task.status

    def cancel(self) -> None:
        """取消运行：中断正在等待节点的任务并终止本地命令"""
        if self._cancel_event.is_set():
            return
        logger.warning("🛑 Cancelling outstanding dispatches")
        self._cancel_event.set()
        self.local_runner.cancel_all()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def close(self) -> None:
        self.remote_executor.close()

    # ========== 执行 ==========

    def _run_local(self, command: str, context: DispatchContext) -> None:
        self._on_stage(DispatchStage.RUNNING, context)
        self.metrics.record("local_commands")
        logger.info(f"[{context.task_name}] Running locally: {command}")

        result = self.local_runner.run(self._prepare_command(command))
        context.exit_code = result.exit_code
        if not result.succeeded:
            for line in result.stderr_lines():
                logger.error(f"[ERROR] {line}")
            raise LocalExecutionException(command, result.exit_code)

    def _run_remote(self, task: Task, command: str, context: DispatchContext) -> None:
        pool = self._resolve_pool(task)
        lease = NodeLease(
            pool,
            self.config,
            metrics=self.metrics,
            rng=self._rng,
            cancel_event=self._cancel_event,
        )

        with lease.acquire(task.name) as node:
            context.node_address = node.address
            self._on_stage(DispatchStage.NODE_ACQUIRED, context)

            self._on_stage(DispatchStage.RUNNING, context)
            self.metrics.record("remote_commands")
            logger.info(f"[{task.name}] Running on {node.address}: {command}")
            exit_code = self.remote_executor.execute(node, self._prepare_command(command))
            context.exit_code = exit_code

        self._on_stage(DispatchStage.NODE_RELEASED, context)

        if exit_code != 0:
            raise RemoteExecutionException(node.address, f"exit code {exit_code}", exit_code)

        if task.produces_file and not self.config.SHARED_DIR:
            self._retrieve(task, node, pool, context)

    def _retrieve(self, task: Task, node: ComputeNode, pool: NodePool, context: DispatchContext) -> None:
        if is_same_host(node.host, pool.master.host):
            logger.debug(f"[{task.name}] Produced on master host {node.host}, no transfer needed")
            return

        try:
            if self.transfer.transfer(node.host, pool.master.host, task.name):
                self.metrics.record("transfers")
            context.transferred.append(task.name)
            self._on_stage(DispatchStage.TRANSFERRED, context)
        except TransferException as e:
            self.metrics.record("transfer_failures")
            logger.warning(f"⚠️  [{task.name}] {e}")

    def _prepare_command(self, command: str) -> str:
        if self.config.SHARED_DIR:
            return f"cd {shlex.quote(self.config.SHARED_DIR)} && {command}"
        return command

    def _resolve_pool(self, task: Task) -> NodePool:
        pool = self.pool if self.pool is not None else task.pool
        if pool is None:
            raise DispatchException(f"Task {task.name}: no node pool bound")
        return pool

    # ========== 状态 ==========

    def _finish_artifact(self, task: Task) -> None:
        if task.status != TaskStatus.NOT_STARTED:
            return
        try:
            task.mark_finished()
        except TaskStateException:
            # 被其他线程抢先完成
            pass

    def _complete(self, task: Task, context: DispatchContext) -> None:
        try:
            task.mark_finished()
        except TaskStateException as e:
            logger.error(f"Failed to mark {task.name} as finished: {e}")
            return
        self._on_stage(DispatchStage.COMPLETED, context)
        self.metrics.record("finished")
        logger.info(
            f"✅ [{task.name}] Finished (elapsed: {format_elapsed(context.elapsed_time())})"
        )

    def _fail(self, task: Task, context: DispatchContext) -> None:
        self._on_stage(DispatchStage.FAILED, context)
        self.metrics.record("failed")
        try:
            task.mark_failed()
        except TaskStateException as e:
            logger.error(f"Failed to mark {task.name} as failed: {e}")

    def _on_stage(self, stage: DispatchStage, context: DispatchContext) -> None:
        context.stage = stage
        logger.debug(f"[{context.task_name}] entered stage: {stage.value}")
