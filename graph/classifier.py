"""
Aggregation Classifier - 汇总任务识别

决定任务在协调进程本地执行还是分发到远程节点
"""

import os
from typing import Iterable, Sequence

from loguru import logger

from core.enums import ExecutionMode

DEFAULT_AGGREGATE_TARGETS = ("total.txt",)


class AggregationClassifier:
    """
    汇总任务分类器

    满足以下任一条件即视为汇总任务（LOCAL_AGGREGATE）：
    - 目标文件名属于最终汇总产物（默认 total.txt，忽略目录前缀）
    - 任一命令同时包含拼接命令、统计命令和中间结果文件的命名标记
      （默认 "cat" + "awk" + "count"）

    第二条是基于命令文本的启发式规则，普通远程任务如果恰好包含这些子串
    也会被判为汇总任务。命中该规则时会记录一条 debug 日志便于排查，
    需要时可通过子类或构造参数覆盖，或在建图后直接设置 task.mode。
    """

    def __init__(
        self,
        aggregate_targets: Sequence[str] = DEFAULT_AGGREGATE_TARGETS,
        combine_keyword: str = "cat",
        summarize_keyword: str = "awk",
        naming_marker: str = "count",
    ) -> None:
        self.aggregate_targets = tuple(aggregate_targets)
        self.combine_keyword = combine_keyword
        self.summarize_keyword = summarize_keyword
        self.naming_marker = naming_marker

    def is_aggregation(self, name: str, commands: Iterable[str]) -> bool:
        if os.path.basename(name) in self.aggregate_targets:
            return True

        for command in commands:
            if self._combines_results(command):
                logger.debug(
                    f"Task {name} classified as aggregation by command pattern: {command}"
                )
                return True
        return False

    def classify(self, name: str, commands: Iterable[str]) -> ExecutionMode:
        if self.is_aggregation(name, commands):
            return ExecutionMode.LOCAL_AGGREGATE
        return ExecutionMode.REMOTE

    def _combines_results(self, command: str) -> bool:
        return (
            self.combine_keyword in command
            and self.summarize_keyword in command
            and self.naming_marker in command
        )
