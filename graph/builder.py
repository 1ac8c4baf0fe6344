"""
Graph Builder - 依赖图构建器

解析 Makefile 风格的依赖描述：

    target: dep1 dep2
    \tcommand 1
    \tcommand 2

- 不以 tab 开头且包含冒号的行定义一个目标
- 紧随其后、以 tab 开头的行是该目标的命令，遇到第一个非 tab 行结束
- 以 # 开头的行和空行被忽略

单次顺序扫描，同名任务只创建一次
"""

from pathlib import Path
from typing import Iterable, List, Optional, Union

from loguru import logger

from core.exceptions import ParseException
from .classifier import AggregationClassifier
from .dependency_graph import DependencyGraph
from .task import Task


class GraphBuilder:
    """
    依赖图构建器

    使用示例:
        builder = GraphBuilder()
        graph = builder.build_from_file("Makefile")
    """

    def __init__(self, classifier: Optional[AggregationClassifier] = None) -> None:
        """
        Args:
            classifier: 汇总任务分类器（可选，默认使用内置规则）
        """
        self.classifier = classifier or AggregationClassifier()

    def build_from_file(self, path: Union[str, Path]) -> DependencyGraph:
        """
        从文件构建依赖图

        Raises:
            ParseException: 文件无法读取或格式错误
        """
        if path is None or not str(path).strip():
            raise ParseException("<none>", "File path cannot be empty")

        logger.info(f"📄 Reading dependency file: {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                return self.build(f, source=str(path))
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"❌ Error reading {path}: {e}")
            raise ParseException(str(path), str(e)) from e

    def build_from_text(self, text: str, source: str = "<text>") -> DependencyGraph:
        return self.build(text.splitlines(), source=source)

    def build(self, lines: Iterable[str], source: str = "<lines>") -> DependencyGraph:
        """
        从行序列构建依赖图

        Args:
            lines: 文本行（可带换行符）
            source: 来源描述，用于日志和异常信息

        Returns:
            DependencyGraph

        Raises:
            ParseException: 目标名为空
        """
        graph = DependencyGraph()
        current: Optional[Task] = None

        for lineno, raw in enumerate(lines, start=1):
            line = raw.rstrip("\r\n")

            # 命令行：只在目标定义之后有效
            if line.startswith("\t"):
                if current is None:
                    logger.debug(f"{source}:{lineno}: ignoring command outside of a rule")
                    continue
                command = line[1:]
                if command.strip():
                    current.add_command(command)
                continue

            current = None

            if not line.strip() or line.startswith("#"):
                continue

            if ":" in line and not line[0].isspace():
                current = self._parse_rule(graph, line, source, lineno)
            else:
                logger.debug(f"{source}:{lineno}: ignoring line: {line!r}")

        self._finalize(graph)

        logger.info(f"✅ Parsed {source}: {len(graph)} tasks found")
        if len(graph) == 0:
            logger.warning(f"⚠️  No tasks found in {source}")

        return graph

    def _parse_rule(self, graph: DependencyGraph, line: str, source: str, lineno: int) -> Task:
        target_name, _, deps_part = line.partition(":")
        target_name = target_name.strip()
        if not target_name:
            raise ParseException(source, f"line {lineno}: missing target name")

        target = graph.intern(target_name)
        if graph.dependencies(target) or target.commands:
            logger.warning(f"{source}:{lineno}: target {target_name} redefined, merging rules")

        dependencies: List[Task] = [graph.intern(name) for name in deps_part.split()]
        graph.add_task(target, dependencies)
        return target

    def _finalize(self, graph: DependencyGraph) -> None:
        """产物任务直接标记为完成，其余任务确定执行位置"""
        for task in graph:
            if task.is_artifact:
                task.mark_finished()
                logger.debug(f"File dependency {task.name} marked as FINISHED")
            else:
                task.mode = self.classifier.classify(task.name, task.commands)
