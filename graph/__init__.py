"""
Graph - 任务模型、依赖图与依赖描述解析
"""

from .builder import GraphBuilder
from .classifier import AggregationClassifier
from .dependency_graph import DependencyGraph
from .generator import AGGREGATE_TARGET, generate_count_makefile, read_total, write_makefile
from .task import Task

__all__ = [
    "GraphBuilder",
    "AggregationClassifier",
    "DependencyGraph",
    "Task",
    "AGGREGATE_TARGET",
    "generate_count_makefile",
    "read_total",
    "write_makefile",
]
