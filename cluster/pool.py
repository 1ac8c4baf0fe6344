"""
Node Pool - 节点池

线程安全的计算节点分配与释放
"""

import threading
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger

from core.config import ExecutionConfig
from core.exceptions import InvalidConfigException
from core.utils import parse_node_entry, split_node_list
from .node import ComputeNode


class NodePool:
    """
    节点池

    职责：
    - 从节点列表构造固定的节点集合（第一个节点为 master）
    - 在单个临界区内完成"扫描并占用"，保证同一节点不会被两个调用方同时获取
    - 获取失败立即返回 None，由调用方决定是否重试

    构造后成员不可变，只有每个节点的状态会变化
    """

    def __init__(self, nodes: Sequence[ComputeNode], config: Optional[ExecutionConfig] = None) -> None:
        """
        初始化节点池

        Args:
            nodes: 节点序列，顺序即扫描顺序
            config: 执行配置（用于节点数上下限）

        Raises:
            InvalidConfigException: 节点数为 0 或超出范围
        """
        config = config or ExecutionConfig()
        count = len(nodes)

        if count == 0:
            raise InvalidConfigException("nodes", "", "No valid nodes found in the list")
        if count < config.MIN_NODES:
            raise InvalidConfigException(
                "nodes", count, f"At least {config.MIN_NODES} worker node(s) required"
            )
        if count > config.MAX_NODES:
            raise InvalidConfigException(
                "nodes", count, f"Maximum {config.MAX_NODES} worker nodes allowed"
            )

        self._nodes: Tuple[ComputeNode, ...] = tuple(nodes)
        self._master = self._nodes[0]
        self._lock = threading.Lock()

        logger.info(f"🖥️  Node pool initialized with {count} node(s):")
        for node in self._nodes:
            logger.info(f"   - {node.address}")
        logger.info(f"👑 Master node: {self._master.address}")

    @classmethod
    def from_spec(cls, spec: Optional[str], config: Optional[ExecutionConfig] = None) -> "NodePool":
        """
        从节点列表字符串构造节点池

        Args:
            spec: 逗号分隔的 host 或 host:port，可带方括号/引号，
                  例如 "[localhost,localhost:3001]"
            config: 执行配置

        Returns:
            NodePool 实例

        Raises:
            InvalidConfigException: 列表为空、条目无效或节点数超出范围
        """
        config = config or ExecutionConfig()
        if spec is None or not spec.strip():
            raise InvalidConfigException("nodes", spec, "Nodes list cannot be empty")

        nodes: List[ComputeNode] = []
        for entry in split_node_list(spec):
            try:
                host, port = parse_node_entry(entry, config.DEFAULT_PORT)
            except ValueError as e:
                raise InvalidConfigException("nodes", entry, str(e)) from e
            nodes.append(ComputeNode(host, port))

        return cls(nodes, config)

    def acquire_available(self) -> Optional[ComputeNode]:
        """
        按固定顺序获取第一个空闲节点并标记为占用

        Returns:
            获取到的节点，全部占用时返回 None（不阻塞）
        """
        with self._lock:
            for node in self._nodes:
                if node.try_occupy():
                    logger.debug(f"Acquired node {node.address}")
                    return node
        return None

    def release(self, node: Optional[ComputeNode]) -> None:
        """
        释放节点（幂等）

        Args:
            node: 要释放的节点，None 或不属于本池的节点会被忽略
        """
        if node is None:
            return

        with self._lock:
            if not any(n is node for n in self._nodes):
                logger.warning(f"Ignoring release of unknown node {node.address}")
                return
            node.free()
        logger.debug(f"♻️  Released node {node.address}")

    @property
    def master(self) -> ComputeNode:
        """master 节点"""
        return self._master

    @property
    def nodes(self) -> Tuple[ComputeNode, ...]:
        return self._nodes

    @property
    def size(self) -> int:
        return len(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def available(self) -> int:
        """空闲节点数"""
        with self._lock:
            return sum(1 for node in self._nodes if node.is_free)

    def get_stats(self) -> Dict[str, float]:
        """获取节点池统计信息"""
        with self._lock:
            free = sum(1 for node in self._nodes if node.is_free)
        total = len(self._nodes)
        occupied = total - free
        return {
            "total_nodes": total,
            "free_nodes": free,
            "occupied_nodes": occupied,
            "utilization": (occupied / total) * 100.0,
        }

    def log_status(self) -> None:
        """输出当前所有节点状态"""
        logger.info("📊 Node pool status:")
        for node in self._nodes:
            symbol = "✅" if node.is_free else "⏳"
            logger.info(f"   {symbol} {node.address} - {node.status.value}")
