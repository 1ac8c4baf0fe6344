"""
Cluster - 计算节点与节点池
"""

from .node import ComputeNode
from .pool import NodePool

__all__ = [
    "ComputeNode",
    "NodePool",
]
