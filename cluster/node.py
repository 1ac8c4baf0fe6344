"""
Compute Node - 计算节点
"""

from core.enums import NodeStatus
from core.utils import AtomicCell, validate_hostname, validate_port


class ComputeNode:
    """
    集群中的一个可寻址计算节点

    身份为 (host, port)，状态只能通过 NodePool 的 acquire/release 改变。
    同一地址可以出现多次（例如同一主机上的多个槽位），因此按对象身份区分。
    """

    def __init__(self, host: str, port: int) -> None:
        validate_hostname(host)
        self.host = host
        self.port = validate_port(port)
        self._status: AtomicCell[NodeStatus] = AtomicCell(NodeStatus.FREE)

    @property
    def status(self) -> NodeStatus:
        return self._status.get()

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def is_free(self) -> bool:
        return self._status.get() == NodeStatus.FREE

    def try_occupy(self) -> bool:
        """FREE -> OCCUPIED，成功返回 True"""
        return self._status.compare_and_set(NodeStatus.FREE, NodeStatus.OCCUPIED)

    def free(self) -> None:
        self._status.set(NodeStatus.FREE)

    def __repr__(self) -> str:
        return f"ComputeNode({self.address}, {self.status.value})"
