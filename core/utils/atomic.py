"""
线程安全的状态单元
"""

import threading
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class AtomicCell(Generic[T]):
    """
    线程安全的值容器

    所有读写都经过同一把锁，写入对其他线程的后续读取可见，
    compare_and_set 提供原子的检查并修改

    用法示例:
        cell = AtomicCell(NodeStatus.FREE)
        if cell.compare_and_set(NodeStatus.FREE, NodeStatus.OCCUPIED):
            ...
    """

    def __init__(self, value: T) -> None:
        self._value = value
        self._lock = threading.Lock()

    def get(self) -> T:
        with self._lock:
            return self._value

    def set(self, value: T) -> None:
        with self._lock:
            self._value = value

    def compare_and_set(self, expected: T, new: T) -> bool:
        """
        当前值等于 expected 时写入 new

        Returns:
            写入成功返回 True
        """
        with self._lock:
            if self._value != expected:
                return False
            self._value = new
            return True

    def update(self, fn: Callable[[T], Optional[T]]) -> T:
        """
        在锁内基于当前值计算新值

        fn 返回 None 表示保持不变

        Returns:
            更新后的值
        """
        with self._lock:
            new = fn(self._value)
            if new is not None:
                self._value = new
            return self._value

    def __repr__(self) -> str:
        return f"AtomicCell({self.get()!r})"
