"""
节点池测试：构造校验、master 选择、并发互斥
"""

import threading
from collections import Counter

import pytest

from cluster import ComputeNode, NodePool
from core.config import ExecutionConfig
from core.enums import NodeStatus
from core.exceptions import InvalidConfigException


# ======================================================================
# 构造
# ======================================================================


class TestPoolConstruction:
    def test_spec_with_brackets_and_default_port(self):
        pool = NodePool.from_spec("[localhost,localhost:3001]")

        assert pool.size == 2
        assert [n.address for n in pool.nodes] == ["localhost:3000", "localhost:3001"]
        assert pool.master is pool.nodes[0]

    def test_quotes_and_whitespace_are_stripped(self):
        pool = NodePool.from_spec("'node1 , node2:4000, ,node3'")

        assert [n.address for n in pool.nodes] == ["node1:3000", "node2:4000", "node3:3000"]
        assert pool.master.host == "node1"

    @pytest.mark.parametrize("count", [1, 5, 20])
    def test_master_is_first_listed_node(self, count):
        spec = ",".join(f"host{i}:{4000 + i}" for i in range(count))
        pool = NodePool.from_spec(spec)

        assert len(pool) == count
        assert pool.master.address == "host0:4000"

    def test_default_port_comes_from_config(self):
        pool = NodePool.from_spec("a,b", ExecutionConfig(DEFAULT_PORT=5555))
        assert {n.port for n in pool.nodes} == {5555}

    def test_all_nodes_start_free(self):
        pool = NodePool.from_spec("a,b,c")
        assert pool.available == 3
        assert all(n.status == NodeStatus.FREE for n in pool.nodes)


class TestInvalidSpecs:
    @pytest.mark.parametrize("spec", ["", "   ", "[]", "[ , ]", None])
    def test_empty_spec(self, spec):
        with pytest.raises(InvalidConfigException):
            NodePool.from_spec(spec)

    @pytest.mark.parametrize("spec", ["node:80", "node:70000", "node:abc", "node:"])
    def test_invalid_port(self, spec):
        with pytest.raises(InvalidConfigException):
            NodePool.from_spec(spec)

    def test_too_many_nodes(self):
        config = ExecutionConfig(MAX_NODES=3)
        with pytest.raises(InvalidConfigException):
            NodePool.from_spec("a,b,c,d", config)

    def test_too_few_nodes(self):
        config = ExecutionConfig(MIN_NODES=2)
        with pytest.raises(InvalidConfigException):
            NodePool.from_spec("a", config)

    def test_default_maximum_is_enforced(self):
        spec = ",".join(f"h{i}" for i in range(1001))
        with pytest.raises(InvalidConfigException):
            NodePool.from_spec(spec)

    def test_empty_node_sequence(self):
        with pytest.raises(InvalidConfigException):
            NodePool([])


# ======================================================================
# 获取 / 释放
# ======================================================================


class TestAcquireRelease:
    def test_acquire_scans_in_order_and_returns_none_when_busy(self):
        pool = NodePool.from_spec("a,b")

        first = pool.acquire_available()
        second = pool.acquire_available()

        assert first.host == "a"
        assert second.host == "b"
        assert pool.acquire_available() is None
        assert pool.available == 0

    def test_release_makes_node_available_again(self):
        pool = NodePool.from_spec("a")
        node = pool.acquire_available()

        pool.release(node)

        assert node.status == NodeStatus.FREE
        assert pool.acquire_available() is node

    def test_release_is_idempotent_and_ignores_unknown(self):
        pool = NodePool.from_spec("a")
        node = pool.acquire_available()

        pool.release(node)
        pool.release(node)
        pool.release(None)
        pool.release(ComputeNode("elsewhere", 3000))

        assert pool.available == 1

    def test_stats(self):
        pool = NodePool.from_spec("a,b,c,d")
        pool.acquire_available()

        stats = pool.get_stats()
        assert stats["total_nodes"] == 4
        assert stats["occupied_nodes"] == 1
        assert stats["utilization"] == pytest.approx(25.0)

    def test_same_address_twice_gives_two_slots(self):
        pool = NodePool.from_spec("localhost,localhost")
        assert pool.acquire_available() is not pool.acquire_available()


class TestMutualExclusion:
    def test_no_node_is_held_by_two_callers(self):
        """大量线程争抢小节点池，任何时刻同一节点最多被一个线程持有"""
        pool = NodePool.from_spec("a,b,c")
        holders = Counter()
        holders_lock = threading.Lock()
        violations = []
        acquired_total = Counter()

        def worker():
            for _ in range(300):
                node = pool.acquire_available()
                if node is None:
                    continue
                with holders_lock:
                    holders[id(node)] += 1
                    if holders[id(node)] > 1:
                        violations.append(node.address)
                    acquired_total[node.address] += 1
                with holders_lock:
                    holders[id(node)] -= 1
                pool.release(node)

        threads = [threading.Thread(target=worker) for _ in range(16)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert violations == []
        assert sum(acquired_total.values()) > 0
        assert pool.available == 3
