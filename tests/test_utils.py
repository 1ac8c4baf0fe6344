"""
工具函数测试
"""

import pytest

from core.utils import (
    AtomicCell,
    format_elapsed,
    parse_node_entry,
    split_node_list,
    validate_port,
)


def test_format_elapsed():
    assert format_elapsed(3.25) == "0:00:03.250"
    assert format_elapsed(3725) == "1:02:05.000"
    assert format_elapsed(-1) == "0:00:00.000"


def test_split_node_list():
    assert split_node_list("[\"a\", 'b:1', ]") == ["a", "b:1"]


def test_parse_node_entry():
    assert parse_node_entry("node", 3000) == ("node", 3000)
    assert parse_node_entry("node:4000", 3000) == ("node", 4000)
    assert parse_node_entry("fe80::1", 3000) == ("fe80::1", 3000)
    with pytest.raises(ValueError):
        parse_node_entry(":4000", 3000)


@pytest.mark.parametrize("port,expected", [(1024, 1024), ("65535", 65535)])
def test_validate_port(port, expected):
    assert validate_port(port) == expected


@pytest.mark.parametrize("port", [1023, 65536, "x", None])
def test_validate_port_rejects(port):
    with pytest.raises(ValueError):
        validate_port(port)


def test_atomic_cell():
    cell = AtomicCell(1)
    assert cell.compare_and_set(1, 2)
    assert not cell.compare_and_set(1, 3)
    assert cell.update(lambda v: None) == 2
    assert cell.update(lambda v: v + 1) == 3
    cell.set(10)
    assert cell.get() == 10
