"""
Utility modules for the conductor
"""
from .atomic import AtomicCell
from .logger import setup_logger
from .time_utils import format_elapsed
from .validators import (
    parse_node_entry,
    split_node_list,
    validate_hostname,
    validate_port,
)

__all__ = [
    "AtomicCell",
    "setup_logger",
    "format_elapsed",
    "parse_node_entry",
    "split_node_list",
    "validate_hostname",
    "validate_port",
]
