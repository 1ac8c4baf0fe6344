"""
Conductor - 主入口

协调进程，负责：
1. 解析节点列表，构建节点池
2. 解析依赖描述（或在动态模式下拆分输入并生成依赖描述）
3. 并行执行依赖图并输出最终报告
"""

import argparse
import dataclasses
import os
import sys
from typing import List, Optional, Sequence, Tuple

from loguru import logger
from pydantic import ValidationError

from cluster import NodePool
from core.config import ExecutionConfig, Settings, get_settings
from core.exceptions import (
    ConfigurationException,
    InvalidConfigException,
    ParseException,
    SchedulingException,
    SchedulingTimeoutException,
)
from core.utils.logger import setup_logger
from dispatch import TaskDispatcher
from graph import AGGREGATE_TARGET, GraphBuilder, generate_count_makefile, read_total, write_makefile
from graph.dependency_graph import DependencyGraph
from shared.file_splitter import cleanup_files, split_equitably
from .report import RunReport
from .signal_handler import ShutdownSignalHandler
from .task_scheduler import TaskScheduler

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_TASKS_FAILED = 2

GENERATED_MAKEFILE = "Makefile.generated"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="conductor",
        description="Run a make-style dependency file across a pool of worker nodes",
    )
    parser.add_argument(
        "nodes",
        help="Comma-separated node list, e.g. '[node1,node2:3001]'",
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "-f", "--makefile",
        default="Makefile",
        help="Dependency file to execute (default: Makefile)",
    )
    source.add_argument(
        "-i", "--input",
        help="Split this file across the nodes and count its words (dynamic mode)",
    )

    parser.add_argument("--shared-dir", help="Directory visible to every node (disables result transfer)")
    parser.add_argument("--poll-interval", type=float, help="Scheduler poll interval in seconds")
    parser.add_argument("--timeout", type=float, help="Overall run timeout in seconds")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Log level (default: from settings)",
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--cleanup",
        action="store_true",
        help="Remove generated part/count files after a dynamic run",
    )
    return parser


def build_config(settings: Settings, args: argparse.Namespace) -> ExecutionConfig:
    """
    根据配置和命令行参数构造执行配置

    Raises:
        InvalidConfigException: 命令行参数无效
    """
    config = ExecutionConfig.from_settings(settings)
    overrides = {}

    if args.poll_interval is not None:
        if args.poll_interval <= 0:
            raise InvalidConfigException("--poll-interval", args.poll_interval, "must be positive")
        overrides["POLL_INTERVAL"] = args.poll_interval

    if args.timeout is not None:
        if args.timeout <= 0:
            raise InvalidConfigException("--timeout", args.timeout, "must be positive")
        overrides["RUN_TIMEOUT"] = args.timeout

    if args.shared_dir:
        if not os.path.isdir(args.shared_dir):
            raise InvalidConfigException("--shared-dir", args.shared_dir, "directory does not exist")
        overrides["SHARED_DIR"] = os.path.abspath(args.shared_dir)

    return dataclasses.replace(config, **overrides) if overrides else config


def prepare_dynamic_graph(
    input_file: str,
    pool: NodePool,
    config: ExecutionConfig,
    settings: Settings,
) -> Tuple[DependencyGraph, List[str]]:
    """
    动态模式：按节点数拆分输入文件并生成依赖描述

    Returns:
        (依赖图, 生成的文件列表)

    Raises:
        ParseException: 输入文件不存在或无法拆分
    """
    work_dir = config.SHARED_DIR or "."

    try:
        parts = split_equitably(input_file, pool.size, output_prefix=os.path.join(work_dir, "part"))
    except (OSError, ValueError) as e:
        raise ParseException(input_file, str(e)) from e

    # 命令在工作目录中执行，依赖描述只引用相对路径
    relative_parts = [os.path.basename(part) for part in parts]
    content = generate_count_makefile(relative_parts, settings.COUNT_COMMAND)
    makefile = write_makefile(os.path.join(work_dir, GENERATED_MAKEFILE), content)

    graph = GraphBuilder().build_from_file(makefile)
    generated = list(parts) + [str(makefile)]
    generated += [os.path.join(work_dir, f"count{i}.txt") for i in range(1, len(parts) + 1)]
    return graph, generated


def execute(args: argparse.Namespace, settings: Settings) -> int:
    config = build_config(settings, args)
    pool = NodePool.from_spec(args.nodes, config)

    generated: List[str] = []
    if args.input:
        graph, generated = prepare_dynamic_graph(args.input, pool, config, settings)
    else:
        graph = GraphBuilder().build_from_file(args.makefile)

    graph.bind_pool(pool)
    graph.log_graph()

    dispatcher = TaskDispatcher(pool=pool, config=config)
    scheduler = TaskScheduler(dispatcher=dispatcher, config=config)
    scheduler.load_graph(graph)

    try:
        with ShutdownSignalHandler().on_shutdown(scheduler.stop):
            report = scheduler.run()
    finally:
        dispatcher.close()
        pool.log_status()
        logger.info(f"📊 Dispatch statistics: {dispatcher.metrics.get_statistics()}")

    if args.input:
        log_total(config)
        if args.cleanup:
            cleanup_files(generated)

    return exit_code_for(report)


def log_total(config: ExecutionConfig) -> None:
    total_path = os.path.join(config.SHARED_DIR or ".", AGGREGATE_TARGET)
    total = read_total(total_path)
    if total is None:
        logger.warning(f"⚠️  No aggregated result found in {total_path}")
    else:
        logger.info(f"📊 Total word count: {total}")


def exit_code_for(report: RunReport) -> int:
    if report.incomplete_reason is not None:
        return EXIT_ERROR
    return EXIT_SUCCESS if report.succeeded else EXIT_TASKS_FAILED


def main(argv: Optional[Sequence[str]] = None) -> int:
    """协调进程主入口"""
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValidationError as e:
        logger.error(f"✗ Invalid settings: {e}")
        return EXIT_ERROR

    setup_logger(args.log_level or settings.LOG_LEVEL, args.log_file or settings.LOG_FILE)

    logger.info("=" * 70)
    logger.info("🧠 Conductor - distributed make runner")
    logger.info("=" * 70)

    try:
        return execute(args, settings)
    except ConfigurationException as e:
        logger.error(f"✗ Configuration error: {e}")
    except ParseException as e:
        logger.error(f"✗ {e}")
    except SchedulingTimeoutException as e:
        logger.error(f"✗ {e}")
    except SchedulingException as e:
        logger.error(f"✗ Scheduling error: {e}")
    except KeyboardInterrupt:
        logger.warning("⚠️  Interrupted")
    return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
