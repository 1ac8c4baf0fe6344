"""
Makefile Generator - 动态模式下生成词频统计的依赖描述
"""

import os
from pathlib import Path
from typing import List, Optional, Sequence, Union

from loguru import logger

AGGREGATE_TARGET = "total.txt"
SUM_PIPELINE = "awk '{sum += $1} END {print sum}'"


def _in_dir(directory: Optional[str], filename: str) -> str:
    return os.path.join(directory, filename) if directory else filename


def generate_count_makefile(
    split_files: Sequence[str],
    count_command: str = "wc -w < {part} > {count}",
    output_dir: Optional[str] = None,
) -> str:
    """
    为拆分后的输入文件生成依赖描述

    每个分片对应一个 count<i>.txt 目标，最后由 total.txt 汇总所有计数

    Args:
        split_files: 分片文件路径
        count_command: 计数命令模板，支持 {part} 和 {count} 占位符
        output_dir: 输出目录（共享目录模式下所有产物写入该目录）

    Returns:
        依赖描述文本
    """
    if not split_files:
        raise ValueError("At least one split file is required")

    lines: List[str] = []
    count_files: List[str] = []

    for index, part in enumerate(split_files, start=1):
        count_file = _in_dir(output_dir, f"count{index}.txt")
        count_files.append(count_file)
        lines.append(f"{count_file}: {part}")
        lines.append("\t" + count_command.format(part=part, count=count_file))
        lines.append("")

    total = _in_dir(output_dir, AGGREGATE_TARGET)
    joined = " ".join(count_files)
    lines.append(f"{total}: {joined}")
    lines.append(f"\tcat {joined} | {SUM_PIPELINE} > {total}")
    lines.append("")

    return "\n".join(lines)


def write_makefile(path: Union[str, Path], content: str) -> Path:
    """写入生成的依赖描述文件"""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    logger.info(f"✅ Generated dependency file: {target}")
    return target


def read_total(path: Union[str, Path]) -> Optional[int]:
    """
    读取汇总结果

    Returns:
        总数，文件不存在或内容无效时返回 None
    """
    result = Path(path)
    if not result.exists():
        return None

    first_line = result.read_text(encoding="utf-8").strip().splitlines()
    if not first_line:
        return None
    try:
        return int(first_line[0].strip())
    except ValueError:
        logger.warning(f"⚠️  Unexpected content in {result}: {first_line[0]!r}")
        return None
