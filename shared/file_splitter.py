"""
File Splitter - 输入文件拆分

把一个大文件按行数（或字节数）均匀拆成 N 份，每个节点处理一份
"""

from pathlib import Path
from typing import Iterable, List, Union

from loguru import logger

PathLike = Union[str, Path]


def _part_path(output_prefix: str, index: int) -> str:
    return f"{output_prefix}{index}.txt"


def _validate(input_file: PathLike, parts: int) -> Path:
    if input_file is None or not str(input_file).strip():
        raise ValueError("Input file cannot be empty")
    if parts < 1:
        raise ValueError("Number of parts must be at least 1")

    path = Path(input_file)
    if not path.is_file():
        raise FileNotFoundError(f"Input file not found: {path}")
    return path


def split_equitably(input_file: PathLike, parts: int, output_prefix: str = "part") -> List[str]:
    """
    按行数均匀拆分文件

    前 (总行数 % parts) 份各多分一行，因此任意两份的行数差不超过 1

    Args:
        input_file: 输入文件
        parts: 拆分份数
        output_prefix: 输出文件前缀，生成 <prefix>1.txt ... <prefix>N.txt

    Returns:
        生成的文件路径列表
    """
    path = _validate(input_file, parts)

    with open(path, "r", encoding="utf-8") as f:
        total_lines = sum(1 for _ in f)

    base, remainder = divmod(total_lines, parts)
    logger.info(
        f"✂️  Splitting {path} ({total_lines} lines) into {parts} parts: "
        f"{base} lines each, {remainder} part(s) with one extra"
    )

    output_files: List[str] = []
    with open(path, "r", encoding="utf-8") as reader:
        for index in range(1, parts + 1):
            lines_to_write = base + (1 if index <= remainder else 0)
            output_file = _part_path(output_prefix, index)
            Path(output_file).parent.mkdir(parents=True, exist_ok=True)

            written = 0
            with open(output_file, "w", encoding="utf-8") as writer:
                while written < lines_to_write:
                    line = reader.readline()
                    if not line:
                        break
                    writer.write(line if line.endswith("\n") else line + "\n")
                    written += 1

            output_files.append(output_file)
            logger.debug(f"Created {output_file} with {written} lines")

    return output_files


def split_by_size(input_file: PathLike, parts: int, output_prefix: str = "part") -> List[str]:
    """
    按字节数近似均匀拆分文件（不拆开单行）

    适用于行长度差异很大的文件，最后一份承接剩余内容

    Args:
        input_file: 输入文件
        parts: 拆分份数
        output_prefix: 输出文件前缀

    Returns:
        生成的文件路径列表
    """
    path = _validate(input_file, parts)
    target_bytes = path.stat().st_size // parts
    logger.info(f"✂️  Splitting {path} into {parts} parts of ~{target_bytes} bytes")

    output_files: List[str] = []
    with open(path, "r", encoding="utf-8") as reader:
        for index in range(1, parts + 1):
            output_file = _part_path(output_prefix, index)
            Path(output_file).parent.mkdir(parents=True, exist_ok=True)
            is_last = index == parts

            written = 0
            with open(output_file, "w", encoding="utf-8") as writer:
                for line in iter(reader.readline, ""):
                    writer.write(line)
                    written += len(line.encode("utf-8"))
                    if not is_last and written >= target_bytes:
                        break

            output_files.append(output_file)
            logger.debug(f"Created {output_file} with ~{written} bytes")

    return output_files


def cleanup_files(files: Iterable[PathLike]) -> None:
    """删除生成的拆分文件，失败只记录日志"""
    for file in files or []:
        try:
            Path(file).unlink(missing_ok=True)
            logger.debug(f"Deleted {file}")
        except OSError as e:
            logger.error(f"Failed to delete {file}: {e}")
