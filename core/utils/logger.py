"""
Loguru-based logging configuration for the orchestrator and worker service
"""
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

# 并发任务在各自线程中输出日志，线程名用于区分任务
CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{thread.name: <12}</cyan> | <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | "
    "{name}:{function}:{line} | {message}"
)


def setup_logger(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    colorize: Optional[bool] = None,
) -> None:
    """
    配置 loguru 输出

    Args:
        log_level: 日志级别（不区分大小写）
        log_file: 可选的日志文件路径，按大小滚动
        colorize: 是否着色，默认仅在终端输出时着色
    """
    level = log_level.upper()
    if colorize is None:
        colorize = sys.stderr.isatty()

    logger.remove()
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=level,
        colorize=colorize,
        enqueue=True,
    )

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level=level,
            rotation="100 MB",
            retention=5,
            enqueue=True,
        )

    logger.debug(f"Logger initialized (level={level}, file={log_file or '-'})")
