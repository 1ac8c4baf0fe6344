"""
共享测试夹具

- fast_config: 缩短轮询和重试等待的执行配置
- shell_executor: 在本机 bash 中执行"远程"命令的假执行器
- recording_transfer: 只记录调用的结果回传
- log_messages: 收集 loguru 日志
"""

from typing import List

import pytest
from loguru import logger

from core.config import ExecutionConfig
from tests.fakes import RecordingTransfer, ShellRemoteExecutor


@pytest.fixture
def fast_config() -> ExecutionConfig:
    return ExecutionConfig(
        POLL_INTERVAL=0.02,
        RUN_TIMEOUT=30.0,
        RETRY_BASE_DELAY=0.01,
        RETRY_JITTER=0.01,
        MAX_ACQUIRE_RETRIES=500,
        BUSY_LOG_EVERY=10,
    )


@pytest.fixture
def shell_executor() -> ShellRemoteExecutor:
    return ShellRemoteExecutor()


@pytest.fixture
def recording_transfer() -> RecordingTransfer:
    return RecordingTransfer()


@pytest.fixture
def log_messages():
    messages: List[str] = []
    handler_id = logger.add(
        lambda message: messages.append(message.record["message"]),
        level="DEBUG",
    )
    yield messages
    logger.remove(handler_id)
