"""
Remote Executor - 远程命令执行客户端

协调进程只依赖"提交命令，得到退出码"这一约定，具体传输由实现类负责
"""

from abc import ABC, abstractmethod
from typing import Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from cluster import ComputeNode
from core.config import get_settings
from core.exceptions import RemoteExecutionException
from core.utils import validate_hostname, validate_port
from worker.schemas import DEFAULT_SERVICE_NAME, ExecuteRequest, ExecuteResponse


def build_worker_url(host: str, port: int, service: str = DEFAULT_SERVICE_NAME) -> str:
    """
    构建 Worker 服务地址

    Args:
        host: Worker 主机名
        port: Worker 端口
        service: 服务名称

    Returns:
        例如 http://node1:3000/WorkerService

    Raises:
        ValueError: 主机名或端口无效
    """
    validate_hostname(host)
    port = validate_port(port)
    return f"http://{host}:{port}/{service}"


class RemoteExecutor(ABC):
    """远程执行约定"""

    @abstractmethod
    def execute(self, node: ComputeNode, command: str) -> int:
        """
        在节点上执行命令

        Returns:
            命令退出码

        Raises:
            RemoteExecutionException: 无法与节点通信
        """

    def close(self) -> None:
        pass


class HttpRemoteExecutor(RemoteExecutor):
    """基于 HTTP 的远程执行客户端，对应 worker 服务的 /execute 接口"""

    def __init__(
        self,
        service_name: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Args:
            service_name: 服务名称，默认从配置读取
            timeout: 单条命令超时（秒），默认从配置读取
            transport: 自定义传输层（测试中注入 MockTransport）
        """
        settings = get_settings()
        self.service_name = service_name or settings.WORKER_SERVICE_NAME
        timeout = timeout if timeout is not None else settings.REMOTE_TIMEOUT
        self._client = httpx.Client(
            timeout=httpx.Timeout(timeout, connect=10.0),
            transport=transport,
        )

    def execute(self, node: ComputeNode, command: str) -> int:
        url = build_worker_url(node.host, node.port, self.service_name) + "/execute"
        request = ExecuteRequest(command=command)
        logger.debug(f"POST {url}: {command}")

        try:
            response = self._client.post(url, json=request.model_dump())
        except httpx.HTTPError as e:
            raise RemoteExecutionException(node.address, str(e)) from e

        if not response.is_success:
            raise RemoteExecutionException(node.address, f"HTTP {response.status_code}")

        try:
            result = ExecuteResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise RemoteExecutionException(node.address, f"invalid response: {e}") from e

        if result.exit_code != 0:
            for line in result.stderr.splitlines():
                if line.strip():
                    logger.error(f"[{node.address}] {line}")

        return result.exit_code

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpRemoteExecutor":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()
