"""
Worker FastAPI 应用

对外提供：
- POST /{service}/execute: 在 bash 中执行命令并返回退出码
- GET /health: 健康检查
"""

import os
import threading
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import APIRouter, FastAPI, HTTPException, Request, status
from loguru import logger

from shared.process_utils import run_shell
from .schemas import DEFAULT_SERVICE_NAME, ExecuteRequest, ExecuteResponse, HealthResponse

MAX_OUTPUT_CHARS = 64 * 1024


def _truncate(text: str, limit: int = MAX_OUTPUT_CHARS) -> str:
    """保留输出末尾部分"""
    if len(text) <= limit:
        return text
    return "...(truncated)\n" + text[-limit:]


class CommandCounter:
    """正在执行的命令计数（线程安全）"""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active = 0

    def __enter__(self) -> "CommandCounter":
        with self._lock:
            self._active += 1
        return self

    def __exit__(self, *_: object) -> None:
        with self._lock:
            self._active -= 1

    @property
    def active(self) -> int:
        with self._lock:
            return self._active


def create_app(
    hostname: str,
    service_name: Optional[str] = None,
    default_cwd: Optional[str] = None,
    command_timeout: Optional[float] = None,
) -> FastAPI:
    """
    创建 Worker 应用

    Args:
        hostname: 本 Worker 的主机名（在响应中返回）
        service_name: 服务名称，作为 URL 前缀
        default_cwd: 请求未指定 cwd 时的工作目录
        command_timeout: 单条命令超时（秒），None 表示不限

    Returns:
        FastAPI 应用
    """
    service_name = service_name or DEFAULT_SERVICE_NAME
    counter = CommandCounter()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(f"💪 Worker {hostname} ready (service: /{service_name})")
        yield
        logger.info(f"Worker {hostname} stopped")

    app = FastAPI(
        title="Conductor Worker",
        description="远程命令执行服务",
        version="1.0.0",
        lifespan=lifespan,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start_time = time.time()
        response = await call_next(request)
        duration = time.time() - start_time
        status_emoji = "✓" if 200 <= response.status_code < 400 else "✗"
        logger.debug(
            f"{status_emoji} {request.method} {request.url.path} "
            f"- Status: {response.status_code} - Duration: {duration:.3f}s"
        )
        return response

    router = APIRouter(prefix=f"/{service_name}", tags=["execute"])

    @router.post("/execute", response_model=ExecuteResponse)
    def execute(request: ExecuteRequest) -> ExecuteResponse:
        """执行命令（同步接口，由线程池执行）"""
        cwd = request.cwd or default_cwd
        if cwd is not None and not os.path.isdir(cwd):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Working directory not found: {cwd}",
            )

        logger.info(f"Executing: {request.command}")
        start_time = time.monotonic()
        with counter:
            result = run_shell(request.command, cwd=cwd, timeout=command_timeout)
        elapsed = time.monotonic() - start_time

        if result.succeeded:
            logger.info(f"✅ Command finished in {elapsed:.2f}s")
        else:
            logger.warning(f"❌ Command exited with {result.exit_code} after {elapsed:.2f}s")

        return ExecuteResponse(
            exit_code=result.exit_code,
            stdout=_truncate(result.stdout),
            stderr=_truncate(result.stderr),
            hostname=hostname,
            elapsed=elapsed,
        )

    app.include_router(router)

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """健康检查接口"""
        return HealthResponse(
            hostname=hostname,
            service=service_name,
            active_commands=counter.active,
        )

    return app
