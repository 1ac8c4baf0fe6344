"""
Worker 服务的请求/响应模型
"""
from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_SERVICE_NAME = "WorkerService"


class ExecuteRequest(BaseModel):
    """命令执行请求"""

    command: str = Field(..., min_length=1, description="在 bash 中执行的命令")
    cwd: Optional[str] = Field(default=None, description="工作目录（可选）")

    model_config = {
        "json_schema_extra": {
            "example": {"command": "wc -w < part1.txt > count1.txt", "cwd": None}
        }
    }


class ExecuteResponse(BaseModel):
    """命令执行结果"""

    exit_code: int = Field(..., description="命令退出码")
    stdout: str = Field(default="", description="标准输出（截断）")
    stderr: str = Field(default="", description="标准错误（截断）")
    hostname: str = Field(..., description="执行命令的 Worker 主机名")
    elapsed: float = Field(default=0.0, description="执行耗时（秒）")


class HealthResponse(BaseModel):
    """健康检查响应"""

    status: str = Field(default="ok")
    hostname: str
    service: str
    active_commands: int = Field(default=0, description="正在执行的命令数")
