"""
使用 Pydantic Settings 进行配置管理
从 conductor.properties 文件和环境变量加载配置
"""

from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from loguru import logger


class Settings(BaseSettings):
    """应用配置，包含参数校验"""

    # 调度器配置
    POLL_INTERVAL: float = Field(default=0.5, description="调度轮询间隔（秒）")
    RUN_TIMEOUT: float = Field(default=3600.0, description="整体运行超时（秒）")
    MAX_WORKERS: Optional[int] = Field(
        default=None, description="任务线程池大小，为空时每个任务一个线程"
    )

    # 节点获取重试配置
    RETRY_BASE_DELAY: float = Field(default=0.1, description="重试基础等待时间（秒）")
    RETRY_JITTER: float = Field(default=0.1, description="重试随机抖动上限（秒）")
    MAX_ACQUIRE_RETRIES: int = Field(default=100, description="节点获取最大重试次数")
    BUSY_LOG_EVERY: int = Field(default=10, description="每隔多少次重试记录一次繁忙日志")

    # 集群配置
    MIN_NODES: int = Field(default=1, description="最少节点数")
    MAX_NODES: int = Field(default=1000, description="最多节点数")
    DEFAULT_PORT: int = Field(default=3000, description="Worker 默认端口")
    WORKER_SERVICE_NAME: str = Field(
        default="WorkerService", description="Worker 服务名称（URL 路径）"
    )
    REMOTE_TIMEOUT: float = Field(default=600.0, description="远程命令执行超时（秒）")

    # 结果回传配置
    TRANSFER_COMMAND: str = Field(default="scp", description="结果文件复制命令")
    SHARED_DIR: Optional[str] = Field(
        default=None, description="共享文件系统目录（设置后跳过结果回传）"
    )

    # 动态模式配置
    COUNT_COMMAND: str = Field(
        default="wc -w < {part} > {count}", description="动态模式下的计数命令模板"
    )

    # 日志配置
    LOG_LEVEL: str = Field(default="INFO", description="日志级别")
    LOG_FILE: Optional[str] = Field(default=None, description="日志文件路径")

    model_config = SettingsConfigDict(
        env_file="conductor.properties",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"LOG_LEVEL 必须为 {valid_levels} 中的一项")
        return v_upper

    @field_validator("DEFAULT_PORT")
    @classmethod
    def validate_default_port(cls, v: int) -> int:
        if v < 1024 or v > 65535:
            raise ValueError("DEFAULT_PORT 必须在 1024 到 65535 之间")
        return v

    @field_validator(
        "POLL_INTERVAL", "RUN_TIMEOUT", "RETRY_BASE_DELAY", "RETRY_JITTER", "REMOTE_TIMEOUT"
    )
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        if v < 0:
            raise ValueError("时间参数不能为负数")
        return v

    @field_validator("MIN_NODES", "MAX_ACQUIRE_RETRIES", "BUSY_LOG_EVERY")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("该参数至少为 1")
        return v

    @field_validator("MAX_WORKERS")
    @classmethod
    def validate_max_workers(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError("MAX_WORKERS 至少为 1，留空表示每个任务一个线程")
        return v

    @model_validator(mode="after")
    def validate_node_bounds(self) -> "Settings":
        if self.MAX_NODES < self.MIN_NODES:
            raise ValueError("MAX_NODES 不能小于 MIN_NODES")
        return self


@dataclass(frozen=True)
class ExecutionConfig:
    """
    执行配置快照

    在构造 NodePool / TaskDispatcher / TaskScheduler 时显式传入，
    测试中可以注入更短的等待时间
    """

    POLL_INTERVAL: float = 0.5  # 调度轮询间隔（秒）
    RUN_TIMEOUT: float = 3600.0  # 整体运行超时（秒）
    MAX_WORKERS: Optional[int] = None  # 线程池大小，为空时等于任务数

    RETRY_BASE_DELAY: float = 0.1  # 重试基础等待（秒）
    RETRY_JITTER: float = 0.1  # 重试随机抖动（秒）
    MAX_ACQUIRE_RETRIES: int = 100  # 节点获取最大重试次数
    BUSY_LOG_EVERY: int = 10  # 繁忙日志间隔

    MIN_NODES: int = 1
    MAX_NODES: int = 1000
    DEFAULT_PORT: int = 3000

    SHARED_DIR: Optional[str] = None  # 共享目录

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ExecutionConfig":
        """
        从 Settings 构造执行配置

        Args:
            settings: 配置实例，默认使用全局配置

        Returns:
            ExecutionConfig 实例
        """
        settings = settings or get_settings()
        return cls(
            POLL_INTERVAL=settings.POLL_INTERVAL,
            RUN_TIMEOUT=settings.RUN_TIMEOUT,
            MAX_WORKERS=settings.MAX_WORKERS,
            RETRY_BASE_DELAY=settings.RETRY_BASE_DELAY,
            RETRY_JITTER=settings.RETRY_JITTER,
            MAX_ACQUIRE_RETRIES=settings.MAX_ACQUIRE_RETRIES,
            BUSY_LOG_EVERY=settings.BUSY_LOG_EVERY,
            MIN_NODES=settings.MIN_NODES,
            MAX_NODES=settings.MAX_NODES,
            DEFAULT_PORT=settings.DEFAULT_PORT,
            SHARED_DIR=settings.SHARED_DIR,
        )


# ========== 配置获取函数 ==========


@lru_cache()
def get_settings() -> Settings:
    """
    获取配置实例（单例）

    返回:
        配置实例
    """
    settings = Settings()
    logger.debug("Settings loaded")
    return settings


def reload_settings() -> Settings:
    """
    重新加载配置

    清除 lru_cache 缓存并重新加载配置

    返回:
        新的配置实例
    """
    get_settings.cache_clear()
    logger.info("Settings reloaded")
    return get_settings()
