"""
分布式构建调度系统的自定义异常
"""
from typing import Any, Optional


class ConductorException(Exception):
    """Conductor 基础异常类"""
    pass


# ========== 配置异常 ==========

class ConfigurationException(ConductorException):
    """配置相关异常基类"""
    pass


class InvalidConfigException(ConfigurationException):
    """无效的配置异常（节点列表格式错误、端口越界、节点数超出范围）"""
    def __init__(self, key: str, value: Any, reason: str):
        self.key = key
        self.value = value
        self.reason = reason
        super().__init__(
            f"Invalid configuration: {key}={value!r} - {reason}"
        )


# ========== 解析异常 ==========

class ParseException(ConductorException):
    """依赖描述文件无法读取或格式错误"""
    def __init__(self, source: str, detail: str):
        self.source = source
        super().__init__(f"Failed to parse {source}: {detail}")


# ========== 调度异常 ==========

class SchedulingException(ConductorException):
    """调度相关异常基类"""
    pass


class SchedulingTimeoutException(SchedulingException):
    """整体运行超时，未完成的任务已被取消"""
    def __init__(self, timeout: float, report: Optional[Any] = None):
        self.timeout = timeout
        self.report = report
        super().__init__(f"Run did not complete within {timeout}s")


# ========== 分发异常 ==========
# 以下异常只在 TaskDispatcher 内部抛出和处理，不会越过分发边界

class DispatchException(ConductorException):
    """任务分发异常基类"""
    pass


class AcquisitionExhaustedException(DispatchException):
    """重试次数用尽仍未获取到空闲节点"""
    def __init__(self, task_name: str, attempts: int):
        self.task_name = task_name
        self.attempts = attempts
        super().__init__(
            f"Task {task_name}: no node available after {attempts} retries"
        )


class RemoteExecutionException(DispatchException):
    """远程命令执行失败（非零退出码或通信错误）"""
    def __init__(self, address: str, detail: str, exit_code: Optional[int] = None):
        self.address = address
        self.exit_code = exit_code
        super().__init__(f"Remote execution on {address} failed: {detail}")


class LocalExecutionException(DispatchException):
    """本地命令返回非零退出码"""
    def __init__(self, command: str, exit_code: int):
        self.command = command
        self.exit_code = exit_code
        super().__init__(f"Local command failed with exit code {exit_code}: {command}")


class DispatchCancelledException(DispatchException):
    """运行被取消（超时或收到停止信号）"""
    def __init__(self, task_name: str):
        self.task_name = task_name
        super().__init__(f"Task {task_name}: dispatch cancelled")


class TransferException(DispatchException):
    """结果文件回传失败（仅记录日志，不影响任务状态）"""
    def __init__(self, filename: str, detail: str):
        self.filename = filename
        super().__init__(f"Transfer of {filename} failed: {detail}")


# ========== 任务异常 ==========

class TaskStateException(ConductorException):
    """任务状态转换异常"""
    def __init__(self, task_name: str, current_state: str, target_state: str):
        self.task_name = task_name
        self.current_state = current_state
        self.target_state = target_state
        super().__init__(
            f"任务 {task_name} 无法从状态 {current_state} 转换到 {target_state}"
        )
