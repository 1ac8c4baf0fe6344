"""
信号处理器

第一次收到 SIGINT/SIGTERM 时停止调度并取消未完成的任务，
第二次收到时恢复默认处理器，立即退出
"""
import signal
import threading
from typing import Callable, Dict, List, Optional

from loguru import logger


class ShutdownSignalHandler:
    """
    优雅停止的信号处理器

    使用示例:
        with ShutdownSignalHandler().on_shutdown(scheduler.stop):
            report = scheduler.run()
    """

    def __init__(self) -> None:
        self._shutdown_callbacks: List[Callable[[], None]] = []
        self._original_handlers: Dict[int, object] = {}
        self._triggered = threading.Event()

    @property
    def triggered(self) -> bool:
        return self._triggered.is_set()

    def on_shutdown(self, callback: Callable[[], None]) -> "ShutdownSignalHandler":
        """
        添加关闭回调

        Args:
            callback: 收到信号时调用的函数

        Returns:
            self (支持链式调用)
        """
        self._shutdown_callbacks.append(callback)
        return self

    def register(self, signals: Optional[List[int]] = None) -> None:
        """
        注册信号处理器（只能在主线程调用）

        Args:
            signals: 要处理的信号列表（默认：SIGTERM, SIGINT）
        """
        if signals is None:
            signals = [signal.SIGTERM, signal.SIGINT]

        for sig in signals:
            self._original_handlers[sig] = signal.signal(sig, self._handle)
            logger.debug(f"Registered handler for {signal.Signals(sig).name}")

    def restore(self) -> None:
        """恢复原始信号处理器"""
        for sig, original_handler in self._original_handlers.items():
            signal.signal(sig, original_handler)
        self._original_handlers.clear()

    def _handle(self, signum, frame) -> None:
        sig_name = signal.Signals(signum).name

        if self._triggered.is_set():
            logger.warning(f"🛑 Received {sig_name} again, exiting immediately")
            self.restore()
            raise KeyboardInterrupt

        self._triggered.set()
        logger.info(f"🛑 Received {sig_name}, stopping run (send again to force exit)...")
        for callback in self._shutdown_callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"❌ Error in shutdown callback: {e}")

    def __enter__(self) -> "ShutdownSignalHandler":
        self.register()
        return self

    def __exit__(self, *_: object) -> None:
        self.restore()
