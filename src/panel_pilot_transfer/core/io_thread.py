"""
IO线程模块
==========

在后台持续读取串口数据并追加到接收缓冲区，业务线程只需在缓冲区上等待响应。
"""

import threading
import time
from typing import Callable, Optional

from ..config.constants import READ_CHUNK_SIZE
from ..core.serial_manager import SerialManager
from ..utils.logger import get_logger
from .exceptions import TransportError
from .inbound_buffer import InboundBuffer, decode_text

logger = get_logger(__name__)

DataObserver = Callable[[str], None]
FailureHandler = Callable[[Exception], None]


class IoThread:
    """
    IO线程类

    生命周期与串口连接一致：串口关闭或读取失败时线程结束。
    """

    def __init__(
        self,
        serial_manager: SerialManager,
        buffer: InboundBuffer,
        on_data: Optional[DataObserver] = None,
        on_failure: Optional[FailureHandler] = None,
    ):
        """
        初始化IO线程

        Args:
            serial_manager: 串口管理器
            buffer: 接收缓冲区
            on_data: 每收到一块数据时调用，用于实时显示
            on_failure: 读取失败导致线程退出时调用
        """
        self.serial_manager = serial_manager
        self.buffer = buffer
        self.on_data = on_data
        self.on_failure = on_failure

        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()

        # 统计信息
        self.chunks_received = 0
        self.read_errors = 0

    def start(self) -> bool:
        """
        启动IO线程

        Returns:
            启动成功返回True，串口未打开返回False
        """
        if self.is_running:
            logger.warning("IO线程已经在运行")
            return True

        if not self.serial_manager.is_open:
            logger.error("串口未打开，无法启动IO线程")
            return False

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._io_loop, name="serial-reader", daemon=True
        )
        self._thread.start()
        logger.debug("IO线程已启动")
        return True

    def stop(self, timeout: float = 2.0) -> bool:
        """
        停止IO线程

        Args:
            timeout: 等待线程结束的超时时间(秒)

        Returns:
            停止成功返回True，超时返回False
        """
        self._stop_event.set()
        thread = self._thread
        if thread is None or thread is threading.current_thread():
            return True

        thread.join(timeout)
        if thread.is_alive():
            logger.warning(f"IO线程未在{timeout}秒内结束")
            return False

        self._thread = None
        logger.debug("IO线程已停止")
        return True

    @property
    def is_running(self) -> bool:
        """检查IO线程是否在运行"""
        return self._thread is not None and self._thread.is_alive()

    def get_statistics(self) -> dict:
        """
        获取IO线程统计信息

        Returns:
            包含统计信息的字典
        """
        return {
            "running": self.is_running,
            "buffered": len(self.buffer),
            "bytes_received": self.buffer.total_received,
            "chunks_received": self.chunks_received,
            "read_errors": self.read_errors,
        }

    def _io_loop(self) -> None:
        """IO线程主循环"""
        logger.debug("IO线程开始运行")

        while not self._stop_event.is_set():
            try:
                chunk = self.serial_manager.read(READ_CHUNK_SIZE)
            except TransportError as e:
                if self._stop_event.is_set():
                    break  # 正在关闭，读取失败是预期的
                self.read_errors += 1
                logger.error(f"串口读取失败，读线程退出: {e}")
                if self.on_failure:
                    self.on_failure(e)
                break

            if chunk:
                self.chunks_received += 1
                logger.debug(f"收到数据: {chunk!r}")
                self.buffer.append(chunk)
                if self.on_data:
                    try:
                        self.on_data(decode_text(chunk))
                    except Exception:
                        logger.exception("数据回调异常")
            else:
                # 避免忙循环，但保持响应性
                time.sleep(0.001)

        logger.debug("IO线程已结束")
