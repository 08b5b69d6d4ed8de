"""
串口传输模块
============

SerialTransport 独占一个串口连接和接收缓冲区，提供发送和按模式等待响应的接口。

    >>> with open_transport("/dev/ttyUSB0") as transport:
    ...     transport.clear_buffer()
    ...     transport.send_text("W")
    ...     transport.wait_for("SGD", timeout=2.0)
"""

from typing import Iterable, Optional

from ..config.constants import DEFAULT_BAUDRATE
from ..config.settings import SerialConfig
from ..utils.logger import get_logger
from .exceptions import NotConnectedError
from .inbound_buffer import InboundBuffer, decode_text, encode_text
from .io_thread import DataObserver, IoThread
from .serial_manager import SerialManager

logger = get_logger(__name__)


class SerialTransport:
    """串口传输层：发送原始字节，并在接收缓冲区上等待设备响应"""

    def __init__(self, config: SerialConfig, on_data: Optional[DataObserver] = None):
        """
        Args:
            config: 串口配置
            on_data: 读线程每收到一块数据时的回调（文本）
        """
        self.config = config
        self.serial_manager = SerialManager(config)
        self.buffer = InboundBuffer()
        self._on_data = on_data
        self._io_thread: Optional[IoThread] = None

    @property
    def is_connected(self) -> bool:
        return self.serial_manager.is_open

    def set_on_data(self, callback: Optional[DataObserver]) -> None:
        """设置或清除数据回调"""
        self._on_data = callback
        if self._io_thread is not None:
            self._io_thread.on_data = callback

    def open(self) -> "SerialTransport":
        """
        打开串口并启动读线程

        Raises:
            DeviceUnavailableError, PermissionDeniedError, NotSupportedError
        """
        if self.is_connected:
            return self

        self.serial_manager.open()
        self.buffer.clear()
        self._io_thread = IoThread(
            self.serial_manager,
            self.buffer,
            on_data=self._on_data,
            on_failure=self._on_read_failure,
        )
        self._io_thread.start()
        return self

    def close(self) -> None:
        """停止读线程并关闭串口，可重复调用，不抛出异常"""
        io_thread, self._io_thread = self._io_thread, None
        if io_thread is not None:
            try:
                io_thread.stop()
            except Exception as e:
                logger.debug(f"停止读线程失败（已忽略）: {e}")
        self.serial_manager.close()

    def _on_read_failure(self, exc: Exception) -> None:
        """读线程遇到不可恢复的错误：释放串口，后续写入将抛出 NotConnectedError"""
        logger.warning(f"串口连接已断开: {exc}")
        self.serial_manager.close()

    # ------------------------------------------------------------------
    # 发送
    # ------------------------------------------------------------------

    def send_raw(self, data: bytes) -> None:
        """
        立即发送原始字节，不做排队或合并

        Raises:
            NotConnectedError: 连接未打开
            TransportIOError: 写入失败
        """
        if not self.is_connected:
            raise NotConnectedError("连接未打开")
        logger.debug(f"发送: {bytes(data[:16])!r}{'...' if len(data) > 16 else ''} ({len(data)}字节)")
        self.serial_manager.write(bytes(data))

    def send_text(self, text: str) -> None:
        """发送文本（单字节编码）"""
        self.send_raw(encode_text(text))

    def send_line(self, text: str) -> None:
        """发送一行文本，末尾追加换行"""
        self.send_text(text + "\n")

    # ------------------------------------------------------------------
    # 接收
    # ------------------------------------------------------------------

    def clear_buffer(self) -> None:
        """丢弃已缓冲的数据，发送命令前调用以免匹配到旧数据"""
        self.buffer.clear()

    def get_buffer(self) -> str:
        """查看缓冲区内容，不消费"""
        return decode_text(self.buffer.snapshot())

    def wait_for(self, pattern: str, timeout: float) -> str:
        """
        等待子串出现（非正则）

        Returns:
            缓冲区开头到匹配结束的内容，这部分会从缓冲区移除

        Raises:
            TransportTimeoutError: 超时，缓冲区保持不变
        """
        return decode_text(self.buffer.wait_for(encode_text(pattern), timeout))

    def wait_for_line(self, substring: str, timeout: float) -> str:
        """
        等待包含子串的完整行

        Returns:
            匹配的行（去掉行尾换行符）；该行及之前的所有行从缓冲区移除

        Raises:
            TransportTimeoutError: 超时，缓冲区保持不变
        """
        line = self.buffer.wait_for_line(encode_text(substring), timeout)
        return decode_text(line).rstrip("\r")

    def wait_for_byte(self, candidates: Iterable[int], timeout: float) -> int:
        """
        等待候选字节中的任意一个

        Raises:
            TransportTimeoutError: 超时
        """
        return self.buffer.wait_for_byte(candidates, timeout)

    def __enter__(self):
        """支持with语句"""
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支持with语句"""
        self.close()


def open_transport(
    port: str,
    baudrate: int = DEFAULT_BAUDRATE,
    on_data: Optional[DataObserver] = None,
) -> SerialTransport:
    """
    按端口和波特率打开串口传输

    Args:
        port: 串口号或 pyserial URL，必须由调用方明确指定
        baudrate: 波特率，默认9600
        on_data: 数据回调

    Returns:
        已打开的 SerialTransport
    """
    return SerialTransport(SerialConfig(port=port, baudrate=baudrate), on_data=on_data).open()
