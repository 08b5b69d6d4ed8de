"""
上传会话模块
============

UploadSession 保存一次设备会话所需的全部上下文（配置、连接），由调用方持有，
取代全局的“当前设备”状态。
"""

from dataclasses import dataclass, field
from typing import Optional

from ..config.settings import DeviceConfig, SerialConfig, XModemConfig
from ..core.exceptions import DeviceVerificationError, NotConnectedError
from ..core.io_thread import DataObserver
from ..core.transport import SerialTransport
from ..utils.logger import get_logger
from .device import DeviceProtocol
from .readings import DualReading
from .sender import ProgressCallback, TransferResult, XModemSender

logger = get_logger(__name__)


@dataclass
class SessionConfig:
    """会话配置"""

    serial: SerialConfig
    xmodem: XModemConfig = field(default_factory=XModemConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)


class UploadSession:
    """设备会话：连接、校验、读数、上传配置"""

    def __init__(self, config: SessionConfig, on_data: Optional[DataObserver] = None):
        self.config = config
        self._on_data = on_data
        self._transport: Optional[SerialTransport] = None

    @property
    def is_connected(self) -> bool:
        return self._transport is not None and self._transport.is_connected

    @property
    def transport(self) -> SerialTransport:
        if self._transport is None:
            raise NotConnectedError("会话未连接")
        return self._transport

    def _protocol(self) -> DeviceProtocol:
        return DeviceProtocol(self.transport, self.config.device)

    def connect(self) -> None:
        """
        打开串口并校验设备

        Raises:
            DeviceUnavailableError, PermissionDeniedError, NotSupportedError: 打开失败
            DeviceVerificationError: 不是兼容设备，连接已关闭
        """
        if self.is_connected:
            return

        self._transport = SerialTransport(self.config.serial, on_data=self._on_data).open()
        if not self._protocol().verify():
            self.disconnect()
            raise DeviceVerificationError(
                f"{self.config.serial.port} 上的设备不是兼容的 SGD 控制器"
            )
        logger.info(f"已连接设备 {self.config.serial.port}")

    def disconnect(self) -> None:
        """关闭连接，可重复调用"""
        transport, self._transport = self._transport, None
        if transport is not None:
            transport.close()

    def read_voltage(self) -> Optional[DualReading]:
        """读取双通道电压，超时返回None"""
        return self._protocol().read_voltage()

    def upload(
        self, content: str, on_progress: Optional[ProgressCallback] = None
    ) -> TransferResult:
        """
        上传配置文本

        进入上传模式、XMODEM 发送、提交并断开。任何一步失败都需要从头重新上传。

        Args:
            content: 配置文件文本
            on_progress: 进度回调(0-100)

        Returns:
            传输统计
        """
        protocol = self._protocol()
        protocol.enter_upload_mode()

        result = XModemSender(self.transport, self.config.xmodem).send(
            content.encode("utf-8"), on_progress
        )

        protocol.finalize()
        # 设备收到 'm' 后主动断开
        self.disconnect()
        logger.info("配置上传成功，设备已断开")
        return result

    def __enter__(self):
        """支持with语句"""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支持with语句"""
        self.disconnect()
