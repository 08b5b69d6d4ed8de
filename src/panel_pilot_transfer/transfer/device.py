"""
设备命令协议模块
================

Panel Pilot SGD 控制器的单字节命令协议。每条命令都是一次性的：
清空缓冲区、发送命令、按顺序等待响应标记。

    W  校验设备，响应包含 "SGD"
    x  读取电压，响应两行 "Rdg1..." 和 "Rdg2..."
    s  进入配置上传模式，设备随后发出 'C' 邀请
    m  提交配置并退出，设备随后主动断开
"""

import time
from typing import Optional

from ..config.constants import (
    DeviceCommand,
    VERIFY_MARKER,
    READING1_MARKER,
    READING2_MARKER,
    INVITE_MARKER,
    BANNER_MARKER,
    HANDSHAKE_BANNER,
)
from ..config.settings import DeviceConfig
from ..core.exceptions import TransportTimeoutError
from ..core.transport import SerialTransport
from ..utils.logger import get_logger
from .readings import DualReading, parse_reading

logger = get_logger(__name__)


class DeviceProtocol:
    """设备命令协议，借用已打开的 SerialTransport"""

    def __init__(self, transport: SerialTransport, config: Optional[DeviceConfig] = None):
        self.transport = transport
        self.config = config or DeviceConfig()

    def _send_command(self, command: DeviceCommand) -> None:
        self.transport.clear_buffer()
        logger.debug(f"发送命令 {chr(command)!r}")
        self.transport.send_raw(command.to_bytes())

    def verify(self) -> bool:
        """
        校验设备是否为兼容的 SGD 控制器

        Returns:
            收到 "SGD" 返回True，超时返回False（调用方应关闭连接）
        """
        self._send_command(DeviceCommand.VERIFY)
        try:
            self.transport.wait_for(VERIFY_MARKER, self.config.verify_timeout)
        except TransportTimeoutError:
            logger.warning("设备校验失败：未收到SGD响应")
            return False
        logger.info("设备校验成功")
        return True

    def read_voltage(self) -> Optional[DualReading]:
        """
        读取双通道电压

        先等待 Rdg1 行，再等待 Rdg2 行，顺序固定。

        Returns:
            双通道读数，超时返回None
        """
        self._send_command(DeviceCommand.READ_VOLTAGE)
        timeout = self.config.reading_timeout
        try:
            line1 = self.transport.wait_for_line(READING1_MARKER, timeout)
            line2 = self.transport.wait_for_line(READING2_MARKER, timeout)
        except TransportTimeoutError as e:
            logger.error(f"读取电压失败: {e}")
            return None

        reading = DualReading(
            rdg1=parse_reading(line1, READING1_MARKER),
            rdg2=parse_reading(line2, READING2_MARKER),
        )
        logger.debug(f"读数: {line1!r} / {line2!r}")
        return reading

    def enter_upload_mode(self) -> None:
        """
        进入配置上传模式并等待接收端就绪邀请

        发送 's' 前后各清空一次缓冲区，避免回显被误认为 'C' 邀请。

        Raises:
            TransportTimeoutError: 未收到邀请
        """
        self._send_command(DeviceCommand.ENTER_UPLOAD)
        self.transport.clear_buffer()

        if self.config.handshake == HANDSHAKE_BANNER:
            self.transport.wait_for(BANNER_MARKER, self.config.banner_timeout)
            logger.debug("收到XMODEM横幅")

        self.transport.wait_for(INVITE_MARKER, self.config.invite_timeout)
        logger.info("设备已进入配置上传模式")

    def finalize(self) -> None:
        """
        提交配置并退出上传模式

        等待设备处理完数据后发送 'm'。设备会主动断开连接，
        调用方应在返回后关闭自己一侧的连接，而不是等待握手。
        """
        time.sleep(self.config.settle_delay)
        self.transport.send_raw(DeviceCommand.COMMIT_EXIT.to_bytes())
        logger.info("已发送提交命令，等待设备断开")
        time.sleep(self.config.disconnect_delay)
