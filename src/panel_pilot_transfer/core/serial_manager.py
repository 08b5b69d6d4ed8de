"""
串口管理模块
============

提供串口的打开、关闭和读写操作，并把 pyserial 的异常转换为统一的异常类型。
"""

import errno

import serial
from serial.tools import list_ports
from typing import List, Optional, Dict

from ..config.settings import SerialConfig
from ..utils.logger import get_logger
from .exceptions import (
    DeviceUnavailableError,
    NotConnectedError,
    NotSupportedError,
    PermissionDeniedError,
    TransportError,
    TransportIOError,
)

logger = get_logger(__name__)

_PERMISSION_ERRNOS = (errno.EACCES, errno.EPERM)


def _classify_open_error(port: str, exc: Exception) -> TransportError:
    """根据 pyserial/操作系统异常判断打开失败的原因"""
    if isinstance(exc, ValueError):
        return NotSupportedError(f"不支持的串口或参数 {port}: {exc}")
    if isinstance(exc, PermissionError) or getattr(exc, "errno", None) in _PERMISSION_ERRNOS:
        return PermissionDeniedError(f"无权限访问串口 {port}: {exc}")
    # Windows 下 pyserial 不设置 errno，只能从错误信息判断
    if "PermissionError" in str(exc) or "Access is denied" in str(exc):
        return PermissionDeniedError(f"无权限访问串口 {port}: {exc}")
    return DeviceUnavailableError(f"无法打开串口 {port}: {exc}")


class SerialManager:
    """串口管理器，独占一个串口句柄"""

    def __init__(self, config: SerialConfig):
        """
        初始化串口管理器

        Args:
            config: 串口配置对象
        """
        self.config = config
        self._port: Optional[serial.SerialBase] = None

    @property
    def port(self) -> Optional[serial.SerialBase]:
        """获取串口对象"""
        return self._port

    @property
    def is_open(self) -> bool:
        """检查串口是否已打开"""
        return self._port is not None and self._port.is_open

    def open(self) -> None:
        """
        打开串口连接

        Raises:
            DeviceUnavailableError: 串口不存在或被占用
            PermissionDeniedError: 无权限访问串口
            NotSupportedError: 不支持的串口地址或参数
        """
        if self.is_open:
            logger.warning(f"串口 {self.config.port} 已经打开")
            return

        try:
            # serial_for_url 同时支持设备路径和 socket:// 等虚拟串口
            self._port = serial.serial_for_url(**self.config.to_serial_kwargs())
        except (serial.SerialException, OSError, ValueError) as e:
            self._port = None
            error = _classify_open_error(self.config.port, e)
            logger.error(f"打开串口失败: {error}")
            raise error from e

        logger.info(f"成功打开串口 {self.config.port} @ {self.config.baudrate}")

    def close(self) -> None:
        """关闭串口连接，失败时只记录日志"""
        port, self._port = self._port, None
        if port is None:
            return
        try:
            if port.is_open:
                port.close()
                logger.info(f"已关闭串口 {self.config.port}")
        except Exception as e:
            logger.debug(f"关闭串口失败（已忽略）: {e}")

    def write(self, data: bytes) -> None:
        """
        向串口写入数据并立即发出

        Args:
            data: 要写入的字节数据

        Raises:
            NotConnectedError: 串口未打开
            TransportIOError: 写入失败
        """
        port = self._port
        if port is None or not port.is_open:
            raise NotConnectedError("串口未打开，无法写入数据")

        try:
            bytes_written = port.write(data)
            port.flush()
        except (serial.SerialException, OSError) as e:
            raise TransportIOError(f"写入数据失败: {e}") from e

        if bytes_written is not None and bytes_written != len(data):
            raise TransportIOError(f"写入不完整: {bytes_written}/{len(data)}")

    def read(self, size: int) -> bytes:
        """
        从串口读取最多 size 字节，受配置的读超时限制

        Raises:
            NotConnectedError: 串口未打开
            TransportIOError: 读取失败（例如设备被拔出）
        """
        port = self._port
        if port is None or not port.is_open:
            raise NotConnectedError("串口未打开，无法读取数据")

        try:
            # 无数据时读1字节，阻塞至多一个读超时
            chunk = port.read(min(size, max(1, port.in_waiting)))
            # 首字节到达后，同一批到达的剩余数据一并取出
            if chunk and len(chunk) < size and port.in_waiting:
                chunk += port.read(min(size - len(chunk), port.in_waiting))
            return chunk
        except (serial.SerialException, OSError) as e:
            raise TransportIOError(f"读取数据失败: {e}") from e

    @staticmethod
    def list_available_ports() -> List[Dict[str, str]]:
        """
        获取系统可用的串口列表

        Returns:
            串口信息列表，每个元素包含device、description、hwid字段
        """
        try:
            return [
                {
                    'device': port_info.device,
                    'description': port_info.description or '未知设备',
                    'hwid': port_info.hwid or '未知硬件ID',
                }
                for port_info in sorted(list_ports.comports(), key=lambda p: p.device)
            ]
        except Exception as e:
            logger.error(f"获取串口列表失败: {e}")
            return []

    @staticmethod
    def print_available_ports() -> None:
        """打印系统可用的串口信息"""
        ports = SerialManager.list_available_ports()

        if not ports:
            print("没有找到可用的串口。")
            return

        print("可用的串口：")
        for port in ports:
            print(f"  {port['device']} - {port['description']}")

    def __enter__(self):
        """支持with语句"""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """支持with语句"""
        self.close()

    def __del__(self):
        """析构函数，确保串口被正确关闭"""
        self.close()
