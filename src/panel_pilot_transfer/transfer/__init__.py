"""
传输模块
========

包含 XMODEM 发送器、设备命令协议、读数解析和上传会话。
"""

from .sender import XModemSender, XModemState, TransferResult
from .device import DeviceProtocol
from .readings import DualReading, VoltageReading, parse_reading
from .session import SessionConfig, UploadSession

__all__ = [
    "XModemSender",
    "XModemState",
    "TransferResult",
    "DeviceProtocol",
    "DualReading",
    "VoltageReading",
    "parse_reading",
    "SessionConfig",
    "UploadSession",
]
