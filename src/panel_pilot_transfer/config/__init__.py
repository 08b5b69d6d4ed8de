"""
配置模块
=======

包含系统常量定义和配置管理功能。
"""

from .constants import *
from .settings import *

__all__ = [
    # 常量
    "XModemControl",
    "DeviceCommand",
    "DEFAULT_BAUDRATE",
    "XMODEM_BLOCK_SIZE",
    "XMODEM_PACKET_SIZE",
    "HANDSHAKE_INVITE",
    "HANDSHAKE_BANNER",
    # 配置
    "SerialConfig",
    "XModemConfig",
    "DeviceConfig",
]
