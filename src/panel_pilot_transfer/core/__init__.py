"""
核心模块
========

包含串口管理、接收缓冲区、读线程、串口传输和 XMODEM 数据块处理等核心功能。
"""

from .checksum import calculate_checksum
from .packet import XModemPacket, build_packets, pad_payload, split_blocks, strip_padding
from .serial_manager import SerialManager
from .inbound_buffer import InboundBuffer
from .io_thread import IoThread
from .transport import SerialTransport, open_transport

__all__ = [
    "calculate_checksum",
    "XModemPacket",
    "build_packets",
    "pad_payload",
    "split_blocks",
    "strip_padding",
    "SerialManager",
    "InboundBuffer",
    "IoThread",
    "SerialTransport",
    "open_transport",
]
