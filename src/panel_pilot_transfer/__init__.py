"""
Panel Pilot 串口配置上传工具
==========================

通过串口驱动 Panel Pilot SGD 显示控制器：校验设备、读取电压、
使用 XMODEM 上传配置文件。

主要功能：
- 串口传输与按模式等待响应
- XMODEM（128字节/校验和）发送
- 设备命令协议（W/x/s/m）
- 进度显示
- 错误处理

版本: 1.0.0
"""

__version__ = "1.0.0"
__description__ = "Panel Pilot SGD 串口配置上传工具"

# 导出主要类
from .core.transport import SerialTransport, open_transport
from .transfer.sender import XModemSender, TransferResult
from .transfer.device import DeviceProtocol
from .transfer.session import SessionConfig, UploadSession

__all__ = [
    "SerialTransport",
    "open_transport",
    "XModemSender",
    "TransferResult",
    "DeviceProtocol",
    "SessionConfig",
    "UploadSession",
]
