"""
系统常量定义
============

定义 Panel Pilot SGD 命令协议与 XMODEM 协议中使用的各种常量。
"""

from enum import IntEnum
from typing import Final


class XModemControl(IntEnum):
    """XMODEM 控制字节枚举"""

    SOH = 0x01  # 数据块起始
    EOT = 0x04  # 传输结束
    ACK = 0x06  # 确认
    NAK = 0x15  # 否认/请求重传
    CAN = 0x18  # 取消传输
    SUB = 0x1A  # 填充字节
    INVITE = 0x43  # 'C'，接收端就绪邀请


class DeviceCommand(IntEnum):
    """设备命令字枚举（单个ASCII字符，无帧结构）"""

    VERIFY = 0x57  # 校验设备 'W'
    READ_VOLTAGE = 0x78  # 读取电压 'x'
    ENTER_UPLOAD = 0x73  # 进入配置上传模式 's'
    COMMIT_EXIT = 0x6D  # 提交并退出 'm'

    def to_bytes(self) -> bytes:
        """转换为可直接写入串口的字节"""
        return bytes([int(self)])


# 设备响应标记
VERIFY_MARKER: Final[str] = "SGD"  # 校验响应
READING1_MARKER: Final[str] = "Rdg1"  # 第一通道读数
READING2_MARKER: Final[str] = "Rdg2"  # 第二通道读数
INVITE_MARKER: Final[str] = "C"  # XMODEM 校验和模式邀请
BANNER_MARKER: Final[str] = "XMODEM"  # 部分固件在邀请前输出的横幅

# 握手模式
HANDSHAKE_INVITE: Final[str] = "invite"  # 直接等待 'C'
HANDSHAKE_BANNER: Final[str] = "banner"  # 先等待 "XMODEM" 再等待 'C'
HANDSHAKE_MODES: Final[tuple] = (HANDSHAKE_INVITE, HANDSHAKE_BANNER)

# XMODEM 数据块
XMODEM_BLOCK_SIZE: Final[int] = 128  # 数据块大小（SOH帧）
XMODEM_PACKET_SIZE: Final[int] = XMODEM_BLOCK_SIZE + 4  # SOH + 序号 + 反序号 + 数据 + 校验和

# 串口配置默认值
DEFAULT_BAUDRATE: Final[int] = 9600  # 该设备系列固定波特率
DEFAULT_TIMEOUT: Final[float] = 0.05  # 读线程单次读取超时(秒)
READ_CHUNK_SIZE: Final[int] = 1024  # 读线程单次读取字节数

# XMODEM 超时与重试（秒）
INITIAL_NAK_TIMEOUT: Final[float] = 60.0  # 等待接收端首个NAK
ACK_TIMEOUT: Final[float] = 10.0  # 等待数据块确认
EOT_ACK_TIMEOUT: Final[float] = 10.0  # 等待EOT确认
MAX_RETRIES: Final[int] = 10  # 单个数据块最大重试次数

# 命令协议超时与延时（秒）
VERIFY_TIMEOUT: Final[float] = 2.0
READING_TIMEOUT: Final[float] = 3.0
INVITE_TIMEOUT: Final[float] = 5.0
BANNER_TIMEOUT: Final[float] = 5.0
SETTLE_DELAY: Final[float] = 1.0  # 传输完成后等待设备处理
DISCONNECT_DELAY: Final[float] = 1.0  # 发送 'm' 后等待设备主动断开

# 4-20mA 传感器：电压乘以该系数得到毫安值
VOLTAGE_TO_MILLIAMPS: Final[float] = 10.0
