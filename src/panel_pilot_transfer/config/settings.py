"""
配置管理
========

提供串口、XMODEM 传输和设备命令协议相关的配置类。
"""

from dataclasses import dataclass
import serial

from .constants import (
    DEFAULT_BAUDRATE,
    DEFAULT_TIMEOUT,
    XMODEM_BLOCK_SIZE,
    INITIAL_NAK_TIMEOUT,
    ACK_TIMEOUT,
    EOT_ACK_TIMEOUT,
    MAX_RETRIES,
    VERIFY_TIMEOUT,
    READING_TIMEOUT,
    INVITE_TIMEOUT,
    BANNER_TIMEOUT,
    SETTLE_DELAY,
    DISCONNECT_DELAY,
    HANDSHAKE_INVITE,
    HANDSHAKE_MODES,
)


@dataclass
class SerialConfig:
    """串口配置类"""

    port: str  # 串口号或 pyserial URL（如 socket://host:port）
    baudrate: int = DEFAULT_BAUDRATE  # 波特率
    bytesize: int = serial.EIGHTBITS  # 数据位
    parity: str = serial.PARITY_NONE  # 校验位
    stopbits: float = serial.STOPBITS_ONE  # 停止位
    timeout: float = DEFAULT_TIMEOUT  # 读超时时间

    def __post_init__(self):
        """参数验证"""
        if not self.port:
            raise ValueError("port不能为空")
        if self.baudrate <= 0:
            raise ValueError("baudrate必须大于0")
        if self.timeout <= 0:
            raise ValueError("timeout必须大于0")

    def to_serial_kwargs(self) -> dict:
        """转换为serial.serial_for_url的参数字典"""
        return {
            "url": self.port,
            "baudrate": self.baudrate,
            "bytesize": self.bytesize,
            "parity": self.parity,
            "stopbits": self.stopbits,
            "timeout": self.timeout,
        }


@dataclass
class XModemConfig:
    """XMODEM 发送配置类（时间单位：秒）"""

    initial_nak_timeout: float = INITIAL_NAK_TIMEOUT  # 等待首个NAK超时
    ack_timeout: float = ACK_TIMEOUT  # 等待ACK/NAK/CAN超时
    eot_ack_timeout: float = EOT_ACK_TIMEOUT  # 等待EOT确认超时
    max_retries: int = MAX_RETRIES  # 单个数据块最大重试次数
    block_size: int = XMODEM_BLOCK_SIZE  # 数据块大小

    def __post_init__(self):
        """参数验证"""
        for name in ("initial_nak_timeout", "ack_timeout", "eot_ack_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name}必须大于0")
        if self.max_retries < 0:
            raise ValueError("max_retries不能为负数")
        # 设备固件只接受128字节SOH数据块
        if self.block_size != XMODEM_BLOCK_SIZE:
            raise ValueError(f"block_size只支持{XMODEM_BLOCK_SIZE}")


@dataclass
class DeviceConfig:
    """设备命令协议配置类（时间单位：秒）"""

    verify_timeout: float = VERIFY_TIMEOUT  # 等待 "SGD"
    reading_timeout: float = READING_TIMEOUT  # 等待每一行读数
    invite_timeout: float = INVITE_TIMEOUT  # 等待 'C' 邀请
    banner_timeout: float = BANNER_TIMEOUT  # 等待 "XMODEM" 横幅
    settle_delay: float = SETTLE_DELAY  # 传输完成到发送 'm' 的延时
    disconnect_delay: float = DISCONNECT_DELAY  # 发送 'm' 到断开的延时
    handshake: str = HANDSHAKE_INVITE  # 进入上传模式后的握手方式

    def __post_init__(self):
        """参数验证"""
        for name in ("verify_timeout", "reading_timeout", "invite_timeout", "banner_timeout"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name}必须大于0")
        if self.settle_delay < 0 or self.disconnect_delay < 0:
            raise ValueError("延时不能为负数")
        if self.handshake not in HANDSHAKE_MODES:
            raise ValueError(f"handshake必须是 {HANDSHAKE_MODES} 之一")
