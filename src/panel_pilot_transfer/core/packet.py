"""
XMODEM 数据块处理模块
====================

负责 XMODEM 数据块的填充、分块、封装和解析。

数据块格式：| SOH(1B) | 序号(1B) | 反序号(1B) | 数据(128B) | 校验和(1B) |
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional

from ..config.constants import XModemControl, XMODEM_BLOCK_SIZE, XMODEM_PACKET_SIZE
from .checksum import calculate_checksum


def pad_payload(data: bytes, block_size: int = XMODEM_BLOCK_SIZE) -> bytes:
    """
    用 SUB(0x1A) 将数据填充到数据块大小的整数倍

    Args:
        data: 原始数据
        block_size: 数据块大小

    Returns:
        填充后的数据，长度为 block_size 的整数倍
    """
    remainder = len(data) % block_size
    if remainder == 0:
        return bytes(data)
    return bytes(data) + bytes([XModemControl.SUB]) * (block_size - remainder)


def split_blocks(data: bytes, block_size: int = XMODEM_BLOCK_SIZE) -> List[bytes]:
    """
    将已填充的数据切分为定长数据块

    Raises:
        ValueError: 数据长度不是 block_size 的整数倍
    """
    if len(data) % block_size:
        raise ValueError(f"数据长度 {len(data)} 不是 {block_size} 的整数倍")
    return [data[i : i + block_size] for i in range(0, len(data), block_size)]


def strip_padding(data: bytes, length: int) -> bytes:
    """
    去掉填充，还原原始数据

    数据本身可能以 0x1A 结尾，因此按原始长度截取而不是去掉末尾的 SUB。

    Args:
        data: 填充后的数据
        length: 原始数据长度
    """
    if not 0 <= length <= len(data):
        raise ValueError(f"原始长度 {length} 超出数据范围 0..{len(data)}")
    return data[:length]


@dataclass(frozen=True)
class XModemPacket:
    """XMODEM 数据块，构建后不可修改"""

    number: int  # 数据块编号，从1开始，不回绕
    payload: bytes  # 128字节数据

    def __post_init__(self):
        if self.number < 0:
            raise ValueError("数据块编号不能为负数")
        if len(self.payload) != XMODEM_BLOCK_SIZE:
            raise ValueError(
                f"数据块长度必须为 {XMODEM_BLOCK_SIZE}，实际为 {len(self.payload)}"
            )

    @property
    def sequence(self) -> int:
        """线路上的序号（模256回绕）"""
        return self.number & 0xFF

    @property
    def complement(self) -> int:
        """序号的反码"""
        return (0xFF - self.sequence) & 0xFF

    @property
    def checksum(self) -> int:
        return calculate_checksum(self.payload)

    def to_bytes(self) -> bytes:
        """封装为132字节的线路格式"""
        return (
            bytes([XModemControl.SOH, self.sequence, self.complement])
            + self.payload
            + bytes([self.checksum])
        )

    @classmethod
    def from_bytes(cls, frame: bytes, number: Optional[int] = None) -> "XModemPacket":
        """
        解析132字节的数据块

        Args:
            frame: 线路数据
            number: 数据块编号，None 时取线路序号

        Raises:
            ValueError: 长度、帧头、反序号或校验和错误
        """
        if len(frame) != XMODEM_PACKET_SIZE:
            raise ValueError(f"数据块长度错误: {len(frame)}")
        if frame[0] != XModemControl.SOH:
            raise ValueError(f"帧头错误: {hex(frame[0])}")
        seq, comp = frame[1], frame[2]
        if (seq + comp) & 0xFF != 0xFF:
            raise ValueError(f"序号校验失败: {seq} / {comp}")
        payload = bytes(frame[3 : 3 + XMODEM_BLOCK_SIZE])
        received = frame[-1]
        calculated = calculate_checksum(payload)
        if received != calculated:
            raise ValueError(f"校验和错误: 接收={hex(received)}, 计算={hex(calculated)}")
        if number is not None and number & 0xFF != seq:
            raise ValueError(f"序号不匹配: {seq} != {number & 0xFF}")
        return cls(number if number is not None else seq, payload)


def build_packets(data: bytes) -> Iterator[XModemPacket]:
    """将数据填充、分块并按顺序生成数据块，编号从1开始"""
    for index, block in enumerate(split_blocks(pad_payload(data)), start=1):
        yield XModemPacket(index, block)
