"""
校验算法模块
============

提供 XMODEM 数据块的校验和算法。
"""


def calculate_checksum(data: bytes) -> int:
    """
    计算 XMODEM 数据块的校验和

    采用简单的累加校验算法，将所有字节相加后取低8位。

    Args:
        data: 需要计算校验和的字节数据

    Returns:
        校验和值，8位无符号整数

    Raises:
        TypeError: 当输入不是bytes类型时抛出

    Examples:
        >>> calculate_checksum(bytes(128))
        0
        >>> calculate_checksum(b'\\x01' * 128)
        128
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("输入数据必须是bytes类型")

    return sum(data) & 0xFF
