"""
读数解析模块
============

解析设备对 'x' 命令的响应行，例如::

    Rdg1: ADC = -19428 Digi = 0.00 V
"""

import re
from dataclasses import dataclass
from typing import Optional

from ..config.constants import VOLTAGE_TO_MILLIAMPS

_VOLTAGE_RE = re.compile(r"Digi\s*=\s*(-?\d+\.?\d*)\s*V")
_ADC_RE = re.compile(r"ADC\s*=\s*(-?\d+)")
_CHANNEL_RE = re.compile(r"(Rdg\d+)")


def parse_voltage(line: str) -> Optional[float]:
    """提取电压值，无法解析时返回None"""
    match = _VOLTAGE_RE.search(line)
    return float(match.group(1)) if match else None


def parse_adc(line: str) -> Optional[int]:
    """提取ADC原始值，无法解析时返回None"""
    match = _ADC_RE.search(line)
    return int(match.group(1)) if match else None


def format_voltage(voltage: float) -> str:
    """
    格式化为配置文件使用的电压字符串（XX.XX，不带符号）

    Examples:
        >>> format_voltage(5)
        '05.00'
        >>> format_voltage(-1.5)
        '01.50'
    """
    return f"{abs(voltage):05.2f}"


def voltage_to_milliamps(voltage: float) -> float:
    """4-20mA 传感器：电压换算为电流(mA)"""
    return voltage * VOLTAGE_TO_MILLIAMPS


@dataclass(frozen=True)
class VoltageReading:
    """单通道读数"""

    channel: str
    raw_line: str
    adc: Optional[int]
    voltage: Optional[float]

    @property
    def milliamps(self) -> Optional[float]:
        return None if self.voltage is None else voltage_to_milliamps(self.voltage)

    def __str__(self) -> str:
        if self.voltage is None:
            return f"{self.channel}: {self.raw_line.strip()}"
        return f"{self.channel}: {self.voltage:.2f} V ({self.milliamps:.2f} mA)"


@dataclass(frozen=True)
class DualReading:
    """双通道读数"""

    rdg1: VoltageReading
    rdg2: VoltageReading


def parse_reading(line: str, channel: Optional[str] = None) -> VoltageReading:
    """
    解析一行读数

    Args:
        line: 设备输出的原始行
        channel: 通道名，None 时从行内容中识别
    """
    if channel is None:
        match = _CHANNEL_RE.search(line)
        channel = match.group(1) if match else "?"
    return VoltageReading(
        channel=channel,
        raw_line=line,
        adc=parse_adc(line),
        voltage=parse_voltage(line),
    )
