#!/usr/bin/env python3
"""
读数解析测试
"""

import pytest
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from panel_pilot_transfer.transfer.readings import (
    DualReading,
    format_voltage,
    parse_adc,
    parse_reading,
    parse_voltage,
    voltage_to_milliamps,
)


class TestParsing:
    """测试单行解析"""

    @pytest.mark.parametrize(
        "line, expected",
        [
            ("Rdg1: ADC = -19428 Digi = 0.00 V", 0.0),
            ("Rdg2: ADC = 12000 Digi = 1.25 V", 1.25),
            ("Rdg2: ADC=3 Digi=-0.5V", -0.5),
            ("Rdg1: ADC = 7 Digi = 10 V", 10.0),
            ("Rdg1: overrange", None),
        ],
    )
    def test_parse_voltage(self, line, expected):
        assert parse_voltage(line) == expected

    def test_parse_adc(self):
        assert parse_adc("Rdg1: ADC = -19428 Digi = 0.00 V") == -19428
        assert parse_adc("Rdg1: Digi = 0.00 V") is None

    def test_parse_reading_detects_channel(self):
        reading = parse_reading("garbageRdg2: ADC = 1 Digi = 0.50 V")
        assert reading.channel == "Rdg2"
        assert reading.adc == 1
        assert reading.voltage == 0.5

    def test_parse_reading_explicit_channel(self):
        reading = parse_reading("ADC = 1", channel="Rdg1")
        assert reading.channel == "Rdg1"
        assert reading.voltage is None
        assert reading.milliamps is None


class TestFormatting:
    """测试格式化与换算"""

    @pytest.mark.parametrize(
        "voltage, expected",
        [(0, "00.00"), (5, "05.00"), (1.25, "01.25"), (12.345, "12.35"), (-1.5, "01.50")],
    )
    def test_format_voltage(self, voltage, expected):
        assert format_voltage(voltage) == expected

    def test_voltage_to_milliamps(self):
        assert voltage_to_milliamps(2.0) == 20.0
        assert voltage_to_milliamps(0.4) == pytest.approx(4.0)

    def test_reading_str(self):
        reading = parse_reading("Rdg1: ADC = 5 Digi = 1.25 V")
        assert str(reading) == "Rdg1: 1.25 V (12.50 mA)"

    def test_unparsed_reading_str_shows_raw_line(self):
        reading = parse_reading("Rdg1: overrange\r", channel="Rdg1")
        assert str(reading) == "Rdg1: Rdg1: overrange"

    def test_dual_reading_is_immutable(self):
        dual = DualReading(rdg1=parse_reading("Rdg1: Digi = 1 V"), rdg2=parse_reading("Rdg2: Digi = 2 V"))
        with pytest.raises(AttributeError):
            dual.rdg1 = dual.rdg2
