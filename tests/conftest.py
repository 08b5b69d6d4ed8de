"""
公共测试夹具
"""

from unittest.mock import patch

import pytest

from panel_pilot_transfer.config.settings import SerialConfig
from panel_pilot_transfer.core.transport import SerialTransport

from tests.fakes import DeviceSimulator, FakeSerialPort


@pytest.fixture
def simulator():
    """默认行为的设备模拟器"""
    return DeviceSimulator()


@pytest.fixture
def fake_port(simulator):
    """接入设备模拟器的串口替身"""
    port = FakeSerialPort(responder=simulator)
    yield port
    port.close()


@pytest.fixture
def patched_serial(fake_port):
    """让 serial.serial_for_url 返回串口替身"""
    with patch("serial.serial_for_url", return_value=fake_port) as mock_factory:
        yield mock_factory


@pytest.fixture
def transport(patched_serial):
    """已打开的 SerialTransport"""
    t = SerialTransport(SerialConfig(port="loop://"))
    t.open()
    yield t
    t.close()
