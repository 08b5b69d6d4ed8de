#!/usr/bin/env python3
"""
串口管理器测试
==============

这个文件测试 panel_pilot_transfer.core.serial_manager 模块中的串口管理功能。

由于串口测试涉及硬件设备，我们使用mock对象来模拟串口行为。
"""

import errno

import pytest
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch
import serial

# 添加项目根目录到Python路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from panel_pilot_transfer.core.serial_manager import SerialManager
from panel_pilot_transfer.core.exceptions import (
    DeviceUnavailableError,
    NotConnectedError,
    NotSupportedError,
    PermissionDeniedError,
    TransportIOError,
)
from panel_pilot_transfer.config.settings import SerialConfig


def make_mock_port():
    """创建一个已打开的串口mock"""
    port = MagicMock()
    port.is_open = True
    port.in_waiting = 0
    port.write.side_effect = lambda data: len(data)
    return port


class TestSerialManagerOpen:
    """
    测试SerialManager的打开与关闭

    打开失败时根据原因抛出不同的异常
    """

    def test_init(self):
        """验证构造函数正确设置配置和初始状态"""
        config = SerialConfig(port="COM1")
        manager = SerialManager(config)

        assert manager.config == config
        assert manager.port is None
        assert manager.is_open is False

    @patch("serial.serial_for_url")
    def test_open_success(self, mock_factory):
        """成功打开串口，参数来自配置"""
        mock_factory.return_value = make_mock_port()

        config = SerialConfig(port="COM1")
        manager = SerialManager(config)
        manager.open()

        assert manager.is_open is True
        mock_factory.assert_called_once_with(**config.to_serial_kwargs())
        assert mock_factory.call_args.kwargs["baudrate"] == 9600

    @patch("serial.serial_for_url")
    def test_open_already_open(self, mock_factory):
        """重复打开不会重新创建串口对象"""
        mock_factory.return_value = make_mock_port()
        manager = SerialManager(SerialConfig(port="COM1"))

        manager.open()
        manager.open()

        assert mock_factory.call_count == 1

    @pytest.mark.parametrize(
        "error, expected",
        [
            (serial.SerialException(errno.ENOENT, "could not open port"), DeviceUnavailableError),
            (serial.SerialException(errno.EBUSY, "device busy"), DeviceUnavailableError),
            (serial.SerialException(errno.EACCES, "permission denied"), PermissionDeniedError),
            (PermissionError(errno.EPERM, "not permitted"), PermissionDeniedError),
            (
                serial.SerialException("could not open port 'COM9': PermissionError(13, 'Access is denied.')"),
                PermissionDeniedError,
            ),
            (ValueError("invalid URL, protocol 'foo' not known"), NotSupportedError),
        ],
    )
    @patch("serial.serial_for_url")
    def test_open_failure_classification(self, mock_factory, error, expected):
        """打开失败时按原因抛出对应异常，且不保留串口对象"""
        mock_factory.side_effect = error
        manager = SerialManager(SerialConfig(port="COM1"))

        with pytest.raises(expected):
            manager.open()

        assert manager.port is None
        assert manager.is_open is False

    def test_close_when_not_open(self):
        """关闭未打开的串口不抛出异常"""
        manager = SerialManager(SerialConfig(port="COM1"))
        manager.close()
        assert manager.port is None

    @patch("serial.serial_for_url")
    def test_close_swallows_errors(self, mock_factory):
        """关闭时出错也会清理内部状态，且可重复关闭"""
        port = make_mock_port()
        port.close.side_effect = serial.SerialException("device vanished")
        mock_factory.return_value = port

        manager = SerialManager(SerialConfig(port="COM1"))
        manager.open()
        manager.close()
        manager.close()

        port.close.assert_called_once()
        assert manager.port is None


class TestSerialManagerIO:
    """测试SerialManager的读写功能"""

    @patch("serial.serial_for_url")
    def test_write_flushes(self, mock_factory):
        """写入后立即flush"""
        port = make_mock_port()
        mock_factory.return_value = port

        with SerialManager(SerialConfig(port="COM1")) as manager:
            manager.write(b"W")

        port.write.assert_called_once_with(b"W")
        port.flush.assert_called_once()

    def test_write_when_closed(self):
        """未打开时写入抛出NotConnectedError"""
        manager = SerialManager(SerialConfig(port="COM1"))
        with pytest.raises(NotConnectedError):
            manager.write(b"W")

    @patch("serial.serial_for_url")
    def test_write_failure(self, mock_factory):
        """写入失败抛出TransportIOError"""
        port = make_mock_port()
        port.write.side_effect = serial.SerialTimeoutException("write timeout")
        mock_factory.return_value = port

        with SerialManager(SerialConfig(port="COM1")) as manager:
            with pytest.raises(TransportIOError):
                manager.write(b"W")

    @patch("serial.serial_for_url")
    def test_partial_write(self, mock_factory):
        """写入不完整抛出TransportIOError"""
        port = make_mock_port()
        port.write.side_effect = lambda data: len(data) - 1
        mock_factory.return_value = port

        with SerialManager(SerialConfig(port="COM1")) as manager:
            with pytest.raises(TransportIOError, match="写入不完整"):
                manager.write(b"abc")

    @patch("serial.serial_for_url")
    def test_read_uses_in_waiting(self, mock_factory):
        """有缓冲数据时一次读出，最多size字节"""
        port = make_mock_port()
        pending = bytearray(b"SGD\r\n")

        def fake_read(n):
            chunk = bytes(pending[:n])
            del pending[:n]
            port.in_waiting = len(pending)
            return chunk

        port.in_waiting = 5
        port.read.side_effect = fake_read
        mock_factory.return_value = port

        with SerialManager(SerialConfig(port="COM1")) as manager:
            assert manager.read(1024) == b"SGD\r\n"
            port.read.assert_called_once_with(5)

            manager.read(1024)
            port.read.assert_called_with(1)

    @patch("serial.serial_for_url")
    def test_read_drains_batch_after_first_byte(self, mock_factory):
        """阻塞读到首字节后，同一批到达的数据在一次读取中返回"""
        port = make_mock_port()
        pending = bytearray(b"\x15\x15")

        def fake_read(n):
            chunk = bytes(pending[:n])
            del pending[:n]
            port.in_waiting = len(pending)
            return chunk

        port.in_waiting = 0
        port.read.side_effect = fake_read
        mock_factory.return_value = port

        with SerialManager(SerialConfig(port="COM1")) as manager:
            assert manager.read(1024) == b"\x15\x15"
            assert port.read.call_count == 2

    @patch("serial.serial_for_url")
    def test_read_failure(self, mock_factory):
        """读取失败抛出TransportIOError"""
        port = make_mock_port()
        port.read.side_effect = serial.SerialException("device reports readiness to read but returned no data")
        mock_factory.return_value = port

        with SerialManager(SerialConfig(port="COM1")) as manager:
            with pytest.raises(TransportIOError):
                manager.read(1)

    def test_read_when_closed(self):
        manager = SerialManager(SerialConfig(port="COM1"))
        with pytest.raises(NotConnectedError):
            manager.read(1)


class TestListPorts:
    """测试串口列表"""

    @patch("serial.tools.list_ports.comports")
    def test_list_available_ports(self, mock_comports):
        """返回排序后的串口信息"""
        port_b = MagicMock(device="/dev/ttyUSB1", description="CP2102", hwid="USB VID:PID=10C4:EA60")
        port_a = MagicMock(device="/dev/ttyUSB0", description=None, hwid=None)
        mock_comports.return_value = [port_b, port_a]

        ports = SerialManager.list_available_ports()

        assert [p["device"] for p in ports] == ["/dev/ttyUSB0", "/dev/ttyUSB1"]
        assert ports[0]["description"] == "未知设备"
        assert ports[1]["hwid"] == "USB VID:PID=10C4:EA60"

    @patch("serial.tools.list_ports.comports", return_value=[])
    def test_print_no_ports(self, mock_comports, capsys):
        SerialManager.print_available_ports()
        assert "没有找到可用的串口" in capsys.readouterr().out
