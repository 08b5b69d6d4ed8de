"""
测试替身
========

FakeSerialPort 模拟 pyserial 串口对象；DeviceSimulator 模拟 Panel Pilot SGD
控制器的命令响应以及 XMODEM 接收端。
"""

import threading
from typing import Callable, List, Optional

import serial

from panel_pilot_transfer.config.constants import XModemControl, XMODEM_PACKET_SIZE
from panel_pilot_transfer.core.packet import XModemPacket

Responder = Callable[[bytes, "FakeSerialPort"], None]


class FakeSerialPort:
    """极简串口模拟：写入交给 responder 处理，读取从接收队列取数据"""

    def __init__(self, responder: Optional[Responder] = None, timeout: float = 0.02):
        self.responder = responder
        self.timeout = timeout
        self.written: List[bytes] = []
        self.is_open = True
        self.fail_reads = False
        self.close_calls = 0
        self._rx = bytearray()
        self._cond = threading.Condition()
        self._timers: List[threading.Timer] = []

    # pyserial API
    @property
    def in_waiting(self) -> int:
        with self._cond:
            return len(self._rx)

    def write(self, data: bytes) -> int:
        if not self.is_open:
            raise serial.SerialException("port closed")
        self.written.append(bytes(data))
        if self.responder:
            self.responder(bytes(data), self)
        return len(data)

    def flush(self) -> None:
        pass

    def read(self, size: int = 1) -> bytes:
        with self._cond:
            if self.fail_reads:
                raise serial.SerialException("device disconnected")
            if not self._rx:
                self._cond.wait(self.timeout)
            if self.fail_reads:
                raise serial.SerialException("device disconnected")
            chunk = bytes(self._rx[:size])
            del self._rx[:size]
            return chunk

    def close(self) -> None:
        self.close_calls += 1
        self.is_open = False
        for timer in self._timers:
            timer.cancel()
        with self._cond:
            self._cond.notify_all()

    # 测试辅助
    def feed(self, data: bytes) -> None:
        """模拟设备输出数据"""
        with self._cond:
            self._rx += data
            self._cond.notify_all()

    def feed_later(self, data: bytes, delay: float) -> threading.Timer:
        """延时输出数据"""
        timer = threading.Timer(delay, self.feed, args=(data,))
        timer.daemon = True
        self._timers.append(timer)
        timer.start()
        return timer

    def disconnect(self) -> None:
        """模拟设备被拔出"""
        with self._cond:
            self.fail_reads = True
            self._cond.notify_all()

    @property
    def all_written(self) -> bytes:
        return b"".join(self.written)


class DeviceSimulator:
    """
    模拟 SGD 控制器

    - 'W' -> 输出含 "SGD" 的版本信息
    - 'x' -> 输出 Rdg1、Rdg2 两行读数
    - 's' -> 延时输出 'C' 邀请，之后周期性发送 NAK 直到收到第一个数据块
    - 数据块 -> 按 ack_script 回应（默认全部ACK）
    - EOT -> 若 ack_eot 为真则回应ACK
    - 'm' -> 记录提交
    """

    def __init__(
        self,
        ack_script: Optional[List[int]] = None,
        ack_eot: bool = True,
        verified: bool = True,
        banner: bool = False,
        nak_interval: float = 0.1,
    ):
        self.ack_script = list(ack_script or [])
        self.ack_eot = ack_eot
        self.verified = verified
        self.banner = banner
        self.nak_interval = nak_interval
        self.packets: List[XModemPacket] = []
        self.packet_writes = 0
        self.eot_received = False
        self.committed = False
        self._uploading = False
        self._nak_timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def __call__(self, data: bytes, port: FakeSerialPort) -> None:
        if self._uploading and len(data) == XMODEM_PACKET_SIZE:
            self._on_packet(data, port)
        elif data == bytes([XModemControl.EOT]):
            self.eot_received = True
            self._uploading = False
            if self.ack_eot:
                port.feed(bytes([XModemControl.ACK]))
        elif data == b"W":
            if self.verified:
                port.feed(b"Panel Pilot SGD v2.15\r\n")
            else:
                port.feed(b"?\r\n")
        elif data == b"x":
            port.feed(b"Rdg1: ADC = -19428 Digi = 0.00 V\r\n")
            port.feed(b"Rdg2: ADC = 12000 Digi = 1.25 V\r\n")
        elif data == b"s":
            # 真实设备有处理延迟，'C' 在发送端第二次清空缓冲区之后才到达
            if self.banner:
                port.feed_later(b"XMODEM receive ready\r\n", 0.05)
            port.feed_later(b"C", 0.1)
            self.start_receiver(port, delay=0.2)
        elif data == b"m":
            self.committed = True

    def start_receiver(self, port: FakeSerialPort, delay: float = 0.05) -> None:
        """进入接收状态，延时后开始周期性发送NAK"""
        self._uploading = True
        self._schedule_nak(port, delay)

    def _schedule_nak(self, port: FakeSerialPort, delay: float) -> None:
        with self._lock:
            self._nak_timer = threading.Timer(delay, self._send_nak, args=(port,))
            self._nak_timer.daemon = True
            self._nak_timer.start()

    def _send_nak(self, port: FakeSerialPort) -> None:
        with self._lock:
            if self.packet_writes or not port.is_open:
                return
            port.feed(bytes([XModemControl.NAK]))
        self._schedule_nak(port, self.nak_interval)

    def _on_packet(self, data: bytes, port: FakeSerialPort) -> None:
        with self._lock:
            self.packet_writes += 1
            if self._nak_timer:
                self._nak_timer.cancel()

        response = self.ack_script.pop(0) if self.ack_script else XModemControl.ACK
        if response == XModemControl.ACK:
            packet = XModemPacket.from_bytes(data)
            if not self.packets or self.packets[-1].to_bytes() != data:
                self.packets.append(packet)
        if response is not None:
            port.feed(bytes([response]))

    @property
    def received_payload(self) -> bytes:
        return b"".join(p.payload for p in self.packets)
