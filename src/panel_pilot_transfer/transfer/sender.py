"""
XMODEM 发送模块
===============

实现 XMODEM（128字节数据块、累加校验和）发送端状态机：

    AWAIT_INITIAL_NAK -> SENDING_PACKET(n) -> AWAIT_ACK(n) -> ... -> SEND_EOT
    -> AWAIT_EOT_ACK -> DONE

异常终止状态为 CANCELLED（接收端发送CAN）和 FAILED（未就绪或重试超限）。
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from ..config.constants import XModemControl
from ..config.settings import XModemConfig
from ..core.exceptions import (
    ReceiverNotReadyError,
    TooManyRetriesError,
    TransferCancelledError,
    TransferError,
    TransportTimeoutError,
)
from ..core.packet import XModemPacket, build_packets
from ..core.transport import SerialTransport
from ..utils.logger import get_logger

logger = get_logger(__name__)

ProgressCallback = Callable[[float], None]


class XModemState(Enum):
    """发送端状态"""

    AWAIT_INITIAL_NAK = "await_initial_nak"
    SENDING_PACKET = "sending_packet"
    AWAIT_ACK = "await_ack"
    SEND_EOT = "send_eot"
    AWAIT_EOT_ACK = "await_eot_ack"
    DONE = "done"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class TransferResult:
    """一次成功传输的统计信息"""

    total_packets: int
    total_bytes: int
    retries: int
    eot_acknowledged: bool
    elapsed: float


@dataclass
class _Session:
    """单次传输的运行状态，传输结束后丢弃"""

    packets: List[XModemPacket]
    on_progress: Optional[ProgressCallback]
    state: XModemState = XModemState.AWAIT_INITIAL_NAK
    cursor: int = 0
    retries: int = 0
    total_retries: int = 0

    @property
    def total(self) -> int:
        return len(self.packets)

    def enter(self, state: XModemState) -> None:
        self.state = state
        logger.debug(f"状态 -> {state.value}")


class XModemSender:
    """XMODEM 发送器，传输期间借用 SerialTransport"""

    def __init__(self, transport: SerialTransport, config: Optional[XModemConfig] = None):
        """
        初始化发送器

        Args:
            transport: 已打开的串口传输
            config: XMODEM 配置（可选）
        """
        self.transport = transport
        self.config = config or XModemConfig()

    def send(self, data: bytes, on_progress: Optional[ProgressCallback] = None) -> TransferResult:
        """
        发送数据

        Args:
            data: 已编码的数据，末尾不足一个数据块时用 SUB 填充
            on_progress: 进度回调，参数为已确认数据块占比(0-100)

        Returns:
            传输统计

        Raises:
            ValueError: 数据为空
            ReceiverNotReadyError: 未在限定时间内收到首个NAK
            TooManyRetriesError: 某个数据块重试次数超限
            TransferCancelledError: 接收端取消
        """
        if not data:
            raise ValueError("没有要发送的数据")

        session = _Session(packets=list(build_packets(data)), on_progress=on_progress)
        start_time = time.time()
        logger.info(f"开始XMODEM传输: {len(data)} 字节, {session.total} 个数据块")

        try:
            self._await_initial_nak(session)
            while session.cursor < session.total:
                self._send_packet(session)
                self._await_ack(session)
            eot_acknowledged = self._send_eot(session)
        except TransferCancelledError:
            session.enter(XModemState.CANCELLED)
            logger.error(f"接收端取消传输（数据块 #{session.cursor + 1}）")
            raise
        except TransferError as e:
            session.enter(XModemState.FAILED)
            logger.error(f"XMODEM传输失败: {e}")
            raise

        session.enter(XModemState.DONE)
        elapsed = time.time() - start_time
        logger.info(f"XMODEM传输完成！用时: {elapsed:.2f}秒, 重试 {session.total_retries} 次")
        return TransferResult(
            total_packets=session.total,
            total_bytes=len(data),
            retries=session.total_retries,
            eot_acknowledged=eot_acknowledged,
            elapsed=elapsed,
        )

    def _await_initial_nak(self, session: _Session) -> None:
        """等待接收端发出NAK，表示已就绪并使用校验和模式"""
        session.enter(XModemState.AWAIT_INITIAL_NAK)
        self.transport.clear_buffer()
        timeout = self.config.initial_nak_timeout
        try:
            self.transport.wait_for_byte([XModemControl.NAK], timeout)
        except TransportTimeoutError as e:
            raise ReceiverNotReadyError(f"接收端未就绪（{timeout:.0f}秒内未收到NAK）") from e
        logger.debug("收到接收端NAK，开始发送数据块")

    def _send_packet(self, session: _Session) -> None:
        session.enter(XModemState.SENDING_PACKET)
        packet = session.packets[session.cursor]
        # 发送前丢弃迟到的重复应答，只接受针对本次发送的应答
        self.transport.clear_buffer()
        self.transport.send_raw(packet.to_bytes())

    def _await_ack(self, session: _Session) -> None:
        """等待当前数据块的确认；NAK 和超时都计为一次重试"""
        session.enter(XModemState.AWAIT_ACK)
        number = session.cursor + 1
        try:
            response = self.transport.wait_for_byte(
                (XModemControl.ACK, XModemControl.NAK, XModemControl.CAN),
                self.config.ack_timeout,
            )
        except TransportTimeoutError:
            response = None

        if response == XModemControl.ACK:
            session.cursor += 1
            session.retries = 0
            percent = session.cursor / session.total * 100
            logger.debug(f"数据块 #{number} 已确认 ({percent:.1f}%)")
            if session.on_progress:
                session.on_progress(percent)
            return

        if response == XModemControl.CAN:
            raise TransferCancelledError("传输被接收端取消")

        session.retries += 1
        session.total_retries += 1
        reason = "收到NAK" if response == XModemControl.NAK else "等待确认超时"
        if session.retries > self.config.max_retries:
            raise TooManyRetriesError(number, session.retries)
        logger.warning(
            f"数据块 #{number} {reason}，重传 ({session.retries}/{self.config.max_retries})"
        )

    def _send_eot(self, session: _Session) -> bool:
        """
        发送EOT并等待确认

        Returns:
            接收端是否确认了EOT；部分接收端不确认EOT，这不算失败
        """
        session.enter(XModemState.SEND_EOT)
        self.transport.clear_buffer()
        self.transport.send_raw(bytes([XModemControl.EOT]))

        session.enter(XModemState.AWAIT_EOT_ACK)
        try:
            self.transport.wait_for_byte([XModemControl.ACK], self.config.eot_ack_timeout)
            return True
        except TransportTimeoutError:
            logger.warning("未收到EOT确认，视为传输完成")
            return False
