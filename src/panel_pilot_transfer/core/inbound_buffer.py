"""
接收缓冲区模块
==============

读线程持续向缓冲区追加数据，业务线程通过模式匹配等待设备响应。

匹配成功时丢弃缓冲区中匹配位置及其之前的内容，剩余数据留给下一个等待者，
因此等待调用的顺序必须与设备实际输出的顺序一致。
"""

import threading
import time
from typing import Callable, Iterable, Optional, Tuple

from .exceptions import TransportTimeoutError
from ..utils.logger import get_logger

logger = get_logger(__name__)

# 匹配函数：输入当前缓冲区，返回 (消费长度, 结果)，未匹配返回 None
Matcher = Callable[[bytes], Optional[Tuple[int, object]]]

TEXT_ENCODING = "latin-1"  # 单字节编码，字符偏移与字节偏移一致


def decode_text(data: bytes) -> str:
    """将设备输出解码为文本"""
    return data.decode(TEXT_ENCODING)


def encode_text(text: str) -> bytes:
    """将文本编码为发送给设备的字节"""
    return text.encode(TEXT_ENCODING)


class InboundBuffer:
    """线程安全的接收缓冲区，所有修改都在同一把锁内完成"""

    def __init__(self):
        self._data = bytearray()
        self._cond = threading.Condition()
        self.total_received = 0

    def __len__(self) -> int:
        with self._cond:
            return len(self._data)

    def append(self, chunk: bytes) -> None:
        """追加数据并唤醒所有等待者"""
        if not chunk:
            return
        with self._cond:
            self._data += chunk
            self.total_received += len(chunk)
            self._cond.notify_all()

    def clear(self) -> None:
        """丢弃当前缓冲的全部数据"""
        with self._cond:
            if self._data:
                logger.debug(f"清空接收缓冲区: {bytes(self._data)!r}")
            self._data.clear()

    def snapshot(self) -> bytes:
        """返回缓冲区内容的拷贝，不消费数据"""
        with self._cond:
            return bytes(self._data)

    def wait(self, matcher: Matcher, timeout: float, description: str):
        """
        等待直到 matcher 在缓冲区中找到匹配

        扫描与消费在同一次加锁中完成，读线程的追加不会在两者之间丢失。

        Args:
            matcher: 匹配函数
            timeout: 超时时间(秒)
            description: 用于日志和异常信息的描述

        Returns:
            matcher 返回的结果

        Raises:
            TransportTimeoutError: 超时，缓冲区保持不变
        """
        deadline = time.monotonic() + timeout
        with self._cond:
            while True:
                found = matcher(bytes(self._data))
                if found is not None:
                    consumed, result = found
                    del self._data[:consumed]
                    return result

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    logger.debug(f"等待 {description!r} 超时，缓冲区: {bytes(self._data)!r}")
                    raise TransportTimeoutError(description, timeout)
                self._cond.wait(remaining)

    def wait_for(self, pattern: bytes, timeout: float) -> bytes:
        """
        等待子串出现

        Returns:
            缓冲区开头到匹配结束位置的内容（包含匹配）
        """
        if not pattern:
            raise ValueError("pattern不能为空")

        def _match(data: bytes):
            index = data.find(pattern)
            if index == -1:
                return None
            end = index + len(pattern)
            return end, data[:end]

        return self.wait(_match, timeout, decode_text(pattern))

    def wait_for_line(self, substring: bytes, timeout: float) -> bytes:
        """
        等待包含子串的完整行（以换行结束）

        末尾未结束的半行不参与匹配。

        Returns:
            匹配的行，不含换行符
        """

        def _match(data: bytes):
            start = 0
            while True:
                newline = data.find(b"\n", start)
                if newline == -1:
                    return None
                line = data[start:newline]
                if substring in line:
                    return newline + 1, line
                start = newline + 1

        return self.wait(_match, timeout, decode_text(substring))

    def wait_for_byte(self, candidates: Iterable[int], timeout: float) -> int:
        """
        等待候选字节中的任意一个出现

        匹配成功后清空整个缓冲区：匹配字节之后残留的控制字节
        不能被当作下一次发送的应答。

        Returns:
            匹配到的字节值
        """
        wanted = frozenset(int(b) for b in candidates)

        def _match(data: bytes):
            for value in data:
                if value in wanted:
                    return len(data), value
            return None

        description = "/".join(f"0x{b:02X}" for b in sorted(wanted))
        return self.wait(_match, timeout, description)
