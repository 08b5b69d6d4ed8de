"""
进度显示模块
============

提供上传进度的文本进度条。
"""

import time
from typing import Optional


class ProgressBar:
    """简化版进度条显示器 (纯文本，无ANSI颜色)"""

    def __init__(
        self,
        total_bytes: Optional[int] = None,
        width: int = 40,
        refresh_interval: float = 0.2,
    ):
        """
        初始化进度条

        Args:
            total_bytes: 传输总字节数，提供时显示平均速率
            width: 进度条宽度（字符数）
            refresh_interval: 最小刷新间隔(秒)，减少重复绘制
        """
        self.total_bytes = total_bytes
        self.width = width
        self.refresh_interval = refresh_interval
        self.start_time = time.time()
        self.percent = 0.0
        self.last_display_length = 0  # 记录上次显示字符串的长度，用于清空行
        self._last_draw_ts = 0.0
        self._finished = False

    def update(self, percent: float) -> None:
        """
        更新进度

        Args:
            percent: 当前进度百分比(0-100)
        """
        self.percent = max(0.0, min(100.0, percent))

        now_ts = time.time()
        # 若未到刷新间隔且非完成状态，直接返回
        if self.percent < 100.0 and (now_ts - self._last_draw_ts) < self.refresh_interval:
            return
        self._last_draw_ts = now_ts
        self._draw(now_ts)

    def _draw(self, now_ts: float) -> None:
        filled_width = int((self.percent / 100) * self.width)
        bar = "█" * filled_width + "░" * (self.width - filled_width)

        display_str = f"Progress: [{self.percent:6.2f}%][{bar}]"

        elapsed = now_ts - self.start_time
        if self.total_bytes and elapsed > 0:
            rate = self.total_bytes * self.percent / 100 / elapsed
            display_str += f"[{rate:7.1f}B/s]"

        # 用空格填充，覆盖旧内容
        padding = " " * max(0, self.last_display_length - len(display_str))
        print("\r" + display_str + padding, end="", flush=True)
        self.last_display_length = len(display_str)

    def finish(self) -> None:
        """完成进度显示并换行"""
        if self._finished:
            return
        self._finished = True
        print(flush=True)
