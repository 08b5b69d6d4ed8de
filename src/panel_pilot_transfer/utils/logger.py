"""
日志记录模块
============

提供统一的日志记录功能，支持彩色输出和调用位置追踪。
"""

import datetime
import logging
import sys
from typing import Dict, Optional
from pathlib import Path

DEFAULT_LOGGER_NAME = "panel_pilot_transfer"


class ColoredFormatter(logging.Formatter):
    """彩色日志格式化器"""

    # ANSI颜色代码
    COLORS = {
        'DEBUG': '\033[36m',    # 青色
        'INFO': '\033[0m',      # 默认色
        'WARNING': '\033[33m',  # 黄色
        'ERROR': '\033[31m',    # 红色
        'CRITICAL': '\033[35m', # 紫色
        'RESET': '\033[0m'      # 重置
    }

    def format(self, record):
        """格式化日志记录，附带毫秒时间戳和调用位置"""
        # 使用 LogRecord 自带的位置信息，读线程中的日志同样准确
        caller = f"{Path(record.pathname).name}.{record.funcName}():{record.lineno}"

        now = datetime.datetime.fromtimestamp(record.created)
        milliseconds = now.microsecond // 1000
        timestamp = now.strftime(f"%Y-%m-%d %H:%M:%S.{milliseconds:03d}")

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        message = f"{color}[{timestamp}] {record.getMessage()} [{caller}]{reset}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


# 全局日志器字典
_loggers: Dict[str, logging.Logger] = {}
_level = logging.INFO
_log_file: Optional[str] = None


def setup_logger(
    name: str = DEFAULT_LOGGER_NAME,
    level: Optional[int] = None,
    log_file: Optional[str] = None,
    console_output: bool = True
) -> logging.Logger:
    """
    设置日志器

    Args:
        name: 日志器名称
        level: 日志级别，None表示使用当前全局级别
        log_file: 日志文件路径，None表示使用当前全局设置
        console_output: 是否输出到控制台

    Returns:
        配置好的日志器
    """
    logger = logging.getLogger(name)
    logger.setLevel(_level if level is None else level)

    # 清除已有的处理器
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter())
        logger.addHandler(console_handler)

    log_file = log_file or _log_file
    if log_file:
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(threadName)s - %(message)s'
        ))
        logger.addHandler(file_handler)

    # 防止重复输出
    logger.propagate = False

    return logger


def get_logger(name: str = DEFAULT_LOGGER_NAME) -> logging.Logger:
    """
    获取日志器实例

    Args:
        name: 日志器名称

    Returns:
        日志器实例
    """
    if name not in _loggers:
        _loggers[name] = setup_logger(name)
    return _loggers[name]


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    调整全局日志级别和日志文件，并应用到所有已创建的日志器

    Args:
        level: 日志级别
        log_file: 日志文件路径，None表示不写入文件
    """
    global _level, _log_file
    _level = level
    _log_file = log_file
    for name in list(_loggers):
        _loggers[name] = setup_logger(name, level=level, log_file=log_file)
